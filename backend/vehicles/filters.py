import django_filters as filters

from .models import Vehicle


class VehicleFilter(filters.FilterSet):
    status = filters.CharFilter(field_name="status", lookup_expr="iexact")
    vehicle_type = filters.CharFilter(field_name="vehicle_type", lookup_expr="iexact")
    fuel_type = filters.CharFilter(field_name="fuel_type", lookup_expr="iexact")
    location = filters.CharFilter(field_name="location", lookup_expr="icontains")
    brand = filters.CharFilter(field_name="brand", lookup_expr="icontains")
    rate_min = filters.NumberFilter(field_name="daily_rate", lookup_expr="gte")
    rate_max = filters.NumberFilter(field_name="daily_rate", lookup_expr="lte")
    min_seats = filters.NumberFilter(field_name="seat_count", lookup_expr="gte")
    owner = filters.NumberFilter(field_name="owner_id")

    class Meta:
        model = Vehicle
        fields = ["status", "vehicle_type", "fuel_type", "owner"]
