import django_filters as filters

from .models import Booking


class BookingFilter(filters.FilterSet):
    status = filters.CharFilter(field_name="status", lookup_expr="iexact")
    vehicle = filters.NumberFilter(field_name="vehicle_id")
    user = filters.NumberFilter(field_name="user_id")
    start_after = filters.IsoDateTimeFilter(field_name="start_date", lookup_expr="gte")
    start_before = filters.IsoDateTimeFilter(field_name="start_date", lookup_expr="lte")
    end_after = filters.IsoDateTimeFilter(field_name="end_date", lookup_expr="gte")
    end_before = filters.IsoDateTimeFilter(field_name="end_date", lookup_expr="lte")

    class Meta:
        model = Booking
        fields = ["status", "vehicle", "user"]
