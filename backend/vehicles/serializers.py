from rest_framework import serializers

from .models import Vehicle

# RENTED is only ever set by the booking engine.
OWNER_SETTABLE_STATUSES = {
    Vehicle.Status.AVAILABLE,
    Vehicle.Status.MAINTENANCE,
    Vehicle.Status.INACTIVE,
}


class VehicleSerializer(serializers.ModelSerializer):
    """Serializer for Vehicle that enforces ownership and status rules."""

    owner = serializers.PrimaryKeyRelatedField(read_only=True)
    owner_username = serializers.ReadOnlyField(source="owner.username")

    class Meta:
        model = Vehicle
        fields = [
            "id",
            "owner",
            "owner_username",
            "license_plate",
            "brand",
            "model",
            "year",
            "color",
            "vehicle_type",
            "fuel_type",
            "seat_count",
            "daily_rate",
            "status",
            "location",
            "description",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["owner", "created_at", "updated_at"]

    def validate_daily_rate(self, value):
        if value is None or value <= 0:
            raise serializers.ValidationError("Daily rate must be greater than 0.")
        return value

    def validate_license_plate(self, value: str) -> str:
        plate = " ".join((value or "").split()).upper()
        # The column is unique but case-sensitive.
        taken = Vehicle.objects.filter(license_plate__iexact=plate)
        if self.instance is not None:
            taken = taken.exclude(pk=self.instance.pk)
        if taken.exists():
            raise serializers.ValidationError("A vehicle with this license plate already exists.")
        return plate

    def validate_status(self, value):
        if value not in OWNER_SETTABLE_STATUSES:
            raise serializers.ValidationError("This status is managed by bookings.")
        if self.instance is not None and self.instance.status == Vehicle.Status.RENTED:
            raise serializers.ValidationError("A rented vehicle cannot change status.")
        return value

    def create(self, validated_data):
        request = self.context.get("request")
        validated_data["owner"] = request.user
        return super().create(validated_data)

    def update(self, instance, validated_data):
        validated_data.pop("owner", None)
        return super().update(instance, validated_data)
