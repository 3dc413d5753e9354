"""Serializers for booking-related API endpoints."""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from rest_framework import serializers

from vehicles.models import Vehicle

from .models import Booking


class BookingSerializer(serializers.ModelSerializer):
    """Read-only representation of a booking returned by every endpoint."""

    vehicle = serializers.PrimaryKeyRelatedField(read_only=True)
    user = serializers.PrimaryKeyRelatedField(read_only=True)
    vehicle_brand = serializers.ReadOnlyField(source="vehicle.brand")
    vehicle_model = serializers.ReadOnlyField(source="vehicle.model")
    license_plate = serializers.ReadOnlyField(source="vehicle.license_plate")
    user_full_name = serializers.SerializerMethodField()
    days = serializers.ReadOnlyField()
    settlement = serializers.SerializerMethodField()

    class Meta:
        model = Booking
        fields = (
            "id",
            "reference",
            "vehicle",
            "vehicle_brand",
            "vehicle_model",
            "license_plate",
            "user",
            "user_full_name",
            "start_date",
            "end_date",
            "days",
            "pickup_location",
            "return_location",
            "total_amount",
            "security_deposit",
            "status",
            "notes",
            "cancelled_at",
            "cancellation_reason",
            "actual_return_date",
            "late_fee",
            "damage_charges",
            "settlement",
            "created_at",
            "updated_at",
        )
        read_only_fields = fields

    def get_user_full_name(self, booking: Booking) -> str:
        user = getattr(booking, "user", None)
        if user is None:
            return ""
        return user.get_full_name() or user.username

    def get_settlement(self, booking: Booking) -> dict[str, str] | None:
        settlement = booking.settlement
        return settlement.as_dict() if settlement is not None else None


class BookingCreateSerializer(serializers.Serializer):
    """Validate the payload of a booking request before it reaches the engine."""

    vehicle = serializers.IntegerField(min_value=1)
    start_date = serializers.DateTimeField()
    end_date = serializers.DateTimeField()
    pickup_location = serializers.CharField(max_length=255)
    return_location = serializers.CharField(max_length=255)
    security_deposit = serializers.DecimalField(
        max_digits=10,
        decimal_places=2,
        required=False,
        allow_null=True,
        min_value=Decimal("0.01"),
    )
    notes = serializers.CharField(max_length=1000, allow_blank=True, default="")


class BookingUpdateSerializer(serializers.Serializer):
    pickup_location = serializers.CharField(max_length=255, required=False)
    return_location = serializers.CharField(max_length=255, required=False)
    notes = serializers.CharField(max_length=1000, required=False, allow_blank=True)

    def validate(self, attrs: dict[str, Any]) -> dict[str, Any]:
        if not attrs:
            raise serializers.ValidationError(
                {"non_field_errors": ["Provide at least one field to update."]}
            )
        return attrs


class BookingCancelSerializer(serializers.Serializer):
    reason = serializers.CharField(max_length=255)


class BookingCompleteSerializer(serializers.Serializer):
    late_fee = serializers.DecimalField(
        max_digits=10,
        decimal_places=2,
        min_value=Decimal("0"),
        default=Decimal("0"),
    )
    damage_charges = serializers.DecimalField(
        max_digits=10,
        decimal_places=2,
        min_value=Decimal("0"),
        default=Decimal("0"),
    )


class AvailabilityQuerySerializer(serializers.Serializer):
    """Query parameters of the availability lookup."""

    vehicle = serializers.PrimaryKeyRelatedField(queryset=Vehicle.objects.all())
    start_date = serializers.DateTimeField(required=False)
    end_date = serializers.DateTimeField(required=False)

    def validate(self, attrs: dict[str, Any]) -> dict[str, Any]:
        start_date = attrs.get("start_date")
        end_date = attrs.get("end_date")
        if bool(start_date) != bool(end_date):
            raise serializers.ValidationError(
                {"non_field_errors": ["Provide both start_date and end_date, or neither."]}
            )
        if start_date and end_date and start_date >= end_date:
            raise serializers.ValidationError({"end_date": ["End date must be after start date."]})
        return attrs
