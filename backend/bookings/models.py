"""Database models for vehicle rental bookings."""

from __future__ import annotations

from django.conf import settings
from django.db import models
from django.db.models import F, Q
from django.utils import timezone

from vehicles.models import Vehicle


class Booking(models.Model):
    """One reservation of one vehicle by one user for a date range."""

    class Status(models.TextChoices):
        PENDING = "PENDING", "Pending"
        CONFIRMED = "CONFIRMED", "Confirmed"
        ACTIVE = "ACTIVE", "Active"
        COMPLETED = "COMPLETED", "Completed"
        CANCELLED = "CANCELLED", "Cancelled"

    reference = models.CharField(max_length=32, unique=True, editable=False)
    vehicle = models.ForeignKey(
        Vehicle,
        related_name="bookings",
        on_delete=models.PROTECT,
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        related_name="bookings",
        on_delete=models.CASCADE,
    )
    start_date = models.DateTimeField()
    end_date = models.DateTimeField(help_text="Return time, must be after start_date.")
    pickup_location = models.CharField(max_length=255, blank=True, default="")
    return_location = models.CharField(max_length=255, blank=True, default="")
    total_amount = models.DecimalField(max_digits=10, decimal_places=2)
    security_deposit = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True,
    )
    status = models.CharField(
        max_length=16,
        choices=Status.choices,
        default=Status.PENDING,
    )
    notes = models.TextField(blank=True, default="")
    cancelled_at = models.DateTimeField(null=True, blank=True)
    cancellation_reason = models.CharField(max_length=255, blank=True, default="")
    actual_return_date = models.DateTimeField(null=True, blank=True)
    late_fee = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    damage_charges = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    created_at = models.DateTimeField(default=timezone.now, editable=False)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(
                fields=["vehicle", "start_date", "end_date"], name="bookings_vehicle_range_idx"
            ),
            models.Index(fields=["user", "status"], name="bookings_user_status_idx"),
            models.Index(fields=["status", "start_date"], name="bookings_status_start_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(start_date__lt=F("end_date")),
                name="bookings_start_before_end",
            ),
            models.CheckConstraint(
                condition=Q(total_amount__gte=0),
                name="bookings_total_amount_non_negative",
            ),
        ]

    def __str__(self) -> str:
        """Return a human-readable representation."""
        return f"Booking {self.reference} for vehicle {self.vehicle_id} ({self.status})"

    @property
    def days(self) -> int:
        """Return the number of charged days (at least one)."""
        if not self.start_date or not self.end_date:
            return 0
        from .pricing import charged_days

        return charged_days(self.start_date, self.end_date)

    @property
    def settlement(self):
        """Late fee and damage charges recorded at completion, or None."""
        if self.status != self.Status.COMPLETED:
            return None
        from .pricing import compute_settlement

        return compute_settlement(self.total_amount, self.late_fee, self.damage_charges)
