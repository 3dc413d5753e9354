"""
Booking lifecycle operations.

Each operation runs in a single ``transaction.atomic()`` block against
row-locked copies of the booking (and vehicle), so a failed guard or a
database error leaves both rows exactly as they were. The instance a caller
holds is never mutated; the updated booking is returned instead.
"""

from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal
from typing import Optional

from django.db import IntegrityError, transaction
from django.utils import timezone

from core.references import generate_booking_reference
from vehicles.models import Vehicle

from .domain import (
    Actor,
    assert_can_activate,
    assert_can_cancel,
    assert_can_complete,
    assert_can_confirm,
    assert_can_update,
    assert_can_view,
    assert_is_admin,
    assert_is_owner,
    ensure_no_conflict,
    mark_cancelled,
    validate_booking_dates,
)
from .exceptions import AccessDenied, DuplicateReference, NotFound, VehicleUnavailable
from .models import Booking
from .pricing import compute_settlement, compute_total, to_money

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("pickup_location", "return_location", "notes")


def _lock_booking(booking_id: int) -> Booking:
    try:
        return Booking.objects.select_for_update().select_related("vehicle").get(pk=booking_id)
    except Booking.DoesNotExist as exc:
        raise NotFound("Booking not found.") from exc


def _lock_vehicle(vehicle_id: int) -> Vehicle:
    try:
        return Vehicle.objects.select_for_update().get(pk=vehicle_id)
    except Vehicle.DoesNotExist as exc:
        raise NotFound("Vehicle not found.", field="vehicle") from exc


def get_booking(booking_id: int, *, actor: Actor) -> Booking:
    """Fetch a booking visible to the actor (its owner, or an admin)."""
    booking = (
        Booking.objects.select_related("vehicle", "user").filter(pk=booking_id).first()
    )
    if booking is None:
        raise NotFound("Booking not found.")
    assert_can_view(booking, actor)
    return booking


def get_booking_by_reference(reference: str, *, actor: Actor) -> Booking:
    booking = (
        Booking.objects.select_related("vehicle", "user")
        .filter(reference=(reference or "").strip().upper())
        .first()
    )
    if booking is None:
        raise NotFound("Booking not found.")
    assert_can_view(booking, actor)
    return booking


def create_booking(
    *,
    actor: Actor,
    vehicle_id: int,
    start_date: datetime,
    end_date: datetime,
    pickup_location: str = "",
    return_location: str = "",
    security_deposit: Optional[Decimal] = None,
    notes: str = "",
    now: datetime | None = None,
) -> Booking:
    """
    Create a PENDING booking.

    Dates are validated first, then the vehicle row is locked so the
    availability check and the insert cannot interleave with another request
    for the same vehicle.
    """
    if actor.user_id is None:
        raise AccessDenied("Authentication required.")
    if now is None:
        now = timezone.now()
    validate_booking_dates(start_date, end_date, now=now)

    reference = generate_booking_reference(now)
    with transaction.atomic():
        vehicle = _lock_vehicle(vehicle_id)
        if not vehicle.is_available():
            raise VehicleUnavailable(f"Vehicle is not available ({vehicle.status.lower()}).")
        ensure_no_conflict(vehicle, start_date, end_date)

        total_amount = compute_total(vehicle.daily_rate, start_date, end_date)
        deposit = (
            to_money(security_deposit) if security_deposit is not None else vehicle.daily_rate
        )
        try:
            with transaction.atomic():
                booking = Booking.objects.create(
                    reference=reference,
                    vehicle=vehicle,
                    user_id=actor.user_id,
                    start_date=start_date,
                    end_date=end_date,
                    pickup_location=pickup_location or "",
                    return_location=return_location or "",
                    total_amount=total_amount,
                    security_deposit=deposit,
                    notes=notes or "",
                    status=Booking.Status.PENDING,
                    created_at=now,
                )
        except IntegrityError as exc:
            if Booking.objects.filter(reference=reference).exists():
                raise DuplicateReference() from exc
            raise

    logger.info(
        "bookings: created %s for user %s",
        booking.reference,
        actor.user_id,
        extra={"booking_id": booking.id, "vehicle_id": vehicle.id},
    )
    return booking


def update_booking(
    booking_id: int,
    *,
    actor: Actor,
    changes: dict,
) -> Booking:
    """Edit the pickup/return locations and notes of a pending booking."""
    with transaction.atomic():
        booking = _lock_booking(booking_id)
        assert_is_owner(booking, actor)
        assert_can_update(booking)

        update_fields = []
        for field in UPDATABLE_FIELDS:
            value = changes.get(field)
            if value is None:
                continue
            setattr(booking, field, value)
            update_fields.append(field)
        if update_fields:
            booking.save(update_fields=update_fields + ["updated_at"])

    logger.info("bookings: updated %s", booking.reference, extra={"booking_id": booking.id})
    return booking


def confirm_booking(
    booking_id: int,
    *,
    actor: Actor,
) -> Booking:
    """PENDING -> CONFIRMED (admin only)."""
    assert_is_admin(actor)
    with transaction.atomic():
        booking = _lock_booking(booking_id)
        assert_can_confirm(booking)
        # Overlapping pending requests are allowed; only one may get confirmed.
        _lock_vehicle(booking.vehicle_id)
        ensure_no_conflict(
            booking.vehicle_id,
            booking.start_date,
            booking.end_date,
            exclude_booking_id=booking.id,
        )
        booking.status = Booking.Status.CONFIRMED
        booking.save(update_fields=["status", "updated_at"])

    logger.info("bookings: confirmed %s", booking.reference, extra={"booking_id": booking.id})
    return booking


def cancel_booking(
    booking_id: int,
    *,
    actor: Actor,
    reason: str | None = None,
    now: datetime | None = None,
) -> Booking:
    """PENDING|CONFIRMED -> CANCELLED (owning customer only)."""
    if now is None:
        now = timezone.now()
    with transaction.atomic():
        booking = _lock_booking(booking_id)
        assert_is_owner(booking, actor)
        assert_can_cancel(booking)
        mark_cancelled(booking, reason=reason, now=now)
        booking.save(
            update_fields=["status", "cancelled_at", "cancellation_reason", "updated_at"]
        )

    logger.info(
        "bookings: cancelled %s (%s)",
        booking.reference,
        booking.cancellation_reason,
        extra={"booking_id": booking.id},
    )
    return booking


def activate_booking(
    booking_id: int,
    *,
    actor: Actor,
) -> Booking:
    """CONFIRMED -> ACTIVE (admin only); the vehicle becomes RENTED."""
    assert_is_admin(actor)
    with transaction.atomic():
        booking = _lock_booking(booking_id)
        assert_can_activate(booking)
        vehicle = _lock_vehicle(booking.vehicle_id)

        booking.status = Booking.Status.ACTIVE
        booking.save(update_fields=["status", "updated_at"])
        vehicle.status = Vehicle.Status.RENTED
        vehicle.save(update_fields=["status", "updated_at"])
        booking.vehicle = vehicle

    logger.info(
        "bookings: activated %s, vehicle %s rented",
        booking.reference,
        vehicle.id,
        extra={"booking_id": booking.id, "vehicle_id": vehicle.id},
    )
    return booking


def complete_booking(
    booking_id: int,
    *,
    actor: Actor,
    late_fee: Decimal | None = None,
    damage_charges: Decimal | None = None,
    now: datetime | None = None,
) -> Booking:
    """
    ACTIVE -> COMPLETED (admin only); the vehicle becomes AVAILABLE again.

    Late fee and damage charges are stored on the booking for later collection;
    ``total_amount`` is left as it was.
    """
    assert_is_admin(actor)
    if now is None:
        now = timezone.now()
    with transaction.atomic():
        booking = _lock_booking(booking_id)
        assert_can_complete(booking)
        settlement = compute_settlement(booking.total_amount, late_fee, damage_charges)
        vehicle = _lock_vehicle(booking.vehicle_id)

        booking.status = Booking.Status.COMPLETED
        booking.actual_return_date = now
        booking.late_fee = settlement.late_fee
        booking.damage_charges = settlement.damage_charges
        booking.save(
            update_fields=[
                "status",
                "actual_return_date",
                "late_fee",
                "damage_charges",
                "updated_at",
            ]
        )
        vehicle.status = Vehicle.Status.AVAILABLE
        vehicle.save(update_fields=["status", "updated_at"])
        booking.vehicle = vehicle

    logger.info(
        "bookings: completed %s (extra charges %s)",
        booking.reference,
        settlement.extra_charges,
        extra={"booking_id": booking.id, "vehicle_id": vehicle.id},
    )
    return booking
