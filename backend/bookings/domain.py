"""Domain helpers for booking validation and state transitions."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from django.db.models import QuerySet
from django.utils import timezone

from users.models import User
from vehicles.models import Vehicle

from .exceptions import AccessDenied, InvalidDateRange, InvalidStateTransition, SchedulingConflict
from .models import Booking

# Statuses that block dates for availability and conflict detection.
# Pending bookings remain allowed to overlap.
ACTIVE_BOOKING_STATUSES = (
    Booking.Status.CONFIRMED,
    Booking.Status.ACTIVE,
)

CANCELLABLE_STATUSES = (
    Booking.Status.PENDING,
    Booking.Status.CONFIRMED,
)

DEFAULT_CANCELLATION_REASON = "Cancelled by customer."


@dataclass(frozen=True)
class Actor:
    """The caller of a booking operation: who they are and what they may do."""

    user_id: Optional[int]
    role: str = User.Role.USER

    @property
    def is_admin(self) -> bool:
        return self.role == User.Role.ADMIN

    @classmethod
    def from_user(cls, user) -> "Actor":
        role = User.Role.ADMIN if getattr(user, "is_admin", False) else User.Role.USER
        return cls(user_id=getattr(user, "id", None), role=role)


# Used by scheduled jobs.
SYSTEM_ACTOR = Actor(user_id=None, role=User.Role.ADMIN)


def validate_booking_dates(
    start_date: datetime | None,
    end_date: datetime | None,
    *,
    now: datetime | None = None,
) -> None:
    """Ensure both dates exist, start < end and the start is strictly in the future."""
    if not start_date or not end_date:
        raise InvalidDateRange("Start and end dates are required.")
    if start_date >= end_date:
        raise InvalidDateRange("End date must be after start date.", field="end_date")
    if now is None:
        now = timezone.now()
    if start_date <= now:
        raise InvalidDateRange("Start date must be in the future.", field="start_date")


def find_conflicts(
    vehicle: Vehicle | int,
    start_date: datetime,
    end_date: datetime,
    *,
    exclude_booking_id: Optional[int] = None,
) -> QuerySet[Booking]:
    """
    Return confirmed/active bookings for the vehicle that overlap [start, end].

    Endpoints are inclusive: a booking ending exactly when another starts counts
    as a conflict, so there are no same-moment handoffs.
    """
    vehicle_id = vehicle.pk if isinstance(vehicle, Vehicle) else vehicle
    qs = Booking.objects.filter(vehicle_id=vehicle_id, status__in=ACTIVE_BOOKING_STATUSES)
    if exclude_booking_id is not None:
        qs = qs.exclude(pk=exclude_booking_id)
    return qs.filter(start_date__lte=end_date, end_date__gte=start_date)


def has_conflict(
    vehicle: Vehicle | int,
    start_date: datetime,
    end_date: datetime,
    *,
    exclude_booking_id: Optional[int] = None,
) -> bool:
    return find_conflicts(
        vehicle,
        start_date,
        end_date,
        exclude_booking_id=exclude_booking_id,
    ).exists()


def ensure_no_conflict(
    vehicle: Vehicle | int,
    start_date: datetime,
    end_date: datetime,
    *,
    exclude_booking_id: Optional[int] = None,
) -> None:
    """Raise SchedulingConflict if the dates overlap a confirmed/active booking."""
    if has_conflict(vehicle, start_date, end_date, exclude_booking_id=exclude_booking_id):
        raise SchedulingConflict()


def blocked_ranges(vehicle: Vehicle | int) -> list[dict[str, str]]:
    """Return the [start, end] ranges currently holding the vehicle."""
    vehicle_id = vehicle.pk if isinstance(vehicle, Vehicle) else vehicle
    ranges = (
        Booking.objects.filter(vehicle_id=vehicle_id, status__in=ACTIVE_BOOKING_STATUSES)
        .order_by("start_date", "end_date")
        .values("start_date", "end_date")
    )
    return [
        {
            "start_date": item["start_date"].isoformat(),
            "end_date": item["end_date"].isoformat(),
        }
        for item in ranges
    ]


def assert_is_admin(actor: Actor) -> None:
    if not actor.is_admin:
        raise AccessDenied("Only administrators can perform this action.")


def assert_is_owner(booking: Booking, actor: Actor) -> None:
    if actor.user_id is None or booking.user_id != actor.user_id:
        raise AccessDenied("Only the customer who made this booking can do that.")


def assert_can_view(booking: Booking, actor: Actor) -> None:
    if actor.is_admin:
        return
    assert_is_owner(booking, actor)


def assert_can_confirm(booking: Booking) -> None:
    """Ensure the booking can be confirmed."""
    if booking.status != Booking.Status.PENDING:
        raise InvalidStateTransition("Only pending bookings can be confirmed.")


def assert_can_cancel(booking: Booking) -> None:
    """Only pending or confirmed bookings may be cancelled."""
    if booking.status not in CANCELLABLE_STATUSES:
        raise InvalidStateTransition("Only pending or confirmed bookings can be cancelled.")


def assert_can_activate(booking: Booking) -> None:
    if booking.status != Booking.Status.CONFIRMED:
        raise InvalidStateTransition("Only confirmed bookings can be activated.")


def assert_can_complete(booking: Booking) -> None:
    """Ensure the booking can be marked as complete."""
    if booking.status != Booking.Status.ACTIVE:
        raise InvalidStateTransition("Only active bookings can be completed.")


def assert_can_update(booking: Booking) -> None:
    if booking.status != Booking.Status.PENDING:
        raise InvalidStateTransition("Only pending bookings can be updated.")


def mark_cancelled(booking: Booking, *, reason: str | None, now: datetime) -> None:
    """
    Mutate the provided booking instance into a cancelled state.
    """
    booking.status = Booking.Status.CANCELLED
    booking.cancelled_at = now
    booking.cancellation_reason = (reason or "").strip() or DEFAULT_CANCELLATION_REASON


def is_overdue(booking: Booking, *, now: datetime | None = None) -> bool:
    """Return True for an active booking whose end date has passed."""
    if booking.status != Booking.Status.ACTIVE or not booking.end_date:
        return False
    if now is None:
        now = timezone.now()
    return booking.end_date <= now


def bookings_needing_activation(now: datetime | None = None) -> QuerySet[Booking]:
    """Confirmed bookings whose start date has arrived."""
    if now is None:
        now = timezone.now()
    return (
        Booking.objects.filter(status=Booking.Status.CONFIRMED, start_date__lte=now)
        .select_related("vehicle", "user")
        .order_by("start_date", "id")
    )


def overdue_bookings(now: datetime | None = None) -> QuerySet[Booking]:
    """Active bookings whose end date has passed without completion."""
    if now is None:
        now = timezone.now()
    return (
        Booking.objects.filter(status=Booking.Status.ACTIVE, end_date__lte=now)
        .select_related("vehicle", "user")
        .order_by("end_date", "id")
    )
