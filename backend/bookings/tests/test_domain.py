"""Tests for booking domain validation helpers."""

from __future__ import annotations

from datetime import timedelta

import pytest

from bookings.domain import (
    SYSTEM_ACTOR,
    Actor,
    assert_can_activate,
    assert_can_cancel,
    assert_can_complete,
    assert_can_confirm,
    assert_can_view,
    blocked_ranges,
    bookings_needing_activation,
    ensure_no_conflict,
    find_conflicts,
    has_conflict,
    is_overdue,
    mark_cancelled,
    overdue_bookings,
    validate_booking_dates,
)
from bookings.exceptions import (
    AccessDenied,
    InvalidDateRange,
    InvalidStateTransition,
    SchedulingConflict,
)
from bookings.models import Booking
from users.models import User

from .fixtures import future

pytestmark = pytest.mark.django_db


def test_overlapping_range_conflicts_with_confirmed_booking(vehicle, booking_factory):
    start = future(days=5)
    end = start + timedelta(days=3)
    booking_factory(start_date=start, end_date=end, status=Booking.Status.CONFIRMED)

    assert has_conflict(vehicle, start + timedelta(days=1), end + timedelta(days=1))
    with pytest.raises(SchedulingConflict):
        ensure_no_conflict(vehicle, start, end)


def test_touching_endpoints_conflict(vehicle, booking_factory):
    start = future(days=5)
    end = start + timedelta(days=3)
    booking_factory(start_date=start, end_date=end, status=Booking.Status.ACTIVE)

    assert has_conflict(vehicle, end, end + timedelta(days=2))
    assert has_conflict(vehicle, start - timedelta(days=2), start)


def test_disjoint_ranges_do_not_conflict(vehicle, booking_factory):
    start = future(days=7)
    end = start + timedelta(days=4)
    booking_factory(start_date=start, end_date=end, status=Booking.Status.CONFIRMED)

    assert not has_conflict(vehicle, start - timedelta(days=4), start - timedelta(seconds=1))
    assert not has_conflict(vehicle, end + timedelta(seconds=1), end + timedelta(days=3))


@pytest.mark.parametrize(
    "status",
    [Booking.Status.PENDING, Booking.Status.CANCELLED, Booking.Status.COMPLETED],
)
def test_non_blocking_statuses_never_conflict(vehicle, booking_factory, status):
    start = future(days=3)
    end = start + timedelta(days=2)
    booking_factory(start_date=start, end_date=end, status=status)

    assert not has_conflict(vehicle, start, end)


def test_conflicts_are_scoped_to_the_vehicle(vehicle, booking_factory, owner_user):
    other_vehicle = type(vehicle).objects.create(
        owner=owner_user,
        license_plate="KA02CD5678",
        brand="Honda",
        model="City",
        year=2021,
        color="Grey",
        daily_rate=vehicle.daily_rate,
    )
    start = future(days=3)
    end = start + timedelta(days=2)
    booking_factory(
        vehicle_override=other_vehicle,
        start_date=start,
        end_date=end,
        status=Booking.Status.CONFIRMED,
    )

    assert not has_conflict(vehicle, start, end)
    assert has_conflict(other_vehicle.id, start, end)


def test_exclude_booking_id_skips_the_booking_itself(vehicle, booking_factory):
    start = future(days=9)
    end = start + timedelta(days=2)
    booking = booking_factory(start_date=start, end_date=end, status=Booking.Status.CONFIRMED)

    ensure_no_conflict(vehicle, start, end, exclude_booking_id=booking.id)
    assert list(find_conflicts(vehicle, start, end)) == [booking]


def test_blocked_ranges_lists_confirmed_and_active_only(vehicle, booking_factory):
    first = booking_factory(
        start_date=future(days=2),
        end_date=future(days=4),
        status=Booking.Status.CONFIRMED,
    )
    booking_factory(start_date=future(days=5), end_date=future(days=6))
    booking_factory(
        start_date=future(days=10),
        end_date=future(days=12),
        status=Booking.Status.ACTIVE,
    )

    ranges = blocked_ranges(vehicle)

    assert len(ranges) == 2
    assert ranges[0]["start_date"] == first.start_date.isoformat()


def test_validate_booking_dates():
    now = future()
    validate_booking_dates(now + timedelta(hours=1), now + timedelta(days=1), now=now)

    with pytest.raises(InvalidDateRange) as excinfo:
        validate_booking_dates(now + timedelta(days=2), now + timedelta(days=1), now=now)
    assert "end_date" in excinfo.value.message_dict

    with pytest.raises(InvalidDateRange) as excinfo:
        validate_booking_dates(now, now + timedelta(days=1), now=now)
    assert "start_date" in excinfo.value.message_dict

    with pytest.raises(InvalidDateRange):
        validate_booking_dates(None, now + timedelta(days=1), now=now)


def test_state_guards(booking_factory):
    booking = booking_factory()
    assert_can_confirm(booking)
    assert_can_cancel(booking)

    with pytest.raises(InvalidStateTransition):
        assert_can_activate(booking)
    with pytest.raises(InvalidStateTransition):
        assert_can_complete(booking)

    booking.status = Booking.Status.ACTIVE
    assert_can_complete(booking)
    with pytest.raises(InvalidStateTransition):
        assert_can_cancel(booking)


def test_actor_from_user(admin_user, renter_user):
    assert Actor.from_user(admin_user).is_admin
    assert not Actor.from_user(renter_user).is_admin
    assert Actor.from_user(renter_user).user_id == renter_user.id

    renter_user.is_superuser = True
    assert Actor.from_user(renter_user).role == User.Role.ADMIN


def test_view_guard_allows_owner_and_admin(booking_factory, renter_user, other_user):
    booking = booking_factory()

    assert_can_view(booking, Actor.from_user(renter_user))
    assert_can_view(booking, SYSTEM_ACTOR)
    with pytest.raises(AccessDenied):
        assert_can_view(booking, Actor.from_user(other_user))


def test_mark_cancelled_falls_back_to_default_reason(booking_factory):
    booking = booking_factory()
    now = future()

    mark_cancelled(booking, reason="   ", now=now)

    assert booking.status == Booking.Status.CANCELLED
    assert booking.cancelled_at == now
    assert booking.cancellation_reason == "Cancelled by customer."


def test_polling_queries(booking_factory):
    now = future(days=10)
    due = booking_factory(
        start_date=future(days=2),
        end_date=future(days=20),
        status=Booking.Status.CONFIRMED,
    )
    booking_factory(
        start_date=future(days=11),
        end_date=future(days=12),
        status=Booking.Status.CONFIRMED,
    )
    late = booking_factory(
        start_date=future(days=1),
        end_date=future(days=5),
        status=Booking.Status.ACTIVE,
    )
    booking_factory(
        start_date=future(days=6),
        end_date=future(days=15),
        status=Booking.Status.ACTIVE,
    )

    assert list(bookings_needing_activation(now)) == [due]
    assert list(overdue_bookings(now)) == [late]
    assert is_overdue(late, now=now)
    assert not is_overdue(due, now=now)
