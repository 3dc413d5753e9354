"""Users, vehicles and bookings shared by every app's tests."""

from __future__ import annotations

import itertools
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Callable

import pytest
from django.contrib.auth import get_user_model
from django.utils import timezone
from rest_framework.test import APIClient

from bookings.models import Booking
from vehicles.models import Vehicle

User = get_user_model()

TEST_PASSWORD = "testpass"

_reference_counter = itertools.count(1)


def future(days: int = 0, hours: int = 0) -> datetime:
    """An aware datetime `days`/`hours` from now, truncated to the second."""
    return timezone.now().replace(microsecond=0) + timedelta(days=days, hours=hours)


def auth(user) -> APIClient:
    """An APIClient carrying a bearer token obtained through the login endpoint."""
    client = APIClient()
    token_resp = client.post(
        "/api/users/token/",
        {"username": user.username, "password": TEST_PASSWORD},
        format="json",
    )
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {token_resp.data['access']}")
    return client


def _create_user(*, username: str, role: str = User.Role.USER) -> User:
    return User.objects.create_user(
        username=username,
        password=TEST_PASSWORD,
        email=f"{username}@example.com",
        first_name=username.capitalize(),
        last_name="Tester",
        role=role,
    )


@pytest.fixture
def owner_user():
    return _create_user(username="owner")


@pytest.fixture
def renter_user():
    return _create_user(username="renter")


@pytest.fixture
def other_user():
    return _create_user(username="other")


@pytest.fixture
def admin_user():
    return _create_user(username="admin", role=User.Role.ADMIN)


@pytest.fixture
def vehicle(owner_user):
    return Vehicle.objects.create(
        owner=owner_user,
        license_plate="KA01AB1234",
        brand="Toyota",
        model="Corolla",
        year=2022,
        color="White",
        vehicle_type=Vehicle.VehicleType.CAR,
        fuel_type=Vehicle.FuelType.PETROL,
        seat_count=5,
        daily_rate=Decimal("600.00"),
        location="Bengaluru",
    )


@pytest.fixture
def booking_factory(vehicle, renter_user) -> Callable[..., Booking]:
    def _create_booking(
        *,
        vehicle_override: Vehicle | None = None,
        user=None,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
        status=Booking.Status.PENDING,
        **extra_fields,
    ) -> Booking:
        start_date = start_date or future(days=2)
        end_date = end_date or start_date + timedelta(days=3)
        extra_fields.setdefault("total_amount", Decimal("1800.00"))
        extra_fields.setdefault("pickup_location", "Airport")
        extra_fields.setdefault("return_location", "Airport")
        return Booking.objects.create(
            reference=f"BKTEST{next(_reference_counter):08d}",
            vehicle=vehicle_override or vehicle,
            user=user or renter_user,
            start_date=start_date,
            end_date=end_date,
            status=status,
            **extra_fields,
        )

    return _create_booking
