from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction
from django.db.models import Max
from django.utils import timezone

from bookings.domain import Actor
from bookings.models import Booking
from bookings.services import (
    activate_booking,
    cancel_booking,
    complete_booking,
    confirm_booking,
    create_booking,
)
from vehicles.models import Vehicle

User = get_user_model()


@dataclass(frozen=True)
class Scenario:
    key: str
    status: str
    late_fee: Decimal = Decimal("0")
    damage_charges: Decimal = Decimal("0")
    cancellation_reason: str = ""


SCENARIOS = [
    Scenario(key="pending", status=Booking.Status.PENDING),
    Scenario(key="confirmed", status=Booking.Status.CONFIRMED),
    Scenario(key="active", status=Booking.Status.ACTIVE),
    Scenario(key="completed", status=Booking.Status.COMPLETED),
    Scenario(
        key="completed_late",
        status=Booking.Status.COMPLETED,
        late_fee=Decimal("350.00"),
        damage_charges=Decimal("1200.00"),
    ),
    Scenario(
        key="cancelled",
        status=Booking.Status.CANCELLED,
        cancellation_reason="Plans changed.",
    ),
]

VEHICLE_SEEDS = [
    ("Toyota", "Innova", Vehicle.VehicleType.VAN, Vehicle.FuelType.DIESEL, 7, "2200"),
    ("Hyundai", "Creta", Vehicle.VehicleType.SUV, Vehicle.FuelType.PETROL, 5, "1800"),
    ("Tata", "Nexon EV", Vehicle.VehicleType.CAR, Vehicle.FuelType.ELECTRIC, 5, "2000"),
    ("Honda", "Activa", Vehicle.VehicleType.SCOOTER, Vehicle.FuelType.PETROL, 2, "400"),
]

SEED_PLATE_PREFIX = "SEED-"

# Days between consecutive bookings of the same vehicle, so seeds never conflict.
SLOT_DAYS = 5


class Command(BaseCommand):
    help = (
        "Create demo users and vehicles, then walk one booking per lifecycle scenario "
        "through the booking services."
    )

    def add_arguments(self, parser) -> None:
        parser.add_argument(
            "--batches",
            type=int,
            default=1,
            help="How many times to run the full set of scenarios.",
        )
        parser.add_argument(
            "--password",
            type=str,
            default="test-pass",
            help="Password for newly created seed users.",
        )

    def handle(self, *args, **options) -> None:
        batches = options["batches"]
        password = options["password"]
        if batches < 1:
            raise CommandError("--batches must be >= 1.")

        with transaction.atomic():
            admin = self._ensure_user("seedadmin", password, role=User.Role.ADMIN)
            owner = self._ensure_user("seedowner", password)
            renter = self._ensure_user("seedrenter", password)
            pool = self._available_seed_vehicles()

            admin_actor = Actor.from_user(admin)
            renter_actor = Actor.from_user(renter)
            created = 0
            counts = {scenario.key: 0 for scenario in SCENARIOS}
            now = self._clock_start()
            next_slot = self._first_free_slot(now)

            for batch in range(batches):
                for index, scenario in enumerate(SCENARIOS):
                    if not pool:
                        pool.append(self._create_seed_vehicle(owner))
                    vehicle = pool.pop(0)
                    start = next_slot + timedelta(days=SLOT_DAYS * (batch * len(SCENARIOS) + index))
                    created_at = now + timedelta(seconds=created + 1)
                    booking = create_booking(
                        actor=renter_actor,
                        vehicle_id=vehicle.id,
                        start_date=start,
                        end_date=start + timedelta(days=3),
                        pickup_location=vehicle.location,
                        return_location=vehicle.location,
                        notes=f"Seeded scenario: {scenario.key}",
                        now=created_at,
                    )
                    self._advance(booking, scenario, admin_actor, renter_actor, now=created_at)
                    # An active rental keeps its vehicle RENTED.
                    if scenario.status != Booking.Status.ACTIVE:
                        pool.append(vehicle)
                    created += 1
                    counts[scenario.key] += 1

        self.stdout.write(self.style.SUCCESS("Booking population complete."))
        self.stdout.write(f"Bookings created: {created}")
        for key, count in counts.items():
            self.stdout.write(f"  {key}: {count}")

    def _ensure_user(self, username: str, password: str, *, role: str = User.Role.USER):
        user = User.objects.filter(username=username).first()
        if user is not None:
            return user
        return User.objects.create_user(
            username=username,
            email=f"{username}@example.com",
            password=password,
            role=role,
            first_name=username.removeprefix("seed").capitalize(),
            last_name="Seed",
        )

    def _available_seed_vehicles(self) -> list[Vehicle]:
        return list(
            Vehicle.objects.filter(
                license_plate__startswith=SEED_PLATE_PREFIX,
                status=Vehicle.Status.AVAILABLE,
            ).order_by("id")
        )

    def _create_seed_vehicle(self, owner) -> Vehicle:
        number = Vehicle.objects.filter(license_plate__startswith=SEED_PLATE_PREFIX).count() + 1
        brand, model, vehicle_type, fuel_type, seats, rate = VEHICLE_SEEDS[
            (number - 1) % len(VEHICLE_SEEDS)
        ]
        return Vehicle.objects.create(
            owner=owner,
            license_plate=f"{SEED_PLATE_PREFIX}{number:04d}",
            brand=brand,
            model=model,
            year=2023,
            color="White",
            vehicle_type=vehicle_type,
            fuel_type=fuel_type,
            seat_count=seats,
            daily_rate=Decimal(rate),
            location="Bengaluru",
        )

    def _clock_start(self):
        # References are derived from created_at, so never reuse an earlier second.
        now = timezone.now().replace(microsecond=0)
        latest = Booking.objects.aggregate(latest=Max("created_at"))["latest"]
        if latest is not None and latest >= now:
            now = latest.replace(microsecond=0)
        return now

    def _first_free_slot(self, now):
        """Start after every booking already holding a seed vehicle."""
        latest = (
            Booking.objects.filter(vehicle__license_plate__startswith=SEED_PLATE_PREFIX)
            .order_by("-end_date")
            .values_list("end_date", flat=True)
            .first()
        )
        start = now + timedelta(days=1)
        if latest is not None and latest >= start:
            start = latest + timedelta(days=1)
        return start

    def _advance(self, booking, scenario: Scenario, admin, renter, *, now) -> None:
        if scenario.status == Booking.Status.PENDING:
            return
        if scenario.status == Booking.Status.CANCELLED:
            cancel_booking(booking.id, actor=renter, reason=scenario.cancellation_reason, now=now)
            return

        confirm_booking(booking.id, actor=admin)
        if scenario.status == Booking.Status.CONFIRMED:
            return
        activate_booking(booking.id, actor=admin)
        if scenario.status == Booking.Status.ACTIVE:
            return
        complete_booking(
            booking.id,
            actor=admin,
            late_fee=scenario.late_fee,
            damage_charges=scenario.damage_charges,
            now=now,
        )
