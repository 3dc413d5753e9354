"""Integration tests for the bookings API endpoints."""

from __future__ import annotations

from datetime import timedelta

import pytest

from bookings import services
from bookings.models import Booking
from vehicles.models import Vehicle

from .fixtures import auth, future

pytestmark = pytest.mark.django_db


def booking_payload(vehicle, start, end, **extra):
    payload = {
        "vehicle": vehicle.id,
        "start_date": start.isoformat(),
        "end_date": end.isoformat(),
        "pickup_location": "Airport",
        "return_location": "City centre",
    }
    payload.update(extra)
    return payload


def test_create_booking_success(renter_user, vehicle):
    client = auth(renter_user)
    start = future(days=2)

    resp = client.post(
        "/api/bookings/",
        booking_payload(vehicle, start, start + timedelta(days=3), notes="Child seat"),
        format="json",
    )

    assert resp.status_code == 201, resp.data
    assert resp.data["status"] == Booking.Status.PENDING
    assert resp.data["user"] == renter_user.id
    assert resp.data["vehicle"] == vehicle.id
    assert resp.data["reference"].startswith("BK")
    assert resp.data["total_amount"] == "1800.00"
    assert resp.data["security_deposit"] == "600.00"
    assert resp.data["license_plate"] == vehicle.license_plate
    assert resp.data["settlement"] is None


def test_sub_day_booking_reports_one_charged_day(renter_user, vehicle):
    client = auth(renter_user)
    start = future(days=2)

    resp = client.post(
        "/api/bookings/",
        booking_payload(vehicle, start, start + timedelta(hours=18)),
        format="json",
    )

    assert resp.status_code == 201, resp.data
    assert resp.data["days"] == 1
    assert resp.data["total_amount"] == "600.00"


def test_create_booking_requires_authentication(api_client, vehicle):
    start = future(days=2)
    resp = api_client.post(
        "/api/bookings/",
        booking_payload(vehicle, start, start + timedelta(days=1)),
        format="json",
    )

    assert resp.status_code == 401


def test_create_booking_in_the_past_returns_400(renter_user, vehicle):
    client = auth(renter_user)

    resp = client.post(
        "/api/bookings/",
        booking_payload(vehicle, future(days=-1), future(days=2)),
        format="json",
    )

    assert resp.status_code == 400
    assert "start_date" in resp.data
    assert Booking.objects.count() == 0


def test_create_booking_missing_locations_returns_400(renter_user, vehicle):
    client = auth(renter_user)
    start = future(days=2)
    payload = booking_payload(vehicle, start, start + timedelta(days=1))
    del payload["pickup_location"]

    resp = client.post("/api/bookings/", payload, format="json")

    assert resp.status_code == 400
    assert "pickup_location" in resp.data


def test_create_booking_for_unknown_vehicle_returns_404(renter_user, vehicle):
    client = auth(renter_user)
    start = future(days=2)
    payload = booking_payload(vehicle, start, start + timedelta(days=1))
    payload["vehicle"] = vehicle.id + 99

    resp = client.post("/api/bookings/", payload, format="json")

    assert resp.status_code == 404
    assert "vehicle" in resp.data


def test_create_booking_for_vehicle_in_maintenance_returns_409(renter_user, vehicle):
    vehicle.status = Vehicle.Status.MAINTENANCE
    vehicle.save(update_fields=["status"])
    client = auth(renter_user)
    start = future(days=2)

    resp = client.post(
        "/api/bookings/",
        booking_payload(vehicle, start, start + timedelta(days=1)),
        format="json",
    )

    assert resp.status_code == 409
    assert "vehicle" in resp.data


def test_create_overlapping_confirmed_booking_returns_409(renter_user, vehicle, booking_factory):
    start = future(days=5)
    booking_factory(
        start_date=start,
        end_date=start + timedelta(days=3),
        status=Booking.Status.CONFIRMED,
    )
    client = auth(renter_user)

    resp = client.post(
        "/api/bookings/",
        booking_payload(vehicle, start + timedelta(days=1), start + timedelta(days=2)),
        format="json",
    )

    assert resp.status_code == 409


def test_create_retries_once_after_reference_collision(
    renter_user, vehicle, booking_factory, monkeypatch
):
    taken = booking_factory(start_date=future(days=20), end_date=future(days=21))
    references = iter([taken.reference, "BK20991231235959"])
    monkeypatch.setattr(services, "generate_booking_reference", lambda now: next(references))
    client = auth(renter_user)
    start = future(days=2)

    resp = client.post(
        "/api/bookings/",
        booking_payload(vehicle, start, start + timedelta(days=1)),
        format="json",
    )

    assert resp.status_code == 201, resp.data
    assert resp.data["reference"] == "BK20991231235959"


def test_create_gives_up_after_second_reference_collision(
    renter_user, vehicle, booking_factory, monkeypatch
):
    taken = booking_factory(start_date=future(days=20), end_date=future(days=21))
    monkeypatch.setattr(services, "generate_booking_reference", lambda now: taken.reference)
    client = auth(renter_user)
    start = future(days=2)

    resp = client.post(
        "/api/bookings/",
        booking_payload(vehicle, start, start + timedelta(days=1)),
        format="json",
    )

    assert resp.status_code == 409
    assert "reference" in resp.data
    assert Booking.objects.count() == 1


def test_list_shows_only_own_bookings(renter_user, other_user, admin_user, booking_factory):
    mine = booking_factory()
    booking_factory(user=other_user, start_date=future(days=10), end_date=future(days=11))

    resp = auth(renter_user).get("/api/bookings/")
    assert resp.status_code == 200
    assert [item["id"] for item in resp.data] == [mine.id]

    resp = auth(admin_user).get("/api/bookings/")
    assert len(resp.data) == 2


def test_list_filters_by_status(renter_user, booking_factory):
    booking_factory()
    confirmed = booking_factory(
        start_date=future(days=10),
        end_date=future(days=11),
        status=Booking.Status.CONFIRMED,
    )

    resp = auth(renter_user).get("/api/bookings/", {"status": "confirmed"})

    assert [item["id"] for item in resp.data] == [confirmed.id]


def test_retrieve_someone_elses_booking_is_forbidden(other_user, booking_factory):
    booking = booking_factory()

    resp = auth(other_user).get(f"/api/bookings/{booking.id}/")

    assert resp.status_code == 403


def test_retrieve_missing_booking_returns_404(renter_user):
    resp = auth(renter_user).get("/api/bookings/424242/")

    assert resp.status_code == 404


def test_confirm_is_admin_only(renter_user, admin_user, booking_factory):
    booking = booking_factory()

    resp = auth(renter_user).post(f"/api/bookings/{booking.id}/confirm/")
    assert resp.status_code == 403

    admin_client = auth(admin_user)
    resp = admin_client.post(f"/api/bookings/{booking.id}/confirm/")
    assert resp.status_code == 200
    assert resp.data["status"] == Booking.Status.CONFIRMED

    resp = admin_client.post(f"/api/bookings/{booking.id}/confirm/")
    assert resp.status_code == 409
    assert "status" in resp.data


def test_cancel_requires_reason(renter_user, booking_factory):
    booking = booking_factory()

    resp = auth(renter_user).post(f"/api/bookings/{booking.id}/cancel/", {}, format="json")

    assert resp.status_code == 400
    assert "reason" in resp.data


def test_cancel_by_owner(renter_user, booking_factory):
    booking = booking_factory(status=Booking.Status.CONFIRMED)

    resp = auth(renter_user).post(
        f"/api/bookings/{booking.id}/cancel/",
        {"reason": "Flight cancelled"},
        format="json",
    )

    assert resp.status_code == 200
    assert resp.data["status"] == Booking.Status.CANCELLED
    assert resp.data["cancellation_reason"] == "Flight cancelled"
    assert resp.data["cancelled_at"] is not None


def test_cancel_by_admin_is_forbidden(admin_user, booking_factory):
    booking = booking_factory()

    resp = auth(admin_user).post(
        f"/api/bookings/{booking.id}/cancel/",
        {"reason": "Cleanup"},
        format="json",
    )

    assert resp.status_code == 403


def test_activate_and_complete_flow(admin_user, vehicle, booking_factory):
    booking = booking_factory(status=Booking.Status.CONFIRMED)
    client = auth(admin_user)

    resp = client.post(f"/api/bookings/{booking.id}/activate/")
    assert resp.status_code == 200
    assert resp.data["status"] == Booking.Status.ACTIVE
    vehicle.refresh_from_db()
    assert vehicle.status == Vehicle.Status.RENTED

    resp = client.post(
        f"/api/bookings/{booking.id}/complete/",
        {"late_fee": "150.00", "damage_charges": "50.00"},
        format="json",
    )
    assert resp.status_code == 200, resp.data
    assert resp.data["status"] == Booking.Status.COMPLETED
    assert resp.data["total_amount"] == "1800.00"
    assert resp.data["settlement"]["final_amount"] == "2000.00"
    vehicle.refresh_from_db()
    assert vehicle.status == Vehicle.Status.AVAILABLE


def test_complete_rejects_negative_late_fee(admin_user, booking_factory):
    booking = booking_factory(status=Booking.Status.ACTIVE)

    resp = auth(admin_user).post(
        f"/api/bookings/{booking.id}/complete/",
        {"late_fee": "-1.00"},
        format="json",
    )

    assert resp.status_code == 400
    assert "late_fee" in resp.data


def test_patch_updates_pending_booking(renter_user, booking_factory):
    booking = booking_factory()

    resp = auth(renter_user).patch(
        f"/api/bookings/{booking.id}/",
        {"return_location": "Railway station"},
        format="json",
    )

    assert resp.status_code == 200
    assert resp.data["return_location"] == "Railway station"


def test_patch_on_confirmed_booking_returns_409(renter_user, booking_factory):
    booking = booking_factory(status=Booking.Status.CONFIRMED)

    resp = auth(renter_user).patch(
        f"/api/bookings/{booking.id}/",
        {"notes": "Running late"},
        format="json",
    )

    assert resp.status_code == 409


def test_put_and_delete_are_not_allowed(renter_user, booking_factory):
    booking = booking_factory()
    client = auth(renter_user)

    assert client.put(f"/api/bookings/{booking.id}/", {}, format="json").status_code == 405
    assert client.delete(f"/api/bookings/{booking.id}/").status_code == 405


def test_lookup_by_reference(renter_user, other_user, booking_factory):
    booking = booking_factory()

    resp = auth(renter_user).get(f"/api/bookings/by-reference/{booking.reference}/")
    assert resp.status_code == 200
    assert resp.data["id"] == booking.id

    resp = auth(other_user).get(f"/api/bookings/by-reference/{booking.reference}/")
    assert resp.status_code == 403

    resp = auth(renter_user).get("/api/bookings/by-reference/BK19990101000000/")
    assert resp.status_code == 404


def test_availability_is_public(api_client, vehicle, booking_factory):
    start = future(days=4)
    booking_factory(
        start_date=start,
        end_date=start + timedelta(days=2),
        status=Booking.Status.CONFIRMED,
    )

    resp = api_client.get(
        "/api/bookings/availability/",
        {
            "vehicle": vehicle.id,
            "start_date": (start + timedelta(days=1)).isoformat(),
            "end_date": (start + timedelta(days=5)).isoformat(),
        },
    )
    assert resp.status_code == 200
    assert resp.data["available"] is False
    assert len(resp.data["blocked"]) == 1

    resp = api_client.get(
        "/api/bookings/availability/",
        {
            "vehicle": vehicle.id,
            "start_date": (start + timedelta(days=3)).isoformat(),
            "end_date": (start + timedelta(days=5)).isoformat(),
        },
    )
    assert resp.data["available"] is True


def test_availability_requires_vehicle(api_client):
    resp = api_client.get("/api/bookings/availability/")

    assert resp.status_code == 400
    assert "vehicle" in resp.data


def test_admin_polling_endpoints(renter_user, admin_user, booking_factory):
    due = booking_factory(
        start_date=future(hours=-1),
        end_date=future(days=2),
        status=Booking.Status.CONFIRMED,
    )
    overdue = booking_factory(
        start_date=future(days=-3),
        end_date=future(hours=-1),
        status=Booking.Status.ACTIVE,
    )

    assert auth(renter_user).get("/api/bookings/needing-activation/").status_code == 403

    admin_client = auth(admin_user)
    resp = admin_client.get("/api/bookings/needing-activation/")
    assert [item["id"] for item in resp.data] == [due.id]
    resp = admin_client.get("/api/bookings/overdue/")
    assert [item["id"] for item in resp.data] == [overdue.id]
