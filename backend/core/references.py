"""Human-readable identifiers for bookings and payment transactions."""

from __future__ import annotations

import random
from datetime import datetime

from django.utils import timezone

BOOKING_REFERENCE_PREFIX = "BK"
TRANSACTION_ID_PREFIX = "TXN"
TIMESTAMP_FORMAT = "%Y%m%d%H%M%S"

_rng = random.Random()


def _timestamp(now: datetime | None) -> str:
    if now is None:
        now = timezone.now()
    if timezone.is_aware(now):
        now = timezone.localtime(now)
    return now.strftime(TIMESTAMP_FORMAT)


def generate_booking_reference(now: datetime | None = None) -> str:
    """
    Return "BK" followed by the creation time as yyyyMMddHHmmss.

    Two bookings created in the same second get the same value; the unique
    constraint on Booking.reference catches that and the caller regenerates.
    """
    return f"{BOOKING_REFERENCE_PREFIX}{_timestamp(now)}"


def generate_transaction_id(
    now: datetime | None = None,
    rng: random.Random | None = None,
) -> str:
    """Return "TXN" + yyyyMMddHHmmss + a 4 digit zero-padded random suffix."""
    suffix = (rng or _rng).randrange(10000)
    return f"{TRANSACTION_ID_PREFIX}{_timestamp(now)}{suffix:04d}"
