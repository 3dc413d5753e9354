"""Celery tasks for bookings."""

from __future__ import annotations

import logging

from celery import shared_task
from django.utils import timezone

from core.exceptions import DomainError

from .domain import SYSTEM_ACTOR, bookings_needing_activation, overdue_bookings
from .services import activate_booking

logger = logging.getLogger(__name__)


@shared_task(name="bookings.auto_activate_due_bookings")
def auto_activate_due_bookings() -> int:
    """
    Activate confirmed bookings whose start date has arrived.

    Returns the number of bookings activated.
    """
    now = timezone.now()
    activated_count = 0

    for booking_id in bookings_needing_activation(now).values_list("id", flat=True):
        try:
            activate_booking(booking_id, actor=SYSTEM_ACTOR)
        except DomainError as exc:
            # Cancelled or activated by someone else since the query ran.
            logger.info(
                "auto_activate_due_bookings: skipped booking %s: %s",
                booking_id,
                exc.message,
                extra={"booking_id": booking_id},
            )
            continue
        activated_count += 1

    return activated_count


@shared_task(name="bookings.report_overdue_bookings")
def report_overdue_bookings() -> int:
    """
    Log active bookings that are past their end date.

    Returns the number of overdue bookings found.
    """
    now = timezone.now()
    overdue_count = 0

    for booking in overdue_bookings(now):
        overdue_count += 1
        logger.warning(
            "report_overdue_bookings: booking %s is overdue (ended %s)",
            booking.reference,
            booking.end_date.isoformat(),
            extra={"booking_id": booking.id, "vehicle_id": booking.vehicle_id},
        )

    return overdue_count
