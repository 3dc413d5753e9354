"""Charging and refunding booking payments through the configured gateway."""

from __future__ import annotations

import logging
from datetime import datetime

from django.db import IntegrityError, transaction
from django.utils import timezone

from bookings.domain import Actor, assert_is_admin, assert_is_owner
from bookings.exceptions import AccessDenied, InvalidChargeAmount, NotFound
from bookings.models import Booking
from bookings.pricing import to_money
from core.references import generate_transaction_id

from .exceptions import InvalidPaymentState, InvalidRefundAmount, RefundDeclined
from .gateway import PaymentGateway, get_payment_gateway
from .models import Payment

logger = logging.getLogger(__name__)

# Transaction ids carry a 4 digit random suffix, so collisions are rare but possible.
MAX_TRANSACTION_ID_ATTEMPTS = 3


def _assert_can_view_payment(payment: Payment, actor: Actor) -> None:
    if actor.is_admin:
        return
    if actor.user_id is None or payment.user_id != actor.user_id:
        raise AccessDenied("You can only view your own payments.")


def get_payment(payment_id: int, *, actor: Actor) -> Payment:
    payment = Payment.objects.select_related("booking", "user").filter(pk=payment_id).first()
    if payment is None:
        raise NotFound("Payment not found.")
    _assert_can_view_payment(payment, actor)
    return payment


def get_payment_by_transaction_id(transaction_id: str, *, actor: Actor) -> Payment:
    payment = (
        Payment.objects.select_related("booking", "user")
        .filter(transaction_id=(transaction_id or "").strip().upper())
        .first()
    )
    if payment is None:
        raise NotFound("Payment not found.")
    _assert_can_view_payment(payment, actor)
    return payment


def _create_pending_payment(*, now: datetime, **fields) -> Payment:
    attempts = 0
    while True:
        attempts += 1
        transaction_id = generate_transaction_id(now)
        try:
            with transaction.atomic():
                return Payment.objects.create(transaction_id=transaction_id, **fields)
        except IntegrityError:
            taken = Payment.objects.filter(transaction_id=transaction_id).exists()
            if not taken or attempts >= MAX_TRANSACTION_ID_ATTEMPTS:
                raise
            logger.info("payments: transaction id %s taken, regenerating", transaction_id)


def process_payment(
    *,
    booking: Booking,
    actor: Actor,
    amount,
    payment_type: str,
    payment_method: str,
    notes: str = "",
    gateway: PaymentGateway | None = None,
    now: datetime | None = None,
) -> Payment:
    """
    Charge the booking's customer and record the outcome.

    The payment row is written as PENDING before the gateway is called, so a
    gateway crash leaves a trace. A declined charge is recorded as FAILED and
    returned, not raised. Payments never move the booking through its states.
    """
    assert_is_owner(booking, actor)
    amount = to_money(amount)
    if amount <= 0:
        raise InvalidChargeAmount("Amount must be greater than zero.", field="amount")
    if booking.status == Booking.Status.CANCELLED:
        raise InvalidPaymentState("Cancelled bookings cannot be paid for.", field="booking")
    if now is None:
        now = timezone.now()
    gateway = gateway or get_payment_gateway()

    payment = _create_pending_payment(
        user_id=actor.user_id,
        booking=booking,
        amount=amount,
        payment_type=payment_type,
        payment_method=payment_method,
        notes=notes or "",
        now=now,
    )

    result = gateway.charge(payment)
    if result.success:
        payment.status = Payment.Status.SUCCESS
        payment.payment_date = now
        payment.gateway_reference = result.reference
    else:
        payment.status = Payment.Status.FAILED
    payment.gateway_response = result.message
    payment.save(update_fields=["status", "payment_date", "gateway_reference", "gateway_response"])

    logger.info(
        "payments: %s for booking %s finished with %s",
        payment.transaction_id,
        booking.reference,
        payment.status,
        extra={"booking_id": booking.id, "payment_id": payment.id},
    )
    return payment


def process_refund(
    *,
    payment: Payment,
    actor: Actor,
    amount,
    reason: str,
    gateway: PaymentGateway | None = None,
    now: datetime | None = None,
) -> Payment:
    """Refund all or part of a successful payment (admin only)."""
    assert_is_admin(actor)
    amount = to_money(amount)
    if now is None:
        now = timezone.now()
    gateway = gateway or get_payment_gateway()

    with transaction.atomic():
        locked = Payment.objects.select_for_update().select_related("booking").get(pk=payment.pk)
        if not locked.is_refundable:
            raise InvalidPaymentState()
        if amount <= 0 or amount > locked.amount:
            raise InvalidRefundAmount()

        result = gateway.refund(locked, amount)
        if not result.success:
            logger.warning(
                "payments: refund of %s for %s declined: %s",
                amount,
                locked.transaction_id,
                result.message,
                extra={"payment_id": locked.id},
            )
            raise RefundDeclined()

        locked.refund_amount = amount
        locked.refund_date = now
        locked.status = (
            Payment.Status.REFUNDED if amount == locked.amount else Payment.Status.PARTIAL_REFUND
        )
        refund_note = f"Refund reason: {(reason or '').strip()}"
        locked.notes = f"{locked.notes}; {refund_note}" if locked.notes else refund_note
        locked.save(update_fields=["refund_amount", "refund_date", "status", "notes"])

    logger.info(
        "payments: refunded %s of %s",
        amount,
        locked.transaction_id,
        extra={"payment_id": locked.id, "booking_id": locked.booking_id},
    )
    return locked
