"""Business errors raised while charging and refunding payments."""

from __future__ import annotations

from rest_framework import status

from core.exceptions import DomainError


class InvalidPaymentState(DomainError):
    status_code = status.HTTP_409_CONFLICT
    default_code = "invalid_payment_state"
    default_field = "status"
    default_message = "Only successful payments can be refunded."


class InvalidRefundAmount(DomainError):
    default_code = "invalid_refund_amount"
    default_field = "amount"
    default_message = "Refund amount must be positive and cannot exceed the payment amount."


class RefundDeclined(DomainError):
    """The gateway rejected the refund; the payment is left as it was."""

    status_code = status.HTTP_502_BAD_GATEWAY
    default_code = "refund_declined"
    default_message = "The refund could not be processed, please retry."
