"""
Payment gateway seam.

``payments.services`` talks to whatever class ``settings.PAYMENT_GATEWAY_CLASS``
points at. The default implementation simulates a card processor with
per-method success rates; nothing here moves real money.
"""

from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass
from decimal import Decimal

from django.conf import settings
from django.utils.module_loading import import_string

logger = logging.getLogger(__name__)

DEFAULT_RATE_KEY = "DEFAULT"
REFUND_RATE_KEY = "REFUND"
DEFAULT_SUCCESS_RATES = {
    "CREDIT_CARD": 0.90,
    "UPI": 0.95,
    DEFAULT_RATE_KEY: 0.85,
    REFUND_RATE_KEY: 0.98,
}

CHARGE_SUCCESS_MESSAGE = "Payment successful"
CHARGE_FAILURE_MESSAGE = "Payment failed - insufficient funds or invalid card details"
REFUND_SUCCESS_MESSAGE = "Refund successful"
REFUND_FAILURE_MESSAGE = "Refund rejected by the payment gateway"


@dataclass(frozen=True)
class GatewayResult:
    success: bool
    message: str
    reference: str = ""


class PaymentGateway:
    """Interface every gateway implementation provides."""

    def charge(self, payment) -> GatewayResult:
        raise NotImplementedError

    def refund(self, payment, amount: Decimal) -> GatewayResult:
        raise NotImplementedError


class SimulatedPaymentGateway(PaymentGateway):
    def __init__(
        self,
        rng: random.Random | None = None,
        success_rates: dict[str, float] | None = None,
    ):
        self.rng = rng or random.Random()
        rates = dict(DEFAULT_SUCCESS_RATES)
        rates.update(success_rates or getattr(settings, "PAYMENT_SUCCESS_RATES", {}) or {})
        self.success_rates = rates

    def _rate_for(self, key: str) -> float:
        return float(self.success_rates.get(key, self.success_rates[DEFAULT_RATE_KEY]))

    def _reference(self) -> str:
        return f"GW{time.time_ns() // 1_000_000}"

    def charge(self, payment) -> GatewayResult:
        if self.rng.random() < self._rate_for(payment.payment_method):
            return GatewayResult(True, CHARGE_SUCCESS_MESSAGE, self._reference())
        logger.info(
            "gateway: simulated decline for %s via %s",
            payment.transaction_id,
            payment.payment_method,
        )
        return GatewayResult(False, CHARGE_FAILURE_MESSAGE)

    def refund(self, payment, amount: Decimal) -> GatewayResult:
        if self.rng.random() < self._rate_for(REFUND_RATE_KEY):
            return GatewayResult(True, REFUND_SUCCESS_MESSAGE, self._reference())
        return GatewayResult(False, REFUND_FAILURE_MESSAGE)


def get_payment_gateway() -> PaymentGateway:
    """Instantiate the gateway configured in settings."""
    gateway_class = import_string(settings.PAYMENT_GATEWAY_CLASS)
    return gateway_class()
