"""Rental pricing and completion settlement.

All arithmetic is done on ``Decimal`` and quantized to cents with ROUND_HALF_UP.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from .exceptions import InvalidChargeAmount, InvalidDateRange

_CENT = Decimal("0.01")
MIN_CHARGED_DAYS = 1


def q2(value: Decimal) -> Decimal:
    return value.quantize(_CENT, rounding=ROUND_HALF_UP)


def to_money(value: object, default: str | Decimal = "0") -> Decimal:
    """Coerce ints, strings and Decimals to a cent-quantized Decimal."""
    if value is None:
        value = default
    if isinstance(value, float):
        # Go through str() so 0.1 becomes Decimal("0.1"), not its binary expansion.
        value = str(value)
    try:
        amount = Decimal(value)
    except (InvalidOperation, TypeError, ValueError) as exc:
        raise InvalidChargeAmount(f"Invalid amount: {value!r}") from exc
    if not amount.is_finite():
        raise InvalidChargeAmount(f"Invalid amount: {value!r}")
    return q2(amount)


def charged_days(start: datetime, end: datetime) -> int:
    """
    Whole days between start and end, rounded down.

    Anything shorter than a full day is charged as one day.
    """
    if end <= start:
        raise InvalidDateRange("End date must be after start date.", field="end_date")
    days = (end - start).days
    return max(days, MIN_CHARGED_DAYS)


def compute_total(daily_rate: Decimal, start: datetime, end: datetime) -> Decimal:
    """Return daily_rate * charged days."""
    rate = to_money(daily_rate)
    return q2(rate * charged_days(start, end))


@dataclass(frozen=True)
class Settlement:
    """Amounts recorded when a booking completes.

    ``final_amount`` is reported for later collection; the booking's
    ``total_amount`` is never changed by a settlement.
    """

    base_amount: Decimal
    late_fee: Decimal
    damage_charges: Decimal

    @property
    def extra_charges(self) -> Decimal:
        return q2(self.late_fee + self.damage_charges)

    @property
    def final_amount(self) -> Decimal:
        return q2(self.base_amount + self.late_fee + self.damage_charges)

    def as_dict(self) -> dict[str, str]:
        return {
            "base_amount": str(self.base_amount),
            "late_fee": str(self.late_fee),
            "damage_charges": str(self.damage_charges),
            "extra_charges": str(self.extra_charges),
            "final_amount": str(self.final_amount),
        }


def compute_settlement(
    base_amount: Decimal,
    late_fee: Decimal | None = None,
    damage_charges: Decimal | None = None,
) -> Settlement:
    late = to_money(late_fee)
    damage = to_money(damage_charges)
    if late < 0:
        raise InvalidChargeAmount("Late fee cannot be negative.", field="late_fee")
    if damage < 0:
        raise InvalidChargeAmount("Damage charges cannot be negative.", field="damage_charges")
    return Settlement(base_amount=to_money(base_amount), late_fee=late, damage_charges=damage)
