"""
Commission policy: the platform's cut of a transaction.

Amounts are integer cents. Rates are fractions in [0, 1). Rounding is
half-up to the nearest cent, done in Decimal from the rate's string form so
29900 * 0.085 = 2541.5 rounds to 2542 and never to 2541.
"""
import math
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from billing.exceptions import InvalidAmount, InvalidCommissionRate


@dataclass(frozen=True)
class CommissionSplit:
    gross: int
    fee: int
    net: int
    rate: Decimal


def validate_rate(rate) -> Decimal:
    """Return rate as a Decimal or raise InvalidCommissionRate if it is not in [0, 1)."""
    if isinstance(rate, bool) or rate is None:
        raise InvalidCommissionRate("Commission rate must be a number.")
    if isinstance(rate, float) and not math.isfinite(rate):
        raise InvalidCommissionRate("Commission rate must be a finite number.")
    try:
        value = Decimal(str(rate).strip())
    except (InvalidOperation, ValueError):
        raise InvalidCommissionRate("Commission rate must be a number.")
    if not value.is_finite():
        raise InvalidCommissionRate("Commission rate must be a finite number.")
    if value < 0 or value >= 1:
        raise InvalidCommissionRate("Commission rate must be between 0 (inclusive) and 1 (exclusive).")
    return value


def compute_fee(gross_amount_cents: int, rate) -> int:
    """
    Platform fee in cents for a gross amount in cents.

    Guarantees 0 <= fee <= gross_amount_cents and identical output for
    identical input (checkout retries depend on it).
    """
    if isinstance(gross_amount_cents, bool) or not isinstance(gross_amount_cents, int):
        raise InvalidAmount("Amount must be a whole number of cents.")
    if gross_amount_cents < 0:
        raise InvalidAmount("Amount cannot be negative.")
    rate_value = validate_rate(rate)
    fee = (Decimal(gross_amount_cents) * rate_value).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return int(fee)


def split_amount(gross_amount_cents: int, rate) -> CommissionSplit:
    """Fee and mentor net for a gross amount; net is always gross - fee."""
    fee = compute_fee(gross_amount_cents, rate)
    return CommissionSplit(
        gross=gross_amount_cents,
        fee=fee,
        net=gross_amount_cents - fee,
        rate=validate_rate(rate),
    )
