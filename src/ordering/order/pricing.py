"""Order pricing — pure functions over order lines.

Every monetary figure on an order is derived here, so stored totals can always
be recomputed from the lines they describe. Amounts are whole currency units:
each charge is rounded half away from zero on its own before summing.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

SERVICE_CHARGE_RATE = Decimal("0.05")
TAX_RATE = Decimal("0.18")
DEFAULT_COMMISSION_RATE = 0.10


def _decimal(value) -> Decimal:
    return value if isinstance(value, Decimal) else Decimal(str(value))


def round_currency(amount) -> float:
    """Round to the integer currency unit, ties away from zero (2.5 -> 3, -2.5 -> -3)."""
    return float(_decimal(amount).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


@dataclass(frozen=True)
class Charges:
    subtotal: float
    service_charge: float
    tax: float
    grand_total: float


def lines_subtotal(lines: Iterable) -> float:
    """Sum of unit price x quantity. Accepts anything with those two attributes."""
    total = sum((_decimal(line.unit_price) * line.quantity for line in lines), Decimal("0"))
    return float(total)


def compute_charges(subtotal) -> Charges:
    subtotal = _decimal(subtotal)
    service_charge = round_currency(subtotal * SERVICE_CHARGE_RATE)
    tax = round_currency(subtotal * TAX_RATE)
    return Charges(
        subtotal=float(subtotal),
        service_charge=service_charge,
        tax=tax,
        grand_total=float(subtotal + _decimal(service_charge) + _decimal(tax)),
    )


def charges_for_lines(lines: Iterable) -> Charges:
    return compute_charges(lines_subtotal(lines))


def split_commission(grand_total, commission_rate) -> tuple[float, float]:
    """Return (platform_commission, transfer_amount); the pair always sums to grand_total."""
    commission = round_currency(_decimal(grand_total) * _decimal(commission_rate))
    return commission, float(_decimal(grand_total) - _decimal(commission))
