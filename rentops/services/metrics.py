"""Revenue and occupancy ratios: ADR, RevPAR, occupancy rate.

All functions take non-negative inputs and return ``Decimal``; a zero
denominator yields zero instead of raising.
"""

from decimal import ROUND_HALF_UP, Decimal

ZERO = Decimal("0")
_CENT = Decimal("0.01")
_TENTH = Decimal("0.1")


def adr(total_revenue: Decimal, occupied_days: int) -> Decimal:
    """Average daily rate: revenue per occupied day."""
    if occupied_days <= 0:
        return ZERO
    return Decimal(total_revenue) / Decimal(occupied_days)


def rev_par(total_revenue: Decimal, total_days: int) -> Decimal:
    """Revenue per available day (occupied + vacant)."""
    if total_days <= 0:
        return ZERO
    return Decimal(total_revenue) / Decimal(total_days)


def occupancy_rate(occupied_days: int, total_days: int) -> Decimal:
    """Occupied share of available days as a percentage (0–100)."""
    if total_days <= 0:
        return ZERO
    return Decimal(occupied_days * 100) / Decimal(total_days)


def round_money(value: Decimal) -> Decimal:
    return Decimal(value).quantize(_CENT, rounding=ROUND_HALF_UP)


def round_rate(value: Decimal) -> Decimal:
    return Decimal(value).quantize(_TENTH, rounding=ROUND_HALF_UP)
