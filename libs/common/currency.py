"""Currency conversion utilities for the storefront.

Catalog prices are stored in major units (e.g. 19.99 = $19.99).
Orders, subscriptions and provider amounts use minor units (cents).

Conversion chain
----------------
Major × 100 → Minor (rounded half-up, never truncated)
Minor ÷ 100 → Major
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

MINOR_PER_MAJOR: int = 100


def to_minor_units(amount: float | Decimal | int) -> int:
    """Convert a major-unit amount to integer minor units. 19.99 → 1999."""
    value = Decimal(str(amount)) * MINOR_PER_MAJOR
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def to_major_units(minor: int) -> float:
    """Convert minor units to a major-unit amount. 1999 → 19.99."""
    return minor / MINOR_PER_MAJOR


def format_minor_units(minor: int) -> str:
    """Render minor units as a fixed two-decimal string for exports. 1999 → '19.99'."""
    return f"{Decimal(minor) / MINOR_PER_MAJOR:.2f}"


def round_minor(value: float | Decimal) -> int:
    """Round a computed minor-unit figure (e.g. an average) half-up to an int."""
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
