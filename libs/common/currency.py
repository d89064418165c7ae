"""Money helpers for the back office.

Unit: US dollars, held as ``Decimal`` and quantized to cents.

Form input arrives as text ("12.5"), travels to the API as a two-place
decimal string ("12.50") and is shown to staff as "$12.50".
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Optional, Union

# ─── constants ───────────────────────────────────────────────────────────────

CENT = Decimal("0.01")
CURRENCY_SYMBOL = "$"

Numeric = Union[str, int, float, Decimal, None]


# ─── conversion helpers ───────────────────────────────────────────────────────


def parse_decimal(value: Numeric) -> Optional[Decimal]:
    """Parse user or API input into a finite Decimal, or None if it isn't one."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, float):
        value = repr(value)
    try:
        parsed = Decimal(str(value).strip())
    except InvalidOperation:
        return None
    if not parsed.is_finite():
        return None
    return parsed


def to_cents(value: Decimal) -> Decimal:
    """Quantize to cents (round half-up)."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def to_decimal_string(value: Numeric) -> str:
    """Wire format for monetary amounts: ``"10" -> "10.00"``."""
    parsed = parse_decimal(value)
    if parsed is None:
        raise ValueError(f"Not a decimal amount: {value!r}")
    return str(to_cents(parsed))


def format_price(value: Numeric) -> str:
    """Display format: ``"1234.5" -> "$1,234.50"``; unparseable input shows as $0.00."""
    parsed = parse_decimal(value) or Decimal("0")
    cents = to_cents(parsed)
    sign = "-" if cents < 0 else ""
    return f"{sign}{CURRENCY_SYMBOL}{abs(cents):,.2f}"
