"""
Money Formatting

Renders amounts as display strings using each currency's canonical
precision (ISO minor units) and catalog symbol.

Rules:
- sign only when negative, never an explicit "+"
- thousands separators
- multi-letter symbols (CHF, kr, lei) are separated by a space
- a missing amount renders as an em dash
"""

import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Optional, Union

from account_aggregator.currency.catalog import get_currency_symbol, minor_units

Number = Union[Decimal, int, float]

MISSING_AMOUNT = "—"


def _quantize(value: Decimal, places: int) -> Decimal:
    exponent = Decimal(1).scaleb(-places)
    return value.quantize(exponent, rounding=ROUND_HALF_UP)


def _needs_space(symbol: str) -> bool:
    return len(symbol) > 1 and symbol.isalpha()


def format_money(amount: Optional[Number], currency_code: str) -> str:
    """
    Format an amount for display.

    >>> format_money(Decimal("-1234.5"), "USD")
    '-$1,234.50'
    >>> format_money(1500, "JPY")
    '¥1,500'
    """
    if amount is None:
        return MISSING_AMOUNT

    value = amount if isinstance(amount, Decimal) else Decimal(str(amount))
    places = minor_units(currency_code)
    rounded = _quantize(value, places)
    symbol = get_currency_symbol(currency_code)

    body = f"{abs(rounded):,.{places}f}"
    prefix = f"{symbol} " if _needs_space(symbol) else symbol
    sign = "-" if rounded < 0 else ""
    return f"{sign}{prefix}{body}"


def format_money_compact(amount: Optional[Number], currency_code: str) -> str:
    """
    Compact form for tight layouts: 1.2K, 3.5M, 2B.

    Amounts under a thousand fall back to `format_money`.
    """
    if not amount:
        return "0"

    value = amount if isinstance(amount, Decimal) else Decimal(str(amount))
    magnitude = abs(value)

    if magnitude >= Decimal("1e9"):
        scaled, suffix = value / Decimal("1e9"), "B"
    elif magnitude >= Decimal("1e6"):
        scaled, suffix = value / Decimal("1e6"), "M"
    elif magnitude >= Decimal("1e3"):
        scaled, suffix = value / Decimal("1e3"), "K"
    else:
        return format_money(value, currency_code)

    if abs(scaled) >= 100:
        decimals = 0
    elif abs(scaled) >= 10:
        decimals = 0 if scaled % 1 == 0 else 1
    else:
        decimals = 0 if scaled % 1 == 0 else 2

    return f"{_quantize(scaled, decimals):.{decimals}f}{suffix}"


def parse_money(text: Optional[str]) -> Decimal:
    """Parse a formatted amount back to a number; unparseable input is 0."""
    if not text:
        return Decimal("0")
    cleaned = re.sub(r"[^\d.\-]", "", text)
    try:
        return Decimal(cleaned)
    except InvalidOperation:
        return Decimal("0")


def format_percentage(value: float, decimals: int = 1) -> str:
    return f"{value:.{decimals}f}%"


def calculate_percentage(value: Number, total: Number) -> float:
    """Share of `value` in `total` as a percentage; 0 for an empty total."""
    if not total:
        return 0.0
    return float(value) / float(total) * 100
