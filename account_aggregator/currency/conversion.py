"""
Currency Conversion

Pure functions converting amounts between currencies using an
`ExchangeRateTable`.

IMPORTANT: A missing rate path is NOT an error. `convert` returns None
and every caller falls back to the unconverted amount, so an account
never disappears from a total because a rate is missing.
"""

from decimal import Decimal, InvalidOperation
from typing import Optional, Union

from account_aggregator.models.account import Money
from account_aggregator.models.rates import ExchangeRateTable, normalize_currency

Number = Union[Decimal, int, float, str]


def _as_decimal(amount: Number) -> Decimal:
    if isinstance(amount, Decimal):
        return amount
    return Decimal(str(amount))


def find_rate(
    from_currency: str,
    to_currency: str,
    rate_table: ExchangeRateTable,
) -> Optional[Decimal]:
    """
    Conversion factor from one currency to another, or None.

    Lookup order:
    1. direct pair rate
    2. inverse of the opposite pair rate (1/rate)
    3. cross rate through the table's base-relative rates
    """
    source = normalize_currency(from_currency)
    target = normalize_currency(to_currency)
    if source == target:
        return Decimal("1")

    direct = rate_table.direct_rate(source, target)
    if direct is not None:
        return direct

    inverse = rate_table.direct_rate(target, source)
    if inverse is not None and inverse != 0:
        return Decimal("1") / inverse

    from_base = rate_table.base_rate(source)
    to_base = rate_table.base_rate(target)
    if from_base is not None and to_base is not None and from_base != 0:
        return to_base / from_base

    return None


def convert(
    amount: Number,
    from_currency: str,
    to_currency: str,
    rate_table: ExchangeRateTable,
) -> Optional[Decimal]:
    """
    Convert `amount` from one currency to another.

    Returns the amount unchanged for the same currency (case-insensitive),
    0 for a zero amount, and None when no rate path exists.
    """
    try:
        value = _as_decimal(amount)
    except (InvalidOperation, ValueError):
        return None

    if normalize_currency(from_currency) == normalize_currency(to_currency):
        return value
    if value == 0:
        return Decimal("0")

    rate = find_rate(from_currency, to_currency, rate_table)
    if rate is None:
        return None
    return value * rate


def convert_or_original(
    amount: Number,
    from_currency: str,
    to_currency: str,
    rate_table: ExchangeRateTable,
) -> tuple[Decimal, bool]:
    """
    Convert, falling back to the unconverted amount.

    Returns (amount, converted) where `converted` is False on a miss.
    """
    converted = convert(amount, from_currency, to_currency, rate_table)
    if converted is None:
        return _as_decimal(amount), False
    return converted, True


def convert_money(
    money: Optional[Money],
    to_currency: str,
    rate_table: ExchangeRateTable,
) -> Optional[Money]:
    """Convert a Money value, keeping its debit/credit orientation."""
    if money is None or not money.currency_code:
        return None

    amount = convert(money.amount, money.currency_code, to_currency, rate_table)
    if amount is None:
        return None

    return Money(
        amount=amount,
        currency_code=normalize_currency(to_currency),
        debit_or_credit=money.debit_or_credit,
    )
