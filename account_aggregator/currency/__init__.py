"""Currency conversion and formatting package."""

from account_aggregator.currency.catalog import (
    COMMON_CURRENCIES,
    Currency,
    get_currency,
    get_currency_symbol,
    minor_units,
)
from account_aggregator.currency.conversion import (
    convert,
    convert_money,
    convert_or_original,
    find_rate,
)
from account_aggregator.currency.formatting import (
    MISSING_AMOUNT,
    calculate_percentage,
    format_money,
    format_money_compact,
    format_percentage,
    parse_money,
)

__all__ = [
    # Catalog
    "COMMON_CURRENCIES",
    "Currency",
    "get_currency",
    "get_currency_symbol",
    "minor_units",
    # Conversion
    "convert",
    "convert_money",
    "convert_or_original",
    "find_rate",
    # Formatting
    "MISSING_AMOUNT",
    "calculate_percentage",
    "format_money",
    "format_money_compact",
    "format_percentage",
    "parse_money",
]
