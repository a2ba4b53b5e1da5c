"""
Currency Catalog

Fallback list of common world currencies with display symbols and
ISO 4217 minor units. Used when the backend does not send a
`supportedCurrencies` list, and for formatting precision.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Currency(BaseModel):
    """A display currency."""
    model_config = ConfigDict(frozen=True)

    code: str = Field(..., min_length=3, max_length=3)
    name: str
    symbol: str
    minor_units: int = Field(default=2, ge=0, le=8)


COMMON_CURRENCIES: tuple[Currency, ...] = (
    # Major world currencies
    Currency(code="USD", name="US Dollar", symbol="$"),
    Currency(code="EUR", name="Euro", symbol="€"),
    Currency(code="GBP", name="British Pound", symbol="£"),
    Currency(code="JPY", name="Japanese Yen", symbol="¥", minor_units=0),
    Currency(code="CNY", name="Chinese Yuan", symbol="¥"),

    # Middle East & Africa
    Currency(code="AED", name="UAE Dirham", symbol="د.إ"),
    Currency(code="SAR", name="Saudi Riyal", symbol="﷼"),
    Currency(code="ZAR", name="South African Rand", symbol="R"),
    Currency(code="EGP", name="Egyptian Pound", symbol="£"),
    Currency(code="KWD", name="Kuwaiti Dinar", symbol="د.ك", minor_units=3),
    Currency(code="QAR", name="Qatari Riyal", symbol="﷼"),
    Currency(code="BHD", name="Bahraini Dinar", symbol=".د.ب", minor_units=3),
    Currency(code="OMR", name="Omani Rial", symbol="﷼", minor_units=3),
    Currency(code="JOD", name="Jordanian Dinar", symbol="د.ا", minor_units=3),

    # Europe
    Currency(code="CHF", name="Swiss Franc", symbol="CHF"),
    Currency(code="SEK", name="Swedish Krona", symbol="kr"),
    Currency(code="NOK", name="Norwegian Krone", symbol="kr"),
    Currency(code="DKK", name="Danish Krone", symbol="kr"),
    Currency(code="PLN", name="Polish Zloty", symbol="zł"),
    Currency(code="CZK", name="Czech Koruna", symbol="Kč"),
    Currency(code="HUF", name="Hungarian Forint", symbol="Ft"),
    Currency(code="RON", name="Romanian Leu", symbol="lei"),
    Currency(code="RUB", name="Russian Ruble", symbol="₽"),
    Currency(code="TRY", name="Turkish Lira", symbol="₺"),

    # Americas
    Currency(code="CAD", name="Canadian Dollar", symbol="C$"),
    Currency(code="MXN", name="Mexican Peso", symbol="$"),
    Currency(code="BRL", name="Brazilian Real", symbol="R$"),
    Currency(code="ARS", name="Argentine Peso", symbol="$"),
    Currency(code="CLP", name="Chilean Peso", symbol="$", minor_units=0),
    Currency(code="COP", name="Colombian Peso", symbol="$"),

    # Asia Pacific
    Currency(code="AUD", name="Australian Dollar", symbol="A$"),
    Currency(code="NZD", name="New Zealand Dollar", symbol="NZ$"),
    Currency(code="INR", name="Indian Rupee", symbol="₹"),
    Currency(code="SGD", name="Singapore Dollar", symbol="S$"),
    Currency(code="HKD", name="Hong Kong Dollar", symbol="HK$"),
    Currency(code="KRW", name="South Korean Won", symbol="₩", minor_units=0),
    Currency(code="THB", name="Thai Baht", symbol="฿"),
    Currency(code="MYR", name="Malaysian Ringgit", symbol="RM"),
    Currency(code="IDR", name="Indonesian Rupiah", symbol="Rp"),
    Currency(code="PHP", name="Philippine Peso", symbol="₱"),
    Currency(code="VND", name="Vietnamese Dong", symbol="₫", minor_units=0),
    Currency(code="PKR", name="Pakistani Rupee", symbol="₨"),
    Currency(code="BDT", name="Bangladeshi Taka", symbol="৳"),

    # Cryptocurrencies
    Currency(code="BTC", name="Bitcoin", symbol="₿", minor_units=8),
    Currency(code="ETH", name="Ethereum", symbol="Ξ", minor_units=8),
)

_BY_CODE: dict[str, Currency] = {c.code: c for c in COMMON_CURRENCIES}

# ISO 4217 currencies without a catalog entry that still deviate from 2 minor units
_EXTRA_MINOR_UNITS: dict[str, int] = {
    "BIF": 0, "DJF": 0, "GNF": 0, "ISK": 0, "KMF": 0, "PYG": 0,
    "RWF": 0, "UGX": 0, "UYI": 0, "VUV": 0, "XAF": 0, "XOF": 0, "XPF": 0,
    "IQD": 3, "LYD": 3, "TND": 3,
}


def get_currency(code: str) -> Optional[Currency]:
    """Look up a catalog currency by code (case-insensitive)."""
    if not code:
        return None
    return _BY_CODE.get(code.strip().upper())


def get_currency_symbol(code: str) -> str:
    """Display symbol for a currency, falling back to the code itself."""
    currency = get_currency(code)
    if currency is not None:
        return currency.symbol
    return (code or "").strip().upper()


def minor_units(code: str) -> int:
    """Number of decimal places the currency is displayed with."""
    currency = get_currency(code)
    if currency is not None:
        return currency.minor_units
    return _EXTRA_MINOR_UNITS.get((code or "").strip().upper(), 2)
