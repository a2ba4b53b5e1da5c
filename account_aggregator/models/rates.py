"""
Exchange Rate Table

A read-only lookup of conversion factors, supplied by the backend as
part of an aggregate snapshot. Two kinds of rate are supported:

- pair rates: (FROM, TO) -> units of TO per 1 unit of FROM
- base rates: CODE -> units of CODE per 1 unit of the base currency,
  which is how the backend ships its `exchangeRates` list

The table is immutable within one aggregation cycle.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Mapping, Optional

import structlog

logger = structlog.get_logger(__name__)


def normalize_currency(code: str) -> str:
    """Upper-case, whitespace-stripped currency code."""
    return str(code).strip().upper()


def _to_decimal(value: Any) -> Optional[Decimal]:
    if value is None or isinstance(value, bool):
        return None
    try:
        result = Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        return None
    if not result.is_finite():
        return None
    return result


def _parse_date(value: Any) -> Optional[date]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00")).date()
    except ValueError:
        return None


def _split_pair_key(key: Any) -> Optional[tuple[str, str]]:
    if isinstance(key, tuple) and len(key) == 2:
        return normalize_currency(key[0]), normalize_currency(key[1])
    if isinstance(key, str):
        for separator in ("/", ":", "-", "_"):
            if separator in key:
                source, _, target = key.partition(separator)
                if source and target:
                    return normalize_currency(source), normalize_currency(target)
    return None


def _single_code_key(key: Any) -> Optional[str]:
    if isinstance(key, str) and key.strip().isalnum():
        return normalize_currency(key)
    return None


@dataclass(frozen=True)
class ExchangeRateTable:
    """
    Immutable rate lookup.

    Use `from_pairs` for a pair- or code-keyed mapping and `from_records`
    for the backend's base-relative `exchangeRates` list.
    """

    pair_rates: Mapping[tuple[str, str], Decimal] = field(default_factory=dict)
    base_rates: Mapping[str, Decimal] = field(default_factory=dict)
    base_currency: Optional[str] = None
    timestamp: Optional[datetime] = None

    def __post_init__(self) -> None:
        pairs = {
            (normalize_currency(source), normalize_currency(target)): _to_decimal(rate)
            for (source, target), rate in dict(self.pair_rates).items()
            if _to_decimal(rate) is not None
        }
        bases = {
            normalize_currency(code): _to_decimal(rate)
            for code, rate in dict(self.base_rates).items()
            if _to_decimal(rate) is not None
        }
        base = normalize_currency(self.base_currency) if self.base_currency else None
        if base and base not in bases:
            bases[base] = Decimal("1")
        object.__setattr__(self, "pair_rates", pairs)
        object.__setattr__(self, "base_rates", bases)
        object.__setattr__(self, "base_currency", base)

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------

    @classmethod
    def empty(cls) -> "ExchangeRateTable":
        return cls()

    @classmethod
    def from_pairs(
        cls,
        rates: Mapping[Any, Any],
        timestamp: Optional[datetime] = None,
    ) -> "ExchangeRateTable":
        """
        Build a table from a rate mapping.

        Keys may be ("AED", "USD") tuples or "AED/USD" strings for pair
        rates, or a bare code like "AED" for a base-relative rate. A
        mapping may mix both. Unparseable keys and non-numeric rates are
        skipped.
        """
        pairs: dict[tuple[str, str], Decimal] = {}
        bases: dict[str, Decimal] = {}
        for key, value in rates.items():
            rate = _to_decimal(value)
            pair = _split_pair_key(key)
            code = None if pair is not None else _single_code_key(key)
            if rate is None or (pair is None and code is None):
                logger.warning("exchange_rate_skipped", key=str(key), rate=str(value))
                continue
            if pair is not None:
                pairs[pair] = rate
            else:
                bases[code] = rate
        return cls(pair_rates=pairs, base_rates=bases, timestamp=timestamp)

    @classmethod
    def from_records(
        cls,
        records: Iterable[Mapping[str, Any]],
        as_of: Optional[date | datetime | str] = None,
        base_currency: Optional[str] = None,
        timestamp: Optional[datetime] = None,
    ) -> "ExchangeRateTable":
        """
        Build a table from the backend's `exchangeRates` list.

        Each record looks like {"currency": "AED", "rate": 3.67, "date": "..."}.
        When `as_of` is a past date only rates dated exactly that day are
        used. Otherwise the most recent rate per currency wins.
        """
        target = _parse_date(as_of) if as_of is not None else None
        today = datetime.now(timezone.utc).date()
        historical = target is not None and target < today

        latest: dict[str, tuple[Optional[date], Decimal]] = {}
        for record in records:
            code = record.get("currency") or record.get("currencyCode")
            rate = _to_decimal(record.get("rate"))
            if not code or rate is None:
                continue
            code = normalize_currency(code)
            rate_date = _parse_date(record.get("date"))
            if historical and rate_date != target:
                continue
            current = latest.get(code)
            if current is None or (
                rate_date is not None
                and (current[0] is None or rate_date > current[0])
            ):
                latest[code] = (rate_date, rate)

        return cls(
            base_rates={code: rate for code, (_, rate) in latest.items()},
            base_currency=base_currency,
            timestamp=timestamp,
        )

    @classmethod
    def from_snapshot_value(
        cls,
        value: Any,
        timestamp: Optional[datetime] = None,
    ) -> "ExchangeRateTable":
        """Accept whichever rate shape a snapshot carries."""
        if isinstance(value, ExchangeRateTable):
            return value
        if value is None:
            return cls(timestamp=timestamp)
        if isinstance(value, Mapping):
            return cls.from_pairs(value, timestamp=timestamp)
        return cls.from_records(value, timestamp=timestamp)

    # -------------------------------------------------------------------------
    # Lookup
    # -------------------------------------------------------------------------

    def direct_rate(self, source: str, target: str) -> Optional[Decimal]:
        return self.pair_rates.get((normalize_currency(source), normalize_currency(target)))

    def base_rate(self, code: str) -> Optional[Decimal]:
        return self.base_rates.get(normalize_currency(code))

    @property
    def currencies(self) -> set[str]:
        codes = set(self.base_rates)
        for source, target in self.pair_rates:
            codes.add(source)
            codes.add(target)
        return codes
