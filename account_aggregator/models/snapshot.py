"""
Aggregate Snapshot

The full set of a customer's accounts, providers and exchange rates as
of one backend fetch. Fetching it is the backend client's job; the
engine receives the already-decoded JSON.
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from account_aggregator.models.account import Account
from account_aggregator.models.provider import Provider
from account_aggregator.models.rates import ExchangeRateTable


class AggregateSnapshot(BaseModel):
    """
    One aggregate fetch.

    `exchange_rates` is kept in its raw shape (the backend list of
    {currency, rate, date} records, or a mapping keyed by currency code
    or currency pair) and turned into an `ExchangeRateTable` on demand.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    accounts: list[Account] = Field(default_factory=list)
    service_providers: list[Provider] = Field(default_factory=list)
    exchange_rates: Any = None
    timestamp: Optional[datetime] = None

    @field_validator("accounts", "service_providers", mode="before")
    @classmethod
    def default_lists(cls, v: Any) -> Any:
        return [] if v is None else v

    def rate_table(self) -> ExchangeRateTable:
        """Rate table valid for this snapshot."""
        return ExchangeRateTable.from_snapshot_value(
            self.exchange_rates,
            timestamp=self.timestamp,
        )

    @property
    def active_accounts(self) -> list[Account]:
        return [account for account in self.accounts if account.is_active]
