"""
Net Worth Calculation

Turns a set of accounts with balances in many currencies into one
display-currency summary.

CRITICAL: An account whose currency has no rate path is NEVER dropped.
Its unconverted magnitude is counted instead and a warning is logged,
so totals stay complete (if approximate) when a rate is missing.
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Iterable, Optional

import structlog

from account_aggregator.currency.conversion import convert_or_original
from account_aggregator.models.account import Account, NetWorthSummary, NetWorthTrend
from account_aggregator.models.rates import ExchangeRateTable, normalize_currency

logger = structlog.get_logger(__name__)


def converted_balance(
    account: Account,
    display_currency: str,
    rate_table: ExchangeRateTable,
) -> Decimal:
    """
    Signed `have` of an account in the display currency.

    Falls back to the unconverted amount when no rate path exists.
    """
    native = account.native_currency(display_currency)
    amount, converted = convert_or_original(
        account.have,
        native,
        display_currency,
        rate_table,
    )
    if not converted:
        logger.warning(
            "conversion_rate_missing",
            account_id=account.id,
            from_currency=native,
            to_currency=normalize_currency(display_currency),
        )
    return amount


def compute_net_worth(
    accounts: Iterable[Account],
    display_currency: str,
    rate_table: ExchangeRateTable,
    as_of: Optional[datetime] = None,
) -> NetWorthSummary:
    """
    Total assets, liabilities and net worth in `display_currency`.

    Only active accounts (not deactivated, not deleted) count. The sign
    of `have` decides the side; both totals are non-negative.

    Args:
        accounts: Accounts from one aggregate snapshot
        display_currency: Currency every balance is converted into
        rate_table: Rates valid for this aggregation cycle
        as_of: Summary timestamp. Defaults to the rate table's timestamp,
               then to now (UTC).
    """
    currency = normalize_currency(display_currency)
    total_assets = Decimal("0")
    total_liabilities = Decimal("0")

    for account in accounts:
        if not account.is_active:
            continue

        magnitude = abs(converted_balance(account, currency, rate_table))
        if account.is_liability:
            total_liabilities += magnitude
        else:
            total_assets += magnitude

    timestamp = as_of or rate_table.timestamp or datetime.now(timezone.utc)

    return NetWorthSummary(
        total_assets=total_assets,
        total_liabilities=total_liabilities,
        net_worth=total_assets - total_liabilities,
        currency=currency,
        timestamp=timestamp,
    )


def net_worth_trend(current: Decimal, previous: Decimal) -> NetWorthTrend:
    """
    Change between two net worth readings.

    The percentage is relative to the magnitude of `previous` and is 0
    when there is no previous value to compare against.
    """
    current = Decimal(str(current))
    previous = Decimal(str(previous))
    change = current - previous

    if previous != 0:
        change_percentage = float(change / abs(previous) * 100)
    else:
        change_percentage = 0.0

    if change > 0:
        trending = "up"
    elif change < 0:
        trending = "down"
    else:
        trending = "flat"

    return NetWorthTrend(
        change=change,
        change_percentage=change_percentage,
        trending=trending,
    )
