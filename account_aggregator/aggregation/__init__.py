"""Net worth and account grouping."""

from account_aggregator.aggregation.grouping import (
    ACCOUNT_GROUPS,
    GroupDefinition,
    assets_by_type,
    group_accounts,
    group_icon,
    liabilities_by_type,
    resolve_group_name,
)
from account_aggregator.aggregation.networth import (
    compute_net_worth,
    converted_balance,
    net_worth_trend,
)

__all__ = [
    # Net worth
    "compute_net_worth",
    "converted_balance",
    "net_worth_trend",
    # Grouping
    "ACCOUNT_GROUPS",
    "GroupDefinition",
    "assets_by_type",
    "group_accounts",
    "group_icon",
    "liabilities_by_type",
    "resolve_group_name",
]
