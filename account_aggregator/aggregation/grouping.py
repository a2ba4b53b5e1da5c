"""
Account Grouping

Sorts accounts into the fixed set of semantic groups shown on the
accounts page (Bank, Credit, Investments, ...) and totals each group in
the display currency.

CRITICAL: Grouping filters accounts exactly like `compute_net_worth`
and converts them through the same `converted_balance`, so the group
totals always add up to the net worth of the same accounts.

Group resolution, first match wins:
1. investment class or manual investment type   -> Investments
2. rewards class or manual reward type          -> Rewards
3. crypto account                               -> Crypto
4. manual account with a manualAccountType      -> manual type table
5. account class table                          -> class table
6. anything else                                -> Something else
"""

from collections import defaultdict
from decimal import Decimal
from typing import Iterable, NamedTuple, Optional

from account_aggregator.aggregation.networth import converted_balance
from account_aggregator.classification.icons import is_crypto_account
from account_aggregator.currency.formatting import calculate_percentage
from account_aggregator.models.account import (
    Account,
    AccountClass,
    AccountGroup,
    TypeBreakdown,
)
from account_aggregator.models.rates import ExchangeRateTable, normalize_currency


class GroupDefinition(NamedTuple):
    name: str
    icon_path: str
    sort_order: int


SOMETHING_ELSE = "Something else"

# Display order of the accounts page
ACCOUNT_GROUPS: tuple[GroupDefinition, ...] = (
    GroupDefinition("Bank", "bank", 0),
    GroupDefinition("Credit", "credit", 1),
    GroupDefinition("Investments", "investments", 2),
    GroupDefinition("Crypto", "cryptocurrency", 3),
    GroupDefinition("Loans", "loans", 4),
    GroupDefinition("Home loan", "home_loan", 5),
    GroupDefinition("Vehicle loans", "vehicle_loans", 6),
    GroupDefinition("Home", "home", 7),
    GroupDefinition("Real estate", "property", 8),
    GroupDefinition("Rewards", "rewards", 9),
    GroupDefinition("Vehicles", "vehicles", 10),
    GroupDefinition(SOMETHING_ELSE, "other", 11),
)

_GROUPS_BY_NAME = {group.name: group for group in ACCOUNT_GROUPS}

# Compared case-insensitively against accountClass
INVESTMENT_CLASSES = frozenset({
    "investment",
    "unittrust",
    "ominvestment",
    "wealth",
    "wealthproduct",
})
INVESTMENT_MANUAL_TYPES = frozenset({"Investment", "WealthProducts"})
REWARD_MANUAL_TYPES = frozenset({"Reward", "Rewards"})

MANUAL_TYPE_GROUPS: dict[str, str] = {
    "Bank": "Bank",
    "Savings": "Bank",
    "Cash": "Bank",
    "Deposits": "Bank",
    "CreditCard": "Credit",
    "StoreCard": "Credit",
    "Investment": "Investments",
    "WealthProducts": "Investments",
    "Crypto": "Crypto",
    "Loan": "Loans",
    "HomeLoan": "Home loan",
    "VehicleLoan": "Vehicle loans",
    "Home": "Home",
    "RealEstate": "Real estate",
    "Vehicle": "Vehicles",
    "Rewards": "Rewards",
    "Reward": "Rewards",
}

ACCOUNT_CLASS_GROUPS: dict[str, str] = {
    "Bank": "Bank",
    "Credit Card": "Credit",
    "CreditCard": "Credit",
    "Reward": "Rewards",
    "Rewards": "Rewards",
    "Loan": "Loans",
    "Mortgage": "Home loan",
    "Investment": "Investments",
    "UnitTrust": "Investments",
    "OMInvestment": "Investments",
    "Wealth": "Investments",
    "WealthProduct": "Investments",
    "WealthProducts": "Investments",
    "Crypto": "Crypto",
    "Wallet": SOMETHING_ELSE,
}

# Goal-backed and other investment-like classes the table does not name
INVESTMENT_CLASS_HINTS = ("goal", "invest", "wealth")


# =============================================================================
# GROUP RESOLUTION
# =============================================================================

def _is_manual(account: Account) -> bool:
    return account.account_class == AccountClass.MANUAL.value


def _is_investment(account: Account) -> bool:
    if account.account_class.lower() in INVESTMENT_CLASSES:
        return True
    return account.manual_account_type in INVESTMENT_MANUAL_TYPES


def _is_reward(account: Account) -> bool:
    if account.account_class == AccountClass.REWARDS.value:
        return True
    return _is_manual(account) and account.manual_account_type in REWARD_MANUAL_TYPES


def group_for_account_class(account_class: str) -> Optional[str]:
    """Group of a non-manual account class, or None if the class says nothing."""
    if not account_class or account_class == AccountClass.MANUAL.value:
        return None
    if account_class in ACCOUNT_CLASS_GROUPS:
        return ACCOUNT_CLASS_GROUPS[account_class]

    lowered = account_class.lower()
    if any(hint in lowered for hint in INVESTMENT_CLASS_HINTS):
        return "Investments"
    return None


def group_for_manual_type(manual_account_type: str) -> str:
    return MANUAL_TYPE_GROUPS.get(manual_account_type, SOMETHING_ELSE)


def resolve_group_name(account: Account) -> str:
    """Name of the group an account belongs to."""
    if _is_investment(account):
        return "Investments"
    if _is_reward(account):
        return "Rewards"
    if is_crypto_account(account):
        return "Crypto"
    if _is_manual(account) and account.manual_account_type:
        return group_for_manual_type(account.manual_account_type)
    return group_for_account_class(account.account_class) or SOMETHING_ELSE


# =============================================================================
# GROUPING
# =============================================================================

def group_accounts(
    accounts: Iterable[Account],
    rate_table: ExchangeRateTable,
    display_currency: str,
) -> list[AccountGroup]:
    """
    Group active accounts and total each group in `display_currency`.

    Group totals are signed: liabilities reduce them. Empty groups are
    omitted and the rest come back in display order. Accounts keep their
    input order within a group. The same input always yields the same
    groups.
    """
    currency = normalize_currency(display_currency)
    members: dict[str, list[Account]] = defaultdict(list)
    totals: dict[str, Decimal] = defaultdict(Decimal)

    for account in accounts:
        if not account.is_active:
            continue
        name = resolve_group_name(account)
        members[name].append(account)
        totals[name] += converted_balance(account, currency, rate_table)

    return [
        AccountGroup(
            name=group.name,
            icon_path=group.icon_path,
            sort_order=group.sort_order,
            accounts=tuple(members[group.name]),
            total=totals[group.name],
            currency=currency,
        )
        for group in ACCOUNT_GROUPS
        if members.get(group.name)
    ]


def group_icon(group_name: str) -> str:
    """Icon of a group by name; unknown names get the catch-all icon."""
    group = _GROUPS_BY_NAME.get(group_name, _GROUPS_BY_NAME[SOMETHING_ELSE])
    return group.icon_path


# =============================================================================
# BREAKDOWNS
# =============================================================================

def _breakdown(
    accounts: Iterable[Account],
    rate_table: ExchangeRateTable,
    display_currency: str,
    liabilities: bool,
) -> list[TypeBreakdown]:
    currency = normalize_currency(display_currency)
    values: dict[str, Decimal] = defaultdict(Decimal)

    for account in accounts:
        if not account.is_active or account.have == 0:
            continue
        if account.is_liability != liabilities:
            continue
        magnitude = abs(converted_balance(account, currency, rate_table))
        values[resolve_group_name(account)] += magnitude

    total = sum(values.values(), Decimal("0"))
    rows = [
        TypeBreakdown(
            type=name,
            value=value,
            percentage=min(calculate_percentage(value, total), 100.0),
        )
        for name, value in values.items()
    ]
    rows.sort(key=lambda row: row.value, reverse=True)
    return rows


def assets_by_type(
    accounts: Iterable[Account],
    rate_table: ExchangeRateTable,
    display_currency: str,
) -> list[TypeBreakdown]:
    """Converted asset totals per group with their share, largest first."""
    return _breakdown(accounts, rate_table, display_currency, liabilities=False)


def liabilities_by_type(
    accounts: Iterable[Account],
    rate_table: ExchangeRateTable,
    display_currency: str,
) -> list[TypeBreakdown]:
    """Converted liability magnitudes per group with their share, largest first."""
    return _breakdown(accounts, rate_table, display_currency, liabilities=True)
