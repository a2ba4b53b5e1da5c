"""
Account Icon Resolver

Maps an account record to the icon the presentation layer shows next
to it. This is the single implementation of the rule chain; every
page that lists accounts calls `resolve_icon`.

CRITICAL: An account can satisfy several rules at once (a manual crypto
account with an explicit image URL, say). The first matching rule wins
and the order below must not change:

1. crypto account                 -> local "cryptocurrency"
2. accountIconImageUrl present    -> remote URL
3. manual account                 -> local "manual_account/<icon>"
4. serviceProviderId present      -> remote institution logo
5. anything else                  -> local "manual_account/default"
"""

from typing import Optional

from account_aggregator.models.account import Account, AccountClass, IconResolution

CRYPTO = "Crypto"
MANUAL_ICON_SENTINEL = "Manual"
FALLBACK_MANUAL_TYPE = "SomethingElse"

CRYPTO_ICON = "cryptocurrency"
MANUAL_ICON_PREFIX = "manual_account/"
DEFAULT_ICON = f"{MANUAL_ICON_PREFIX}default"

DEFAULT_LOGO_URL_TEMPLATE = "https://spi.22seven.com/246/{provider_id}.png"

# Manual account type -> icon file name under manual_account/
ACCOUNT_TYPE_ICONS: dict[str, str] = {
    "CreditCard": "credit_card",
    "Bank": "bank",
    "Rewards": "reward",
    "Investment": "investment",
    "RealEstate": "real_estate",
    "Cash": "cash",
    "Deposits": "deposit",
    "Jewellery": "jewel",
    "RetirementFund": "investment",
    "Savings": "savings",
    "StoreCard": "store_card",
    "SomethingElse": "something_else",
    "Insurance": "insurance",
    "Loan": "loans",
    "Vehicle": "vehicle",
    "VehicleLoan": "vehicle_loans",
    "Crypto": "cryptocurrency",
    "Home": "home",
    "HomeLoan": "home_loan",
    "HouseholdContents": "household_content",
    "PreciousMetals": "precious_metals",
}


def is_crypto_account(account: Account) -> bool:
    """Crypto class, or a manual account tagged Crypto in any type/icon field."""
    if account.account_class == AccountClass.CRYPTO.value:
        return True
    if account.account_class != AccountClass.MANUAL.value:
        return False
    return CRYPTO in (
        account.manual_account_type,
        account.account_type,
        account.account_icon,
    )


def account_type_icon(account_type: Optional[str]) -> str:
    """Icon path for a manual account type; unknown types get the default icon."""
    icon_name = ACCOUNT_TYPE_ICONS.get(account_type or "")
    if not icon_name:
        return DEFAULT_ICON
    return f"{MANUAL_ICON_PREFIX}{icon_name}"


def available_icons() -> list[str]:
    """Every distinct manual account icon, for an icon picker."""
    seen: dict[str, None] = {}
    for icon_name in ACCOUNT_TYPE_ICONS.values():
        seen.setdefault(f"{MANUAL_ICON_PREFIX}{icon_name}", None)
    return list(seen)


def _manual_icon(account: Account) -> str:
    if not account.account_icon or account.account_icon == MANUAL_ICON_SENTINEL:
        type_id = account.manual_account_type or account.account_type or FALLBACK_MANUAL_TYPE
        return account_type_icon(type_id)
    return f"{MANUAL_ICON_PREFIX}{account.account_icon}"


def resolve_icon(
    account: Account,
    logo_url_template: str = DEFAULT_LOGO_URL_TEMPLATE,
) -> IconResolution:
    """Resolve the display icon for one account."""
    if is_crypto_account(account):
        return IconResolution(is_local=True, icon_path=CRYPTO_ICON)

    if account.account_icon_image_url:
        return IconResolution(is_local=False, icon_path=account.account_icon_image_url)

    if account.account_class == AccountClass.MANUAL.value:
        return IconResolution(is_local=True, icon_path=_manual_icon(account))

    if account.service_provider_id:
        return IconResolution(
            is_local=False,
            icon_path=logo_url_template.format(provider_id=account.service_provider_id),
        )

    return IconResolution(is_local=True, icon_path=DEFAULT_ICON)
