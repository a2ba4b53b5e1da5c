"""Rule-chain classifiers for provider records and account icons."""

from account_aggregator.classification.icons import (
    ACCOUNT_TYPE_ICONS,
    CRYPTO_ICON,
    DEFAULT_ICON,
    DEFAULT_LOGO_URL_TEMPLATE,
    account_type_icon,
    available_icons,
    is_crypto_account,
    resolve_icon,
)
from account_aggregator.classification.providers import (
    classify,
    provider_type_breakdown,
)

__all__ = [
    # Icons
    "ACCOUNT_TYPE_ICONS",
    "CRYPTO_ICON",
    "DEFAULT_ICON",
    "DEFAULT_LOGO_URL_TEMPLATE",
    "account_type_icon",
    "available_icons",
    "is_crypto_account",
    "resolve_icon",
    # Providers
    "classify",
    "provider_type_breakdown",
]
