"""
Provider Merging Package

Concurrent multi-region provider catalog merge, plus the queries the
link-account flow runs over the merged catalog.
"""

from account_aggregator.merging.catalog import (
    linkable_providers,
    popular_providers,
    provider_api_url,
    provider_encryption_key,
    providers_by_type,
    search_providers,
)
from account_aggregator.merging.merger import (
    BranchOutcome,
    ProviderMerger,
    identity_of,
    merge_providers,
)

__all__ = [
    # Merger
    "BranchOutcome",
    "ProviderMerger",
    "identity_of",
    "merge_providers",
    # Catalog queries
    "linkable_providers",
    "popular_providers",
    "provider_api_url",
    "provider_encryption_key",
    "providers_by_type",
    "search_providers",
]
