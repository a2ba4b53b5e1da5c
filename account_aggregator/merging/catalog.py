"""
Provider Catalog Queries

Read-only helpers the link-account flow runs over a merged catalog:
search box, "popular" strip, per-integration filters, and the backend
URL/encryption key a chosen provider must be linked through.
"""

from typing import Iterable, Optional

from account_aggregator.models.provider import Provider, ProviderType


def linkable_providers(providers: Iterable[Provider]) -> list[Provider]:
    """Providers whose `canLink` is absent or true."""
    return [provider for provider in providers if provider.is_linkable]


def search_providers(providers: Iterable[Provider], query: str) -> list[Provider]:
    """
    Case-insensitive "name contains" search.

    A blank query returns every provider in catalog order.
    """
    needle = (query or "").strip().casefold()
    if not needle:
        return list(providers)
    return [p for p in providers if needle in p.name.casefold()]


def popular_providers(
    providers: Iterable[Provider],
    limit: Optional[int] = None,
) -> list[Provider]:
    """Providers that carry a popularity rank, lowest `sortOrder` first."""
    ranked = sorted(
        (p for p in providers if p.sort_order is not None),
        key=lambda p: p.sort_order,
    )
    if limit is not None:
        return ranked[:limit]
    return ranked


def providers_by_type(
    providers: Iterable[Provider],
    provider_type: ProviderType,
) -> list[Provider]:
    return [p for p in providers if p.provider_type == provider_type]


def provider_api_url(provider: Provider, fallback: str) -> str:
    """Backend base URL a provider was fetched from, else `fallback`."""
    return provider.api_base_url or fallback


def provider_encryption_key(
    provider: Provider,
    fallback: Optional[str] = None,
) -> Optional[str]:
    """RSA key of the backend a provider was fetched from, else `fallback`."""
    return provider.encryption_key or fallback
