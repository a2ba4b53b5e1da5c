"""
Provider Classifier

Infers a provider's integration family from the shape of its record.

CRITICAL: The three signal fields are not mutually exclusive in the
data. A record can carry a stale `accountLoginForm` next to a valid
`integrationProvider` tag, so the explicit tag must be checked first.
The rule order below is load-bearing.
"""

from collections import Counter
from typing import Any, Iterable, Mapping, Union

from account_aggregator.models.provider import Provider, ProviderType

ProviderRecord = Union[Provider, Mapping[str, Any]]


def _integration_provider(record: ProviderRecord) -> Any:
    if isinstance(record, Provider):
        return record.integration_provider
    return record.get("integrationProvider")


def _has_login_fields(record: ProviderRecord) -> bool:
    if isinstance(record, Provider):
        return record.login_field_count > 0

    form = record.get("accountLoginForm")
    if not isinstance(form, Mapping):
        return False
    fields = form.get("accountLoginFields")
    return isinstance(fields, (list, tuple)) and len(fields) > 0


def classify(record: ProviderRecord) -> ProviderType:
    """
    Integration family of a provider record. First match wins:

    1. integrationProvider == "LEAN"          -> LEAN
    2. integrationProvider == "VEZGO"         -> VEZGO
    3. non-empty accountLoginForm fields      -> YODLEE
    4. otherwise                              -> UNKNOWN
    """
    tag = _integration_provider(record)
    if tag == "LEAN":
        return ProviderType.LEAN
    if tag == "VEZGO":
        return ProviderType.VEZGO
    if _has_login_fields(record):
        return ProviderType.YODLEE
    return ProviderType.UNKNOWN


def provider_type_breakdown(records: Iterable[ProviderRecord]) -> dict[str, int]:
    """Count records per inferred provider type."""
    counts = Counter(classify(record).value for record in records)
    return {ptype.value: counts.get(ptype.value, 0) for ptype in ProviderType}
