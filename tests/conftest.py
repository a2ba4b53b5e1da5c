"""
Shared fixtures for the Account Aggregator tests.

No real network calls: provider sources are in-memory fakes and the
HTTP source is mocked with pytest-httpx.
"""

import asyncio
from typing import Any, Mapping, Optional, Union

import pytest

from account_aggregator.diagnostics import DiagnosticsLogger, InMemoryDiagnosticsSink
from account_aggregator.models import RegionalEndpoint, SourcePayload
from account_aggregator.services.sources import ProviderSourceInterface

SourceBehaviour = Union[list[dict[str, Any]], SourcePayload, BaseException]


class FakeProviderSource(ProviderSourceInterface):
    """
    In-memory provider source keyed by endpoint name.

    Each endpoint maps to a list of records, a full SourcePayload, or an
    exception to raise. `delays` holds per-endpoint sleeps in seconds.
    """

    def __init__(
        self,
        behaviour: Mapping[str, SourceBehaviour],
        delays: Optional[Mapping[str, float]] = None,
    ):
        self._behaviour = dict(behaviour)
        self._delays = dict(delays or {})
        self.calls: list[tuple[str, Optional[Mapping[str, Any]]]] = []

    async def fetch_providers(
        self,
        endpoint: RegionalEndpoint,
        credentials: Optional[Mapping[str, Any]] = None,
    ) -> SourcePayload:
        self.calls.append((endpoint.name, credentials))

        delay = self._delays.get(endpoint.name, 0)
        if delay:
            await asyncio.sleep(delay)

        outcome = self._behaviour.get(endpoint.name, [])
        if isinstance(outcome, BaseException):
            raise outcome
        if isinstance(outcome, SourcePayload):
            return outcome
        return SourcePayload(providers=list(outcome))


def make_providers(prefix: str, count: int, start: int = 0, **extra: Any) -> list[dict[str, Any]]:
    """Raw backend provider records with ids `{prefix}-{n}`."""
    return [
        {"id": f"{prefix}-{n}", "name": f"{prefix.title()} Bank {n}", **extra}
        for n in range(start, start + count)
    ]


def endpoint(name: str, **kwargs: Any) -> RegionalEndpoint:
    return RegionalEndpoint(name=name, base_url=f"https://{name.lower()}.example.com", **kwargs)


@pytest.fixture
def sink() -> InMemoryDiagnosticsSink:
    return InMemoryDiagnosticsSink()


@pytest.fixture
def diagnostics(sink: InMemoryDiagnosticsSink) -> DiagnosticsLogger:
    return DiagnosticsLogger(sink)
