"""
Abstract Provider Source Interface

The Merger never talks HTTP itself. It asks a provider source for the
catalog of one regional endpoint, which lets us:
1. Swap the transport (httpx, a cached source, a fixture) freely
2. Use in-memory sources in tests
3. Keep the merge logic independent of the wire

A source either returns a `SourcePayload` or raises a `SourceError`.
The Merger turns a raised error into a per-source partial failure.
"""

from abc import ABC, abstractmethod
from typing import Any, Mapping, Optional

from account_aggregator.models.provider import FailureReason, RegionalEndpoint, SourcePayload


class SourceError(Exception):
    """Base exception for provider source errors."""

    reason: FailureReason = FailureReason.UNEXPECTED

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class SourceTimeoutError(SourceError):
    """The endpoint did not answer in time."""

    reason = FailureReason.TIMEOUT


class SourceHTTPError(SourceError):
    """The endpoint answered with a non-2xx status."""

    reason = FailureReason.HTTP_STATUS


class SourceConnectionError(SourceError):
    """The endpoint could not be reached."""

    reason = FailureReason.CONNECTION


class InvalidSourceResponseError(SourceError):
    """The endpoint answered, but not with a provider catalog."""

    reason = FailureReason.INVALID_RESPONSE


class ProviderSourceInterface(ABC):
    """
    Abstract interface for fetching one region's provider catalog.

    Any transport implementation must implement this method.
    """

    @abstractmethod
    async def fetch_providers(
        self,
        endpoint: RegionalEndpoint,
        credentials: Optional[Mapping[str, Any]] = None,
    ) -> SourcePayload:
        """
        Fetch the raw provider records of one endpoint.

        Args:
            endpoint: The regional deployment to ask
            credentials: Opaque transport credentials for this endpoint

        Returns:
            The raw provider records plus the endpoint's encryption key

        Raises:
            SourceError: If the endpoint fails in any way
        """
        pass
