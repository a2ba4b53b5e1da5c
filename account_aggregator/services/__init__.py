"""Services package."""

from account_aggregator.services.sources import (
    HttpxProviderSource,
    InvalidSourceResponseError,
    ProviderSourceInterface,
    SourceConnectionError,
    SourceError,
    SourceHTTPError,
    SourceTimeoutError,
)

__all__ = [
    "HttpxProviderSource",
    "InvalidSourceResponseError",
    "ProviderSourceInterface",
    "SourceConnectionError",
    "SourceError",
    "SourceHTTPError",
    "SourceTimeoutError",
]
