"""
Provider Sources Package

Abstract interface and the httpx implementation for fetching one
region's provider catalog.
"""

from account_aggregator.services.sources.http_source import HttpxProviderSource
from account_aggregator.services.sources.interface import (
    InvalidSourceResponseError,
    ProviderSourceInterface,
    SourceConnectionError,
    SourceError,
    SourceHTTPError,
    SourceTimeoutError,
)

__all__ = [
    # Interface
    "ProviderSourceInterface",
    # Exceptions
    "InvalidSourceResponseError",
    "SourceConnectionError",
    "SourceError",
    "SourceHTTPError",
    "SourceTimeoutError",
    # httpx implementation
    "HttpxProviderSource",
]
