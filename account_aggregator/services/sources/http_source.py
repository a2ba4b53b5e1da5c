"""
HTTP Provider Source

Fetches a region's provider catalog from its backend over HTTP with
httpx.

Endpoints:
    GET /customer/{customer_id}/aggregate  - authenticated aggregate
    GET /service-providers                 - public catalog

When the credentials carry a customer id and both session tokens the
authenticated aggregate is tried first; a 401/403 there falls back to
the public catalog. Any other failure is raised as a SourceError.
"""

from typing import Any, Mapping, Optional

import httpx
import structlog

from account_aggregator.models.provider import RegionalEndpoint, SourcePayload
from account_aggregator.services.sources.interface import (
    InvalidSourceResponseError,
    ProviderSourceInterface,
    SourceConnectionError,
    SourceHTTPError,
    SourceTimeoutError,
)

logger = structlog.get_logger(__name__)

PUBLIC_PROVIDERS_PATH = "/service-providers"
AGGREGATE_PATH = "/customer/{customer_id}/aggregate"

AUTH_FALLBACK_STATUSES = frozenset({401, 403})


class HttpxProviderSource(ProviderSourceInterface):
    """
    Provider source backed by httpx.

    Attributes:
        timeout: Default HTTP timeout in seconds, used when the endpoint
            does not set its own.

    Example:
        >>> source = HttpxProviderSource(timeout=30.0)
        >>> payload = await source.fetch_providers(endpoint)
    """

    def __init__(self, *, timeout: float = 30.0) -> None:
        """Initialize the source.

        Args:
            timeout: Default HTTP timeout in seconds.
        """
        self._timeout = timeout

    def _client(self, endpoint: RegionalEndpoint) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=endpoint.base_url.rstrip("/"),
            timeout=endpoint.timeout_seconds or self._timeout,
            headers={
                "Content-Type": "application/json",
                "Accept": "application/json",
            },
        )

    async def fetch_providers(
        self,
        endpoint: RegionalEndpoint,
        credentials: Optional[Mapping[str, Any]] = None,
    ) -> SourcePayload:
        creds = dict(credentials if credentials is not None else endpoint.credentials)
        logger.debug(
            "provider_source_fetch_started",
            source_api=endpoint.name,
            base_url=endpoint.base_url,
            authenticated=_has_session(creds),
        )

        try:
            async with self._client(endpoint) as client:
                response = await self._request(client, endpoint, creds)
                response.raise_for_status()
        except httpx.TimeoutException as e:
            logger.warning("provider_source_timeout", source_api=endpoint.name, error=str(e))
            raise SourceTimeoutError(f"{endpoint.name} timed out") from e
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            logger.warning("provider_source_http_error", source_api=endpoint.name, status=status)
            raise SourceHTTPError(
                f"{endpoint.name} returned HTTP {status}",
                status_code=status,
            ) from e
        except httpx.RequestError as e:
            logger.warning(
                "provider_source_connection_error",
                source_api=endpoint.name,
                error=str(e),
            )
            raise SourceConnectionError(f"Failed to connect to {endpoint.name}: {e}") from e

        return self._parse(endpoint, response)

    async def _request(
        self,
        client: httpx.AsyncClient,
        endpoint: RegionalEndpoint,
        creds: Mapping[str, Any],
    ) -> httpx.Response:
        if not _has_session(creds):
            return await client.get(PUBLIC_PROVIDERS_PATH)

        response = await client.get(
            AGGREGATE_PATH.format(customer_id=creds["customer_id"]),
            headers={
                "X-SESSION-TOKEN": str(creds["session_token"]),
                "X-REQUEST-TOKEN": str(creds["request_token"]),
            },
        )
        if response.status_code in AUTH_FALLBACK_STATUSES:
            logger.info(
                "provider_source_auth_fallback",
                source_api=endpoint.name,
                status=response.status_code,
            )
            return await client.get(PUBLIC_PROVIDERS_PATH)
        return response

    def _parse(self, endpoint: RegionalEndpoint, response: httpx.Response) -> SourcePayload:
        try:
            data = response.json()
        except ValueError as e:
            raise InvalidSourceResponseError(f"{endpoint.name} returned invalid JSON") from e

        encryption_key = None
        if isinstance(data, list):
            records = data
        elif isinstance(data, dict):
            records = data.get("serviceProviders")
            if records is None:
                records = []
            config = data.get("config")
            if isinstance(config, dict):
                encryption_key = config.get("encryptionKey") or None
        else:
            raise InvalidSourceResponseError(f"{endpoint.name} returned an unexpected payload")

        if not isinstance(records, list):
            raise InvalidSourceResponseError(f"{endpoint.name} serviceProviders is not a list")

        return SourcePayload(
            providers=[record for record in records if isinstance(record, dict)],
            encryption_key=encryption_key,
        )


def _has_session(creds: Mapping[str, Any]) -> bool:
    return all(creds.get(key) for key in ("customer_id", "session_token", "request_token"))
