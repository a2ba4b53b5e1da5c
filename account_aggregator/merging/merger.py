"""
Multi-Source Provider Merger

Fetches provider catalogs from every enabled regional backend at once
and merges them into one list for the "link an account" picker.

Flow:
1. Fan out    -> one asyncio task per enabled endpoint, each with its
                 own timeout
2. Collect    -> a single collector receives branch outcomes in
                 completion order (asyncio.as_completed)
3. Reduce     -> after EVERY branch has settled: classify, stamp
                 source_api, dedupe by identity key, drop unlinkable

GUARANTEES:
- A slow or failing region never blocks or corrupts another region's
  records; branches share no mutable state
- One failed region yields one PartialFailure, never an exception
- The call raises only when every enabled region failed
- No retries; a failed branch is reported and excluded
"""

import asyncio
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Sequence
from uuid import UUID

from pydantic import ValidationError

from account_aggregator.classification.providers import classify, provider_type_breakdown
from account_aggregator.config import get_settings
from account_aggregator.diagnostics import DiagnosticsLogger, create_correlation_id
from account_aggregator.exceptions import AllSourcesFailedError, NoEndpointsConfiguredError
from account_aggregator.models.diagnostics import DiagnosticEvent, DiagnosticEventBuilder
from account_aggregator.models.provider import (
    DataIssue,
    DataIssueReason,
    FailureReason,
    MergeResult,
    PartialFailure,
    Provider,
    RegionalEndpoint,
    SourcePayload,
)
from account_aggregator.services.sources import (
    HttpxProviderSource,
    ProviderSourceInterface,
    SourceError,
)

Credentials = Mapping[str, Mapping[str, Any]]


@dataclass(frozen=True)
class BranchOutcome:
    """What one endpoint's branch produced: a payload or a failure."""

    endpoint: RegionalEndpoint
    payload: Optional[SourcePayload] = None
    failure: Optional[PartialFailure] = None


def identity_of(record: Mapping[str, Any]) -> Optional[str]:
    """Canonical `id`, falling back to the legacy `ttsId`; None if neither."""
    for key in ("id", "ttsId"):
        value = record.get(key)
        if value is None:
            continue
        text = str(value).strip()
        if text:
            return text
    return None


class ProviderMerger:
    """
    Merges provider catalogs from several regional backends.

    The merger itself is stateless between calls; each `merge` call runs
    one fan-out/fan-in cycle.
    """

    def __init__(
        self,
        source: Optional[ProviderSourceInterface] = None,
        diagnostics: Optional[DiagnosticsLogger] = None,
        default_timeout: Optional[float] = None,
    ):
        """
        Initialize the merger.

        Args:
            source: Where provider catalogs come from. Defaults to HTTP.
            diagnostics: Event logger. Defaults to local-only logging.
            default_timeout: Per-branch timeout in seconds for endpoints
                             that do not set their own. Defaults to settings.
        """
        if default_timeout is None:
            default_timeout = get_settings().fetch.timeout_seconds
        self._default_timeout = default_timeout
        self._source = source or HttpxProviderSource(timeout=default_timeout)
        self._diagnostics = diagnostics or DiagnosticsLogger()

    # -------------------------------------------------------------------------
    # Fan-out
    # -------------------------------------------------------------------------

    async def _fetch_branch(
        self,
        endpoint: RegionalEndpoint,
        credentials: Optional[Mapping[str, Any]],
    ) -> BranchOutcome:
        """Fetch one endpoint. Never raises; failures become outcomes."""
        timeout = endpoint.timeout_seconds or self._default_timeout
        try:
            payload = await asyncio.wait_for(
                self._source.fetch_providers(endpoint, credentials),
                timeout=timeout,
            )
        except asyncio.TimeoutError:
            return BranchOutcome(
                endpoint=endpoint,
                failure=PartialFailure(
                    source_api=endpoint.name,
                    reason=FailureReason.TIMEOUT,
                    message=f"No response within {timeout:g}s",
                ),
            )
        except SourceError as e:
            return BranchOutcome(
                endpoint=endpoint,
                failure=PartialFailure(
                    source_api=endpoint.name,
                    reason=e.reason,
                    message=str(e)[:500],
                    status_code=e.status_code,
                ),
            )
        except Exception as e:
            # Any other error still only fails this branch
            return BranchOutcome(
                endpoint=endpoint,
                failure=PartialFailure(
                    source_api=endpoint.name,
                    reason=FailureReason.UNEXPECTED,
                    message=f"{type(e).__name__}: {e}"[:500],
                ),
            )
        return BranchOutcome(endpoint=endpoint, payload=payload)

    async def _collect(
        self,
        endpoints: Sequence[RegionalEndpoint],
        credentials: Optional[Credentials],
    ) -> list[BranchOutcome]:
        """Run every branch and return outcomes in completion order."""
        tasks = [
            asyncio.ensure_future(
                self._fetch_branch(
                    endpoint,
                    (credentials or {}).get(endpoint.name),
                )
            )
            for endpoint in endpoints
        ]

        outcomes: list[BranchOutcome] = []
        for next_done in asyncio.as_completed(tasks):
            outcomes.append(await next_done)
        return outcomes

    # -------------------------------------------------------------------------
    # Reduction
    # -------------------------------------------------------------------------

    @staticmethod
    def reduce(
        outcomes: Sequence[BranchOutcome],
        correlation_id: Optional[UUID] = None,
    ) -> tuple[MergeResult, list[DiagnosticEvent]]:
        """
        Merge branch outcomes into one catalog.

        Outcomes must be in completion order: the first occurrence of an
        identity key wins and later ones only record that their endpoint
        also offered it.

        Returns the merge result and the diagnostic events it produced.
        """
        correlation_id = correlation_id or create_correlation_id()
        events: list[DiagnosticEvent] = []
        failures: list[PartialFailure] = []
        issues: list[DataIssue] = []
        succeeded: list[str] = []

        winners: dict[str, Provider] = {}
        also_offered: dict[str, list[str]] = {}

        for outcome in outcomes:
            source_api = outcome.endpoint.name

            if outcome.failure is not None:
                failures.append(outcome.failure)
                events.append(DiagnosticEventBuilder.source_fetch_failed(
                    source_api=source_api,
                    reason=outcome.failure.reason.value,
                    message=outcome.failure.message,
                    correlation_id=correlation_id,
                    status_code=outcome.failure.status_code,
                ))
                continue

            payload = outcome.payload or SourcePayload()
            succeeded.append(source_api)
            events.append(DiagnosticEventBuilder.source_fetch_succeeded(
                source_api=source_api,
                provider_count=len(payload.providers),
                breakdown=provider_type_breakdown(payload.providers),
                correlation_id=correlation_id,
            ))

            for record in payload.providers:
                provider_name = record.get("name")
                key = identity_of(record)

                if key is None:
                    issues.append(DataIssue(
                        source_api=source_api,
                        reason=DataIssueReason.IDENTITY_MISSING,
                        message="Provider record has neither id nor ttsId",
                        provider_name=provider_name,
                    ))
                    events.append(DiagnosticEventBuilder.identity_missing(
                        source_api, provider_name, correlation_id,
                    ))
                    continue

                if key in winners:
                    kept_from = winners[key].source_api or ""
                    offered = also_offered.setdefault(key, [])
                    if source_api != kept_from and source_api not in offered:
                        offered.append(source_api)
                    events.append(DiagnosticEventBuilder.duplicate_skipped(
                        source_api, key, kept_from, correlation_id,
                    ))
                    continue

                try:
                    provider = Provider.model_validate({
                        **record,
                        "providerType": classify(record).value,
                        "sourceApi": source_api,
                        "apiBaseUrl": outcome.endpoint.base_url or None,
                        "encryptionKey": payload.encryption_key,
                        "alsoOfferedBy": (),
                    })
                except ValidationError as e:
                    issues.append(DataIssue(
                        source_api=source_api,
                        reason=DataIssueReason.INVALID_RECORD,
                        message=f"Provider {key} failed validation",
                        provider_name=provider_name,
                    ))
                    events.append(DiagnosticEventBuilder.record_invalid(
                        source_api, provider_name, str(e), correlation_id,
                    ))
                    continue

                winners[key] = provider

        providers = []
        for key, provider in winners.items():
            if not provider.is_linkable:
                continue
            if also_offered.get(key):
                provider = provider.model_copy(
                    update={"also_offered_by": tuple(also_offered[key])}
                )
            providers.append(provider)

        result = MergeResult(
            providers=tuple(providers),
            failures=tuple(failures),
            data_issues=tuple(issues),
            succeeded_sources=tuple(succeeded),
        )
        return result, events

    # -------------------------------------------------------------------------
    # Entry point
    # -------------------------------------------------------------------------

    async def merge(
        self,
        endpoints: Optional[Sequence[RegionalEndpoint]] = None,
        credentials: Optional[Credentials] = None,
        correlation_id: Optional[UUID] = None,
    ) -> MergeResult:
        """
        Fetch and merge provider catalogs from all enabled endpoints.

        Args:
            endpoints: Regional endpoints. Defaults to the configured ones.
            credentials: Optional {endpoint name: credential} overrides.
                         Endpoints without an entry use their own credentials.
            correlation_id: Tags every diagnostic event of this merge.

        Returns:
            MergeResult with the merged providers and per-source failures

        Raises:
            NoEndpointsConfiguredError: If no endpoint is enabled
            AllSourcesFailedError: If every enabled endpoint failed
        """
        correlation_id = correlation_id or create_correlation_id()

        if endpoints is None:
            endpoints = get_settings().regional.endpoints()
        enabled = [endpoint for endpoint in endpoints if endpoint.enabled]
        if not enabled:
            raise NoEndpointsConfiguredError("No enabled regional endpoint to fetch providers from")

        await self._diagnostics.log_merge_started(
            [endpoint.name for endpoint in enabled],
            correlation_id,
        )

        outcomes = await self._collect(enabled, credentials)
        result, events = self.reduce(outcomes, correlation_id)

        for event in events:
            await self._diagnostics.log(event)

        if not result.succeeded_sources:
            await self._diagnostics.log_all_sources_failed(
                result.failed_sources,
                correlation_id,
            )
            raise AllSourcesFailedError(result.failures)

        await self._diagnostics.log_merge_completed(
            provider_count=len(result.providers),
            counts_by_source=result.counts_by_source(),
            failed_sources=result.failed_sources,
            correlation_id=correlation_id,
        )
        return result


async def merge_providers(
    endpoints: Optional[Sequence[RegionalEndpoint]] = None,
    credentials: Optional[Credentials] = None,
    *,
    source: Optional[ProviderSourceInterface] = None,
    timeout: Optional[float] = None,
    diagnostics: Optional[DiagnosticsLogger] = None,
) -> MergeResult:
    """Fetch and merge provider catalogs in one call. See `ProviderMerger.merge`."""
    merger = ProviderMerger(
        source=source,
        diagnostics=diagnostics,
        default_timeout=timeout,
    )
    return await merger.merge(endpoints, credentials)
