"""
Diagnostics Logger

Every step of a provider merge is logged. This gives:
1. Per-source traceability when a region goes down
2. Debugging of dropped or duplicate provider records
3. The data behind the "incomplete sources" indicator

The logger:
- Is async so it fits the Merger's event loop
- Never raises when a sink fails (the failure is logged locally)
- Tags every event of one merge with a correlation ID
"""

from typing import Optional
from uuid import UUID, uuid4

import structlog

from account_aggregator.diagnostics.sinks import DiagnosticsSinkInterface
from account_aggregator.models.diagnostics import (
    DiagnosticEvent,
    DiagnosticEventBuilder,
    DiagnosticSeverity,
)


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class DiagnosticsLogger:
    """
    Central diagnostics service for provider merges.

    Logs events both to:
    1. Structured local log
    2. An optional sink (for persistence and user-facing indicators)
    """

    def __init__(
        self,
        sink: Optional[DiagnosticsSinkInterface] = None,
    ):
        """
        Initialize diagnostics logger.

        Args:
            sink: Destination for persisted events.
                  If None, only logs locally.
        """
        self._sink = sink
        self._logger = structlog.get_logger("account_aggregator.diagnostics")

    @property
    def sink(self) -> Optional[DiagnosticsSinkInterface]:
        return self._sink

    async def log(self, event: DiagnosticEvent) -> bool:
        """
        Log a diagnostic event.

        Always logs locally. Appends to the sink if one is configured.

        Returns True if the sink write succeeded (or no sink configured).
        """
        log_dict = event.to_log_dict()

        if event.severity == DiagnosticSeverity.ERROR:
            self._logger.error("diagnostic_event", **log_dict)
        elif event.severity == DiagnosticSeverity.WARNING:
            self._logger.warning("diagnostic_event", **log_dict)
        elif event.severity == DiagnosticSeverity.DEBUG:
            self._logger.debug("diagnostic_event", **log_dict)
        else:
            self._logger.info("diagnostic_event", **log_dict)

        if self._sink:
            try:
                return await self._sink.append_event(event)
            except Exception as e:
                # Sink failures never break a merge
                self._logger.error(
                    "diagnostics_sink_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    async def log_merge_started(
        self,
        sources: list[str],
        correlation_id: UUID,
    ) -> None:
        await self.log(DiagnosticEventBuilder.merge_started(sources, correlation_id))

    async def log_merge_completed(
        self,
        provider_count: int,
        counts_by_source: dict[str, int],
        failed_sources: list[str],
        correlation_id: UUID,
    ) -> None:
        event = DiagnosticEventBuilder.merge_completed(
            provider_count=provider_count,
            counts_by_source=counts_by_source,
            failed_sources=failed_sources,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_all_sources_failed(
        self,
        failed_sources: list[str],
        correlation_id: UUID,
    ) -> None:
        event = DiagnosticEventBuilder.all_sources_failed(
            failed_sources=failed_sources,
            correlation_id=correlation_id,
        )
        await self.log(event)


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    One per merge invocation; pass it through every event of that merge.
    """
    return uuid4()
