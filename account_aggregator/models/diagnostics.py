"""
Diagnostic Event Models

Every Merger invocation leaves a trail of diagnostic events:
which sources were asked, which answered, which failed and why,
which records were dropped or skipped as duplicates.

The presentation layer uses this trail to show an "incomplete data"
indicator; operators use it to debug regional outages.

Events are append-only. They are never modified once created.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DiagnosticEventType(str, Enum):
    """Types of events recorded while building the provider catalog."""
    # Merge lifecycle
    MERGE_STARTED = "merge_started"
    MERGE_COMPLETED = "merge_completed"
    ALL_SOURCES_FAILED = "all_sources_failed"

    # Per-source outcomes
    SOURCE_FETCH_SUCCEEDED = "source_fetch_succeeded"
    SOURCE_FETCH_FAILED = "source_fetch_failed"

    # Per-record outcomes
    PROVIDER_IDENTITY_MISSING = "provider_identity_missing"
    PROVIDER_RECORD_INVALID = "provider_record_invalid"
    DUPLICATE_PROVIDER_SKIPPED = "duplicate_provider_skipped"


class DiagnosticSeverity(str, Enum):
    """Severity level for diagnostic events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class DiagnosticEvent(BaseModel):
    """A single diagnostic event."""

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC)"
    )

    # Classification
    event_type: DiagnosticEventType
    severity: DiagnosticSeverity = DiagnosticSeverity.INFO

    # Which regional source (if any) this is about
    source_api: Optional[str] = None

    # Correlates every event of one merge invocation
    correlation_id: Optional[UUID] = None

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(default_factory=dict)

    def to_log_dict(self) -> dict:
        """Flatten into keyword arguments for structured logging."""
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "source_api": self.source_api,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
        }


class DiagnosticEventBuilder:
    """
    Helper to build diagnostic events with consistent wording.

    Usage:
        event = DiagnosticEventBuilder.source_fetch_failed("UAE", "timeout", "...", cid)
    """

    @staticmethod
    def merge_started(
        sources: list[str],
        correlation_id: UUID,
    ) -> DiagnosticEvent:
        return DiagnosticEvent(
            event_type=DiagnosticEventType.MERGE_STARTED,
            correlation_id=correlation_id,
            description=f"Fetching providers from {len(sources)} sources",
            details={"sources": sources},
        )

    @staticmethod
    def source_fetch_succeeded(
        source_api: str,
        provider_count: int,
        breakdown: dict[str, int],
        correlation_id: UUID,
    ) -> DiagnosticEvent:
        return DiagnosticEvent(
            event_type=DiagnosticEventType.SOURCE_FETCH_SUCCEEDED,
            source_api=source_api,
            correlation_id=correlation_id,
            description=f"Fetched {provider_count} providers from {source_api}",
            details={
                "provider_count": provider_count,
                "provider_types": breakdown,
            },
        )

    @staticmethod
    def source_fetch_failed(
        source_api: str,
        reason: str,
        message: str,
        correlation_id: UUID,
        status_code: Optional[int] = None,
    ) -> DiagnosticEvent:
        return DiagnosticEvent(
            event_type=DiagnosticEventType.SOURCE_FETCH_FAILED,
            severity=DiagnosticSeverity.WARNING,
            source_api=source_api,
            correlation_id=correlation_id,
            description=f"Failed to fetch providers from {source_api} ({reason})",
            details={
                "reason": reason,
                "error_message": message[:300],
                "status_code": status_code,
            },
        )

    @staticmethod
    def identity_missing(
        source_api: str,
        provider_name: Optional[str],
        correlation_id: UUID,
    ) -> DiagnosticEvent:
        return DiagnosticEvent(
            event_type=DiagnosticEventType.PROVIDER_IDENTITY_MISSING,
            severity=DiagnosticSeverity.WARNING,
            source_api=source_api,
            correlation_id=correlation_id,
            description="Provider record has neither id nor ttsId and was dropped",
            details={"provider_name": provider_name},
        )

    @staticmethod
    def record_invalid(
        source_api: str,
        provider_name: Optional[str],
        error: str,
        correlation_id: UUID,
    ) -> DiagnosticEvent:
        return DiagnosticEvent(
            event_type=DiagnosticEventType.PROVIDER_RECORD_INVALID,
            severity=DiagnosticSeverity.WARNING,
            source_api=source_api,
            correlation_id=correlation_id,
            description="Provider record failed validation and was dropped",
            details={"provider_name": provider_name, "error": error[:300]},
        )

    @staticmethod
    def duplicate_skipped(
        source_api: str,
        identity_key: str,
        kept_from: str,
        correlation_id: UUID,
    ) -> DiagnosticEvent:
        return DiagnosticEvent(
            event_type=DiagnosticEventType.DUPLICATE_PROVIDER_SKIPPED,
            severity=DiagnosticSeverity.DEBUG,
            source_api=source_api,
            correlation_id=correlation_id,
            description=f"Skipped duplicate provider {identity_key} (kept from {kept_from})",
            details={"identity_key": identity_key, "kept_from": kept_from},
        )

    @staticmethod
    def merge_completed(
        provider_count: int,
        counts_by_source: dict[str, int],
        failed_sources: list[str],
        correlation_id: UUID,
    ) -> DiagnosticEvent:
        return DiagnosticEvent(
            event_type=DiagnosticEventType.MERGE_COMPLETED,
            severity=(
                DiagnosticSeverity.WARNING if failed_sources else DiagnosticSeverity.INFO
            ),
            correlation_id=correlation_id,
            description=f"Merged {provider_count} unique providers",
            details={
                "provider_count": provider_count,
                "counts_by_source": counts_by_source,
                "failed_sources": failed_sources,
            },
        )

    @staticmethod
    def all_sources_failed(
        failed_sources: list[str],
        correlation_id: UUID,
    ) -> DiagnosticEvent:
        return DiagnosticEvent(
            event_type=DiagnosticEventType.ALL_SOURCES_FAILED,
            severity=DiagnosticSeverity.ERROR,
            correlation_id=correlation_id,
            description="Every regional source failed; no provider catalog available",
            details={"failed_sources": failed_sources},
        )
