"""Diagnostics logging package."""

from account_aggregator.diagnostics.logger import DiagnosticsLogger, create_correlation_id
from account_aggregator.diagnostics.sinks import (
    DiagnosticsSinkInterface,
    InMemoryDiagnosticsSink,
)

__all__ = [
    "DiagnosticsLogger",
    "DiagnosticsSinkInterface",
    "InMemoryDiagnosticsSink",
    "create_correlation_id",
]
