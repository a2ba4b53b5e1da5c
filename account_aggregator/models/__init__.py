"""
Data Models Package

Pydantic models (and the exchange rate table) for every record that
flows through the aggregation engine.
"""

from account_aggregator.models.account import (
    Account,
    AccountClass,
    AccountGroup,
    DebitOrCredit,
    IconResolution,
    Money,
    NetWorthSummary,
    NetWorthTrend,
    TypeBreakdown,
)
from account_aggregator.models.diagnostics import (
    DiagnosticEvent,
    DiagnosticEventBuilder,
    DiagnosticEventType,
    DiagnosticSeverity,
)
from account_aggregator.models.provider import (
    AccountLoginField,
    AccountLoginForm,
    DataIssue,
    DataIssueReason,
    FailureReason,
    MergeResult,
    PartialFailure,
    Provider,
    ProviderType,
    RegionalEndpoint,
    SourcePayload,
)
from account_aggregator.models.rates import ExchangeRateTable, normalize_currency
from account_aggregator.models.snapshot import AggregateSnapshot

__all__ = [
    # Account models
    "Account",
    "AccountClass",
    "AccountGroup",
    "DebitOrCredit",
    "IconResolution",
    "Money",
    "NetWorthSummary",
    "NetWorthTrend",
    "TypeBreakdown",
    # Provider models
    "AccountLoginField",
    "AccountLoginForm",
    "DataIssue",
    "DataIssueReason",
    "FailureReason",
    "MergeResult",
    "PartialFailure",
    "Provider",
    "ProviderType",
    "RegionalEndpoint",
    "SourcePayload",
    # Rates and snapshot
    "AggregateSnapshot",
    "ExchangeRateTable",
    "normalize_currency",
    # Diagnostics
    "DiagnosticEvent",
    "DiagnosticEventBuilder",
    "DiagnosticEventType",
    "DiagnosticSeverity",
]
