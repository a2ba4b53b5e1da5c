"""
Engine Exceptions

Only the Merger raises to its caller, and only when every regional
source failed. Conversion misses, dropped records and single-source
failures are reported as data, never raised.
"""

from typing import Sequence

from account_aggregator.models.provider import PartialFailure


class AggregatorError(Exception):
    """Base exception for the aggregation engine."""
    pass


class MergeError(AggregatorError):
    """Base exception for provider catalog merging."""
    pass


class NoEndpointsConfiguredError(MergeError):
    """No enabled regional endpoint to fetch providers from."""
    pass


class AllSourcesFailedError(MergeError):
    """Every enabled regional source failed or timed out."""

    def __init__(self, failures: Sequence[PartialFailure]):
        self.failures = tuple(failures)
        names = ", ".join(f.source_api for f in self.failures) or "none"
        super().__init__(f"All provider sources failed: {names}")
