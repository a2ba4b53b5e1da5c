"""
Tests for the multi-source provider merger.

All sources are in-memory fakes; timing is controlled with short sleeps.
"""

import pytest

from account_aggregator.exceptions import (
    AllSourcesFailedError,
    MergeError,
    NoEndpointsConfiguredError,
)
from account_aggregator.merging import ProviderMerger, identity_of, merge_providers
from account_aggregator.merging.merger import BranchOutcome
from account_aggregator.models import (
    DataIssueReason,
    DiagnosticEventType,
    FailureReason,
    PartialFailure,
    ProviderType,
    SourcePayload,
)
from account_aggregator.services.sources import SourceHTTPError, SourceTimeoutError

from conftest import FakeProviderSource, endpoint, make_providers


class TestIdentity:
    """Tests for the provider identity key."""

    def test_prefers_id(self):
        """Test that id wins over ttsId."""
        assert identity_of({"id": "a", "ttsId": "b"}) == "a"

    def test_falls_back_to_tts_id(self):
        """Test the legacy ttsId fallback."""
        assert identity_of({"ttsId": 42}) == "42"

    def test_blank_identity_is_missing(self):
        """Test that blank ids count as missing."""
        assert identity_of({"id": "  ", "name": "X"}) is None


class TestMergeResilience:
    """Tests for partial failures across regions."""

    @pytest.mark.asyncio
    async def test_one_failing_region_of_three(self, diagnostics):
        """Test 10 + 15 providers with one overlap and one failed region."""
        region_a = make_providers("bank", 10)
        region_b = make_providers("bank", 15, start=9)  # bank-9 overlaps
        source = FakeProviderSource({
            "A": region_a,
            "B": region_b,
            "C": SourceHTTPError("C returned HTTP 503", status_code=503),
        })

        result = await merge_providers(
            [endpoint("A"), endpoint("B"), endpoint("C")],
            source=source,
            timeout=5,
            diagnostics=diagnostics,
        )

        assert len(result.providers) == 24
        assert len(result.failures) == 1
        assert result.failures[0].source_api == "C"
        assert result.failures[0].reason == FailureReason.HTTP_STATUS
        assert result.failures[0].status_code == 503
        assert set(result.succeeded_sources) == {"A", "B"}
        assert result.is_partial

    @pytest.mark.asyncio
    async def test_every_provider_has_type_and_source(self, diagnostics):
        """Test that merged providers carry a type and a source."""
        source = FakeProviderSource({
            "A": [{"id": "1", "name": "Lean Bank", "integrationProvider": "LEAN"}],
            "B": [{"id": "2", "name": "Yodlee Bank",
                   "accountLoginForm": {"accountLoginFields": [{"id": "user"}]}}],
        })

        result = await merge_providers(
            [endpoint("A"), endpoint("B")],
            source=source,
            timeout=5,
            diagnostics=diagnostics,
        )

        by_id = {p.identity_key: p for p in result.providers}
        assert by_id["1"].provider_type == ProviderType.LEAN
        assert by_id["1"].source_api == "A"
        assert by_id["2"].provider_type == ProviderType.YODLEE
        assert by_id["2"].source_api == "B"

    @pytest.mark.asyncio
    async def test_slow_region_times_out_alone(self, diagnostics):
        """Test that a region past its timeout fails without blocking others."""
        source = FakeProviderSource(
            {"Fast": make_providers("fast", 3), "Slow": make_providers("slow", 3)},
            delays={"Slow": 1.0},
        )

        result = await merge_providers(
            [endpoint("Fast"), endpoint("Slow", timeout_seconds=0.05)],
            source=source,
            timeout=5,
            diagnostics=diagnostics,
        )

        assert [p.source_api for p in result.providers] == ["Fast"] * 3
        assert result.failures[0].source_api == "Slow"
        assert result.failures[0].reason == FailureReason.TIMEOUT

    @pytest.mark.asyncio
    async def test_unexpected_exception_is_contained(self, diagnostics):
        """Test that a source bug becomes a partial failure."""
        source = FakeProviderSource({
            "A": make_providers("a", 2),
            "B": RuntimeError("boom"),
        })

        result = await merge_providers(
            [endpoint("A"), endpoint("B")],
            source=source,
            timeout=5,
            diagnostics=diagnostics,
        )

        assert len(result.providers) == 2
        assert result.failures[0].reason == FailureReason.UNEXPECTED
        assert "boom" in result.failures[0].message

    @pytest.mark.asyncio
    async def test_all_regions_failing_raises(self, diagnostics, sink):
        """Test that the merge raises only when every region failed."""
        source = FakeProviderSource({
            "A": SourceTimeoutError("A timed out"),
            "B": SourceHTTPError("B returned HTTP 500", status_code=500),
        })

        with pytest.raises(AllSourcesFailedError) as exc_info:
            await merge_providers(
                [endpoint("A"), endpoint("B")],
                source=source,
                timeout=5,
                diagnostics=diagnostics,
            )

        assert isinstance(exc_info.value, MergeError)
        assert {f.source_api for f in exc_info.value.failures} == {"A", "B"}
        assert sink.events_of_type(DiagnosticEventType.ALL_SOURCES_FAILED)

    @pytest.mark.asyncio
    async def test_no_enabled_endpoints_raises(self, diagnostics):
        """Test that an all-disabled endpoint list is rejected."""
        source = FakeProviderSource({})

        with pytest.raises(NoEndpointsConfiguredError):
            await merge_providers(
                [endpoint("A", enabled=False)],
                source=source,
                timeout=5,
                diagnostics=diagnostics,
            )
        assert source.calls == []

    @pytest.mark.asyncio
    async def test_disabled_endpoints_are_not_fetched(self, diagnostics):
        """Test that only enabled endpoints are asked."""
        source = FakeProviderSource({"A": make_providers("a", 1), "B": make_providers("b", 1)})

        await merge_providers(
            [endpoint("A"), endpoint("B", enabled=False)],
            source=source,
            timeout=5,
            diagnostics=diagnostics,
        )

        assert [name for name, _ in source.calls] == ["A"]


class TestDeduplication:
    """Tests for identity-key deduplication."""

    @pytest.mark.asyncio
    async def test_first_completed_region_wins(self, diagnostics):
        """Test that the earliest-completing region keeps a shared provider."""
        source = FakeProviderSource(
            {
                "Early": [{"id": "shared", "name": "Early Copy"}],
                "Late": [{"id": "shared", "name": "Late Copy"}],
            },
            delays={"Early": 0.0, "Late": 0.05},
        )

        result = await merge_providers(
            [endpoint("Late"), endpoint("Early")],
            source=source,
            timeout=5,
            diagnostics=diagnostics,
        )

        assert len(result.providers) == 1
        provider = result.providers[0]
        assert provider.name == "Early Copy"
        assert provider.source_api == "Early"
        assert provider.also_offered_by == ("Late",)

    @pytest.mark.asyncio
    async def test_tts_id_and_id_share_identity(self, diagnostics):
        """Test that a legacy ttsId record dedupes against an id record."""
        source = FakeProviderSource(
            {"A": [{"id": "77", "name": "New"}], "B": [{"ttsId": "77", "name": "Legacy"}]},
            delays={"B": 0.05},
        )

        result = await merge_providers(
            [endpoint("A"), endpoint("B")],
            source=source,
            timeout=5,
            diagnostics=diagnostics,
        )

        assert [p.name for p in result.providers] == ["New"]

    @pytest.mark.asyncio
    async def test_duplicates_are_logged(self, diagnostics, sink):
        """Test that each skipped duplicate leaves a diagnostic event."""
        source = FakeProviderSource(
            {"A": make_providers("x", 2), "B": make_providers("x", 2)},
            delays={"B": 0.05},
        )

        await merge_providers(
            [endpoint("A"), endpoint("B")],
            source=source,
            timeout=5,
            diagnostics=diagnostics,
        )

        skipped = sink.events_of_type(DiagnosticEventType.DUPLICATE_PROVIDER_SKIPPED)
        assert len(skipped) == 2
        assert all(event.details["kept_from"] == "A" for event in skipped)


class TestRecordFiltering:
    """Tests for dropped and filtered records."""

    @pytest.mark.asyncio
    async def test_identity_missing_is_reported(self, diagnostics):
        """Test that records with no id or ttsId become data issues."""
        source = FakeProviderSource({
            "A": [{"name": "Nameless Id"}, {"id": "ok", "name": "Fine"}],
        })

        result = await merge_providers(
            [endpoint("A")],
            source=source,
            timeout=5,
            diagnostics=diagnostics,
        )

        assert [p.identity_key for p in result.providers] == ["ok"]
        assert len(result.data_issues) == 1
        assert result.data_issues[0].reason == DataIssueReason.IDENTITY_MISSING
        assert result.data_issues[0].provider_name == "Nameless Id"
        assert result.is_partial

    @pytest.mark.asyncio
    async def test_invalid_record_is_reported(self, diagnostics):
        """Test that a record failing validation is dropped, not fatal."""
        source = FakeProviderSource({
            "A": [
                {"id": "bad", "name": "Bad", "sortOrder": "not-a-number"},
                {"id": "good", "name": "Good"},
            ],
        })

        result = await merge_providers(
            [endpoint("A")],
            source=source,
            timeout=5,
            diagnostics=diagnostics,
        )

        assert [p.identity_key for p in result.providers] == ["good"]
        assert result.data_issues[0].reason == DataIssueReason.INVALID_RECORD

    @pytest.mark.asyncio
    async def test_unlinkable_providers_are_filtered(self, diagnostics):
        """Test that canLink=false providers are left out after dedup."""
        source = FakeProviderSource({
            "A": [
                {"id": "1", "name": "Open", "canLink": True},
                {"id": "2", "name": "Closed", "canLink": False},
                {"id": "3", "name": "Unspecified"},
            ],
        })

        result = await merge_providers(
            [endpoint("A")],
            source=source,
            timeout=5,
            diagnostics=diagnostics,
        )

        assert [p.name for p in result.providers] == ["Open", "Unspecified"]

    @pytest.mark.asyncio
    async def test_source_payload_stamps_link_target(self, diagnostics):
        """Test that base URL and encryption key are stamped on providers."""
        source = FakeProviderSource({
            "A": SourcePayload(providers=[{"id": "1", "name": "One"}], encryption_key="PEM"),
        })

        result = await merge_providers(
            [endpoint("A")],
            source=source,
            timeout=5,
            diagnostics=diagnostics,
        )

        provider = result.providers[0]
        assert provider.encryption_key == "PEM"
        assert provider.api_base_url == "https://a.example.com"


class TestCredentials:
    """Tests for per-endpoint credentials."""

    @pytest.mark.asyncio
    async def test_override_is_passed_to_source(self, diagnostics):
        """Test that credential overrides reach the source by endpoint name."""
        source = FakeProviderSource({"A": [], "B": []})
        creds = {"A": {"customer_id": "c1", "session_token": "s", "request_token": "r"}}

        await merge_providers(
            [endpoint("A"), endpoint("B")],
            creds,
            source=source,
            timeout=5,
            diagnostics=diagnostics,
        )

        received = dict(source.calls)
        assert received["A"]["customer_id"] == "c1"
        assert received["B"] is None


class TestReduce:
    """Tests for the synchronous reduction step."""

    def test_reduce_keeps_completion_order(self):
        """Test that reduction follows outcome order, not endpoint order."""
        a, b = endpoint("A"), endpoint("B")
        outcomes = [
            BranchOutcome(endpoint=b, payload=SourcePayload(providers=[{"id": "1", "name": "from B"}])),
            BranchOutcome(endpoint=a, payload=SourcePayload(providers=[{"id": "1", "name": "from A"}])),
        ]

        result, events = ProviderMerger.reduce(outcomes)

        assert result.providers[0].name == "from B"
        assert result.providers[0].also_offered_by == ("A",)
        assert any(e.event_type == DiagnosticEventType.SOURCE_FETCH_SUCCEEDED for e in events)

    def test_reduce_records_failures(self):
        """Test that failed outcomes become partial failures."""
        failure = PartialFailure(source_api="A", reason=FailureReason.TIMEOUT, message="slow")
        outcomes = [BranchOutcome(endpoint=endpoint("A"), failure=failure)]

        result, _ = ProviderMerger.reduce(outcomes)

        assert result.failures == (failure,)
        assert result.succeeded_sources == ()


class TestDiagnostics:
    """Tests for merge diagnostic events."""

    @pytest.mark.asyncio
    async def test_events_share_correlation_id(self, diagnostics, sink):
        """Test that every event of one merge carries the same correlation id."""
        source = FakeProviderSource({"A": make_providers("a", 1), "B": SourceTimeoutError("slow")})

        await merge_providers(
            [endpoint("A"), endpoint("B")],
            source=source,
            timeout=5,
            diagnostics=diagnostics,
        )

        events = sink.events
        assert events[0].event_type == DiagnosticEventType.MERGE_STARTED
        assert events[-1].event_type == DiagnosticEventType.MERGE_COMPLETED
        assert len({event.correlation_id for event in events}) == 1
        assert sink.events_of_type(DiagnosticEventType.SOURCE_FETCH_FAILED)[0].source_api == "B"

    @pytest.mark.asyncio
    async def test_every_step_reaches_the_sink(self, diagnostics, sink):
        """Test that each per-source and per-record outcome is recorded once."""
        source = FakeProviderSource(
            {
                "A": [
                    {"id": "shared", "name": "Shared"},
                    {"name": "Nameless"},
                    {"id": "bad", "name": "Bad", "sortOrder": "not-a-number"},
                ],
                "B": [{"id": "shared", "name": "Shared"}],
                "C": SourceHTTPError("C returned HTTP 502", status_code=502),
            },
            delays={"B": 0.05},
        )

        await merge_providers(
            [endpoint("A"), endpoint("B"), endpoint("C")],
            source=source,
            timeout=5,
            diagnostics=diagnostics,
        )

        succeeded = sink.events_of_type(DiagnosticEventType.SOURCE_FETCH_SUCCEEDED)
        assert sorted(event.source_api for event in succeeded) == ["A", "B"]
        failed = sink.events_of_type(DiagnosticEventType.SOURCE_FETCH_FAILED)
        assert [event.source_api for event in failed] == ["C"]
        assert len(sink.events_of_type(DiagnosticEventType.PROVIDER_IDENTITY_MISSING)) == 1
        assert len(sink.events_of_type(DiagnosticEventType.PROVIDER_RECORD_INVALID)) == 1
        skipped = sink.events_of_type(DiagnosticEventType.DUPLICATE_PROVIDER_SKIPPED)
        assert [event.source_api for event in skipped] == ["B"]
