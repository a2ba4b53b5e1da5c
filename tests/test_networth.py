"""
Tests for net worth calculation.
"""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from account_aggregator.aggregation import compute_net_worth, converted_balance, net_worth_trend
from account_aggregator.models import Account, AggregateSnapshot, ExchangeRateTable


def account(account_id: str, have, currency: str = "AED", **fields) -> Account:
    return Account.model_validate({
        "id": account_id,
        "accountClass": "Linked",
        "have": have,
        "currentBalance": {"amount": abs(Decimal(str(have))), "currencyCode": currency},
        **fields,
    })


@pytest.fixture
def aed_usd() -> ExchangeRateTable:
    return ExchangeRateTable.from_pairs({("AED", "USD"): Decimal("0.27")})


class TestComputeNetWorth:
    """Tests for compute_net_worth()."""

    def test_mixed_currency_scenario(self, aed_usd):
        """Test a USD liability and an AED asset totalled in USD."""
        accounts = [
            account("card", Decimal("-500"), "USD"),
            account("savings", Decimal("1000"), "AED"),
        ]

        summary = compute_net_worth(accounts, "USD", aed_usd)

        assert summary.total_assets == Decimal("270")
        assert summary.total_liabilities == Decimal("500")
        assert summary.net_worth == Decimal("-230")
        assert summary.currency == "USD"

    def test_snapshot_with_code_keyed_rates(self):
        """Test totals from a snapshot whose exchangeRates map codes to rates."""
        snapshot = AggregateSnapshot.model_validate({
            "accounts": [
                {"id": "card", "have": -500, "currencyCode": "USD"},
                {"id": "savings", "have": 1000, "currencyCode": "AED"},
            ],
            "exchangeRates": {"USD": 1, "AED": 3.67},
        })

        summary = compute_net_worth(snapshot.active_accounts, "USD", snapshot.rate_table())

        assert abs(summary.total_assets - Decimal("272.48")) < Decimal("0.01")
        assert summary.total_liabilities == Decimal("500")
        assert abs(summary.net_worth - Decimal("-227.52")) < Decimal("0.01")

    def test_sign_decides_side(self, aed_usd):
        """Test that liabilities are exactly the accounts with negative have."""
        accounts = [
            account("a", Decimal("100"), "USD"),
            account("b", Decimal("-40"), "USD"),
            account("c", Decimal("0"), "USD"),
            account("d", Decimal("-60"), "USD"),
        ]

        summary = compute_net_worth(accounts, "USD", aed_usd)

        assert summary.total_assets == Decimal("100")
        assert summary.total_liabilities == Decimal("100")
        assert summary.net_worth == Decimal("0")

    def test_totals_are_never_negative(self, aed_usd):
        """Test that both sides are magnitudes."""
        summary = compute_net_worth([account("debt", Decimal("-10"), "USD")], "USD", aed_usd)
        assert summary.total_assets == Decimal("0")
        assert summary.total_liabilities == Decimal("10")

    def test_missing_rate_uses_unconverted_amount(self, aed_usd):
        """Test that an account without a rate path is counted, not dropped."""
        accounts = [account("gbp", Decimal("50"), "GBP"), account("usd", Decimal("10"), "USD")]

        summary = compute_net_worth(accounts, "USD", aed_usd)

        assert summary.total_assets == Decimal("60")

    def test_inactive_accounts_excluded(self, aed_usd):
        """Test that deactivated and deleted accounts do not count."""
        accounts = [
            account("live", Decimal("10"), "USD"),
            account("closed", Decimal("1000"), "USD", deactivated=True),
            account("gone", Decimal("-1000"), "USD", isDeleted=True),
        ]

        summary = compute_net_worth(accounts, "USD", aed_usd)

        assert summary.net_worth == Decimal("10")

    def test_missing_currency_defaults_to_display(self, aed_usd):
        """Test that an account with no currency is read in the display currency."""
        bare = Account.model_validate({"id": "x", "have": 25})
        assert compute_net_worth([bare], "usd", aed_usd).total_assets == Decimal("25")

    def test_empty_accounts(self, aed_usd):
        """Test the all-zero summary."""
        summary = compute_net_worth([], "AED", aed_usd)
        assert summary.net_worth == Decimal("0")
        assert summary.total_assets == Decimal("0")


class TestTimestamp:
    """Tests for the summary timestamp."""

    def test_explicit_as_of(self, aed_usd):
        """Test that as_of wins."""
        as_of = datetime(2024, 1, 31, tzinfo=timezone.utc)
        assert compute_net_worth([], "USD", aed_usd, as_of=as_of).timestamp == as_of

    def test_rate_table_timestamp(self):
        """Test the rate table timestamp fallback."""
        stamp = datetime(2024, 3, 1, tzinfo=timezone.utc)
        table = ExchangeRateTable.from_pairs({}, timestamp=stamp)
        assert compute_net_worth([], "USD", table).timestamp == stamp

    def test_now_fallback(self, aed_usd):
        """Test that a summary without any timestamp source uses now."""
        before = datetime.now(timezone.utc)
        summary = compute_net_worth([], "USD", aed_usd)
        assert summary.timestamp >= before


class TestConvertedBalance:
    """Tests for converted_balance()."""

    def test_keeps_sign(self, aed_usd):
        """Test that liabilities convert to negative display balances."""
        assert converted_balance(account("x", Decimal("-100"), "AED"), "USD", aed_usd) == Decimal("-27.00")

    def test_have_money_object(self, aed_usd):
        """Test the backend {"amount": ...} shape of have."""
        acc = Account.model_validate({"id": "m", "have": {"amount": "-12.5"}, "currencyCode": "USD"})
        assert converted_balance(acc, "USD", aed_usd) == Decimal("-12.5")


class TestNetWorthTrend:
    """Tests for net_worth_trend()."""

    def test_up(self):
        """Test an increase."""
        trend = net_worth_trend(Decimal("150"), Decimal("100"))
        assert trend.change == Decimal("50")
        assert trend.change_percentage == 50.0
        assert trend.trending == "up"

    def test_down_from_negative(self):
        """Test that the percentage is relative to the previous magnitude."""
        trend = net_worth_trend(Decimal("-300"), Decimal("-200"))
        assert trend.change == Decimal("-100")
        assert trend.change_percentage == -50.0
        assert trend.trending == "down"

    def test_flat_and_zero_previous(self):
        """Test no change and a zero baseline."""
        assert net_worth_trend(Decimal("0"), Decimal("0")).trending == "flat"
        assert net_worth_trend(Decimal("10"), Decimal("0")).change_percentage == 0.0
