"""
Main Orchestrator for the Account Aggregator

This module ties the engine components together and defines the two
end-to-end flows the presentation layer calls:
1. Dashboard (snapshot → net worth → groups → icons → display balances)
2. Link account (regional endpoints → merged provider catalog → queries)

DESIGN DECISION: Both flows only read. Accounts and providers are
created and destroyed by the backend; the engine derives views from
them and never writes anything back.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Mapping, Optional, Sequence

from pydantic import BaseModel, ConfigDict

from account_aggregator.aggregation import (
    assets_by_type,
    compute_net_worth,
    converted_balance,
    group_accounts,
    liabilities_by_type,
    resolve_group_name,
)
from account_aggregator.classification import resolve_icon
from account_aggregator.config import get_settings
from account_aggregator.currency import format_money
from account_aggregator.diagnostics import (
    DiagnosticsLogger,
    DiagnosticsSinkInterface,
    create_correlation_id,
)
from account_aggregator.merging import (
    ProviderMerger,
    popular_providers,
    provider_api_url,
    provider_encryption_key,
    search_providers,
)
from account_aggregator.models import (
    Account,
    AccountGroup,
    AggregateSnapshot,
    IconResolution,
    MergeResult,
    NetWorthSummary,
    Provider,
    RegionalEndpoint,
    TypeBreakdown,
)
from account_aggregator.models.rates import normalize_currency
from account_aggregator.services.sources import ProviderSourceInterface


# =============================================================================
# VIEW MODELS
# =============================================================================

class AccountView(BaseModel):
    """One account as the accounts page lists it."""
    model_config = ConfigDict(frozen=True)

    account: Account
    group: str
    icon: IconResolution
    display_balance: Decimal
    formatted_balance: str


class DashboardView(BaseModel):
    """Everything the dashboard needs for one snapshot and currency."""
    model_config = ConfigDict(frozen=True)

    currency: str
    summary: NetWorthSummary
    groups: list[AccountGroup]
    accounts: list[AccountView]
    assets_by_type: list[TypeBreakdown]
    liabilities_by_type: list[TypeBreakdown]

    @property
    def formatted_net_worth(self) -> str:
        return format_money(self.summary.net_worth, self.currency)


# =============================================================================
# FLOWS
# =============================================================================

class DashboardFlow:
    """
    Builds the dashboard view of an aggregate snapshot.

    Flow:
    1. Rates  → one ExchangeRateTable for the whole cycle
    2. Totals → net worth summary
    3. Groups → accounts page groups with signed totals
    4. Rows   → per-account icon and display-currency balance

    The same snapshot and currency always give the same view.
    """

    def __init__(
        self,
        default_currency: Optional[str] = None,
        logo_url_template: Optional[str] = None,
    ):
        display = get_settings().display
        self._default_currency = default_currency or display.default_currency
        self._logo_url_template = logo_url_template or display.institution_logo_url_template

    def build(
        self,
        snapshot: AggregateSnapshot,
        currency: Optional[str] = None,
        as_of: Optional[datetime] = None,
    ) -> DashboardView:
        """
        Build the dashboard for `snapshot` in `currency`.

        Args:
            snapshot: One aggregate fetch
            currency: Display currency. Defaults to the configured one.
            as_of: Summary timestamp override (for historical views)
        """
        currency = normalize_currency(currency or self._default_currency)
        rate_table = snapshot.rate_table()
        accounts = snapshot.accounts

        summary = compute_net_worth(accounts, currency, rate_table, as_of=as_of)
        groups = group_accounts(accounts, rate_table, currency)

        rows = []
        for account in snapshot.active_accounts:
            balance = converted_balance(account, currency, rate_table)
            rows.append(AccountView(
                account=account,
                group=resolve_group_name(account),
                icon=resolve_icon(account, self._logo_url_template),
                display_balance=balance,
                formatted_balance=format_money(balance, currency),
            ))

        return DashboardView(
            currency=currency,
            summary=summary,
            groups=groups,
            accounts=rows,
            assets_by_type=assets_by_type(accounts, rate_table, currency),
            liabilities_by_type=liabilities_by_type(accounts, rate_table, currency),
        )


class LinkAccountFlow:
    """
    Loads the provider catalog for the "link an account" picker.

    The merged catalog of the last successful load is kept so the
    picker's search box and popular strip do not refetch.
    """

    def __init__(
        self,
        merger: Optional[ProviderMerger] = None,
        endpoints: Optional[Sequence[RegionalEndpoint]] = None,
        diagnostics: Optional[DiagnosticsLogger] = None,
    ):
        self._diagnostics = diagnostics or DiagnosticsLogger()
        self._merger = merger or ProviderMerger(diagnostics=self._diagnostics)
        self._endpoints = (
            list(endpoints) if endpoints is not None
            else get_settings().regional.endpoints()
        )
        self._catalog: Optional[MergeResult] = None

    @property
    def endpoints(self) -> list[RegionalEndpoint]:
        return list(self._endpoints)

    @property
    def catalog(self) -> Optional[MergeResult]:
        return self._catalog

    async def load_catalog(
        self,
        credentials: Optional[Mapping[str, Mapping[str, Any]]] = None,
    ) -> MergeResult:
        """
        Fetch and merge the provider catalog from every enabled region.

        Raises:
            NoEndpointsConfiguredError: If no endpoint is enabled
            AllSourcesFailedError: If every region failed
        """
        result = await self._merger.merge(
            self._endpoints,
            credentials,
            correlation_id=create_correlation_id(),
        )
        self._catalog = result
        return result

    def _providers(self) -> tuple[Provider, ...]:
        return self._catalog.providers if self._catalog else ()

    def search(self, query: str) -> list[Provider]:
        return search_providers(self._providers(), query)

    def popular(self, limit: Optional[int] = None) -> list[Provider]:
        return popular_providers(self._providers(), limit)

    def link_target(self, provider: Provider) -> tuple[str, Optional[str]]:
        """
        Backend base URL and encryption key to link `provider` through.

        Providers without a recorded origin go to the highest-priority
        endpoint.
        """
        primary = max(
            (e for e in self._endpoints if e.enabled),
            key=lambda e: e.priority,
            default=None,
        )
        fallback_url = primary.base_url if primary else ""
        return provider_api_url(provider, fallback_url), provider_encryption_key(provider)


def create_engine_components(
    source: Optional[ProviderSourceInterface] = None,
    sink: Optional[DiagnosticsSinkInterface] = None,
) -> tuple[DashboardFlow, LinkAccountFlow, DiagnosticsLogger]:
    """
    Factory function to create all engine components.

    Args:
        source: Provider source for the merger. Defaults to HTTP.
        sink: Where diagnostic events are persisted.
              If None, events are only logged locally.

    Returns:
        (dashboard_flow, link_account_flow, diagnostics_logger)
    """
    diagnostics = DiagnosticsLogger(sink)
    merger = ProviderMerger(source=source, diagnostics=diagnostics)

    dashboard_flow = DashboardFlow()
    link_account_flow = LinkAccountFlow(merger=merger, diagnostics=diagnostics)

    return dashboard_flow, link_account_flow, diagnostics
