"""
Provider Catalog Models

A Provider is a linkable institution/integration entry. Catalogs of
providers come from several regional backend deployments, each with
its own record shape. The Merger turns those raw records into these
typed models exactly once; nothing downstream re-inspects the raw
fields to guess a provider's integration family.

CRITICAL: Every Provider surfaced by the Merger carries exactly one
`provider_type` and exactly one `source_api`.
"""

from collections import Counter
from enum import Enum
from typing import Any, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel


# =============================================================================
# ENUMS
# =============================================================================

class ProviderType(str, Enum):
    """Integration family of a provider, inferred from the record shape."""
    LEAN = "LEAN"
    VEZGO = "VEZGO"
    YODLEE = "YODLEE"
    UNKNOWN = "UNKNOWN"


class FailureReason(str, Enum):
    """Why a regional source produced no providers."""
    TIMEOUT = "timeout"
    HTTP_STATUS = "http_status"
    CONNECTION = "connection"
    INVALID_RESPONSE = "invalid_response"
    UNEXPECTED = "unexpected"


class DataIssueReason(str, Enum):
    """Why a single provider record was dropped from the merged catalog."""
    IDENTITY_MISSING = "identity_missing"
    INVALID_RECORD = "invalid_record"


# =============================================================================
# PROVIDER
# =============================================================================

class AccountLoginField(BaseModel):
    """One credential field of a credential-based (Yodlee) login form."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="allow",
    )

    id: Optional[str] = None
    label: Optional[str] = None
    field_type: Optional[str] = None


class AccountLoginForm(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="allow",
    )

    account_login_fields: list[AccountLoginField] = Field(default_factory=list)

    @field_validator("account_login_fields", mode="before")
    @classmethod
    def default_fields(cls, v: Any) -> Any:
        return [] if v is None else v


class Provider(BaseModel):
    """
    A linkable financial institution.

    Unknown backend fields are preserved (extra="allow") so the link
    flow can hand the record back to the backend untouched.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="allow",
        str_strip_whitespace=True,
    )

    # Identity
    id: Optional[str] = None
    tts_id: Optional[str] = None

    # Display
    name: str = Field(default="", description="Institution name")
    logo_url: Optional[str] = None

    # Integration signals
    integration_provider: Optional[str] = None
    account_login_form: Optional[AccountLoginForm] = None

    # Linking
    can_link: Optional[bool] = None
    is_beta: Optional[bool] = None
    sort_order: Optional[int] = None

    # Assigned by the Merger
    provider_type: ProviderType = ProviderType.UNKNOWN
    source_api: Optional[str] = None
    api_base_url: Optional[str] = None
    encryption_key: Optional[str] = None
    also_offered_by: tuple[str, ...] = ()

    @model_validator(mode="before")
    @classmethod
    def accept_legacy_logo(cls, data: Any) -> Any:
        """Older catalogs send `logo` instead of `logoUrl`."""
        if isinstance(data, dict) and not data.get("logoUrl") and data.get("logo"):
            data = {**data, "logoUrl": data["logo"]}
        return data

    @field_validator("id", "tts_id", mode="before")
    @classmethod
    def stringify_identity(cls, v: Any) -> Optional[str]:
        if v is None:
            return None
        value = str(v).strip()
        return value or None

    @field_validator("name", mode="before")
    @classmethod
    def default_name(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("provider_type", mode="before")
    @classmethod
    def tolerate_foreign_type(cls, v: Any) -> Any:
        """Backend `providerType` tags outside our enum read as UNKNOWN."""
        if isinstance(v, ProviderType):
            return v
        try:
            return ProviderType(str(v).upper())
        except ValueError:
            return ProviderType.UNKNOWN

    @property
    def identity_key(self) -> Optional[str]:
        """Canonical `id`, falling back to the legacy `ttsId`."""
        return self.id or self.tts_id

    @property
    def is_linkable(self) -> bool:
        """Absent or true `canLink` means linkable."""
        return self.can_link is not False

    @property
    def login_field_count(self) -> int:
        if self.account_login_form is None:
            return 0
        return len(self.account_login_form.account_login_fields)


# =============================================================================
# REGIONAL ENDPOINTS
# =============================================================================

class RegionalEndpoint(BaseModel):
    """
    One regional backend deployment the Merger fans out to.

    `credentials` is opaque to the engine; it is handed to the provider
    source unchanged.
    """
    model_config = ConfigDict(frozen=True)

    name: str = Field(
        ...,
        min_length=1,
        description="Logical name, stamped on providers as source_api"
    )
    base_url: str = Field(default="", description="Backend base URL")
    priority: int = Field(default=0, description="Higher is listed first")
    enabled: bool = True
    timeout_seconds: Optional[float] = Field(
        default=None,
        gt=0,
        description="Per-branch timeout; None uses the merger default"
    )
    signalr_url: Optional[str] = None
    credentials: dict[str, Any] = Field(default_factory=dict)


class SourcePayload(BaseModel):
    """What a provider source returns for one endpoint."""

    providers: list[dict[str, Any]] = Field(default_factory=list)
    encryption_key: Optional[str] = None


# =============================================================================
# MERGE RESULTS
# =============================================================================

class PartialFailure(BaseModel):
    """One regional source that failed and was excluded from the merge."""
    model_config = ConfigDict(frozen=True)

    source_api: str
    reason: FailureReason
    message: str = Field(..., max_length=500)
    status_code: Optional[int] = None


class DataIssue(BaseModel):
    """A single provider record dropped during the merge."""
    model_config = ConfigDict(frozen=True)

    source_api: str
    reason: DataIssueReason
    message: str
    provider_name: Optional[str] = None


class MergeResult(BaseModel):
    """Outcome of one Merger invocation."""
    model_config = ConfigDict(frozen=True)

    providers: tuple[Provider, ...] = ()
    failures: tuple[PartialFailure, ...] = ()
    data_issues: tuple[DataIssue, ...] = ()
    succeeded_sources: tuple[str, ...] = ()

    @property
    def is_partial(self) -> bool:
        """True when at least one source failed or a record was dropped."""
        return bool(self.failures or self.data_issues)

    @property
    def failed_sources(self) -> list[str]:
        return [failure.source_api for failure in self.failures]

    def counts_by_source(self) -> dict[str, int]:
        """Number of merged providers attributed to each source."""
        return dict(Counter(p.source_api or "unknown" for p in self.providers))
