"""
Account Models for the Aggregation Engine

These models describe the account side of an aggregate snapshot:
the raw account records fetched by the backend client, and the
derived values the engine produces from them (net worth summaries,
account groups, icon resolutions).

CRITICAL: The sign of `have` is the ONLY source of truth for
asset-vs-liability classification. No other field may contradict it.

Raw backend JSON is camelCase; every model accepts both the camelCase
alias and the snake_case field name.
"""

from datetime import datetime
from decimal import Decimal, InvalidOperation
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

class AccountClass(str, Enum):
    """
    Well-known account classes.

    The backend sends more class tags than these (UnitTrust, Wealth, ...),
    so `Account.account_class` stays a plain string and this enum only
    names the values the engine branches on.
    """
    LINKED = "Linked"
    MANUAL = "Manual"
    CRYPTO = "Crypto"
    BANK = "Bank"
    CREDIT_CARD = "CreditCard"
    INVESTMENT = "Investment"
    LOAN = "Loan"
    REWARDS = "Rewards"
    VEHICLE = "Vehicle"
    PROPERTY = "Property"


class DebitOrCredit(str, Enum):
    """Orientation flag carried by backend money objects."""
    DEBIT = "debit"
    CREDIT = "credit"


# =============================================================================
# MONEY
# =============================================================================

class Money(BaseModel):
    """
    A monetary amount with its currency.

    The backend spells the currency field both `currencyCode` and
    `currency`; both are accepted.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )

    amount: Decimal = Decimal("0")
    currency_code: Optional[str] = None
    debit_or_credit: Optional[DebitOrCredit] = None

    @field_validator("currency_code", mode="before")
    @classmethod
    def normalize_code(cls, v: Any) -> Optional[str]:
        if v is None:
            return None
        code = str(v).strip().upper()
        return code or None

    @model_validator(mode="before")
    @classmethod
    def accept_currency_spelling(cls, data: Any) -> Any:
        if (
            isinstance(data, dict)
            and "currencyCode" not in data
            and "currency_code" not in data
            and "currency" in data
        ):
            data = {**data, "currencyCode": data["currency"]}
        return data


def _coerce_decimal(value: Any) -> Decimal:
    """Convert a JSON number (or numeric string) to Decimal."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise ValueError("Boolean is not a monetary amount")
    try:
        return Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError) as e:
        raise ValueError(f"Invalid monetary amount: {value!r}") from e


# =============================================================================
# ACCOUNT
# =============================================================================

class Account(BaseModel):
    """
    A financial position owned by a customer.

    Created and destroyed by the external backend. The engine only reads
    these records and derives aggregates from them.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
        str_strip_whitespace=True,
    )

    id: str = Field(
        ...,
        min_length=1,
        description="Account id, unique within a snapshot"
    )
    account_class: str = Field(
        default="",
        description="Account class tag (Linked, Manual, Crypto, Bank, ...)"
    )
    account_type: Optional[str] = None
    manual_account_type: Optional[str] = None

    # Icon hints
    account_icon: Optional[str] = Field(
        default=None,
        description="Explicit icon key, or 'Manual'/absent to derive from type"
    )
    account_icon_image_url: Optional[str] = None
    service_provider_id: Optional[str] = None

    # Balances
    have: Decimal = Field(
        default=Decimal("0"),
        description="Signed amount in native currency (positive = asset)"
    )
    current_balance: Optional[Money] = None
    currency_code: Optional[str] = None

    # Status
    deactivated: bool = False
    is_deleted: bool = False

    # Labels
    name: Optional[str] = None
    display_name: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def accept_currency_spelling(cls, data: Any) -> Any:
        if (
            isinstance(data, dict)
            and "currencyCode" not in data
            and "currency_code" not in data
            and "currency" in data
        ):
            data = {**data, "currencyCode": data["currency"]}
        return data

    @field_validator("have", mode="before")
    @classmethod
    def unwrap_have(cls, v: Any) -> Decimal:
        """
        Accept a bare number or the backend money object {"amount": ...}.

        debitOrCredit on the money object never flips the amount's sign.
        """
        if v is None:
            return Decimal("0")
        if isinstance(v, Money):
            return v.amount
        if isinstance(v, dict):
            return _coerce_decimal(v.get("amount") or 0)
        return _coerce_decimal(v)

    @field_validator("currency_code", mode="before")
    @classmethod
    def normalize_currency_code(cls, v: Any) -> Optional[str]:
        if v is None:
            return None
        code = str(v).strip().upper()
        return code or None

    @field_validator("account_class", mode="before")
    @classmethod
    def default_account_class(cls, v: Any) -> str:
        if v is None:
            return ""
        if isinstance(v, Enum):
            return str(v.value)
        return str(v)

    @property
    def is_active(self) -> bool:
        """Deactivated and deleted accounts are excluded from totals."""
        return not (self.deactivated or self.is_deleted)

    @property
    def is_liability(self) -> bool:
        return self.have < 0

    @property
    def label(self) -> str:
        return self.display_name or self.name or self.id

    def native_currency(self, default: str) -> str:
        """
        Currency the `have` amount is denominated in.

        Falls back from currentBalance.currencyCode to currencyCode and
        finally to `default` (the requested display currency).
        """
        if self.current_balance and self.current_balance.currency_code:
            return self.current_balance.currency_code
        if self.currency_code:
            return self.currency_code
        return default.strip().upper()


# =============================================================================
# DERIVED RESULTS
# =============================================================================

class IconResolution(BaseModel):
    """Where to load an account's icon from."""
    model_config = ConfigDict(frozen=True)

    is_local: bool = Field(
        ...,
        description="True for a bundled icon, False for a remote URL"
    )
    icon_path: str = Field(
        ...,
        min_length=1,
        description="Bundled icon name or fully-qualified URL"
    )


class NetWorthSummary(BaseModel):
    """Totals for a set of accounts in one display currency."""
    model_config = ConfigDict(frozen=True)

    total_assets: Decimal = Field(ge=0)
    total_liabilities: Decimal = Field(ge=0)
    net_worth: Decimal
    currency: str
    timestamp: datetime


class AccountGroup(BaseModel):
    """
    A category of accounts with a signed total.

    Derived on every grouping pass and never mutated once returned.
    Liabilities stay negative inside `total`.
    """
    model_config = ConfigDict(frozen=True)

    name: str
    icon_path: str
    sort_order: int = Field(ge=0)
    accounts: tuple[Account, ...] = ()
    total: Decimal = Decimal("0")
    currency: str

    @property
    def account_count(self) -> int:
        return len(self.accounts)


class TypeBreakdown(BaseModel):
    """One row of an assets-by-type or liabilities-by-type breakdown."""
    model_config = ConfigDict(frozen=True)

    type: str
    value: Decimal = Field(ge=0)
    percentage: float = Field(ge=0.0, le=100.0)


class NetWorthTrend(BaseModel):
    """Change between two net worth readings."""
    model_config = ConfigDict(frozen=True)

    change: Decimal
    change_percentage: float
    trending: str = Field(pattern="^(up|down|flat)$")
