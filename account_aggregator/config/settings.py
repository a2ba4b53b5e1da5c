"""
Configuration Management for the Aggregation Engine

Uses pydantic-settings for type-safe configuration from environment
variables and an optional .env file.

All configuration is centralized here: the regional backend
deployments the Merger fans out to, fetch timeouts, and display
defaults.
"""

from functools import lru_cache
from typing import Any, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from account_aggregator.models.provider import RegionalEndpoint


DEFAULT_SA_API_URL = "https://api.develop.my227.net"
DEFAULT_GLOBAL_API_URL = "https://api-global.dev.vault22.io"


class RegionalApiSettings(BaseSettings):
    """
    Regional backend deployments.

    The SA production and pre-production APIs are only enabled when their
    URL is set. The SA development and Global/UAE APIs always are.
    """

    model_config = SettingsConfigDict(
        env_prefix="REGIONAL_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    sa_prod_api_url: Optional[str] = Field(
        default=None,
        description="SA production API (real Yodlee banks)"
    )
    sa_preprod_api_url: Optional[str] = Field(
        default=None,
        description="SA pre-production API"
    )
    sa_api_url: str = Field(
        default=DEFAULT_SA_API_URL,
        description="SA development API"
    )
    global_api_url: str = Field(
        default=DEFAULT_GLOBAL_API_URL,
        description="Global/UAE API (Lean banks)"
    )
    extra_endpoints: list[RegionalEndpoint] = Field(
        default_factory=list,
        description="Additional endpoints as a JSON list"
    )

    @field_validator("sa_prod_api_url", "sa_preprod_api_url", "sa_api_url", "global_api_url")
    @classmethod
    def strip_trailing_slash(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip().rstrip("/")
        return v or None

    def endpoints(self) -> list[RegionalEndpoint]:
        """Enabled endpoints, highest priority first."""
        configured = [
            RegionalEndpoint(
                name="SA Production (22seven)",
                base_url=self.sa_prod_api_url or "",
                signalr_url="https://signal.22seven.com",
                priority=110,
                enabled=bool(self.sa_prod_api_url),
            ),
            RegionalEndpoint(
                name="SA Pre-Production",
                base_url=self.sa_preprod_api_url or "",
                signalr_url="https://steph.preprod.vault22.io",
                priority=105,
                enabled=bool(self.sa_preprod_api_url),
            ),
            RegionalEndpoint(
                name="SA Development",
                base_url=self.sa_api_url or DEFAULT_SA_API_URL,
                signalr_url="http://steph.develop.my227.net",
                priority=100,
            ),
            RegionalEndpoint(
                name="Global/UAE Development",
                base_url=self.global_api_url or DEFAULT_GLOBAL_API_URL,
                signalr_url="https://steph.develop.my227.net",
                priority=90,
            ),
            *self.extra_endpoints,
        ]
        enabled = [endpoint for endpoint in configured if endpoint.enabled]
        return sorted(enabled, key=lambda endpoint: endpoint.priority, reverse=True)

    @property
    def is_multi_region(self) -> bool:
        return len(self.endpoints()) > 1


class FetchSettings(BaseSettings):
    """Provider fetch behaviour."""

    model_config = SettingsConfigDict(
        env_prefix="FETCH_",
        extra="ignore"
    )

    timeout_seconds: float = Field(
        default=30.0,
        ge=1.0,
        le=120.0,
        description="Per-endpoint timeout for one provider fetch"
    )


class DisplaySettings(BaseSettings):
    """Presentation defaults."""

    model_config = SettingsConfigDict(
        env_prefix="DISPLAY_",
        extra="ignore"
    )

    default_currency: str = Field(
        default="AED",
        min_length=3,
        max_length=3,
        description="Display currency when the user has not picked one"
    )
    institution_logo_url_template: str = Field(
        default="https://spi.22seven.com/246/{provider_id}.png",
        description="Logo URL for linked accounts; must contain {provider_id}"
    )

    @field_validator("default_currency")
    @classmethod
    def upper_currency(cls, v: str) -> str:
        return v.strip().upper()

    @field_validator("institution_logo_url_template")
    @classmethod
    def require_placeholder(cls, v: str) -> str:
        if "{provider_id}" not in v:
            raise ValueError("Logo URL template must contain {provider_id}")
        return v


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Minimum level for local logging"
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def upper_level(cls, v: Any) -> Any:
        return v.upper() if isinstance(v, str) else v


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Sub-settings are loaded lazily to allow partial configuration

    @property
    def regional(self) -> RegionalApiSettings:
        return RegionalApiSettings()

    @property
    def fetch(self) -> FetchSettings:
        return FetchSettings()

    @property
    def display(self) -> DisplaySettings:
        return DisplaySettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, Any]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid} plus `<name>_error`
    entries for the ones that failed. Useful for startup checks.
    """
    results: dict[str, Any] = {}

    settings = get_settings()

    for name in ("regional", "fetch", "display", "app"):
        try:
            _ = getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
