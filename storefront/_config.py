"""
Settings — static storefront configuration.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import timedelta

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_PREFIX = "STOREFRONT_"


# ═══════════════════════════════════════════════════════════════════════════════
# Settings
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Settings:
    """
    Storefront configuration.

    Fluent builder pattern — chain methods to configure.

    Example:
        settings = (
            Settings()
            .with_api_url("https://shop.example.com/api")
            .with_shipping(charge=40, free_over=999)
            .with_gateway(key="rzp_test_123")
        )

    Note: Immutable — each method returns new Settings.
    """

    api_url: str = "http://localhost:5000/api"
    shipping_charge: float = 50
    free_shipping_threshold: float = 500
    gateway_key: str = ""
    merchant_name: str = "ShopAura"
    theme_color: str = "#4F46E5"
    request_timeout: timedelta = timedelta(seconds=10)
    gateway_load_timeout: timedelta = timedelta(seconds=15)
    login_path: str = "/login"
    default_destination: str = "/"

    def with_api_url(self, url: str) -> Settings:
        return replace(self, api_url=url.rstrip("/"))

    def with_shipping(self, *, charge: float, free_over: float) -> Settings:
        """
        Set flat shipping charge and the subtotal at which shipping becomes free.

        Example:
            .with_shipping(charge=50, free_over=500)
        """
        if charge < 0 or free_over < 0:
            raise ValueError("shipping values must be non-negative")
        return replace(self, shipping_charge=charge, free_shipping_threshold=free_over)

    def with_gateway(self, *, key: str, merchant_name: str | None = None) -> Settings:
        return replace(
            self,
            gateway_key=key,
            merchant_name=merchant_name if merchant_name is not None else self.merchant_name,
        )

    def with_timeouts(
        self,
        *,
        request_seconds: float | None = None,
        gateway_load_seconds: float | None = None,
    ) -> Settings:
        return replace(
            self,
            request_timeout=(
                timedelta(seconds=request_seconds) if request_seconds is not None else self.request_timeout
            ),
            gateway_load_timeout=(
                timedelta(seconds=gateway_load_seconds)
                if gateway_load_seconds is not None
                else self.gateway_load_timeout
            ),
        )

    @classmethod
    def from_env(cls) -> Settings:
        """
        Load settings from STOREFRONT_* environment variables.

        Unset or empty variables keep their defaults. A malformed or
        negative value raises ValueError naming the variable.
        """
        try:
            env = Environment()
        except ValidationError as e:
            problems = "; ".join(
                f"{ENV_PREFIX}{str(err['loc'][0]).upper()}: {err['msg']}" for err in e.errors()
            )
            raise ValueError(f"invalid storefront environment ({problems})") from e

        overrides = env.model_dump(exclude_none=True)
        for name in ("request_timeout", "gateway_load_timeout"):
            if name in overrides:
                overrides[name] = timedelta(seconds=overrides[name])
        settings = replace(cls(), **overrides)
        return settings.with_api_url(settings.api_url)


class Environment(BaseSettings):
    """STOREFRONT_* overrides. Anything left None keeps the Settings default."""

    model_config = SettingsConfigDict(env_prefix=ENV_PREFIX, env_ignore_empty=True, extra="ignore")

    api_url: str | None = None
    shipping_charge: float | None = Field(default=None, ge=0)
    free_shipping_threshold: float | None = Field(default=None, ge=0)
    gateway_key: str | None = None
    merchant_name: str | None = None
    request_timeout: float | None = Field(default=None, gt=0)
    gateway_load_timeout: float | None = Field(default=None, gt=0)


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = ("Settings", "Environment", "ENV_PREFIX")
