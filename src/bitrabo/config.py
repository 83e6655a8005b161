"""Application configuration using pydantic-settings.

Loaded once at startup and passed explicitly to the provider factory.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    # ======================
    # API
    # ======================
    api_host: str = Field(default="0.0.0.0", description="API server host")
    api_port: int = Field(default=3000, description="API server port")

    # ======================
    # Environment
    # ======================
    environment: str = Field(default="development", description="Runtime environment")
    debug: bool = Field(default=False, description="Enable debug mode")

    # ======================
    # Upstream fallback
    # ======================
    upstream_url: str = Field(
        default="https://swap.onekeycn.com",
        description="Full-service aggregator that receives unsupported /swap/v1 requests",
    )
    upstream_timeout_seconds: float = Field(default=30.0, description="Proxy request timeout")

    # ======================
    # Aggregation
    # ======================
    provider_timeout_seconds: float = Field(
        default=10.0, gt=0, description="Per-provider quote timeout"
    )
    enabled_providers: str = Field(
        default="0x,1inch,okx,jupiter,lifi,changehero",
        description="Comma-separated provider ids to aggregate",
    )
    provider_priority: str = Field(
        default="1inch,0x,okx,lifi,jupiter,changehero",
        description="Comma-separated tie-break order for equal quotes",
    )
    default_slippage_bps: int = Field(default=50, ge=0, le=5000, description="Default slippage (0.5%)")

    # ======================
    # Platform fee
    # ======================
    platform_fee_percent: float = Field(
        default=0.005, ge=0, lt=1, description="Platform fee as a fraction (0.005 = 0.5%)"
    )
    fee_receiver_evm: Optional[str] = Field(
        default=None, description="EVM wallet receiving the platform fee"
    )
    jupiter_fee_account: Optional[str] = Field(
        default=None, description="Jupiter referral fee token account"
    )
    lifi_integrator: str = Field(default="bitrabo", description="LI.FI integrator string")

    # ======================
    # Provider credentials
    # ======================
    zeroex_api_key: str = Field(default="", description="0x API key")
    oneinch_api_key: str = Field(default="", description="1inch API key")
    okx_api_key: str = Field(default="", description="OKX API key")
    okx_secret_key: str = Field(default="", description="OKX API secret")
    okx_passphrase: str = Field(default="", description="OKX API passphrase")
    okx_project_id: str = Field(default="", description="OKX project id")
    changehero_api_key: str = Field(default="", description="ChangeHero API key")
    lifi_api_key: str = Field(default="", description="LI.FI API key (optional, raises rate limits)")

    # ======================
    # Provider endpoints
    # ======================
    oneinch_api_url: str = Field(
        default="https://api.1inch.dev/swap/v6.0", description="1inch swap API URL"
    )
    okx_api_url: str = Field(default="https://www.okx.com", description="OKX API URL")
    jupiter_api_url: str = Field(
        default="https://quote-api.jup.ag/v6", description="Jupiter API URL"
    )
    lifi_api_url: str = Field(default="https://li.quest/v1", description="LI.FI API URL")
    changehero_api_url: str = Field(
        default="https://api.changehero.io/v2", description="ChangeHero API URL"
    )

    @property
    def enabled_provider_ids(self) -> list[str]:
        """Parse enabled providers into a list."""
        return _split_csv(self.enabled_providers)

    @property
    def provider_priority_list(self) -> list[str]:
        """Parse provider priority into a list."""
        return _split_csv(self.provider_priority)

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment.lower() == "production"

    def get_safe_dict(self) -> dict:
        """Return settings dict with secrets redacted."""
        return {
            "environment": self.environment,
            "debug": self.debug,
            "api_host": self.api_host,
            "api_port": self.api_port,
            "upstream_url": self.upstream_url,
            "aggregation": {
                "providers": self.enabled_provider_ids,
                "priority": self.provider_priority_list,
                "timeout_seconds": self.provider_timeout_seconds,
                "default_slippage_bps": self.default_slippage_bps,
            },
            "fee": {
                "percent": self.platform_fee_percent,
                "receiver_evm": self.fee_receiver_evm or "(not set)",
                "jupiter_fee_account": self.jupiter_fee_account or "(not set)",
                "lifi_integrator": self.lifi_integrator,
            },
            "credentials": {
                "0x": _mask(self.zeroex_api_key),
                "1inch": _mask(self.oneinch_api_key),
                "okx": _mask(self.okx_api_key),
                "okx_secret": _mask(self.okx_secret_key),
                "changehero": _mask(self.changehero_api_key),
            },
        }


def _split_csv(value: str) -> list[str]:
    return [item.strip().lower() for item in value.split(",") if item.strip()]


def _mask(secret: str) -> str:
    return "***" if secret else "(not set)"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
