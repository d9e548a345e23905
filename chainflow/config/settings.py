"""Application settings and configuration management."""

from pathlib import Path

import structlog
import yaml
from pydantic import (
    AnyHttpUrl,
    Field,
    SecretStr,
    TypeAdapter,
    ValidationError,
    field_validator,
)
from pydantic_settings import BaseSettings

from ..core.errors import ConfigError
from ..core.types import PipelineConfig, TokenDescriptor, checksum

logger = structlog.get_logger(__name__)

# Default deployment addresses; override per network in YAML or env
USDC = TokenDescriptor(
    address="0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48", decimals=6, symbol="USDC"
)
LINK = TokenDescriptor(
    address="0x514910771af9ca656af840dff83e8264ecf986ca", decimals=18, symbol="LINK"
)
UNISWAP_ROUTER_ADDRESS = "0x3bfa4769fb09eefc5a80d6e87c3b9c650f7ae48e"
UNISWAP_FACTORY_ADDRESS = "0x0227628f3f023bb0b980b67d528571c95c6dac1c"
AAVE_LENDING_POOL_ADDRESS = "0x76b8a634a842a816cd2740eafe80e55af82c56f7"

_HTTP_URL = TypeAdapter(AnyHttpUrl)


class AppSettings(BaseSettings):
    """Application settings with environment variable support."""

    # Chain connection and wallet
    rpc_url: str = Field(description="EVM JSON-RPC URL")
    private_key: SecretStr | None = Field(
        default=None, description="Hex private key of the signing wallet"
    )
    keystore_path: str | None = Field(
        default=None, description="Path to an encrypted JSON keystore"
    )
    keystore_password: SecretStr | None = Field(
        default=None, description="Password for the keystore file"
    )

    # Tokens
    token_in: TokenDescriptor = Field(default=USDC, description="Token sold")
    token_out: TokenDescriptor = Field(
        default=LINK, description="Token bought and deposited"
    )

    # Contracts
    router_address: str = Field(
        default=UNISWAP_ROUTER_ADDRESS, description="Swap router address"
    )
    factory_address: str = Field(
        default=UNISWAP_FACTORY_ADDRESS, description="Pool factory address"
    )
    lending_pool_address: str = Field(
        default=AAVE_LENDING_POOL_ADDRESS, description="Lending pool address"
    )
    fee_tier: int = Field(default=3000, ge=0, description="Pool fee tier (3000 = 0.3%)")
    referral_code: int = Field(default=0, ge=0, description="Lending referral code")

    # Transaction settings
    gas_multiplier: float = Field(
        default=1.2, gt=0, description="Multiplier applied to gas estimates"
    )
    confirmation_timeout_seconds: float | None = Field(
        default=None, description="Receipt wait deadline; None waits indefinitely"
    )
    explorer_tx_url: str = Field(
        default="https://sepolia.etherscan.io/tx/{tx_hash}",
        description="Block explorer transaction URL template",
    )

    # Notifications
    telegram_bot_token: str | None = Field(
        default=None, description="Telegram bot token"
    )
    telegram_admin_ids: list[int] = Field(
        default_factory=list, description="Telegram admin user IDs"
    )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
        "validate_default": True,
    }

    @field_validator("rpc_url")
    @classmethod
    def _http_url(cls, value: str) -> str:
        try:
            _HTTP_URL.validate_python(value)
        except ValidationError:
            raise ValueError("rpc_url must be an http(s) URL") from None
        return value

    @field_validator("router_address", "factory_address", "lending_pool_address")
    @classmethod
    def _checksum_contract(cls, value: str) -> str:
        return checksum(value)

    @field_validator("explorer_tx_url")
    @classmethod
    def _has_placeholder(cls, value: str) -> str:
        if "{tx_hash}" not in value:
            raise ValueError("explorer_tx_url must contain a {tx_hash} placeholder")
        return value

    @field_validator("confirmation_timeout_seconds")
    @classmethod
    def _positive_timeout(cls, value: float | None) -> float | None:
        if value is not None and value <= 0:
            raise ValueError("confirmation_timeout_seconds must be positive")
        return value

    def pipeline_config(self) -> PipelineConfig:
        """Return the immutable pipeline configuration."""
        return PipelineConfig(
            token_in=self.token_in,
            token_out=self.token_out,
            router_address=self.router_address,
            factory_address=self.factory_address,
            lending_pool_address=self.lending_pool_address,
            fee_tier=self.fee_tier,
            referral_code=self.referral_code,
        )


def load_settings(yaml_path: str | None = None) -> AppSettings:
    """Load settings from an optional YAML file and environment variables.

    Args:
        yaml_path: Path to YAML configuration file, or None for env only

    Returns:
        AppSettings instance with loaded configuration

    Raises:
        ConfigError: If the file is missing, unparsable or the values are invalid
    """
    yaml_config: dict = {}

    if yaml_path is not None:
        yaml_file = Path(yaml_path)
        if not yaml_file.exists():
            raise ConfigError(f"Configuration file not found: {yaml_path}")

        try:
            with open(yaml_file, encoding="utf-8") as f:
                yaml_config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            logger.error("Failed to parse YAML configuration", error=str(e))
            raise ConfigError(f"Invalid YAML configuration: {e}") from e

        if not isinstance(yaml_config, dict):
            raise ConfigError(f"Configuration root must be a mapping: {yaml_path}")

    logger.info("Loading configuration", yaml_path=yaml_path)

    try:
        settings = AppSettings(**yaml_config)
    except ValidationError as e:
        logger.error("Configuration validation failed", error=str(e))
        raise ConfigError(f"Invalid configuration: {e}") from e

    logger.info(
        "Configuration loaded successfully",
        token_in=settings.token_in.label,
        token_out=settings.token_out.label,
        fee_tier=settings.fee_tier,
        rpc_url=settings.rpc_url[:50] + "..."
        if len(settings.rpc_url) > 50
        else settings.rpc_url,
    )

    return settings
