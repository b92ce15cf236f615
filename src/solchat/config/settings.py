"""Configuration management for solchat using Pydantic Settings."""

from functools import lru_cache
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)


class AssistantSettings(BaseModel):
    """Dialogue engine tuning."""

    model_config = ConfigDict(extra="ignore")

    network_fee_sol: str = "0.000005"  # Kept as text so Decimal sees the exact value
    low_balance_threshold: float = 0.05
    # Draw must exceed the threshold for the tip to be shown, in candidate order:
    # swap tip, token-info tip, market-trends tip, history tip
    tip_thresholds: list[float] = Field(default_factory=lambda: [0.6, 0.6, 0.7, 0.7])
    advice_prefix_probability: float = 1.0
    wallet_retry_budget: int = 3
    collaborator_timeout: float = 10.0


class PriceSettings(BaseModel):
    """Price oracle configuration."""

    model_config = ConfigDict(extra="ignore")

    base_url: str = "https://api.jup.ag/price/v2"
    timeout: float = 10.0
    cache_ttl: int = 60


class RpcSettings(BaseModel):
    """Solana RPC configuration."""

    model_config = ConfigDict(extra="ignore")

    url: str = "https://api.mainnet-beta.solana.com"
    timeout: float = 15.0
    history_limit: int = 10
    explorer_url: str = "https://explorer.solana.com/address"


class LLMSettings(BaseModel):
    """Model-backed response generator configuration."""

    model_config = ConfigDict(extra="ignore")

    enabled: bool = False
    base_url: str = "https://api.openai.com/v1"
    model: str = "gpt-4o-mini"
    api_key: Optional[str] = None
    temperature: float = 0.4
    max_tokens: int = 600
    timeout: float = 20.0


class Settings(BaseSettings):
    """Main solchat configuration.

    Configuration is loaded from:
    1. Environment variables (SOLCHAT_* prefix)
    2. Config file (~/.solchat/config.yml)
    3. Default values

    Environment variables take precedence over the config file.
    """

    model_config = SettingsConfigDict(
        env_prefix="SOLCHAT_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    demo_mode: bool = Field(default=False, description="Use fixed demo prices and no network")

    assistant: AssistantSettings = Field(default_factory=AssistantSettings)
    prices: PriceSettings = Field(default_factory=PriceSettings)
    rpc: RpcSettings = Field(default_factory=RpcSettings)
    llm: LLMSettings = Field(default_factory=LLMSettings)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            YamlConfigSettingsSource(settings_cls, yaml_file=get_config_path()),
        )


def get_config_path() -> Path:
    """Get the config file path."""
    return Path.home() / ".solchat" / "config.yml"


def load_config_file() -> dict:
    """Load configuration from YAML file if it exists."""
    config_path = get_config_path()
    if config_path.exists():
        with open(config_path) as f:
            return yaml.safe_load(f) or {}
    return {}


def save_config_file(config: dict) -> None:
    """Save configuration to YAML file."""
    config_path = get_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)
    with open(config_path, "w") as f:
        yaml.safe_dump(config, f, default_flow_style=False)


@lru_cache
def get_settings() -> Settings:
    """Get the application settings (cached).

    Loads from environment variables and config file.
    """
    return Settings()


def reset_settings_cache() -> None:
    """Clear the settings cache to reload configuration."""
    get_settings.cache_clear()


def create_default_config() -> Path:
    """Create a default config file if it doesn't exist.

    Returns:
        Path to the config file
    """
    config_path = get_config_path()
    if not config_path.exists():
        default_config = {
            "assistant": AssistantSettings().model_dump(),
            "prices": PriceSettings().model_dump(),
            "rpc": RpcSettings().model_dump(),
            "llm": LLMSettings().model_dump(exclude={"api_key"}),
        }
        save_config_file(default_config)
    return config_path
