"""
Settings management for the Solana Arbitrage Bot.
Combines environment variables with a JSON (or YAML) bot configuration file
and loads the wallet key file.
"""

import json
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional, Union

import base58
import yaml
from pydantic import BaseModel, ConfigDict, Field, SecretStr, ValidationError, field_validator, model_validator
from pydantic.alias_generators import to_camel
from pydantic_settings import BaseSettings, SettingsConfigDict
from solders.pubkey import Pubkey

from arbbot.errors import ConfigError


# ===========================================
# BOT CONFIGURATION (config.json)
# ===========================================

class BotConfig(BaseModel):
    """
    Trading parameters loaded once at startup.

    Keys may be written in camelCase (``targetGainPercentage``) or
    snake_case (``target_gain_percentage``). Intervals are milliseconds.
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    # Endpoints
    solana_rpc_url: str
    helius_api_url: str
    helius_api_key: SecretStr
    jupiter_api_url: str = "https://quote-api.jup.ag/v6"
    jupiter_api_key: SecretStr = SecretStr("")

    # Token pair
    input_mint: str
    output_mint: str

    # Strategy
    target_gain_percentage: float = Field(..., ge=0)
    price_watch_interval: int = Field(..., gt=0)
    slippage_tolerance: float = Field(..., ge=0, le=100)
    trade_throttle: int = Field(..., ge=0)
    trade_amount: int = Field(default=1_000_000, gt=0)

    # Limits
    rate_limit: int = Field(default=5, ge=1)
    rate_limit_window: int = Field(default=60_000, gt=0)
    max_retries: int = Field(default=3, ge=1)

    # Misc
    trade_log_path: str = "trades.json"
    commitment: str = "confirmed"
    rpc_timeout: int = Field(default=30, gt=0)

    @field_validator("input_mint", "output_mint")
    @classmethod
    def validate_mint(cls, v: str) -> str:
        """Mints must be valid base58 public keys."""
        try:
            Pubkey.from_string(v)
        except Exception:
            raise ValueError(f"Invalid mint address: {v!r}")
        return v

    @field_validator("solana_rpc_url", "helius_api_url", "jupiter_api_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @field_validator("commitment")
    @classmethod
    def validate_commitment(cls, v: str) -> str:
        """Validate commitment level."""
        valid = {"processed", "confirmed", "finalized"}
        if v.lower() not in valid:
            raise ValueError(f"Commitment must be one of: {valid}")
        return v.lower()

    @model_validator(mode="after")
    def validate_pair(self) -> "BotConfig":
        if self.input_mint == self.output_mint:
            raise ValueError("input_mint and output_mint must differ")
        return self

    @property
    def slippage_bps(self) -> int:
        """Slippage tolerance in basis points."""
        return int(round(self.slippage_tolerance * 100))


# ===========================================
# PROCESS SETTINGS (environment)
# ===========================================

class Settings(BaseSettings):
    """
    Process-level settings read from environment variables (prefix ``ARB_``)
    or a ``.env`` file.
    """

    model_config = SettingsConfigDict(
        env_prefix="ARB_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    config_path: str = Field(
        default="config.json",
        description="Path to the bot configuration file (JSON or YAML)",
    )
    keypair_path: str = Field(
        default="env.bot-keypair.json",
        description="Path to the JSON key file holding secretKey",
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )
    log_file: Optional[str] = Field(
        default=None,
        description="Write logs to this file instead of stdout",
    )
    dry_run: bool = Field(
        default=False,
        description="Dry run mode - build trades without submitting them",
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()


# ===========================================
# FILE LOADERS
# ===========================================

def _read_structured_file(path: Path) -> Any:
    """Parse a JSON or YAML file depending on its suffix."""
    if not path.exists():
        raise ConfigError(f"File not found: {path}")

    try:
        with open(path, "r", encoding="utf-8") as f:
            if path.suffix.lower() in {".yaml", ".yml"}:
                return yaml.safe_load(f)
            return json.load(f)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigError(f"Malformed file {path}: {e}")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}")


def load_config(path: Union[str, Path]) -> BotConfig:
    """
    Load and validate the bot configuration file.

    Args:
        path: Path to config.json (or a .yaml/.yml file)

    Returns:
        Immutable BotConfig

    Raises:
        ConfigError: If the file is missing, malformed or invalid
    """
    data = _read_structured_file(Path(path))

    if not isinstance(data, dict):
        raise ConfigError(f"Config root must be an object: {path}")

    try:
        return BotConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {path}: {e}")


def load_secret_key(path: Union[str, Path]) -> bytes:
    """
    Load the wallet secret key from a JSON key file.

    Supports:
    - ``{"secretKey": [12, 34, ...]}`` (64-byte keypair or 32-byte seed)
    - ``{"secretKey": "<base58 string>"}``

    Args:
        path: Path to the key file

    Returns:
        Raw secret key bytes

    Raises:
        ConfigError: If the file is missing or the key is malformed
    """
    data = _read_structured_file(Path(path))

    if not isinstance(data, dict) or "secretKey" not in data:
        raise ConfigError(f"Key file has no secretKey: {path}")

    raw: Any = data["secretKey"]

    try:
        if isinstance(raw, str):
            key_bytes = base58.b58decode(raw.strip())
        elif isinstance(raw, list) and all(
            isinstance(b, int) and not isinstance(b, bool) for b in raw
        ):
            key_bytes = bytes(raw)
        else:
            raise ValueError("secretKey must be a byte array or base58 string")
    except ValueError as e:
        raise ConfigError(f"Invalid secretKey in {path}: {e}")

    if len(key_bytes) not in (32, 64):
        raise ConfigError(
            f"Invalid key length in {path}: {len(key_bytes)} bytes (expected 64 or 32)"
        )

    return key_bytes


def config_summary(config: BotConfig) -> Dict[str, Any]:
    """Non-secret view of the configuration for startup logging."""
    return config.model_dump(
        exclude={"helius_api_key", "jupiter_api_key"},
    )
