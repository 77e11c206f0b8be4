"""Environment-driven defaults for store-bridge."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BridgeSettings(BaseSettings):
    """Defaults used when a StoreBridge is built without explicit arguments."""

    model_config = SettingsConfigDict(
        env_prefix="STORE_BRIDGE_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    url: str = Field(default="memory", description="Connection descriptor")
    timestamp: bool = Field(
        default=False, description="Stamp createdAt/updatedAt on writes"
    )
    datafile_extension: str = Field(
        default="jsonl", description="File extension of embedded data files"
    )
    corrupt_alert_threshold: float = Field(
        default=0.1,
        ge=0.0,
        le=1.0,
        description="Fraction of unreadable data file lines tolerated on load",
    )


@lru_cache(maxsize=1)
def get_settings() -> BridgeSettings:
    """Return the process-wide settings, read once."""
    return BridgeSettings()
