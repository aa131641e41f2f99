"""Configuration settings for xcresult-json."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def default_schema_path() -> Path:
    """Get the default location of the saved xcresulttool JSON Schema (XDG-style)."""
    return Path.home() / ".cache" / "xcresult-json" / "tests-schema.json"


class Settings(BaseSettings):
    """Settings loaded from XCRESULT_JSON_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="XCRESULT_JSON_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # xcresulttool
    xcrun_path: str = "xcrun"
    tool_timeout: float = Field(default=120.0, gt=0)

    # Response cache
    cache_enabled: bool = True
    cache_size: int = Field(default=100, ge=1)
    cache_path: Path | None = None

    # Schema validation (warn-only)
    validate_schema: bool = False
    schema_path: Path = Field(default_factory=default_schema_path)

    # Logging
    log_level: str = "WARNING"
    log_json_format: bool = False


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
