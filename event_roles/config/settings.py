"""Configuration management using pydantic-settings.

Provides validated configuration with support for:
- Environment variables (GUILD, DISCORD_TOKEN, DATABASE_URL, ...)
- An optional JSON config file (config.json) as a base layer
- Type coercion and validation

Environment variables always win over values from the JSON file.
"""

from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)


class AppSettings(BaseSettings):
    """Application settings with validation."""

    # The single guild whose scheduled events are reconciled
    guild: str = ""
    discord_token: str = ""
    user_agent: str = "DiscordBot (event-roles, 0.1.0)"
    database_url: str = ""
    assignment_queue_size: int = Field(default=1000, ge=1)

    model_config = SettingsConfigDict(
        extra="ignore",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return env_settings, init_settings, dotenv_settings, file_secret_settings

    @field_validator("guild", mode="before")
    @classmethod
    def ensure_string_snowflake(cls, v: Any) -> str:
        """Accept snowflakes given as JSON numbers."""
        if v is None:
            return ""
        return str(v).strip()

    @property
    def guild_id(self) -> int | None:
        """The configured guild as an int, or None when unset."""
        return int(self.guild) if self.guild else None

    @classmethod
    def from_json(cls, path: str | Path = "config.json") -> "AppSettings":
        """Load settings from a JSON config file, overlaid by the environment.

        Args:
            path: Path to the JSON config file

        Returns:
            AppSettings instance with validated configuration
        """
        config_path = Path(path)
        if config_path.exists():
            with open(config_path, "r", encoding="utf-8") as f:
                data = json.load(f)
            return cls(**data)
        return cls()


@lru_cache
def get_settings(config_path: str = "config.json") -> AppSettings:
    """Get cached application settings.

    Args:
        config_path: Path to JSON config file (default: config.json)

    Returns:
        Cached AppSettings instance
    """
    return AppSettings.from_json(config_path)


def load_config(path: str | Path = "config.json") -> AppSettings:
    """Load configuration from file, bypassing the settings cache."""
    get_settings.cache_clear()
    return AppSettings.from_json(path)
