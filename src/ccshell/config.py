"""Configuration management for ccshell."""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Shell settings read from the process environment."""

    model_config = SettingsConfigDict(
        env_prefix="CCSHELL_",
        case_sensitive=False,
        extra="ignore",
    )

    # Ambient OS state
    path: str = Field(default=os.defpath, validation_alias="PATH", description="Executable search path")
    home: str | None = Field(default=None, validation_alias="HOME", description="Home directory")
    histfile: Path | None = Field(default=None, validation_alias="HISTFILE", description="History file")

    # Shell configuration
    prompt: str = Field(default="$ ", description="Interactive prompt")
    log_level: str = Field(default="WARNING", description="Log level")

    @field_validator("home", "histfile", mode="before")
    @classmethod
    def _empty_as_unset(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("log_level")
    @classmethod
    def _normalize_level(cls, value: str) -> str:
        return value.upper()


def load_settings() -> Settings:
    """Load settings from the current environment."""
    return Settings()
