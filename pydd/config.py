# pydd/config.py
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigError(ValueError):
    """Raised when a config file or version string cannot be understood."""
    pass


def parse_version_spec(text: str) -> Tuple[int, int]:
    """Turn "8.32" into (8, 32)."""
    parts = text.strip().split(".")
    if len(parts) != 2 or not all(p.isascii() and p.isdigit() for p in parts):
        raise ConfigError(f"Invalid version '{text}', expected MAJOR.MINOR")
    return int(parts[0]), int(parts[1])


class AppConfig(BaseSettings):
    """
    Settings for the CLI. Environment variables (PYDD_DD_BINARY,
    PYDD_MIN_VERSION, PYDD_STATUS) win over values passed in, which win
    over the defaults.
    """

    model_config = SettingsConfigDict(
        env_prefix="PYDD_",
        extra="ignore",
        case_sensitive=False,
        env_ignore_empty=True,
    )

    dd_binary: str = Field(default="dd", min_length=1, description="dd executable.")
    min_version: Optional[str] = Field(
        default=None, description="Minimum acceptable dd version, MAJOR.MINOR."
    )
    status: Optional[str] = Field(default=None, description='e.g. "none", "progress".')

    @field_validator("min_version")
    @classmethod
    def _check_min_version(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return "{}.{}".format(*parse_version_spec(value))

    @property
    def required_version(self) -> Optional[Tuple[int, int]]:
        if self.min_version is None:
            return None
        return parse_version_spec(self.min_version)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        return env_settings, init_settings


def _read_file(config_path: Path) -> Dict[str, Any]:
    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigError(f"Cannot read config {config_path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Config {config_path} must contain a JSON object")
    return data


def load_config(config_path: Optional[Path] = None) -> AppConfig:
    """
    Defaults, then the JSON file at config_path (if any), then the
    PYDD_* environment variables.
    """
    data = _read_file(config_path) if config_path is not None else {}
    try:
        return AppConfig(**data)
    except ValidationError as exc:
        source = config_path if config_path is not None else "environment"
        raise ConfigError(f"Invalid configuration ({source}): {exc}") from exc
