"""SendGrid client configuration.

Configuration sources (in priority order):
1. Explicit constructor arguments (``SendGridClient(api_key=...)``)
2. Environment variables (SENDGRID_ prefix)
3. Config file (sendgrid.yaml)
4. Defaults
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

DEFAULT_BASE_URL = "https://api.sendgrid.com/v3"


class RetryConfig(BaseModel):
    """Rate-limit retry configuration."""

    # Overall budget for one provisioning call, matches the usual 20m create timeout
    timeout: float = Field(default=1200.0, gt=0)
    initial_interval: float = Field(default=0.5, gt=0)
    max_interval: float = Field(default=10.0, gt=0)
    backoff_factor: float = Field(default=2.0, ge=1.0)


class ClientSettings(BaseSettings):
    """SendGrid client settings."""

    model_config = SettingsConfigDict(
        env_prefix="SENDGRID_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    api_key: str | None = None
    base_url: str = DEFAULT_BASE_URL
    timeout: float = Field(default=30.0, gt=0)
    retry: RetryConfig = Field(default_factory=RetryConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # File values arrive as init kwargs; env must still win over them.
        return env_settings, dotenv_settings, init_settings, file_secret_settings


def _load_config_file() -> dict[str, Any]:
    """Load configuration from YAML file if exists.

    Looks for config file in order:
    1. SENDGRID_CONFIG_FILE environment variable
    2. ./sendgrid.yaml
    """
    config_paths = [
        os.environ.get("SENDGRID_CONFIG_FILE"),
        Path("sendgrid.yaml"),
    ]

    for path in config_paths:
        if path is None:
            continue
        path = Path(path)
        if path.exists():
            with open(path) as f:
                return yaml.safe_load(f) or {}

    return {}


@lru_cache
def get_settings() -> ClientSettings:
    """Get cached settings instance.

    Configuration is loaded from:
    1. Environment variables
    2. YAML config file (if exists)
    3. Defaults
    """
    return ClientSettings(**_load_config_file())
