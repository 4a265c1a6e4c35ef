"""Settings module with unified configuration precedence: CLI > ENV > CONFIG FILE."""

from __future__ import annotations

import os
import tomllib
from enum import Enum
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from pydantic import Field, SecretStr, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

load_dotenv()

CONFIG_ENV_VAR = "DEFI_OVERVIEW_CONFIG"
SECRET_FIELDS = frozenset({"api_key"})


class OutputFormat(str, Enum):
    TABLE = "table"
    JSON = "json"


class TomlConfigSource(PydanticBaseSettingsSource):
    """Lowest-precedence source reading a TOML file.

    The file may hold settings at top level or under a ``[defi_overview]`` table.
    """

    def __init__(self, settings_cls: type[BaseSettings], path: Path | None):
        super().__init__(settings_cls)
        self._path = path

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        return None, "", False

    def _resolve_path(self) -> Path | None:
        if self._path is not None:
            return self._path if self._path.exists() else None
        local_config = Path("defi-overview.toml")
        user_config = Path.home() / ".config" / "defi-overview" / "config.toml"
        if local_config.exists():
            return local_config
        if user_config.exists():
            return user_config
        return None

    def __call__(self) -> dict[str, Any]:
        path = self._resolve_path()
        if path is None:
            return {}

        with path.open("rb") as f:
            data = tomllib.load(f)
        body = data.get("defi_overview", data)
        if not isinstance(body, dict):
            return {}

        for key in SECRET_FIELDS:
            if key in body:
                raise ValueError(
                    f"Security violation: '{key}' found in TOML config file. "
                    f"Secrets must only be provided via environment variables or CLI flags."
                )

        return body


class DefiSettings(BaseSettings):
    """Single source of truth for configuration. Values may come from:
    - CLI (init kwargs)
    - ENV / .env (prefixed with DEFI_OVERVIEW_)
    - Config file (TOML), lowest precedence
    """

    # --- backend ---
    api_url: str = "http://127.0.0.1:4242/api/1"
    api_key: SecretStr | None = None
    request_timeout: float = Field(default=10.0, gt=0)
    max_retries: int = Field(default=5, ge=1)

    # --- tasks ---
    task_poll_interval: float = Field(default=1.0, gt=0)
    task_timeout: float | None = Field(
        default=600.0,
        description="Seconds to wait for a submitted task; None waits forever.",
    )

    # --- entitlement ---
    premium: bool = False

    # --- output ---
    log_level: str = "INFO"
    output_format: OutputFormat = OutputFormat.TABLE

    model_config = SettingsConfigDict(
        env_prefix="DEFI_OVERVIEW_",
        env_file=".env",
        extra="ignore",
    )

    @field_validator("api_key", mode="before")
    @classmethod
    def wrap_secrets(cls, v: Any) -> SecretStr | None:
        """Wrap string secrets in SecretStr."""
        if v is None or isinstance(v, SecretStr):
            return v
        return SecretStr(v)

    @field_validator("task_timeout")
    @classmethod
    def validate_task_timeout(cls, v: float | None) -> float | None:
        if v is not None and v <= 0:
            raise ValueError("task_timeout must be positive or unset")
        return v

    @field_validator("api_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Custom config-file source with explicit precedence: CLI > ENV > FILE."""
        env_cfg = os.environ.get(CONFIG_ENV_VAR)
        cfg_path = Path(env_cfg) if env_cfg else None

        return (
            init_settings,  # CLI (highest)
            env_settings,  # ENV
            dotenv_settings,  # .env
            TomlConfigSource(settings_cls, cfg_path),  # CONFIG (lowest)
            file_secret_settings,
        )

    def as_safe_dict(self) -> dict[str, Any]:
        """Return the config as a dict with secrets redacted."""
        data = self.model_dump(mode="json")
        if self.api_key:
            data["api_key"] = "***redacted***"
        return data
