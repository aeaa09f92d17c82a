"""
judit_proxy/utils/settings.py

WHAT THIS FILE IS FOR
---------------------
This module defines the *single source of truth* for runtime configuration
of the JUDIT movimentações proxy.

It is responsible for:
- Defining all supported configuration fields (via Pydantic BaseSettings)
- Loading default values from parameters/parameters.yaml
- Overriding defaults with environment variables (JUDIT_*)
- Exposing a cached, fully-validated Settings object to the application

LOAD & PRECEDENCE MODEL
-----------------------
Configuration is loaded in the following order (last wins):

1) YAML defaults from:
       parameters/parameters.yaml
2) Environment variables:
       JUDIT_*

The upstream credential is read from JUDIT_API_KEY. It is deliberately
optional at load time: a missing key does NOT fail startup, it makes every
lookup answer 500 with a ConfigurationError envelope. Health checks keep
working so the deployment can be diagnosed.

WHAT THIS FILE IS NOT FOR
-------------------------
This module is NOT responsible for:
- Per-request tuning (waitMs, pollMs, ...) -> schemas/input_schema.py
- HTTP calls
- Polling or normalization logic
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional

import structlog
import yaml
from pydantic import AnyHttpUrl, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = structlog.get_logger(__name__)

PARAMETERS_PATH = Path(__file__).resolve().parents[2] / "parameters" / "parameters.yaml"

LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class Settings(BaseSettings):
    """
    Runtime settings for the JUDIT movimentações proxy.

    Load order / precedence:
        1) YAML defaults (parameters/parameters.yaml)
        2) Environment variables (JUDIT_*), overriding YAML
    """

    model_config = SettingsConfigDict(
        env_prefix="JUDIT_",
        extra="ignore",
    )

    # Service metadata
    service_name: str = "judit_movimentacoes_proxy"
    environment: str = "local"
    log_level: str = "INFO"

    # Upstream (JUDIT requests API)
    api_key: Optional[str] = Field(
        default=None,
        description="Static credential forwarded as the `api-key` header (env: JUDIT_API_KEY).",
    )
    requests_base_url: AnyHttpUrl = "https://requests.prod.judit.io"  # type: ignore[assignment]

    # Per-call networking timeout; the polling budget itself is per request.
    http_timeout_seconds: float = 15.0
    results_page_size: int = Field(default=100, ge=1)

    # Feature flags
    enable_debug_metadata: bool = Field(
        default=False,
        description="If true, every poll iteration is logged with the observed upstream signals.",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, v: Any) -> str:
        level = str(v or "INFO").strip().upper()
        return level if level in LOG_LEVELS else "INFO"

    @field_validator("api_key", mode="before")
    @classmethod
    def _blank_key_is_missing(cls, v: Any) -> Optional[str]:
        if v is None:
            return None
        v = str(v).strip()
        return v or None


def _read_parameters_file(path: Optional[Path] = None) -> Dict[str, Any]:
    """YAML defaults; an unreadable or malformed file counts as empty."""
    path = path or PARAMETERS_PATH
    if not path.exists():
        logger.warning("parameters_yaml_missing", expected=str(path))
        return {}

    try:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as exc:
        logger.error("parameters_yaml_load_error", path=str(path), error=str(exc))
        return {}

    if not isinstance(data, dict):
        logger.warning("parameters_yaml_not_dict", path=str(path), type=type(data).__name__)
        return {}
    return data


def _env_overrides() -> Dict[str, Any]:
    """Only the fields actually set through JUDIT_* variables."""
    try:
        return Settings().model_dump(exclude_unset=True)
    except ValidationError as exc:
        logger.warning("settings_env_validation_error", errors=exc.errors())
        return {}


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Process-wide Settings: YAML defaults, then JUDIT_* overrides.

    Use this instead of instantiating Settings() directly.
    """
    defaults = _read_parameters_file()
    overrides = _env_overrides()
    settings = Settings.model_validate({**defaults, **overrides})

    if not settings.api_key:
        logger.warning("settings_missing_api_key", env_var="JUDIT_API_KEY")

    logger.info(
        "settings_loaded",
        environment=settings.environment,
        service_name=settings.service_name,
        requests_base_url=str(settings.requests_base_url),
        http_timeout_seconds=settings.http_timeout_seconds,
        results_page_size=settings.results_page_size,
        has_api_key=bool(settings.api_key),
        env_overrides=sorted(overrides),
    )
    return settings
