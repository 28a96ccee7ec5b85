"""Provider configuration for the vidos management API client."""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field, field_validator

DEFAULT_DOMAIN = "vidos.id"
DEFAULT_REGION = "eu"
DEFAULT_HTTP_TIMEOUT_S = 30.0

_REGION_SLUG_RE = re.compile(r"^[a-z](?:[a-z0-9-]*[a-z0-9])?$")


class ConfigError(ValueError):
    """Raised when provider configuration is missing or invalid."""


class ProviderConfig(BaseModel):
    domain: str = DEFAULT_DOMAIN
    default_region: str = DEFAULT_REGION
    api_key_secret: str = Field(repr=False)
    http_timeout_s: float = Field(DEFAULT_HTTP_TIMEOUT_S, gt=0)

    @field_validator("default_region")
    @classmethod
    def _validate_region(cls, value: str) -> str:
        if not value:
            raise ValueError("region must not be empty when set")
        if not _REGION_SLUG_RE.match(value):
            raise ValueError("region must be lowercase and contain only letters, digits, and hyphens")
        return value


def _first_non_empty(explicit: Optional[str], env_name: str, file_value: object = None) -> str:
    """Return the first non-blank of the explicit value, the env var and the file value."""
    for candidate in (explicit, os.getenv(env_name), file_value):
        if candidate is None:
            continue
        value = str(candidate).strip()
        if value:
            return value
    return ""


def _read_yaml(path: Optional[str]) -> dict:
    if not path:
        return {}
    with Path(path).open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")
    return data


def load_config(
    path: Optional[str] = None,
    *,
    api_key: Optional[str] = None,
    region: Optional[str] = None,
) -> ProviderConfig:
    """Resolve provider configuration.

    Explicit arguments win over ``VIDOS_*`` environment variables, which win over
    the optional YAML file at ``path``; anything still unset uses the defaults.
    """
    file_data = _read_yaml(path)

    secret = _first_non_empty(api_key, "VIDOS_API_KEY", file_data.get("api_key"))
    if not secret:
        raise ConfigError("Missing API key: set api_key or env var VIDOS_API_KEY.")

    resolved_region = _first_non_empty(region, "VIDOS_REGION", file_data.get("region")) or DEFAULT_REGION
    domain = _first_non_empty(None, "VIDOS_DOMAIN", file_data.get("domain")) or DEFAULT_DOMAIN
    timeout_raw = _first_non_empty(None, "VIDOS_HTTP_TIMEOUT_S", file_data.get("http_timeout_s"))

    try:
        return ProviderConfig(
            domain=domain,
            default_region=resolved_region,
            api_key_secret=secret,
            http_timeout_s=float(timeout_raw) if timeout_raw else DEFAULT_HTTP_TIMEOUT_S,
        )
    except ValueError as exc:
        raise ConfigError(f"Invalid provider configuration: {exc}") from exc
