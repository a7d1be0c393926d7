"""Client config loading from config.json plus env overrides."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _env_path(name: str, fallback: Path) -> Path:
    raw = os.environ.get(name, "").strip()
    return Path(raw).expanduser() if raw else fallback.expanduser()


_USER_HOME = Path.home()
_XDG_CONFIG_HOME = _env_path("XDG_CONFIG_HOME", _USER_HOME / ".config")
DEFAULT_CONFIG_HOME = _XDG_CONFIG_HOME / "degiro"
DEFAULT_CONFIG_JSON = _env_path("DEGIRO_CONFIG_JSON", DEFAULT_CONFIG_HOME / "config.json")

DEFAULT_BASE_URL = "https://trader.degiro.nl"
DEFAULT_USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:138.0) Gecko/20100101 Firefox/138.0"

_SECTIONS = {"runtime", "logging"}
_TOP_LEVEL = {"base_url", "user_agent"}


class Credentials(BaseModel):
    """Long-lived login material, supplied once at client creation."""

    model_config = ConfigDict(frozen=True)

    username: str
    password: str = Field(repr=False)
    totp_secret: str = Field(repr=False)


class RuntimeConfig(BaseModel):
    request_timeout_seconds: float = 20.0
    connect_timeout_seconds: float = 10.0


class LoggingConfig(BaseModel):
    log_http: bool = False


class ClientConfig(BaseModel):
    base_url: str = DEFAULT_BASE_URL
    user_agent: str = DEFAULT_USER_AGENT
    runtime: RuntimeConfig = Field(default_factory=RuntimeConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @field_validator("base_url")
    @classmethod
    def _normalize_base_url(cls, value: str) -> str:
        url = value.strip().rstrip("/")
        if not url.startswith(("http://", "https://")):
            raise ValueError("base_url must be an http(s) URL")
        return url


def _coerce_env_value(value: str) -> Any:
    lower = value.lower()
    if lower in {"true", "false"}:
        return lower == "true"
    try:
        if "." in value:
            return float(value)
        return int(value)
    except ValueError:
        return value


def _read_config_json(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}

    try:
        loaded = json.loads(path.read_text(encoding="utf-8"))
    except Exception:
        return {}

    if isinstance(loaded, dict):
        return loaded
    return {}


def _extract_client_config(data: dict[str, Any]) -> dict[str, Any]:
    out: dict[str, Any] = {}
    raw = data.get("degiro")
    if not isinstance(raw, dict):
        return out

    for key in _TOP_LEVEL:
        value = raw.get(key)
        if isinstance(value, str) and value.strip():
            out[key] = value
    for section in _SECTIONS:
        value = raw.get(section)
        if isinstance(value, dict):
            out[section] = value
    return out


def _apply_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
    result = dict(data)
    for key, raw in os.environ.items():
        if not key.startswith("DEGIRO_"):
            continue
        name = key[len("DEGIRO_") :].lower()
        if name in _TOP_LEVEL:
            result[name] = raw.strip()
            continue
        tokens = name.split("_")
        section = tokens[0]
        if section not in _SECTIONS or len(tokens) == 1:
            continue
        field = "_".join(tokens[1:])
        section_obj = dict(result.get(section, {}))
        section_obj[field] = _coerce_env_value(raw)
        result[section] = section_obj
    return result


def load_config() -> ClientConfig:
    raw = _read_config_json(DEFAULT_CONFIG_JSON)
    from_file = _extract_client_config(raw)
    merged = _apply_env_overrides(from_file)
    return ClientConfig.model_validate(merged)
