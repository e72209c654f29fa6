from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

DEFAULT_SERVICE_URL = "https://public.api.bsky.app"
DEFAULT_TIMEOUT_SECONDS = 10.0
DEFAULT_SCROLL_DELAY_MS = 500
DEFAULT_GATEWAY_HOST = "127.0.0.1"
DEFAULT_GATEWAY_PORT = 8787


@dataclass(frozen=True)
class AppConfig:
    service_url: str = DEFAULT_SERVICE_URL
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    scroll_delay_ms: int = DEFAULT_SCROLL_DELAY_MS
    gateway_host: str = DEFAULT_GATEWAY_HOST
    gateway_port: int = DEFAULT_GATEWAY_PORT


class ConfigError(ValueError):
    pass


def _expect_str(data: dict[str, Any], key: str, default: str) -> str:
    value = data.get(key, default)
    if not isinstance(value, str) or not value.strip():
        raise ConfigError(f"Config '{key}' must be a non-empty string.")
    return value.strip()


def _expect_number(data: dict[str, Any], key: str, default: float) -> float:
    value = data.get(key, default)
    # bool is an int subclass
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        raise ConfigError(f"Config '{key}' must be a positive number.")
    return value


def _expect_int(data: dict[str, Any], key: str, default: int) -> int:
    value = data.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ConfigError(f"Config '{key}' must be a positive integer.")
    return value


def _env_int(name: str, raw: str) -> int:
    try:
        value = int(raw)
    except ValueError as exc:
        raise ConfigError(f"Environment variable {name} must be an integer, got '{raw}'.") from exc
    if value <= 0:
        raise ConfigError(f"Environment variable {name} must be positive.")
    return value


def _env_number(name: str, raw: str) -> float:
    try:
        value = float(raw)
    except ValueError as exc:
        raise ConfigError(f"Environment variable {name} must be a number, got '{raw}'.") from exc
    if value <= 0:
        raise ConfigError(f"Environment variable {name} must be positive.")
    return value


def load_config(path: Path | None = None) -> AppConfig:
    """
    Load configuration from an optional JSON file, then apply env overrides.

    Env overrides:
        THREADLINE_SERVICE_URL, THREADLINE_TIMEOUT, THREADLINE_SCROLL_DELAY_MS
    """
    raw: dict[str, Any] = {}
    if path is not None:
        if not path.exists():
            raise ConfigError(f"Config file not found: {path}")
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise ConfigError(f"Config file is not valid JSON: {exc}") from exc
        if not isinstance(raw, dict):
            raise ConfigError("Config must be a JSON object.")

    service_url = _expect_str(raw, "service_url", DEFAULT_SERVICE_URL)
    timeout_seconds = float(_expect_number(raw, "timeout_seconds", DEFAULT_TIMEOUT_SECONDS))
    scroll_delay_ms = _expect_int(raw, "scroll_delay_ms", DEFAULT_SCROLL_DELAY_MS)
    gateway_host = _expect_str(raw, "gateway_host", DEFAULT_GATEWAY_HOST)
    gateway_port = _expect_int(raw, "gateway_port", DEFAULT_GATEWAY_PORT)

    env_url = os.getenv("THREADLINE_SERVICE_URL")
    if env_url:
        service_url = env_url.strip()
    env_timeout = os.getenv("THREADLINE_TIMEOUT")
    if env_timeout:
        timeout_seconds = _env_number("THREADLINE_TIMEOUT", env_timeout)
    env_delay = os.getenv("THREADLINE_SCROLL_DELAY_MS")
    if env_delay:
        scroll_delay_ms = _env_int("THREADLINE_SCROLL_DELAY_MS", env_delay)

    return AppConfig(
        service_url=service_url.rstrip("/"),
        timeout_seconds=timeout_seconds,
        scroll_delay_ms=scroll_delay_ms,
        gateway_host=gateway_host,
        gateway_port=gateway_port,
    )
