"""
Helpers for reading patchwork configuration files and probing credentials.

Layout:
    ~/.config/patchwork/secrets.env   (tokens, dotenv format)
    ~/.config/patchwork/config.yaml   (non-secret run settings)
"""

import time
from pathlib import Path
from typing import Any

import requests
import yaml
from dotenv import dotenv_values

from .base import HealthCheckResult


def config_dir() -> Path:
    """Return the user configuration directory (resolved against $HOME each call)."""
    return Path.home() / ".config" / "patchwork"


def secrets_file() -> Path:
    return config_dir() / "secrets.env"


def settings_file() -> Path:
    return config_dir() / "config.yaml"


def load_env_file(path: Path) -> dict[str, str]:
    """Load a .env style file, returning {} if it does not exist."""
    if not path.exists():
        return {}
    return {key: value for key, value in dotenv_values(path).items() if value is not None}


def load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a YAML mapping, returning {} if the file does not exist.

    Raises:
        ValueError: If the file is not valid YAML or not a mapping
    """
    if not path.exists():
        return {}

    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"{path} must contain a mapping, got {type(data).__name__}")
    return data


def parse_float(value: str | None, default: float | None = None) -> float | None:
    """Parse a float from an environment string; empty or "none" gives default."""
    if value is None or not value.strip() or value.strip().lower() == "none":
        return default
    return float(value)


def parse_int(value: str | None, default: int | None = None) -> int | None:
    """Parse an int from an environment string; empty or "none" gives default."""
    if value is None or not value.strip() or value.strip().lower() == "none":
        return default
    return int(value)


def parse_bool(value: str | None, default: bool | None = False) -> bool | None:
    """Parse a boolean (true/false, yes/no, 1/0, on/off; case-insensitive).

    Unrecognized values return default.
    """
    if value is None:
        return default

    lowered = value.lower().strip()
    if lowered in ("true", "yes", "1", "on"):
        return True
    if lowered in ("false", "no", "0", "off"):
        return False
    return default


def probe_credentials(
    service_name: str,
    url: str,
    headers: dict[str, str],
    timeout: float,
    rejected_message: str = "Token is invalid",
) -> HealthCheckResult:
    """GET an authenticated "who am I" endpoint and report the login."""
    start = time.monotonic()
    try:
        response = requests.get(url, headers=headers, timeout=timeout)
    except requests.RequestException as e:
        return HealthCheckResult(healthy=False, service_name=service_name, message=f"Connection failed: {e}")
    latency_ms = (time.monotonic() - start) * 1000

    if response.status_code == 401:
        return HealthCheckResult(healthy=False, service_name=service_name, message=rejected_message)
    if response.status_code != 200:
        return HealthCheckResult(
            healthy=False,
            service_name=service_name,
            message=f"API error: HTTP {response.status_code}",
        )

    try:
        login = response.json().get("login", "unknown")
    except (ValueError, AttributeError):
        return HealthCheckResult(
            healthy=False,
            service_name=service_name,
            message="API error: unexpected response body",
            latency_ms=latency_ms,
        )
    return HealthCheckResult(
        healthy=True,
        service_name=service_name,
        message=f"Authenticated as {login}",
        latency_ms=latency_ms,
    )
