"""
YAML configuration loader.

Reads the handler's config file and produces a ClientConfig (how to reach
Cachet) and HandlerSettings (how to behave). Handler settings have
defaults, the connection does not: a missing file or base URL
is a ConfigurationError.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Tuple

import yaml

from statushook.errors import ConfigurationError
from statushook.models import ClientConfig, HandlerSettings

# Used when the config file leaves api_token empty
_TOKEN_ENV_VAR = "CACHET_API_TOKEN"

_TRUE_WORDS = ("true", "yes", "on", "1")
_FALSE_WORDS = ("false", "no", "off", "0")


def _parse_bool(value, key: str) -> bool:
    """Accept YAML booleans, 0/1, and quoted true/false style words."""
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        word = value.strip().lower()
        if word in _TRUE_WORDS:
            return True
        if word in _FALSE_WORDS:
            return False
    raise ConfigurationError(f"Invalid config value for {key}: {value!r} (expected true or false)")


def _parse_timeout(value) -> float:
    try:
        timeout = float(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"Invalid config value for timeout: {value!r}") from None
    if timeout <= 0:
        raise ConfigurationError(f"Invalid config value for timeout: {value!r} (must be positive)")
    return timeout


def load_config(path: str | Path) -> Tuple[ClientConfig, HandlerSettings]:
    """
    Load and parse the YAML configuration file.

    Returns:
        A tuple of (ClientConfig, HandlerSettings).
    """
    config_path = Path(path)

    if not config_path.is_file():
        raise ConfigurationError(f"Config file does not exist: {config_path}")

    with open(config_path, "r") as fh:
        try:
            raw = yaml.safe_load(fh) or {}
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"Invalid config file {config_path}: {exc}") from exc

    if not isinstance(raw, dict):
        raise ConfigurationError(f"Invalid config file {config_path}: expected a mapping")

    # Parse connection settings
    raw_cachet = raw.get("cachet") or {}
    base_url = raw_cachet.get("base_url")
    if not base_url:
        raise ConfigurationError("Missing config value: base_url")

    client_config = ClientConfig(
        base_url=str(base_url),
        username=str(raw_cachet.get("username") or raw_cachet.get("email") or ""),
        password=str(raw_cachet.get("password") or ""),
        api_token=str(raw_cachet.get("api_token") or os.environ.get(_TOKEN_ENV_VAR, "")),
    )

    # Parse handler settings
    raw_settings = raw.get("settings") or {}
    settings = HandlerSettings(
        log_level=str(raw_settings.get("log_level", "INFO")).upper(),
        incident_prefix=raw_settings.get("incident_prefix", "[monitor]"),
        timeout=_parse_timeout(raw_settings.get("timeout", 15)),
        notify_subscribers=_parse_bool(
            raw_settings.get("notify_subscribers", False), "notify_subscribers"
        ),
    )

    return client_config, settings
