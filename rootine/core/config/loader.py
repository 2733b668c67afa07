"""
Settings loader — defaults, YAML file, then environment.

Precedence: explicit overrides > environment variables > YAML file >
built-in defaults. The YAML file is taken from ``ROOTINE_CONFIG`` or,
when present, ``/etc/rootine/rootine.yml``.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from rootine.core.config.settings import Settings
from rootine.core.errors import ConfigError

logger = logging.getLogger(__name__)

SYSTEM_CONFIG_FILE = Path("/etc/rootine/rootine.yml")

# Environment variable → settings field
_ENV_FIELDS: dict[str, str] = {
    "ROOTINE_LOG_LEVEL": "log_level",
    "ROOTINE_LOG_FILE": "log_file",
    "ROOTINE_LOCK_FILE": "lock_file",
    "ROOTINE_LOCK_TIMEOUT": "lock_timeout",
    "ROOTINE_PING_HOST": "ping_host",
    "IS_ROOTINE_INSTALLED": "installed",
}

_TRUTHY = ("1", "true", "yes", "on")


def find_config_file(environ: Mapping[str, str] | None = None) -> Path | None:
    """Locate the settings file, or None when there is none."""
    env = os.environ if environ is None else environ
    explicit = env.get("ROOTINE_CONFIG")
    if explicit:
        return Path(explicit)
    if SYSTEM_CONFIG_FILE.is_file():
        return SYSTEM_CONFIG_FILE
    return None


def read_config_file(path: Path) -> dict[str, Any]:
    """Read a YAML settings file into a mapping.

    Raises:
        ConfigError: If the file is missing, unreadable or not a mapping.
    """
    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    logger.debug("Loading settings from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    # The file may wrap everything under a "rootine" key or be flat
    return dict(data.get("rootine", data))


def _env_overrides(environ: Mapping[str, str]) -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    for var, field in _ENV_FIELDS.items():
        value = environ.get(var)
        if value is None or value == "":
            continue
        if field == "installed":
            overrides[field] = value.strip().lower() in _TRUTHY
        else:
            overrides[field] = value
    return overrides


def load_settings(
    path: Path | None = None,
    environ: Mapping[str, str] | None = None,
    **overrides: Any,
) -> Settings:
    """Build the Settings object for this process.

    Args:
        path: Explicit settings file. If None, searches the usual places.
        environ: Environment to read (default: ``os.environ``).
        **overrides: Field values that win over every other source.

    Raises:
        ConfigError: If the file or any value is invalid.
    """
    env = os.environ if environ is None else environ

    data: dict[str, Any] = {}
    config_path = path or find_config_file(env)
    if config_path is not None:
        data.update(read_config_file(config_path))

    data.update(_env_overrides(env))
    data.update({k: v for k, v in overrides.items() if v is not None})

    try:
        settings = Settings.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid settings: {e}") from e

    logger.debug(
        "Settings loaded (config=%s, lock_file=%s)",
        config_path or "<defaults>",
        settings.lock_file,
    )
    return settings
