#
# config/loader.py
#
"""
Loads HarnessConfig from a TOML file and environment overrides.
"""

import os
import tomllib
from pathlib import Path
from typing import Any

import structlog

from clirig.config.models import HarnessConfig
from clirig.exceptions import ConfigurationError

log = structlog.get_logger("config.loader")

ENV_OVERRIDES: dict[str, tuple[str, type]] = {
    "CLIRIG_SHUTDOWN_GRACE": ("shutdown_grace", float),
    "CLIRIG_DAEMON_API": ("daemon_api", str),
    "CLIRIG_LOG_LEVEL": ("log_level", str),
}
_KNOWN_KEYS = {"repo_env_var", "daemon_api", "ready_marker", "shutdown_grace", "aliases", "log_level"}


def _read_toml(config_path: Path) -> dict[str, Any]:
    try:
        with config_path.open("rb") as f:
            data = tomllib.load(f)
    except FileNotFoundError as e:
        raise ConfigurationError(f"Config file not found: {config_path}", details=e) from e
    except tomllib.TOMLDecodeError as e:
        raise ConfigurationError(f"Invalid TOML in {config_path}: {e}", details=e) from e

    section = data.get("harness", {})
    if not isinstance(section, dict):
        raise ConfigurationError(f"'[harness]' in {config_path} must be a table")

    unknown = set(section) - _KNOWN_KEYS
    if unknown:
        log.warning("Ignoring unknown harness settings", keys=sorted(unknown), path=str(config_path))
    return {key: value for key, value in section.items() if key in _KNOWN_KEYS}


def _env_overrides() -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    for env_var, (key, cast) in ENV_OVERRIDES.items():
        raw = os.environ.get(env_var)
        if raw is None:
            continue
        try:
            overrides[key] = cast(raw)
        except ValueError as e:
            raise ConfigurationError(f"Invalid value for {env_var}: {raw!r}", details=e) from e
        log.debug("Applied environment override", env_var=env_var, key=key)
    return overrides


def load_config(config_path: Path | None = None) -> HarnessConfig:
    """
    Builds a HarnessConfig.

    Values come from the `[harness]` table of `config_path` when given, then
    from CLIRIG_* environment variables, on top of the model defaults.
    """
    values: dict[str, Any] = {}
    if config_path is not None:
        values.update(_read_toml(config_path))
        log.debug("Loaded harness settings from file", path=str(config_path), keys=sorted(values))
    values.update(_env_overrides())

    try:
        return HarnessConfig(**values)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid harness configuration: {e}", details=e) from e


# 🔼⚙️
