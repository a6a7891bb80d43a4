#
# config/models.py
#
"""
Attrs-based data models for clirig configuration.
"""

import logging
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

from attrs import define, field

DEFAULT_ALIASES: Mapping[str, str] = MappingProxyType({"cat": "files", "add": "files", "get": "files"})


def _validate_log_level(inst: Any, attr: Any, value: str) -> None:
    """Validator for standard logging level names."""
    valid = logging._nameToLevel.keys()
    if value.upper() not in valid:
        raise ValueError(f"Invalid log_level '{value}'. Must be one of {list(valid)}.")


def _validate_non_negative(inst: Any, attr: Any, value: float) -> None:
    """Validator ensures a number is zero or positive."""
    if isinstance(value, bool) or not isinstance(value, int | float) or value < 0:
        raise ValueError(f"Field '{attr.name}' must be a non-negative number, got {value!r}")


def _validate_daemon_api(inst: Any, attr: Any, value: str) -> None:
    if not value.startswith("/"):
        raise ValueError(f"Field '{attr.name}' must be a multiaddr such as '/ip4/127.0.0.1/tcp/5002', got {value!r}")


def _freeze_aliases(value: Mapping[str, str]) -> Mapping[str, str]:
    return MappingProxyType(dict(value))


@define(frozen=True, slots=True)
class HarnessConfig:
    """Settings shared by every invocation issued through one harness."""
    repo_env_var: str = field(default="IPFS_PATH")
    daemon_api: str = field(default="/ip4/127.0.0.1/tcp/5002", validator=_validate_daemon_api)
    ready_marker: str = field(default="Daemon is ready\n")
    # Seconds to wait after `shutdown` has cleaned up, the node keeps tearing down after its callback fires.
    shutdown_grace: float = field(default=1.0, validator=_validate_non_negative)
    aliases: Mapping[str, str] = field(default=DEFAULT_ALIASES, converter=_freeze_aliases)
    log_level: str = field(default="WARNING", validator=_validate_log_level)

    @property
    def numeric_log_level(self) -> int:
        return logging.getLevelName(self.log_level.upper())


# 🔼⚙️
