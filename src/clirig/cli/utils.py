# src/clirig/cli/utils.py

import importlib
import logging
from typing import Any

import click
import structlog

from clirig.exceptions import ConfigurationError
from clirig.protocols import BackendAccessor
from clirig.router import CommandRegistry
from clirig.runtime.backend import CallbackAccessor
from clirig.telemetry.logger import setup_logging as core_setup_logging

log = structlog.get_logger("cli.utils")

LOG_LEVEL_CHOICES = click.Choice(list(logging._nameToLevel.keys()), case_sensitive=False)


def logging_options(f):
    """Decorator to add logging options to any command."""
    f = click.option(
        "-l",
        "--log-level",
        type=LOG_LEVEL_CHOICES,
        default=None,
        envvar="CLIRIG_LOG_LEVEL",
        help="Set the logging level (overrides config file).",
    )(f)
    f = click.option(
        "--log-file",
        type=click.Path(dir_okay=False, writable=True, resolve_path=True),
        default=None,
        envvar="CLIRIG_LOG_FILE",
        help="Path to write logs to a file (JSON format).",
    )(f)
    f = click.option(
        "--json-logs",
        is_flag=True,
        default=None,
        envvar="CLIRIG_JSON_LOGS",
        help="Output console logs as JSON.",
    )(f)
    return f


def setup_logging_from_context(
    ctx: click.Context,
    local_log_level: str | None = None,
    local_log_file: str | None = None,
    local_json_logs: bool | None = None,
    default_log_level: str = "WARNING",
) -> None:
    """
    Setup logging using context values, allowing local overrides.
    """
    obj = ctx.obj or {}
    log_level_str = local_log_level or obj.get("LOG_LEVEL") or default_log_level
    log_file_path = local_log_file or obj.get("LOG_FILE")
    use_json_logs = local_json_logs if local_json_logs is not None else obj.get("JSON_LOGS", False)

    numeric_level = logging.getLevelName(log_level_str.upper())
    if not isinstance(numeric_level, int):
        numeric_level = logging.WARNING
        log_level_str = "WARNING"

    core_setup_logging(
        level=numeric_level,
        json_logs=use_json_logs,
        log_file=log_file_path,
    )

    log.debug(
        "CLI logging initialized via utils",
        level=log_level_str,
        file=log_file_path or "console",
        json=use_json_logs,
    )


def load_object(target: str) -> Any:
    """Imports `package.module:attribute`."""
    module_name, sep, attr_path = target.partition(":")
    if not sep or not module_name or not attr_path:
        raise ConfigurationError(f"Expected 'module:attribute', got '{target}'")
    try:
        obj: Any = importlib.import_module(module_name)
    except ImportError as e:
        raise ConfigurationError(f"Cannot import module '{module_name}': {e}", details=e) from e
    for part in attr_path.split("."):
        try:
            obj = getattr(obj, part)
        except AttributeError as e:
            raise ConfigurationError(f"'{module_name}' has no attribute '{attr_path}'", details=e) from e
    return obj


def load_registry(target: str) -> CommandRegistry:
    """Loads a CommandRegistry, or calls a zero-argument factory that returns one."""
    obj = load_object(target)
    if not isinstance(obj, CommandRegistry) and callable(obj):
        obj = obj()
    if not isinstance(obj, CommandRegistry):
        raise ConfigurationError(f"'{target}' is not a CommandRegistry (got {type(obj).__name__})")
    log.debug("Loaded command registry", target=target, commands=len(obj))
    return obj


def load_accessor(target: str) -> BackendAccessor:
    """
    Loads a backend accessor.

    Accepts an object with an `acquire` coroutine, a class to instantiate, or
    a callback-style `get_node(options, callback)` function.
    """
    obj = load_object(target)
    if isinstance(obj, type):
        obj = obj()
    if hasattr(obj, "acquire"):
        return obj
    if callable(obj):
        log.debug("Wrapping callback-style node factory", target=target)
        return CallbackAccessor(obj)
    raise ConfigurationError(f"'{target}' is neither an accessor nor a node factory")

# ⚙️🛠️
