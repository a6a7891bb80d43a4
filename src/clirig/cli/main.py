# src/clirig/cli/main.py

"""
Main CLI entry point for clirig using Click.
Handles global options like logging level.
"""

from importlib.metadata import PackageNotFoundError, version

import click
import structlog

from clirig.cli.run_cmds import commands_cli, fail_cli, run_cli
from clirig.cli.utils import logging_options, setup_logging_from_context
from clirig.telemetry import StructLogger

try:
    __version__ = version("clirig")
except PackageNotFoundError:
    __version__ = "0.0.0-dev"

log: StructLogger = structlog.get_logger("cli.main")


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(__version__, "-V", "--version", package_name="clirig")
@logging_options
@click.pass_context
def cli(
    ctx: click.Context,
    log_level: str | None,
    log_file: str | None,
    json_logs: bool | None,
):
    """
    Clirig: run CLI command handlers in-process.

    Executes a command against a node without spawning a process and prints what it wrote.
    """
    ctx.ensure_object(dict)

    ctx.obj["LOG_LEVEL"] = log_level
    ctx.obj["LOG_FILE"] = log_file
    ctx.obj["JSON_LOGS"] = json_logs if json_logs is not None else False

    setup_logging_from_context(ctx)
    log.debug(
        "Main CLI group initialized",
        log_level=log_level,
        log_file=log_file,
        json_logs=json_logs,
    )


cli.add_command(run_cli)
cli.add_command(fail_cli)
cli.add_command(commands_cli)

if __name__ == "__main__":
    cli()

# 🖥️⚙️
