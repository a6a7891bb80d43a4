# src/clirig/cli/run_cmds.py

import asyncio
from pathlib import Path

import click
import structlog
from rich.console import Console
from rich.table import Table

from clirig.cli.utils import (
    load_accessor,
    load_registry,
    logging_options,
    setup_logging_from_context,
)
from clirig.config import load_config
from clirig.exceptions import ConfigurationError, HarnessError, UnexpectedSuccessError
from clirig.harness import CliHarness
from clirig.telemetry import StructLogger

log: StructLogger = structlog.get_logger("cli.run")

registry_option = click.option(
    "-r",
    "--registry",
    required=True,
    envvar="CLIRIG_REGISTRY",
    show_envvar=True,
    help="Command registry as 'module:attribute'.",
)


def harness_options(f):
    """Options shared by commands that build a CliHarness."""
    f = click.option(
        "-c",
        "--config-path",
        type=click.Path(exists=True, file_okay=True, dir_okay=False, readable=True, path_type=Path),
        default=None,
        envvar="CLIRIG_CONF",
        show_envvar=True,
        help="TOML file with a [harness] table.",
    )(f)
    f = click.option(
        "--repo-path",
        type=click.Path(file_okay=False, path_type=Path),
        required=True,
        envvar="CLIRIG_REPO_PATH",
        show_envvar=True,
        help="Repository the node operates on.",
    )(f)
    f = click.option(
        "-a",
        "--accessor",
        required=True,
        envvar="CLIRIG_ACCESSOR",
        show_envvar=True,
        help="Backend accessor or node factory as 'module:attribute'.",
    )(f)
    f = registry_option(f)
    return f


def _build_harness(ctx: click.Context, kwargs: dict, registry: str, accessor: str, repo_path: Path, config_path: Path | None) -> CliHarness:
    try:
        config = load_config(config_path)
    except ConfigurationError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(2)

    _setup_logging(ctx, kwargs, default_log_level=config.log_level)
    try:
        return CliHarness(repo_path, load_registry(registry), load_accessor(accessor), config)
    except ConfigurationError as e:
        log.error("Failed to set up harness", error=str(e))
        click.echo(f"Error: {e}", err=True)
        ctx.exit(2)


def _setup_logging(ctx: click.Context, kwargs: dict, default_log_level: str = "WARNING") -> None:
    setup_logging_from_context(
        ctx,
        default_log_level=default_log_level,
        local_log_level=kwargs.get("log_level"),
        local_log_file=kwargs.get("log_file"),
        local_json_logs=kwargs.get("json_logs"),
    )


@click.command(name="run", context_settings={"ignore_unknown_options": True})
@click.argument("request", nargs=-1, required=True, type=click.UNPROCESSED)
@harness_options
@logging_options
@click.pass_context
def run_cli(ctx: click.Context, request: tuple[str, ...], registry: str, accessor: str, repo_path: Path, config_path: Path | None, **kwargs):
    """Run a command in-process and print its output."""
    harness = _build_harness(ctx, kwargs, registry, accessor, repo_path, config_path)
    request_str = " ".join(request)
    log.info("Executing request", request=request_str)

    try:
        output = asyncio.run(harness.run(request_str))
    except HarnessError as e:
        log.error("Command failed", request=request_str, error=str(e))
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)

    click.echo(output if isinstance(output, str) else repr(output), nl=False)


@click.command(name="fail", context_settings={"ignore_unknown_options": True})
@click.argument("request", nargs=-1, required=True, type=click.UNPROCESSED)
@harness_options
@logging_options
@click.pass_context
def fail_cli(ctx: click.Context, request: tuple[str, ...], registry: str, accessor: str, repo_path: Path, config_path: Path | None, **kwargs):
    """Run a command that is expected to fail and print its error."""
    harness = _build_harness(ctx, kwargs, registry, accessor, repo_path, config_path)
    request_str = " ".join(request)

    try:
        error_text = asyncio.run(harness.fail(request_str))
    except UnexpectedSuccessError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)

    click.echo(error_text)


@click.command(name="commands")
@registry_option
@logging_options
@click.pass_context
def commands_cli(ctx: click.Context, registry: str, **kwargs):
    """List the commands a registry provides."""
    _setup_logging(ctx, kwargs)
    try:
        loaded = load_registry(registry)
    except ConfigurationError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(2)

    table = Table("Command", "Signature", "Description")
    for descriptor in loaded:
        table.add_row(descriptor.name, descriptor.command, descriptor.description)

    console = Console(width=120)
    with console.capture() as capture:
        console.print(table)
    click.echo(capture.get(), nl=False)

# 🔼⚙️
