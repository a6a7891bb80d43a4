#
# src/clirig/__init__.py
#
"""
clirig: run CLI command handlers in-process and capture what they print.
"""
from clirig.config import HarnessConfig, load_config
from clirig.exceptions import (
    BackendAcquisitionError,
    CleanupError,
    CommandNotFound,
    CompletionError,
    ConfigurationError,
    HandlerFault,
    HarnessError,
    OptionParseError,
    UnexpectedSuccessError,
)
from clirig.harness import CliHarness
from clirig.router import CommandDescriptor, CommandRegistry
from clirig.runtime import CallbackAccessor, ExecutionContext, OutputSink

__all__ = [
    "BackendAcquisitionError",
    "CallbackAccessor",
    "CleanupError",
    "CliHarness",
    "CommandDescriptor",
    "CommandNotFound",
    "CommandRegistry",
    "CompletionError",
    "ConfigurationError",
    "ExecutionContext",
    "HandlerFault",
    "HarnessConfig",
    "HarnessError",
    "OptionParseError",
    "OutputSink",
    "UnexpectedSuccessError",
    "load_config",
]

# 🔼⚙️
