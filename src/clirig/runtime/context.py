# src/clirig/runtime/context.py
"""
Per-invocation bundle handed to command handlers.
"""
import asyncio
import inspect
from typing import Any

import structlog

from clirig.protocols import CleanupProcedure, Node
from clirig.runtime.sink import OutputSink
from clirig.telemetry import StructLogger

log: StructLogger = structlog.get_logger("runtime.context")


class ExecutionContext:
    """
    What a handler sees while it runs: the node, its stdout and the ways to say it is done.

    Handlers finish by calling `on_complete()` (or `on_complete(error)`), by
    calling `mark_ready()`, or by writing the ready marker to `stdout`. Only
    the first signal counts. A context belongs to exactly one invocation.
    """

    def __init__(self, command: str, argv: list[str], ready_marker: str | None = None):
        self.command = command
        self.argv = argv
        self.node: Node | None = None
        self._completion: asyncio.Future[BaseException | str | None] = asyncio.get_running_loop().create_future()
        self._cleanup: CleanupProcedure | None = None
        self._cleanup_calls = 0
        self.stdout = OutputSink(ready_marker=ready_marker, on_ready=self.mark_ready)
        self._log = log.bind(command=command)

    @property
    def completed(self) -> bool:
        return self._completion.done()

    def on_complete(self, error: BaseException | str | None = None) -> None:
        """Signals that the command has finished, optionally with an error."""
        if self._completion.done():
            self._log.debug("Completion already signalled, ignoring", error=str(error) if error else None)
            return
        self._log.debug("Completion signalled", error=str(error) if error else None)
        self._completion.set_result(error or None)

    def mark_ready(self) -> None:
        """Signals that a long-running command is up and serving."""
        self.on_complete()

    @property
    def completion(self) -> "asyncio.Future[BaseException | str | None]":
        return self._completion

    async def wait_for_completion(self) -> BaseException | str | None:
        return await self._completion

    def attach_cleanup(self, cleanup: CleanupProcedure) -> None:
        if self._cleanup is not None:
            raise RuntimeError(f"Cleanup already attached for '{self.command}'")
        self._cleanup = cleanup

    @property
    def has_cleanup(self) -> bool:
        return self._cleanup is not None

    @property
    def cleanup_calls(self) -> int:
        return self._cleanup_calls

    async def run_cleanup(self) -> Any:
        """Runs the attached cleanup procedure. Calling it twice is a bug."""
        if self._cleanup is None:
            self._log.warning("Cleanup requested before a node was acquired")
            raise AssertionError(f"No cleanup attached for '{self.command}'")
        if self._cleanup_calls:
            raise RuntimeError(f"Cleanup for '{self.command}' already ran")

        self._cleanup_calls += 1
        result = await call_cleanup(self._cleanup)
        self._log.debug("Cleanup finished")
        return result


async def call_cleanup(cleanup: CleanupProcedure) -> Any:
    """Calls a cleanup procedure, awaiting it when it is a coroutine function."""
    result = cleanup()
    if inspect.isawaitable(result):
        result = await result
    return result
