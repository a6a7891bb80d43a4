# src/clirig/runtime/invocation.py
"""
Runs one command request in-process, from parsing to the settled result.
"""
import asyncio
import inspect
import uuid
from collections.abc import Awaitable, Mapping
from typing import Any

import structlog

from clirig.config.models import HarnessConfig
from clirig.exceptions import (
    BackendAcquisitionError,
    CleanupError,
    CompletionError,
    HandlerFault,
    HarnessError,
)
from clirig.protocols import BackendAccessor, CleanupProcedure, Node
from clirig.router import CommandDescriptor, CommandRegistry
from clirig.runtime.backend import settle_future
from clirig.runtime.context import ExecutionContext, call_cleanup
from clirig.state import InvocationState, InvocationStatus
from clirig.telemetry import StructLogger

log: StructLogger = structlog.get_logger("runtime.invocation")

INIT_COMMAND = "init"
INIT_EVENT = "init"
DAEMON_COMMAND = "daemon"
SHUTDOWN_COMMAND = "shutdown"


class Invocation:
    """
    State machine for a single request.

    PARSING -> ACQUIRING_BACKEND -> RUNNING -> COMPLETING -> CLEANING_UP -> RESOLVED/REJECTED,
    or for `init`: ACQUIRING_BACKEND -> INIT_WAIT -> CLEANING_UP -> RESOLVED/REJECTED.
    """

    def __init__(
        self,
        request: str,
        registry: CommandRegistry,
        accessor: BackendAccessor,
        config: HarnessConfig,
    ):
        self.request = request
        self.registry = registry
        self.accessor = accessor
        self.config = config
        self.state = InvocationState(invocation_id=uuid.uuid4().hex[:8], request=request)
        self.context: ExecutionContext | None = None
        self._handler_task: asyncio.Future[None] | None = None
        self._log = log.bind(invocation_id=self.state.invocation_id, request=request)

    async def run(self) -> Any:
        try:
            result = await self._run()
        except HarnessError as e:
            self.state.update_status(InvocationStatus.REJECTED, str(e))
            raise
        finally:
            await self._stop_handler_task()
        self.state.update_status(InvocationStatus.RESOLVED)
        self._log.info("Command finished", command=self.state.command, duration=self.state.duration_seconds)
        return result

    async def _run(self) -> Any:
        tokens = self.request.split()
        # `init` needs no handler, only the node's own init sequence.
        if tokens[:1] == [INIT_COMMAND]:
            self.state.command = INIT_COMMAND
            self._log = self._log.bind(command=INIT_COMMAND)
            return await self._run_init()

        argv, descriptor = self.registry.route(tokens, self.config.aliases)
        self.state.command = argv[0]
        self._log = self._log.bind(command=argv[0])
        self._log.debug("Parsed command", argv=argv)

        options = self.registry.parse_options(descriptor, argv)
        context = self.context = ExecutionContext(argv[0], argv, ready_marker=self.config.ready_marker)

        api = self.config.daemon_api if argv[0] == DAEMON_COMMAND else False
        node, cleanup = await self._acquire({**options, "api": api})
        context.node = node
        context.attach_cleanup(cleanup)

        await self._invoke_handler(descriptor, context, options)

        self.state.update_status(InvocationStatus.COMPLETING)
        error = await context.wait_for_completion()
        if error:
            # The node is not cleaned up on this path.
            self._log.error("Command completed with an error", error=str(error))
            raise CompletionError(
                str(error),
                command=context.command,
                details=error if isinstance(error, BaseException) else None,
            )

        await self._cleanup(context.run_cleanup())

        output = context.stdout.getvalue()
        context.stdout.close()
        if context.command == SHUTDOWN_COMMAND and self.config.shutdown_grace:
            self._log.debug("Waiting for shutdown to settle", seconds=self.config.shutdown_grace)
            await asyncio.sleep(self.config.shutdown_grace)
        return output

    async def _acquire(self, options: Mapping[str, Any]) -> tuple[Node, CleanupProcedure]:
        self.state.update_status(InvocationStatus.ACQUIRING_BACKEND)
        try:
            node, cleanup = await self.accessor.acquire(options)
        except Exception as e:
            self._log.error("Failed to acquire node", error=str(e), api=options.get("api"))
            raise BackendAcquisitionError(f"Failed to acquire node: {e}", command=self.state.command, details=e) from e
        self._log.debug("Node acquired", api=options.get("api"))
        return node, cleanup

    async def _invoke_handler(
        self,
        descriptor: CommandDescriptor,
        context: ExecutionContext,
        options: dict[str, Any],
    ) -> None:
        """
        Calls the handler and returns once it has signalled completion or is left running.

        Coroutine handlers are scheduled as a task; returning from one counts
        as completion. A handler that raises before completing is a fault.
        """
        self.state.update_status(InvocationStatus.RUNNING)
        try:
            result = descriptor.handler(context, **options)
        except Exception as e:
            await self._fail_handler(context, e)

        if not inspect.isawaitable(result):
            return

        task = self._handler_task = asyncio.ensure_future(self._drive(result, context))
        await asyncio.wait({task, context.completion}, return_when=asyncio.FIRST_COMPLETED)
        if context.completed:
            return
        if not task.cancelled() and task.exception() is not None:
            self._handler_task = None
            await self._fail_handler(context, task.exception())

    @staticmethod
    async def _drive(handler_result: Awaitable[Any], context: ExecutionContext) -> None:
        await handler_result
        context.on_complete()

    async def _fail_handler(self, context: ExecutionContext, error: BaseException) -> None:
        output = str(error)
        self._log.error("Handler raised", error=output, exc_info=error)
        fault = HandlerFault(output, command=context.command, details=error)
        try:
            await self._cleanup(context.run_cleanup())
        except CleanupError as cleanup_error:
            fault.add_note(f"Cleanup also failed: {cleanup_error}")
        raise fault from error

    async def _cleanup(self, pending: Awaitable[Any]) -> Any:
        self.state.update_status(InvocationStatus.CLEANING_UP)
        try:
            return await pending
        except Exception as e:
            self._log.error("Cleanup failed", error=str(e))
            raise CleanupError(f"Cleanup failed: {e}", command=self.state.command, details=e) from e

    async def _run_init(self) -> Any:
        """Acquires an API-less node, runs its init and resolves with the cleanup result."""
        node, cleanup = await self._acquire({"api": False})

        self.state.update_status(InvocationStatus.INIT_WAIT)
        loop = asyncio.get_running_loop()
        initialized: asyncio.Future[None] = loop.create_future()
        node.once(INIT_EVENT, lambda *args, **kwargs: loop.call_soon_threadsafe(settle_future, initialized))

        self._log.debug("Initializing node")
        try:
            started = node.init()
            if inspect.isawaitable(started):
                await started
        except Exception as e:
            self._log.error("Node init raised", error=str(e))
            fault = HandlerFault(str(e), command=INIT_COMMAND, details=e)
            try:
                await self._cleanup(call_cleanup(cleanup))
            except CleanupError as cleanup_error:
                fault.add_note(f"Cleanup also failed: {cleanup_error}")
            raise fault from e

        await initialized
        self._log.debug("Got init event, cleaning up")
        return await self._cleanup(call_cleanup(cleanup))

    async def _stop_handler_task(self) -> None:
        task = self._handler_task
        if task is None:
            return
        if not task.done():
            self._log.debug("Cancelling handler still running after settle")
            task.cancel()
            await asyncio.wait({task})
        if not task.cancelled() and task.exception() is not None:
            self._log.warning("Handler raised after completion", error=str(task.exception()))


class InvocationOrchestrator:
    """Creates and runs an Invocation per request. Holds no per-request state."""

    def __init__(self, registry: CommandRegistry, accessor: BackendAccessor, config: HarnessConfig):
        self.registry = registry
        self.accessor = accessor
        self.config = config

    def prepare(self, request: str) -> Invocation:
        return Invocation(request, self.registry, self.accessor, self.config)

    async def execute(self, request: str) -> Any:
        return await self.prepare(request).run()
