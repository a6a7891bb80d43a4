# src/clirig/runtime/backend.py
"""
Adapters between callback-style node factories and the awaitable BackendAccessor protocol.
"""
import asyncio
from collections.abc import Callable, Mapping
from typing import Any, TypeAlias

import structlog

from clirig.protocols import BackendAccessor, CleanupProcedure, Node
from clirig.telemetry import StructLogger

log: StructLogger = structlog.get_logger("runtime.backend")

NodeCallback: TypeAlias = Callable[..., None]
NodeFactory: TypeAlias = Callable[[dict[str, Any], NodeCallback], Any]
Continuation: TypeAlias = Callable[..., None]


def _as_exception(error: Any) -> BaseException:
    return error if isinstance(error, BaseException) else RuntimeError(str(error))


def settle_future(future: asyncio.Future, error: Any = None, result: Any = None) -> None:
    if future.done():
        log.warning("Callback invoked more than once, ignoring", error=str(error) if error else None)
        return
    if error:
        future.set_exception(_as_exception(error))
    else:
        future.set_result(result)


def adapt_cleanup(cleanup: Callable[[Continuation], Any]) -> CleanupProcedure:
    """
    Wraps `cleanup(continuation)` into a coroutine function.

    The continuation is called as `continuation(error=None, result=None)`;
    the coroutine raises the error or returns the result. A truthy first
    positional argument is always an error, so a value must be passed as
    `continuation(None, value)` or `continuation(result=value)`.
    """
    async def run() -> Any:
        loop = asyncio.get_running_loop()
        done: asyncio.Future[Any] = loop.create_future()

        def continuation(error: Any = None, result: Any = None) -> None:
            loop.call_soon_threadsafe(settle_future, done, error, result)

        cleanup(continuation)
        return await done

    return run


class CallbackAccessor(BackendAccessor):
    """
    Implements BackendAccessor on top of `get_node(options, callback)`.

    The factory calls `callback(error, node, cleanup)` exactly once, possibly
    from another thread; `cleanup` itself takes a continuation with the
    error-first signature described in `adapt_cleanup`. For `init` the
    invocation resolves with whatever the cleanup passes as `result`.
    """

    def __init__(self, get_node: NodeFactory):
        self._get_node = get_node

    async def acquire(self, options: Mapping[str, Any]) -> tuple[Node, CleanupProcedure]:
        loop = asyncio.get_running_loop()
        acquired: asyncio.Future[tuple[Node, Callable[[Continuation], Any]]] = loop.create_future()

        def callback(error: Any = None, node: Node | None = None, cleanup: Any = None) -> None:
            loop.call_soon_threadsafe(settle_future, acquired, error, (node, cleanup))

        log.debug("Requesting node from factory", api=options.get("api"))
        self._get_node(dict(options), callback)
        node, cleanup = await acquired
        return node, adapt_cleanup(cleanup)
