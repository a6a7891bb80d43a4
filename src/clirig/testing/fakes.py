#
# src/clirig/testing/fakes.py
#
"""
In-memory stand-ins for a backend node and its accessor.
"""
from collections import defaultdict
from collections.abc import Callable, Mapping
from typing import Any

import structlog
from attrs import define, field

from clirig.protocols import CleanupProcedure, Node

log = structlog.get_logger("testing.fakes")


class FakeNode(Node):
    """
    Minimal event-emitting node.

    `init()` emits the `init` event unless `emit_init_on_init` is False, in
    which case the test emits it by hand with `emit("init")`.
    """
    def __init__(self, emit_init_on_init: bool = True):
        self.emit_init_on_init = emit_init_on_init
        self.init_calls = 0
        self._once: dict[str, list[Callable[..., Any]]] = defaultdict(list)

    def once(self, event: str, listener: Callable[..., Any]) -> None:
        self._once[event].append(listener)

    def emit(self, event: str, *args: Any) -> int:
        listeners = self._once.pop(event, [])
        for listener in listeners:
            listener(*args)
        return len(listeners)

    def init(self) -> None:
        self.init_calls += 1
        if self.emit_init_on_init:
            self.emit("init")


@define(slots=True)
class FakeAccessor:
    """
    Hands out FakeNodes and records what happened to them.

    Set `acquire_error` or `cleanup_error` to make the respective step raise.
    `cleanup_result` is what the cleanup procedure returns.
    """
    node_factory: Callable[[], Node] = field(default=FakeNode)
    acquire_error: Exception | None = field(default=None)
    cleanup_error: Exception | None = field(default=None)
    cleanup_result: Any = field(default=None)
    acquired: list[dict[str, Any]] = field(factory=list)
    nodes: list[Node] = field(factory=list)
    cleanup_calls: int = field(default=0)

    async def acquire(self, options: Mapping[str, Any]) -> tuple[Node, CleanupProcedure]:
        self.acquired.append(dict(options))
        if self.acquire_error is not None:
            raise self.acquire_error
        node = self.node_factory()
        self.nodes.append(node)
        log.debug("Fake node acquired", api=options.get("api"))
        return node, self._cleanup

    async def _cleanup(self) -> Any:
        self.cleanup_calls += 1
        if self.cleanup_error is not None:
            raise self.cleanup_error
        return self.cleanup_result

# 🔼⚙️
