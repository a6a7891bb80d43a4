#
# src/clirig/protocols.py
#
"""
Runtime protocols for the collaborators the harness drives.
"""
from collections.abc import Awaitable, Callable, Mapping
from typing import Any, Protocol, TypeAlias, runtime_checkable

# A cleanup procedure takes no arguments and may be a plain function or a coroutine function.
CleanupProcedure: TypeAlias = Callable[[], Any | Awaitable[Any]]


@runtime_checkable
class Node(Protocol):
    """
    Protocol for a backend node the commands operate against.

    Only the pieces the harness itself touches are declared here; handlers
    are free to use the rest of the node's API.
    """
    def once(self, event: str, listener: Callable[..., Any]) -> Any:
        """Registers a listener that fires the next time `event` is emitted."""
        ...

    def init(self) -> Any:
        """Initializes the node's repository. May return an awaitable."""
        ...


@runtime_checkable
class BackendAccessor(Protocol):
    """
    Protocol for the facility that builds and tears down backend nodes.
    """
    async def acquire(self, options: Mapping[str, Any]) -> tuple[Node, CleanupProcedure]:
        """
        Builds a node for one invocation.

        Args:
            options: Parsed command options plus the `api` entry, which is
                either False or the multiaddr the node's API should bind to.

        Returns:
            The node and the procedure that releases it.
        """
        ...

# 🔼⚙️
