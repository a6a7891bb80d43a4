# src/clirig/state.py
#
"""
Defines the lifecycle state tracked for each in-flight invocation.
"""

from datetime import UTC, datetime
from enum import Enum, auto

import structlog
from attrs import field, mutable

log: structlog.stdlib.BoundLogger = structlog.get_logger("state")


class InvocationStatus(Enum):
    """Enumeration of the phases an invocation moves through."""

    PARSING = auto()  # Tokenizing, alias rewrite, handler and option resolution.
    ACQUIRING_BACKEND = auto()
    INIT_WAIT = auto()  # `init` only: waiting for the node's init event.
    RUNNING = auto()  # Handler invoked, output flowing into the sink.
    COMPLETING = auto()  # Waiting for the completion signal.
    CLEANING_UP = auto()
    RESOLVED = auto()
    REJECTED = auto()


SETTLED_STATUSES = frozenset({InvocationStatus.RESOLVED, InvocationStatus.REJECTED})


@mutable(slots=True)
class InvocationState:
    """
    Holds the dynamic state of a single invocation.

    Mutable because the orchestrator advances it through each phase.
    """

    invocation_id: str = field()
    request: str = field()
    command: str | None = field(default=None)
    status: InvocationStatus = field(default=InvocationStatus.PARSING)
    started_at: datetime = field(factory=lambda: datetime.now(UTC))
    settled_at: datetime | None = field(default=None)
    error_message: str | None = field(default=None)
    history: list[InvocationStatus] = field(factory=list)

    def __attrs_post_init__(self):
        self.history.append(self.status)
        log.debug(
            "Initialized invocation state",
            invocation_id=self.invocation_id,
            request=self.request,
        )

    @property
    def is_settled(self) -> bool:
        return self.status in SETTLED_STATUSES

    def update_status(self, new_status: InvocationStatus, error_msg: str | None = None) -> None:
        """Moves to `new_status`; settled invocations never move again."""
        old_status = self.status
        if old_status == new_status:
            return
        if self.is_settled:
            log.warning(
                "Ignoring status change on settled invocation",
                invocation_id=self.invocation_id,
                status=old_status.name,
                requested=new_status.name,
            )
            return

        self.status = new_status
        self.history.append(new_status)
        log_func = log.debug

        if new_status == InvocationStatus.REJECTED:
            self.error_message = error_msg or "Unknown error"
            log_func = log.warning
        if new_status in SETTLED_STATUSES:
            self.settled_at = datetime.now(UTC)

        log_func(
            "Invocation status changed",
            invocation_id=self.invocation_id,
            command=self.command,
            old_status=old_status.name,
            new_status=new_status.name,
            **({"error": self.error_message} if new_status == InvocationStatus.REJECTED else {}),
        )

    @property
    def duration_seconds(self) -> float | None:
        if self.settled_at is None:
            return None
        return (self.settled_at - self.started_at).total_seconds()

# 🔼⚙️
