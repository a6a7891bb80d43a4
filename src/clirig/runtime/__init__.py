"""
Invocation runtime: output capture, execution context and the per-request state machine.
"""
from .backend import CallbackAccessor, adapt_cleanup
from .context import ExecutionContext
from .invocation import Invocation, InvocationOrchestrator
from .sink import OutputSink

__all__ = [
    "CallbackAccessor",
    "ExecutionContext",
    "Invocation",
    "InvocationOrchestrator",
    "OutputSink",
    "adapt_cleanup",
]
