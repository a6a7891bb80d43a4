# src/clirig/harness.py

"""
Entry point for test suites: run CLI commands in-process against a node.
"""

import os
from pathlib import Path
from typing import Any

import structlog

from clirig.config import HarnessConfig
from clirig.exceptions import HandlerFault, HarnessError, UnexpectedSuccessError
from clirig.protocols import BackendAccessor
from clirig.router import CommandRegistry
from clirig.runtime.invocation import InvocationOrchestrator
from clirig.telemetry import StructLogger

log: StructLogger = structlog.get_logger("harness")


class CliHarness:
    """
    Executes command strings such as ``"files get <hash>"`` against one repository.

    Creating a harness points the repository environment variable (``IPFS_PATH``
    by default) at `repo_path` for the whole process. Harnesses sharing a
    process therefore share that binding, and concurrent invocations that touch
    the same repository are the caller's responsibility.

    ``await harness.run(cmd)`` (or ``await harness(cmd)``) returns what the
    command printed; ``await harness.fail(cmd)`` returns the error text of a
    command that is expected to fail.
    """

    def __init__(
        self,
        repo_path: str | Path,
        registry: CommandRegistry,
        accessor: BackendAccessor,
        config: HarnessConfig | None = None,
    ):
        self.repo_path = Path(repo_path)
        self.config = config or HarnessConfig()
        self.orchestrator = InvocationOrchestrator(registry, accessor, self.config)

        os.environ[self.config.repo_env_var] = str(self.repo_path)
        log.debug("Bound repository path", env_var=self.config.repo_env_var, repo_path=str(self.repo_path))

    @property
    def registry(self) -> CommandRegistry:
        return self.orchestrator.registry

    async def run(self, request: str) -> Any:
        """Runs `request` and returns its output; raises a HarnessError subclass on failure."""
        return await self.orchestrator.execute(request)

    async def __call__(self, request: str) -> Any:
        return await self.run(request)

    async def fail(self, request: str) -> str:
        """
        Runs `request` expecting it to fail.

        Returns the error text. Raises UnexpectedSuccessError if the command succeeds.
        """
        try:
            output = await self.run(request)
        except HarnessError as e:
            log.debug("Command failed as expected", request=request, error_type=type(e).__name__)
            return e.output if isinstance(e, HandlerFault) else str(e)

        log.warning("Command expected to fail but succeeded", request=request)
        raise UnexpectedSuccessError(f"Expected failure but command succeeded with output: {output!r}", command=request)

# 🔼⚙️
