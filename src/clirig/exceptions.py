# src/clirig/exceptions.py

"""
Custom exceptions raised by the clirig harness.
"""


class HarnessError(Exception):
    """Base class for all harness errors."""

    def __init__(
        self,
        message: str,
        command: str | None = None,
        details: BaseException | None = None,
    ):
        self.command = command
        self.details = details
        full_message = message
        if command:
            full_message += f" (Command: '{command}')"
        super().__init__(full_message)
        if details is not None and hasattr(self, "add_note"):
            self.add_note(f"Original error: {type(details).__name__}: {details}")


class ConfigurationError(HarnessError):
    """Invalid harness configuration."""

    pass


class CommandNotFound(HarnessError):
    """The first token of a request does not name a registered command."""

    pass


class OptionParseError(HarnessError):
    """The command's declared options could not be parsed."""

    pass


class BackendAcquisitionError(HarnessError):
    """The backend accessor failed to hand out a node."""

    pass


class HandlerFault(HarnessError):
    """The command handler raised while running."""

    def __init__(
        self,
        output: str,
        command: str | None = None,
        details: BaseException | None = None,
    ):
        self.output = output
        super().__init__(output, command=command, details=details)


class CompletionError(HarnessError):
    """The handler signalled completion with an error."""

    pass


class CleanupError(HarnessError):
    """The cleanup procedure of the acquired node failed."""

    pass


class UnexpectedSuccessError(HarnessError, AssertionError):
    """A command expected to fail finished successfully."""

    pass


# 🔼⚙️
