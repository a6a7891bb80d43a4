#
# src/clirig/router.py
#
"""
Maps request tokens to registered command handlers.
"""
from collections.abc import Callable, Iterable, Mapping, Sequence
from typing import Any, TypeAlias

import click
import structlog
from attrs import define, field

from clirig.config.models import DEFAULT_ALIASES
from clirig.exceptions import CommandNotFound, ConfigurationError, OptionParseError
from clirig.telemetry import StructLogger

log: StructLogger = structlog.get_logger("router")

OptionBuilder: TypeAlias = Callable[[], Iterable[click.Parameter]]
Handler: TypeAlias = Callable[..., Any]


@define(frozen=True, slots=True)
class CommandDescriptor:
    """
    Everything the harness needs to know about one command.
    """
    name: str
    handler: Handler
    command: str = field()
    description: str = ""
    builder: OptionBuilder | None = None

    @command.default
    def _default_command(self) -> str:
        return self.name

    def params(self) -> list[click.Parameter]:
        return list(self.builder()) if self.builder is not None else []


def expand_aliases(tokens: Sequence[str], aliases: Mapping[str, str] = DEFAULT_ALIASES) -> list[str]:
    """Prefixes an aliased first token with its parent command, e.g. `get x` -> `files get x`."""
    tokens = list(tokens)
    if tokens and tokens[0] in aliases:
        return [aliases[tokens[0]], *tokens]
    return tokens


class CommandRegistry:
    """
    Name to CommandDescriptor mapping, populated when the test suite starts.
    """

    def __init__(self, aliases: Mapping[str, str] = DEFAULT_ALIASES):
        self.aliases = aliases
        self._commands: dict[str, CommandDescriptor] = {}

    def __contains__(self, name: object) -> bool:
        return name in self._commands

    def __iter__(self):
        return iter(sorted(self._commands.values(), key=lambda d: d.name))

    def __len__(self) -> int:
        return len(self._commands)

    def register(
        self,
        name: str,
        handler: Handler,
        *,
        command: str | None = None,
        description: str = "",
        builder: OptionBuilder | None = None,
    ) -> CommandDescriptor:
        if not name or any(ch.isspace() for ch in name):
            raise ConfigurationError(f"Invalid command name: {name!r}")
        if name in self._commands:
            raise ConfigurationError(f"Command already registered: '{name}'")

        descriptor = CommandDescriptor(
            name=name,
            handler=handler,
            command=command or name,
            description=description,
            builder=builder,
        )
        self._commands[name] = descriptor
        log.debug("Registered command", command=name, signature=descriptor.command)
        return descriptor

    def command(
        self,
        name: str,
        *,
        command: str | None = None,
        description: str = "",
        builder: OptionBuilder | None = None,
    ) -> Callable[[Handler], Handler]:
        """Decorator form of `register`."""
        def decorator(func: Handler) -> Handler:
            self.register(name, func, command=command, description=description, builder=builder)
            return func
        return decorator

    def register_object(self, name: str, obj: Any) -> CommandDescriptor:
        """
        Registers a module-style command object.

        The object exposes `handler` and optionally `command`, `builder` and a
        description under either the `describe` or the `description` attribute.
        """
        handler = getattr(obj, "handler", None)
        if not callable(handler):
            raise ConfigurationError(f"Command object for '{name}' has no callable 'handler'")
        description = getattr(obj, "describe", None) or getattr(obj, "description", None) or ""
        return self.register(
            name,
            handler,
            command=getattr(obj, "command", None),
            description=description,
            builder=getattr(obj, "builder", None),
        )

    def route(
        self, tokens: Sequence[str], aliases: Mapping[str, str] | None = None
    ) -> tuple[list[str], CommandDescriptor]:
        """Expands aliases and looks up the handler, returning both."""
        if not tokens:
            raise CommandNotFound("Empty request")
        argv = expand_aliases(tokens, self.aliases if aliases is None else aliases)
        descriptor = self._commands.get(argv[0])
        if descriptor is None:
            log.error("Unknown command", command=argv[0], available=sorted(self._commands))
            raise CommandNotFound(f"Unknown command: '{argv[0]}'", command=argv[0])
        return argv, descriptor

    def resolve(self, tokens: Sequence[str]) -> CommandDescriptor:
        return self.route(tokens)[1]

    def parse_options(self, descriptor: CommandDescriptor, argv: Sequence[str]) -> dict[str, Any]:
        """
        Parses the tokens after the command name against its declared options.

        Unknown options and surplus arguments are tolerated and dropped.
        """
        parser = click.Command(
            descriptor.name,
            params=descriptor.params(),
            add_help_option=False,
            context_settings={"ignore_unknown_options": True, "allow_extra_args": True},
        )
        try:
            ctx = parser.make_context(descriptor.name, list(argv[1:]))
        except click.ClickException as e:
            log.error("Failed to parse command options", command=descriptor.name, error=e.format_message())
            raise OptionParseError(e.format_message(), command=descriptor.name, details=e) from e

        if ctx.args:
            log.debug("Ignoring undeclared arguments", command=descriptor.name, extra=ctx.args)
        return dict(ctx.params)

# 🔼⚙️
