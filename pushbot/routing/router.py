"""Command router.

Keeps registered commands in registration order and resolves the command
for a chat event. The first registered command whose pattern matches wins.
"""

import re
from collections.abc import Callable

from pushbot.domain.events import ChatEvent, ChatMessage
from pushbot.domain.scope import Scope
from pushbot.errors import InvalidPatternError
from pushbot.observability.logging import get_logger
from pushbot.routing.command import (
    Command,
    CommandHandler,
    FunctionHandler,
    HandlerResult,
)

logger = get_logger(__name__)

Handler = CommandHandler | Callable[[Scope], HandlerResult]


def compile_pattern(pattern: str | re.Pattern[str]) -> re.Pattern[str]:
    """Compile a pattern, rejecting malformed expressions.

    Raises:
        InvalidPatternError: If the pattern does not compile
    """
    if isinstance(pattern, re.Pattern):
        return pattern
    try:
        return re.compile(pattern)
    except re.error as e:
        raise InvalidPatternError(f"Invalid command pattern {pattern!r}: {e}") from e


def as_handler(handler: Handler) -> CommandHandler:
    """Wrap a plain callable as a CommandHandler.

    Raises:
        TypeError: If handler is neither a CommandHandler nor callable
    """
    if isinstance(handler, CommandHandler):
        return handler
    if callable(handler):
        return FunctionHandler(handler)
    raise TypeError(f"Command handler must be callable, got {type(handler).__name__}")


class Router:
    """Routes chat events to registered commands.

    Only text messages are routable. Requests, accepts, rejects and
    membership events never start or continue a command.
    """

    def __init__(self) -> None:
        self._commands: list[Command] = []

    def register(self, pattern: str | re.Pattern[str], handler: Handler) -> Command:
        """Append a command. Duplicate patterns are allowed; earliest wins."""
        command = Command(pattern=compile_pattern(pattern), handler=as_handler(handler))
        self._commands.append(command)
        logger.debug(
            "command_registered",
            route=command.route,
            total_commands=len(self._commands),
        )
        return command

    def unregister(self, command: Command) -> bool:
        """Remove a registered command.

        Returns:
            True if the command was registered and has been removed
        """
        try:
            self._commands.remove(command)
        except ValueError:
            return False
        logger.debug(
            "command_unregistered",
            route=command.route,
            remaining_commands=len(self._commands),
        )
        return True

    def route(self, event: ChatEvent) -> Command | None:
        """Resolve the command for an event, or None if nothing matches."""
        if not isinstance(event, ChatMessage):
            return None

        text = event.text
        if text is None:
            return None

        for command in self._commands:
            if command.matches(text):
                return command
        return None

    @property
    def commands(self) -> tuple[Command, ...]:
        """Registered commands in priority order."""
        return tuple(self._commands)

    def __len__(self) -> int:
        return len(self._commands)
