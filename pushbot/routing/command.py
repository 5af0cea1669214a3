"""Command registration model and handler protocol."""

import re
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from pushbot.domain.scope import Scope

HandlerResult = Awaitable[None] | None


@runtime_checkable
class CommandHandler(Protocol):
    """Protocol for command handlers.

    A handler is called once per turn with the scope of the conversation.
    It may be synchronous or return an awaitable; either way the turn
    completes only after it returns (or its awaitable resolves).
    """

    def handle(self, scope: Scope) -> HandlerResult:
        """Handle one turn of the command."""
        ...


class FunctionHandler:
    """Adapts a plain callable ``fn(scope)`` to the CommandHandler protocol."""

    def __init__(self, fn: Callable[[Scope], HandlerResult]) -> None:
        self._fn = fn

    @property
    def name(self) -> str:
        return getattr(self._fn, "__qualname__", repr(self._fn))

    def handle(self, scope: Scope) -> HandlerResult:
        return self._fn(scope)

    def __repr__(self) -> str:
        return f"FunctionHandler({self.name})"


@dataclass(frozen=True, eq=False)
class Command:
    """A text pattern bound to the handler that serves it."""

    pattern: re.Pattern[str]
    handler: CommandHandler

    @property
    def route(self) -> str:
        """Source text of the pattern, used in logs."""
        return self.pattern.pattern

    def matches(self, text: str) -> bool:
        """True if the pattern matches anywhere in ``text``."""
        return self.pattern.search(text) is not None
