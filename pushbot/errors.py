"""Error hierarchy for pushbot.

Store implementations wrap backend-specific failures in StoreError
subclasses so the processor's callers see one consistent type.
"""


class PushBotError(Exception):
    """Base exception for all pushbot errors."""


class StoreError(PushBotError):
    """Base exception for all scope store errors.

    All store implementations should wrap backend-specific errors
    in one of the StoreError subclasses.
    """

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.cause = cause


class StoreUnavailableError(StoreError):
    """Raised when the store backend cannot be reached.

    Examples:
        - Redis server unavailable
        - Connection reset mid-command
        - Network timeouts
    """

    pass


class HandlerError(PushBotError):
    """Raised when a command handler fails during a turn.

    The scope changes made during the failed turn are not persisted.
    """

    def __init__(
        self,
        message: str,
        *,
        command: str,
        key: str,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.command = command
        self.key = key
        self.cause = cause


class InvalidPatternError(PushBotError, ValueError):
    """Raised when a command pattern is not a valid regular expression."""

    pass


class UnsupportedEventError(PushBotError, ValueError):
    """Raised when the transport delivers an event name we do not know."""

    pass


class ScopeNotBoundError(PushBotError):
    """Raised when send() is called on a scope with no sender bound."""

    pass


class ScopeSerializationError(StoreError):
    """Raised when a scope cannot be serialized for storage.

    ``handler_data`` is persisted as JSON; a handler that stores a value
    JSON cannot represent fails the turn with this error.
    """

    def __init__(self, message: str, *, key: str, cause: Exception | None = None) -> None:
        super().__init__(message, cause)
        self.key = key


class ScopeLockTimeoutError(StoreUnavailableError):
    """Raised when the distributed scope lock is not granted in time."""

    pass
