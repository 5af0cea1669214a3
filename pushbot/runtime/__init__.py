"""Runtime: session processing and per-key serialization."""

from pushbot.runtime.mutex import KeyedMutex, RedisKeyedMutex
from pushbot.runtime.processor import MessageSender, SessionProcessor, TurnOutcome

__all__ = [
    "KeyedMutex",
    "MessageSender",
    "RedisKeyedMutex",
    "SessionProcessor",
    "TurnOutcome",
]
