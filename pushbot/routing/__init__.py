"""Command registration and routing."""

from pushbot.routing.command import Command, CommandHandler, FunctionHandler
from pushbot.routing.router import Router, as_handler, compile_pattern

__all__ = [
    "Command",
    "CommandHandler",
    "FunctionHandler",
    "Router",
    "as_handler",
    "compile_pattern",
]
