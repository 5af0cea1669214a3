"""pushbot: multi-turn command dispatcher for chat event streams.

Routes incoming chat messages to registered command handlers and keeps
per-conversation, per-participant scope across turns until the command
finishes or the scope expires.
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
