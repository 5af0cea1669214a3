"""Event ingress: transport protocols and raw event translation."""

from pushbot.ingress.translate import STREAM_EVENT_KINDS, translate_stream_event
from pushbot.ingress.transport import ChatClient, ChatStream, StreamEvent

__all__ = [
    "STREAM_EVENT_KINDS",
    "ChatClient",
    "ChatStream",
    "StreamEvent",
    "translate_stream_event",
]
