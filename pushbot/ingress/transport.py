"""Chat transport protocols.

Defines the interface the bot expects from a chat network client and its
event stream. Encryption, signing and reconnection live behind it.
"""

from abc import abstractmethod
from collections.abc import Callable, Mapping
from enum import Enum
from typing import Any, Protocol

from pushbot.domain.messages import DeliveryResult, OutboundMessage


class StreamEvent(str, Enum):
    """Stream notifications the bot subscribes to."""

    CHAT = "chat"  # Listener receives the raw event mapping
    CONNECT = "connect"  # Listener receives no arguments
    DISCONNECT = "disconnect"  # Listener receives no arguments


ChatListener = Callable[[Mapping[str, Any]], object]
LifecycleListener = Callable[[], object]


class ChatStream(Protocol):
    """Protocol for a live event stream.

    Listeners are plain callables invoked on the event loop thread.
    Reconnection (retry count, backoff) is the stream's own business.
    """

    @abstractmethod
    def on(
        self,
        stream_event: StreamEvent,
        listener: ChatListener | LifecycleListener,
    ) -> None:
        """Subscribe a listener to a stream notification."""
        ...

    @abstractmethod
    async def connect(self) -> None:
        """Open the stream."""
        ...

    @abstractmethod
    async def disconnect(self) -> None:
        """Close the stream."""
        ...

    @abstractmethod
    async def connected(self) -> bool:
        """Whether the stream is currently connected."""
        ...


class ChatClient(Protocol):
    """Protocol for the chat network client."""

    @abstractmethod
    async def send(
        self, conversation_id: str, message: OutboundMessage
    ) -> DeliveryResult:
        """Send a message to a conversation.

        Returns:
            DeliveryResult with transport message ID and status

        Raises:
            Exception: If delivery fails
        """
        ...

    @abstractmethod
    async def accept(self, requester: str) -> None:
        """Accept a pending chat request from ``requester``."""
        ...

    @abstractmethod
    async def list_requests(self) -> list[str]:
        """Identifiers of everyone with a pending chat request."""
        ...

    @abstractmethod
    async def create_stream(self, *, retries: int) -> ChatStream:
        """Create a stream over all chats.

        Args:
            retries: Reconnection attempts the stream may make
        """
        ...
