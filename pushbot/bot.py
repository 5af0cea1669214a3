"""PushBot: chat bot that executes commands based on message content.

Usage:

    from pushbot.bot import PushBot

    bot = PushBot(client)

    @bot.command(r"^/ping$")
    def ping(scope):
        scope.send("Pong!")
        scope.end()

    await bot.start()
"""

import asyncio
from collections.abc import Callable, Coroutine, Mapping
from typing import Any

from pydantic import ValidationError

from pushbot.config import get_settings
from pushbot.config.settings import Settings
from pushbot.domain.events import ChatMessage, ChatRequest, EventOrigin
from pushbot.errors import (
    HandlerError,
    ScopeSerializationError,
    StoreError,
    UnsupportedEventError,
)
from pushbot.ingress.translate import translate_stream_event
from pushbot.ingress.transport import ChatClient, ChatStream, StreamEvent
from pushbot.observability.logging import get_logger
from pushbot.observability.metrics import EVENTS_RECEIVED, REQUESTS_ACCEPTED
from pushbot.routing.command import Command
from pushbot.routing.router import Handler, Router
from pushbot.runtime.mutex import KeyedMutex, RedisKeyedMutex
from pushbot.runtime.processor import SessionProcessor
from pushbot.scopes import create_scope_store
from pushbot.scopes.store import ScopeStore
from pushbot.scopes.stores import RedisScopeStore

logger = get_logger(__name__)


class PushBot:
    """Listens to the chat stream and dispatches messages to commands.

    Only events sent by others are considered. Messages go to the session
    processor; chat requests are accepted when auto-accept is enabled;
    everything else is ignored.
    """

    def __init__(
        self,
        client: ChatClient,
        *,
        store: ScopeStore | None = None,
        settings: Settings | None = None,
    ) -> None:
        """Initialize the bot.

        Args:
            client: Chat network client
            store: Scope store (built from settings if not provided)
            settings: Configuration (loaded with get_settings() if not provided)
        """
        self._settings = settings or get_settings()
        self._client = client
        self._router = Router()
        self._store = store if store is not None else create_scope_store(self._settings.scopes)
        self._processor = SessionProcessor(
            self._router,
            self._store,
            client,
            routing_policy=self._settings.processor.routing_policy,
            mutex=self._create_mutex(),
        )
        self._stream: ChatStream | None = None
        self._accept_requests = self._settings.stream.accept_requests
        self._running = False
        self._tasks: set[asyncio.Task[None]] = set()

    def _create_mutex(self) -> KeyedMutex:
        """Per-key lock for the processor, distributed if configured.

        Raises:
            ValueError: If a distributed lock is requested without a Redis store
        """
        config = self._settings.processor
        if not config.distributed_lock:
            return KeyedMutex()
        if not isinstance(self._store, RedisScopeStore):
            raise ValueError("processor.distributed_lock requires the redis scope backend")
        return RedisKeyedMutex(
            self._store.client,
            lock_timeout=config.lock_timeout_seconds,
            blocking_timeout=config.lock_wait_seconds,
        )

    @property
    def client(self) -> ChatClient:
        return self._client

    @property
    def router(self) -> Router:
        return self._router

    @property
    def processor(self) -> SessionProcessor:
        return self._processor

    @property
    def store(self) -> ScopeStore:
        return self._store

    @property
    def running(self) -> bool:
        return self._running

    def command(
        self, pattern: str, handler: Handler | None = None
    ) -> Command | Callable[[Handler], Handler]:
        """Register a command.

        Called with a handler it registers immediately and returns the
        Command. Called without one it returns a decorator.
        """
        if handler is not None:
            return self._router.register(pattern, handler)

        def decorator(fn: Handler) -> Handler:
            self._router.register(pattern, fn)
            return fn

        return decorator

    async def start(self, accept_requests: bool | None = None) -> None:
        """Start listening to the chat stream.

        Args:
            accept_requests: Accept chat requests automatically (defaults
                to the stream.accept_requests setting)
        """
        if accept_requests is not None:
            self._accept_requests = accept_requests

        await self._store.open()

        if self._accept_requests:
            await self._accept_pending_requests()

        if self._stream is None:
            self._stream = await self._create_stream()

        self._running = True
        try:
            await self._stream.connect()
        except Exception as e:
            logger.error("stream_start_failed", error=str(e))
            self._running = False
            self._stream = None
            raise

    async def stop(self) -> None:
        """Stop the bot, abandoning work in flight."""
        self._running = False

        if self._stream is not None and await self._stream.connected():
            await self._stream.disconnect()
        self._stream = None

        for task in list(self._tasks):
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._processor.abandon()

        await self._store.close()
        logger.info("bot_stopped")

    async def join(self) -> None:
        """Wait until every dispatched event and pending send has finished."""
        while self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
        await self._processor.drain()

    def dispatch(self, data: Mapping[str, Any]) -> asyncio.Task[None] | None:
        """Handle one raw chat event from the stream.

        Returns:
            The task processing the event, or None if it was ignored
        """
        if not self._running:
            return None

        try:
            event = translate_stream_event(data)
        except (UnsupportedEventError, ValidationError) as e:
            logger.warning(
                "stream_event_rejected",
                stream_event=data.get("event"),
                error=str(e),
            )
            return None

        EVENTS_RECEIVED.labels(kind=event.kind, origin=event.origin.value).inc()
        logger.debug(
            "chat_event_received",
            kind=event.kind,
            conversation_id=event.conversation_id,
            from_participant=event.from_participant,
        )

        if event.origin != EventOrigin.OTHER:
            return None

        if isinstance(event, ChatRequest):
            if self._accept_requests:
                return self._spawn(self._handle_request(event.from_participant))
            return None

        if isinstance(event, ChatMessage):
            return self._spawn(self._process(event))

        return None

    def _spawn(self, coro: Coroutine[Any, Any, None]) -> asyncio.Task[None]:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _process(self, event: ChatMessage) -> None:
        try:
            await self._processor.process(event.conversation_id, event)
        except HandlerError as e:
            logger.error(
                "turn_failed",
                reason="handler",
                key=e.key,
                route=e.command,
                error=str(e),
            )
        except ScopeSerializationError as e:
            logger.error(
                "turn_failed",
                reason="serialization",
                key=e.key,
                error=str(e),
            )
        except StoreError as e:
            logger.error(
                "turn_failed",
                reason="store",
                conversation_id=event.conversation_id,
                from_participant=event.from_participant,
                error=str(e),
            )
        except Exception as e:
            logger.error(
                "turn_failed",
                reason="unexpected",
                conversation_id=event.conversation_id,
                from_participant=event.from_participant,
                error=str(e),
                exc_info=True,
            )

    async def _handle_request(self, requester: str) -> None:
        try:
            await self._accept_request(requester)
        except Exception as e:
            logger.error("request_accept_failed", requester=requester, error=str(e))

    async def _accept_pending_requests(self) -> None:
        logger.debug("accepting_pending_requests")
        for requester in await self._client.list_requests():
            await self._accept_request(requester)

    async def _accept_request(self, requester: str) -> None:
        logger.debug("accepting_request", requester=requester)
        await self._client.accept(requester)
        REQUESTS_ACCEPTED.inc()

    async def _create_stream(self) -> ChatStream:
        logger.info("creating_chat_stream")
        stream = await self._client.create_stream(
            retries=self._settings.stream.connection_retries
        )
        stream.on(StreamEvent.CHAT, self.dispatch)
        stream.on(StreamEvent.CONNECT, self._on_connect)
        stream.on(StreamEvent.DISCONNECT, self._on_disconnect)
        return stream

    def _on_connect(self) -> None:
        logger.info("chat_stream_connected")

    def _on_disconnect(self) -> None:
        logger.info("chat_stream_disconnected")
