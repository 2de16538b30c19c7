"""Read-aloud controller wiring the session engine to its collaborators."""

import logging
from typing import Optional

from fastapi import WebSocket

from ..domain.entities import (
    ClearAllEvent,
    HistoryItem,
    PageLoadedEvent,
    QueryStateEvent,
    SessionStateView,
)
from ..domain.interfaces.key_value_store import KeyValueStore
from ..domain.interfaces.next_page_resolver import NextPageResolver
from ..domain.interfaces.speech_synthesizer import SpeechSynthesizer
from ..domain.services import (
    ContinuationCoordinator,
    HistoryService,
    PersistenceGateway,
    PrefetchCache,
    SessionEventDispatcher,
    SessionStateMachine,
)
from ..infrastructure.browser_bridge import BrowserBridge
from ..infrastructure.presentation_channel import PresentationChannel
from .config import Settings, settings as default_settings
from .websocket_handler import WebSocketHandler

logger = logging.getLogger(__name__)


class ReaderController:
    """
    Controller for coordinating read-aloud operations.

    This controller is injected with the storage and remote services and
    builds the single session engine on top of them, keeping the API layer
    thin.
    """

    def __init__(
        self,
        store: KeyValueStore,
        synthesizer: SpeechSynthesizer,
        resolver: NextPageResolver,
        settings: Optional[Settings] = None,
    ):
        """
        Initialize the controller with injected dependencies.

        Args:
            store: Durable key-value storage
            synthesizer: Remote speech synthesis service
            resolver: Remote next-page resolution service
            settings: Application settings, the module singleton by default
        """
        settings = settings or default_settings
        self.store = store
        self.synthesizer = synthesizer
        self.resolver = resolver

        self.channel = PresentationChannel()
        self.bridge = BrowserBridge(
            self.channel,
            timeout_seconds=settings.browser_request_timeout_seconds,
            max_chunk_chars=settings.max_chunk_chars,
        )
        self.gateway = PersistenceGateway(store)
        self.history = HistoryService(store, max_items=settings.history_max_items)
        self.prefetch = PrefetchCache(synthesizer, self.gateway)
        self.state_machine = SessionStateMachine(
            gateway=self.gateway,
            prefetch=self.prefetch,
            synthesizer=synthesizer,
            extractor=self.bridge,
            navigator=self.bridge,
            presentation=self.channel,
            history=self.history,
            restricted_url_prefixes=settings.restricted_url_prefixes,
        )
        self.continuation = ContinuationCoordinator(
            state_machine=self.state_machine,
            extractor=self.bridge,
            navigator=self.bridge,
            resolver=resolver,
            presentation=self.channel,
            pending_timeout_seconds=settings.pending_navigation_timeout_seconds,
        )
        self.dispatcher = SessionEventDispatcher(
            state_machine=self.state_machine,
            continuation=self.continuation,
            presentation=self.channel,
        )

        logger.info("ReaderController initialized with providers")

    async def startup(self) -> None:
        """Restore the persisted session and start processing events."""
        await self.state_machine.restore()
        await self.dispatcher.start()

    async def shutdown(self) -> None:
        await self.dispatcher.stop()
        self.continuation.cancel_all()
        self.prefetch.invalidate(self.state_machine.session)
        self.bridge.fail_all("Service shutting down")

    async def handle_websocket_connection(self, websocket: WebSocket) -> None:
        logger.info(f"Handling new WebSocket connection from {websocket.client}")
        handler = WebSocketHandler(
            dispatcher=self.dispatcher,
            channel=self.channel,
            bridge=self.bridge,
        )
        await handler.handle_websocket(websocket)

    async def get_state(self) -> SessionStateView:
        return await self.dispatcher.submit_and_wait(QueryStateEvent())

    async def page_loaded(self, page_id: str, url: str) -> bool:
        started = await self.dispatcher.submit_and_wait(PageLoadedEvent(page_id=page_id, url=url))
        return bool(started)

    async def clear_all(self) -> None:
        await self.dispatcher.submit_and_wait(ClearAllEvent())

    async def get_history(self) -> list[HistoryItem]:
        return await self.history.list_items()

    async def clear_history(self) -> bool:
        return await self.history.clear()

    def get_health_status(self) -> dict:
        """
        Get application health status.

        Returns:
            Dict containing health status information
        """
        return {
            "status": "healthy",
            "dispatcher_running": self.dispatcher.is_running,
            "player_attached": self.channel.is_attached,
            "phase": self.state_machine.phase.value,
            "providers": {
                "store": type(self.store).__name__,
                "synthesizer": type(self.synthesizer).__name__,
                "resolver": type(self.resolver).__name__,
            },
        }
