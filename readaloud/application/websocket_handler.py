import asyncio
import logging

from pydantic import ValidationError
from starlette.websockets import WebSocket, WebSocketDisconnect

from ..domain.entities import (
    AdvanceEvent,
    ClearAllEvent,
    ErrorOutMessage,
    InboundEvent,
    JumpEvent,
    OutboundMessage,
    PageLoadedEvent,
    PresentationClosedEvent,
    QueryStateEvent,
    ResumeEvent,
    SetAutoAdvanceEvent,
    StartPageEvent,
    StartSelectionEvent,
)
from ..domain.entities.websocket_messages import (
    AdvanceRequest,
    ClearAllRequest,
    ErrorCode,
    JumpRequest,
    PageLoaded,
    PageResponse,
    QueryStateRequest,
    ResumeRequest,
    SetAutoAdvanceRequest,
    StartPageRequest,
    StartSelectionRequest,
    client_message_adapter,
)
from ..domain.services import SessionEventDispatcher
from ..infrastructure.browser_bridge import BrowserBridge
from ..infrastructure.presentation_channel import PresentationChannel

logger = logging.getLogger(__name__)


class WebSocketHandler:

    def __init__(
        self,
        dispatcher: SessionEventDispatcher,
        channel: PresentationChannel,
        bridge: BrowserBridge,
    ):
        self._dispatcher = dispatcher
        self._channel = channel
        self._bridge = bridge

    async def handle_websocket(self, websocket: WebSocket) -> None:
        # Note: websocket.accept() is called by the API endpoint before this
        queue = self._channel.attach()
        send_task = asyncio.create_task(self._send_loop(websocket, queue))
        receive_task = asyncio.create_task(self._receive_loop(websocket))
        done, pending = await asyncio.wait(
            {send_task, receive_task},
            return_when=asyncio.FIRST_COMPLETED,
        )
        try:
            for task in done:
                exc = task.exception()
                if exc:
                    raise exc
        except WebSocketDisconnect:
            logger.info(f"WebSocket disconnected: {websocket.client}")
        except Exception as e:
            logger.error(f"WebSocket error: {e}", exc_info=True)
        finally:
            # A replaced connection must not disturb the player that replaced it
            if self._channel.detach(queue):
                self._bridge.fail_all("Browser disconnected")
                await self._dispatcher.submit(PresentationClosedEvent())

            for t in (send_task, receive_task):
                if not t.done():
                    t.cancel()
            await asyncio.gather(send_task, receive_task, return_exceptions=True)

            try:
                await websocket.close()
            except Exception as e:
                logger.debug(f"Error closing WebSocket: {e}")
            logger.info(f"WebSocket connection closed: {websocket.client}")

    async def _send_loop(self, websocket: WebSocket, queue: asyncio.Queue[OutboundMessage]) -> None:
        while True:
            item: OutboundMessage = await queue.get()
            logger.debug(f"_send_loop got message: {type(item).__name__}")
            await websocket.send_text(item.to_wire().model_dump_json())

    async def _receive_loop(self, websocket: WebSocket) -> None:
        """Receive messages from client and forward them to the dispatcher."""
        while True:
            data = await websocket.receive()

            if data.get("type") == "websocket.disconnect":
                logger.info(f"Client disconnected - received disconnect message: {data}")
                break

            if data.get("type") == "websocket.receive" and data.get("text") is not None:
                await self._handle_text(websocket, data["text"])
            elif data.get("type") == "websocket.receive":
                await self._send_error(websocket, "Binary messages are not supported")

    async def _handle_text(self, websocket: WebSocket, text: str) -> None:
        try:
            message = client_message_adapter.validate_json(text)
        except ValidationError as e:
            logger.error(f"Invalid message: {e}")
            await self._send_error(websocket, f"Invalid message: {e.errors()[0]['msg'] if e.errors() else e}")
            return

        # Browser answers bypass the queue; the event being handled may be waiting on them
        if isinstance(message, PageResponse):
            self._bridge.resolve(message)
            return

        await self._dispatcher.submit(self._to_event(message))

    def _to_event(self, message) -> InboundEvent:
        match message:
            case StartPageRequest():
                return StartPageEvent(
                    page_id=message.page_id,
                    continue_prior_auto_advance=message.keep_auto_advance,
                )
            case StartSelectionRequest():
                return StartSelectionEvent(
                    text=message.text,
                    page_id=message.page_id,
                    page_url=message.page_url,
                    continue_prior_auto_advance=message.keep_auto_advance,
                )
            case AdvanceRequest():
                return AdvanceEvent()
            case JumpRequest():
                return JumpEvent(index=message.index)
            case ResumeRequest():
                return ResumeEvent(index=message.index)
            case SetAutoAdvanceRequest():
                return SetAutoAdvanceEvent(enabled=message.enabled)
            case QueryStateRequest():
                return QueryStateEvent()
            case ClearAllRequest():
                return ClearAllEvent()
            case PageLoaded():
                return PageLoadedEvent(page_id=message.page_id, url=message.url)
            case _:
                raise ValueError(f"Unknown client message type: {type(message)}")

    async def _send_error(self, websocket: WebSocket, message: str) -> None:
        error = ErrorOutMessage(code=ErrorCode.INVALID_MESSAGE, message=message)
        await websocket.send_text(error.to_wire().model_dump_json())
