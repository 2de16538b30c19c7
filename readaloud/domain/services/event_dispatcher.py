"""Serializes inbound reader events onto the session state machine."""

import asyncio
import logging
from typing import Any, Optional

from ..entities.events import (
    AdvanceEvent,
    ClearAllEvent,
    InboundEvent,
    JumpEvent,
    PageLoadedEvent,
    PresentationClosedEvent,
    QueryStateEvent,
    ResumeEvent,
    SetAutoAdvanceEvent,
    StartPageEvent,
    StartSelectionEvent,
)
from ..entities.messages import ErrorOutMessage, SessionStateMessage
from ..entities.websocket_messages import ErrorCode
from ..errors import ReaderError
from ..interfaces.presentation_sink import PresentationSink
from .continuation_coordinator import ContinuationCoordinator
from .session_state_machine import SessionStateMachine

logger = logging.getLogger(__name__)


class SessionEventDispatcher:
    """
    The single consumer of inbound events.

    Events are processed one at a time, in arrival order, so no two
    transitions of the state machine interleave. Domain errors are turned
    into error messages for the player; anything else is logged and reported
    as an internal error.
    """

    def __init__(
        self,
        state_machine: SessionStateMachine,
        continuation: ContinuationCoordinator,
        presentation: PresentationSink,
    ):
        self.state_machine = state_machine
        self.continuation = continuation
        self.presentation = presentation

        self.inbound_queue: asyncio.Queue[tuple[InboundEvent, Optional[asyncio.Future]]] = asyncio.Queue()

        self._running = False
        self._task: Optional[asyncio.Task] = None

    @property
    def is_running(self) -> bool:
        return self._running

    async def start(self):
        """Start the event processing loop."""
        if self._running:
            logger.warning("Event dispatcher already running")
            return

        self._running = True
        self._task = asyncio.create_task(self._process_inbound_events())
        logger.info("Event dispatcher started")

    async def stop(self):
        """Stop the event processing loop."""
        if not self._running:
            return

        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        logger.info("Event dispatcher stopped")

    async def submit(self, event: InboundEvent) -> None:
        """Queue an event without waiting for it to be handled."""
        await self.inbound_queue.put((event, None))

    async def submit_and_wait(self, event: InboundEvent) -> Any:
        """Queue an event and wait for the result of handling it."""
        future = asyncio.get_running_loop().create_future()
        await self.inbound_queue.put((event, future))
        return await future

    async def _process_inbound_events(self):
        """Main event processing loop."""
        logger.info("Event processing started")

        try:
            while self._running:
                try:
                    event, future = await asyncio.wait_for(self.inbound_queue.get(), timeout=1.0)
                except asyncio.TimeoutError:
                    continue

                result = await self.handle_event(event)
                if future is not None and not future.done():
                    future.set_result(result)
        finally:
            logger.info("Event processing ended")

    async def handle_event(self, event: InboundEvent) -> Any:
        """Handle one event, reporting failures to the player.

        Returns:
            The handler's result, or None if it failed.
        """
        try:
            return await self._route(event)
        except ReaderError as e:
            logger.warning(f"{type(event).__name__} failed with {e.code.value}: {e.detail}")
            self.presentation.send(ErrorOutMessage(code=e.code, message=e.detail, reasoning=e.reasoning))
        except Exception as e:
            logger.error(f"Error processing event: {e}", exc_info=True)
            self.presentation.send(
                ErrorOutMessage(code=ErrorCode.INTERNAL_ERROR, message=f"Internal processing error: {str(e)}")
            )
        return None

    async def _route(self, event: InboundEvent) -> Any:
        """Route event to appropriate handler based on type."""
        sm = self.state_machine
        if isinstance(event, StartPageEvent):
            await sm.start_for_page(event.page_id, event.continue_prior_auto_advance)
        elif isinstance(event, StartSelectionEvent):
            await sm.start_for_selection(
                event.text,
                page_id=event.page_id,
                page_url=event.page_url,
                continue_prior_auto_advance=event.continue_prior_auto_advance,
            )
        elif isinstance(event, AdvanceEvent):
            await sm.advance()
        elif isinstance(event, JumpEvent):
            await sm.jump(event.index)
        elif isinstance(event, ResumeEvent):
            await sm.resume(event.index)
        elif isinstance(event, SetAutoAdvanceEvent):
            await sm.set_auto_advance(event.enabled)
        elif isinstance(event, QueryStateEvent):
            state = sm.query_state()
            self.presentation.send(SessionStateMessage(state=state))
            return state
        elif isinstance(event, ClearAllEvent):
            await sm.clear_all()
        elif isinstance(event, PageLoadedEvent):
            return await self.continuation.page_loaded(event.page_id, event.url)
        elif isinstance(event, PresentationClosedEvent):
            await sm.presentation_closed()
        else:
            logger.warning(f"Unknown event type: {type(event)}")
        return None
