"""Attachable outbound channel to the player surface."""

import asyncio
import logging
from typing import Optional

from ..domain.entities.messages import OutboundMessage
from ..domain.interfaces.presentation_sink import PresentationSink

logger = logging.getLogger(__name__)


class PresentationChannel(PresentationSink):
    """
    Outbound queue of the currently attached player, if any.

    Only one player is attached at a time; attaching a new one replaces the
    previous queue. Messages sent while nothing is attached are dropped.
    """

    def __init__(self):
        self._queue: Optional[asyncio.Queue[OutboundMessage]] = None

    @property
    def is_attached(self) -> bool:
        return self._queue is not None

    def attach(self) -> asyncio.Queue[OutboundMessage]:
        if self._queue is not None:
            logger.info("Replacing the attached player")
        self._queue = asyncio.Queue()
        return self._queue

    def detach(self, queue: asyncio.Queue[OutboundMessage]) -> bool:
        """Detach ``queue`` if it is still the attached one.

        Returns:
            True if ``queue`` was the attached player, False if it had already been replaced.
        """
        if self._queue is not queue:
            logger.info("Replaced player disconnected")
            return False
        self._queue = None
        logger.info("Player detached")
        return True

    def send(self, message: OutboundMessage) -> bool:
        if self._queue is None:
            logger.debug(f"No player attached, dropping {type(message).__name__}")
            return False
        self._queue.put_nowait(message)
        return True
