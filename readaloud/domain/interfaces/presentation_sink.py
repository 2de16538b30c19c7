"""Presentation sink interface."""

from typing import Protocol, runtime_checkable

from ..entities.messages import OutboundMessage


@runtime_checkable
class PresentationSink(Protocol):
    """Protocol for the optional player surface.

    Messages sent while no player is attached are dropped, not queued.
    """

    @property
    def is_attached(self) -> bool:
        ...

    def send(self, message: OutboundMessage) -> bool:
        """Deliver a message to the attached player.

        Returns:
            bool: True if a player was attached and received the message.
        """
        ...
