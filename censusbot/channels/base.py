"""Base channel interface for chat platforms."""

from abc import ABC, abstractmethod
from typing import Any

from loguru import logger

from censusbot.bus.events import InboundMessage, OutboundMessage
from censusbot.bus.queue import MessageBus


class BaseChannel(ABC):
    """
    Abstract base class for chat channel implementations.

    Each channel (WhatsApp, ...) owns its network session and forwards
    inbound messages to the bus; replies come back through ``send``.
    """

    name: str = "base"

    def __init__(self, config: Any, bus: MessageBus):
        self.config = config
        self.bus = bus
        self._running = False

    @abstractmethod
    async def start(self) -> None:
        """Connect and listen for messages. Long-running until ``stop``."""

    @abstractmethod
    async def stop(self) -> None:
        """Stop the channel and release its resources."""

    @abstractmethod
    async def send(self, msg: OutboundMessage) -> None:
        """Deliver a message through this channel."""

    def is_allowed(self, sender_id: str) -> bool:
        """Check a sender against ``allow_from``; an empty list allows everyone."""
        allow_list = getattr(self.config, "allow_from", [])
        if not allow_list:
            return True
        if sender_id in allow_list:
            return True
        # Accept bare phone numbers for full JIDs (2557...@s.whatsapp.net)
        bare = sender_id.split("@", 1)[0]
        return bare in allow_list

    async def _handle_message(
        self,
        sender_id: str,
        chat_id: str,
        content: str,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        """Check permissions and forward a message to the bus."""
        if not self.is_allowed(sender_id):
            logger.warning(f"Access denied for sender {sender_id} on channel {self.name}")
            return

        await self.bus.publish_inbound(InboundMessage(
            channel=self.name,
            sender_id=sender_id,
            chat_id=chat_id,
            content=content,
            metadata=metadata or {},
        ))

    @property
    def is_running(self) -> bool:
        return self._running
