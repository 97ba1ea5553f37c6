"""Message bus module for decoupled channel-dispatcher communication."""

from censusbot.bus.events import InboundMessage, OutboundMessage
from censusbot.bus.queue import MessageBus

__all__ = ["MessageBus", "InboundMessage", "OutboundMessage"]
