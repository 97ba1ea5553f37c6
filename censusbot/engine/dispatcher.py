"""Dispatcher: turns each inbound message into exactly one reply."""

import asyncio

from loguru import logger

from censusbot.bus.events import InboundMessage, OutboundMessage
from censusbot.bus.queue import MessageBus
from censusbot.census.models import CensusDataset
from censusbot.engine.intent import classify
from censusbot.engine.responses import render


class Dispatcher:
    """
    Single worker that consumes inbound messages from the bus, classifies
    them, renders the reply against the dataset and publishes it back.

    The dataset is passed in once and only read; there is no per-conversation
    state, so every message is handled independently.
    """

    def __init__(self, bus: MessageBus, dataset: CensusDataset):
        self.bus = bus
        self.dataset = dataset
        self._running = False

    def handle(self, msg: InboundMessage) -> OutboundMessage | None:
        """Build the reply for one message, or None when it has no text body."""
        if not msg.content:
            return None

        logger.debug(f"Processing message: {msg.content.strip().lower()}")
        intent = classify(msg.content)
        return OutboundMessage(
            channel=msg.channel,
            chat_id=msg.chat_id,
            content=render(intent, self.dataset),
            reply_to=msg.metadata.get("message_id"),
        )

    async def process(self, msg: InboundMessage) -> None:
        response = self.handle(msg)
        if response is not None:
            await self.bus.publish_outbound(response)

    async def run(self) -> None:
        """Consume inbound messages until stopped."""
        self._running = True
        logger.info("Dispatcher started")

        while self._running:
            try:
                msg = await asyncio.wait_for(self.bus.consume_inbound(), timeout=1.0)
            except asyncio.TimeoutError:
                continue
            except asyncio.CancelledError:
                break

            try:
                await self.process(msg)
            except Exception as e:
                logger.error(f"Error processing message from {msg.session_key}: {e}")

        logger.info("Dispatcher stopped")

    def stop(self) -> None:
        self._running = False
