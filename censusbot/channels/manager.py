"""Channel manager for coordinating chat channels."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from loguru import logger

from censusbot.bus.queue import MessageBus
from censusbot.channels.base import BaseChannel
from censusbot.config.schema import Config

if TYPE_CHECKING:
    from censusbot.channels.pairing import QRPairingPresenter


class ChannelManager:
    """
    Manages chat channels and routes replies to them.

    Responsibilities:
    - Initialize enabled channels (WhatsApp, ...)
    - Start/stop channels
    - Deliver outbound messages; a failed send is logged, not retried
    """

    def __init__(
        self,
        config: Config,
        bus: MessageBus,
        pairing: QRPairingPresenter | None = None,
    ):
        self.config = config
        self.bus = bus
        self.pairing = pairing
        self.channels: dict[str, BaseChannel] = {}
        self._dispatch_task: asyncio.Task | None = None

        self._init_channels()

    def _init_channels(self) -> None:
        """Initialize channels based on config."""
        if self.config.channels.whatsapp.enabled:
            from censusbot.channels.whatsapp import WhatsAppChannel
            self.channels["whatsapp"] = WhatsAppChannel(
                self.config.channels.whatsapp, self.bus, pairing=self.pairing,
            )
            logger.info("WhatsApp channel enabled")

    def add_channel(self, channel: BaseChannel) -> None:
        self.channels[channel.name] = channel

    async def _start_channel(self, name: str, channel: BaseChannel) -> None:
        """Start a channel and log any exceptions."""
        try:
            await channel.start()
        except Exception as e:
            logger.error(f"Failed to start channel {name}: {e}")

    async def start_all(self) -> None:
        """Start all channels and the outbound dispatcher."""
        if not self.channels:
            logger.warning("No channels enabled")
            return

        self._dispatch_task = asyncio.create_task(self._dispatch_outbound())

        tasks = []
        for name, channel in self.channels.items():
            logger.info(f"Starting {name} channel...")
            tasks.append(asyncio.create_task(self._start_channel(name, channel)))

        # Returns once every channel has stopped
        await asyncio.gather(*tasks, return_exceptions=True)

    async def stop_all(self) -> None:
        """Stop all channels and the dispatcher."""
        logger.info("Stopping all channels...")

        if self._dispatch_task:
            self._dispatch_task.cancel()
            try:
                await self._dispatch_task
            except asyncio.CancelledError:
                pass
            self._dispatch_task = None

        for name, channel in self.channels.items():
            try:
                await channel.stop()
                logger.info(f"Stopped {name} channel")
            except Exception as e:
                logger.error(f"Error stopping {name}: {e}")

    async def _dispatch_outbound(self) -> None:
        """Deliver outbound messages to the appropriate channel."""
        logger.info("Outbound dispatcher started")

        while True:
            try:
                msg = await asyncio.wait_for(self.bus.consume_outbound(), timeout=1.0)
            except asyncio.TimeoutError:
                continue

            channel = self.channels.get(msg.channel)
            if channel is None:
                logger.warning(f"Unknown channel: {msg.channel}")
                continue

            try:
                await channel.send(msg)
            except Exception as e:
                logger.error(f"Error sending to {msg.channel}:{msg.chat_id}: {e}")

    def get_channel(self, name: str) -> BaseChannel | None:
        return self.channels.get(name)

    def get_status(self) -> dict[str, dict[str, bool]]:
        return {
            name: {"enabled": True, "running": channel.is_running}
            for name, channel in self.channels.items()
        }

    @property
    def enabled_channels(self) -> list[str]:
        return list(self.channels.keys())
