"""WhatsApp channel implementation using a WhatsApp Web bridge.

The bridge (a Baileys process) owns the WhatsApp session, auth state and
protocol-level reconnects. This side talks to it over a websocket with
small JSON frames:

    bridge → us   {"type": "message", "id", "sender", "chat", "content", "fromMe", "isGroup", "timestamp"}
                  {"type": "qr", "qr": "<pairing payload>"}
                  {"type": "status", "status": "open" | "close" | "logged_out", "statusCode": 401}
                  {"type": "error", "error": "..."}
    us → bridge   {"type": "auth", "token": "..."}      (first frame, when configured)
                  {"type": "send", "to": "<jid>", "text": "..."}
"""

from __future__ import annotations

import asyncio
import json
from typing import TYPE_CHECKING, Any

import websockets
from loguru import logger

from censusbot.bus.events import OutboundMessage
from censusbot.bus.queue import MessageBus
from censusbot.channels.base import BaseChannel
from censusbot.config.schema import WhatsAppConfig

if TYPE_CHECKING:
    from censusbot.channels.pairing import QRPairingPresenter

# Baileys DisconnectReason.loggedOut
LOGGED_OUT_STATUS_CODE = 401


def should_reconnect(status_code: Any) -> bool:
    """A closed session is resumed unless WhatsApp reports it was logged out."""
    return status_code != LOGGED_OUT_STATUS_CODE


class WhatsAppChannel(BaseChannel):
    """
    WhatsApp channel connected to a bridge over websocket.

    Socket drops are retried with exponential backoff. A logged-out
    session stops the channel for good: the device has to be linked
    again with ``censusbot login``.
    """

    name = "whatsapp"

    def __init__(
        self,
        config: WhatsAppConfig,
        bus: MessageBus,
        pairing: QRPairingPresenter | None = None,
    ):
        super().__init__(config, bus)
        self.config: WhatsAppConfig = config
        self.pairing = pairing
        self._ws = None
        self._connected = False
        self._logged_out = False
        self._opened = asyncio.Event()

    async def start(self) -> None:
        """Connect to the bridge and listen until stopped or logged out."""
        self._running = True
        delay = self.config.reconnect_delay

        logger.info(f"Connecting to WhatsApp bridge at {self.config.bridge_url}...")

        while self._running:
            try:
                async with websockets.connect(self.config.bridge_url) as ws:
                    self._ws = ws
                    self._connected = True
                    delay = self.config.reconnect_delay

                    if self.config.bridge_token:
                        await ws.send(json.dumps({"type": "auth", "token": self.config.bridge_token}))
                    logger.info("Connected to WhatsApp bridge")

                    async for raw in ws:
                        await self._handle_bridge_message(raw)
                        if self._logged_out:
                            break

                logger.info("WhatsApp bridge connection closed")
            except asyncio.CancelledError:
                break
            except Exception as e:
                if not self._running:
                    break
                logger.warning(f"WhatsApp bridge connection error: {e}")
            finally:
                self._connected = False
                self._ws = None
                self._opened.clear()

            if self._logged_out:
                logger.error("WhatsApp session logged out, not reconnecting. Run `censusbot login` to link again.")
                self._running = False
                break

            if self._running:
                logger.info(f"Reconnecting to WhatsApp bridge in {delay}s...")
                await asyncio.sleep(delay)
                delay = min(delay * 2, self.config.reconnect_max_delay)

        logger.info("WhatsApp channel stopped")

    async def stop(self) -> None:
        """Stop the channel and close the bridge socket."""
        self._running = False
        if self._ws:
            await self._ws.close()
            self._ws = None

    async def send(self, msg: OutboundMessage) -> None:
        """Send one text message through the bridge."""
        if not self._ws:
            raise ConnectionError("WhatsApp bridge not connected")

        payload = {"type": "send", "to": msg.chat_id, "text": msg.content}
        await self._ws.send(json.dumps(payload, ensure_ascii=False))

    async def wait_until_open(self, timeout: float) -> bool:
        """Wait for the bridge to report an open WhatsApp session."""
        try:
            await asyncio.wait_for(self._opened.wait(), timeout=timeout)
        except asyncio.TimeoutError:
            return False
        return True

    @property
    def is_connected(self) -> bool:
        return self._connected

    @property
    def is_logged_out(self) -> bool:
        return self._logged_out

    # ------------------------------------------------------------------
    # Bridge frames
    # ------------------------------------------------------------------

    async def _handle_bridge_message(self, raw: str | bytes) -> None:
        """Handle one frame from the bridge."""
        try:
            data = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError):
            logger.warning(f"Invalid JSON from bridge: {raw[:100]!r}")
            return
        if not isinstance(data, dict):
            return

        msg_type = data.get("type")

        if msg_type == "message":
            await self._on_message(data)
        elif msg_type == "status":
            self._on_status(data)
        elif msg_type == "qr":
            await self._on_qr(data)
        elif msg_type == "error":
            logger.error(f"WhatsApp bridge error: {data.get('error')}")
        else:
            logger.debug(f"Ignoring bridge frame of type {msg_type!r}")

    async def _on_message(self, data: dict[str, Any]) -> None:
        # Our own replies come back through the bridge too
        if data.get("fromMe"):
            return

        sender = str(data.get("sender") or "")
        chat_id = str(data.get("chat") or sender)
        if not chat_id:
            logger.warning("Bridge message without a sender, dropping")
            return

        content = data.get("content")
        if not isinstance(content, str):
            content = ""

        logger.debug(f"Received message from {chat_id}: {content[:50]}")

        await self._handle_message(
            sender_id=sender or chat_id,
            chat_id=chat_id,
            content=content,
            metadata={
                "message_id": data.get("id"),
                "timestamp": data.get("timestamp"),
                "is_group": bool(data.get("isGroup")),
            },
        )

    def _on_status(self, data: dict[str, Any]) -> None:
        status = data.get("status")
        status_code = data.get("statusCode")

        if status == "open":
            self._opened.set()
            logger.info("WhatsApp connection opened successfully")
        elif status in ("close", "logged_out"):
            self._opened.clear()
            if status == "logged_out" or not should_reconnect(status_code):
                self._logged_out = True
            logger.info(
                f"WhatsApp connection closed (status code: {status_code}), "
                f"reconnecting: {not self._logged_out}"
            )
        else:
            logger.debug(f"WhatsApp status: {status}")

    async def _on_qr(self, data: dict[str, Any]) -> None:
        payload = data.get("qr")
        if not payload:
            return
        if self.pairing is None:
            logger.info("Scan the QR code shown by the WhatsApp bridge to link this device")
            return
        await asyncio.to_thread(self.pairing.present, str(payload))
