import asyncio

from censusbot.bus.events import OutboundMessage
from censusbot.bus.queue import MessageBus
from censusbot.channels.base import BaseChannel
from censusbot.channels.manager import ChannelManager
from censusbot.config.schema import Config


class MemoryChannel(BaseChannel):
    name = "memory"

    def __init__(self, bus: MessageBus, fail: bool = False) -> None:
        super().__init__(None, bus)
        self.fail = fail
        self.sent: list[OutboundMessage] = []
        self._stop = asyncio.Event()

    async def start(self) -> None:
        self._running = True
        await self._stop.wait()
        self._running = False

    async def stop(self) -> None:
        self._stop.set()

    async def send(self, msg: OutboundMessage) -> None:
        if self.fail:
            raise ConnectionError("down")
        self.sent.append(msg)


def _config(whatsapp: bool) -> Config:
    config = Config()
    config.channels.whatsapp.enabled = whatsapp
    return config


def test_whatsapp_enabled_by_config() -> None:
    bus = MessageBus()

    assert ChannelManager(_config(True), bus).enabled_channels == ["whatsapp"]
    assert ChannelManager(_config(False), bus).enabled_channels == []


def test_outbound_messages_reach_their_channel_and_failures_are_not_fatal() -> None:
    async def scenario():
        bus = MessageBus()
        manager = ChannelManager(_config(False), bus)
        good = MemoryChannel(bus)
        manager.add_channel(good)
        run = asyncio.create_task(manager.start_all())

        await bus.publish_outbound(OutboundMessage(channel="nowhere", chat_id="x", content="lost"))
        good.fail = True
        await bus.publish_outbound(OutboundMessage(channel="memory", chat_id="c1", content="dropped"))
        await asyncio.sleep(0.05)
        good.fail = False
        await bus.publish_outbound(OutboundMessage(channel="memory", chat_id="c1", content="hello"))
        for _ in range(100):
            if good.sent:
                break
            await asyncio.sleep(0.01)
        status = manager.get_status()

        await manager.stop_all()
        await asyncio.wait_for(run, timeout=2.0)
        return good.sent, status

    sent, status = asyncio.run(scenario())

    assert [m.content for m in sent] == ["hello"]
    assert status == {"memory": {"enabled": True, "running": True}}
