"""Chat channels module with plugin architecture."""

from censusbot.channels.base import BaseChannel
from censusbot.channels.manager import ChannelManager

__all__ = ["BaseChannel", "ChannelManager"]
