"""Menu engine: intent classification, reply rendering and dispatch."""

from censusbot.engine.dispatcher import Dispatcher
from censusbot.engine.intent import Intent, SelectRegion, ShowHelp, ShowMenu, Unrecognized, classify
from censusbot.engine.responses import render, respond

__all__ = [
    "Dispatcher",
    "Intent",
    "SelectRegion",
    "ShowHelp",
    "ShowMenu",
    "Unrecognized",
    "classify",
    "render",
    "respond",
]
