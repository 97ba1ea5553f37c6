"""Keyword intent classification for the menu bot.

Every inbound text maps to exactly one intent. Classification is
stateless: the previous message in a conversation has no effect.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Union

MENU_KEYWORDS = frozenset({"start", "menu"})
HELP_KEYWORDS = frozenset({"help"})

_NUMBER_RE = re.compile(r"[0-9]+")


@dataclass(frozen=True, slots=True)
class ShowMenu:
    pass


@dataclass(frozen=True, slots=True)
class ShowHelp:
    pass


@dataclass(frozen=True, slots=True)
class SelectRegion:
    """Region picked by number; ``index`` is 0-based and not range-checked."""

    index: int


@dataclass(frozen=True, slots=True)
class Unrecognized:
    raw_text: str


Intent = Union[ShowMenu, ShowHelp, SelectRegion, Unrecognized]


def classify(raw_text: str) -> Intent:
    """Map raw message text to an intent. Never raises."""
    text = (raw_text or "").strip().lower()

    if text in MENU_KEYWORDS:
        return ShowMenu()
    if text in HELP_KEYWORDS:
        return ShowHelp()
    if _NUMBER_RE.fullmatch(text):
        try:
            number = int(text)
        except ValueError:
            return Unrecognized(raw_text)
        # Users count from 1
        return SelectRegion(number - 1)
    return Unrecognized(raw_text)
