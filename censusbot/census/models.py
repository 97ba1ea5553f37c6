"""Immutable census records.

Field shapes vary between dataset revisions: population may be a
``{total, male, female}`` breakdown or a bare number, buildings may be an
object. Each shape is resolved once when a region is built, so the response
engine never inspects raw JSON.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Union

NOT_AVAILABLE = "N/A"
UNKNOWN_REGION = "Unknown Region"


def _is_absent(value: Any) -> bool:
    return value is None or value == ""


def scalar_text(value: Any) -> str:
    """Render a JSON scalar the way it reads in the dataset file."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def compact_json(value: Any) -> str:
    """Serialize an object/array value without whitespace, keeping key order."""
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


def _text_or_none(value: Any) -> str | None:
    if _is_absent(value):
        return None
    if isinstance(value, (dict, list)):
        return compact_json(value)
    return scalar_text(value)


# ---------------------------------------------------------------------------
# Population
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class StructuredPopulation:
    """Population broken down by sex. Missing parts render as N/A."""

    total: str | None = None
    male: str | None = None
    female: str | None = None

    def render(self) -> str:
        return (
            f"Total: {self.total or NOT_AVAILABLE}, "
            f"Male: {self.male or NOT_AVAILABLE}, "
            f"Female: {self.female or NOT_AVAILABLE}"
        )


@dataclass(frozen=True, slots=True)
class ScalarPopulation:
    value: str

    def render(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class MissingPopulation:
    def render(self) -> str:
        return NOT_AVAILABLE


Population = Union[StructuredPopulation, ScalarPopulation, MissingPopulation]


def parse_population(raw: Any) -> Population:
    if _is_absent(raw):
        return MissingPopulation()
    if isinstance(raw, list):
        # A JSON array is an object with no total/male/female keys
        return StructuredPopulation(None, None, None)
    if isinstance(raw, dict):
        return StructuredPopulation(
            total=_text_or_none(raw.get("total")),
            male=_text_or_none(raw.get("male")),
            female=_text_or_none(raw.get("female")),
        )
    return ScalarPopulation(_text_or_none(raw) or NOT_AVAILABLE)


# ---------------------------------------------------------------------------
# Households / buildings
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class FieldValue:
    """A scalar or object-valued field; ``text`` is None when absent."""

    text: str | None = None
    is_object: bool = False

    @classmethod
    def from_raw(cls, raw: Any) -> FieldValue:
        if _is_absent(raw):
            return cls()
        return cls(text=_text_or_none(raw), is_object=isinstance(raw, (dict, list)))

    def render(self) -> str:
        return NOT_AVAILABLE if self.text is None else self.text


# ---------------------------------------------------------------------------
# Region / dataset
# ---------------------------------------------------------------------------


def _resolve_name(raw: dict[str, Any]) -> str:
    for key in ("region", "name"):
        name = _text_or_none(raw.get(key))
        if name is not None:
            return name
    return UNKNOWN_REGION


@dataclass(frozen=True, slots=True)
class Region:
    """One administrative region's census figures."""

    name: str = UNKNOWN_REGION
    population: Population = MissingPopulation()
    households: FieldValue = FieldValue()
    buildings: FieldValue = FieldValue()

    @classmethod
    def from_raw(cls, raw: Any) -> Region:
        """Build a region from a dataset entry.

        Never raises: an entry that is not an object becomes a region whose
        fields are all missing, so it still shows up in the menu.
        """
        if not isinstance(raw, dict):
            raw = {}
        return cls(
            name=_resolve_name(raw),
            population=parse_population(raw.get("population")),
            households=FieldValue.from_raw(raw.get("households")),
            buildings=FieldValue.from_raw(raw.get("buildings")),
        )


@dataclass(frozen=True, slots=True)
class CensusDataset:
    """Ordered, read-only collection of regions."""

    regions: tuple[Region, ...] = ()

    @classmethod
    def from_raw_regions(cls, raw: Any) -> CensusDataset:
        if not isinstance(raw, list):
            return cls()
        return cls(regions=tuple(Region.from_raw(item) for item in raw))

    def __len__(self) -> int:
        return len(self.regions)

    @property
    def is_empty(self) -> bool:
        return not self.regions

    def get(self, index: int) -> Region | None:
        """Return the region at a 0-based index, or None when out of range."""
        if 0 <= index < len(self.regions):
            return self.regions[index]
        return None
