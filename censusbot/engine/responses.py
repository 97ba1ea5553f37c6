"""Reply rendering for the census menu bot.

``render`` is a pure function of (intent, dataset): same inputs, same text.
Every branch yields a displayable string; bad data degrades to placeholders.
"""

from __future__ import annotations

from censusbot.census.models import CensusDataset, Region
from censusbot.engine.intent import (
    Intent,
    SelectRegion,
    ShowHelp,
    ShowMenu,
    classify,
)

BOT_TITLE = "Tanzania Census 2022 Bot"
CENSUS_YEAR = 2022

MENU_TEMPLATE = (
    f"Welcome to the {BOT_TITLE}!\n\n"
    "Please select a region by number:\n"
    "{region_list}\n\n"
    "Reply with a number to get details, 'menu' to see this again, or 'help' for instructions."
)

NO_REGIONS_TEXT = "Error: No regions found in census data. Please contact the administrator."

HELP_TEXT = (
    f"Welcome to the {BOT_TITLE}!\n"
    '- Type "menu" to see available regions.\n'
    "- Reply with a number to view region data.\n"
    '- Type "help" for this message.'
)

REGION_TEMPLATE = (
    f"{{name}} ({CENSUS_YEAR} Census Data):\n"
    "- Population: {population}\n"
    "- Households: {households}\n"
    "- Buildings: {buildings}\n\n"
    "Reply with another number, 'menu' to return, or 'help' for instructions."
)

INVALID_REGION_TEXT = (
    'Invalid region number. Reply with a valid number, "menu" to see the list, '
    'or "help" for instructions.'
)

FALLBACK_TEXT = (
    'Please reply with a number to select a region, "menu" to see the list, '
    'or "help" for instructions.'
)


def render_menu(dataset: CensusDataset) -> str:
    if dataset.is_empty:
        return NO_REGIONS_TEXT
    region_list = "\n".join(
        f"{number}. {region.name}" for number, region in enumerate(dataset.regions, start=1)
    )
    return MENU_TEMPLATE.format(region_list=region_list)


def render_region(region: Region) -> str:
    return REGION_TEMPLATE.format(
        name=region.name,
        population=region.population.render(),
        households=region.households.render(),
        buildings=region.buildings.render(),
    )


def render(intent: Intent, dataset: CensusDataset) -> str:
    """Produce the reply text for one classified message."""
    if isinstance(intent, ShowMenu):
        return render_menu(dataset)
    if isinstance(intent, ShowHelp):
        return HELP_TEXT
    if isinstance(intent, SelectRegion):
        region = dataset.get(intent.index)
        if region is None:
            return INVALID_REGION_TEXT
        return render_region(region)
    return FALLBACK_TEXT


def respond(text: str, dataset: CensusDataset) -> str:
    """Classify and render in one step."""
    return render(classify(text), dataset)
