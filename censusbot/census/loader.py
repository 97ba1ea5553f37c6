"""Dataset loading.

The census file is read once at startup. The document root is an object
holding a namespaced section (``tanzania_census_2022`` by default) whose
``regions`` list is the menu.
"""

import json
from pathlib import Path
from typing import Any

from loguru import logger

from censusbot.census.models import CensusDataset

DEFAULT_ROOT_KEY = "tanzania_census_2022"


class DatasetLoadError(Exception):
    """The census file could not be read or has no census section."""


def parse_dataset(document: Any, root_key: str = DEFAULT_ROOT_KEY) -> CensusDataset:
    """Build a dataset from an already-decoded JSON document."""
    if not isinstance(document, dict):
        raise DatasetLoadError("census document root must be a JSON object")

    section = document.get(root_key)
    if not isinstance(section, dict):
        raise DatasetLoadError(f"census section '{root_key}' not found")

    raw_regions = section.get("regions")
    if not isinstance(raw_regions, list):
        logger.warning(f"Census section '{root_key}' has no regions list")

    return CensusDataset.from_raw_regions(raw_regions)


def load_dataset(path: Path | str, root_key: str = DEFAULT_ROOT_KEY) -> CensusDataset:
    """
    Read and parse the census file.

    Raises:
        DatasetLoadError: the file is missing, unreadable, not JSON, or
            lacks the census section.
    """
    path = Path(path)
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise DatasetLoadError(f"Failed to load {path}: {e.strerror or e}") from e
    except UnicodeDecodeError as e:
        raise DatasetLoadError(f"Failed to load {path}: not UTF-8 ({e.reason})") from e

    try:
        document = json.loads(raw)
    except json.JSONDecodeError as e:
        raise DatasetLoadError(f"Failed to load {path}: {e}") from e

    dataset = parse_dataset(document, root_key)
    logger.info(f"Census data loaded, regions: {len(dataset)}")
    return dataset
