"""Census dataset model and loader."""

from censusbot.census.loader import DatasetLoadError, load_dataset, parse_dataset
from censusbot.census.models import CensusDataset, Region

__all__ = ["CensusDataset", "Region", "DatasetLoadError", "load_dataset", "parse_dataset"]
