import json
from pathlib import Path

import pytest

from censusbot.census.loader import DatasetLoadError, load_dataset, parse_dataset
from censusbot.census.models import (
    MissingPopulation,
    ScalarPopulation,
    StructuredPopulation,
    UNKNOWN_REGION,
)


def _write(tmp_path: Path, document: object) -> Path:
    path = tmp_path / "census.json"
    path.write_text(json.dumps(document), encoding="utf-8")
    return path


def test_load_dataset_reads_namespaced_regions(tmp_path: Path) -> None:
    path = _write(tmp_path, {
        "tanzania_census_2022": {
            "regions": [
                {"region": "Dodoma", "population": {"total": 100, "male": 48, "female": 52}, "households": 30},
                {"name": "Arusha", "population": 2356255},
            ]
        }
    })

    dataset = load_dataset(path)

    assert len(dataset) == 2
    assert dataset.regions[0].name == "Dodoma"
    assert isinstance(dataset.regions[0].population, StructuredPopulation)
    assert dataset.regions[1].name == "Arusha"
    assert dataset.regions[1].population == ScalarPopulation("2356255")


def test_load_dataset_missing_file_is_fatal(tmp_path: Path) -> None:
    with pytest.raises(DatasetLoadError):
        load_dataset(tmp_path / "nope.json")


def test_load_dataset_invalid_json_is_fatal(tmp_path: Path) -> None:
    path = tmp_path / "census.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(DatasetLoadError):
        load_dataset(path)


def test_load_dataset_non_utf8_file_is_fatal(tmp_path: Path) -> None:
    path = tmp_path / "census.json"
    path.write_bytes(b'{"tanzania_census_2022": {"regions": [{"name": "\xff"}]}}')

    with pytest.raises(DatasetLoadError, match="not UTF-8"):
        load_dataset(path)


def test_parse_dataset_requires_census_section() -> None:
    with pytest.raises(DatasetLoadError):
        parse_dataset({"other": {}})
    with pytest.raises(DatasetLoadError):
        parse_dataset(["not", "an", "object"])


def test_parse_dataset_missing_regions_is_empty_not_fatal() -> None:
    assert parse_dataset({"tanzania_census_2022": {}}).is_empty
    assert parse_dataset({"tanzania_census_2022": {"regions": "oops"}}).is_empty


def test_parse_dataset_honours_custom_root_key() -> None:
    dataset = parse_dataset({"kenya": {"regions": [{"name": "Nairobi"}]}}, root_key="kenya")

    assert [r.name for r in dataset.regions] == ["Nairobi"]


def test_malformed_entries_degrade_instead_of_dropping() -> None:
    dataset = parse_dataset({"tanzania_census_2022": {"regions": [42, {"population": None}]}})

    assert len(dataset) == 2
    assert dataset.regions[0].name == UNKNOWN_REGION
    assert isinstance(dataset.regions[1].population, MissingPopulation)
    assert dataset.regions[1].households.render() == "N/A"


def test_region_name_falls_back_from_region_to_name() -> None:
    dataset = parse_dataset({"tanzania_census_2022": {"regions": [
        {"region": "", "name": "Mwanza"},
        {"region": "Kigoma", "name": "ignored"},
    ]}})

    assert [r.name for r in dataset.regions] == ["Mwanza", "Kigoma"]


def test_field_values_render_scalars_and_objects() -> None:
    dataset = parse_dataset({"tanzania_census_2022": {"regions": [{
        "region": "Mbeya",
        "population": {"total": 2343754.0, "male": None},
        "households": 0,
        "buildings": {"residential": 10, "other": 2},
    }]}})
    region = dataset.regions[0]

    assert region.population.render() == "Total: 2343754, Male: N/A, Female: N/A"
    assert region.households.render() == "0"
    assert region.buildings.is_object
    assert region.buildings.render() == '{"residential":10,"other":2}'


def test_list_population_renders_as_empty_breakdown() -> None:
    dataset = parse_dataset({"tanzania_census_2022": {"regions": [{"name": "Lindi", "population": [1, 2]}]}})
    population = dataset.regions[0].population

    assert population == StructuredPopulation()
    assert population.render() == "Total: N/A, Male: N/A, Female: N/A"


def test_dataset_get_rejects_out_of_range_indexes() -> None:
    dataset = parse_dataset({"tanzania_census_2022": {"regions": [{"name": "Tanga"}]}})

    assert dataset.get(0).name == "Tanga"
    assert dataset.get(1) is None
    assert dataset.get(-1) is None
