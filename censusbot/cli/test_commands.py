import json
import sys
from pathlib import Path

import pytest
from loguru import logger
from typer.testing import CliRunner

from censusbot import __version__
from censusbot.cli.commands import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    import os

    for key in list(os.environ):
        if key.startswith("CENSUSBOT_"):
            monkeypatch.delenv(key)


@pytest.fixture(autouse=True)
def _restore_logging():
    yield
    logger.remove()
    logger.add(sys.stderr)
    logger.enable("censusbot")


@pytest.fixture
def census_file(tmp_path: Path) -> Path:
    path = tmp_path / "census.json"
    path.write_text(json.dumps({
        "tanzania_census_2022": {
            "regions": [
                {"region": "Dodoma", "population": {"total": 100, "male": 48, "female": 52}, "households": 30},
                {"region": "Arusha", "population": 2356255},
            ]
        }
    }), encoding="utf-8")
    return path


def test_version() -> None:
    result = runner.invoke(app, ["--version"])

    assert result.exit_code == 0
    assert __version__ in result.output


def test_chat_single_message_shows_region(tmp_path: Path, census_file: Path) -> None:
    result = runner.invoke(app, [
        "chat", "-m", "1", "--dataset", str(census_file), "--config", str(tmp_path / "none.json"),
    ])

    assert result.exit_code == 0
    assert "Dodoma (2022 Census Data):" in result.output
    assert "Total: 100, Male: 48, Female: 52" in result.output


def test_chat_menu_lists_regions(tmp_path: Path, census_file: Path) -> None:
    result = runner.invoke(app, [
        "chat", "-m", "MENU", "--dataset", str(census_file), "--config", str(tmp_path / "none.json"),
    ])

    assert result.exit_code == 0
    assert "1. Dodoma" in result.output
    assert "2. Arusha" in result.output


def test_chat_with_missing_dataset_exits_nonzero(tmp_path: Path) -> None:
    result = runner.invoke(app, [
        "chat", "-m", "menu", "--dataset", str(tmp_path / "missing.json"),
        "--config", str(tmp_path / "none.json"),
    ])

    assert result.exit_code == 1


def test_run_aborts_before_connecting_when_dataset_is_broken(tmp_path: Path) -> None:
    broken = tmp_path / "census.json"
    broken.write_text("{", encoding="utf-8")

    result = runner.invoke(app, ["run", "--dataset", str(broken), "--config", str(tmp_path / "none.json")])

    assert result.exit_code == 1


def test_run_without_channels_exits_nonzero(
    tmp_path: Path, census_file: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("CENSUSBOT_WHATSAPP_ENABLED", "false")

    result = runner.invoke(app, ["run", "--dataset", str(census_file), "--config", str(tmp_path / "none.json")])

    assert result.exit_code == 1


def test_status_reports_region_count(
    tmp_path: Path, census_file: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("CENSUSBOT_DATASET_PATH", str(census_file))

    result = runner.invoke(app, ["status", "--config", str(tmp_path / "none.json")])

    assert result.exit_code == 0
    assert "Regions: 2" in result.output
    assert "WhatsApp" in result.output


def test_status_flags_badly_encoded_dataset(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    garbled = tmp_path / "census.json"
    garbled.write_bytes(b'{"tanzania_census_2022": {"regions": [{"name": "\xff"}]}}')
    monkeypatch.setenv("CENSUSBOT_DATASET_PATH", str(garbled))

    result = runner.invoke(app, ["status", "--config", str(tmp_path / "none.json")])

    assert result.exit_code == 0
    assert "✗" in result.output
    assert "Regions:" not in result.output


def test_init_writes_camel_case_config(tmp_path: Path) -> None:
    path = tmp_path / "config.json"

    result = runner.invoke(app, ["init", "--config", str(path)])

    assert result.exit_code == 0
    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["channels"]["whatsapp"]["bridgeUrl"] == "ws://localhost:3001"
    assert data["dataset"]["rootKey"] == "tanzania_census_2022"


def test_init_keeps_existing_config_unless_confirmed(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text('{"dataset": {"path": "mine.json"}}', encoding="utf-8")

    result = runner.invoke(app, ["init", "--config", str(path)], input="n\n")

    assert result.exit_code == 0
    assert json.loads(path.read_text(encoding="utf-8")) == {"dataset": {"path": "mine.json"}}
