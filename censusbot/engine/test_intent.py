import pytest

from censusbot.engine.intent import SelectRegion, ShowHelp, ShowMenu, Unrecognized, classify


@pytest.mark.parametrize("text", ["menu", "start", "MENU", " menu ", "Start\n"])
def test_menu_keywords_ignore_case_and_whitespace(text: str) -> None:
    assert classify(text) == ShowMenu()


def test_help_keyword() -> None:
    assert classify("  Help ") == ShowHelp()


def test_numbers_become_zero_based_selections() -> None:
    assert classify("1") == SelectRegion(0)
    assert classify(" 26 ") == SelectRegion(25)
    assert classify("0") == SelectRegion(-1)
    assert classify("007") == SelectRegion(6)


def test_numbers_are_not_range_checked() -> None:
    assert classify("99999999999999999999") == SelectRegion(99999999999999999998)


@pytest.mark.parametrize("text", ["", "hello", "-1", "1.5", "1 2", "menu please", "²"])
def test_everything_else_is_unrecognized(text: str) -> None:
    assert classify(text) == Unrecognized(text)


def test_unrecognized_keeps_raw_text() -> None:
    assert classify("  Habari  ") == Unrecognized("  Habari  ")
