from __future__ import annotations

from datetime import date
from pathlib import Path

import pytest

from rollfile.core.errors import ConfigurationError
from rollfile.utils.paths import level_label, parse_path_template


def test_render_and_match_with_extension(tmp_path: Path) -> None:
    template = parse_path_template(tmp_path / "app-{Date}.log")
    assert template.directory == tmp_path
    assert not template.level_partitioned

    assert template.render(date(2023, 1, 2)) == "app-20230102.log"
    assert template.render(date(2023, 1, 2), 3) == "app-20230102_003.log"

    parsed = template.match("app-20230102_003.log")
    assert parsed is not None
    assert parsed.date == date(2023, 1, 2)
    assert parsed.sequence == 3
    assert parsed.level is None
    assert template.match("app-20230102.log").sequence == 0


def test_level_template_round_trips() -> None:
    template = parse_path_template("logs/{Date}-{Level}.txt")
    assert template.level_partitioned
    assert template.directory == Path("logs")

    name = template.render(date(2024, 12, 31), 1, "WARNING")
    assert name == "20241231-WARNING_001.txt"
    parsed = template.match(name)
    assert parsed == (date(2024, 12, 31), "WARNING", 1)

    with pytest.raises(ValueError):
        template.render(date(2024, 12, 31))


def test_sequence_goes_last_without_extension() -> None:
    template = parse_path_template("audit.{Date}")
    assert template.render(date(2023, 12, 31), 12) == "audit.20231231_012"
    assert template.match("audit.20231231_012").sequence == 12


def test_bare_filename_uses_current_directory() -> None:
    template = parse_path_template("app-{Date}.log")
    assert template.directory == Path(".")


@pytest.mark.parametrize(
    "pattern",
    [
        "logs/app.log",
        "logs/app-{Date}-{Date}.log",
        "logs/app-{Date}-{Host}.log",
        "logs/{Level}-{Level}-{Date}.log",
        "logs/{Date}/app-{Date}.log",
        "logs/app-{Date}}.log",
        "",
    ],
)
def test_malformed_templates_are_rejected(pattern: str) -> None:
    with pytest.raises(ConfigurationError):
        parse_path_template(pattern)


@pytest.mark.parametrize(
    "filename",
    ["other.log", "app-2023010.log", "app-20231340.log", "app-20230102_x.log", "app-20230102.log.gz"],
)
def test_foreign_names_do_not_match(filename: str) -> None:
    template = parse_path_template("app-{Date}.log")
    assert template.match(filename) is None


@pytest.mark.parametrize(
    ("levelname", "label"),
    [("Level 5", "Level-5"), ("TRACE_1", "TRACE-1"), ("SUCCESS2", "SUCCESS2"), ("INFO", "INFO")],
)
def test_custom_level_names_round_trip(levelname: str, label: str) -> None:
    template = parse_path_template("logs/app-{Level}-{Date}.log")

    name = template.render(date(2024, 3, 10), 2, levelname)
    assert name == f"app-{label}-20240310_002.log"
    assert template.match(name) == (date(2024, 3, 10), label, 2)
    assert level_label(label) == label
