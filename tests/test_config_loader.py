from __future__ import annotations

from datetime import timedelta
from pathlib import Path

import pytest

from rollfile.config import loader
from rollfile.core.errors import ConfigurationError
from rollfile.core.validation import validate_configuration


@pytest.fixture
def isolated(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    user_dir = tmp_path / "user"
    user_dir.mkdir()
    monkeypatch.setattr(loader, "user_config_dir", lambda _: str(user_dir))
    project_dir = tmp_path / "project"
    project_dir.mkdir()
    monkeypatch.chdir(project_dir)
    for key in list(loader.os.environ):
        if key.startswith("ROLLFILE"):
            monkeypatch.delenv(key)
    return tmp_path


def test_configuration_precedence(isolated: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    user_dir = isolated / "user"
    project_dir = isolated / "project"
    (user_dir / "rollfile.toml").write_text("""[sink]\npath_template = \"user/app-{Date}.log\"\n""")
    (project_dir / "rollfile.toml").write_text("""[sink]\npath_template = \"local/app-{Date}.log\"\n""")
    (project_dir / "pyproject.toml").write_text(
        """[tool.rollfile.sink]\npath_template = \"pyproject/app-{Date}.log\"\n"""
    )
    explicit = isolated / "explicit.yaml"
    explicit.write_text("sink:\n  path_template: explicit/app-{Date}.log\n")
    monkeypatch.setenv("ROLLFILE_CONFIG", str(explicit))
    monkeypatch.setenv("ROLLFILE__SINK__PATH_TEMPLATE", "env/app-{Date}.log")

    config = loader.load_configuration({"sink": {"path_template": "override/app-{Date}.log"}})
    assert config.sink.path_template == "override/app-{Date}.log"

    config = loader.load_configuration({})
    assert config.sink.path_template == "env/app-{Date}.log"

    monkeypatch.delenv("ROLLFILE__SINK__PATH_TEMPLATE")
    config = loader.load_configuration({})
    assert config.sink.path_template == "explicit/app-{Date}.log"

    monkeypatch.delenv("ROLLFILE_CONFIG")
    config = loader.load_configuration({})
    assert config.sink.path_template == "pyproject/app-{Date}.log"

    (project_dir / "pyproject.toml").unlink()
    config = loader.load_configuration({})
    assert config.sink.path_template == "local/app-{Date}.log"

    (project_dir / "rollfile.toml").unlink()
    config = loader.load_configuration({})
    assert config.sink.path_template == "user/app-{Date}.log"


def test_defaults(isolated: Path) -> None:
    config = loader.load_configuration({})

    assert config.sink.file_size_limit_bytes == 1024 ** 3
    assert config.sink.encoding == "utf-8"
    assert config.retention.max_age == timedelta(days=7)
    assert not config.async_config.enabled
    assert config.async_config.queue_maxsize == 1000
    validate_configuration(config)


def test_env_values_are_coerced(isolated: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ROLLFILE__LOGGING__ROOT__LEVEL", "  DEBUG  ")
    monkeypatch.setenv("ROLLFILE__RETENTION__MAX_DAYS", "none")
    monkeypatch.setenv("ROLLFILE__ASYNC__ENABLED", "true")
    monkeypatch.setenv("ROLLFILE__ASYNC__QUEUE_MAXSIZE", "16")

    config = loader.load_configuration({})

    assert config.root_level == "DEBUG"
    assert not config.retention.enabled
    assert config.async_config.enabled
    assert config.async_config.queue_maxsize == 16


def test_missing_explicit_file_is_an_error(isolated: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ROLLFILE_CONFIG", str(isolated / "nope.toml"))

    with pytest.raises(ConfigurationError):
        loader.load_configuration({})


@pytest.mark.parametrize(
    "overrides",
    [
        {"sink": {"path_template": "logs/app.log"}},
        {"sink": {"file_size_limit_bytes": 0}},
        {"sink": {"formatter": "csv.default"}},
        {"sink": {"encoding": "klingon"}},
        {"sink": {"level": "LOUD"}},
        {"async": {"enabled": True, "queue_maxsize": 0}},
    ],
)
def test_invalid_configuration_is_rejected(isolated: Path, overrides: dict) -> None:
    config = loader.load_configuration(overrides)

    with pytest.raises(ConfigurationError):
        validate_configuration(config)
