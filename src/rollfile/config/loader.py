"""Configuration loading pipeline.

Sources are merged in increasing precedence:

1. ``rollfile.toml``/``.yaml``/``.yml`` in the user config directory
2. the same files in the current working directory
3. ``[tool.rollfile]`` in ``pyproject.toml``
4. the file named by ``ROLLFILE_CONFIG``
5. ``ROLLFILE__SECTION__KEY`` environment variables
6. explicit overrides
"""

from __future__ import annotations

import importlib
import json
import os
from pathlib import Path
from types import ModuleType
from typing import Any, Callable, Dict, Mapping, cast

from platformdirs import user_config_dir

from ..core.errors import ConfigurationError
from .schema import RollfileConfig, build_config, default_config

try:  # pragma: no cover
    import tomllib  # type: ignore[attr-defined]
except ModuleNotFoundError:  # pragma: no cover
    import tomli as tomllib  # type: ignore[no-redef]

try:  # pragma: no cover
    yaml_module = importlib.import_module("yaml")
except ModuleNotFoundError:  # pragma: no cover
    yaml_module = None

yaml: ModuleType | None = yaml_module

_APP_NAME = "rollfile"
_ENV_PREFIX = "ROLLFILE__"
_ENV_CONFIG_FILE = "ROLLFILE_CONFIG"
_CONFIG_FILENAMES = ("rollfile.toml", "rollfile.yaml", "rollfile.yml")


def _load_toml(path: Path) -> Dict[str, Any]:
    with path.open("rb") as fh:
        return tomllib.load(fh)


def _load_yaml(path: Path) -> Dict[str, Any]:
    if yaml is None:
        return {}
    loader = getattr(yaml, "safe_load", None)
    if not callable(loader):
        return {}
    with path.open("r", encoding="utf-8") as fh:
        data = cast(Callable[[Any], Any], loader)(fh)
    if isinstance(data, Mapping):
        return {str(key): value for key, value in data.items()}
    return {}


def _read_config_file(path: Path) -> Dict[str, Any]:
    if not path.is_file():
        return {}
    if path.suffix == ".toml":
        return _load_toml(path)
    if path.suffix in {".yaml", ".yml"}:
        return _load_yaml(path)
    raise ConfigurationError(f"Unsupported configuration file type: {path}")


def _merge(base: Dict[str, Any], incoming: Mapping[str, Any]) -> Dict[str, Any]:
    for key, value in incoming.items():
        existing = base.get(key)
        if isinstance(value, Mapping) and isinstance(existing, dict):
            _merge(existing, value)
        elif isinstance(value, Mapping):
            base[key] = _merge(dict(existing) if isinstance(existing, Mapping) else {}, value)
        else:
            base[key] = value
    return base


def _load_directory(directory: Path) -> Dict[str, Any]:
    data: Dict[str, Any] = {}
    if not directory.is_dir():
        return data
    for filename in _CONFIG_FILENAMES:
        payload = _read_config_file(directory / filename)
        if payload:
            _merge(data, payload)
    return data


def _load_user_config() -> Dict[str, Any]:
    return _load_directory(Path(user_config_dir(_APP_NAME)))


def _load_local_config() -> Dict[str, Any]:
    return _load_directory(Path.cwd())


def _load_pyproject() -> Dict[str, Any]:
    path = Path("pyproject.toml")
    if not path.is_file():
        return {}
    tool = _load_toml(path).get("tool", {})
    if not isinstance(tool, Mapping):
        return {}
    section = tool.get(_APP_NAME, {})
    if isinstance(section, Mapping):
        return {str(key): value for key, value in section.items()}
    return {}


def _load_explicit_file() -> Dict[str, Any]:
    raw = os.environ.get(_ENV_CONFIG_FILE, "").strip()
    if not raw:
        return {}
    path = Path(raw).expanduser()
    if not path.is_file():
        raise ConfigurationError(f"{_ENV_CONFIG_FILE} points to a missing file: {path}")
    return _read_config_file(path)


def _coerce_value(value: str) -> Any:
    stripped = value.strip()
    lowered = stripped.lower()
    if lowered in {"true", "false"}:
        return lowered == "true"
    if lowered in {"none", "null"}:
        return None
    for cast_fn in (int, float):
        try:
            return cast_fn(stripped)
        except ValueError:
            continue
    if stripped.startswith(("[", "{")):
        try:
            return json.loads(stripped)
        except json.JSONDecodeError:
            pass
    return stripped


def _env_config() -> Dict[str, Any]:
    data: Dict[str, Any] = {}
    for env_key, raw_value in os.environ.items():
        if not env_key.startswith(_ENV_PREFIX):
            continue
        path = [segment.lower() for segment in env_key[len(_ENV_PREFIX) :].split("__")]
        target: Dict[str, Any] = data
        for segment in path[:-1]:
            target = cast(Dict[str, Any], target.setdefault(segment, {}))
        target[path[-1]] = _coerce_value(raw_value)
    return data


def load_configuration(overrides: Mapping[str, Any] | None = None) -> RollfileConfig:
    """Load configuration from supported sources in precedence order."""

    merged = default_config()
    for mapping in (
        _load_user_config(),
        _load_local_config(),
        _load_pyproject(),
        _load_explicit_file(),
        _env_config(),
        overrides or {},
    ):
        if mapping:
            _merge(merged, mapping)
    return build_config(merged)
