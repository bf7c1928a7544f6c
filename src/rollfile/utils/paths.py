"""Path synthesis helpers for rolled log files."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path
from typing import NamedTuple

from ..core.errors import ConfigurationError

__all__ = [
    "DATE_TOKEN",
    "LEVEL_TOKEN",
    "DATE_FORMAT",
    "TemplateMatch",
    "level_label",
    "PathTemplate",
    "ensure_directory",
    "parse_path_template",
]

DATE_TOKEN = "{Date}"
LEVEL_TOKEN = "{Level}"
DATE_FORMAT = "%Y%m%d"

_TOKEN_RE = re.compile(r"(\{[^{}]*\})")
_TOKEN_PATTERNS = {
    DATE_TOKEN: r"(?P<date>\d{8})",
    LEVEL_TOKEN: r"(?P<level>[A-Za-z0-9-]+)",
}
_SEQUENCE_PATTERN = r"(?:_(?P<sequence>\d+))?"
_LEVEL_UNSAFE_RE = re.compile(r"[^A-Za-z0-9-]+")


class TemplateMatch(NamedTuple):
    date: date
    level: str | None
    sequence: int


def level_label(levelname: str) -> str:
    """Return the form of ``levelname`` used in file names.

    Runs of characters other than letters, digits and ``-`` become a single
    ``-``, so custom names such as ``Level 5`` or ``TRACE_1`` still match the
    template when the directory is scanned. ``_`` is reserved for the sequence
    suffix.
    """

    return _LEVEL_UNSAFE_RE.sub("-", levelname)


@dataclass(slots=True)
class PathTemplate:
    """A directory plus a filename pattern holding ``{Date}`` and optionally ``{Level}``.

    Sequence 0 renders the bare pattern; later sequences insert ``_NNN`` in
    front of the file extension, e.g. ``app-20240101.log`` then
    ``app-20240101_001.log``.
    """

    directory: Path
    stem: str
    extension: str
    _regex: re.Pattern[str] = field(repr=False, compare=False)

    @property
    def level_partitioned(self) -> bool:
        return LEVEL_TOKEN in self.stem

    @property
    def pattern(self) -> str:
        return self.stem + self.extension

    def render(self, day: date, sequence: int = 0, level: str | None = None) -> str:
        """Return the filename for ``(day, sequence, level)``."""

        if sequence < 0:
            raise ValueError(f"Sequence must be non-negative, got {sequence}")
        name = self.stem.replace(DATE_TOKEN, day.strftime(DATE_FORMAT))
        if self.level_partitioned:
            if not level:
                raise ValueError(f"Template '{self.pattern}' requires a level")
            name = name.replace(LEVEL_TOKEN, level_label(level))
        if sequence:
            name = f"{name}_{sequence:03d}"
        return name + self.extension

    def match(self, filename: str) -> TemplateMatch | None:
        """Parse ``filename`` back into its date, level and sequence."""

        found = self._regex.fullmatch(filename)
        if found is None:
            return None
        try:
            day = datetime.strptime(found.group("date"), DATE_FORMAT).date()
        except ValueError:
            return None
        level = found.group("level") if self.level_partitioned else None
        raw_sequence = found.group("sequence")
        return TemplateMatch(date=day, level=level, sequence=int(raw_sequence) if raw_sequence else 0)


def _split_extension(name: str) -> tuple[str, str]:
    stem, extension = os.path.splitext(name)
    if not extension or "{" in extension or "}" in extension:
        return name, ""
    return stem, extension


def parse_path_template(template: str | Path) -> PathTemplate:
    """Parse ``template`` into a :class:`PathTemplate`.

    Raises :class:`ConfigurationError` when the pattern is missing ``{Date}``,
    repeats a token, uses an unknown token or places a token in the directory.
    """

    raw = str(template).strip()
    if not raw:
        raise ConfigurationError("Path template must not be empty")
    path = Path(raw)
    name = path.name
    if not name:
        raise ConfigurationError(f"Path template '{raw}' has no filename part")
    if _TOKEN_RE.search(str(path.parent)):
        raise ConfigurationError(f"Path template '{raw}' may only use tokens in the filename")

    tokens = _TOKEN_RE.findall(name)
    unknown = sorted({token for token in tokens if token not in _TOKEN_PATTERNS})
    if unknown:
        raise ConfigurationError(f"Path template '{raw}' uses unknown tokens: {', '.join(unknown)}")
    date_count = tokens.count(DATE_TOKEN)
    if date_count != 1:
        problem = "is missing" if date_count == 0 else "repeats"
        raise ConfigurationError(f"Path template '{raw}' {problem} the {DATE_TOKEN} token")
    if tokens.count(LEVEL_TOKEN) > 1:
        raise ConfigurationError(f"Path template '{raw}' repeats the {LEVEL_TOKEN} token")
    literal = _TOKEN_RE.sub("", name)
    if "{" in literal or "}" in literal:
        raise ConfigurationError(f"Path template '{raw}' contains unbalanced braces")

    stem, extension = _split_extension(name)
    parts = [_TOKEN_PATTERNS.get(part, re.escape(part)) for part in _TOKEN_RE.split(stem) if part]
    regex = re.compile("".join(parts) + _SEQUENCE_PATTERN + re.escape(extension))
    return PathTemplate(directory=path.parent, stem=stem, extension=extension, _regex=regex)


def ensure_directory(path: str | Path) -> Path:
    """Ensure the directory for ``path`` exists and return it as ``Path``."""

    directory = Path(path)
    directory.mkdir(parents=True, exist_ok=True)
    return directory
