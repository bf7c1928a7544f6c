"""Rolled file identities and the roller that enumerates and advances them."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import List

from ..utils.paths import PathTemplate, ensure_directory, level_label, parse_path_template
from ..utils.time import Clock, utcnow

__all__ = ["RollingFileDescriptor", "TemplatedPathRoller"]

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RollingFileDescriptor:
    """Identity of one physical log file."""

    date: date
    sequence: int
    level: str | None
    filename: str

    @property
    def sort_key(self) -> tuple[date, str, int]:
        return (self.date, self.level or "", self.sequence)


class TemplatedPathRoller:
    """Generate, enumerate and advance descriptors for a path template."""

    def __init__(self, path_template: str | Path | PathTemplate, *, clock: Clock = utcnow) -> None:
        if isinstance(path_template, PathTemplate):
            self.template = path_template
        else:
            self.template = parse_path_template(path_template)
        self._clock = clock

    @property
    def directory(self) -> Path:
        return self.template.directory

    @property
    def level_partitioned(self) -> bool:
        return self.template.level_partitioned

    def today(self) -> date:
        return self._clock().date()

    def descriptor(self, day: date, sequence: int = 0, level: str | None = None) -> RollingFileDescriptor:
        if not self.level_partitioned:
            level = None
        elif not level:
            # pending until the first record supplies a level
            return RollingFileDescriptor(date=day, sequence=sequence, level=None, filename="")
        else:
            level = level_label(level)
        filename = self.template.render(day, sequence, level)
        return RollingFileDescriptor(date=day, sequence=sequence, level=level, filename=filename)

    def path_for(self, descriptor: RollingFileDescriptor) -> Path:
        return self.directory / descriptor.filename

    def all_files(self) -> List[RollingFileDescriptor]:
        """Return every on-disk file matching the template, oldest first."""

        if not self.directory.is_dir():
            return []
        found: List[RollingFileDescriptor] = []
        for path in self.directory.iterdir():
            parsed = self.template.match(path.name)
            if parsed is None or not path.is_file():
                continue
            found.append(
                RollingFileDescriptor(
                    date=parsed.date,
                    sequence=parsed.sequence,
                    level=parsed.level,
                    filename=path.name,
                )
            )
        found.sort(key=lambda item: (item.date, item.sequence, item.level or ""))
        return found

    def latest_or_new(self) -> RollingFileDescriptor:
        """Return today's greatest existing descriptor or a fresh sequence 0."""

        ensure_directory(self.directory)
        today = self.today()
        candidates = [item for item in self.all_files() if item.date == today]
        if candidates:
            latest = max(candidates, key=lambda item: item.sort_key)
            _LOGGER.debug("Resuming rolled file %s", latest.filename)
            return latest
        return self.descriptor(today)

    def next(self, current: RollingFileDescriptor, level: str | None = None) -> RollingFileDescriptor:
        """Return the descriptor following ``current`` for ``level``.

        The sequence advances only while both the date and the level stay the
        same; otherwise numbering restarts at 0 for the new partition.
        """

        today = self.today()
        if self.level_partitioned:
            target_level = level_label(level) if level is not None else current.level
        else:
            target_level = None
        if current.date == today and target_level == current.level:
            return self.descriptor(today, current.sequence + 1, target_level)
        return self.descriptor(today, 0, target_level)

    def reset_sequence(self, descriptor: RollingFileDescriptor) -> RollingFileDescriptor:
        """Return ``descriptor`` with its sequence counter zeroed."""

        return self.descriptor(descriptor.date, 0, descriptor.level)
