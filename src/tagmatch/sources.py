"""
Provenance tokens.

Every fact stored on a Player or Team (a name, a tag, a handle, a team
membership) carries the Source(s) it was observed in. A Source is just a
name plus the time the source started, e.g. a tournament and its start date.

Sources are immutable and compared by value, so two observations from the
same tournament never produce duplicate provenance entries.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timezone
from functools import total_ordering
from typing import Any, Iterable

from tagmatch.errors import InvalidSourceError

# Sources with no known start sort before everything else
EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

# Source names produced by importers usually begin with the event date,
# e.g. "2021-03-14-LUTI-Season-12"
DATE_PREFIX_PATTERN = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})")


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@total_ordering
@dataclass(frozen=True)
class Source:
    """
    Where and when a fact was observed.

    Attributes:
        name: Friendly name of the source (tournament, sheet, manual entry)
        start: When the source started; naive datetimes are treated as UTC
    """

    name: str
    start: datetime = EPOCH

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name.strip():
            raise InvalidSourceError("Source name must be a non-empty string")
        if not isinstance(self.start, datetime):
            raise InvalidSourceError(f"Source start must be a datetime, got {self.start!r}")
        object.__setattr__(self, "start", _as_utc(self.start))

    @property
    def sort_key(self) -> tuple[datetime, str]:
        return self.start, self.name

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Source):
            return NotImplemented
        return self.sort_key < other.sort_key

    def __str__(self) -> str:
        return self.name

    @classmethod
    def from_name(cls, name: str) -> "Source":
        """
        Build a Source, inferring its start from a leading date in the name.

        Examples:
            >>> Source.from_name("2021-03-14-LUTI").start.year
            2021
            >>> Source.from_name("Manual Entry").start == EPOCH
            True
        """
        match = DATE_PREFIX_PATTERN.match(name or "")
        start = EPOCH
        if match:
            year, month, day = (int(part) for part in match.groups())
            try:
                start = datetime(year, month, day, tzinfo=timezone.utc)
            except ValueError:
                start = EPOCH
        return cls(name=name, start=start)

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "start": self.start.isoformat()}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Source":
        return cls(name=data["name"], start=datetime.fromisoformat(data["start"]))


def canonical_sources(sources: Iterable[Source]) -> tuple[Source, ...]:
    """Deduplicate sources and return them oldest first."""
    return tuple(sorted(set(sources)))


def latest_source(sources: Iterable[Source]) -> Source | None:
    """Return the most recent source, or None when there are none."""
    return max(sources, default=None)


BUILTIN_SOURCE = Source("builtin", EPOCH)
MANUAL_SOURCE = Source("Manual Entry", EPOCH)
