"""
Provenance-ordered value lists.

A facet is one attribute of an identity (display names, clan tags, team
memberships, a social handle list) stored as an ordered list of distinct
values, each with the set of Sources it was seen in.

The list is kept most-recent-first:
- re-adding a value merges its sources into the existing entry and moves it
  forward to where its newest source belongs
- a new value with the newest source goes to the front
- a value whose newest source is older than the front entry is placed after
  every strictly newer entry

So ``facet.current`` (the front) is always the latest observed value and
``facet.history`` is everything older. Values are compared exactly and
case-sensitively here; fuzzy equivalence is a matching concern only.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, Hashable, Iterable, Iterator, Optional, TypeVar, Union
from uuid import UUID

from tagmatch.errors import InvalidFacetValueError
from tagmatch.sources import Source, canonical_sources

T = TypeVar("T", bound=Hashable)

SourceArg = Union[Source, Iterable[Source]]


def _as_sources(sources: SourceArg) -> tuple[Source, ...]:
    if isinstance(sources, Source):
        return (sources,)
    return tuple(sources)


@dataclass(frozen=True)
class NameEntry(Generic[T]):
    """One distinct value of a facet and every source it was observed in."""

    value: T
    sources: tuple[Source, ...]

    def __post_init__(self) -> None:
        sources = canonical_sources(self.sources)
        if not sources:
            raise InvalidFacetValueError(f"Value {self.value!r} must have at least one source")
        object.__setattr__(self, "sources", sources)

    @property
    def latest(self) -> Source:
        """The newest source this value was seen in."""
        return self.sources[-1]

    def with_sources(self, sources: Iterable[Source]) -> "NameEntry[T]":
        return NameEntry(self.value, self.sources + tuple(sources))


def merge_entry_lists(
    first: list[NameEntry[T]],
    second: list[NameEntry[T]],
) -> list[NameEntry[T]]:
    """
    Chronology-safe merge of two most-recent-first entry lists.

    1. Concatenate both lists.
    2. Deduplicate by exact value, unioning the sources of duplicates.
    3. Sort by each entry's newest source start, newest first.

    Ties on the newest start keep entries that were at the front of either
    input first, then entries from ``first`` before ``second``, then their
    original positions. Merging a list with itself returns the same list.
    """
    merged: dict[Any, NameEntry[T]] = {}
    # (not at the front of any input, input side, position) per value
    tie_keys: dict[Any, tuple[bool, int, int]] = {}

    for side, entries in enumerate((first, second)):
        for position, entry in enumerate(entries):
            if entry.value in merged:
                merged[entry.value] = merged[entry.value].with_sources(entry.sources)
                if position == 0:
                    _, first_side, first_position = tie_keys[entry.value]
                    tie_keys[entry.value] = (False, first_side, first_position)
            else:
                merged[entry.value] = entry
                tie_keys[entry.value] = (position != 0, side, position)

    ordered = sorted(merged.values(), key=lambda e: tie_keys[e.value])
    ordered.sort(key=lambda e: e.latest.start, reverse=True)
    return ordered


class SourcedFacet(Generic[T]):
    """
    Ordered, deduplicated list of sourced values, most recent first.

    Subclasses choose how values are validated and serialized.
    """

    def __init__(self, entries: Iterable[NameEntry[T]] = ()):
        # Entries are trusted to already be in order (e.g. when deserializing)
        self._entries: list[NameEntry[T]] = []
        for entry in entries:
            if any(existing.value == entry.value for existing in self._entries):
                raise InvalidFacetValueError(f"Duplicate facet value {entry.value!r}")
            self._entries.append(entry)

    # =========================================================================
    # Hooks
    # =========================================================================

    def validate_value(self, value: Any) -> T:
        """Check (and possibly convert) a value before it is stored."""
        if value is None:
            raise InvalidFacetValueError(f"{type(self).__name__} values cannot be None")
        return value

    def value_to_json(self, value: T) -> Any:
        return value

    def value_from_json(self, data: Any) -> T:
        return data

    # =========================================================================
    # Mutation
    # =========================================================================

    def add(self, value: Any, sources: SourceArg) -> NameEntry[T]:
        """
        Record that ``value`` was observed in ``sources``.

        Args:
            value: The observed value
            sources: One Source or an iterable of Sources

        Returns:
            The (possibly merged) entry now stored for this value

        Raises:
            InvalidFacetValueError: If the value is empty or has no source
        """
        value = self.validate_value(value)
        incoming = _as_sources(sources)

        existing = self._pop(value)
        if existing is None:
            entry = NameEntry(value, incoming)
        else:
            entry = existing.with_sources(incoming)

        self._insert(entry)
        return entry

    def replace(self, old: T, new: Any) -> bool:
        """
        Rename a stored value, keeping its sources.

        If ``new`` is already present the sources are merged into it.
        Returns whether ``old`` was present.
        """
        entry = self._pop(old)
        if entry is None:
            return False
        self.add(new, entry.sources)
        return True

    def _pop(self, value: T) -> Optional[NameEntry[T]]:
        for index, entry in enumerate(self._entries):
            if entry.value == value:
                return self._entries.pop(index)
        return None

    def _insert(self, entry: NameEntry[T]) -> None:
        start = entry.latest.start
        for index, existing in enumerate(self._entries):
            if existing.latest.start <= start:
                self._entries.insert(index, entry)
                return
        self._entries.append(entry)

    # =========================================================================
    # Accessors
    # =========================================================================

    @property
    def entries(self) -> list[NameEntry[T]]:
        return list(self._entries)

    @property
    def values(self) -> list[T]:
        return [entry.value for entry in self._entries]

    @property
    def current(self) -> Optional[T]:
        """The most recently observed value, or None if the facet is empty."""
        return self._entries[0].value if self._entries else None

    @property
    def history(self) -> list[T]:
        """Every value except the current one, most recent first."""
        return [entry.value for entry in self._entries[1:]]

    @property
    def sources(self) -> tuple[Source, ...]:
        return canonical_sources(
            source for entry in self._entries for source in entry.sources
        )

    def sources_for(self, value: T) -> tuple[Source, ...]:
        for entry in self._entries:
            if entry.value == value:
                return entry.sources
        return ()

    def contains(self, value: T) -> bool:
        return any(entry.value == value for entry in self._entries)

    def __contains__(self, value: object) -> bool:
        return self.contains(value)  # type: ignore[arg-type]

    def __iter__(self) -> Iterator[T]:
        return iter(self.values)

    def __len__(self) -> int:
        return len(self._entries)

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._entries == other._entries  # type: ignore[attr-defined]

    def __repr__(self) -> str:
        return f"<{type(self).__name__}({self.values!r})>"

    # =========================================================================
    # Merge & Serialization
    # =========================================================================

    def copy(self):
        return type(self)(self._entries)

    def merge(self, other: "SourcedFacet[T]"):
        """Return a new facet combining this one with ``other`` (see merge_entry_lists)."""
        if type(other) is not type(self):
            raise TypeError(
                f"Cannot merge {type(self).__name__} with {type(other).__name__}"
            )
        return type(self)(merge_entry_lists(self._entries, other._entries))

    def to_dict(self) -> list[dict[str, Any]]:
        return [
            {
                "value": self.value_to_json(entry.value),
                "sources": [source.to_dict() for source in entry.sources],
            }
            for entry in self._entries
        ]

    @classmethod
    def from_dict(cls, data: Iterable[dict[str, Any]]):
        facet = cls()
        entries = [
            NameEntry(
                facet.validate_value(facet.value_from_json(item["value"])),
                tuple(Source.from_dict(source) for source in item["sources"]),
            )
            for item in data
        ]
        return cls(entries)


class NameFacet(SourcedFacet[str]):
    """Display names, clan tags, usernames and other string values."""

    def validate_value(self, value: Any) -> str:
        if not isinstance(value, str) or not value.strip():
            raise InvalidFacetValueError(
                f"{type(self).__name__} values must be non-empty strings, got {value!r}"
            )
        return value


class TeamHistory(SourcedFacet[UUID]):
    """
    A player's team memberships by team id.

    Teams are referenced, not owned: resolving an id to a Team is the job of
    an IdentityStore (or any other resolver).
    """

    def validate_value(self, value: Any) -> UUID:
        if isinstance(value, UUID):
            return value
        if isinstance(value, str) and value.strip():
            try:
                return UUID(value)
            except ValueError as exc:
                raise InvalidFacetValueError(f"Invalid team id {value!r}") from exc
        raise InvalidFacetValueError(f"Team ids must be UUIDs, got {value!r}")

    def value_to_json(self, value: UUID) -> str:
        return str(value)
