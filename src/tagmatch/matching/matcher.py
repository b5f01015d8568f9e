"""
Query matching against names, facets and whole aggregates.

The matcher answers "how does this query relate to this candidate?" with a
FilterOptions bitmask instead of a boolean, so callers can rank results and
explain why each one was returned.

The comparison strategy for one query/candidate string pair:
1. Empty query - never matches (an empty query is not a wildcard)
2. Regex query - pattern search on the candidate (both case-folded when
   ignoring case), exact bit only; a pattern that fails to compile matches
   nothing
3. Equal normalized forms - exact
4. Containment, bounded edit distance or very high Jaro-Winkler - near
5. Otherwise - no match

A Matcher is prepared once per query and is read-only afterwards, so one
instance can be shared by worker threads scanning disjoint candidates.
"""

from __future__ import annotations

import logging
import re
from enum import IntEnum
from typing import Iterable, Optional, Protocol, Sequence, TypeVar
from uuid import UUID

import jellyfish
from rapidfuzz.distance import Levenshtein

from tagmatch.config import Settings, get_settings
from tagmatch.facets import SourcedFacet
from tagmatch.matching.normalize import normalize
from tagmatch.matching.options import FilterOptions, MatchOptions, rank
from tagmatch.sources import Source

logger = logging.getLogger(__name__)

C = TypeVar("C", bound="Matchable")


class Strength(IntEnum):
    """How strongly a single string matched."""

    NONE = 0
    NEAR = 1
    EXACT = 2


class TeamResolver(Protocol):
    """Anything that can turn a team id into a Team (or None)."""

    def resolve(self, team_id: UUID): ...


class Matchable(Protocol):
    """A Player, Team or social profile that can report its match reasons."""

    def match(self, matcher: "Matcher", resolver: Optional[TeamResolver] = None) -> FilterOptions: ...


def casefold_pattern(pattern: str) -> str:
    """
    Case-fold a regex pattern without changing its escapes.

    ``\\S`` must not become ``\\s``, so the character after each backslash is
    kept as written.

    Examples:
        >>> casefold_pattern(r"^STRASSE\\S")
        '^strasse\\\\S'
        >>> casefold_pattern("ß")
        'ss'
    """
    folded = []
    escaped = False
    for char in pattern:
        folded.append(char if escaped else char.casefold())
        escaped = char == "\\" and not escaped
    return "".join(folded)


class Matcher:
    """
    A prepared query.

    Usage:
        matcher = Matcher("slushie", MatchOptions())
        reasons = matcher.match(player, resolver=store)
        if reasons & FilterOptions.NAME:
            ...
    """

    def __init__(
        self,
        query: Optional[str],
        options: Optional[MatchOptions] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or get_settings()
        self.options = options or MatchOptions.from_settings(self.settings)
        self.query = query or ""
        self.valid = bool(self.query.strip())

        self._pattern: Optional[re.Pattern[str]] = None
        self._normalized = ""
        self._strict = ""

        if not self.valid:
            return

        if self.options.query_is_regex:
            flags = re.IGNORECASE if self.options.ignore_case else 0
            pattern = casefold_pattern(self.query) if self.options.ignore_case else self.query
            try:
                self._pattern = re.compile(pattern, flags)
            except (re.error, OverflowError, RecursionError) as exc:
                # Huge repeat counts overflow and deep nesting exhausts the parser
                logger.debug("Invalid regex query %r: %s", self.query, exc)
                self.valid = False
        else:
            self._normalized = self.normalize(self.query)
            self._strict = normalize(
                self.query,
                ignore_case=self.options.ignore_case,
                near_characters=False,
            )

    def __repr__(self) -> str:
        return f"<Matcher(query={self.query!r}, valid={self.valid})>"

    # =========================================================================
    # String Comparison
    # =========================================================================

    def normalize(self, value: str) -> str:
        return normalize(
            value,
            ignore_case=self.options.ignore_case,
            near_characters=self.options.near_character_recognition,
        )

    def compare(self, value: Optional[str], allow_near: bool = True) -> Strength:
        """
        Compare the query against one candidate string.

        Args:
            value: Candidate string
            allow_near: Whether the fuzzy step may run

        Returns:
            Strength.EXACT, Strength.NEAR or Strength.NONE
        """
        if not self.valid or not value:
            return Strength.NONE

        if self._pattern is not None:
            return self._search(value)

        candidate = self.normalize(value)
        if not candidate:
            return Strength.NONE
        if candidate == self._normalized:
            return Strength.EXACT
        if allow_near and self._is_near(self._normalized, candidate):
            return Strength.NEAR
        return Strength.NONE

    def compare_persistent(self, value: Optional[str]) -> Strength:
        """
        Compare against a persistent identifier: exact only, no lookalike folding.

        Persistent ids are machine-issued, so "abc123" and "abcl23" are
        different ids even though they look alike.
        """
        if not self.valid or not value:
            return Strength.NONE

        if self._pattern is not None:
            return self._search(value)

        candidate = normalize(value, ignore_case=self.options.ignore_case, near_characters=False)
        return Strength.EXACT if candidate == self._strict else Strength.NONE

    def _search(self, value: str) -> Strength:
        if self.options.ignore_case:
            value = value.casefold()
        return Strength.EXACT if self._pattern.search(value) else Strength.NONE

    def _is_near(self, query: str, candidate: str) -> bool:
        shorter, longer = sorted((query, candidate), key=len)

        # Containment, e.g. "slush" in "slushie"
        if len(shorter) >= self.settings.near_match_min_length and shorter in longer:
            return True

        # Small typos, scaled to length: 0 edits below 5 chars at the default ratio
        max_edits = int(len(longer) * self.settings.near_match_edit_ratio)
        if max_edits and Levenshtein.distance(query, candidate, score_cutoff=max_edits) <= max_edits:
            return True

        # Long names that differ mostly at the end
        if len(shorter) >= self.settings.near_match_jaro_winkler_min_length:
            similarity = jellyfish.jaro_winkler_similarity(query, candidate)
            if similarity >= self.settings.near_match_jaro_winkler_threshold:
                return True

        return False

    # =========================================================================
    # Facet Matching
    # =========================================================================

    def match_values(
        self,
        values: Iterable[str],
        exact_reason: FilterOptions,
        near_reason: FilterOptions = FilterOptions.NONE,
    ) -> FilterOptions:
        """
        OR together the reasons for every value.

        A query can hit both a current and a historical value; the caller
        decides how much recency matters.
        """
        result = FilterOptions.NONE
        allow_near = bool(near_reason)
        for value in values:
            strength = self.compare(value, allow_near=allow_near)
            if strength == Strength.EXACT:
                result |= exact_reason
            elif strength == Strength.NEAR:
                result |= near_reason
        return result

    def match_facet(
        self,
        facet: SourcedFacet[str],
        exact_reason: FilterOptions,
        near_reason: FilterOptions = FilterOptions.NONE,
    ) -> FilterOptions:
        """Match every stored value of a facet, if the reasons are enabled."""
        exact_reason &= self.options.filter_options
        near_reason &= self.options.filter_options
        if not exact_reason and not near_reason:
            return FilterOptions.NONE
        return self.match_values(facet.values, exact_reason, near_reason)

    def match_persistent(self, facet: SourcedFacet[str], reason: FilterOptions) -> FilterOptions:
        """Match a persistent-id facet; reports ``reason`` on exact equality only."""
        reason &= self.options.filter_options
        if not reason:
            return FilterOptions.NONE
        for value in facet.values:
            if self.compare_persistent(value) == Strength.EXACT:
                return reason
        return FilterOptions.NONE

    def match_sources(self, sources: Iterable[Source]) -> FilterOptions:
        """Match source names (opt-in via FilterOptions.SOURCES)."""
        if not self.options.allows(FilterOptions.SOURCES):
            return FilterOptions.NONE
        for source in sources:
            if self.compare(source.name) != Strength.NONE:
                return FilterOptions.SOURCES
        return FilterOptions.NONE

    # =========================================================================
    # Aggregate Matching
    # =========================================================================

    def match(self, candidate: "Matchable", resolver: Optional[TeamResolver] = None) -> FilterOptions:
        """Evaluate the query against one Player or Team."""
        if not self.valid:
            return FilterOptions.NONE
        return candidate.match(self, resolver) & self.options.filter_options

    def match_player(self, player, resolver: Optional[TeamResolver] = None) -> FilterOptions:
        """
        Match a Player.

        With a resolver, the names and tags of every team the player has
        been on also count (FilterOptions.TEAM). Unknown team ids are skipped.
        """
        return self.match(player, resolver)

    def match_team(self, team) -> FilterOptions:
        return self.match(team)


def match_string(
    query: Optional[str],
    candidate: Optional[str],
    options: Optional[MatchOptions] = None,
    settings: Optional[Settings] = None,
) -> FilterOptions:
    """
    Compare two plain strings as names.

    Examples:
        >>> match_string("foo", "Foo")
        <FilterOptions.NAME: 1>
        >>> match_string("foo", "Foo", MatchOptions(ignore_case=False))
        <FilterOptions.NONE: 0>
    """
    matcher = Matcher(query, options, settings)
    return matcher.match_values([candidate or ""], FilterOptions.NAME, FilterOptions.NEAR_NAME)


def rank_matches(pairs: Iterable[tuple[C, FilterOptions]]) -> list[tuple[C, FilterOptions]]:
    """
    Sort (candidate, reasons) pairs by descending confidence tier.

    The sort is stable: candidates of equal rank keep their input order.
    """
    return sorted(pairs, key=lambda pair: rank(pair[1]), reverse=True)


def match_candidates(
    query: Optional[str],
    options: Optional[MatchOptions],
    candidates: Sequence[C],
    resolver: Optional[TeamResolver] = None,
    settings: Optional[Settings] = None,
) -> list[tuple[C, FilterOptions]]:
    """
    Match a query against candidates and rank the hits.

    Args:
        query: Query string (empty matches nothing)
        options: Match options (defaults from settings when None)
        candidates: Players or Teams to evaluate
        resolver: Team resolver for player team-affiliation matching
        settings: Settings override for thresholds

    Returns:
        (candidate, FilterOptions) for every candidate with a non-zero
        bitmask, strongest first, truncated to ``options.limit``
    """
    matcher = Matcher(query, options, settings)
    if not matcher.valid:
        return []

    hits = []
    for candidate in candidates:
        reasons = matcher.match(candidate, resolver)
        if reasons:
            hits.append((candidate, reasons))

    ranked = rank_matches(hits)
    limit = matcher.options.limit
    if limit is not None and limit >= 0:
        ranked = ranked[:limit]

    logger.debug("Query %r matched %d of %d candidates", query, len(ranked), len(candidates))
    return ranked
