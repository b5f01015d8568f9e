"""
Match-reason vocabulary and query options.

A match is reported as a FilterOptions bitmask: one bit per reason a
candidate relates to a query, OR-ed across every facet checked. Callers rank
candidates by the strongest reason present:

    persistent id  >  exact name/tag  >  near name/tag  >  display handle  >  affiliation
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import IntEnum, IntFlag
from typing import Optional

from tagmatch.config import Settings, get_settings


class FilterOptions(IntFlag):
    """Why a candidate matched a query. ``NONE`` means no relation."""

    NONE = 0

    # Display names and clan tags
    NAME = 0x1
    NEAR_NAME = 0x2
    CLAN_TAG = 0x4
    NEAR_CLAN_TAG = 0x8

    # Tournament platform
    BATTLEFY_PERSISTENT_ID = 0x10
    BATTLEFY_SLUG = 0x20
    BATTLEFY_USERNAME = 0x40

    # Chat platform
    DISCORD_ID = 0x80
    DISCORD_NAME = 0x100

    # Streaming / social handles
    TWITCH = 0x200
    TWITTER = 0x400
    SENDOU = 0x800

    # Relations
    DIVISION = 0x1000
    TEAM = 0x2000
    SOURCES = 0x4000

    # Console
    FRIEND_CODE = 0x8000

    # Composites
    PERSISTENT = BATTLEFY_PERSISTENT_ID | BATTLEFY_SLUG | DISCORD_ID | FRIEND_CODE
    EXACT = NAME | CLAN_TAG
    NEAR = NEAR_NAME | NEAR_CLAN_TAG
    HANDLE = BATTLEFY_USERNAME | DISCORD_NAME | TWITCH | TWITTER | SENDOU
    AFFILIATION = DIVISION | TEAM | SOURCES
    ALL = PERSISTENT | EXACT | NEAR | HANDLE | AFFILIATION
    # Sources are opt-in: tournament names match far too many candidates
    DEFAULT = ALL & ~SOURCES


class MatchRank(IntEnum):
    """Confidence tier of a FilterOptions bitmask, higher is stronger."""

    NONE = 0
    AFFILIATION = 1
    HANDLE = 2
    NEAR = 3
    EXACT = 4
    PERSISTENT = 5


_RANK_TIERS: tuple[tuple[FilterOptions, MatchRank], ...] = (
    (FilterOptions.PERSISTENT, MatchRank.PERSISTENT),
    (FilterOptions.EXACT, MatchRank.EXACT),
    (FilterOptions.NEAR, MatchRank.NEAR),
    (FilterOptions.HANDLE, MatchRank.HANDLE),
    (FilterOptions.AFFILIATION, MatchRank.AFFILIATION),
)


def rank(bitmask: FilterOptions | int) -> MatchRank:
    """
    Return the confidence tier of the strongest reason in ``bitmask``.

    Examples:
        >>> rank(FilterOptions.DISCORD_ID | FilterOptions.NEAR_NAME)
        <MatchRank.PERSISTENT: 5>
        >>> rank(FilterOptions.NONE)
        <MatchRank.NONE: 0>
    """
    flags = FilterOptions(bitmask)
    for tier_flags, tier in _RANK_TIERS:
        if flags & tier_flags:
            return tier
    return MatchRank.NONE


@dataclass(frozen=True)
class MatchOptions:
    """
    How a query is compared against candidates.

    Attributes:
        ignore_case: Case-fold both sides before comparing
        near_character_recognition: Fold lookalike characters before comparing
        query_is_regex: Treat the query as a regular expression (exact bit only)
        filter_options: Which match reasons to evaluate
        limit: Maximum number of results, None for all
    """

    ignore_case: bool = True
    near_character_recognition: bool = True
    query_is_regex: bool = False
    filter_options: FilterOptions = FilterOptions.DEFAULT
    limit: Optional[int] = None

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None, **overrides) -> "MatchOptions":
        """Build options from configured defaults, applying any overrides."""
        current = settings or get_settings()
        options = cls(
            ignore_case=current.match_ignore_case,
            near_character_recognition=current.match_near_character_recognition,
        )
        return replace(options, **overrides) if overrides else options

    def allows(self, flags: FilterOptions) -> bool:
        """Whether any of ``flags`` is enabled by ``filter_options``."""
        return bool(self.filter_options & flags)
