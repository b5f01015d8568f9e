"""
Team aggregate.

A Team is a collection of facets (names, clan tags, divisions, platform
ids) built up from many sources. Teams do not store their members: players
reference teams by id, and the member list is derived by scanning players
(see IdentityStore.players_for_team).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Optional, Union
from uuid import UUID, uuid4

from tagmatch.divisions import Division, DivisionHistory
from tagmatch.errors import MergeTypeError
from tagmatch.facets import NameEntry, NameFacet
from tagmatch.matching.matcher import Matcher, Strength
from tagmatch.matching.normalize import normalize
from tagmatch.matching.options import FilterOptions
from tagmatch.socials import BattlefyTeamProfile, TwitterFacet
from tagmatch.sources import Source, canonical_sources

if TYPE_CHECKING:
    from tagmatch.identity.players import Player
    from tagmatch.identity.store import IdentityStore

UNKNOWN_TEAM = "(Unnamed Team)"


class TagPlacement(str, Enum):
    """Where a team's clan tag sits relative to a player's name."""

    UNKNOWN = "unknown"
    FRONT = "front"
    BACK = "back"
    SURROUNDING = "surrounding"

    @classmethod
    def infer(cls, tag: str, example_player_name: str) -> "TagPlacement":
        """
        Work out tag placement from one tagged player name.

        Comparison ignores case, then retries with lookalike characters
        folded on both sides.

        Examples:
            >>> TagPlacement.infer("αβ", "αβ Slushie")
            <TagPlacement.FRONT: 'front'>
            >>> TagPlacement.infer("_", "_Slushie_")
            <TagPlacement.SURROUNDING: 'surrounding'>
        """
        if not tag or not tag.strip() or not example_player_name:
            return cls.UNKNOWN

        pairs = [
            (example_player_name.casefold(), tag.casefold()),
            (normalize(example_player_name), normalize(tag)),
        ]
        pairs = [(name, t) for name, t in pairs if t]

        if len(example_player_name) > len(tag) * 2 and any(
            name.startswith(t) and name.endswith(t) for name, t in pairs
        ):
            return cls.SURROUNDING
        if any(name.startswith(t) for name, t in pairs):
            return cls.FRONT
        if any(name.endswith(t) for name, t in pairs):
            return cls.BACK
        return cls.UNKNOWN


@dataclass(eq=True)
class Team:
    """
    A team identity observed across sources.

    Attributes:
        id: Stable identifier (kept by the surviving side of a merge)
        names: Display names, most recent first
        tags: Clan tags, most recent first
        tag_placement: Where the tag goes around player names
        divisions: Division history, most recent first
        battlefy: Tournament-platform persistent team ids
        twitter: Team social handles
    """

    id: UUID = field(default_factory=uuid4)
    names: NameFacet = field(default_factory=NameFacet)
    tags: NameFacet = field(default_factory=NameFacet)
    tag_placement: TagPlacement = TagPlacement.UNKNOWN
    divisions: DivisionHistory = field(default_factory=DivisionHistory)
    battlefy: BattlefyTeamProfile = field(default_factory=BattlefyTeamProfile)
    twitter: TwitterFacet = field(default_factory=TwitterFacet)

    @classmethod
    def create(
        cls,
        name: str,
        source: Source,
        tag: Optional[str] = None,
        division: Union[Division, str, int, None] = None,
    ) -> "Team":
        """Create a team from its first observation."""
        team = cls()
        team.add_name(name, source)
        if tag:
            team.add_tag(tag, source)
        if division is not None:
            team.add_division(division, source)
        return team

    # =========================================================================
    # Mutators
    # =========================================================================

    def add_name(self, name: str, source: Source) -> NameEntry[str]:
        return self.names.add(name, source)

    def add_tag(
        self,
        tag: str,
        source: Source,
        placement: Optional[TagPlacement] = None,
    ) -> NameEntry[str]:
        """Record a clan tag; ``placement`` replaces the current placement if given."""
        entry = self.tags.add(tag, source)
        if placement is not None:
            self.tag_placement = placement
        return entry

    def infer_tag_placement(self, example_player_name: str) -> TagPlacement:
        """Update ``tag_placement`` from a tagged player name and return it."""
        tag = self.current_tag()
        if tag is not None:
            self.tag_placement = TagPlacement.infer(tag, example_player_name)
        return self.tag_placement

    def add_division(self, division: Union[Division, str, int], source: Source) -> NameEntry[Division]:
        return self.divisions.add(division, source)

    def add_battlefy_persistent_id(self, persistent_id: str, source: Source) -> NameEntry[str]:
        return self.battlefy.add_persistent_id(persistent_id, source)

    def add_twitter(self, handle: str, source: Source) -> NameEntry[str]:
        return self.twitter.add(handle, source)

    # =========================================================================
    # Accessors
    # =========================================================================

    @property
    def division(self) -> Division:
        return self.divisions.current_division

    @property
    def sources(self) -> tuple[Source, ...]:
        return canonical_sources(
            self.names.sources
            + self.tags.sources
            + self.divisions.sources
            + self.battlefy.sources
            + self.twitter.sources
        )

    def current_display_name(self) -> str:
        return self.names.current or UNKNOWN_TEAM

    def current_tag(self) -> Optional[str]:
        return self.tags.current

    def all_names(self) -> list[str]:
        return self.names.values

    def all_tags(self) -> list[str]:
        return self.tags.values

    def combine_tag(self, player_name: str, tag: Optional[str] = None) -> str:
        """Render a player name with this team's tag, per ``tag_placement``."""
        tag = tag or self.current_tag()
        if not tag:
            return player_name
        if self.tag_placement == TagPlacement.BACK:
            return player_name + tag
        if self.tag_placement == TagPlacement.SURROUNDING:
            return tag + player_name + tag
        return tag + player_name

    def members(self, store: "IdentityStore") -> list[tuple["Player", bool]]:
        """Players who list this team, with whether it is their current team."""
        return store.players_for_team(self.id)

    def __str__(self) -> str:
        tag = self.current_tag()
        prefix = f"{tag} " if tag else ""
        return f"{prefix}{self.current_display_name()} (Div {self.division})"

    # =========================================================================
    # Matching & Merge
    # =========================================================================

    def match(self, matcher: Matcher, resolver=None) -> FilterOptions:
        """Reasons this team matches the matcher's query."""
        result = (
            matcher.match_facet(self.names, FilterOptions.NAME, FilterOptions.NEAR_NAME)
            | matcher.match_facet(self.tags, FilterOptions.CLAN_TAG, FilterOptions.NEAR_CLAN_TAG)
            | self.battlefy.match(matcher)
            | self.twitter.match(matcher)
            | matcher.match_sources(self.sources)
        )
        if matcher.options.allows(FilterOptions.DIVISION) and self.division.is_known:
            if matcher.compare_persistent(str(self.division)) == Strength.EXACT:
                result |= FilterOptions.DIVISION
        return result

    def merge(self, other: "Team") -> "Team":
        """
        Combine with another record of the same team.

        Every facet is merged chronologically; the result keeps this team's
        id, and this team's tag placement unless it is unknown.
        """
        if type(other) is not type(self):
            raise MergeTypeError(f"Cannot merge Team with {type(other).__name__}")

        placement = self.tag_placement
        if placement == TagPlacement.UNKNOWN:
            placement = other.tag_placement

        return Team(
            id=self.id,
            names=self.names.merge(other.names),
            tags=self.tags.merge(other.tags),
            tag_placement=placement,
            divisions=self.divisions.merge(other.divisions),
            battlefy=self.battlefy.merge(other.battlefy),
            twitter=self.twitter.merge(other.twitter),
        )

    # =========================================================================
    # Serialization
    # =========================================================================

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": str(self.id),
            "names": self.names.to_dict(),
            "tags": self.tags.to_dict(),
            "tag_placement": self.tag_placement.value,
            "divisions": self.divisions.to_dict(),
            "battlefy": self.battlefy.to_dict(),
            "twitter": self.twitter.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Team":
        return cls(
            id=UUID(data["id"]),
            names=NameFacet.from_dict(data.get("names", [])),
            tags=NameFacet.from_dict(data.get("tags", [])),
            tag_placement=TagPlacement(data.get("tag_placement", TagPlacement.UNKNOWN.value)),
            divisions=DivisionHistory.from_dict(data.get("divisions", [])),
            battlefy=BattlefyTeamProfile.from_dict(data.get("battlefy", {})),
            twitter=TwitterFacet.from_dict(data.get("twitter", [])),
        )
