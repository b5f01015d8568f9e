"""
Player aggregate.

A Player is the merged view of every observation of one person: names,
team affiliations and platform accounts, each a sourced facet ordered most
recent first. Team affiliation is stored as team ids; the Team records live
in the IdentityStore and are looked up through a resolver when matching.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional, Union
from uuid import UUID, uuid4

from tagmatch.errors import MergeTypeError
from tagmatch.facets import NameEntry, NameFacet, TeamHistory
from tagmatch.matching.matcher import Matcher, TeamResolver
from tagmatch.matching.options import FilterOptions
from tagmatch.socials import (
    BattlefyProfile,
    DiscordProfile,
    FriendCodeFacet,
    PlusMembershipFacet,
    SendouFacet,
    TwitchFacet,
    TwitterFacet,
)
from tagmatch.sources import Source, canonical_sources

UNKNOWN_PLAYER = "(Unnamed Player)"


@dataclass(eq=True)
class Player:
    """
    A player identity observed across sources.

    Attributes:
        id: Stable identifier (kept by the surviving side of a merge)
        names: In-game / registration names, most recent first
        teams: Team ids, most recent first; the front entry is the current team
        friend_codes: Console friend codes
        battlefy: Tournament-platform slugs, usernames and persistent ids
        discord: Chat-platform ids and usernames
        twitch: Streaming handles
        twitter: Social handles
        sendou: Community-site handles
        plus: Plus-server tier history
    """

    id: UUID = field(default_factory=uuid4)
    names: NameFacet = field(default_factory=NameFacet)
    teams: TeamHistory = field(default_factory=TeamHistory)
    friend_codes: FriendCodeFacet = field(default_factory=FriendCodeFacet)
    battlefy: BattlefyProfile = field(default_factory=BattlefyProfile)
    discord: DiscordProfile = field(default_factory=DiscordProfile)
    twitch: TwitchFacet = field(default_factory=TwitchFacet)
    twitter: TwitterFacet = field(default_factory=TwitterFacet)
    sendou: SendouFacet = field(default_factory=SendouFacet)
    plus: PlusMembershipFacet = field(default_factory=PlusMembershipFacet)

    @classmethod
    def create(
        cls,
        name: str,
        source: Source,
        team_id: Union[UUID, str, None] = None,
    ) -> "Player":
        """Create a player from its first observation."""
        player = cls()
        player.add_name(name, source)
        if team_id is not None:
            player.add_team(team_id, source)
        return player

    # =========================================================================
    # Mutators
    # =========================================================================

    def add_name(self, name: str, source: Source) -> NameEntry[str]:
        return self.names.add(name, source)

    def add_team(self, team_id: Union[UUID, str], source: Source) -> NameEntry[UUID]:
        return self.teams.add(team_id, source)

    def add_friend_code(self, code: Union[str, int], source: Source) -> NameEntry[str]:
        """Record a friend code; any separator style is accepted."""
        return self.friend_codes.add(code, source)

    def add_battlefy_slug(self, slug: str, source: Source) -> NameEntry[str]:
        return self.battlefy.add_slug(slug, source)

    def add_battlefy_username(self, username: str, source: Source) -> NameEntry[str]:
        return self.battlefy.add_username(username, source)

    def add_battlefy_persistent_id(self, persistent_id: str, source: Source) -> NameEntry[str]:
        return self.battlefy.add_persistent_id(persistent_id, source)

    def add_discord_id(self, discord_id: str, source: Source) -> NameEntry[str]:
        return self.discord.add_id(discord_id, source)

    def add_discord_username(self, username: str, source: Source) -> NameEntry[str]:
        return self.discord.add_username(username, source)

    def add_twitch(self, handle: str, source: Source) -> NameEntry[str]:
        return self.twitch.add(handle, source)

    def add_twitter(self, handle: str, source: Source) -> NameEntry[str]:
        return self.twitter.add(handle, source)

    def add_sendou(self, handle: str, source: Source) -> NameEntry[str]:
        return self.sendou.add(handle, source)

    def add_plus_membership(self, level: Optional[int], source: Source) -> NameEntry[str]:
        return self.plus.add_level(level, source)

    # =========================================================================
    # Accessors
    # =========================================================================

    @property
    def current_team(self) -> Optional[UUID]:
        return self.teams.current

    @property
    def old_teams(self) -> list[UUID]:
        return self.teams.values[1:]

    @property
    def sources(self) -> tuple[Source, ...]:
        return canonical_sources(
            self.names.sources
            + self.teams.sources
            + self.friend_codes.sources
            + self.battlefy.sources
            + self.discord.sources
            + self.twitch.sources
            + self.twitter.sources
            + self.sendou.sources
            + self.plus.sources
        )

    def current_display_name(self) -> str:
        return self.names.current or UNKNOWN_PLAYER

    def all_names(self) -> list[str]:
        return self.names.values

    def all_known_names(self) -> list[str]:
        """Names plus every display handle, without duplicates, in facet order."""
        seen: dict[str, None] = {}
        for value in (
            self.names.values
            + self.battlefy.usernames.values
            + self.discord.usernames.values
            + self.sendou.values
            + self.twitch.values
            + self.twitter.values
        ):
            seen.setdefault(value, None)
        return list(seen)

    def __str__(self) -> str:
        return self.current_display_name()

    # =========================================================================
    # Matching & Merge
    # =========================================================================

    def match(self, matcher: Matcher, resolver: Optional[TeamResolver] = None) -> FilterOptions:
        """Reasons this player matches the matcher's query."""
        result = (
            matcher.match_facet(self.names, FilterOptions.NAME, FilterOptions.NEAR_NAME)
            | self.friend_codes.match(matcher)
            | self.battlefy.match(matcher)
            | self.discord.match(matcher)
            | self.twitch.match(matcher)
            | self.twitter.match(matcher)
            | self.sendou.match(matcher)
            | matcher.match_sources(self.sources)
        )
        if resolver is not None and matcher.options.allows(FilterOptions.TEAM):
            result |= self._match_affiliation(matcher, resolver)
        return result

    def _match_affiliation(self, matcher: Matcher, resolver: TeamResolver) -> FilterOptions:
        # Any team the player has been on counts, not only the current one
        for team_id in self.teams.values:
            team = resolver.resolve(team_id)
            if team is None:
                continue
            hit = matcher.match_values(
                team.names.values + team.tags.values,
                FilterOptions.TEAM,
                FilterOptions.TEAM,
            )
            if hit:
                return FilterOptions.TEAM
        return FilterOptions.NONE

    def merge(self, other: "Player") -> "Player":
        """
        Combine with another record of the same person.

        Every facet is merged chronologically; the result keeps this
        player's id.
        """
        if type(other) is not type(self):
            raise MergeTypeError(f"Cannot merge Player with {type(other).__name__}")

        return Player(
            id=self.id,
            names=self.names.merge(other.names),
            teams=self.teams.merge(other.teams),
            friend_codes=self.friend_codes.merge(other.friend_codes),
            battlefy=self.battlefy.merge(other.battlefy),
            discord=self.discord.merge(other.discord),
            twitch=self.twitch.merge(other.twitch),
            twitter=self.twitter.merge(other.twitter),
            sendou=self.sendou.merge(other.sendou),
            plus=self.plus.merge(other.plus),
        )

    # =========================================================================
    # Serialization
    # =========================================================================

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": str(self.id),
            "names": self.names.to_dict(),
            "teams": self.teams.to_dict(),
            "friend_codes": self.friend_codes.to_dict(),
            "battlefy": self.battlefy.to_dict(),
            "discord": self.discord.to_dict(),
            "twitch": self.twitch.to_dict(),
            "twitter": self.twitter.to_dict(),
            "sendou": self.sendou.to_dict(),
            "plus": self.plus.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Player":
        return cls(
            id=UUID(data["id"]),
            names=NameFacet.from_dict(data.get("names", [])),
            teams=TeamHistory.from_dict(data.get("teams", [])),
            friend_codes=FriendCodeFacet.from_dict(data.get("friend_codes", [])),
            battlefy=BattlefyProfile.from_dict(data.get("battlefy", {})),
            discord=DiscordProfile.from_dict(data.get("discord", {})),
            twitch=TwitchFacet.from_dict(data.get("twitch", [])),
            twitter=TwitterFacet.from_dict(data.get("twitter", [])),
            sendou=SendouFacet.from_dict(data.get("sendou", [])),
            plus=PlusMembershipFacet.from_dict(data.get("plus", [])),
        )
