"""
In-memory arena of players and teams.

The store owns every Player and Team by id and is the resolver players use
to turn team ids into Teams while matching. It is the single place where
merges are applied, so references between aggregates stay consistent:

- merge_players replaces the kept record with the merged one and drops the other
- merge_teams does the same for teams, then rewrites every player's
  reference to the dropped team id

The store does not lock. Matching only reads, so concurrent queries are
fine; callers must serialize adds and merges.

Usage:
    store = IdentityStore()
    team = store.add_team(Team.create("Kraken Paradise", source, tag="kp"))
    store.add_player(Player.create("Slushie", source, team_id=team.id))

    for player, reasons in store.match_players("slushie"):
        print(player, reasons)
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Optional, Union
from uuid import UUID

from tagmatch.errors import UnknownIdentityError
from tagmatch.identity.merge import merge
from tagmatch.identity.players import Player
from tagmatch.identity.teams import Team
from tagmatch.matching.matcher import match_candidates
from tagmatch.matching.options import FilterOptions, MatchOptions

logger = logging.getLogger(__name__)

IdArg = Union[UUID, str]


def _as_id(value: IdArg) -> UUID:
    return value if isinstance(value, UUID) else UUID(str(value))


class IdentityStore:
    """Players and teams keyed by id, in insertion order."""

    def __init__(
        self,
        players: Iterable[Player] = (),
        teams: Iterable[Team] = (),
    ):
        self._players: dict[UUID, Player] = {}
        self._teams: dict[UUID, Team] = {}
        for team in teams:
            self.add_team(team)
        for player in players:
            self.add_player(player)

    def __repr__(self) -> str:
        return f"<IdentityStore(players={len(self._players)}, teams={len(self._teams)})>"

    # =========================================================================
    # Records
    # =========================================================================

    def add_player(self, player: Player) -> Player:
        """Add or replace a player (keyed by ``player.id``)."""
        self._players[player.id] = player
        return player

    def add_team(self, team: Team) -> Team:
        """Add or replace a team (keyed by ``team.id``)."""
        self._teams[team.id] = team
        return team

    def get_player(self, player_id: IdArg) -> Player:
        """
        Raises:
            UnknownIdentityError: If no player has this id
        """
        try:
            return self._players[_as_id(player_id)]
        except (KeyError, ValueError):
            raise UnknownIdentityError(f"Player {player_id} not found") from None

    def get_team(self, team_id: IdArg) -> Team:
        """
        Raises:
            UnknownIdentityError: If no team has this id
        """
        try:
            return self._teams[_as_id(team_id)]
        except (KeyError, ValueError):
            raise UnknownIdentityError(f"Team {team_id} not found") from None

    def resolve(self, team_id: Optional[IdArg]) -> Optional[Team]:
        """Team for ``team_id``, or None when it is unknown."""
        if team_id is None:
            return None
        try:
            return self.get_team(team_id)
        except UnknownIdentityError:
            return None

    @property
    def players(self) -> list[Player]:
        return list(self._players.values())

    @property
    def teams(self) -> list[Team]:
        return list(self._teams.values())

    def players_for_team(self, team_id: IdArg) -> list[tuple[Player, bool]]:
        """
        Every player who has been on a team.

        Returns:
            (player, is_current) pairs in store order, where ``is_current``
            says the team is the player's current team
        """
        team_id = _as_id(team_id)
        return [
            (player, player.current_team == team_id)
            for player in self._players.values()
            if team_id in player.teams
        ]

    # =========================================================================
    # Matching
    # =========================================================================

    def match_players(
        self,
        query: Optional[str],
        options: Optional[MatchOptions] = None,
    ) -> list[tuple[Player, FilterOptions]]:
        """Ranked player matches, with team affiliation resolved through this store."""
        return match_candidates(query, options, self.players, resolver=self)

    def match_teams(
        self,
        query: Optional[str],
        options: Optional[MatchOptions] = None,
    ) -> list[tuple[Team, FilterOptions]]:
        return match_candidates(query, options, self.teams)

    # =========================================================================
    # Merging
    # =========================================================================

    def merge_players(self, keep_id: IdArg, drop_id: IdArg) -> Player:
        """
        Merge two player records into one.

        Use this when you discover two records refer to the same person.
        The merged record keeps ``keep_id``; the other record is removed.

        Args:
            keep_id: Player id to keep
            drop_id: Player id to merge in (will be removed)

        Returns:
            The merged player

        Raises:
            UnknownIdentityError: If either player doesn't exist
        """
        keep = self.get_player(keep_id)
        drop = self.get_player(drop_id)
        if keep.id == drop.id:
            return keep

        merged = merge(keep, drop)
        self._players[keep.id] = merged
        del self._players[drop.id]

        logger.info(
            "Merged player %s (%s) into %s (%s)",
            drop.id, drop.current_display_name(), keep.id, merged.current_display_name(),
        )
        return merged

    def merge_teams(self, keep_id: IdArg, drop_id: IdArg) -> Team:
        """
        Merge two team records into one.

        Every player that referenced the dropped team now references the
        kept one, with the same sources, so current/old team order is
        preserved.

        Raises:
            UnknownIdentityError: If either team doesn't exist
        """
        keep = self.get_team(keep_id)
        drop = self.get_team(drop_id)
        if keep.id == drop.id:
            return keep

        merged = merge(keep, drop)
        self._teams[keep.id] = merged
        del self._teams[drop.id]

        moved = 0
        for player in self._players.values():
            if player.teams.replace(drop.id, keep.id):
                moved += 1

        logger.info(
            "Merged team %s (%s) into %s (%s), %d player references moved",
            drop.id, drop.current_display_name(), keep.id, merged.current_display_name(), moved,
        )
        return merged

    # =========================================================================
    # Serialization
    # =========================================================================

    def to_dict(self) -> dict[str, Any]:
        return {
            "players": [player.to_dict() for player in self._players.values()],
            "teams": [team.to_dict() for team in self._teams.values()],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "IdentityStore":
        return cls(
            players=[Player.from_dict(item) for item in data.get("players", [])],
            teams=[Team.from_dict(item) for item in data.get("teams", [])],
        )
