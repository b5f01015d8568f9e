"""
Player and team identities.

Key components:
- Player / Team: aggregates of sourced facets
- merge: combine two records of the same identity
- IdentityStore: owns aggregates by id and resolves team references
"""

from tagmatch.identity.merge import merge
from tagmatch.identity.players import Player
from tagmatch.identity.store import IdentityStore
from tagmatch.identity.teams import TagPlacement, Team

__all__ = [
    "IdentityStore",
    "Player",
    "TagPlacement",
    "Team",
    "merge",
]
