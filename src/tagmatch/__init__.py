"""
tagmatch - Player and Team Identity Matching

Aggregates identity records of competitive players and teams seen across
many inconsistent sources (tournament sign-ups, spreadsheets, social
profiles) and answers fuzzy "who is this?" queries with a ranked,
explainable reason instead of a yes/no.

Main components:
- sources: Provenance tokens (where and when a fact was seen)
- facets: Most-recent-first value lists with their sources
- socials: Platform handles and ids
- matching: Near-character string matching and match reasons
- identity: Player / Team aggregates, merging and the identity store
"""

from tagmatch.identity import IdentityStore, Player, TagPlacement, Team, merge
from tagmatch.matching import FilterOptions, MatchOptions, Matcher, match_candidates
from tagmatch.sources import Source

__version__ = "0.1.0"

__all__ = [
    "FilterOptions",
    "IdentityStore",
    "MatchOptions",
    "Matcher",
    "Player",
    "Source",
    "TagPlacement",
    "Team",
    "match_candidates",
    "merge",
]
