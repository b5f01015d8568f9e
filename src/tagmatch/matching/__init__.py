"""
Query matching.

Key components:
- FilterOptions: bitmask of match reasons
- MatchOptions: case / lookalike / regex switches for a query
- Matcher: a prepared query evaluated against strings, facets and aggregates
- match_candidates: match and rank a list of Players or Teams
"""

from tagmatch.matching.matcher import (
    Matcher,
    Strength,
    match_candidates,
    match_string,
    rank_matches,
)
from tagmatch.matching.normalize import fold_confusables, normalize
from tagmatch.matching.options import FilterOptions, MatchOptions, MatchRank, rank

__all__ = [
    "FilterOptions",
    "MatchOptions",
    "MatchRank",
    "Matcher",
    "Strength",
    "fold_confusables",
    "match_candidates",
    "match_string",
    "normalize",
    "rank",
    "rank_matches",
]
