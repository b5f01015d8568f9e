"""
Merging two records of the same identity.

Each aggregate type implements ``merge(other)``; this module is the single
entry point that checks the pair is mergeable and logs what happened.
"""

from __future__ import annotations

import logging
from typing import TypeVar

from tagmatch.errors import MergeTypeError
from tagmatch.identity.players import Player
from tagmatch.identity.teams import Team

logger = logging.getLogger(__name__)

A = TypeVar("A", Player, Team)

MERGEABLE_TYPES = (Player, Team)


def merge(a: A, b: A) -> A:
    """
    Merge ``b`` into a copy of ``a``.

    Neither input is modified. The result keeps ``a``'s id; every facet is
    combined with the chronology-safe facet merge, so the most recent value
    across both records ends up current.

    Raises:
        MergeTypeError: If the two records are not the same aggregate type
    """
    if type(a) is not type(b):
        raise MergeTypeError(
            f"Cannot merge {type(a).__name__} with {type(b).__name__}"
        )
    if not isinstance(a, MERGEABLE_TYPES):
        raise MergeTypeError(f"{type(a).__name__} is not a mergeable identity")

    merged = a.merge(b)
    logger.debug(
        "Merged %s %s into %s (%s)",
        type(a).__name__, b.id, a.id, merged.current_display_name(),
    )
    return merged
