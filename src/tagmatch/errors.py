"""
Exception types raised by tagmatch.

Every failure in the core is scoped to the single call that raised it.
Malformed regex queries are not errors at all: the matcher treats them as
"no match".
"""


class TagMatchError(Exception):
    """Base class for tagmatch errors."""


class InvalidSourceError(TagMatchError, ValueError):
    """A Source was constructed without a usable name."""


class InvalidFacetValueError(TagMatchError, ValueError):
    """A facet was given an empty name, tag, id or handle."""


class MergeTypeError(TagMatchError, TypeError):
    """Two aggregates of different identity types were merged."""


class UnknownIdentityError(TagMatchError, KeyError):
    """An id was looked up in an IdentityStore that does not hold it."""
