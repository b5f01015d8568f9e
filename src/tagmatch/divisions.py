"""
League divisions.

Divisions are numbered from the top: "X" is division 0, then 1, 2, ...
Unknown is -1. Importers see strings like "X", "4" or "8U" (a split
division), which all parse to the leading division number.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from tagmatch.errors import InvalidFacetValueError
from tagmatch.facets import SourcedFacet

UNKNOWN_DIVISION = -1
X_DIVISION = 0


@dataclass(frozen=True, order=True)
class Division:
    """A division number; lower is stronger."""

    value: int = UNKNOWN_DIVISION

    @classmethod
    def parse(cls, raw: Optional[str]) -> "Division":
        """
        Parse a division label.

        Examples:
            >>> Division.parse("X")
            Division(value=0)
            >>> Division.parse("8U")
            Division(value=8)
            >>> Division.parse("")
            Division(value=-1)
        """
        if raw is None or not str(raw).strip():
            return cls(UNKNOWN_DIVISION)

        text = str(raw).strip()
        if text.upper() == "X":
            return cls(X_DIVISION)
        if text.isdigit():
            return cls(int(text))
        if text[0].isdigit():
            return cls(int(text[0]))
        return cls(UNKNOWN_DIVISION)

    @property
    def is_known(self) -> bool:
        return self.value != UNKNOWN_DIVISION

    def __str__(self) -> str:
        if self.value == UNKNOWN_DIVISION:
            return "Unknown"
        if self.value == X_DIVISION:
            return "X"
        return str(self.value)


class DivisionHistory(SourcedFacet[Division]):
    """Divisions a team has played in, most recent first."""

    def validate_value(self, value: Any) -> Division:
        if isinstance(value, Division):
            return value
        if isinstance(value, int):
            return Division(value)
        if isinstance(value, str):
            return Division.parse(value)
        raise InvalidFacetValueError(f"Not a division: {value!r}")

    def value_to_json(self, value: Division) -> int:
        return value.value

    @property
    def current_division(self) -> Division:
        return self.current or Division()
