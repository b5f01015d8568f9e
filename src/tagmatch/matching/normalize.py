"""
String normalization for matching.

Players love decorating their names: Cyrillic and Greek letters that look
Latin, fullwidth forms, accents, digits standing in for letters. With
near-character recognition on, both query and candidate are folded to a
canonical representative so that visually indistinguishable strings compare
equal:

    "Ѕрlаt" (Cyrillic) -> "splat"
    "Ｓｐｌａｔ" (fullwidth) -> "splat"
    "Splät" -> "splat"
    "5pl4t" -> "splat"

Normalization steps:
1. Case-fold (when ignoring case)
2. NFKD decomposition (fullwidth and compatibility forms become ASCII)
3. Strip combining marks (accents)
4. Map lookalike characters through CONFUSABLES
5. Collapse runs of whitespace
"""

from __future__ import annotations

import unicodedata
from functools import lru_cache

# Lookalike character -> canonical representative.
# Upper-case entries only matter for case-sensitive matching; case-folded
# input only ever reaches the lower-case entries.
CONFUSABLES: dict[str, str] = {
    # Cyrillic capitals
    "А": "A", "В": "B", "Е": "E", "Ѕ": "S", "І": "I", "Ј": "J", "К": "K",
    "М": "M", "Н": "H", "О": "O", "Р": "P", "С": "C", "Т": "T", "Х": "X",
    "У": "Y", "Ү": "Y", "Ԁ": "D", "Ԛ": "Q", "Ԝ": "W",
    # Cyrillic small
    "а": "a", "в": "b", "е": "e", "ѕ": "s", "і": "i", "ј": "j", "к": "k",
    "м": "m", "н": "h", "о": "o", "р": "p", "с": "c", "т": "t", "х": "x",
    "у": "y", "ү": "y", "ԁ": "d", "ԛ": "q", "ԝ": "w", "ɡ": "g", "һ": "h",
    "ѵ": "v", "ӏ": "l",
    # Greek capitals
    "Α": "A", "Β": "B", "Ε": "E", "Ζ": "Z", "Η": "H", "Ι": "I", "Κ": "K",
    "Μ": "M", "Ν": "N", "Ο": "O", "Ρ": "P", "Τ": "T", "Υ": "Y", "Χ": "X",
    # Greek small
    "α": "a", "β": "b", "γ": "y", "ε": "e", "η": "n", "ι": "i", "κ": "k",
    "ν": "v", "ο": "o", "ρ": "p", "τ": "t", "υ": "u", "χ": "x", "ω": "w",
    "ς": "s", "σ": "o",
    # Latin lookalikes and ligature-ish letters
    "ı": "i", "ȷ": "j", "ł": "l", "đ": "d", "ø": "o", "ß": "ss", "æ": "ae",
    "œ": "oe", "ð": "d", "þ": "p", "ƒ": "f",
    # Digits and symbols standing in for letters
    "0": "o", "1": "l", "|": "l", "!": "i", "3": "e", "4": "a", "5": "s",
    "$": "s", "@": "a", "7": "t",
}

_TRANSLATION = str.maketrans(CONFUSABLES)


def strip_marks(value: str) -> str:
    """Decompose compatibility forms and drop combining marks."""
    decomposed = unicodedata.normalize("NFKD", value)
    return "".join(
        char for char in decomposed
        if not unicodedata.combining(char)
    )


@lru_cache(maxsize=8192)
def fold_confusables(value: str) -> str:
    """
    Map every lookalike character to its canonical representative.

    Examples:
        >>> fold_confusables("Ѕрlаt")
        'Splat'
        >>> fold_confusables("Ｓｐｌａｔ")
        'Splat'
    """
    folded = strip_marks(value).translate(_TRANSLATION)
    return " ".join(folded.split())


def normalize(value: str, ignore_case: bool = True, near_characters: bool = True) -> str:
    """
    Normalize a string for comparison.

    Args:
        value: Raw query or candidate string
        ignore_case: Case-fold first
        near_characters: Apply confusable folding

    Returns:
        The normalized string ("" for empty input)
    """
    if not value:
        return ""
    if ignore_case:
        value = value.casefold()
    if near_characters:
        value = fold_confusables(value)
        if ignore_case:
            # NFKD can surface new upper-case letters (e.g. from letterlike symbols)
            value = value.casefold()
    return value
