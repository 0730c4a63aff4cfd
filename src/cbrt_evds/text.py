"""ASCII folding for Turkish characters found in EVDS metadata."""

from collections.abc import Iterable

import pandas as pd

# Applied in order; no target letter is the source of a later rule.
ASCII_SUBSTITUTIONS: tuple[tuple[str, str], ...] = (
    ("Ğ", "G"),
    ("ğ", "g"),
    ("Ş", "S"),
    ("ş", "s"),
    ("İ", "I"),
    ("ı", "i"),
    ("Ü", "U"),
    ("ü", "u"),
    ("Ö", "O"),
    ("ö", "o"),
    ("Ç", "C"),
    ("ç", "c"),
)


def normalize_ascii(value: str) -> str:
    """Replace Turkish letters with their closest ASCII counterpart.

    Non-string inputs (for example ``NaN`` cells) are returned untouched.
    """
    if not isinstance(value, str):
        return value
    for source, target in ASCII_SUBSTITUTIONS:
        value = value.replace(source, target)
    return value


def normalize_column(values: Iterable[str]) -> pd.Series:
    """Apply :func:`normalize_ascii` to every element of a column."""
    series = values if isinstance(values, pd.Series) else pd.Series(list(values), dtype=object)
    return series.map(normalize_ascii)


__all__ = ["ASCII_SUBSTITUTIONS", "normalize_ascii", "normalize_column"]
