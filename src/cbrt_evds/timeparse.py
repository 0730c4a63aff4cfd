"""Detection and conversion of EVDS period strings."""

import re
import warnings
from collections.abc import Iterable

import pandas as pd
import structlog

from .errors import UnrecognizedTimeFormatWarning

logger = structlog.get_logger(__name__)

MISSING_MARKERS = frozenset({"", "ND", "null"})

ANNUAL_PATTERN = re.compile(r"^[0-9]{4}$")
QUARTERLY_PATTERN = re.compile(r"^[0-9]{4}-[QS][0-9]$")
MONTHLY_PATTERN = re.compile(r"^[0-9]{4}-[0-9]{1,2}$")
DAILY_PATTERN = re.compile(r"^[0-9]{2}-[0-9]{2}-[0-9]{4}$")


def _is_missing(value: object) -> bool:
    """Return True for null cells and EVDS missing-value markers."""
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() in MISSING_MARKERS
    return bool(pd.isna(value))


def first_valid(values: Iterable[object]) -> str | None:
    """Return the first non-missing element as a stripped string."""
    for value in values:
        if not _is_missing(value):
            return str(value).strip()
    return None


def _clean(values: Iterable[object]) -> pd.Series:
    """Return the column as stripped strings with missing markers set to None."""
    return pd.Series(
        [None if _is_missing(value) else str(value).strip() for value in values],
        dtype=object,
    )


def _to_years(cleaned: pd.Series) -> pd.Series:
    matched = cleaned.where(cleaned.str.fullmatch(ANNUAL_PATTERN.pattern, na=False))
    return pd.to_numeric(matched, errors="coerce").astype("Int64")


def _to_fractional_quarters(cleaned: pd.Series) -> pd.Series:
    matched = cleaned.where(cleaned.str.fullmatch(QUARTERLY_PATTERN.pattern, na=False))
    years = pd.to_numeric(matched.str.slice(0, 4), errors="coerce")
    steps = pd.to_numeric(matched.str.slice(6, 7), errors="coerce")
    return (years + 0.25 * (steps - 1)).astype(float)


def _mid_month_string(period: str) -> str:
    """Pin a ``YYYY-M`` period to the 15th to avoid month-end ambiguity."""
    year, month = period.split("-")
    return f"{year}-{int(month):02d}-15"


def _to_mid_month(cleaned: pd.Series) -> pd.Series:
    matched = cleaned.where(cleaned.str.fullmatch(MONTHLY_PATTERN.pattern, na=False))
    mid_month = matched.map(_mid_month_string, na_action="ignore")
    return pd.to_datetime(mid_month, format="%Y-%m-%d", errors="coerce")


def _to_days(cleaned: pd.Series) -> pd.Series:
    matched = cleaned.where(cleaned.str.fullmatch(DAILY_PATTERN.pattern, na=False))
    return pd.to_datetime(matched, format="%d-%m-%Y", errors="coerce")


# Priority order matters: the first pattern matching the sample wins.
TIME_SHAPES = (
    ("annual", ANNUAL_PATTERN, _to_years),
    ("quarterly", QUARTERLY_PATTERN, _to_fractional_quarters),
    ("monthly", MONTHLY_PATTERN, _to_mid_month),
    ("daily", DAILY_PATTERN, _to_days),
)


def detect_time_shape(sample: str | None) -> str | None:
    """Return the name of the shape class matching ``sample``, if any."""
    if sample is None:
        return None
    for name, pattern, _ in TIME_SHAPES:
        if pattern.match(sample):
            return name
    return None


def parse_time_column(values: Iterable[object]) -> pd.Series:
    """Convert a column of EVDS period strings into typed time values.

    Only the first non-missing value is inspected to pick the conversion,
    which is then applied to the whole column:

    * ``YYYY`` becomes an integer year.
    * ``YYYY-Q#`` / ``YYYY-S#`` becomes ``year + 0.25 * (# - 1)``.
    * ``YYYY-M`` / ``YYYY-MM`` becomes the 15th day of that month.
    * ``DD-MM-YYYY`` becomes that calendar date.

    Elements that do not fit the detected shape become missing. When the
    sample fits no shape the values are returned unchanged and an
    :class:`UnrecognizedTimeFormatWarning` is issued.
    """
    original = values if isinstance(values, pd.Series) else pd.Series(list(values), dtype=object)
    sample = first_valid(original)
    shape = detect_time_shape(sample)
    if shape is None:
        if sample is not None:
            logger.warning("time.unrecognized_format", sample=sample, length=len(original))
            warnings.warn(
                f"Unrecognized time format {sample!r}; column left unconverted.",
                UnrecognizedTimeFormatWarning,
                stacklevel=2,
            )
        return original

    cleaned = _clean(original)
    converter = next(conv for name, _, conv in TIME_SHAPES if name == shape)
    converted = converter(cleaned)
    converted.index = original.index
    converted.name = original.name

    lost = int(cleaned.notna().sum() - converted.notna().sum())
    if lost:
        logger.warning("time.mixed_shapes", shape=shape, unparsed=lost)
    logger.debug("time.parsed", shape=shape, length=len(converted))
    return converted


__all__ = ["MISSING_MARKERS", "detect_time_shape", "first_valid", "parse_time_column"]
