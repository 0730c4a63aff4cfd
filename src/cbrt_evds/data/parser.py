"""Parsers for EVDS CSV responses."""

import csv
import io
from collections.abc import Iterable

import marshmallow as ma
import pandas as pd

from ..errors import MalformedResponseError
from .endpoints import DATA_NA_VALUES, DATE_COLUMN
from .models import (
    Category,
    CategorySchema,
    Group,
    GroupSchema,
    SeriesInfo,
    SeriesInfoSchema,
    required_headers,
)


def _normalize_key(key: str) -> str:
    """Strip whitespace and a leading byte-order mark from a header name."""
    return key.strip().lstrip("\ufeff")


def _read_csv(text: str, *, resource: str, required: Iterable[str]) -> list[dict[str, str]]:
    """Read a comma-separated payload into cleaned dictionaries.

    Raises :class:`MalformedResponseError` when any required header is absent.
    """
    reader = csv.DictReader(io.StringIO(text))
    headers = [_normalize_key(name) for name in reader.fieldnames or []]
    missing = [name for name in required if name not in headers]
    if missing:
        raise MalformedResponseError(
            f"{resource} response is missing expected columns: {', '.join(missing)}"
        )
    rows: list[dict[str, str]] = []
    for row in reader:
        if not row:
            continue
        # csv collects surplus cells of an overlong row under the None key.
        if None in row:
            raise MalformedResponseError(
                f"{resource} response row {reader.line_num} has more cells than headers"
            )
        # Skip bogus blank lines that may appear at EOF.
        if all(value is None or value.strip() == "" for value in row.values()):
            continue
        rows.append(
            {_normalize_key(key): (value or "").strip() for key, value in row.items() if key}
        )
    return rows


def _load_rows(schema: ma.Schema, text: str, *, resource: str) -> list:
    rows = _read_csv(text, resource=resource, required=required_headers(schema))
    try:
        return schema.load(rows, many=True)
    except ma.ValidationError as exc:
        raise MalformedResponseError(
            f"{resource} response has invalid values: {exc.messages}"
        ) from exc


def parse_categories(text: str) -> list[Category]:
    """Parse the category listing."""
    return _load_rows(CategorySchema(), text, resource="categories")


def parse_groups(text: str) -> list[Group]:
    """Parse the data group listing with canonical frequencies and ASCII names."""
    return _load_rows(GroupSchema(), text, resource="datagroups")


def parse_series_list(text: str) -> list[SeriesInfo]:
    """Parse the series listing of a single data group."""
    return _load_rows(SeriesInfoSchema(), text, resource="serieList")


def parse_observations(text: str) -> pd.DataFrame:
    """Parse an observation table, keeping the date column as text."""
    try:
        frame = pd.read_csv(
            io.StringIO(text),
            na_values=DATA_NA_VALUES,
            dtype={DATE_COLUMN: str},
        )
    except pd.errors.EmptyDataError as exc:
        raise MalformedResponseError("Observation response is empty") from exc
    frame.columns = [_normalize_key(str(name)) for name in frame.columns]
    if DATE_COLUMN not in frame.columns:
        raise MalformedResponseError(
            f"Observation response is missing the {DATE_COLUMN!r} column"
        )
    return frame


__all__ = [
    "parse_categories",
    "parse_groups",
    "parse_observations",
    "parse_series_list",
]
