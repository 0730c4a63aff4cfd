"""Download and reshape EVDS observation tables."""

import re
from collections.abc import Iterable
from datetime import date

import click
import pandas as pd
import structlog
from attrs import define, field

from ..timeparse import parse_time_column
from . import parser
from .catalog import MetadataCatalog
from .client import EvdsHttpClient
from .endpoints import (
    DATE_COLUMN,
    DEFAULT_START_DATE,
    GROUP_DATA_RESOURCE,
    SERIES_DATA_RESOURCE,
    SERIES_DELIMITER,
    TIME_COLUMN,
    UNIXTIME_COLUMN,
    YEARWEEK_COLUMN,
)
from .models import AggregationMethod, Frequency

logger = structlog.get_logger(__name__)

WIRE_DATE_FORMAT = "%d-%m-%Y"
ISO_DATE_PATTERN = re.compile(r"^[0-9]{4}-[0-9]{2}-[0-9]{2}$")


def format_wire_date(value: str | date) -> str:
    """Convert ``YYYY-MM-DD`` strings or dates to the ``DD-MM-YYYY`` EVDS format.

    Strings in any other shape are passed through unchanged.
    """
    if isinstance(value, date):
        return value.strftime(WIRE_DATE_FORMAT)
    if not ISO_DATE_PATTERN.match(value):
        return value
    try:
        parsed = date.fromisoformat(value)
    except ValueError as exc:
        raise ValueError(f"Invalid date {value!r}; expected a real YYYY-MM-DD date.") from exc
    return parsed.strftime(WIRE_DATE_FORMAT)


def normalize_series_codes(codes: str | Iterable[str]) -> list[str]:
    """Return series codes with underscores replaced by dots."""
    if isinstance(codes, str):
        codes = [codes]
    return [code.replace("_", ".") for code in codes]


def _validate_frequency(freq: int | None) -> int | None:
    if freq is None:
        return None
    try:
        return int(Frequency(int(freq)))
    except ValueError as exc:
        raise ValueError(f"Unsupported frequency {freq!r}; expected an integer 1-8.") from exc


def _validate_aggregation(agg_type: str | None) -> str | None:
    if agg_type is None:
        return None
    try:
        return AggregationMethod(str(agg_type).lower()).value
    except ValueError as exc:
        valid = ", ".join(method.value for method in AggregationMethod)
        raise ValueError(f"Unsupported aggregation {agg_type!r}; choose one of: {valid}.") from exc


def shape_observations(
    frame: pd.DataFrame,
    *,
    dot_headers: bool,
    drop_all_missing_rows: bool,
) -> pd.DataFrame:
    """Turn a raw observation table into a ``time``-indexed value table."""
    frame = frame.drop(columns=[UNIXTIME_COLUMN], errors="ignore")
    frame = frame.rename(columns={DATE_COLUMN: TIME_COLUMN})
    if dot_headers:
        frame.columns = [name.replace("_", ".") for name in frame.columns]
    frame[TIME_COLUMN] = parse_time_column(frame[TIME_COLUMN])
    frame = frame.drop(columns=[YEARWEEK_COLUMN], errors="ignore")

    value_columns = [name for name in frame.columns if name != TIME_COLUMN]
    if drop_all_missing_rows and value_columns:
        before = len(frame)
        frame = frame.dropna(how="all", subset=value_columns)
        logger.debug("download.rows_dropped", dropped=before - len(frame))
    return frame.reset_index(drop=True)


@define(slots=True)
class SeriesDownloader:
    """Fetch observation data for EVDS series or whole data groups."""

    client: EvdsHttpClient = field(factory=EvdsHttpClient)
    catalog: MetadataCatalog | None = None

    def get_series_data(
        self,
        codes: str | Iterable[str],
        *,
        freq: int | None = None,
        agg_type: str | None = None,
        start_date: str | date = DEFAULT_START_DATE,
        end_date: str | date | None = None,
        drop_all_missing_rows: bool = True,
    ) -> pd.DataFrame:
        """Download one or more series into a single table.

        ``freq`` takes an ordinal from :class:`Frequency`; when it is lower
        than the native frequency, ``agg_type`` (see
        :class:`AggregationMethod`) picks the aggregation.
        """
        series_codes = normalize_series_codes(codes)
        if not series_codes:
            raise ValueError("At least one series code is required.")
        params = self._date_params(start_date, end_date)
        frequency = _validate_frequency(freq)
        if frequency is not None:
            params["frequency"] = frequency
        aggregation = _validate_aggregation(agg_type)
        if aggregation is not None:
            params["aggregationTypes"] = aggregation

        resource = SERIES_DATA_RESOURCE + SERIES_DELIMITER.join(series_codes)
        log = logger.bind(series=series_codes, **params)
        log.info("download.series_start")
        text = self.client.get_text(resource, params)
        frame = shape_observations(
            parser.parse_observations(text),
            dot_headers=True,
            drop_all_missing_rows=drop_all_missing_rows,
        )
        log.info("download.series_complete", rows=len(frame), columns=len(frame.columns) - 1)
        return frame

    def get_group_data(
        self,
        group_code: str,
        *,
        freq: int | None = None,
        start_date: str | date = DEFAULT_START_DATE,
        end_date: str | date | None = None,
        drop_all_missing_rows: bool = True,
    ) -> pd.DataFrame:
        """Download every series of a data group.

        Aggregation always uses the group's default method. When the catalog
        holds series metadata the group's series listing is echoed as well.
        """
        params = self._date_params(start_date, end_date)
        frequency = _validate_frequency(freq)
        if frequency is not None:
            params["frequency"] = frequency

        log = logger.bind(group_code=group_code, **params)
        log.info("download.group_start")
        text = self.client.get_text(GROUP_DATA_RESOURCE + group_code, params)
        frame = shape_observations(
            parser.parse_observations(text),
            dot_headers=False,
            drop_all_missing_rows=drop_all_missing_rows,
        )
        log.info("download.group_complete", rows=len(frame), columns=len(frame.columns) - 1)

        if self.catalog is not None and self.catalog.is_loaded:
            click.echo()
            click.echo(self.catalog.series_names(group_code).to_string(index=False))
        return frame

    @staticmethod
    def _date_params(start_date: str | date, end_date: str | date | None) -> dict[str, object]:
        if end_date is None:
            end_date = date.today()
        return {
            "startDate": format_wire_date(start_date),
            "endDate": format_wire_date(end_date),
        }


__all__ = [
    "SeriesDownloader",
    "format_wire_date",
    "normalize_series_codes",
    "shape_observations",
]
