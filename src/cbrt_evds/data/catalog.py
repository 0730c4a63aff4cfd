"""In-memory catalog of EVDS categories, data groups, and series."""

import textwrap
import threading
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor

import click
import pandas as pd
import structlog
from attrs import asdict, define, field

from ..errors import CatalogNotLoadedError
from ..text import normalize_column
from . import parser
from .client import EvdsHttpClient
from .endpoints import (
    ARCHIVE_MARKER,
    ARCHIVE_TOPIC,
    CATEGORIES_RESOURCE,
    DATAGROUPS_RESOURCE,
    SERIES_LIST_RESOURCE,
    UNASSIGNED_CATEGORY,
    collapse_weekly,
    frequency_english,
    frequency_ordinal,
)
from .models import Category, Group, SeriesInfo

logger = structlog.get_logger(__name__)

CATEGORY_COLUMNS = ["category_id", "topic"]
GROUP_COLUMNS = [
    "category_id",
    "group_code",
    "group_name",
    "frequency",
    "source",
    "source_link",
    "note",
    "revision_policy_link",
    "upper_note",
    "application_link",
]
SERIES_COLUMNS = [
    "series_code",
    "series_name",
    "group_code",
    "start",
    "end",
    "agg_method",
    "freq_name",
    "tag",
]
CATALOG_COLUMNS = [
    "category_id",
    "topic",
    "group_code",
    "group_name",
    "frequency",
    "series_code",
    "series_name",
    "start",
    "end",
    "agg_method",
    "freq_name",
    "tag",
]
SERIES_NAME_COLUMNS = ["series_code", "series_name", "agg_method"]

INFO_WIDTH = 80
NBSP = "\u00a0"


def categories_to_frame(categories: Sequence[Category]) -> pd.DataFrame:
    """Tabulate category records."""
    frame = pd.DataFrame([asdict(category) for category in categories], columns=CATEGORY_COLUMNS)
    frame["category_id"] = frame["category_id"].astype("Int64")
    return frame


def groups_to_frame(groups: Sequence[Group]) -> pd.DataFrame:
    """Tabulate group records using catalog column names."""
    rows = [
        {
            "category_id": group.category_id,
            "group_code": group.code,
            "group_name": group.name,
            "frequency": group.frequency,
            "source": group.source,
            "source_link": group.source_link,
            "note": group.note,
            "revision_policy_link": group.revision_policy_link,
            "upper_note": group.upper_note,
            "application_link": group.application_link,
        }
        for group in groups
    ]
    frame = pd.DataFrame(rows, columns=GROUP_COLUMNS)
    frame["category_id"] = frame["category_id"].astype("Int64")
    frame["frequency"] = frame["frequency"].astype("Int64")
    return frame


def series_to_frame(series: Sequence[SeriesInfo]) -> pd.DataFrame:
    """Tabulate series records, translating native frequency labels to English."""
    rows = [
        {
            "series_code": item.code,
            "series_name": item.name,
            "group_code": item.group_code,
            "start": item.start,
            "end": item.end,
            "agg_method": item.agg_method,
            "freq_name": frequency_english(frequency_ordinal(collapse_weekly(item.freq_label))),
            "tag": item.tag,
        }
        for item in series
    ]
    return pd.DataFrame(rows, columns=SERIES_COLUMNS)


def join_catalog(
    categories: pd.DataFrame, groups: pd.DataFrame, series: pd.DataFrame
) -> pd.DataFrame:
    """Left-join series onto groups onto categories, one row per series."""
    topics = categories.drop_duplicates("category_id")
    enriched_groups = groups.merge(topics, on="category_id", how="left")
    group_fields = enriched_groups[
        ["category_id", "topic", "group_code", "group_name", "frequency"]
    ].drop_duplicates("group_code")
    catalog = series.merge(group_fields, on="group_code", how="left")[CATALOG_COLUMNS].copy()

    catalog["topic"] = catalog["topic"].astype(object)
    unassigned = catalog["category_id"].eq(UNASSIGNED_CATEGORY).fillna(False).astype(bool)
    archive_named = catalog["group_name"].map(
        lambda name: isinstance(name, str) and ARCHIVE_MARKER in name
    )
    catalog.loc[unassigned & archive_named.astype(bool), "topic"] = ARCHIVE_TOPIC

    catalog["group_name"] = normalize_column(catalog["group_name"])
    catalog["series_name"] = normalize_column(catalog["series_name"])
    catalog["tag"] = catalog["tag"].str.replace(NBSP, "", regex=False)
    return catalog.reset_index(drop=True)


@define(slots=True)
class MetadataCatalog:
    """Explicit handle on the EVDS metadata fetched for a session.

    Tables are fetched lazily and cached on the instance; call :meth:`load`
    once to build everything up front.
    """

    client: EvdsHttpClient = field(factory=EvdsHttpClient)
    categories: list[Category] | None = None
    groups: list[Group] | None = None
    series: pd.DataFrame | None = field(default=None, repr=False)
    _lock: threading.Lock = field(factory=threading.Lock, init=False, repr=False)

    def fetch_categories(self) -> list[Category]:
        """Fetch the category listing and cache it on the catalog."""
        text = self.client.get_text(CATEGORIES_RESOURCE)
        self.categories = parser.parse_categories(text)
        logger.info("catalog.categories_loaded", count=len(self.categories))
        return self.categories

    def fetch_groups(self) -> list[Group]:
        """Fetch the data group listing and cache it on the catalog."""
        text = self.client.get_text(DATAGROUPS_RESOURCE, {"mode": 0})
        self.groups = parser.parse_groups(text)
        logger.info("catalog.groups_loaded", count=len(self.groups))
        return self.groups

    def fetch_group_series(self, group_code: str) -> list[SeriesInfo]:
        """Fetch the series listing of one data group."""
        log = logger.bind(group_code=group_code)
        log.debug("catalog.group_series_fetch")
        text = self.client.get_text(SERIES_LIST_RESOURCE, {"code": group_code})
        series = parser.parse_series_list(text)
        log.debug("catalog.group_series_loaded", count=len(series))
        return series

    def fetch_all_series(self, *, max_workers: int = 1) -> pd.DataFrame:
        """Fetch every group's series and join them into the enriched catalog.

        One request is issued per distinct group code. With ``max_workers``
        above one the requests run on a thread pool; results are still
        concatenated in group order.
        """
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1.")
        if self.categories is None:
            self.fetch_categories()
        if self.groups is None:
            self.fetch_groups()
        group_codes = list(dict.fromkeys(group.code for group in self.groups or []))
        log = logger.bind(groups=len(group_codes), max_workers=max_workers)
        log.info("catalog.series_fetch_start")

        if max_workers == 1:
            batches = [self.fetch_group_series(code) for code in group_codes]
        else:
            with ThreadPoolExecutor(max_workers=max_workers) as executor:
                batches = list(executor.map(self.fetch_group_series, group_codes))
        series = [item for batch in batches for item in batch]

        self.series = join_catalog(
            categories_to_frame(self.categories or []),
            groups_to_frame(self.groups or []),
            series_to_frame(series),
        )
        log.info("catalog.series_loaded", count=len(self.series))
        return self.series

    def load(self, *, max_workers: int = 1, refresh: bool = False) -> "MetadataCatalog":
        """Build all catalog tables once; concurrent callers wait for the first."""
        with self._lock:
            if refresh:
                self.categories = None
                self.groups = None
                self.series = None
            if self.series is None:
                self.fetch_all_series(max_workers=max_workers)
        return self

    @property
    def is_loaded(self) -> bool:
        return self.series is not None

    def categories_frame(self) -> pd.DataFrame:
        """Return the categories as a table, fetching them if needed."""
        if self.categories is None:
            self.fetch_categories()
        return categories_to_frame(self.categories or [])

    def groups_frame(self) -> pd.DataFrame:
        """Return the data groups as a table, fetching them if needed."""
        if self.groups is None:
            self.fetch_groups()
        return groups_to_frame(self.groups or [])

    def series_frame(self) -> pd.DataFrame:
        """Return the enriched series catalog, which must already be loaded."""
        if self.series is None:
            raise CatalogNotLoadedError(
                "The series catalog has not been fetched; call load() first."
            )
        return self.series

    def series_names(self, group_code: str) -> pd.DataFrame:
        """List the code, name, and aggregation method of a group's series."""
        series = self.series_frame()
        selected = series.loc[series["group_code"] == group_code, SERIES_NAME_COLUMNS]
        return selected.reset_index(drop=True)

    def find_group(self, group_code: str) -> Group:
        """Return the group with ``group_code``, fetching groups if needed."""
        if self.groups is None:
            self.fetch_groups()
        for group in self.groups or []:
            if group.code == group_code:
                return group
        raise KeyError(f"Unknown data group {group_code!r}")

    def group_info(self, group_code: str) -> str:
        """Render a human-readable summary of a data group's metadata."""
        group = self.find_group(group_code)
        rows = {
            "category_id": str(group.category_id),
            "group_code": group.code,
            "group_name": group.name,
            "frequency": _frequency_text(group.frequency),
            "source": group.source,
            "source_link": group.source_link,
            "revision_policy_link": group.revision_policy_link,
            "upper_note": group.upper_note,
            "application_link": group.application_link,
        }
        width = max(len(name) for name in rows)
        lines = [f"{name.ljust(width)}  {value[:INFO_WIDTH]}" for name, value in rows.items()]
        if group.note:
            lines.append("Note:")
            lines.append(textwrap.fill(" ".join(group.note.split()), width=INFO_WIDTH))
        lines.append("*" * 39)
        return "\n".join(lines)

    def show_group_info(self, group_code: str) -> pd.DataFrame:
        """Echo :meth:`group_info` and return the group's series listing."""
        click.echo(self.group_info(group_code))
        return self.series_names(group_code)


def _frequency_text(ordinal: int | None) -> str:
    if ordinal is None:
        return ""
    return f"{ordinal} ({frequency_english(ordinal)})"


__all__ = [
    "CATALOG_COLUMNS",
    "MetadataCatalog",
    "categories_to_frame",
    "groups_to_frame",
    "join_catalog",
    "series_to_frame",
]
