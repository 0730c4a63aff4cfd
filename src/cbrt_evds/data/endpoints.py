"""Constants describing EVDS resources, headers, and frequency vocabulary."""

import re

from attrs import define

from ..text import normalize_ascii

BASE_URL = "https://evds2.tcmb.gov.tr/service/evds/"
API_KEY_ENV = "EVDS_API_KEY"

CATEGORIES_RESOURCE = "categories/"
DATAGROUPS_RESOURCE = "datagroups/"
SERIES_LIST_RESOURCE = "serieList/"
SERIES_DATA_RESOURCE = "series="
GROUP_DATA_RESOURCE = "datagroup="

# Native column headers of the observation tables.
DATE_COLUMN = "Tarih"
UNIXTIME_COLUMN = "UNIXTIME"
YEARWEEK_COLUMN = "YEARWEEK"
TIME_COLUMN = "time"

DATA_NA_VALUES = ["ND", "null"]
DEFAULT_START_DATE = "1950-01-01"
SERIES_DELIMITER = "-"

WEEKLY_PREFIX = "HAFTALIK"
ARCHIVE_MARKER = "Archive"
ARCHIVE_TOPIC = "Archived data"
UNASSIGNED_CATEGORY = 0


@define(frozen=True)
class FrequencyLabel:
    """One row of the static EVDS frequency lookup table."""

    ordinal: int
    english: str
    turkish: str
    native: str


FREQUENCY_TABLE: tuple[FrequencyLabel, ...] = (
    FrequencyLabel(1, "Day", "GUNLUK", "DAILY"),
    FrequencyLabel(2, "Work day", "ISGUNU", "BUSINESS"),
    FrequencyLabel(3, "Week", "HAFTALIK", "WEEKLY"),
    FrequencyLabel(4, "Biweekly", "IKI HAFTALIK", "TWICEMONTHLY"),
    FrequencyLabel(5, "Month", "AYLIK", "MONTHLY"),
    FrequencyLabel(6, "Quarter", "UC AYLIK", "QUARTERLY"),
    FrequencyLabel(7, "Six months", "ALTI AYLIK", "SEMIANNUAL"),
    FrequencyLabel(8, "Year", "YILLIK", "ANNUAL"),
)


def _lookup_key(label: str) -> str:
    """Fold a native frequency label into the form used by the lookup table."""
    folded = normalize_ascii(label).upper()
    return re.sub(r"[\s_]+", "", folded)


FREQUENCY_LOOKUP: dict[str, int] = {}
for _row in FREQUENCY_TABLE:
    FREQUENCY_LOOKUP[_lookup_key(_row.turkish)] = _row.ordinal
    FREQUENCY_LOOKUP[_lookup_key(_row.native)] = _row.ordinal
    FREQUENCY_LOOKUP[str(_row.ordinal)] = _row.ordinal
del _row


def collapse_weekly(label: str) -> str:
    """Map weekly variants such as ``HAFTALIK_CUMA`` onto ``HAFTALIK``."""
    if isinstance(label, str) and normalize_ascii(label).strip().upper().startswith(WEEKLY_PREFIX):
        return WEEKLY_PREFIX
    return label


def frequency_ordinal(label: str | None) -> int | None:
    """Return the 1..8 frequency ordinal for a native EVDS label, if known."""
    if label is None:
        return None
    label = collapse_weekly(str(label))
    return FREQUENCY_LOOKUP.get(_lookup_key(label))


def frequency_english(ordinal: int | None) -> str | None:
    """Return the English name of a frequency ordinal."""
    for row in FREQUENCY_TABLE:
        if row.ordinal == ordinal:
            return row.english
    return None


__all__ = [
    "API_KEY_ENV",
    "BASE_URL",
    "FREQUENCY_LOOKUP",
    "FREQUENCY_TABLE",
    "FrequencyLabel",
    "collapse_weekly",
    "frequency_english",
    "frequency_ordinal",
]
