"""Domain models for EVDS category, data group, and series metadata."""

from enum import Enum, IntEnum

import marshmallow as ma
from attrs import define, field

from ..text import normalize_ascii
from .endpoints import frequency_ordinal


def _strip(value: str | None) -> str:
    """Trim surrounding whitespace from a field."""
    if value is None:
        return ""
    return value.strip()


class Frequency(IntEnum):
    """Ordinal EVDS frequencies accepted by the data endpoints."""

    DAY = 1
    WORK_DAY = 2
    WEEK = 3
    BIWEEKLY = 4
    MONTH = 5
    QUARTER = 6
    SIX_MONTHS = 7
    YEAR = 8


class AggregationMethod(str, Enum):
    """Methods EVDS uses to aggregate high-frequency series."""

    AVG = "avg"
    FIRST = "first"
    LAST = "last"
    MAX = "max"
    MIN = "min"
    SUM = "sum"


@define(slots=True, frozen=True)
class Category:
    """Top-level topic grouping data groups together."""

    category_id: int = field(converter=int)
    topic: str = field(converter=_strip)


class CategorySchema(ma.Schema):
    """Load :class:`Category` records from native EVDS headers."""

    class Meta:
        unknown = ma.EXCLUDE

    category_id = ma.fields.Int(required=True, data_key="CATEGORY_ID")
    topic = ma.fields.Str(required=True, data_key="TOPIC_TITLE_ENG")

    @ma.post_load
    def make_category(self, data: dict[str, object], **kwargs: object) -> Category:
        return Category(**data)


@define(slots=True, frozen=True, kw_only=True)
class Group:
    """A named bundle of series sharing a source and revision policy."""

    category_id: int = field(converter=int)
    code: str = field(converter=_strip)
    name: str = field(converter=_strip)
    frequency: int | None = None
    source: str = field(converter=_strip, default="")
    source_link: str = field(converter=_strip, default="")
    note: str = field(converter=_strip, default="")
    revision_policy_link: str = field(converter=_strip, default="")
    upper_note: str = field(converter=_strip, default="")
    application_link: str = field(converter=_strip, default="")

    @property
    def frequency_enum(self) -> Frequency | None:
        """Return the frequency as a :class:`Frequency`, when known."""
        return Frequency(self.frequency) if self.frequency else None


def _optional_str(data_key: str) -> ma.fields.Str:
    return ma.fields.Str(data_key=data_key, allow_none=True, load_default="")


class GroupSchema(ma.Schema):
    """Load :class:`Group` records, remapping frequency and folding names."""

    class Meta:
        unknown = ma.EXCLUDE

    category_id = ma.fields.Int(required=True, data_key="CATEGORY_ID")
    code = ma.fields.Str(required=True, data_key="DATAGROUP_CODE")
    name = ma.fields.Str(required=True, data_key="DATAGROUP_NAME_ENG")
    frequency = ma.fields.Str(required=True, allow_none=True, data_key="FREQUENCY")
    source = _optional_str("DATASOURCE_ENG")
    source_link = _optional_str("METADATA_LINK_ENG")
    note = _optional_str("NOTE_ENG")
    revision_policy_link = _optional_str("REV_POL_LINK_ENG")
    upper_note = _optional_str("UPPER_NOTE_ENG")
    application_link = _optional_str("APP_CHA_LINK_ENG")

    @ma.post_load
    def make_group(self, data: dict[str, object], **kwargs: object) -> Group:
        """Instantiate :class:`Group` with canonical frequency and ASCII name."""
        data["frequency"] = frequency_ordinal(data.get("frequency"))
        data["name"] = normalize_ascii(data["name"])
        return Group(**data)


@define(slots=True, frozen=True, kw_only=True)
class SeriesInfo:
    """Metadata for a single EVDS series as listed under its data group."""

    code: str = field(converter=_strip)
    name: str = field(converter=_strip)
    group_code: str = field(converter=_strip)
    start: str = field(converter=_strip, default="")
    end: str = field(converter=_strip, default="")
    agg_method: str = field(converter=_strip, default="")
    freq_label: str = field(converter=_strip, default="")
    tag: str = field(default="")


class SeriesInfoSchema(ma.Schema):
    """Load :class:`SeriesInfo` records from ``serieList`` rows."""

    class Meta:
        unknown = ma.EXCLUDE

    code = ma.fields.Str(required=True, data_key="SERIE_CODE")
    name = ma.fields.Str(required=True, data_key="SERIE_NAME_ENG")
    group_code = ma.fields.Str(required=True, data_key="DATAGROUP_CODE")
    start = _optional_str("START_DATE")
    end = _optional_str("END_DATE")
    agg_method = _optional_str("DEFAULT_AGG_METHOD")
    freq_label = _optional_str("FREQUENCY_STR")
    tag = _optional_str("TAG_ENG")

    @ma.post_load
    def make_series(self, data: dict[str, object], **kwargs: object) -> SeriesInfo:
        return SeriesInfo(**{key: value or "" for key, value in data.items()})


def required_headers(schema: ma.Schema) -> list[str]:
    """Return the native headers a schema cannot load without."""
    return [
        schema_field.data_key or name
        for name, schema_field in schema.fields.items()
        if schema_field.required
    ]


__all__ = [
    "AggregationMethod",
    "Category",
    "CategorySchema",
    "Frequency",
    "Group",
    "GroupSchema",
    "SeriesInfo",
    "SeriesInfoSchema",
    "required_headers",
]
