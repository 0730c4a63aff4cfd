"""Unit tests for the EVDS CSV parsers."""

import pandas as pd
import pytest

from cbrt_evds.data.parser import (
    parse_categories,
    parse_groups,
    parse_observations,
    parse_series_list,
)
from cbrt_evds.errors import MalformedResponseError
from tests.conftest import CATEGORIES_CSV, GROUPS_CSV, SERIES_LISTS


def test_parse_categories():
    """Test parsing of category data."""
    categories = parse_categories(CATEGORIES_CSV)
    assert [category.category_id for category in categories] == [0, 1, 2]
    assert categories[1].topic == "MARKET STATISTICS"


def test_parse_categories_with_byte_order_mark():
    """A UTF-8 BOM before the first header is ignored."""
    categories = parse_categories("\ufeff" + CATEGORIES_CSV)
    assert len(categories) == 3


def test_parse_groups():
    """Test parsing of data group metadata."""
    groups = parse_groups(GROUPS_CSV)
    assert [group.code for group in groups] == ["bie_pyrepo", "bie_sanayi", "bie_arsiv"]
    assert [group.frequency for group in groups] == [1, 5, 3]
    assert groups[0].source_link == "https://evds.example/meta"
    assert groups[1].note == "Production figures are revised   monthly."


def test_parse_series_list():
    """Test parsing of a group's series listing."""
    series = parse_series_list(SERIES_LISTS["bie_sanayi"])
    assert [item.code for item in series] == ["TP.SANAYREV4.Y1", "TP.SANAYREV4.Y2"]
    assert series[0].agg_method == "avg"
    assert series[0].freq_label == "AYLIK"
    assert series[1].start == "01-01-2005"


def test_parse_skips_blank_lines():
    """Blank trailing lines do not produce records."""
    series = parse_series_list(SERIES_LISTS["bie_arsiv"] + "\n,,,,,,,\n")
    assert len(series) == 1


def test_overlong_row_is_malformed():
    """A row with more cells than headers is rejected rather than misread."""
    with pytest.raises(MalformedResponseError, match="more cells than headers"):
        parse_categories("CATEGORY_ID,TOPIC_TITLE_ENG,TOPIC_TITLE_TR\n,,,extra\n")


def test_missing_headers_fail_fast():
    """Responses lacking expected columns raise a malformed-response error."""
    with pytest.raises(MalformedResponseError, match="DATAGROUP_CODE"):
        parse_groups("CATEGORY_ID,DATAGROUP_NAME_ENG,FREQUENCY\n1,Test,AYLIK\n")


def test_invalid_values_fail():
    """Values that fail schema validation raise a malformed-response error."""
    with pytest.raises(MalformedResponseError, match="invalid values"):
        parse_categories("CATEGORY_ID,TOPIC_TITLE_ENG\nabc,MARKET\n")


def test_parse_observations_keeps_dates_as_text():
    """Date strings survive untouched; EVDS markers become missing values."""
    frame = parse_observations("Tarih,TP_A,UNIXTIME\n2020,1.5,1\n2021,ND,2\n2022,null,3\n")
    assert frame["Tarih"].tolist() == ["2020", "2021", "2022"]
    assert frame["TP_A"].iloc[0] == 1.5
    assert frame["TP_A"].iloc[1:].isna().all()


def test_parse_observations_requires_date_column():
    """Observation tables without a date column are malformed."""
    with pytest.raises(MalformedResponseError, match="Tarih"):
        parse_observations("Date,TP_A\n2020,1\n")


def test_parse_observations_empty_body():
    """An empty body is malformed rather than an empty table."""
    with pytest.raises(MalformedResponseError):
        parse_observations("")


def test_parse_observations_returns_frame():
    """Observations are returned as a DataFrame."""
    assert isinstance(parse_observations("Tarih,TP_A\n2020,1\n"), pd.DataFrame)
