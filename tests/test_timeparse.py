"""Unit tests for EVDS period parsing."""

import pandas as pd
import pytest

from cbrt_evds.errors import UnrecognizedTimeFormatWarning
from cbrt_evds.timeparse import detect_time_shape, first_valid, parse_time_column


@pytest.mark.parametrize(
    "sample, expected",
    [
        ("2020", "annual"),
        ("2020-Q3", "quarterly"),
        ("2020-S2", "quarterly"),
        ("2020-1", "monthly"),
        ("2020-12", "monthly"),
        ("31-12-2020", "daily"),
        ("Dec 2020", None),
        (None, None),
    ],
)
def test_detect_time_shape(sample, expected):
    """Shapes are tested in priority order against the sample."""
    assert detect_time_shape(sample) == expected


def test_first_valid_skips_missing_markers():
    """Nulls and EVDS markers are ignored when picking the sample."""
    assert first_valid([None, float("nan"), "ND", "null", "", " 2020 "]) == "2020"
    assert first_valid(["ND", None]) is None


def test_parse_annual():
    """Four-digit periods become nullable integer years."""
    result = parse_time_column(["2019", "2020", None])
    assert result.dtype == "Int64"
    assert result.iloc[:2].tolist() == [2019, 2020]
    assert pd.isna(result.iloc[2])


def test_parse_quarterly():
    """Quarter markers become fractional years."""
    result = parse_time_column(["2020-Q1", "2020-Q2", "2020-Q3", "2020-Q4"])
    assert result.tolist() == [2020.0, 2020.25, 2020.5, 2020.75]


def test_parse_semiannual_uses_quarter_steps():
    """Half-year markers share the quarter step, so S2 lands on the second quarter."""
    result = parse_time_column(["2019-S1", "2019-S2", "2020-S1"])
    assert result.tolist() == [2019.0, 2019.25, 2020.0]


def test_parse_monthly_uses_mid_month():
    """Monthly periods are pinned to the 15th."""
    result = parse_time_column(["2020-1", "2020-12"])
    assert list(result.dt.day) == [15, 15]
    assert list(result.dt.month) == [1, 12]
    assert list(result.dt.year) == [2020, 2020]


def test_parse_daily():
    """Daily periods keep their literal calendar date."""
    result = parse_time_column(["31-12-2020", "01-01-2021"])
    assert result.iloc[0] == pd.Timestamp(2020, 12, 31)
    assert result.iloc[1] == pd.Timestamp(2021, 1, 1)


def test_parse_uses_first_non_missing_value():
    """Leading missing rows do not hide the shape of the column."""
    result = parse_time_column(["ND", "2020", "2021"])
    assert pd.isna(result.iloc[0])
    assert result.iloc[1:].tolist() == [2020, 2021]


def test_parse_keeps_series_index_and_name():
    """Converted columns line up with the input series."""
    column = pd.Series(["2020", "2021"], index=[5, 6], name="time")
    result = parse_time_column(column)
    assert list(result.index) == [5, 6]
    assert result.name == "time"


def test_parse_mixed_shapes_become_missing():
    """Values that do not fit the detected shape are set to missing."""
    result = parse_time_column(["2020-1", "2020", "2020-3"])
    assert result.iloc[0] == pd.Timestamp(2020, 1, 15)
    assert pd.isna(result.iloc[1])
    assert result.iloc[2] == pd.Timestamp(2020, 3, 15)


def test_parse_unrecognized_format_warns_and_passes_through():
    """Unknown shapes are returned unchanged with an explicit warning."""
    values = pd.Series(["Dec 2020", "Jan 2021"])
    with pytest.warns(UnrecognizedTimeFormatWarning):
        result = parse_time_column(values)
    assert result.tolist() == ["Dec 2020", "Jan 2021"]


def test_parse_all_missing_column_is_unchanged():
    """A column without any value has nothing to detect."""
    result = parse_time_column([None, "ND"])
    assert result.tolist() == [None, "ND"]
