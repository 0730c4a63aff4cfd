"""Unit tests for catalog keyword search."""

import pytest

from cbrt_evds.search import search_catalog


def test_search_series_ranks_by_match_count(loaded_catalog):
    """Rows matching more keywords come first."""
    result = search_catalog(loaded_catalog, ["production", "index"], field="series")
    assert result["series_code"].tolist() == ["TP.SANAYREV4.Y1", "TP.SANAYREV4.Y2"]
    assert list(result.columns) == ["series_code", "series_name", "group_code", "group_name"]


def test_search_series_single_keyword(loaded_catalog):
    """Only names containing the keyword are returned; ties keep catalog order."""
    result = search_catalog(loaded_catalog, ["PRODUCTION"], field="series")
    assert result["series_code"].tolist() == ["TP.SANAYREV4.Y1", "TP.SANAYREV4.Y2"]
    assert all("production" in name.lower() for name in result["series_name"])


def test_search_ties_preserve_original_order(loaded_catalog):
    """Equal scores keep their relative order from the catalog."""
    result = search_catalog(loaded_catalog, ["repo", "mining"], field="series")
    assert result["series_code"].tolist() == ["TP.PY.P01", "TP.SANAYREV4.Y2"]


def test_search_groups_is_default(loaded_catalog):
    """Groups are searched on their names by default."""
    result = search_catalog(loaded_catalog, "repo")
    assert result.to_dict("records") == [
        {"group_code": "bie_pyrepo", "group_name": "Open Market Repo Transactions"}
    ]


def test_search_categories(loaded_catalog):
    """Categories are searched on their topics."""
    result = search_catalog(loaded_catalog, ["statistics"], field="categories")
    assert result["category_id"].tolist() == [1, 2]
    assert list(result.columns) == ["category_id", "topic"]


def test_search_tags_override_field(loaded_catalog):
    """Tag search looks at series tags whatever field is requested."""
    result = search_catalog(loaded_catalog, ["securities"], field="categories", use_tags=True)
    assert result["series_code"].tolist() == ["TP.ARSIV.H1"]
    assert "tag" not in result.columns


def test_search_regex_opt_in(loaded_catalog):
    """Keywords are literal unless regex matching is requested."""
    assert search_catalog(loaded_catalog, ["^open"], field="groups").empty
    result = search_catalog(loaded_catalog, ["^open"], field="groups", regex=True)
    assert result["group_code"].tolist() == ["bie_pyrepo"]


def test_search_no_matches_is_empty(loaded_catalog):
    """An empty result is a value, not an error."""
    result = search_catalog(loaded_catalog, ["zzz"], field="series")
    assert result.empty
    assert "_score" not in result.columns


def test_search_unknown_field(loaded_catalog):
    """Only groups, categories, and series can be searched."""
    with pytest.raises(ValueError, match="Unknown search field"):
        search_catalog(loaded_catalog, ["x"], field="tags")
