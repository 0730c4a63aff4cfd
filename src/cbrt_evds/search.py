"""Keyword search over the EVDS metadata catalog."""

from collections.abc import Sequence

import pandas as pd
import structlog

from .data.catalog import MetadataCatalog

logger = structlog.get_logger(__name__)

SEARCH_FIELDS = ("groups", "categories", "series")

_SEARCH_TEXT = "_search_text"
_SCORE = "_score"

SERIES_RESULT_COLUMNS = ["series_code", "series_name", "group_code", "group_name"]


def _search_source(
    catalog: MetadataCatalog, field: str, use_tags: bool
) -> tuple[pd.DataFrame, str]:
    """Return the table to search and the name of its searchable column."""
    if use_tags:
        return catalog.series_frame()[SERIES_RESULT_COLUMNS + ["tag"]], "tag"
    if field == "categories":
        return catalog.categories_frame(), "topic"
    if field == "series":
        return catalog.series_frame()[SERIES_RESULT_COLUMNS], "series_name"
    return catalog.groups_frame()[["group_code", "group_name"]], "group_name"


def search_catalog(
    catalog: MetadataCatalog,
    keywords: str | Sequence[str],
    field: str = "groups",
    *,
    use_tags: bool = False,
    regex: bool = False,
) -> pd.DataFrame:
    """Rank catalog rows by how many ``keywords`` their text contains.

    Matching is case-insensitive. Rows matching no keyword are dropped; the
    rest are sorted by descending match count, keeping the catalog order among
    ties. ``use_tags`` searches series tags whatever ``field`` says. Search
    ``groups`` first; it is the smallest and most descriptive listing.
    """
    if field not in SEARCH_FIELDS:
        valid = ", ".join(SEARCH_FIELDS)
        raise ValueError(f"Unknown search field {field!r}; choose one of: {valid}.")
    if isinstance(keywords, str):
        keywords = [keywords]

    source, text_column = _search_source(catalog, field, use_tags)
    table = source.copy()
    table[_SEARCH_TEXT] = table[text_column].fillna("").astype(str)
    scores = pd.Series(0, index=table.index)
    for keyword in keywords:
        hits = table[_SEARCH_TEXT].str.contains(keyword, case=False, regex=regex, na=False)
        scores = scores + hits.astype(int)
    table[_SCORE] = scores

    ranked = table.loc[table[_SCORE] > 0].sort_values(_SCORE, ascending=False, kind="stable")
    drop = [_SEARCH_TEXT, _SCORE] + (["tag"] if use_tags else [])
    result = ranked.drop(columns=drop).reset_index(drop=True)
    logger.info(
        "search.complete",
        field="tags" if use_tags else field,
        keywords=list(keywords),
        matches=len(result),
    )
    return result


__all__ = ["SEARCH_FIELDS", "search_catalog"]
