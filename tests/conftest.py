"""Global test configuration and fixtures."""

from unittest.mock import MagicMock

import pytest

from cbrt_evds.data.catalog import MetadataCatalog
from cbrt_evds.data.client import EvdsHttpClient

CATEGORIES_CSV = (
    "CATEGORY_ID,TOPIC_TITLE_ENG,TOPIC_TITLE_TR\n"
    "0,ARCHIVE,ARŞİV\n"
    "1,MARKET STATISTICS,PİYASA VERİLERİ\n"
    "2,PRODUCTION STATISTICS,ÜRETİM İSTATİSTİKLERİ\n"
)

GROUPS_CSV = (
    "CATEGORY_ID,DATAGROUP_CODE,DATAGROUP_NAME_ENG,FREQUENCY,DATASOURCE_ENG,"
    "METADATA_LINK_ENG,NOTE_ENG,REV_POL_LINK_ENG,UPPER_NOTE_ENG,APP_CHA_LINK_ENG\n"
    "1,bie_pyrepo,Open Market Repo Transactions,DAILY,CBRT,https://evds.example/meta,"
    ",https://evds.example/rev,,https://evds.example/app\n"
    '2,bie_sanayi,Industrial Production Index (2015=100),MONTHLY,TurkStat,,'
    '"Production figures are revised   monthly.",,,\n'
    "0,bie_arsiv,Archive: Weekly Securities Statistics,WEEKLY,CBRT,,,,,\n"
)

SERIES_HEADER = (
    "SERIE_CODE,SERIE_NAME_ENG,DATAGROUP_CODE,START_DATE,END_DATE,"
    "DEFAULT_AGG_METHOD,FREQUENCY_STR,TAG_ENG\n"
)

SERIES_LISTS = {
    "bie_pyrepo": SERIES_HEADER
    + "TP.PY.P01,Repo Volume,bie_pyrepo,01-01-2005,01-10-2026,sum,GÜNLÜK,repo\u00a0rates\n",
    "bie_sanayi": SERIES_HEADER
    + "TP.SANAYREV4.Y1,Industrial Production Index,bie_sanayi,01-01-2005,01-08-2026,avg,AYLIK,"
    "industry\n"
    + "TP.SANAYREV4.Y2,Mining Production (Madencilik ve Taşocakçılığı),bie_sanayi,"
    "01-01-2005,01-08-2026,avg,AYLIK,mining\n",
    "bie_arsiv": SERIES_HEADER
    + "TP.ARSIV.H1,Government Securities Stock,bie_arsiv,01-01-1990,01-01-2010,last,"
    "HAFTALIK_CUMA,securities\n",
}

STATIC_RESPONSES = {
    "categories/": CATEGORIES_CSV,
    "datagroups/": GROUPS_CSV,
}


@pytest.fixture
def mock_evds_client():
    """Mock the EvdsHttpClient and prime it with canned responses for resources."""
    mock_client_instance = MagicMock(spec=EvdsHttpClient)

    def prime(responses: dict[str, str] | None = None):
        canned = {**STATIC_RESPONSES, **(responses or {})}

        def get_text_side_effect(resource, params=None, *, encoding="utf-8"):
            if resource == "serieList/":
                return SERIES_LISTS[params["code"]]
            if resource in canned:
                return canned[resource]
            raise FileNotFoundError(f"No canned response for resource: {resource}")

        mock_client_instance.get_text.side_effect = get_text_side_effect
        return mock_client_instance

    return prime


@pytest.fixture
def loaded_catalog(mock_evds_client):
    """A catalog fully built from the canned metadata responses."""
    return MetadataCatalog(client=mock_evds_client()).load()
