"""Client for the CBRT EVDS statistical data service."""

from .data import (
    AggregationMethod,
    EvdsHttpClient,
    Frequency,
    MetadataCatalog,
    SeriesDownloader,
)
from .errors import (
    CatalogNotLoadedError,
    EvdsError,
    MalformedResponseError,
    MissingApiKeyError,
    TransportError,
    UnrecognizedTimeFormatWarning,
)
from .search import search_catalog
from .text import normalize_ascii
from .timeparse import parse_time_column

__version__ = "0.1.0"

__all__ = [
    "AggregationMethod",
    "CatalogNotLoadedError",
    "EvdsError",
    "EvdsHttpClient",
    "Frequency",
    "MalformedResponseError",
    "MetadataCatalog",
    "MissingApiKeyError",
    "SeriesDownloader",
    "TransportError",
    "UnrecognizedTimeFormatWarning",
    "normalize_ascii",
    "parse_time_column",
    "search_catalog",
]
