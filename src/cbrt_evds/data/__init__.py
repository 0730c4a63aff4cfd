"""EVDS transport, parsing, metadata catalog, and downloads."""

from .catalog import MetadataCatalog
from .client import EvdsHttpClient
from .download import SeriesDownloader
from .models import AggregationMethod, Category, Frequency, Group, SeriesInfo

__all__ = [
    "AggregationMethod",
    "Category",
    "EvdsHttpClient",
    "Frequency",
    "Group",
    "MetadataCatalog",
    "SeriesDownloader",
    "SeriesInfo",
]
