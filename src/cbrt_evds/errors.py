"""Exception and warning types raised by the EVDS client."""

from __future__ import annotations


class EvdsError(Exception):
    """Base class for all EVDS client failures."""


class TransportError(EvdsError):
    """The HTTP request to EVDS failed or returned an error status."""

    def __init__(self, message: str, *, url: str, status: int | None = None) -> None:
        super().__init__(message)
        self.url = url
        self.status = status


class MalformedResponseError(EvdsError):
    """An EVDS response lacked expected columns or carried invalid values."""


class MissingApiKeyError(EvdsError):
    """No API key was supplied explicitly or through the environment."""


class CatalogNotLoadedError(EvdsError):
    """A catalog accessor was used before the required tables were fetched."""


class UnrecognizedTimeFormatWarning(UserWarning):
    """A time column did not match any known EVDS period shape."""


__all__ = [
    "CatalogNotLoadedError",
    "EvdsError",
    "MalformedResponseError",
    "MissingApiKeyError",
    "TransportError",
    "UnrecognizedTimeFormatWarning",
]
