"""HTTP client for retrieving CSV resources from the EVDS service."""

import os
from collections.abc import Mapping
from urllib.parse import urljoin

import requests
import structlog
from attrs import define, field

from ..errors import MissingApiKeyError, TransportError
from ..logging import redact_key
from .endpoints import API_KEY_ENV, BASE_URL

logger = structlog.get_logger(__name__)


def _key_from_env() -> str | None:
    return os.environ.get(API_KEY_ENV) or None


@define(slots=True)
class EvdsHttpClient:
    """Thin HTTP wrapper around the EVDS CSV endpoints.

    EVDS encodes its parameters in the URL path (``series=A-B&startDate=...``)
    rather than in a query string, so URLs are assembled by hand.
    """

    api_key: str | None = field(factory=_key_from_env, repr=False)
    base_url: str = BASE_URL
    timeout: float = 30.0
    session: requests.Session = field(factory=requests.Session)
    headers: dict[str, str] = field(
        factory=lambda: {
            "User-Agent": "cbrt-evds",
            "Accept": "text/csv,text/plain,*/*;q=0.1",
        },
    )

    def require_key(self) -> str:
        """Return the configured API key or raise :class:`MissingApiKeyError`."""
        if not self.api_key:
            raise MissingApiKeyError(
                f"An EVDS API key is required; pass api_key or set {API_KEY_ENV}."
            )
        return self.api_key

    def build_url(self, resource: str, params: Mapping[str, object]) -> str:
        """Assemble an EVDS URL from a resource prefix and ordered parameters."""
        pairs = "&".join(f"{name}={value}" for name, value in params.items())
        if resource.endswith("/"):
            path = f"{resource}{pairs}"
        else:
            path = f"{resource}&{pairs}" if pairs else resource
        return urljoin(self.base_url, path)

    def get_text(
        self,
        resource: str,
        params: Mapping[str, object] | None = None,
        *,
        encoding: str = "utf-8",
    ) -> str:
        """Fetch an EVDS resource as CSV and return its decoded text payload."""
        query = dict(params or {})
        query.setdefault("type", "csv")
        query["key"] = self.require_key()
        url = self.build_url(resource, query)
        safe_url = redact_key(url)
        log = logger.bind(resource=resource, url=safe_url)
        log.debug("http.fetch_start", timeout=self.timeout)
        try:
            response = self.session.get(url, timeout=self.timeout, headers=self.headers)
            response.raise_for_status()
        except requests.HTTPError as exc:
            status = exc.response.status_code if exc.response is not None else None
            log.error("http.fetch_failed", status=status, exc_info=True)
            raise TransportError(
                f"EVDS returned HTTP {status} for {resource}", url=safe_url, status=status
            ) from exc
        except requests.RequestException as exc:
            log.error("http.fetch_failed", status=None, exc_info=True)
            raise TransportError(
                f"EVDS request for {resource} failed: {redact_key(str(exc))}", url=safe_url
            ) from exc
        response.encoding = encoding
        log.debug("http.fetch_success", bytes=len(response.content))
        return response.text

    def close(self) -> None:
        """Release the underlying HTTP session."""
        self.session.close()
        logger.debug("http.session_closed")


__all__ = ["EvdsHttpClient"]
