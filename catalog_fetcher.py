import logging
import time
from typing import Callable, Optional

import requests

from catalog_models import Catalog, CachedCatalog
from config import CatalogUrl, RequestTimeout, UserAgent
from errors import MalformedCatalogError, MissingMetadataError, TransportError

logger = logging.getLogger(__name__)


class RemoteCatalogFetcher:
    """Downloads and validates the remote catalog document. Never retries."""

    def __init__(
        self,
        url: str = CatalogUrl,
        timeout: float = RequestTimeout,
        session: Optional[requests.Session] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.url = url
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.setdefault("User-Agent", UserAgent)
        self._clock = clock

    def fetch(self, previous: Optional[CachedCatalog] = None) -> CachedCatalog:
        """
        Fetch the catalog once.

        When ``previous`` is given its ETag is sent as ``If-None-Match``; a
        304 answer re-stamps the previous catalog instead of transferring it
        again.
        """
        headers = {"Accept": "application/json"}
        if previous is not None and previous.etag:
            headers["If-None-Match"] = previous.etag

        try:
            response = self.session.get(self.url, headers=headers, timeout=self.timeout)
        except requests.RequestException as error:
            raise TransportError(f"Catalog request to {self.url} failed: {error}") from error

        if response.status_code == 304 and previous is not None:
            logger.info("Catalog not modified (etag %s)", previous.etag)
            return CachedCatalog(previous.catalog, previous.etag, int(self._clock()))

        try:
            response.raise_for_status()
        except requests.RequestException as error:
            raise TransportError(f"Catalog request to {self.url} failed: {error}") from error

        etag = response.headers.get("ETag")
        if not etag:
            raise MissingMetadataError(f"Catalog response from {self.url} has no ETag header")

        try:
            catalog = Catalog.from_json(response.content)
        except (ValueError, TypeError) as error:
            raise MalformedCatalogError(f"Catalog from {self.url} is malformed: {error}") from error

        logger.info(
            "Fetched catalog with %d satellite(s) (etag %s)", len(catalog.satellites), etag
        )
        return CachedCatalog(catalog, etag, int(self._clock()))
