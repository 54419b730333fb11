import logging
import threading
import time
from typing import Callable, Optional

from catalog_fetcher import RemoteCatalogFetcher
from catalog_models import CachedCatalog

logger = logging.getLogger(__name__)

CATALOG_TTL_SECONDS = 900


def is_fresh(snapshot: Optional[CachedCatalog], now: float) -> bool:
    return snapshot is not None and snapshot.age(now) < CATALOG_TTL_SECONDS


class CatalogCache:
    """
    Holds the most recent catalog snapshot and refreshes it after 15 minutes.

    A refresh failure is raised to the caller even when an older snapshot is
    held; the older snapshot stays in place untouched and the next call tries
    again.
    """

    def __init__(self, fetcher: RemoteCatalogFetcher, clock: Callable[[], float] = time.time):
        self.fetcher = fetcher
        self._clock = clock
        self._lock = threading.Lock()
        self._snapshot: Optional[CachedCatalog] = None

    @property
    def snapshot(self) -> Optional[CachedCatalog]:
        """Currently held snapshot, possibly stale, without refreshing."""
        return self._snapshot

    def get_current(self) -> CachedCatalog:
        snapshot = self._snapshot
        if is_fresh(snapshot, self._clock()):
            return snapshot

        with self._lock:
            # Another caller may have refreshed while we waited for the lock.
            snapshot = self._snapshot
            if is_fresh(snapshot, self._clock()):
                return snapshot

            if snapshot is None:
                logger.info("[CACHE] No catalog cached, fetching")
            else:
                logger.info("[CACHE] Catalog is %ds old, refreshing", int(snapshot.age(self._clock())))

            try:
                fresh = self.fetcher.fetch(snapshot)
            except Exception as error:
                logger.warning("[CACHE] Catalog refresh failed: %s", error)
                raise

            if snapshot is not None and fresh.downloaded_at < snapshot.downloaded_at:
                # Clock went backwards; keep the timeline monotonic.
                fresh = CachedCatalog(fresh.catalog, fresh.etag, snapshot.downloaded_at)
            self._snapshot = fresh
            return fresh
