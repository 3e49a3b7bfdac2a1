"""
In-memory staging cache for SAP product batches.

Holds a single batch under a well-known key. `put` merges the incoming rows
into the cached batch (deduplicated by SAP number, last write wins) and
re-stores the entry with a compound expiration: it is dropped after
`sliding` of inactivity or `absolute` after it was stored, whichever comes
first. Entries are never evicted for memory pressure.

The Redis-backed variant lives in staging_cache_redis.py and implements the
same interface.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Dict, Iterable, List, Optional

from product_catalog.database.models import utcnow
from product_catalog.integrations.contracts.products import StagedSapProduct

logger = logging.getLogger(__name__)

SAP_PRODUCTS_KEY = "SapProducts"
SLIDING_EXPIRATION = timedelta(days=6)
ABSOLUTE_EXPIRATION = timedelta(days=30)


def merge_batches(existing: Iterable[StagedSapProduct], incoming: Iterable[StagedSapProduct]) -> List[StagedSapProduct]:
    """Deduplicate by SAP number; a key keeps its first position and takes its latest value."""
    merged: Dict[str, StagedSapProduct] = {}
    for product in existing:
        merged[product.product_sap_number] = product
    for product in incoming:
        merged[product.product_sap_number] = product
    return list(merged.values())


@dataclass
class _Entry:
    products: List[StagedSapProduct]
    stored_at: datetime
    last_access: datetime


class StagingCache:
    def __init__(
        self,
        key: str = SAP_PRODUCTS_KEY,
        sliding: timedelta = SLIDING_EXPIRATION,
        absolute: timedelta = ABSOLUTE_EXPIRATION,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.key = key
        self._sliding = sliding
        self._absolute = absolute
        self._clock = clock or utcnow
        self._entries: Dict[str, _Entry] = {}
        self._lock = threading.Lock()

    def _live_entry(self, now: datetime) -> Optional[_Entry]:
        entry = self._entries.get(self.key)
        if entry is None:
            return None
        if now - entry.last_access >= self._sliding or now - entry.stored_at >= self._absolute:
            logger.info("Staging cache entry %s expired; evicting %d products", self.key, len(entry.products))
            del self._entries[self.key]
            return None
        return entry

    def put(self, batch: Iterable[StagedSapProduct]) -> List[StagedSapProduct]:
        incoming = list(batch)
        with self._lock:
            now = self._clock()
            entry = self._live_entry(now)
            merged = merge_batches(entry.products if entry else [], incoming)
            self._entries[self.key] = _Entry(products=merged, stored_at=now, last_access=now)
        logger.info("Staged %d products (%d in batch)", len(merged), len(incoming))
        return list(merged)

    def get(self) -> List[StagedSapProduct]:
        with self._lock:
            now = self._clock()
            entry = self._live_entry(now)
            if entry is None:
                return []
            entry.last_access = now
            return list(entry.products)

    def clear(self) -> None:
        with self._lock:
            self._entries.pop(self.key, None)

    def ping(self) -> bool:
        return True
