"""
Redis-backed staging cache for production when REDIS_URL is set.
Implements the same interface as product_catalog.database.staging_cache.
"""

from __future__ import annotations

import json
import logging
import time
from datetime import timedelta
from typing import Callable, Iterable, List, Optional

import redis

from product_catalog.database.staging_cache import (
    ABSOLUTE_EXPIRATION,
    SAP_PRODUCTS_KEY,
    SLIDING_EXPIRATION,
    merge_batches,
)
from product_catalog.integrations.contracts.products import StagedSapProduct

logger = logging.getLogger(__name__)


class RedisStagingCache:
    """
    The batch and its absolute deadline are stored as one JSON document. The
    key TTL is the smaller of the sliding window and the time left before the
    deadline; reads push the TTL out again. Merges run under a Redis lock so
    concurrent ingests in different workers do not lose rows.
    """

    def __init__(
        self,
        url: Optional[str] = None,
        key: str = SAP_PRODUCTS_KEY,
        sliding: timedelta = SLIDING_EXPIRATION,
        absolute: timedelta = ABSOLUTE_EXPIRATION,
        client=None,
        clock: Optional[Callable[[], float]] = None,
        lock_timeout: float = 10.0,
    ) -> None:
        if client is None and not url:
            raise ValueError("RedisStagingCache needs a redis url or a client")
        self._client = client or redis.from_url(url, decode_responses=True)
        self.key = key
        self._sliding = int(sliding.total_seconds())
        self._absolute = int(absolute.total_seconds())
        self._clock = clock or time.time
        self._lock_timeout = lock_timeout

    def _ttl(self, deadline: float, now: float) -> int:
        return max(0, min(self._sliding, int(deadline - now)))

    def _read(self) -> Optional[dict]:
        raw = self._client.get(self.key)
        if not raw:
            return None
        try:
            doc = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Discarding unreadable staging cache payload under %s", self.key)
            return None
        if doc.get("deadline", 0) <= self._clock():
            self._client.delete(self.key)
            return None
        return doc

    def put(self, batch: Iterable[StagedSapProduct]) -> List[StagedSapProduct]:
        incoming = list(batch)
        with self._client.lock(f"{self.key}:lock", timeout=self._lock_timeout):
            doc = self._read()
            existing = [StagedSapProduct(**p) for p in doc["products"]] if doc else []
            merged = merge_batches(existing, incoming)
            now = self._clock()
            deadline = now + self._absolute
            payload = json.dumps(
                {"deadline": deadline, "products": [p.model_dump(mode="json") for p in merged]},
                default=str,
            )
            self._client.setex(self.key, self._ttl(deadline, now), payload)
        logger.info("Staged %d products in redis (%d in batch)", len(merged), len(incoming))
        return merged

    def get(self) -> List[StagedSapProduct]:
        doc = self._read()
        if not doc:
            return []
        ttl = self._ttl(doc["deadline"], self._clock())
        if ttl <= 0:
            self._client.delete(self.key)
            return []
        self._client.expire(self.key, ttl)
        return [StagedSapProduct(**p) for p in doc["products"]]

    def clear(self) -> None:
        self._client.delete(self.key)

    def ping(self) -> bool:
        try:
            return bool(self._client.ping())
        except Exception:
            return False
