from __future__ import annotations

import hashlib
import ipaddress
import logging
from collections import OrderedDict
from typing import Optional, Tuple

from ..core.models import EngineConfig, ReputationRecord
from .circuit_breaker import CircuitBreaker
from .client import ReputationClient

logger = logging.getLogger(__name__)

LOCAL_NETWORK = ReputationRecord(origin_region="Local Network", abuse_score=0)

FALLBACK_REGIONS: Tuple[str, ...] = (
    "United States",
    "China",
    "Russia",
    "Brazil",
    "India",
    "Germany",
    "Netherlands",
    "Vietnam",
    "Iran",
    "North Korea",
    "Ukraine",
    "Romania",
)


def is_local_address(address: str) -> bool:
    """True for private, loopback, link-local and other non-routable addresses."""
    try:
        ip = ipaddress.ip_address(address)
    except ValueError:
        return False
    return not ip.is_global


def fallback_record(address: str) -> ReputationRecord:
    """
    Derive a stable reputation record from the address text alone.

    The same address always yields the same region and score, so repeated
    lookup failures never flap.
    """
    digest = hashlib.sha256(address.encode("utf-8")).digest()
    region = FALLBACK_REGIONS[digest[0] % len(FALLBACK_REGIONS)]
    score = int.from_bytes(digest[1:3], "big") % 101
    return ReputationRecord(origin_region=region, abuse_score=score, is_fallback=True)


class ReputationResolver:
    """
    Resolves a source address to a ReputationRecord and never fails.

    Resolution order
    ----------------
    1. Non-global addresses resolve to ``Local Network`` with score 0, with no
       cache entry and no external call.
    2. A cached record is returned unchanged. Entries are write-once: they
       never expire and are never refreshed. When the cache is full the oldest
       entry is evicted.
    3. Otherwise the ReputationClient is asked and its answer cached.
    4. On any lookup failure, or while the circuit breaker is open, a
       deterministic fallback is cached as if it were real data.

    Concurrent misses for one address may both reach the client; the later
    cache write wins, which is harmless because either record is final.
    """

    def __init__(
        self,
        client: Optional[ReputationClient] = None,
        config: EngineConfig = EngineConfig(),
        circuit_breaker: Optional[CircuitBreaker] = None,
    ) -> None:
        self._client = client
        self._max_entries = config.reputation_cache_size
        self._cache: "OrderedDict[str, ReputationRecord]" = OrderedDict()
        self._circuit_breaker = circuit_breaker or CircuitBreaker(
            threshold=config.circuit_breaker_threshold,
            cooldown_seconds=config.circuit_breaker_cooldown_seconds,
        )

    @property
    def cache_size(self) -> int:
        return len(self._cache)

    @property
    def circuit_breaker(self) -> CircuitBreaker:
        return self._circuit_breaker

    def cached(self, address: str) -> Optional[ReputationRecord]:
        return self._cache.get(address)

    async def resolve(self, address: str) -> ReputationRecord:
        if is_local_address(address):
            return LOCAL_NETWORK

        record = self._cache.get(address)
        if record is not None:
            return record

        record = await self._lookup(address)
        self._store(address, record)
        return record

    async def _lookup(self, address: str) -> ReputationRecord:
        if self._client is None or self._circuit_breaker.is_open:
            return fallback_record(address)

        try:
            record = await self._client.lookup(address)
        except Exception as exc:
            # Any transport or parsing problem degrades to the local fallback.
            self._circuit_breaker.record_failure()
            logger.warning("Reputation lookup failed for %s, using fallback: %s", address, exc)
            return fallback_record(address)

        self._circuit_breaker.record_success()
        return record

    def _store(self, address: str, record: ReputationRecord) -> None:
        self._cache[address] = record
        while len(self._cache) > self._max_entries:
            self._cache.popitem(last=False)
