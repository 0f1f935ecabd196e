"""Tests for the caching ReputationResolver (microsoc.reputation.resolver)."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock

import httpx
import pytest

from microsoc.core.models import EngineConfig, ReputationRecord
from microsoc.reputation import (
    FALLBACK_REGIONS,
    LOCAL_NETWORK,
    CircuitBreaker,
    ReputationResolver,
    fallback_record,
    is_local_address,
)


class TestIsLocalAddress:
    @pytest.mark.parametrize(
        "address",
        ["10.0.0.1", "172.16.5.4", "192.168.1.77", "127.0.0.1", "169.254.10.1", "::1", "fd00::1"],
    )
    def test_private_and_loopback(self, address):
        assert is_local_address(address)

    @pytest.mark.parametrize("address", ["8.8.8.8", "45.33.32.156", "2606:4700::1111"])
    def test_public(self, address):
        assert not is_local_address(address)

    def test_garbage_is_not_local(self):
        assert not is_local_address("not-an-ip")


class TestFallbackRecord:
    def test_deterministic(self):
        assert fallback_record("45.33.32.156") == fallback_record("45.33.32.156")

    def test_tagged_and_in_range(self):
        for i in range(1, 50):
            record = fallback_record(f"81.2.69.{i}")
            assert record.is_fallback
            assert 0 <= record.abuse_score <= 100
            assert record.origin_region in FALLBACK_REGIONS

    def test_varies_across_addresses(self):
        records = {fallback_record(f"81.2.69.{i}") for i in range(1, 50)}
        assert len(records) > 1


@pytest.mark.asyncio
class TestResolve:
    async def test_private_address_skips_client(self, resolver, mock_client):
        for address in ["10.1.2.3", "192.168.1.5", "127.0.0.1"]:
            assert await resolver.resolve(address) == LOCAL_NETWORK
        mock_client.lookup.assert_not_called()
        assert resolver.cache_size == 0

    async def test_local_record_shape(self, resolver):
        record = await resolver.resolve("192.168.0.10")
        assert record.origin_region == "Local Network"
        assert record.abuse_score == 0

    async def test_successful_lookup_cached(self, resolver, mock_client, reputation_table):
        reputation_table["8.8.8.8"] = ReputationRecord(origin_region="United States", abuse_score=12)
        record = await resolver.resolve("8.8.8.8")
        assert record.abuse_score == 12
        assert resolver.cached("8.8.8.8") == record
        mock_client.lookup.assert_awaited_once_with("8.8.8.8")

    async def test_second_resolve_ignores_changed_upstream(self, resolver, mock_client):
        mock_client.lookup.side_effect = [
            ReputationRecord(origin_region="China", abuse_score=40),
            ReputationRecord(origin_region="Brazil", abuse_score=99),
        ]
        first = await resolver.resolve("45.33.32.156")
        second = await resolver.resolve("45.33.32.156")
        assert first == second
        assert second.origin_region == "China"
        assert mock_client.lookup.await_count == 1

    async def test_failure_falls_back_deterministically(self, resolver, mock_client):
        record = await resolver.resolve("45.33.32.156")
        assert record == fallback_record("45.33.32.156")
        assert record.is_fallback

    async def test_fallback_cached_and_not_retried(self, resolver, mock_client):
        await resolver.resolve("45.33.32.156")
        await resolver.resolve("45.33.32.156")
        assert mock_client.lookup.await_count == 1

    async def test_transport_error_falls_back(self, config):
        client = AsyncMock()
        client.lookup = AsyncMock(side_effect=httpx.ConnectTimeout("timed out"))
        resolver = ReputationResolver(client=client, config=config)
        record = await resolver.resolve("1.1.1.1")
        assert record.is_fallback

    async def test_no_client_uses_fallback(self, config):
        resolver = ReputationResolver(client=None, config=config)
        assert (await resolver.resolve("1.1.1.1")).is_fallback

    async def test_cache_bounded_oldest_evicted(self, mock_client):
        resolver = ReputationResolver(
            client=mock_client, config=EngineConfig(reputation_cache_size=2)
        )
        for address in ["1.1.1.1", "8.8.8.8", "9.9.9.9"]:
            await resolver.resolve(address)
        assert resolver.cache_size == 2
        assert resolver.cached("1.1.1.1") is None
        assert resolver.cached("9.9.9.9") is not None

    async def test_concurrent_misses_settle_on_one_record(self, resolver, mock_client):
        async def slow_lookup(address: str) -> ReputationRecord:
            await asyncio.sleep(0.01)
            return ReputationRecord(origin_region="Germany", abuse_score=33)

        mock_client.lookup.side_effect = slow_lookup
        results = await asyncio.gather(*[resolver.resolve("5.5.5.5") for _ in range(5)])
        assert all(r == results[0] for r in results)
        assert resolver.cache_size == 1


@pytest.mark.asyncio
class TestCircuitBreakerIntegration:
    async def test_failures_open_circuit(self, resolver, mock_client, config):
        for i in range(config.circuit_breaker_threshold):
            await resolver.resolve(f"81.2.69.{i + 1}")
        assert resolver.circuit_breaker.open_at is not None

    async def test_open_circuit_skips_client(self, mock_client, config):
        breaker = CircuitBreaker(threshold=1, cooldown_seconds=60.0)
        breaker.record_failure()
        resolver = ReputationResolver(client=mock_client, config=config, circuit_breaker=breaker)
        record = await resolver.resolve("8.8.4.4")
        assert record.is_fallback
        mock_client.lookup.assert_not_called()

    async def test_success_resets_counter(self, resolver, reputation_table):
        reputation_table["8.8.8.8"] = ReputationRecord(origin_region="US", abuse_score=1)
        await resolver.resolve("81.2.69.1")  # fails
        assert resolver.circuit_breaker.consecutive_failures == 1
        await resolver.resolve("8.8.8.8")
        assert resolver.circuit_breaker.consecutive_failures == 0
