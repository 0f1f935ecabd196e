"""Tests for InMemoryEventStore (microsoc.store.events)."""

from __future__ import annotations

import pytest

from microsoc.core.models import Event, Severity
from microsoc.store import InMemoryEventStore


def make_event(ts: float, address: str = "8.8.8.8") -> Event:
    return Event(
        timestamp=ts,
        source_address=address,
        attack_type="XSS",
        target_system="Firewall Node",
        severity=Severity.LOW,
        origin_region="United States",
        abuse_score=1,
    )


@pytest.mark.asyncio
class TestInMemoryEventStore:
    async def test_recent_newest_first_and_limited(self):
        store = InMemoryEventStore()
        events = [make_event(float(i)) for i in range(60)]
        for e in events:
            await store.append(e)
        recent = await store.recent(50)
        assert len(recent) == 50
        assert recent[0].id == events[-1].id
        assert recent[-1].id == events[10].id

    async def test_recent_zero_limit(self):
        store = InMemoryEventStore()
        await store.append(make_event(1.0))
        assert await store.recent(0) == []

    async def test_prune_drops_only_old(self):
        store = InMemoryEventStore()
        for ts in (10.0, 20.0, 30.0):
            await store.append(make_event(ts))
        assert await store.prune(older_than=25.0) == 2
        assert [e.timestamp for e in await store.recent(10)] == [30.0]

    async def test_purge_clears_everything(self):
        store = InMemoryEventStore()
        for ts in (1.0, 2.0):
            await store.append(make_event(ts))
        assert await store.purge() == 2
        assert len(store) == 0
