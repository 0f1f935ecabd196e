from __future__ import annotations

import asyncio
import logging
import os
import random
import time
from typing import List, Optional

from ..core.models import EngineConfig, Operator, RawEvent, Role
from ..engine import CommandCenter, EventPipeline, Subscription
from ..reputation import AbuseIPDBClient, ReputationResolver
from ..store import OperatorDirectory

logger = logging.getLogger(__name__)

ATTACK_TYPES = ["XSS", "SQLi", "Port Scan", "Failed Login", "Brute Force", "DDoS", "Malware"]
TARGETS = ["Morphin Grid Core", "Zord Control", "Alpha-5 Uplink", "Firewall Node"]

DEMO_OPERATORS = [
    Operator(id="red_ranger", name="Red Ranger", role=Role.ADMIN),
    Operator(id="alpha", name="Alpha 5", role=Role.ANALYST),
]


def random_address(rng: random.Random, private_ratio: float = 0.2) -> str:
    if rng.random() < private_ratio:
        return f"192.168.1.{rng.randint(1, 254)}"
    return ".".join(str(rng.randint(1, 254)) for _ in range(4))


def generate_raw_event(
    rng: Optional[random.Random] = None,
    source_address: Optional[str] = None,
) -> RawEvent:
    """One random attack attempt, optionally pinned to ``source_address``."""
    rng = rng or random.Random()
    return RawEvent(
        source_address=source_address or random_address(rng),
        attack_type=rng.choice(ATTACK_TYPES),
        target_system=rng.choice(TARGETS),
    )


async def run_simulation(
    pipeline: EventPipeline,
    events: List[RawEvent],
    inter_event_delay: float = 0.01,
) -> None:
    """
    Replay a fixed list of raw events into the pipeline, one at a time.
    In production replace this with a queue or log-shipper consumer.
    """
    for event in events:
        await pipeline.ingest(event)
        await asyncio.sleep(inter_event_delay)


async def run_producer(
    pipeline: EventPipeline,
    interval: float = 3.0,
    count: Optional[int] = None,
    rng: Optional[random.Random] = None,
) -> int:
    """
    Feed randomly generated events every ``interval`` seconds.

    Runs until cancelled, or until ``count`` events have been ingested.
    Returns the number of events produced.
    """
    rng = rng or random.Random()
    produced = 0
    while count is None or produced < count:
        await pipeline.ingest(generate_raw_event(rng))
        produced += 1
        if count is None or produced < count:
            await asyncio.sleep(interval)
    return produced


async def _log_live_messages(subscription: Subscription) -> None:
    async for message in subscription:
        if message.kind == "new_event":
            e = message.event
            logger.info(
                "[EVENT] %-15s %-12s %-8s %s (score %d)",
                e.source_address, e.attack_type, e.severity.value, e.origin_region, e.abuse_score,
            )
        elif message.kind == "new_incident":
            logger.warning("[INCIDENT] %s", message.incident.description)
        else:
            logger.info("[SYNC] %s", message.reason)


async def main(producer_interval: float = 0.2, producer_count: int = 20) -> None:
    """
    End-to-end demo. Set ABUSEIPDB_API_KEY to use the real reputation service;
    without it every public address gets a deterministic fallback record.
    """
    config = EngineConfig(sweep_interval_seconds=5.0)

    api_key = os.environ.get("ABUSEIPDB_API_KEY")
    client = AbuseIPDBClient.from_config(api_key, config) if api_key else None

    pipeline = EventPipeline(
        config=config,
        resolver=ReputationResolver(client=client, config=config),
    )
    center = CommandCenter(pipeline, OperatorDirectory(DEMO_OPERATORS))

    subscription = center.subscribe()
    listener = asyncio.create_task(_log_live_messages(subscription))

    rng = random.Random(7)
    now = time.time()
    # A burst from one address trips the spike rule on its sixth hit
    burst = [
        RawEvent(
            source_address="185.220.101.7",
            attack_type="Brute Force",
            target_system="Firewall Node",
            received_at=now + i * 0.5,
        )
        for i in range(config.spike_threshold + 1)
    ]

    await pipeline.start()
    try:
        await run_simulation(pipeline, burst, inter_event_delay=0.05)
        await run_producer(pipeline, interval=producer_interval, count=producer_count, rng=rng)

        for incident in await center.list_open_incidents():
            await center.resolve_incident(incident.id, "alpha")

        snapshot = await center.dashboard()
        if snapshot.top_attacker:
            logger.info(
                "Top attacker: %s (%d hits)",
                snapshot.top_attacker.source_address,
                snapshot.top_attacker.hits,
            )
        for stats in await center.resolution_stats():
            logger.info("%s resolved %d incident(s)", stats.name, stats.resolved_count)
    finally:
        await pipeline.stop()
        subscription.close()
        await listener


def run_main() -> None:
    """Synchronous entry point for the console script."""
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")
    asyncio.run(main())  # pragma: no cover - exercised by console script


if __name__ == "__main__":  # pragma: no cover
    run_main()
