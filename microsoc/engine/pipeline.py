from __future__ import annotations

import asyncio
import logging
import time
from typing import Callable, Optional, Tuple

from ..core.models import (
    EngineConfig,
    Event,
    NewEvent,
    NewIncident,
    PipelineResult,
    RawEvent,
)
from ..core.rules import classify_severity
from ..reputation import ReputationResolver
from ..store.events import EventStore, InMemoryEventStore
from ..store.incidents import IncidentStore
from .broadcast import Broadcaster
from .escalator import IncidentEscalator
from .window import TrafficWindowTracker

logger = logging.getLogger(__name__)


class EventPipeline:
    """
    Orchestrator: wires the resolver, window tracker, escalator, stores and
    broadcaster together behind a single ``ingest`` call.

    Per event
    ---------
    1. Resolve the source address's reputation (never fails).
    2. Classify severity from the abuse score.
    3. Record the hit in the traffic window and check for a spike.
    4. Escalate to an incident when a rule fires and none is open for it.
    5. Persist the event. A store failure is logged and reported in the
       result but does not stop step 6.
    6. Publish NewEvent, then NewIncident if one was opened.

    ``ingest`` may run concurrently for different events; components guard
    their own shared state. Events fed by one producer that awaits each call
    are published in that producer's order.

    Maintenance
    -----------
    ``start()`` spawns a background loop that every
    ``config.sweep_interval_seconds`` prunes events past retention and reaps
    traffic windows that have gone idle.
    """

    def __init__(
        self,
        config: EngineConfig = EngineConfig(),
        resolver: Optional[ReputationResolver] = None,
        event_store: Optional[EventStore] = None,
        incident_store: Optional[IncidentStore] = None,
        broadcaster: Optional[Broadcaster] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._config = config
        self._clock = clock

        self._resolver = resolver or ReputationResolver(config=config)
        self._event_store: EventStore = event_store or InMemoryEventStore()
        self._incident_store = incident_store or IncidentStore()
        self._broadcaster = broadcaster or Broadcaster(config.subscriber_queue_size)
        self._tracker = TrafficWindowTracker(
            window_seconds=config.window_seconds,
            spike_threshold=config.spike_threshold,
        )
        self._escalator = IncidentEscalator(
            self._incident_store,
            lock_shards=config.escalation_lock_shards,
        )

        self._maintenance_task: Optional[asyncio.Task] = None
        self._running = False

    @property
    def config(self) -> EngineConfig:
        return self._config

    @property
    def resolver(self) -> ReputationResolver:
        return self._resolver

    @property
    def tracker(self) -> TrafficWindowTracker:
        return self._tracker

    @property
    def event_store(self) -> EventStore:
        return self._event_store

    @property
    def incident_store(self) -> IncidentStore:
        return self._incident_store

    @property
    def broadcaster(self) -> Broadcaster:
        return self._broadcaster

    @property
    def running(self) -> bool:
        return self._running

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Spawn the background maintenance loop."""
        if self._running:
            return
        self._running = True
        self._maintenance_task = asyncio.create_task(self._maintenance_loop())

    async def stop(self) -> None:
        """Cancel the maintenance loop and wait for it to exit."""
        self._running = False
        if self._maintenance_task:
            self._maintenance_task.cancel()
            try:
                await self._maintenance_task
            except asyncio.CancelledError:
                pass
            self._maintenance_task = None

    # ------------------------------------------------------------------
    # Event ingestion
    # ------------------------------------------------------------------

    async def ingest(self, raw: RawEvent) -> PipelineResult:
        reputation = await self._resolver.resolve(raw.source_address)

        event = Event(
            timestamp=raw.received_at,
            source_address=raw.source_address,
            attack_type=raw.attack_type,
            target_system=raw.target_system,
            severity=classify_severity(reputation.abuse_score),
            origin_region=reputation.origin_region,
            abuse_score=reputation.abuse_score,
            reputation_fallback=reputation.is_fallback,
        )

        is_spike = self._tracker.record_and_check(event.source_address, event.timestamp)
        if is_spike:
            logger.debug("Traffic spike from %s", event.source_address)

        incident = await self._escalator.maybe_escalate(event, is_spike)
        persisted = await self._persist(event)

        self._broadcaster.publish(NewEvent(event=event))
        if incident is not None:
            self._broadcaster.publish(NewIncident(incident=incident))

        return PipelineResult(event=event, incident=incident, persisted=persisted)

    async def _persist(self, event: Event) -> bool:
        try:
            await self._event_store.append(event)
        except Exception:
            # Observers still get the live event; only the durable record is lost.
            logger.exception("Failed to persist event %s from %s", event.id, event.source_address)
            return False
        return True

    # ------------------------------------------------------------------
    # Maintenance
    # ------------------------------------------------------------------

    async def run_maintenance(self, now: Optional[float] = None) -> Tuple[int, int]:
        """
        Prune expired events and reap idle traffic windows once.

        Returns ``(events_pruned, windows_reaped)``.
        """
        now = self._clock() if now is None else now
        pruned = await self._event_store.prune(now - self._config.event_retention_seconds)
        reaped = self._tracker.reap_idle(now, self._config.idle_window_seconds)
        if pruned or reaped:
            logger.debug("Maintenance pruned %d events, reaped %d windows", pruned, reaped)
        return pruned, reaped

    async def _maintenance_loop(self) -> None:
        while self._running:
            await asyncio.sleep(self._config.sweep_interval_seconds)
            try:
                await self.run_maintenance()
            except Exception:
                logger.exception("Maintenance sweep failed")
