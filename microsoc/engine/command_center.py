from __future__ import annotations

import logging
from collections import Counter
from typing import Dict, List, Optional

from ..core.errors import AuthenticationFailed
from ..core.models import (
    DashboardSnapshot,
    Event,
    Incident,
    Operator,
    OperatorResolutionStats,
    Role,
    StateChanged,
    TopAttacker,
)
from ..store.operators import CredentialChecker, OperatorDirectory
from .broadcast import Subscription
from .pipeline import EventPipeline

logger = logging.getLogger(__name__)


class CommandCenter:
    """
    Queries and commands exposed to the operator console.

    Thin facade over an EventPipeline's stores: it adds operator checks and
    publishes a StateChanged hint after mutations that carry no event payload.
    """

    def __init__(
        self,
        pipeline: EventPipeline,
        directory: OperatorDirectory,
        credentials: Optional[CredentialChecker] = None,
    ) -> None:
        self._pipeline = pipeline
        self._directory = directory
        self._credentials = credentials

    @property
    def directory(self) -> OperatorDirectory:
        return self._directory

    def subscribe(self) -> Subscription:
        return self._pipeline.broadcaster.subscribe()

    async def login(self, username: str, password: str) -> Operator:
        if self._credentials is None:
            raise AuthenticationFailed("no credential checker configured")
        operator = await self._credentials.check(username, password)
        if operator is None:
            raise AuthenticationFailed(f"invalid credentials for {username!r}")
        return operator

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def list_recent_events(self, limit: Optional[int] = None) -> List[Event]:
        if limit is None:
            limit = self._pipeline.config.recent_events_limit
        return await self._pipeline.event_store.recent(limit)

    async def list_incidents(self) -> List[Incident]:
        return await self._pipeline.incident_store.list_incidents()

    async def list_open_incidents(self) -> List[Incident]:
        return await self._pipeline.incident_store.list_open()

    async def aggregate_resolution_counts(self) -> Dict[str, int]:
        return await self._pipeline.incident_store.aggregate_resolution_counts()

    async def resolution_stats(self) -> List[OperatorResolutionStats]:
        return await self._pipeline.incident_store.resolution_stats(self._directory)

    async def dashboard(self) -> DashboardSnapshot:
        """Recent events, all incidents, open count and the busiest source address."""
        events = await self.list_recent_events()
        incidents = await self.list_incidents()

        top_attacker = None
        if events:
            address, hits = Counter(e.source_address for e in events).most_common(1)[0]
            top_attacker = TopAttacker(source_address=address, hits=hits)

        return DashboardSnapshot(
            events=events,
            incidents=incidents,
            active_incident_count=sum(1 for i in incidents if i.is_open),
            top_attacker=top_attacker,
        )

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    async def resolve_incident(self, incident_id: str, operator_id: str) -> Incident:
        """Resolve an incident and tell observers to re-sync. Raises IncidentNotFound."""
        incident = await self._pipeline.incident_store.resolve(incident_id, operator_id)
        logger.info("Incident %s resolved by %s", incident.id, incident.resolved_by)
        self._pipeline.broadcaster.publish(StateChanged(reason="incident_resolved"))
        return incident

    async def purge_events(self, operator_id: str) -> int:
        """Delete every stored event. Admin only."""
        operator = self._directory.require(operator_id, role=Role.ADMIN)
        removed = await self._pipeline.event_store.purge()
        logger.warning("Event log purged by %s (%d events)", operator.name, removed)
        self._pipeline.broadcaster.publish(StateChanged(reason="events_purged"))
        return removed
