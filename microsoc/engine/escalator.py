from __future__ import annotations

import asyncio
import logging
from typing import List, Optional

from ..core.models import Event, Incident
from ..core.rules import escalation_description
from ..store.incidents import IncidentStore

logger = logging.getLogger(__name__)


class IncidentEscalator:
    """
    Opens incidents for qualifying events, one per continuing condition.

    The open-incident lookup and the insert run under a lock chosen by the
    candidate description, so two events racing on the same description
    cannot both open an incident. Different descriptions usually land on
    different shards and proceed in parallel.
    """

    def __init__(self, store: IncidentStore, lock_shards: int = 64) -> None:
        self._store = store
        self._locks: List[asyncio.Lock] = [asyncio.Lock() for _ in range(lock_shards)]

    def _lock_for(self, description: str) -> asyncio.Lock:
        return self._locks[hash(description) % len(self._locks)]

    async def maybe_escalate(self, event: Event, is_spike: bool) -> Optional[Incident]:
        """
        Return the newly opened Incident, or None when the event does not
        qualify or an open incident already covers its condition.
        """
        description = escalation_description(event, is_spike)
        if description is None:
            return None

        async with self._lock_for(description):
            existing = await self._store.find_open(description)
            if existing is not None:
                logger.debug("Suppressed duplicate escalation, %s still open", existing.id)
                return None
            incident = await self._store.add(
                Incident(
                    originating_event_id=event.id,
                    description=description,
                    created_at=event.timestamp,
                )
            )

        logger.info("Opened incident %s: %s", incident.id, description)
        return incident
