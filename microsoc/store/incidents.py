from __future__ import annotations

import asyncio
import time
from collections import Counter
from typing import Dict, List, Optional

from ..core.errors import IncidentNotFound
from ..core.models import Incident, IncidentStatus, OperatorResolutionStats
from .operators import OperatorDirectory


class IncidentStore:
    """
    Holds incident lifecycle state and answers aggregate queries.

    Incidents are never deleted. The only mutation after insertion is
    ``resolve``, which runs under the store lock so concurrent attempts on
    one incident cannot both attribute it. Callers always receive copies.
    """

    def __init__(self) -> None:
        self._incidents: Dict[str, Incident] = {}
        # description -> id of the open incident carrying it
        self._open_by_description: Dict[str, str] = {}
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._incidents)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def add(self, incident: Incident) -> Incident:
        stored = incident.model_copy()
        async with self._lock:
            self._incidents[stored.id] = stored
            if stored.is_open:
                self._open_by_description[stored.description] = stored.id
        return stored.model_copy()

    async def resolve(
        self,
        incident_id: str,
        operator_id: str,
        now: Optional[float] = None,
    ) -> Incident:
        """
        Mark an incident Resolved by ``operator_id``.

        Resolving an already-resolved incident is a no-op that returns the
        incident unchanged, keeping the first resolver's attribution.

        Raises
        ------
        IncidentNotFound
            If ``incident_id`` is unknown.
        """
        async with self._lock:
            incident = self._incidents.get(incident_id)
            if incident is None:
                raise IncidentNotFound(incident_id)
            if incident.status != IncidentStatus.RESOLVED:
                incident.status = IncidentStatus.RESOLVED
                incident.resolved_by = operator_id
                incident.resolved_at = time.time() if now is None else now
                if self._open_by_description.get(incident.description) == incident.id:
                    del self._open_by_description[incident.description]
            return incident.model_copy()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def get(self, incident_id: str) -> Optional[Incident]:
        incident = self._incidents.get(incident_id)
        return incident.model_copy() if incident is not None else None

    async def find_open(self, description: str) -> Optional[Incident]:
        """The open incident with exactly this description, if any."""
        incident_id = self._open_by_description.get(description)
        if incident_id is None:
            return None
        return self._incidents[incident_id].model_copy()

    def _newest_first(self) -> List[Incident]:
        # reversed() first so ties on created_at keep newest-inserted first
        return sorted(
            reversed(list(self._incidents.values())),
            key=lambda i: i.created_at,
            reverse=True,
        )

    async def list_incidents(self) -> List[Incident]:
        return [i.model_copy() for i in self._newest_first()]

    async def list_open(self) -> List[Incident]:
        return [i.model_copy() for i in self._newest_first() if i.is_open]

    async def aggregate_resolution_counts(self) -> Dict[str, int]:
        """Resolved incident count per operator id; unattributed ones are skipped."""
        counts = Counter(
            i.resolved_by
            for i in self._incidents.values()
            if i.status == IncidentStatus.RESOLVED and i.resolved_by is not None
        )
        return dict(counts)

    async def resolution_stats(
        self, directory: OperatorDirectory
    ) -> List[OperatorResolutionStats]:
        """
        Resolution counts joined with operator identity, busiest first.

        Operators missing from ``directory`` are reported under their id with
        no role.
        """
        counts = await self.aggregate_resolution_counts()
        stats: List[OperatorResolutionStats] = []
        for operator_id, count in counts.items():
            operator = directory.get(operator_id)
            stats.append(
                OperatorResolutionStats(
                    operator_id=operator_id,
                    name=operator.name if operator else operator_id,
                    role=operator.role if operator else None,
                    resolved_count=count,
                )
            )
        stats.sort(key=lambda s: (-s.resolved_count, s.operator_id))
        return stats
