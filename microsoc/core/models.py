from __future__ import annotations

import time
import uuid
from enum import Enum
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.networks import IPvAnyAddress


def _new_id() -> str:
    return str(uuid.uuid4())


class Severity(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    CRITICAL = "Critical"


class IncidentStatus(str, Enum):
    OPEN = "Open"
    IN_PROGRESS = "In Progress"
    RESOLVED = "Resolved"


class Role(str, Enum):
    ADMIN = "Admin"
    ANALYST = "Analyst"


class RawEvent(BaseModel):
    """A single attack attempt as it arrives from a producer."""

    source_address: str
    attack_type: str
    target_system: str
    received_at: float = Field(default_factory=time.time)

    @field_validator("source_address")
    @classmethod
    def source_address_must_be_valid(cls, v: str) -> str:
        try:
            IPvAnyAddress(v)
        except ValueError:
            raise ValueError(f"Invalid IP address: {v!r}")
        return v

    @field_validator("attack_type", "target_system")
    @classmethod
    def must_not_be_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be empty")
        return v


class ReputationRecord(BaseModel):
    """
    Enrichment data for a source address.

    ``is_fallback`` marks records synthesized locally because the external
    lookup was unavailable; downstream consumers may treat them as real data.
    """

    model_config = ConfigDict(frozen=True)

    origin_region: str
    abuse_score: int = Field(ge=0, le=100)
    is_fallback: bool = False


class Event(BaseModel):
    """An enriched, classified event. Immutable once created."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=_new_id)
    timestamp: float
    source_address: str
    attack_type: str
    target_system: str
    severity: Severity
    origin_region: str
    abuse_score: int = Field(ge=0, le=100)
    reputation_fallback: bool = False


class Incident(BaseModel):
    """An escalated condition awaiting operator resolution."""

    id: str = Field(default_factory=_new_id)
    originating_event_id: str
    description: str
    status: IncidentStatus = IncidentStatus.OPEN
    resolved_by: Optional[str] = None
    resolved_at: Optional[float] = None
    created_at: float = Field(default_factory=time.time)

    @property
    def is_open(self) -> bool:
        return self.status != IncidentStatus.RESOLVED


class Operator(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    role: Role


class OperatorResolutionStats(BaseModel):
    """Per-operator resolution count joined with the operator's identity."""

    operator_id: str
    name: str
    role: Optional[Role] = None
    resolved_count: int


class TopAttacker(BaseModel):
    source_address: str
    hits: int


class DashboardSnapshot(BaseModel):
    events: List[Event]
    incidents: List[Incident]
    active_incident_count: int
    top_attacker: Optional[TopAttacker] = None


class PipelineResult(BaseModel):
    """Outcome of pushing one RawEvent through the pipeline."""

    event: Event
    incident: Optional[Incident] = None
    persisted: bool = True


# ---------------------------------------------------------------------------
# Live messages pushed to subscribers
# ---------------------------------------------------------------------------


class NewEvent(BaseModel):
    kind: Literal["new_event"] = "new_event"
    event: Event


class NewIncident(BaseModel):
    kind: Literal["new_incident"] = "new_incident"
    incident: Incident


class StateChanged(BaseModel):
    """Coarse re-sync hint for mutations without a natural payload."""

    kind: Literal["state_changed"] = "state_changed"
    reason: str


LiveMessage = Union[NewEvent, NewIncident, StateChanged]


class EngineConfig(BaseModel):
    """Dependency-injected configuration shared by the engine components."""

    window_seconds: float = Field(default=10.0, gt=0)
    spike_threshold: int = Field(default=5, gt=0)
    reputation_cache_size: int = Field(default=10_000, gt=0)
    lookup_timeout_seconds: float = Field(default=5.0, gt=0)  # AbuseIPDBClient.from_config
    circuit_breaker_threshold: int = Field(default=5, gt=0)  # consecutive lookup failures
    circuit_breaker_cooldown_seconds: float = Field(default=60.0, gt=0)
    event_retention_seconds: float = Field(default=600.0, gt=0)  # 10 minutes
    recent_events_limit: int = Field(default=50, gt=0)
    sweep_interval_seconds: float = Field(default=30.0, gt=0)
    idle_window_seconds: float = Field(default=300.0, gt=0)
    subscriber_queue_size: int = Field(default=256, gt=0)
    escalation_lock_shards: int = Field(default=64, gt=0)
