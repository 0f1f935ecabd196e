"""Core domain: models, errors and escalation rules."""

from .errors import (
    AuthenticationFailed,
    IncidentNotFound,
    MicroSOCError,
    OperatorNotFound,
    PermissionDenied,
    PersistenceFailure,
    ReputationLookupFailure,
)
from .models import (
    DashboardSnapshot,
    EngineConfig,
    Event,
    Incident,
    IncidentStatus,
    LiveMessage,
    NewEvent,
    NewIncident,
    Operator,
    OperatorResolutionStats,
    PipelineResult,
    RawEvent,
    ReputationRecord,
    Role,
    Severity,
    StateChanged,
    TopAttacker,
)
from .rules import classify_severity, escalation_description

__all__ = [
    "AuthenticationFailed",
    "DashboardSnapshot",
    "EngineConfig",
    "Event",
    "Incident",
    "IncidentNotFound",
    "IncidentStatus",
    "LiveMessage",
    "MicroSOCError",
    "NewEvent",
    "NewIncident",
    "Operator",
    "OperatorNotFound",
    "OperatorResolutionStats",
    "PermissionDenied",
    "PersistenceFailure",
    "PipelineResult",
    "RawEvent",
    "ReputationLookupFailure",
    "ReputationRecord",
    "Role",
    "Severity",
    "StateChanged",
    "TopAttacker",
    "classify_severity",
    "escalation_description",
]
