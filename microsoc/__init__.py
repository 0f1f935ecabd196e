"""
MicroSOC event engine — public API.

Importing from ``microsoc`` gives access to all stable interfaces:

    from microsoc import EventPipeline, CommandCenter, RawEvent, EngineConfig
"""

from .core import (
    AuthenticationFailed,
    DashboardSnapshot,
    EngineConfig,
    Event,
    Incident,
    IncidentNotFound,
    IncidentStatus,
    MicroSOCError,
    NewEvent,
    NewIncident,
    Operator,
    OperatorNotFound,
    OperatorResolutionStats,
    PermissionDenied,
    PersistenceFailure,
    PipelineResult,
    RawEvent,
    ReputationLookupFailure,
    ReputationRecord,
    Role,
    Severity,
    StateChanged,
    classify_severity,
)
from .demo import main, run_main, run_producer, run_simulation
from .engine import (
    Broadcaster,
    CommandCenter,
    EventPipeline,
    IncidentEscalator,
    Subscription,
    TrafficWindowTracker,
)
from .reputation import AbuseIPDBClient, CircuitBreaker, ReputationResolver
from .store import IncidentStore, InMemoryEventStore, OperatorDirectory

__all__ = [
    "AbuseIPDBClient",
    "AuthenticationFailed",
    "Broadcaster",
    "CircuitBreaker",
    "CommandCenter",
    "DashboardSnapshot",
    "EngineConfig",
    "Event",
    "EventPipeline",
    "Incident",
    "IncidentEscalator",
    "IncidentNotFound",
    "IncidentStatus",
    "IncidentStore",
    "InMemoryEventStore",
    "MicroSOCError",
    "NewEvent",
    "NewIncident",
    "Operator",
    "OperatorDirectory",
    "OperatorNotFound",
    "OperatorResolutionStats",
    "PermissionDenied",
    "PersistenceFailure",
    "PipelineResult",
    "RawEvent",
    "ReputationLookupFailure",
    "ReputationRecord",
    "ReputationResolver",
    "Role",
    "Severity",
    "StateChanged",
    "Subscription",
    "TrafficWindowTracker",
    "classify_severity",
    "main",
    "run_main",
    "run_producer",
    "run_simulation",
]
