"""Stores: events, incidents and operator identity."""

from .events import EventStore, InMemoryEventStore
from .incidents import IncidentStore
from .operators import CredentialChecker, OperatorDirectory

__all__ = [
    "CredentialChecker",
    "EventStore",
    "InMemoryEventStore",
    "IncidentStore",
    "OperatorDirectory",
]
