"""Exception hierarchy for the MicroSOC engine."""

from __future__ import annotations


class MicroSOCError(Exception):
    """Base class for every error raised by this package."""


class ReputationLookupFailure(MicroSOCError):
    """The external reputation service failed or returned unusable data."""


class PersistenceFailure(MicroSOCError):
    """A store could not durably record an event."""


class IncidentNotFound(MicroSOCError):
    def __init__(self, incident_id: str) -> None:
        super().__init__(f"Unknown incident id: {incident_id!r}")
        self.incident_id = incident_id


class OperatorNotFound(MicroSOCError):
    def __init__(self, operator_id: str) -> None:
        super().__init__(f"Unknown operator id: {operator_id!r}")
        self.operator_id = operator_id


class PermissionDenied(MicroSOCError):
    """The operator's role does not allow the requested action."""


class AuthenticationFailed(MicroSOCError):
    """Credentials were rejected by the credential checker."""
