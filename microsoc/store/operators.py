from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Protocol

from ..core.errors import OperatorNotFound, PermissionDenied
from ..core.models import Operator, Role


class CredentialChecker(Protocol):
    """External capability that maps credentials to an operator."""

    async def check(self, username: str, password: str) -> Optional[Operator]:
        """Return the operator for valid credentials, else None."""
        ...


class OperatorDirectory:
    """Read-only registry of known operators, keyed by id."""

    def __init__(self, operators: Iterable[Operator] = ()) -> None:
        self._operators: Dict[str, Operator] = {op.id: op for op in operators}

    def __len__(self) -> int:
        return len(self._operators)

    def add(self, operator: Operator) -> None:
        self._operators[operator.id] = operator

    def get(self, operator_id: str) -> Optional[Operator]:
        return self._operators.get(operator_id)

    def all(self) -> List[Operator]:
        return list(self._operators.values())

    def require(self, operator_id: str, role: Optional[Role] = None) -> Operator:
        """
        Look up an operator, optionally insisting on a role.

        Raises OperatorNotFound for unknown ids and PermissionDenied when the
        operator's role does not match.
        """
        operator = self._operators.get(operator_id)
        if operator is None:
            raise OperatorNotFound(operator_id)
        if role is not None and operator.role != role:
            raise PermissionDenied(
                f"{operator.name} ({operator.role.value}) may not perform a {role.value} action"
            )
        return operator
