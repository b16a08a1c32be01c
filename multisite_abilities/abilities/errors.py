"""Protocol-level errors raised while the executor prepares an invocation.

These errors mean "the ability could not run". They never describe a
business outcome: an ability that ran and found, say, no such post returns an
ordinary ``AbilityResult`` with ``success=False`` instead of raising.
"""

from __future__ import annotations

from typing import Any

from .schemas.domain import ProtocolErrorCode


class AbilityProtocolError(Exception):
    """Base class for executor-level failures.

    Attributes:
        code: The ``ProtocolErrorCode`` reported on the result envelope.
        message: Human-readable reason safe to return to the caller.
    """

    code: ProtocolErrorCode = ProtocolErrorCode.execution_failed

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class UnknownAbility(AbilityProtocolError):
    code = ProtocolErrorCode.unknown_ability

    def __init__(self, name: str) -> None:
        super().__init__(f"Ability '{name}' is not registered.")
        self.name = name


class ValidationFailed(AbilityProtocolError):
    """Input did not satisfy the ability's input schema."""

    code = ProtocolErrorCode.validation_failed

    def __init__(self, field: str, reason: str) -> None:
        super().__init__(f"Invalid input for '{field}': {reason}.")
        self.field = field
        self.reason = reason


class PermissionDenied(AbilityProtocolError):
    code = ProtocolErrorCode.permission_denied

    def __init__(self) -> None:
        # Neither the input nor the required capability is echoed.
        super().__init__("You are not permitted to run this ability.")


class TenantNotFound(AbilityProtocolError):
    code = ProtocolErrorCode.tenant_not_found

    def __init__(self, tenant_id: Any) -> None:
        super().__init__(f"Site ID {tenant_id} not found.")
        self.tenant_id = tenant_id


class TenantContextError(RuntimeError):
    """A tenant handle was released out of order."""
