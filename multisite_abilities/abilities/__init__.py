"""
Ability layer.

Abilities are named, schema-validated operations on the multisite network.
An ``AbilityExecutor`` runs them through validation, authorization and, for
tenant-scoped abilities, a switched tenant context:

- base.py: ``BaseAbility`` and the ``AbilityContext`` handed to every body
- registry.py: the ``AbilityRegistry`` and its registration window
- executor.py: the invocation state machine
- context.py: the tenant context stack
- identity.py: ambient caller identity and ``current_user_can``
- validation.py and schemas/io.py: pydantic input and output models and their validation
- policy/: the site option field policy
- builtin/: the ``vip-multisite`` abilities
"""

from .base import AbilityContext, BaseAbility
from .builtin import BUILTIN_ABILITIES, register_builtin_abilities
from .context import TenantContextManager, TenantHandle
from .errors import (
    AbilityProtocolError,
    PermissionDenied,
    TenantContextError,
    TenantNotFound,
    UnknownAbility,
    ValidationFailed,
)
from .executor import AbilityExecutor
from .identity import Caller, acting_as, current_caller, current_user_can
from .registry import AbilityRegistry
from .schemas import AbilityCategory, AbilityResult, ProtocolErrorCode

__all__ = [
    "AbilityCategory",
    "AbilityContext",
    "AbilityExecutor",
    "AbilityProtocolError",
    "AbilityRegistry",
    "AbilityResult",
    "BUILTIN_ABILITIES",
    "BaseAbility",
    "Caller",
    "PermissionDenied",
    "ProtocolErrorCode",
    "TenantContextError",
    "TenantContextManager",
    "TenantHandle",
    "TenantNotFound",
    "UnknownAbility",
    "ValidationFailed",
    "acting_as",
    "current_caller",
    "current_user_can",
    "register_builtin_abilities",
]
