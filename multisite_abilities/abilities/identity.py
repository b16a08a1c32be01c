"""Ambient caller identity and the permission predicate.

Abilities never receive the caller as an argument. The transport sets the
caller for the duration of a request with ``acting_as`` and permission
predicates ask ``current_user_can`` without arguments.
"""

from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import FrozenSet, Iterator

MANAGE_NETWORK_OPTIONS = "manage_network_options"
UNFILTERED_HTML = "unfiltered_html"


@dataclass(frozen=True)
class Caller:
    """Who is invoking abilities.

    Super admins hold every capability. Everyone else holds exactly the
    capabilities listed in ``capabilities``.
    """

    user_id: int = 0
    capabilities: FrozenSet[str] = field(default_factory=frozenset)
    is_super_admin: bool = False

    def can(self, capability: str) -> bool:
        return self.is_super_admin or capability in self.capabilities

    @classmethod
    def anonymous(cls) -> "Caller":
        return cls()

    @classmethod
    def super_admin(cls, user_id: int = 1) -> "Caller":
        return cls(user_id=user_id, is_super_admin=True)


_current_caller: ContextVar[Caller] = ContextVar("multisite_abilities_caller", default=Caller())


def current_caller() -> Caller:
    return _current_caller.get()


def current_user_can(capability: str) -> bool:
    """Check a capability against the ambient caller."""
    return _current_caller.get().can(capability)


@contextmanager
def acting_as(caller: Caller) -> Iterator[Caller]:
    """Make ``caller`` the ambient identity inside the ``with`` block."""
    token = _current_caller.set(caller)
    try:
        yield caller
    finally:
        _current_caller.reset(token)
