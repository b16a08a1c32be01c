"""Ability interface and execution context.

An ability is the unit the executor runs. Each concrete ability declares:

- ``name`` (``category/verb-noun``), ``label``, ``description`` and ``category``,
- ``input_model``, the pydantic model its input is validated against before
  the body runs,
- ``output_model``, whose field defaults shape protocol failures,
- ``tenant_field``, the input field naming the site the body runs against
  (``None`` for network-scoped abilities),
- ``authorize()``, a zero-argument permission predicate,
- ``execute(ctx, args=...)``, the body.

Bodies return ``AbilityResult`` values for every business outcome. They never
enter or exit the tenant context they were invoked in; the executor does.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, Dict, Optional, Type

from multisite_abilities.core.config import Settings
from multisite_abilities.store.interfaces import ContentStore, SiteDirectory

from .context import TenantContextManager
from .identity import MANAGE_NETWORK_OPTIONS, current_user_can
from .policy import FieldPolicy
from .schemas.domain import AbilityResult
from .schemas.io import AbilityInput, AbilityOutput


@dataclass(frozen=True)
class AbilityContext:
    """Collaborators handed to every ability body.

    Attributes
    ----------
    directory:
        Network-scoped store (sites, users, themes, plugins).
    content:
        Tenant-scoped store; resolves against the active tenant on every call.
    tenants:
        The tenant context manager, for bodies that switch tenants themselves.
    options:
        The field policy every site option read or write goes through.
    settings:
        Runtime settings.
    """

    directory: SiteDirectory
    content: ContentStore
    tenants: TenantContextManager
    options: FieldPolicy
    settings: Settings


class BaseAbility:
    """Base class for the closed set of abilities."""

    name: ClassVar[str]
    label: ClassVar[str]
    description: ClassVar[str]
    category: ClassVar[str]
    input_model: ClassVar[Type[AbilityInput]] = AbilityInput
    output_model: ClassVar[Type[AbilityOutput]] = AbilityOutput
    tenant_field: ClassVar[Optional[str]] = "site_id"
    required_capability: ClassVar[str] = MANAGE_NETWORK_OPTIONS

    def authorize(self) -> bool:
        """Permission predicate. Sees the ambient caller only, never the input."""
        return current_user_can(self.required_capability)

    def execute(self, ctx: AbilityContext, *, args: Dict[str, Any]) -> AbilityResult:
        raise NotImplementedError

    @property
    def input_schema(self) -> Dict[str, Any]:
        return self.input_model.model_json_schema()

    @property
    def output_schema(self) -> Dict[str, Any]:
        return self.output_model.model_json_schema()

    def zero_output(self) -> Dict[str, Any]:
        """Zero value of every declared output field, except the envelope fields."""
        return self.output_model.zero()

    def describe(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "label": self.label,
            "description": self.description,
            "category": self.category,
            "input_schema": self.input_schema,
            "output_schema": self.output_schema,
            "tenant_scoped": self.tenant_field is not None,
        }

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"
