from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional

from pydantic import Field

from .base import BaseSchema


class ProtocolErrorCode(str, Enum):
    unknown_ability = "unknown_ability"
    validation_failed = "validation_failed"
    permission_denied = "permission_denied"
    tenant_not_found = "tenant_not_found"
    execution_failed = "execution_failed"


class InvocationState(str, Enum):
    """States an ability invocation moves through inside the executor."""

    start = "start"
    validated = "validated"
    authorized = "authorized"
    context_entered = "context_entered"
    executed = "executed"
    context_exited = "context_exited"
    done = "done"
    failed = "failed"


class PostType(str, Enum):
    post = "post"
    page = "page"


class PostStatus(str, Enum):
    draft = "draft"
    publish = "publish"
    pending = "pending"
    private = "private"
    trash = "trash"


class SiteRole(str, Enum):
    administrator = "administrator"
    editor = "editor"
    author = "author"
    contributor = "contributor"
    subscriber = "subscriber"


class TemplatePartArea(str, Enum):
    header = "header"
    footer = "footer"
    sidebar = "sidebar"
    uncategorized = "uncategorized"


class SyncStatus(str, Enum):
    synced = "synced"
    unsynced = "unsynced"


class AbilityCategory(BaseSchema):
    """A named group abilities are listed under."""

    slug: str = Field(pattern=r"^[a-z0-9]+(?:-[a-z0-9]+)*$")
    label: str
    description: str = ""


class AbilityResult(BaseSchema):
    """
    The single result envelope every ability invocation produces.

    ``error`` is only set when the executor refused or aborted the invocation
    (a protocol failure). Business outcomes reported by an ability body, such
    as "post not found", keep ``error`` unset and carry ``success=False``.

    Attributes:
        success: Whether the operation achieved its goal.
        message: Human-readable summary.
        data: Ability-specific fields declared by its output schema.
        error: Protocol failure code, if any.
    """

    success: bool
    message: str = ""
    data: Dict[str, Any] = Field(default_factory=dict)
    error: Optional[ProtocolErrorCode] = None

    @classmethod
    def ok(cls, message: str = "", **data: Any) -> "AbilityResult":
        return cls(success=True, message=message, data=data)

    @classmethod
    def fail(cls, message: str, **data: Any) -> "AbilityResult":
        return cls(success=False, message=message, data=data)

    @property
    def is_protocol_error(self) -> bool:
        return self.error is not None

    def to_payload(self) -> Dict[str, Any]:
        """Flatten to the wire shape ``{success, ...data, message}``."""
        payload: Dict[str, Any] = {"success": self.success}
        payload.update(self.data)
        payload["message"] = self.message
        return payload
