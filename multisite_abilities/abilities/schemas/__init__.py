"""Schemas and DTOs for the abilities."""

from .base import BaseSchema
from .domain import (
    AbilityCategory,
    AbilityResult,
    InvocationState,
    PostStatus,
    PostType,
    ProtocolErrorCode,
    SiteRole,
    SyncStatus,
    TemplatePartArea,
)

__all__ = [
    "AbilityCategory",
    "AbilityResult",
    "BaseSchema",
    "InvocationState",
    "PostStatus",
    "PostType",
    "ProtocolErrorCode",
    "SiteRole",
    "SyncStatus",
    "TemplatePartArea",
]
