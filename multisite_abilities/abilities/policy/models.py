from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import Field

from ..schemas.base import BaseSchema

REASON_INVALID_KEY = "Invalid option key."
REASON_NOT_ALLOWLISTED = "not allowlisted"
REASON_UNCHANGED = "value unchanged"
REASON_INVALID_VALUE = "invalid value"
REASON_NOT_FOUND = "not found"
REASON_WRITE_FAILED = "write failed"

DEFAULT_WRITE_ALLOWLIST = (
    # Identity
    "blogname",
    "blogdescription",
    # Homepage
    "show_on_front",
    "page_on_front",
    "page_for_posts",
    # Reading
    "posts_per_page",
    "posts_per_rss",
    "rss_use_excerpt",
    "blog_public",
    # Writing
    "default_category",
    "default_post_format",
    "default_pingback_flag",
    # Discussion
    "default_comment_status",
    "default_ping_status",
    "require_name_email",
    "comment_registration",
    "close_comments_for_old_posts",
    "close_comments_days_old",
    "thread_comments",
    "thread_comments_depth",
    "page_comments",
    "comments_per_page",
    "default_comments_page",
    "comment_order",
    "comments_notify",
    "moderation_notify",
    "comment_moderation",
    "comment_whitelist",
    "comment_max_links",
    # Date / time
    "date_format",
    "time_format",
    "start_of_week",
    "timezone_string",
    "gmt_offset",
    # Permalinks
    "permalink_structure",
    "category_base",
    "tag_base",
    # Media
    "thumbnail_size_w",
    "thumbnail_size_h",
    "thumbnail_crop",
    "medium_size_w",
    "medium_size_h",
    "large_size_w",
    "large_size_h",
    "uploads_use_yearmonth_folders",
)

DEFAULT_READ_BLOCKLIST = (
    "auth_key",
    "secure_auth_key",
    "logged_in_key",
    "nonce_key",
    "auth_salt",
    "secure_auth_salt",
    "logged_in_salt",
    "nonce_salt",
    "mailserver_pass",
    "mailserver_login",
    "mailserver_url",
    "mailserver_port",
    "db_password",
    "db_user",
)


class WriteStatus(str, Enum):
    """
    Classification of a single option write attempt.

    Attributes:
        updated: The value was written.
        skipped: Nothing was written and nothing is wrong (informational).
        errored: Nothing was written because the request was invalid or the write failed.
    """
    updated = "updated"
    skipped = "skipped"
    errored = "errored"


class OptionResolver(str, Enum):
    """How an allowlisted key turns the proposed value into the stored one."""

    # Accepts a page id or the exact title of a page.
    page_reference = "page_reference"


class OptionPolicyConfig(BaseSchema):
    """
    Static tables consulted by the ``FieldPolicy``.

    The defaults cover the safe, commonly needed site options. Deployments can
    widen or narrow them, but the tables never change while abilities run.
    """
    write_allowlist: set[str] = Field(
        default_factory=lambda: set(DEFAULT_WRITE_ALLOWLIST),
        description="Option keys that may be written.",
    )
    resolvers: dict[str, OptionResolver] = Field(
        default_factory=lambda: {
            "page_on_front": OptionResolver.page_reference,
            "page_for_posts": OptionResolver.page_reference,
        },
        description="Allowlisted keys whose value is resolved before writing.",
    )
    read_blocklist: set[str] = Field(
        default_factory=lambda: set(DEFAULT_READ_BLOCKLIST),
        description="Option keys whose value is never returned.",
    )
    value_domains: dict[str, list[Any]] = Field(
        default_factory=lambda: {"show_on_front": ["posts", "page"]},
        description="Allowlisted keys restricted to an enumerated set of values.",
    )
    page_reference_statuses: list[str] = Field(
        default_factory=lambda: ["publish", "draft", "private"],
        description="Statuses a page must have to be found by its title.",
    )
    max_batch: int = Field(default=20, ge=1, description="Entries processed per batch, the rest is dropped.")
    redaction_marker: str = "[redacted]"
    loose_unchanged_comparison: bool = Field(
        default=False,
        description=(
            "When a write reports no change, compare the stored and proposed value by "
            "their string form instead of by type and value."
        ),
    )


@dataclass(frozen=True)
class WriteOutcome:
    """Exactly one outcome per write attempt."""

    key: str
    status: WriteStatus
    reason: Optional[str] = None
    value: Any = None

    @classmethod
    def updated(cls, key: str, value: Any) -> "WriteOutcome":
        return cls(key=key, status=WriteStatus.updated, value=value)

    @classmethod
    def skipped(cls, key: str, reason: str) -> "WriteOutcome":
        return cls(key=key, status=WriteStatus.skipped, reason=reason)

    @classmethod
    def errored(cls, key: str, reason: str) -> "WriteOutcome":
        return cls(key=key, status=WriteStatus.errored, reason=reason)


@dataclass
class BatchWriteResult:
    """Per-key outcomes of a batch. ``success`` is false as soon as one key errored."""

    updated: List[str] = field(default_factory=list)
    skipped: List[Dict[str, str]] = field(default_factory=list)
    errors: List[Dict[str, str]] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.errors

    def add(self, outcome: WriteOutcome) -> None:
        if outcome.status is WriteStatus.updated:
            self.updated.append(outcome.key)
        elif outcome.status is WriteStatus.skipped:
            self.skipped.append({"key": outcome.key, "reason": outcome.reason or ""})
        else:
            self.errors.append({"key": outcome.key, "reason": outcome.reason or ""})
