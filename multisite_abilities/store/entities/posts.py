"""
Post entity models.

Every document of a site is a post row: posts, pages, customised block
templates (``wp_template``), template parts (``wp_template_part``) and synced
patterns (``wp_block``). Extra per-document data lives in post meta.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from sqlmodel import JSON, Field

from ..base import Base, timestamp_type, utc_now


class PostBase(Base):
    """Base fields for post entity."""

    post_type: str = Field(default="post", max_length=20, index=True)
    post_title: str = Field(default="")
    post_content: str = Field(default="")
    post_excerpt: str = Field(default="")
    post_status: str = Field(default="draft", max_length=20, index=True)
    post_name: str = Field(default="", max_length=200, description="URL slug")
    post_author: int = Field(default=0)


class Post(PostBase, table=True):
    """Entity for a site document.

    Table: ms_posts
    """

    __tablename__ = "ms_posts"

    id: Optional[int] = Field(default=None, primary_key=True)
    site_id: int = Field(index=True)

    # Timestamps
    post_date: datetime = Field(default_factory=utc_now, sa_type=timestamp_type(), index=True)
    post_modified: datetime = Field(default_factory=utc_now, sa_type=timestamp_type())

    def __repr__(self) -> str:
        return f"Post(id={self.id}, site_id={self.site_id}, post_type={self.post_type}, status={self.post_status})"


class PostMeta(Base, table=True):
    """Single-valued metadata attached to a post.

    Table: ms_postmeta
    """

    __tablename__ = "ms_postmeta"

    id: Optional[int] = Field(default=None, primary_key=True)
    site_id: int = Field(index=True)
    post_id: int = Field(index=True)
    meta_key: str = Field(max_length=255, index=True)
    meta_value: Any = Field(default=None, sa_type=JSON)

    def __repr__(self) -> str:
        return f"PostMeta(post_id={self.post_id}, meta_key={self.meta_key})"
