"""
Taxonomy term entity models.

Terms group posts inside one site, e.g. ``wp_pattern_category`` for patterns
and ``wp_theme`` for the theme a customised template belongs to.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import UniqueConstraint
from sqlmodel import Field

from ..base import Base


class Term(Base, table=True):
    """Entity for a taxonomy term of a site.

    Table: ms_terms
    """

    __tablename__ = "ms_terms"
    __table_args__ = (UniqueConstraint("site_id", "taxonomy", "slug", name="uq_ms_terms_site_taxonomy_slug"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    site_id: int = Field(index=True)
    taxonomy: str = Field(max_length=32, index=True)
    slug: str = Field(max_length=200)
    name: str = Field(max_length=200)

    def __repr__(self) -> str:
        return f"Term(id={self.id}, taxonomy={self.taxonomy}, slug={self.slug})"


class TermRelationship(Base, table=True):
    """Assignment of a term to a post.

    Table: ms_term_relationships
    """

    __tablename__ = "ms_term_relationships"

    id: Optional[int] = Field(default=None, primary_key=True)
    site_id: int = Field(index=True)
    post_id: int = Field(index=True)
    term_id: int = Field(index=True)
