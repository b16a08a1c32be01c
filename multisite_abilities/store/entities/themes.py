"""
Theme entity models.

A theme is installed once for the whole network. Block themes ship
file-backed templates and template parts; those are stored in
``ms_theme_templates`` and act as the defaults a site can customise.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import UniqueConstraint
from sqlmodel import Field

from ..base import Base


class Theme(Base, table=True):
    """Entity for an installed theme.

    Table: ms_themes
    """

    __tablename__ = "ms_themes"

    slug: str = Field(primary_key=True, max_length=100, description="Stylesheet directory name")
    name: str = Field(max_length=200)
    version: str = Field(default="", max_length=32)
    author: str = Field(default="", max_length=200)
    description: str = Field(default="")
    template: Optional[str] = Field(default=None, max_length=100, description="Parent theme slug for child themes")

    def __repr__(self) -> str:
        return f"Theme(slug={self.slug}, version={self.version})"


class ThemeTemplate(Base, table=True):
    """File-backed template or template part shipped by a theme.

    Table: ms_theme_templates
    """

    __tablename__ = "ms_theme_templates"
    __table_args__ = (UniqueConstraint("theme", "template_type", "slug", name="uq_ms_theme_templates_slug"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    theme: str = Field(max_length=100, index=True)
    template_type: str = Field(max_length=20, description="wp_template or wp_template_part")
    slug: str = Field(max_length=200)
    title: str = Field(default="")
    description: str = Field(default="")
    content: str = Field(default="")
    area: Optional[str] = Field(default=None, max_length=32)

    def __repr__(self) -> str:
        return f"ThemeTemplate(theme={self.theme}, type={self.template_type}, slug={self.slug})"
