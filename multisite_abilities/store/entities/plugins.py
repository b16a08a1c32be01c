"""Installed plugin entity."""

from __future__ import annotations

from sqlmodel import Field

from ..base import Base


class Plugin(Base, table=True):
    """Entity for an installed plugin and its header metadata.

    Network activation is tracked separately in the
    ``active_sitewide_plugins`` network option.

    Table: ms_plugins
    """

    __tablename__ = "ms_plugins"

    file: str = Field(primary_key=True, max_length=255, description="Plugin file relative to the plugins directory")
    name: str = Field(max_length=200)
    version: str = Field(default="", max_length=32)
    author: str = Field(default="", max_length=200)
    description: str = Field(default="")

    def __repr__(self) -> str:
        return f"Plugin(file={self.file})"
