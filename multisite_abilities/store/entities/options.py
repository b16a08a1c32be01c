"""
Option entity models.

Site options are key/value settings of one site (``blogname``,
``show_on_front``...). Network options are shared by the whole network
(``allowedthemes``, ``active_sitewide_plugins``). Values are stored as JSON
so scalars keep their type.
"""

from __future__ import annotations

from typing import Any, Optional

from sqlalchemy import UniqueConstraint
from sqlmodel import JSON, Field

from ..base import Base


class Option(Base, table=True):
    """Entity for a per-site option.

    Table: ms_options
    """

    __tablename__ = "ms_options"
    __table_args__ = (UniqueConstraint("site_id", "option_name", name="uq_ms_options_site_name"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    site_id: int = Field(index=True)
    option_name: str = Field(max_length=191)
    option_value: Any = Field(default=None, sa_type=JSON)

    def __repr__(self) -> str:
        return f"Option(site_id={self.site_id}, option_name={self.option_name})"


class NetworkOption(Base, table=True):
    """Entity for a network-wide option.

    Table: ms_network_options
    """

    __tablename__ = "ms_network_options"

    id: Optional[int] = Field(default=None, primary_key=True)
    option_name: str = Field(max_length=191, unique=True, index=True)
    option_value: Any = Field(default=None, sa_type=JSON)

    def __repr__(self) -> str:
        return f"NetworkOption(option_name={self.option_name})"
