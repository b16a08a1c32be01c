"""
Site entity models.

This module contains the database entities for the sites (tenants) of the
network and the membership of network users in those sites.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import UniqueConstraint
from sqlmodel import Field

from ..base import Base, timestamp_type, utc_now


class SiteBase(Base):
    """Base fields for site entity."""

    domain: str = Field(max_length=200, description="Host name the site is served from")
    path: str = Field(default="/", max_length=100, description="Path below the domain, always slash-terminated")

    # Status flags
    public: bool = Field(default=True)
    archived: bool = Field(default=False)
    deleted: bool = Field(default=False)
    spam: bool = Field(default=False)
    mature: bool = Field(default=False)


class Site(SiteBase, table=True):
    """Entity for a site of the network.

    Table: ms_sites
    """

    __tablename__ = "ms_sites"
    __table_args__ = (UniqueConstraint("domain", "path", name="uq_ms_sites_domain_path"),)

    id: Optional[int] = Field(default=None, primary_key=True)

    # Timestamps
    registered: datetime = Field(default_factory=utc_now, sa_type=timestamp_type())
    last_updated: datetime = Field(default_factory=utc_now, sa_type=timestamp_type())

    def __repr__(self) -> str:
        return f"Site(id={self.id}, domain={self.domain}, path={self.path})"


class SiteMembership(Base, table=True):
    """Role a network user holds on one site.

    Table: ms_site_memberships
    """

    __tablename__ = "ms_site_memberships"
    __table_args__ = (UniqueConstraint("site_id", "user_id", name="uq_ms_site_memberships_site_user"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    site_id: int = Field(index=True)
    user_id: int = Field(index=True)
    role: str = Field(max_length=32)

    def __repr__(self) -> str:
        return f"SiteMembership(site_id={self.site_id}, user_id={self.user_id}, role={self.role})"
