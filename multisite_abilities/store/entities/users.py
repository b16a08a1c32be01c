"""
Network user entity.

Users belong to the network, not to a single site; site access is granted
through ``SiteMembership`` rows.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlmodel import Field

from ..base import Base, timestamp_type, utc_now


class User(Base, table=True):
    """Entity for a network user.

    Table: ms_users
    """

    __tablename__ = "ms_users"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_login: str = Field(max_length=60, unique=True, index=True)
    user_email: str = Field(max_length=100, index=True)
    display_name: str = Field(default="", max_length=250)
    first_name: str = Field(default="", max_length=100)
    last_name: str = Field(default="", max_length=100)
    is_super_admin: bool = Field(default=False)
    user_registered: datetime = Field(default_factory=utc_now, sa_type=timestamp_type())

    def __repr__(self) -> str:
        return f"User(id={self.id}, user_login={self.user_login})"
