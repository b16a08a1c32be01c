"""
Base database models and utilities.

This module provides the foundational database components used across
all entities of the multisite data store using SQLModel.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from pydantic import ConfigDict
from sqlalchemy import DateTime
from sqlmodel import SQLModel

# Primary keys are signed 64-bit integers; larger ids never match a row.
MAX_ROW_ID = 2**63 - 1


class Base(SQLModel):
    """Base class for all SQLModel entities."""

    model_config = ConfigDict(arbitrary_types_allowed=True)


def utc_now() -> datetime:
    """Current time in UTC, timezone-aware, second precision."""
    return datetime.now(timezone.utc).replace(microsecond=0)


def timestamp_type() -> DateTime:
    """Column type for the entity timestamps."""
    return DateTime(timezone=True)


def is_row_id(value: Any) -> bool:
    """Whether ``value`` fits a primary key column."""
    return isinstance(value, int) and not isinstance(value, bool) and -MAX_ROW_ID - 1 <= value <= MAX_ROW_ID
