"""
Database utility functions for engine and session management.

Functions:
- create_engine: Creates a SQLAlchemy engine, pinning in-memory SQLite to one connection
- create_sessionmaker: Creates a session factory with safe defaults
- create_all: Creates all tables from ORM metadata (for tests/dev)
"""

from __future__ import annotations

from sqlalchemy import create_engine as sa_create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import Session
from sqlmodel.pool import StaticPool

from . import entities  # noqa: F401  (registers the tables on the metadata)
from .base import Base


def create_engine(db_url: str, *, echo: bool = False) -> Engine:
    """Create a SQLAlchemy engine.

    In-memory SQLite databases only live as long as their connection, so they
    share a single connection through ``StaticPool``.

    Args:
        db_url: Database connection URL
        echo: Log emitted SQL statements

    Returns:
        Configured Engine instance
    """
    if db_url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in db_url or db_url.rstrip("/") in ("sqlite:", "sqlite:/"):
            kwargs["poolclass"] = StaticPool
        return sa_create_engine(db_url, echo=echo, **kwargs)
    return sa_create_engine(db_url, echo=echo, pool_pre_ping=True)


def create_sessionmaker(engine: Engine) -> sessionmaker[Session]:
    """Create a ``sessionmaker`` producing SQLModel sessions.

    Args:
        engine: SQLAlchemy engine

    Returns:
        Session factory that keeps loaded attributes after commit
    """
    return sessionmaker(engine, class_=Session, expire_on_commit=False)


def create_all(engine: Engine) -> None:
    """Create all tables for the current ORM metadata.

    This is mainly intended for tests and local development.

    Args:
        engine: SQLAlchemy engine
    """
    Base.metadata.create_all(engine)
