"""
Multisite data store.

This package provides the persistence layer the abilities work against:

- entities/: SQLModel tables organised by business domain
- interfaces.py: ``SiteDirectory`` (network scope) and ``ContentStore`` (tenant scope) protocols
- sql.py: SQLModel implementations of both protocols
- utils.py: Engine, session factory and table creation helpers
"""

from .base import Base
from .errors import DuplicateEntryError, EntryNotFoundError, StoreError
from .interfaces import BlockTemplate, ContentStore, SiteDirectory
from .sql import SqlContentStore, SqlSiteDirectory
from .utils import create_all, create_engine, create_sessionmaker

__all__ = [
    "Base",
    "BlockTemplate",
    "ContentStore",
    "DuplicateEntryError",
    "EntryNotFoundError",
    "SiteDirectory",
    "SqlContentStore",
    "SqlSiteDirectory",
    "StoreError",
    "create_all",
    "create_engine",
    "create_sessionmaker",
]
