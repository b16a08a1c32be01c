"""Exceptions raised by the data store."""


class StoreError(Exception):
    """Base class for data store failures."""


class DuplicateEntryError(StoreError):
    """A row with the same unique identifier already exists."""


class EntryNotFoundError(StoreError):
    """The row addressed by a write does not exist."""
