"""Selection persistence collaborators."""

from prism.persistence.store import (
    KeyValueStore,
    MemoryStore,
    SelectionPersistence,
    SQLiteStore,
    StoreError,
)

__all__ = [
    "KeyValueStore",
    "MemoryStore",
    "SelectionPersistence",
    "SQLiteStore",
    "StoreError",
]
