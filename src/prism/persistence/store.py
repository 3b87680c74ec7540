"""Key-value persistence for reader selections.

The engine only needs get/set/remove on string values. Persisted picks
are stored as a JSON {line: index} mapping; a share token is accepted on
load as well. Persistence is best effort: a failing store is logged and
reported, never raised into the pick path.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Protocol

from prism.db.connection import get_connection, init_db
from prism.document.models import Document
from prism.engine.selection import SelectionState
from prism.share.codec import decode, decode_for_document

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """Raised when a store cannot read or write."""

    def __init__(self, operation: str, key: str, reason: str):
        self.operation = operation
        self.key = key
        super().__init__(f"Store {operation} failed for {key!r}: {reason}")


class KeyValueStore(Protocol):
    """Minimal persistence interface."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...


class MemoryStore:
    """Dict-backed store for tests and ephemeral sessions."""

    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)


class SQLiteStore:
    """Persistent store in a single SQLite table."""

    def __init__(self, db_path: Path | str):
        self.db_path = db_path
        if isinstance(db_path, Path):
            db_path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = get_connection(db_path)
        init_db(self._conn)

    def get(self, key: str) -> str | None:
        try:
            row = self._conn.execute(
                "SELECT value FROM kv WHERE key = ?", (key,)
            ).fetchone()
        except sqlite3.Error as e:
            raise StoreError("get", key, str(e)) from e
        return row["value"] if row else None

    def set(self, key: str, value: str) -> None:
        try:
            self._conn.execute(
                """
                INSERT INTO kv (key, value, updated_at)
                VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET
                    value = excluded.value,
                    updated_at = excluded.updated_at
                """,
                (key, value, datetime.now(timezone.utc).isoformat()),
            )
            self._conn.commit()
        except sqlite3.Error as e:
            raise StoreError("set", key, str(e)) from e

    def remove(self, key: str) -> None:
        try:
            self._conn.execute("DELETE FROM kv WHERE key = ?", (key,))
            self._conn.commit()
        except sqlite3.Error as e:
            raise StoreError("remove", key, str(e)) from e

    def close(self) -> None:
        self._conn.close()


class SelectionPersistence:
    """Saves and restores one document's SelectionState under a key.

    Any exception the store raises is logged and reported as a failure,
    never propagated. With a document, a stored share token is keyed by
    choice line rather than by position.

    Last writer wins: concurrent sessions on the same key overwrite each
    other's persisted copy.
    """

    def __init__(
        self, store: KeyValueStore, key: str, document: Document | None = None
    ):
        self.store = store
        self.key = key
        self.document = document

    def save(self, selection: SelectionState) -> bool:
        """Persist picks; returns False (and logs) if the store failed."""
        payload = json.dumps({str(k): v for k, v in selection.to_dict().items()})
        try:
            self.store.set(self.key, payload)
        except Exception as e:
            logger.warning(f"Could not persist selection: {e}")
            return False
        return True

    def load(self) -> SelectionState:
        """Restore picks; an unreadable or corrupt value gives an empty state."""
        try:
            raw = self.store.get(self.key)
        except Exception as e:
            logger.warning(f"Could not read persisted selection: {e}")
            return SelectionState()

        if not raw:
            return SelectionState()

        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            # Not JSON: treat as an encoded share token
            return self._decode_token(raw)

        if isinstance(data, dict):
            return SelectionState.from_mapping(data)
        if isinstance(data, int) and not isinstance(data, bool):
            # A single-choice token such as "2" also parses as JSON
            return self._decode_token(raw)

        logger.warning(f"Ignoring persisted selection of type {type(data).__name__}")
        return SelectionState()

    def clear(self) -> bool:
        try:
            self.store.remove(self.key)
        except Exception as e:
            logger.warning(f"Could not clear persisted selection: {e}")
            return False
        return True

    def _decode_token(self, token: str) -> SelectionState:
        if self.document is None:
            return decode(token)
        return decode_for_document(self.document, token)
