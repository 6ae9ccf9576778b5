"""Storage port and the local SQLite store of whole-collection JSON values."""

from __future__ import annotations

import json
import logging
import sqlite3
from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Iterator

from pos_admin.errors import StorageError
from pos_admin.models import COLLECTIONS, AppState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Change:
    """One logical mutation, described for whichever store is wired in.

    ``collections`` lists the state collections the mutation rewrites,
    ``params`` holds route identifiers (table, product or record id) and
    ``payload`` is the JSON body a remote store sends.
    """

    kind: str
    collections: tuple[str, ...]
    params: dict[str, str] = field(default_factory=dict)
    payload: dict[str, Any] = field(default_factory=dict)


class StoragePort(ABC):
    """Where the manager loads state from and persists each change to."""

    @abstractmethod
    def load(self) -> AppState:
        """Return the full persisted state."""

    @abstractmethod
    def apply(self, change: Change, state: AppState) -> dict[str, Any] | None:
        """Persist ``change``; ``state`` is the state after the change.

        May return the record the backend stored (for example with a
        server-assigned id). Raises ``StorageError`` on failure.
        """


class LocalStore(StoragePort):
    """Keeps one JSON value per collection in a SQLite file."""

    def __init__(self, db_path: str | Path, seed: Callable[[], AppState] | None = None) -> None:
        self.db_path = Path(db_path)
        self._seed = seed
        self.bootstrap_schema()

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(self.db_path)
        try:
            yield conn
        finally:
            conn.close()

    def bootstrap_schema(self) -> None:
        """Create the collections table if it does not already exist."""
        with self._connect() as conn:
            with conn:
                conn.execute(
                    """
                    CREATE TABLE IF NOT EXISTS collections (
                        name TEXT PRIMARY KEY,
                        value TEXT NOT NULL,
                        updated_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
                    )
                    """
                )

    def read_raw(self) -> dict[str, Any]:
        with self._connect() as conn:
            rows = conn.execute("SELECT name, value FROM collections").fetchall()
        raw: dict[str, Any] = {}
        for name, value in rows:
            try:
                raw[name] = json.loads(value)
            except json.JSONDecodeError as exc:
                raise StorageError(f"Stored collection {name!r} is not valid JSON: {exc}") from exc
        return raw

    def load(self) -> AppState:
        raw = self.read_raw()
        if not raw and self._seed is not None:
            state = self._seed()
            self.save(state, COLLECTIONS)
            logger.info("local_store_seeded path=%s", self.db_path)
            return state
        try:
            return AppState.from_dict(raw)
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            raise StorageError(f"Stored state in {self.db_path} is malformed: {exc!r}") from exc

    def save(self, state: AppState, collections: tuple[str, ...] = COLLECTIONS) -> None:
        """Rewrite the named collections from ``state`` in one transaction."""
        with self._connect() as conn:
            with conn:
                for name in collections:
                    conn.execute(
                        """
                        INSERT INTO collections (name, value, updated_at) VALUES (?, ?, CURRENT_TIMESTAMP)
                        ON CONFLICT(name) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at
                        """,
                        (name, json.dumps(state.collection_to_json(name), ensure_ascii=False)),
                    )

    def apply(self, change: Change, state: AppState) -> dict[str, Any] | None:
        self.save(state, change.collections)
        logger.debug("local_store_apply kind=%s collections=%s", change.kind, ",".join(change.collections))
        return None
