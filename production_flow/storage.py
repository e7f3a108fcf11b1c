"""SQLite-backed persistence for the production flow tracker."""

from __future__ import annotations

import logging
import pickle
import sqlite3
import threading
from contextlib import contextmanager
from typing import Generic, Iterator, List, Optional, TypeVar

from .domain import Pan, ProductionOrder, Workcenter
from .repository import DuplicateRecordError, RecordNotFoundError

T = TypeVar("T")

logger = logging.getLogger(__name__)


class SQLiteRepository(Generic[T]):
    """Repository implementation that persists records inside SQLite.

    The connection runs in autocommit mode; statements issued inside
    :meth:`FlowDatabase.transaction` join that transaction instead.
    """

    def __init__(
        self, connection: sqlite3.Connection, table: str, lock: threading.RLock
    ) -> None:
        self._connection = connection
        self._table = table
        self._lock = lock
        with self._lock:
            self._connection.execute(
                f"CREATE TABLE IF NOT EXISTS {table} ("  # nosec - static table names
                "id TEXT PRIMARY KEY, seq INTEGER NOT NULL, payload BLOB NOT NULL)"
            )

    def __contains__(self, item_id: object) -> bool:
        if not isinstance(item_id, str):
            return False
        with self._lock:
            cursor = self._connection.execute(
                f"SELECT 1 FROM {self._table} WHERE id = ? LIMIT 1", (item_id,)
            )
            return cursor.fetchone() is not None

    def __iter__(self) -> Iterator[T]:
        return iter(self.list())

    def __len__(self) -> int:  # pragma: no cover - simple delegation
        with self._lock:
            cursor = self._connection.execute(f"SELECT COUNT(1) FROM {self._table}")
            value = cursor.fetchone()
        return int(value[0]) if value else 0

    # ------------------------------------------------------------------
    # CRUD operations
    # ------------------------------------------------------------------
    def add(self, item_id: str, item: T) -> None:
        payload = pickle.dumps(item)
        with self._lock:
            if item_id in self:
                raise DuplicateRecordError(f"Record with id {item_id!r} already exists")
            self._connection.execute(
                f"INSERT INTO {self._table} (id, seq, payload) VALUES "
                f"(?, (SELECT COALESCE(MAX(seq), 0) + 1 FROM {self._table}), ?)",
                (item_id, payload),
            )

    def upsert(self, item_id: str, item: T) -> None:
        payload = pickle.dumps(item)
        with self._lock:
            self._connection.execute(
                f"INSERT INTO {self._table} (id, seq, payload) VALUES "
                f"(?, (SELECT COALESCE(MAX(seq), 0) + 1 FROM {self._table}), ?) "
                "ON CONFLICT(id) DO UPDATE SET payload = excluded.payload",
                (item_id, payload),
            )

    def get(self, item_id: str) -> T:
        with self._lock:
            cursor = self._connection.execute(
                f"SELECT payload FROM {self._table} WHERE id = ?", (item_id,)
            )
            row = cursor.fetchone()
        if row is None:
            raise RecordNotFoundError(f"Record with id {item_id!r} not found")
        return pickle.loads(row[0])

    def list(self) -> List[T]:
        with self._lock:
            cursor = self._connection.execute(
                f"SELECT payload FROM {self._table} ORDER BY seq"
            )
            rows = cursor.fetchall()
        return [pickle.loads(row[0]) for row in rows]


class FlowDatabase:
    """:class:`~production_flow.repository.FlowStore` stored in one SQLite file."""

    def __init__(self, path: str) -> None:
        connection = sqlite3.connect(path, check_same_thread=False, isolation_level=None)
        self._connection = connection
        self._lock = threading.RLock()
        self._depth = 0
        self.path = path
        self.pans = SQLiteRepository[Pan](connection, "pans", self._lock)
        self.workcenters = SQLiteRepository[Workcenter](
            connection, "workcenters", self._lock
        )
        self.orders = SQLiteRepository[ProductionOrder](
            connection, "production_orders", self._lock
        )
        logger.debug("Opened flow database at %s", path)

    @property
    def connection(self) -> sqlite3.Connection:
        return self._connection

    @contextmanager
    def transaction(self) -> Iterator[None]:
        with self._lock:
            if self._depth:
                self._depth += 1
                try:
                    yield
                finally:
                    self._depth -= 1
                return
            self._connection.execute("BEGIN IMMEDIATE")
            self._depth = 1
            try:
                yield
            except BaseException:
                self._connection.execute("ROLLBACK")
                raise
            else:
                self._connection.execute("COMMIT")
            finally:
                self._depth = 0

    def close(self) -> None:
        self._connection.close()

    def __enter__(self) -> "FlowDatabase":
        return self

    def __exit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc: Optional[BaseException],
        traceback: Optional[BaseException],
    ) -> None:
        self.close()


__all__ = ["SQLiteRepository", "FlowDatabase"]
