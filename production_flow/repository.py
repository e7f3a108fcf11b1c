"""Repository abstractions and the in-memory store used by the service layer."""

from __future__ import annotations

import threading
from contextlib import contextmanager
from copy import deepcopy
from dataclasses import asdict
from typing import (
    ContextManager,
    Dict,
    Generic,
    Iterable,
    Iterator,
    List,
    MutableMapping,
    Optional,
    Protocol,
    Tuple,
    TypeVar,
)

from .domain import Pan, ProductionOrder, Workcenter

T = TypeVar("T")

_MISSING = object()


class RepositoryError(RuntimeError):
    """Base exception for repository errors."""


class DuplicateRecordError(RepositoryError):
    """Raised when attempting to insert a record that already exists."""


class RecordNotFoundError(RepositoryError):
    """Raised when a requested record is missing."""


class Repository(Protocol[T]):
    """Capability every backing collection offers to the core."""

    def __contains__(self, item_id: object) -> bool: ...

    def add(self, item_id: str, item: T) -> None: ...

    def upsert(self, item_id: str, item: T) -> None: ...

    def get(self, item_id: str) -> T: ...

    def list(self) -> List[T]: ...


class FlowStore(Protocol):
    """Bundle of repositories plus a unit of work spanning all of them.

    Writes issued inside ``transaction()`` are applied together or not at
    all, and no two transactions on the same store interleave.
    """

    pans: Repository[Pan]
    workcenters: Repository[Workcenter]
    orders: Repository[ProductionOrder]

    def transaction(self) -> ContextManager[None]: ...


class InMemoryRepository(Generic[T]):
    """Generic repository backed by a simple dictionary.

    Records are copied on the way in and out so callers never share state
    with the stored version; a rollback can then restore the prior copy.
    Every access takes ``lock``, which the owning store also holds for the
    whole of a transaction, so readers never see half-applied writes.
    """

    def __init__(self, lock: Optional[threading.RLock] = None) -> None:
        self._items: MutableMapping[str, T] = {}
        self._journal: Optional[List[Tuple[str, object]]] = None
        self._lock = lock or threading.RLock()

    def __contains__(self, item_id: object) -> bool:
        with self._lock:
            return item_id in self._items

    def __len__(self) -> int:  # pragma: no cover - convenience
        with self._lock:
            return len(self._items)

    def _remember(self, item_id: str) -> None:
        if self._journal is not None:
            self._journal.append((item_id, self._items.get(item_id, _MISSING)))

    def add(self, item_id: str, item: T) -> None:
        with self._lock:
            if item_id in self._items:
                raise DuplicateRecordError(f"Record with id {item_id!r} already exists")
            self._remember(item_id)
            self._items[item_id] = deepcopy(item)

    def upsert(self, item_id: str, item: T) -> None:
        with self._lock:
            self._remember(item_id)
            self._items[item_id] = deepcopy(item)

    def get(self, item_id: str) -> T:
        with self._lock:
            try:
                return deepcopy(self._items[item_id])
            except KeyError as exc:
                raise RecordNotFoundError(f"Record with id {item_id!r} not found") from exc

    def list(self) -> List[T]:
        with self._lock:
            return [deepcopy(item) for item in self._items.values()]

    def as_dicts(self) -> Iterable[Dict]:  # pragma: no cover - convenience
        for item in self.list():
            yield asdict(item)

    def __iter__(self) -> Iterator[T]:
        return iter(self.list())

    # ------------------------------------------------------------------
    # Journal handling used by InMemoryStore.transaction()
    # ------------------------------------------------------------------
    def _begin(self) -> None:
        self._journal = []

    def _end(self) -> None:
        self._journal = None

    def _rollback(self) -> None:
        for item_id, previous in reversed(self._journal or []):
            if previous is _MISSING:
                self._items.pop(item_id, None)
            else:
                self._items[item_id] = previous  # type: ignore[assignment]
        self._journal = None


class InMemoryStore:
    """Process-local :class:`FlowStore` guarded by a re-entrant lock."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._depth = 0
        self.pans: InMemoryRepository[Pan] = InMemoryRepository(self._lock)
        self.workcenters: InMemoryRepository[Workcenter] = InMemoryRepository(self._lock)
        self.orders: InMemoryRepository[ProductionOrder] = InMemoryRepository(self._lock)

    def _repositories(self) -> Tuple[InMemoryRepository, ...]:
        return (self.pans, self.workcenters, self.orders)

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
            self._depth = 1
            for repository in self._repositories():
                repository._begin()
            try:
                yield
            except BaseException:
                for repository in self._repositories():
                    repository._rollback()
                raise
            else:
                for repository in self._repositories():
                    repository._end()
            finally:
                self._depth = 0


__all__ = [
    "Repository",
    "FlowStore",
    "InMemoryRepository",
    "InMemoryStore",
    "RepositoryError",
    "DuplicateRecordError",
    "RecordNotFoundError",
]
