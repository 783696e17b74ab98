"""In-memory penguin roster with a time-based read-through refresh."""

from __future__ import annotations

import math
import threading
import time
from collections.abc import Callable, Iterable, Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from penguindaycare.backend.config import DEFAULT_CACHE_TTL_SECONDS
from penguindaycare.backend.errors import PersistenceError, RosterLoadError
from penguindaycare.backend.logging import get_logger
from penguindaycare.backend.models import Penguin, PenguinRecord
from penguindaycare.backend.store import PenguinStore

logger = get_logger(__name__)


class RosterEntry(BaseModel):
    id: str = Field(min_length=1)
    name: str
    bio: str = ""
    visit_count: int = 0
    fish_count: int = 0
    bellyrub_count: int = 0


_ROSTER_ADAPTER = TypeAdapter(list[RosterEntry])


def load_roster(path: Path | str) -> list[Penguin]:
    """Read the roster description file.

    Raises RosterLoadError when the file is missing, is not a JSON array of
    penguin objects, or repeats an id. An empty roster is not a valid state
    for the service, so callers should treat the error as fatal.
    """
    roster_path = Path(path)
    try:
        raw = roster_path.read_bytes()
    except OSError as exc:
        raise RosterLoadError(f"Can't read {roster_path}: {exc}") from exc

    try:
        entries = _ROSTER_ADAPTER.validate_json(raw)
    except ValidationError as exc:
        raise RosterLoadError(f"Can't parse {roster_path}: {exc}") from exc

    seen: set[str] = set()
    penguins: list[Penguin] = []
    for entry in entries:
        if entry.id in seen:
            raise RosterLoadError(f"Duplicate penguin id {entry.id!r} in {roster_path}")
        seen.add(entry.id)
        penguins.append(Penguin(**entry.model_dump()))
    return penguins


class ReadWriteLock:
    """Writer-preferring reader/writer lock. Not reentrant."""

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._waiting_writers = 0

    @contextmanager
    def read(self) -> Iterator[None]:
        with self._cond:
            while self._writer or self._waiting_writers:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def write(self) -> Iterator[None]:
        with self._cond:
            self._waiting_writers += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._waiting_writers -= 1
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


class RosterCache:
    """Owns the roster, its last refresh time and the lock guarding both.

    Counters are reconciled against the store wholesale, at most once per TTL
    window. Increments written to the store only show up here after the next
    reconciliation pass.
    """

    def __init__(
        self,
        penguins: Iterable[Penguin],
        store: PenguinStore,
        ttl_seconds: float = DEFAULT_CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._penguins = list(penguins)
        self._by_id = {penguin.id: penguin for penguin in self._penguins}
        self._store = store
        self._ttl = ttl_seconds
        self._clock = clock
        self._lock = ReadWriteLock()
        # Starts stale so the first read reconciles.
        self._last_refresh = -math.inf

    @classmethod
    def from_file(
        cls,
        path: Path | str,
        store: PenguinStore,
        ttl_seconds: float = DEFAULT_CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> RosterCache:
        penguins = load_roster(path)
        logger.info("roster_loaded", path=str(path), penguins=len(penguins))
        return cls(penguins, store=store, ttl_seconds=ttl_seconds, clock=clock)

    @property
    def store(self) -> PenguinStore:
        return self._store

    @property
    def size(self) -> int:
        return len(self._penguins)

    def __len__(self) -> int:
        return self.size

    def exists(self, penguin_id: str) -> bool:
        with self._lock.read():
            return penguin_id in self._by_id

    def snapshot(self) -> list[dict[str, Any]]:
        with self._lock.read():
            return [penguin.to_dict() for penguin in self._penguins]

    def maybe_refresh(self, now: float | None = None) -> bool:
        """Reconcile counters with the store when the TTL has lapsed.

        Returns True when a reconciliation pass ran. The timestamp moves
        before the store is queried, so a slow pass is not started twice.
        """
        if now is None:
            now = self._clock()
        with self._lock.write():
            if now - self._last_refresh <= self._ttl:
                return False
            self._last_refresh = now
            records: list[PenguinRecord] = []
            for penguin in self._penguins:
                try:
                    records.append(self._store.get(penguin.id))
                except PersistenceError:
                    raise
                except Exception as exc:
                    raise PersistenceError(f"Can't read counters for {penguin.id!r}: {exc}") from exc
            # Counters change only once every record was read.
            for record in records:
                self._apply_counters(record)
        logger.debug("roster_refreshed", penguins=len(self._penguins))
        return True

    def force_refresh(self) -> None:
        with self._lock.write():
            self._last_refresh = -math.inf
        logger.info("roster_marked_stale")

    def _apply_counters(self, record: PenguinRecord) -> None:
        # Caller holds the write lock.
        penguin = self._by_id.get(record.id)
        if penguin is None:
            return
        penguin.visit_count = record.visit_count
        penguin.fish_count = record.fish_count
        penguin.bellyrub_count = record.bellyrub_count
