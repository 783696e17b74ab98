"""Persistence interfaces and implementations for penguin counters."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Any, Protocol

from penguindaycare.backend.errors import PersistenceError
from penguindaycare.backend.models import PenguinRecord, WriteResult


class PenguinStore(Protocol):
    def get(self, penguin_id: str) -> PenguinRecord:
        """Return the stored record, or a zero record stamped with the id when none exists.

        Raises PersistenceError when the store itself cannot be read.
        """

    def put(self, record: PenguinRecord) -> WriteResult:
        """Persist the record under its id and report whether the write succeeded."""


@dataclass
class InMemoryPenguinStore:
    def __post_init__(self) -> None:
        self._records: dict[str, PenguinRecord] = {}
        self._lock = threading.Lock()

    def get(self, penguin_id: str) -> PenguinRecord:
        with self._lock:
            record = self._records.get(penguin_id)
        if record is None:
            return PenguinRecord.empty(penguin_id)
        return record

    def put(self, record: PenguinRecord) -> WriteResult:
        with self._lock:
            self._records[record.id] = record
        return WriteResult.success()

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)


@dataclass
class PostgresPenguinStore:
    database_url: str

    def _connect(self) -> Any:
        import psycopg

        return psycopg.connect(self.database_url)

    def get(self, penguin_id: str) -> PenguinRecord:
        import psycopg

        try:
            with self._connect() as conn:
                with conn.cursor() as cur:
                    cur.execute(
                        """
                        SELECT visit_count, fish_count, bellyrub_count
                        FROM penguin_stats
                        WHERE id = %s
                        """,
                        (penguin_id,),
                    )
                    row = cur.fetchone()
        except psycopg.Error as exc:
            raise PersistenceError(f"Can't read counters for {penguin_id!r}: {exc}") from exc

        if row is None:
            return PenguinRecord.empty(penguin_id)
        visit_count, fish_count, bellyrub_count = row
        return PenguinRecord(
            id=penguin_id,
            visit_count=int(visit_count),
            fish_count=int(fish_count),
            bellyrub_count=int(bellyrub_count),
        )

    def put(self, record: PenguinRecord) -> WriteResult:
        import psycopg

        try:
            with self._connect() as conn:
                with conn.cursor() as cur:
                    cur.execute(
                        """
                        INSERT INTO penguin_stats (id, visit_count, fish_count, bellyrub_count)
                        VALUES (%s, %s, %s, %s)
                        ON CONFLICT (id) DO UPDATE
                        SET visit_count = EXCLUDED.visit_count,
                            fish_count = EXCLUDED.fish_count,
                            bellyrub_count = EXCLUDED.bellyrub_count
                        """,
                        (record.id, record.visit_count, record.fish_count, record.bellyrub_count),
                    )
                conn.commit()
        except psycopg.Error as exc:
            return WriteResult.failure(str(exc))
        return WriteResult.success()


def create_store(database_url: str | None) -> PenguinStore:
    if database_url:
        return PostgresPenguinStore(database_url=database_url)
    return InMemoryPenguinStore()
