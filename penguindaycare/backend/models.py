"""Domain models for the penguin roster and persisted counter records."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any


class Counter(str, Enum):
    VISIT = "visit_count"
    FISH = "fish_count"
    BELLYRUB = "bellyrub_count"


@dataclass
class Penguin:
    """One roster entry. Only the three counters change after startup."""

    id: str
    name: str
    bio: str
    visit_count: int = 0
    fish_count: int = 0
    bellyrub_count: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "bio": self.bio,
            "visit_count": self.visit_count,
            "fish_count": self.fish_count,
            "bellyrub_count": self.bellyrub_count,
        }


@dataclass(frozen=True)
class PenguinRecord:
    """Counter state for one penguin as held by the persistence store."""

    id: str
    visit_count: int = 0
    fish_count: int = 0
    bellyrub_count: int = 0

    @classmethod
    def empty(cls, penguin_id: str) -> PenguinRecord:
        return cls(id=penguin_id)

    def incremented(self, counter: Counter) -> PenguinRecord:
        current = getattr(self, counter.value)
        return replace(self, **{counter.value: current + 1})


@dataclass(frozen=True)
class WriteResult:
    ok: bool
    error: str | None = None

    @classmethod
    def success(cls) -> WriteResult:
        return cls(ok=True)

    @classmethod
    def failure(cls, error: str) -> WriteResult:
        return cls(ok=False, error=error)
