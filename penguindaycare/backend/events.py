"""Counter increment handlers for visit, fish and bellyrub events."""

from __future__ import annotations

from enum import Enum

from penguindaycare.backend.errors import PersistenceError
from penguindaycare.backend.logging import get_logger
from penguindaycare.backend.models import Counter
from penguindaycare.backend.roster import RosterCache
from penguindaycare.backend.store import PenguinStore

logger = get_logger(__name__)


class EventOutcome(str, Enum):
    RECORDED = "recorded"
    IGNORED = "ignored"
    FAILED = "failed"


def record_event(cache: RosterCache, store: PenguinStore, penguin_id: str, counter: Counter) -> EventOutcome:
    """Increment one counter of a known penguin directly in the store.

    Unknown ids are ignored. The roster cache is left untouched, and the
    get/increment/put sequence is not atomic, so concurrent events for the
    same penguin can overwrite each other.
    """
    if not cache.exists(penguin_id):
        return EventOutcome.IGNORED

    try:
        record = store.get(penguin_id)
    except PersistenceError as exc:
        # Never put without a successful read.
        logger.error("stat_read_failed", penguin_id=penguin_id, counter=counter.value, error=str(exc))
        return EventOutcome.FAILED

    result = store.put(record.incremented(counter))
    if not result.ok:
        logger.error("stat_write_failed", penguin_id=penguin_id, counter=counter.value, error=result.error)
        return EventOutcome.FAILED

    logger.debug("stat_recorded", penguin_id=penguin_id, counter=counter.value)
    return EventOutcome.RECORDED


def record_visit(cache: RosterCache, store: PenguinStore, penguin_id: str) -> EventOutcome:
    return record_event(cache, store, penguin_id, Counter.VISIT)


def record_fish(cache: RosterCache, store: PenguinStore, penguin_id: str) -> EventOutcome:
    return record_event(cache, store, penguin_id, Counter.FISH)


def record_bellyrub(cache: RosterCache, store: PenguinStore, penguin_id: str) -> EventOutcome:
    return record_event(cache, store, penguin_id, Counter.BELLYRUB)
