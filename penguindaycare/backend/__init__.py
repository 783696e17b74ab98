"""Backend package for the Penguin Daycare simulator."""

from .config import BackendSettings, load_settings
from .errors import PenguinDaycareError, PersistenceError, RosterLoadError
from .events import EventOutcome, record_bellyrub, record_event, record_fish, record_visit
from .models import Counter, Penguin, PenguinRecord, WriteResult
from .roster import RosterCache, load_roster
from .store import InMemoryPenguinStore, PenguinStore, PostgresPenguinStore, create_store

__all__ = [
    "BackendSettings",
    "Counter",
    "create_store",
    "EventOutcome",
    "InMemoryPenguinStore",
    "load_roster",
    "load_settings",
    "Penguin",
    "PenguinDaycareError",
    "PenguinRecord",
    "PenguinStore",
    "PersistenceError",
    "PostgresPenguinStore",
    "record_bellyrub",
    "record_event",
    "record_fish",
    "record_visit",
    "RosterCache",
    "RosterLoadError",
    "WriteResult",
]
