"""Exception types raised by the backend."""

from __future__ import annotations


class PenguinDaycareError(Exception):
    """Base class for backend errors."""


class RosterLoadError(PenguinDaycareError):
    """The roster description could not be read or parsed."""


class PersistenceError(PenguinDaycareError):
    """The persistence store could not be read."""
