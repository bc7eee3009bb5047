"""Failure classes raised across the tracking cycle.

Each class maps to one operator-facing exit code in ``clantrack.ui.cli``.
"""

from __future__ import annotations


class TrackingError(RuntimeError):
    """Base class for failures raised while running a tracking cycle."""


class FetchError(TrackingError):
    """The squadron page could not be retrieved or read."""


class PersistenceError(TrackingError):
    """The roster store failed to read or write; nothing from the cycle is trusted."""


class NotifierError(TrackingError):
    """A Discord operation failed."""


class NotifierAuthorizationError(NotifierError):
    """Discord rejected the bot credentials or its permissions."""


class NotifierTimeoutError(NotifierError, TimeoutError):
    """A Discord operation kept timing out until retries were exhausted."""
