"""Translate SQLAlchemy failures into the domain's persistence error."""

from __future__ import annotations

from contextlib import contextmanager
from logging import getLogger
from typing import TYPE_CHECKING

from sqlalchemy.exc import SQLAlchemyError

from clantrack.domain.errors import PersistenceError

if TYPE_CHECKING:
    from collections.abc import Iterator

log = getLogger(__name__)


@contextmanager
def persistence_errors(action: str) -> Iterator[None]:
    try:
        yield
    except SQLAlchemyError as exc:
        log.error("Database error while trying to %s: %s", action, exc)
        raise PersistenceError(f"Failed to {action}: {exc}") from exc
