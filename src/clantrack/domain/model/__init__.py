"""Domain entities persisted by the roster store."""

from __future__ import annotations

from .base import Entity, new_id
from .roster import ClanMember, RatingRecord

__all__ = ["ClanMember", "Entity", "RatingRecord", "new_id"]
