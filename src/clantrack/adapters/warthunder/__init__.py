"""Public interface for the War Thunder squadron page adapter."""

from __future__ import annotations

from .client import BROWSER_USER_AGENT, SquadronPageFetcher, is_remote_source
from .parser import parse_rating, parse_squadron_members, parse_username

__all__ = [
    "BROWSER_USER_AGENT",
    "SquadronPageFetcher",
    "is_remote_source",
    "parse_rating",
    "parse_squadron_members",
    "parse_username",
]
