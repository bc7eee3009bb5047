"""Public interface for the Discord adapter."""

from __future__ import annotations

from .client import DiscordNotifier
from .formatting import format_initial_snapshot, format_rating_changes, split_message
from .schema import DiscordUser, GuildMember, GuildRole

__all__ = [
    "DiscordNotifier",
    "DiscordUser",
    "GuildMember",
    "GuildRole",
    "format_initial_snapshot",
    "format_rating_changes",
    "split_message",
]
