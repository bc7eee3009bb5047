"""Discord bot configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import parse_int, require_env_vars
from .http_resilience import RateLimit, ResilienceConfig

DISCORD_API_BASE_URL = "https://discord.com/api/v10"
DISCORD_TIMEOUT_SECONDS = 15.0


@dataclass(frozen=True)
class DiscordConfig:
    """Holds Discord bot credentials and target ids."""

    token: str
    guild_id: int
    channel_id: int
    role_id: int

    def __repr__(self) -> str:
        return (
            f"DiscordConfig(token='***', guild_id={self.guild_id}, "
            f"channel_id={self.channel_id}, role_id={self.role_id})"
        )


def default_discord_resilience() -> ResilienceConfig:
    return ResilienceConfig(
        name="discord",
        base_url=DISCORD_API_BASE_URL,
        timeout_seconds=DISCORD_TIMEOUT_SECONDS,
        ratelimit=RateLimit(max_calls=5, per_seconds=1.0),
    )


def get_discord_config() -> DiscordConfig:
    values = require_env_vars(
        ("DISCORD_TOKEN", "DISCORD_GUILD_ID", "DISCORD_CHANNEL_ID", "DISCORD_ROLE_ID")
    )
    return DiscordConfig(
        token=values["DISCORD_TOKEN"],
        guild_id=parse_int("DISCORD_GUILD_ID", values["DISCORD_GUILD_ID"]),
        channel_id=parse_int("DISCORD_CHANNEL_ID", values["DISCORD_CHANNEL_ID"]),
        role_id=parse_int("DISCORD_ROLE_ID", values["DISCORD_ROLE_ID"]),
    )
