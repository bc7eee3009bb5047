"""Pydantic models for the Discord REST payloads the notifier reads."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class DiscordBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class DiscordUser(DiscordBaseModel):
    id: int
    username: str
    global_name: str | None = None


class GuildMember(DiscordBaseModel):
    user: DiscordUser
    nick: str | None = None
    roles: list[int] = Field(default_factory=list[int])

    @property
    def display_name(self) -> str:
        return self.nick or self.user.global_name or self.user.username

    def matches(self, username: str) -> bool:
        """Loose match used to link a squadron name to a Discord account."""

        needle = username.casefold()
        candidates = (self.user.username, self.user.global_name, self.nick)
        return any(needle in candidate.casefold() for candidate in candidates if candidate)


class GuildRole(DiscordBaseModel):
    id: int
    name: str


class ErrorResponse(DiscordBaseModel):
    message: str = ""
    code: int = 0
