"""Discord REST notifier: channel summaries and member role management."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from functools import partial
from logging import getLogger
from typing import TYPE_CHECKING

import httpx

from clantrack.adapters.http_resilience import (
    ResilientClient,
    is_transient_http_error,
    retry_after_seconds,
)
from clantrack.common import retry_async
from clantrack.config.discord import default_discord_resilience
from clantrack.config.http_resilience import ResilienceConfig, RetryPolicy
from clantrack.domain.errors import (
    NotifierAuthorizationError,
    NotifierError,
    NotifierTimeoutError,
)

from .formatting import format_initial_snapshot, format_rating_changes, split_message
from .schema import ErrorResponse, GuildMember, GuildRole

if TYPE_CHECKING:
    from collections.abc import Callable, Coroutine, Sequence

    from clantrack.common.retry import Sleep
    from clantrack.config.discord import DiscordConfig
    from clantrack.domain.types import Observation, RatingChange

log = getLogger(__name__)

MEMBER_PAGE_SIZE = 1000
_AUTHORIZATION_STATUSES = frozenset({401, 403})


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _describe(exc: httpx.HTTPError) -> str:
    if isinstance(exc, httpx.HTTPStatusError):
        try:
            payload = ErrorResponse.model_validate(exc.response.json())
        except ValueError:
            return f"HTTP {exc.response.status_code}"
        return f"HTTP {exc.response.status_code}: {payload.message} (code {payload.code})"
    return str(exc) or type(exc).__name__


@dataclass(slots=True)
class DiscordNotifier:
    """Roster notifier backed by the Discord REST API (v10).

    Each public call runs its own short-lived HTTP session and retries transient
    failures (rate limits, 5xx, network errors, timeouts) with exponential backoff.
    Rejected credentials surface as ``NotifierAuthorizationError`` straight away.
    The guild member and role listings are fetched once and reused by later role
    changes on the same notifier, so build one notifier per cycle.
    """

    config: DiscordConfig
    retry: RetryPolicy = field(default_factory=RetryPolicy)
    resilience: ResilienceConfig = field(default_factory=default_discord_resilience)
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=_default_client_factory
    )
    sleep: Sleep = asyncio.sleep
    clock: Callable[[], datetime] = _utcnow
    _members: list[GuildMember] | None = field(default=None, init=False, repr=False)
    _roles: list[GuildRole] | None = field(default=None, init=False, repr=False)

    def publish_rating_changes(self, changes: Sequence[RatingChange]) -> None:
        message = format_rating_changes(changes, now=self.clock())
        self._run(self._send_message(message), "publish rating changes")
        log.info(
            "Published %s rating change(s) to channel %s", len(changes), self.config.channel_id
        )

    def publish_initial_snapshot(self, observations: Sequence[Observation]) -> None:
        message = format_initial_snapshot(observations, now=self.clock())
        self._run(self._send_message(message), "publish initial snapshot")
        log.info(
            "Published initial data for %s member(s) to channel %s",
            len(observations),
            self.config.channel_id,
        )

    def grant_marker(self, username: str, marker_id: int) -> None:
        self._run(self._update_role(username, marker_id, grant=True), "grant role")

    def revoke_marker(self, username: str, marker_id: int) -> None:
        self._run(self._update_role(username, marker_id, grant=False), "revoke role")

    def _run(self, operation: Coroutine[object, object, None], action: str) -> None:
        try:
            asyncio.run(operation)
        except httpx.HTTPStatusError as exc:
            if exc.response.status_code in _AUTHORIZATION_STATUSES:
                raise NotifierAuthorizationError(
                    f"Discord rejected the bot while trying to {action}: {_describe(exc)}"
                ) from exc
            raise NotifierError(f"Discord failed to {action}: {_describe(exc)}") from exc
        except httpx.TimeoutException as exc:
            raise NotifierTimeoutError(f"Discord timed out while trying to {action}") from exc
        except httpx.HTTPError as exc:
            raise NotifierError(f"Discord failed to {action}: {_describe(exc)}") from exc
        except ValueError as exc:
            raise NotifierError(f"Unexpected Discord payload while trying to {action}") from exc

    async def _with_retry(
        self,
        client: ResilientClient,
        method: str,
        url: str,
        *,
        json: object = None,
        params: dict[str, str | int] | None = None,
    ) -> httpx.Response:
        async def send() -> httpx.Response:
            response = await client.request(method, url, json=json, params=params)
            response.raise_for_status()
            return response

        return await retry_async(
            send,
            attempts=self.retry.attempts,
            base_delay=self.retry.base_delay_seconds,
            is_transient=partial(is_transient_http_error, policy=self.retry),
            operation_name=f"Discord {method} {url}",
            sleep=self.sleep,
            min_delay=partial(retry_after_seconds, policy=self.retry),
        )

    async def _send_message(self, message: str) -> None:
        async with self.client_factory(self._resilience()) as client:
            for chunk in split_message(message):
                await self._with_retry(
                    client,
                    "POST",
                    f"/channels/{self.config.channel_id}/messages",
                    json={"content": chunk},
                )

    async def _update_role(self, username: str, role_id: int, *, grant: bool) -> None:
        guild_id = self.config.guild_id
        async with self.client_factory(self._resilience()) as client:
            member = await self._find_member(client, username)
            if member is None:
                log.warning("User %s not found in guild %s", username, guild_id)
                return
            role = await self._find_role(client, role_id)
            if role is None:
                log.warning("Role with ID %s not found in guild %s", role_id, guild_id)
                return

            has_role = role.id in member.roles
            if grant and has_role:
                log.info("User %s already has role %s", username, role.name)
                return
            if not grant and not has_role:
                log.info("User %s does not have role %s", username, role.name)
                return

            await self._with_retry(
                client,
                "PUT" if grant else "DELETE",
                f"/guilds/{guild_id}/members/{member.user.id}/roles/{role.id}",
            )
            if grant:
                member.roles.append(role.id)
            else:
                member.roles.remove(role.id)
            log.info(
                "%s role %s %s user %s (%s)",
                "Assigned" if grant else "Removed",
                role.name,
                "to" if grant else "from",
                username,
                member.display_name,
            )

    async def _find_member(self, client: ResilientClient, username: str) -> GuildMember | None:
        if self._members is None:
            self._members = await self._list_members(client)
        return next((member for member in self._members if member.matches(username)), None)

    async def _list_members(self, client: ResilientClient) -> list[GuildMember]:
        members: list[GuildMember] = []
        after = 0
        while True:
            response = await self._with_retry(
                client,
                "GET",
                f"/guilds/{self.config.guild_id}/members",
                params={"limit": MEMBER_PAGE_SIZE, "after": after},
            )
            page = [GuildMember.model_validate(item) for item in response.json()]
            members.extend(page)
            if len(page) < MEMBER_PAGE_SIZE:
                log.debug("Loaded %s guild member(s)", len(members))
                return members
            after = max(member.user.id for member in page)

    async def _find_role(self, client: ResilientClient, role_id: int) -> GuildRole | None:
        if self._roles is None:
            response = await self._with_retry(
                client, "GET", f"/guilds/{self.config.guild_id}/roles"
            )
            self._roles = [GuildRole.model_validate(item) for item in response.json()]
        return next((role for role in self._roles if role.id == role_id), None)

    def _resilience(self) -> ResilienceConfig:
        headers = dict(self.resilience.default_headers or {})
        headers["Authorization"] = f"Bot {self.config.token}"
        return replace(self.resilience, default_headers=headers)


if TYPE_CHECKING:
    from clantrack.domain.ports.notification import RosterNotifier

    _notifier_check: RosterNotifier = DiscordNotifier(
        DiscordConfig(token="", guild_id=0, channel_id=0, role_id=0)
    )
