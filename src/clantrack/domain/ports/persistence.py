"""Ports for persisting roster aggregates."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from clantrack.domain.model import ClanMember

if TYPE_CHECKING:
    from collections.abc import Sequence


@runtime_checkable
class Repository[TEntity](Protocol):
    """Minimal repository contract for a persistent aggregate store."""

    def add(self, entity: TEntity) -> None: ...


@runtime_checkable
class ClanMemberRepository(Repository[ClanMember], Protocol):
    """Persistence contract for squadron members and their rating history."""

    def remove(self, entity: ClanMember) -> None: ...

    def list_all(self) -> Sequence[ClanMember]: ...

    def list_active(self) -> Sequence[ClanMember]: ...

    def get_by_username(self, username: str) -> ClanMember | None: ...

    def has_any(self) -> bool: ...
