"""What to do with members that are missing from a snapshot."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from datetime import datetime

    from clantrack.domain.model import ClanMember
    from clantrack.domain.ports.persistence import ClanMemberRepository

log = getLogger(__name__)


@runtime_checkable
class ArchivePolicy(Protocol):
    """Strategy applied to each departed member inside the reconciliation write."""

    def archive(
        self,
        member: ClanMember,
        repository: ClanMemberRepository,
        *,
        at: datetime,
    ) -> None: ...


class DeleteDepartedMembers:
    """Remove the member together with its rating history."""

    def archive(
        self,
        member: ClanMember,
        repository: ClanMemberRepository,
        *,
        at: datetime,
    ) -> None:
        _ = at
        log.info("Removing departed member %s", member.username)
        repository.remove(member)


class DeactivateDepartedMembers:
    """Keep the member and its history, flagged inactive until seen again."""

    def archive(
        self,
        member: ClanMember,
        repository: ClanMemberRepository,
        *,
        at: datetime,
    ) -> None:
        _ = repository, at
        log.info(
            "Deactivating departed member %s (last seen %s)", member.username, member.last_seen
        )
        member.deactivate()
