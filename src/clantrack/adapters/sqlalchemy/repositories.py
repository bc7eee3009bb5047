"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from typing import TYPE_CHECKING, cast

from sqlalchemy import select
from sqlalchemy.orm import selectinload

from clantrack.adapters.sqlalchemy.errors import persistence_errors
from clantrack.adapters.sqlalchemy.mappings import clan_member_table
from clantrack.domain.model import ClanMember

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy.orm import InstrumentedAttribute, Session

    from clantrack.domain.model import RatingRecord


def _ratings_attribute() -> InstrumentedAttribute[list[RatingRecord]]:
    return cast("InstrumentedAttribute[list[RatingRecord]]", ClanMember._ratings)  # noqa: SLF001  # pyright: ignore[reportPrivateUsage]


class SqlAlchemyClanMemberRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: ClanMember) -> None:
        self.session.add(entity)

    def remove(self, entity: ClanMember) -> None:
        self.session.delete(entity)

    def list_all(self) -> Sequence[ClanMember]:
        stmt = (
            select(ClanMember)
            .options(selectinload(_ratings_attribute()))
            .order_by(clan_member_table.c.username)
        )
        with persistence_errors("load squadron members"):
            return self.session.execute(stmt).scalars().all()

    def list_active(self) -> Sequence[ClanMember]:
        stmt = (
            select(ClanMember)
            .options(selectinload(_ratings_attribute()))
            .where(clan_member_table.c.is_active.is_(True))
            .order_by(clan_member_table.c.username)
        )
        with persistence_errors("load active squadron members"):
            return self.session.execute(stmt).scalars().all()

    def get_by_username(self, username: str) -> ClanMember | None:
        stmt = select(ClanMember).where(clan_member_table.c.username == username)
        with persistence_errors(f"load member {username}"):
            return self.session.execute(stmt).scalar_one_or_none()

    def has_any(self) -> bool:
        with persistence_errors("check for stored members"):
            stmt = select(clan_member_table.c.id).limit(1)
            return self.session.execute(stmt).scalar_one_or_none() is not None


if TYPE_CHECKING:
    from clantrack.domain.ports.persistence import ClanMemberRepository

    _session_stub = cast("Session", object())
    _repo_check: ClanMemberRepository = SqlAlchemyClanMemberRepository(_session_stub)
