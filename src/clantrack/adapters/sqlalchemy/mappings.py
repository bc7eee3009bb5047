"""SQLAlchemy mapping metadata for the roster domain model."""

from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime
from functools import cache

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Dialect,
    ForeignKey,
    Index,
    Integer,
    String,
    Table,
    TypeDecorator,
    Uuid,
    orm,
)
from sqlalchemy.orm import configure_mappers, relationship

from clantrack.domain.model import ClanMember, RatingRecord

log = logging.getLogger(__name__)

UUIDColumnType = Uuid[uuid.UUID]


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

clan_member_table = Table(
    "clan_member",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("username", String(100), nullable=False, unique=True),
    Column("first_seen", UTCDateTime(), nullable=False),
    Column("last_seen", UTCDateTime(), nullable=False),
    Column("is_active", Boolean, nullable=False, default=True),
)

rating_record_table = Table(
    "rating_record",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column(
        "member_id",
        UUIDColumnType,
        ForeignKey("clan_member.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("rating", Integer, nullable=False),
    Column("recorded_at", UTCDateTime(), nullable=False),
    Index("ix_rating_record_member_recorded", "member_id", "recorded_at"),
    Index("ix_rating_record_recorded_at", "recorded_at"),
)


@cache
def start_mappers() -> orm.registry:
    """Configure SQLAlchemy mappers for the domain model."""

    log.info("Starting SQLAlchemy mappers")

    mapper_registry.map_imperatively(
        ClanMember,
        clan_member_table,
        properties={
            "_ratings": relationship(
                RatingRecord,
                cascade="all, delete-orphan",
                order_by=rating_record_table.c.recorded_at,
            ),
        },
    )

    mapper_registry.map_imperatively(
        RatingRecord,
        rating_record_table,
    )

    configure_mappers()
    return mapper_registry

