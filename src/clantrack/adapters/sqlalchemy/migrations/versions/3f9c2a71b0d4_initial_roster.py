"""initial roster

Revision ID: 3f9c2a71b0d4
Revises:
Create Date: 2026-09-28 19:42:11.503218

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "3f9c2a71b0d4"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "clan_member",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("username", sa.String(length=100), nullable=False),
        sa.Column("first_seen", sa.DateTime(timezone=True), nullable=False),
        sa.Column("last_seen", sa.DateTime(timezone=True), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_clan_member")),
        sa.UniqueConstraint("username", name=op.f("uq_clan_member_clan_member_username")),
    )
    op.create_table(
        "rating_record",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("member_id", sa.Uuid(), nullable=False),
        sa.Column("rating", sa.Integer(), nullable=False),
        sa.Column("recorded_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(
            ["member_id"],
            ["clan_member.id"],
            name=op.f("fk_rating_record_rating_record_member_id_clan_member"),
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_rating_record")),
    )
    with op.batch_alter_table("rating_record", schema=None) as batch_op:
        batch_op.create_index(
            "ix_rating_record_member_recorded", ["member_id", "recorded_at"], unique=False
        )
        batch_op.create_index("ix_rating_record_recorded_at", ["recorded_at"], unique=False)


def downgrade() -> None:
    with op.batch_alter_table("rating_record", schema=None) as batch_op:
        batch_op.drop_index("ix_rating_record_recorded_at")
        batch_op.drop_index("ix_rating_record_member_recorded")

    op.drop_table("rating_record")
    op.drop_table("clan_member")
