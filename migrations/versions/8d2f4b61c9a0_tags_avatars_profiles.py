"""tags, avatars and profile fields

Revision ID: 8d2f4b61c9a0
Revises: 3c1a9e52b7d4
Create Date: 2026-10-19 15:40:02.551907

"""
from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "8d2f4b61c9a0"
down_revision: Union[str, Sequence[str], None] = "3c1a9e52b7d4"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Add the avatar catalogue, tags on posts, and bio/avatar on users."""
    op.create_table(
        "avatars",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("url", sa.String(length=2048), nullable=False),
        sa.Column("is_default", sa.Boolean(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("url"),
    )
    op.create_index("ix_avatars_is_default", "avatars", ["is_default"])

    op.create_table(
        "tags",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=30), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
    )
    op.create_table(
        "post_tags",
        sa.Column("post_id", sa.String(length=36), nullable=False),
        sa.Column("tag_id", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["post_id"], ["posts.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["tag_id"], ["tags.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("post_id", "tag_id"),
    )
    op.create_index("ix_post_tags_tag_id", "post_tags", ["tag_id"])

    with op.batch_alter_table("users") as batch:
        batch.add_column(sa.Column("bio", sa.String(length=160), nullable=True))
        batch.add_column(sa.Column("avatar_id", sa.Integer(), nullable=True))
        batch.create_foreign_key(
            "fk_users_avatar_id_avatars",
            "avatars",
            ["avatar_id"],
            ["id"],
            ondelete="SET NULL",
        )


def downgrade() -> None:
    with op.batch_alter_table("users") as batch:
        batch.drop_constraint("fk_users_avatar_id_avatars", type_="foreignkey")
        batch.drop_column("avatar_id")
        batch.drop_column("bio")
    op.drop_index("ix_post_tags_tag_id", table_name="post_tags")
    op.drop_table("post_tags")
    op.drop_table("tags")
    op.drop_index("ix_avatars_is_default", table_name="avatars")
    op.drop_table("avatars")
