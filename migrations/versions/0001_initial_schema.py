"""initial schema

Revision ID: 0001
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # --- classrooms ---
    op.create_table(
        "classrooms",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("name", sa.String(256), nullable=False),
        sa.Column("educator_id", sa.String(64), nullable=False),
        sa.Column("grade_band", sa.String(128), nullable=True),
        sa.Column("stressors", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_classrooms_educator_id", "classrooms", ["educator_id"])

    # --- children ---
    op.create_table(
        "children",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("name", sa.String(256), nullable=False),
        sa.Column("classroom_id", sa.String(36), sa.ForeignKey("classrooms.id"), nullable=True),
        sa.Column("grade_band", sa.String(128), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_children_classroom_id", "children", ["classroom_id"])

    # --- behavior_logs (append-only) ---
    op.create_table(
        "behavior_logs",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("educator_id", sa.String(64), nullable=False),
        sa.Column("child_id", sa.String(36), sa.ForeignKey("children.id"), nullable=True),
        sa.Column("classroom_id", sa.String(36), sa.ForeignKey("classrooms.id"), nullable=True),
        sa.Column("behavior_description", sa.Text(), nullable=False),
        sa.Column("context", sa.String(128), nullable=True),
        sa.Column("time_of_day", sa.String(32), nullable=True),
        sa.Column("severity", sa.String(16), nullable=True),
        sa.Column("stressors", sa.Text(), nullable=True),
        sa.Column("selected_strategy", sa.String(512), nullable=True),
        sa.Column("confidence_rating", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_behavior_logs_educator_id", "behavior_logs", ["educator_id"])
    op.create_index("ix_behavior_logs_child_id", "behavior_logs", ["child_id"])
    op.create_index("ix_behavior_logs_classroom_id", "behavior_logs", ["classroom_id"])
    op.create_index("ix_behavior_logs_created_at", "behavior_logs", ["created_at"])

    # --- classroom_logs (append-only) ---
    op.create_table(
        "classroom_logs",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("educator_id", sa.String(64), nullable=False),
        sa.Column("classroom_id", sa.String(36), sa.ForeignKey("classrooms.id"), nullable=True),
        sa.Column("challenge_description", sa.Text(), nullable=False),
        sa.Column("context", sa.String(128), nullable=True),
        sa.Column("severity", sa.String(16), nullable=True),
        sa.Column("stressors", sa.Text(), nullable=True),
        sa.Column("selected_strategy", sa.String(512), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_classroom_logs_educator_id", "classroom_logs", ["educator_id"])
    op.create_index("ix_classroom_logs_classroom_id", "classroom_logs", ["classroom_id"])
    op.create_index("ix_classroom_logs_created_at", "classroom_logs", ["created_at"])


def downgrade() -> None:
    op.drop_table("classroom_logs")
    op.drop_table("behavior_logs")
    op.drop_table("children")
    op.drop_table("classrooms")
