"""Initial schema: users, goal_maps, assignments, learner_maps, diagnoses.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "goal_maps",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("teacher_id", sa.String(64), nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("nodes", sa.JSON, nullable=False),
        sa.Column("edges", sa.JSON, nullable=False),
        sa.Column("direction", sa.String(10), nullable=False, server_default="bi"),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "assignments",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("goal_map_id", sa.String(64), nullable=False),
        sa.Column("kit_id", sa.String(64), nullable=True),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("created_by", sa.String(64), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("due_at", sa.DateTime(timezone=True), nullable=True),
    )

    op.create_table(
        "learner_maps",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column(
            "assignment_id", sa.String(64),
            sa.ForeignKey("assignments.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("goal_map_id", sa.String(64), nullable=False),
        sa.Column("kit_id", sa.String(64), nullable=True),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("nodes", sa.JSON, nullable=True),
        sa.Column("edges", sa.JSON, nullable=True),
        sa.Column("control_text", sa.Text, nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="draft"),
        sa.Column("attempt", sa.Integer, nullable=False, server_default="1"),
        sa.Column("submitted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint(
            "assignment_id", "user_id", name="uq_learner_maps_assignment_user",
        ),
    )
    op.create_index(
        "ix_learner_maps_assignment_id", "learner_maps", ["assignment_id"],
    )

    op.create_table(
        "diagnoses",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("goal_map_id", sa.String(64), nullable=False),
        sa.Column(
            "learner_map_id", sa.String(64),
            sa.ForeignKey("learner_maps.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("summary", sa.Text, nullable=False),
        sa.Column("per_link", sa.JSON, nullable=False),
        sa.Column("score", sa.Float, nullable=False),
        sa.Column("total_goal_edges", sa.Integer, nullable=False, server_default="0"),
        sa.Column("rubric_version", sa.String(20), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index(
        "ix_diagnoses_learner_map_id", "diagnoses", ["learner_map_id"],
    )


def downgrade() -> None:
    op.drop_index("ix_diagnoses_learner_map_id", table_name="diagnoses")
    op.drop_table("diagnoses")
    op.drop_index("ix_learner_maps_assignment_id", table_name="learner_maps")
    op.drop_table("learner_maps")
    op.drop_table("assignments")
    op.drop_table("goal_maps")
    op.drop_table("users")
