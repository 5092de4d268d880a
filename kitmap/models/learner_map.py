"""LearnerMap ORM: one student's map for one assignment, reused across attempts.

Invariants:
    - Unique per (assignment_id, user_id): a new attempt reuses the row
    - status transitions: draft -> submitted (once per attempt) -> draft (new attempt, attempt += 1)
    - submitted_at set on submission, cleared on new attempt
    - nodes/edges are null for control-text submissions

Design Decisions:
    - goal_map_id denormalized from the assignment: diagnosis needs no join
    - updated_at bumps on every write: ties between attempts break on it
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    String, Text, Integer, DateTime, JSON, ForeignKey, UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from kitmap.db.base import Base


class LearnerMap(Base):
    __tablename__ = "learner_maps"
    __table_args__ = (
        UniqueConstraint(
            "assignment_id", "user_id", name="uq_learner_maps_assignment_user",
        ),
    )

    id: Mapped[str] = mapped_column(
        String(64), primary_key=True, default=lambda: str(uuid.uuid4()),
    )
    assignment_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("assignments.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    goal_map_id: Mapped[str] = mapped_column(String(64), nullable=False)
    kit_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    nodes: Mapped[list | None] = mapped_column(JSON, nullable=True)
    edges: Mapped[list | None] = mapped_column(JSON, nullable=True)
    control_text: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="draft",
    )
    attempt: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    submitted_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
