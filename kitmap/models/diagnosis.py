"""Diagnosis ORM: immutable scored comparison for one submitted attempt.

Invariants:
    - Never updated after insert; a new attempt inserts a new row
    - per_link holds {correct, missing, excessive, score, totalGoalEdges}
    - score in [0, 1], equal to per_link.score
    - len(correct) + len(missing) == total_goal_edges

Design Decisions:
    - summary is a human-readable count line for quick inspection in SQL
    - No unique constraint on learner_map_id: history of attempts is retained
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Text, Integer, Float, DateTime, JSON, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from kitmap.db.base import Base


class Diagnosis(Base):
    __tablename__ = "diagnoses"

    id: Mapped[str] = mapped_column(
        String(64), primary_key=True, default=lambda: str(uuid.uuid4()),
    )
    goal_map_id: Mapped[str] = mapped_column(String(64), nullable=False)
    learner_map_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("learner_maps.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    summary: Mapped[str] = mapped_column(Text, nullable=False)
    per_link: Mapped[dict] = mapped_column(JSON, nullable=False)
    score: Mapped[float] = mapped_column(Float, nullable=False)
    total_goal_edges: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0,
    )
    rubric_version: Mapped[str | None] = mapped_column(
        String(20), nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
