"""GoalMap ORM: the teacher-authored reference graph.

Invariants:
    - nodes/edges are React Flow shaped JSON arrays, never null
    - direction is one of: bi, uni, multi
    - Read-only for kitmap: mutated only through the (external) editor
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Text, DateTime, JSON
from sqlalchemy.orm import Mapped, mapped_column

from kitmap.db.base import Base


class GoalMap(Base):
    """Teacher-owned goal map."""
    __tablename__ = "goal_maps"

    id: Mapped[str] = mapped_column(
        String(64), primary_key=True, default=lambda: str(uuid.uuid4()),
    )
    teacher_id: Mapped[str] = mapped_column(String(64), nullable=False)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    nodes: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    edges: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    direction: Mapped[str] = mapped_column(
        String(10), nullable=False, default="bi",
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
