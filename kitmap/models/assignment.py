"""Assignment ORM: binds a goal map (and its kit) to a class exercise.

Invariants:
    - created_by is the owning teacher; analytics access is scoped by it
    - goal_map_id references goal_maps.id without a DB-level FK; a dangling
      reference surfaces as GoalMapNotFoundError
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from kitmap.db.base import Base


class Assignment(Base):
    __tablename__ = "assignments"

    id: Mapped[str] = mapped_column(
        String(64), primary_key=True, default=lambda: str(uuid.uuid4()),
    )
    goal_map_id: Mapped[str] = mapped_column(
        String(64), nullable=False,
    )
    kit_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    created_by: Mapped[str] = mapped_column(String(64), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    due_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
