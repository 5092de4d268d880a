"""ORM Models: SQLAlchemy declarative models for all persisted entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - Ids are opaque strings (uuid4 text by default)

Design Decisions:
    - One file per entity
    - All models imported here so Base.metadata is complete before create_all / autogenerate
"""

from kitmap.models.user import User  # noqa: F401
from kitmap.models.goal_map import GoalMap  # noqa: F401
from kitmap.models.assignment import Assignment  # noqa: F401
from kitmap.models.learner_map import LearnerMap  # noqa: F401
from kitmap.models.diagnosis import Diagnosis  # noqa: F401
