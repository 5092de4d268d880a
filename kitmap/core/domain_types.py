"""Domain Types: rich types that replace bare primitives across the codebase.

Invariants:
    - All ids are opaque strings wrapped in NewType, never parsed
    - EdgeKey is the ordered pair (source, target): the only identity used to compare edges
    - All valid states are encoded as str Enums, no raw string matching

Design Decisions:
    - NewType over wrapper classes: zero runtime cost, full type-checker support
    - str Enums serialize to JSON and to DB String columns without custom encoders
"""

import math
from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

UserId = NewType("UserId", str)
AssignmentId = NewType("AssignmentId", str)
GoalMapId = NewType("GoalMapId", str)
LearnerMapId = NewType("LearnerMapId", str)
DiagnosisId = NewType("DiagnosisId", str)
NodeId = NewType("NodeId", str)

EdgeKey = tuple[NodeId, NodeId]


# ─── Value Types ─────────────────────────────────────────────────

Score = NewType("Score", float)  # 0.0-1.0

SCORE_DECIMALS: int = 2
PERCENTILE_DECIMALS: int = 1
RUBRIC_VERSION: str = "1.0"


def round_half_up(value: float, decimals: int) -> float:
    """Round like Math.round(value * 10**d) / 10**d (halves go up, not to even)."""
    factor = 10 ** decimals
    return math.floor(value * factor + 0.5) / factor


# ─── Enums ───────────────────────────────────────────────────────

class MapStatus(str, Enum):
    """Learner map lifecycle states: maps to the learner_maps.status column."""
    DRAFT = "draft"
    SUBMITTED = "submitted"
    GRADED = "graded"

    @property
    def is_terminal(self) -> bool:
        """Submitted and graded maps are frozen for the current attempt."""
        return self is not MapStatus.DRAFT


class GoalMapDirection(str, Enum):
    BI = "bi"
    UNI = "uni"
    MULTI = "multi"


class EdgeClass(str, Enum):
    """Display classification of one edge instance."""
    CORRECT = "correct"
    MISSING = "missing"
    EXCESSIVE = "excessive"
    NEUTRAL = "neutral"


class ExportFormat(str, Enum):
    """Export formats: CSV is the tabular form, JSON the structured form."""
    CSV = "csv"
    JSON = "json"

    @property
    def content_type(self) -> str:
        return "text/csv" if self is ExportFormat.CSV else "application/json"
