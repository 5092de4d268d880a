"""Entities: persisted records as seen by the core, decoupled from the ORM.

Invariants:
    - LearnerMap.attempt >= 1; submitted_at is set iff status is terminal
    - DiagnosisRecord is immutable once created; a new attempt produces a new record
    - Diagnosis does not carry the attempt number; attempt linkage goes through the learner map

Design Decisions:
    - Frozen dataclasses returned by the repository: services and core never touch ORM rows
"""

from dataclasses import dataclass
from datetime import datetime

from kitmap.core.comparator import DiagnosisResult
from kitmap.core.domain_types import (
    AssignmentId, DiagnosisId, GoalMapId, LearnerMapId, MapStatus, Score, UserId,
)
from kitmap.core.graph_model import Edge, Node


@dataclass(frozen=True)
class Assignment:
    id: AssignmentId
    title: str
    goal_map_id: GoalMapId
    created_by: UserId
    created_at: datetime
    kit_id: str | None = None
    due_at: datetime | None = None


@dataclass(frozen=True)
class LearnerMap:
    """One student's map for one assignment; the row is reused across attempts."""
    id: LearnerMapId
    assignment_id: AssignmentId
    goal_map_id: GoalMapId
    user_id: UserId
    status: MapStatus
    attempt: int
    nodes: tuple[Node, ...] = ()
    edges: tuple[Edge, ...] = ()
    submitted_at: datetime | None = None
    updated_at: datetime | None = None
    control_text: str | None = None


@dataclass(frozen=True)
class NewDiagnosis:
    """Diagnosis row about to be inserted."""
    goal_map_id: GoalMapId
    learner_map_id: LearnerMapId
    result: DiagnosisResult


@dataclass(frozen=True)
class DiagnosisRecord:
    id: DiagnosisId
    goal_map_id: GoalMapId
    learner_map_id: LearnerMapId
    result: DiagnosisResult
    created_at: datetime

    @property
    def score(self) -> Score:
        return self.result.score


@dataclass(frozen=True)
class LearnerAttemptRow:
    """A learner map joined with its owner's display name and one of its diagnoses."""
    learner_map: LearnerMap
    user_name: str
    diagnosis: DiagnosisRecord | None = None


@dataclass(frozen=True)
class SubmittedScore:
    """One diagnosis score of a submitted learner map (score None when no diagnosis)."""
    user_id: UserId
    learner_map_id: LearnerMapId
    attempt: int
    score: Score | None


@dataclass(frozen=True)
class TeacherAssignmentRow:
    assignment: Assignment
    goal_map_title: str | None
    submission_count: int
    avg_score: float | None
