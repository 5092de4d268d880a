"""Boundary Protocols: contracts between core and shell.

Invariants:
    - Core NEVER imports from shell: dependency arrows point inward only
    - All IO operations accessed through Protocol types
    - Write methods never commit; the calling workflow owns the transaction
    - write_learner_map_status is a compare-and-swap: it returns False and changes
      nothing when the row is no longer in the expected state

Design Decisions:
    - Protocol over ABC: structural subtyping, no inheritance hierarchy
    - Async in Protocol: implementations do IO, the pure functions that consume
      the returned records are never async
"""

from datetime import datetime
from typing import Protocol, Sequence

from kitmap.core.domain_types import (
    AssignmentId, DiagnosisId, GoalMapId, LearnerMapId, MapStatus, UserId,
)
from kitmap.core.entities import (
    Assignment,
    DiagnosisRecord,
    LearnerAttemptRow,
    LearnerMap,
    NewDiagnosis,
    SubmittedScore,
    TeacherAssignmentRow,
)
from kitmap.core.graph_model import GoalMap


class KitMapRepository(Protocol):
    """Contract for goal map, learner map and diagnosis persistence."""

    # ─── Reads ───────────────────────────────────────────────────
    async def read_goal_map(self, goal_map_id: GoalMapId) -> GoalMap | None: ...
    async def read_assignment(self, assignment_id: AssignmentId) -> Assignment | None: ...
    async def read_learner_map(
        self, assignment_id: AssignmentId, user_id: UserId,
    ) -> LearnerMap | None: ...
    async def read_learner_map_by_id(
        self, learner_map_id: LearnerMapId,
    ) -> LearnerMap | None: ...
    async def read_user_name(self, user_id: UserId) -> str | None: ...
    async def read_latest_diagnosis(
        self, learner_map_id: LearnerMapId,
    ) -> DiagnosisRecord | None: ...
    async def read_assignment_learner_rows(
        self, assignment_id: AssignmentId,
    ) -> list[LearnerAttemptRow]: ...
    async def read_submitted_scores(
        self, assignment_id: AssignmentId,
    ) -> list[SubmittedScore]: ...
    async def read_teacher_assignments(
        self, teacher_id: UserId,
    ) -> list[TeacherAssignmentRow]: ...

    # ─── Writes ──────────────────────────────────────────────────
    async def create_learner_map(
        self,
        assignment: Assignment,
        user_id: UserId,
        nodes: Sequence[dict] | None,
        edges: Sequence[dict] | None,
        status: MapStatus = MapStatus.DRAFT,
        submitted_at: datetime | None = None,
        control_text: str | None = None,
    ) -> LearnerMapId: ...
    async def update_learner_map_graph(
        self, learner_map_id: LearnerMapId, nodes: Sequence[dict], edges: Sequence[dict],
    ) -> bool: ...
    async def write_learner_map_status(
        self,
        learner_map_id: LearnerMapId,
        status: MapStatus,
        submitted_at: datetime | None,
        expected_attempt: int,
    ) -> bool: ...
    async def save_control_text(
        self, learner_map_id: LearnerMapId, text: str, submitted_at: datetime,
        expected_attempt: int,
    ) -> bool: ...
    async def reset_for_new_attempt(
        self, learner_map_id: LearnerMapId, current_attempt: int,
    ) -> bool: ...
    async def insert_diagnosis(self, diagnosis: NewDiagnosis) -> DiagnosisId: ...

    # ─── Transaction ─────────────────────────────────────────────
    async def commit(self) -> None: ...
    async def rollback(self) -> None: ...
