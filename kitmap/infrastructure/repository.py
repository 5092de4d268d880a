"""SQL Repository: KitMapRepository over an SQLAlchemy AsyncSession.

Invariants:
    - Returns core entities (frozen dataclasses), never ORM rows
    - Status transitions are conditional UPDATEs checked by affected-row count
    - Never commits on its own; commit()/rollback() are called by the workflow
    - Datetimes leave the repository timezone-aware (UTC)

Design Decisions:
    - Reads use populate_existing so a session that just ran a conditional UPDATE
      never serves a stale identity-map copy
    - Users are owned by the auth layer: outer join, display name falls back to the id
"""

from datetime import datetime, timezone
from typing import Sequence

from sqlalchemy import case, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from kitmap.core.comparator import DiagnosisResult
from kitmap.core.domain_types import (
    AssignmentId,
    DiagnosisId,
    GoalMapDirection,
    GoalMapId,
    LearnerMapId,
    MapStatus,
    RUBRIC_VERSION,
    UserId,
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
from kitmap.core.graph_model import GoalMap, parse_edges, parse_nodes
from kitmap.models.assignment import Assignment as AssignmentModel
from kitmap.models.diagnosis import Diagnosis as DiagnosisModel
from kitmap.models.goal_map import GoalMap as GoalMapModel
from kitmap.models.learner_map import LearnerMap as LearnerMapModel
from kitmap.models.user import User as UserModel


_TERMINAL = [s.value for s in MapStatus if s.is_terminal]


def _aware(dt: datetime | None) -> datetime | None:
    """SQLite hands back naive datetimes; treat them as UTC."""
    if dt is None or dt.tzinfo is not None:
        return dt
    return dt.replace(tzinfo=timezone.utc)


# ─── Row -> entity mappers ───────────────────────────────────────

def _goal_map(row: GoalMapModel) -> GoalMap:
    return GoalMap(
        id=row.id,
        title=row.title,
        nodes=parse_nodes(row.nodes),
        edges=parse_edges(row.edges),
        direction=GoalMapDirection(row.direction),
    )


def _assignment(row: AssignmentModel) -> Assignment:
    return Assignment(
        id=row.id,
        title=row.title,
        goal_map_id=row.goal_map_id,
        created_by=row.created_by,
        created_at=_aware(row.created_at),
        kit_id=row.kit_id,
        due_at=_aware(row.due_at),
    )


def _learner_map(row: LearnerMapModel) -> LearnerMap:
    return LearnerMap(
        id=row.id,
        assignment_id=row.assignment_id,
        goal_map_id=row.goal_map_id,
        user_id=row.user_id,
        status=MapStatus(row.status),
        attempt=row.attempt,
        nodes=parse_nodes(row.nodes),
        edges=parse_edges(row.edges),
        submitted_at=_aware(row.submitted_at),
        updated_at=_aware(row.updated_at),
        control_text=row.control_text,
    )


def _diagnosis(row: DiagnosisModel) -> DiagnosisRecord:
    return DiagnosisRecord(
        id=row.id,
        goal_map_id=row.goal_map_id,
        learner_map_id=row.learner_map_id,
        result=DiagnosisResult.from_dict(row.per_link or {}, score=row.score),
        created_at=_aware(row.created_at),
    )


class SqlKitMapRepository:
    """KitMapRepository implementation backed by one AsyncSession."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ─── Reads ───────────────────────────────────────────────────

    async def read_goal_map(self, goal_map_id: GoalMapId) -> GoalMap | None:
        result = await self.db.execute(
            select(GoalMapModel).where(GoalMapModel.id == goal_map_id),
        )
        row = result.scalar_one_or_none()
        return _goal_map(row) if row else None

    async def read_assignment(self, assignment_id: AssignmentId) -> Assignment | None:
        result = await self.db.execute(
            select(AssignmentModel).where(AssignmentModel.id == assignment_id),
        )
        row = result.scalar_one_or_none()
        return _assignment(row) if row else None

    async def read_learner_map(
        self, assignment_id: AssignmentId, user_id: UserId,
    ) -> LearnerMap | None:
        result = await self.db.execute(
            select(LearnerMapModel)
            .where(LearnerMapModel.assignment_id == assignment_id)
            .where(LearnerMapModel.user_id == user_id)
            .execution_options(populate_existing=True)
        )
        row = result.scalar_one_or_none()
        return _learner_map(row) if row else None

    async def read_learner_map_by_id(
        self, learner_map_id: LearnerMapId,
    ) -> LearnerMap | None:
        result = await self.db.execute(
            select(LearnerMapModel)
            .where(LearnerMapModel.id == learner_map_id)
            .execution_options(populate_existing=True)
        )
        row = result.scalar_one_or_none()
        return _learner_map(row) if row else None

    async def read_user_name(self, user_id: UserId) -> str | None:
        result = await self.db.execute(
            select(UserModel.name).where(UserModel.id == user_id),
        )
        return result.scalar_one_or_none()

    async def read_latest_diagnosis(
        self, learner_map_id: LearnerMapId,
    ) -> DiagnosisRecord | None:
        result = await self.db.execute(
            select(DiagnosisModel)
            .where(DiagnosisModel.learner_map_id == learner_map_id)
            .order_by(DiagnosisModel.created_at.desc())
            .limit(1)
        )
        row = result.scalar_one_or_none()
        return _diagnosis(row) if row else None

    async def read_assignment_learner_rows(
        self, assignment_id: AssignmentId,
    ) -> list[LearnerAttemptRow]:
        """Every (learner map, diagnosis) pair for the assignment, drafts included."""
        result = await self.db.execute(
            select(LearnerMapModel, UserModel.name, DiagnosisModel)
            .outerjoin(UserModel, UserModel.id == LearnerMapModel.user_id)
            .outerjoin(
                DiagnosisModel,
                DiagnosisModel.learner_map_id == LearnerMapModel.id,
            )
            .where(LearnerMapModel.assignment_id == assignment_id)
            .order_by(
                LearnerMapModel.attempt.desc(),
                LearnerMapModel.updated_at.desc(),
            )
            .execution_options(populate_existing=True)
        )
        return [
            LearnerAttemptRow(
                learner_map=_learner_map(lm),
                user_name=name or lm.user_id,
                diagnosis=_diagnosis(diag) if diag else None,
            )
            for lm, name, diag in result.all()
        ]

    async def read_submitted_scores(
        self, assignment_id: AssignmentId,
    ) -> list[SubmittedScore]:
        """One entry per diagnosis of every submitted (or graded) learner map."""
        result = await self.db.execute(
            select(
                LearnerMapModel.user_id,
                LearnerMapModel.id,
                LearnerMapModel.attempt,
                DiagnosisModel.score,
            )
            .outerjoin(
                DiagnosisModel,
                DiagnosisModel.learner_map_id == LearnerMapModel.id,
            )
            .where(LearnerMapModel.assignment_id == assignment_id)
            .where(LearnerMapModel.status.in_(_TERMINAL))
        )
        return [
            SubmittedScore(
                user_id=user_id, learner_map_id=lm_id,
                attempt=attempt, score=score,
            )
            for user_id, lm_id, attempt, score in result.all()
        ]

    async def read_teacher_assignments(
        self, teacher_id: UserId,
    ) -> list[TeacherAssignmentRow]:
        submitted_map = case(
            (LearnerMapModel.status != MapStatus.DRAFT.value, LearnerMapModel.id),
        )
        result = await self.db.execute(
            select(
                AssignmentModel,
                GoalMapModel.title,
                func.count(submitted_map.distinct()),
                func.avg(DiagnosisModel.score),
            )
            .outerjoin(GoalMapModel, GoalMapModel.id == AssignmentModel.goal_map_id)
            .outerjoin(
                LearnerMapModel,
                LearnerMapModel.assignment_id == AssignmentModel.id,
            )
            .outerjoin(
                DiagnosisModel,
                DiagnosisModel.learner_map_id == LearnerMapModel.id,
            )
            .where(AssignmentModel.created_by == teacher_id)
            .group_by(AssignmentModel.id, GoalMapModel.title)
            .order_by(AssignmentModel.created_at.desc())
        )
        return [
            TeacherAssignmentRow(
                assignment=_assignment(a),
                goal_map_title=title,
                submission_count=int(count or 0),
                avg_score=float(avg) if avg is not None else None,
            )
            for a, title, count, avg in result.all()
        ]

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
    ) -> LearnerMapId:
        row = LearnerMapModel(
            assignment_id=assignment.id,
            goal_map_id=assignment.goal_map_id,
            kit_id=assignment.kit_id,
            user_id=user_id,
            nodes=list(nodes) if nodes is not None else None,
            edges=list(edges) if edges is not None else None,
            control_text=control_text,
            status=status.value,
            attempt=1,
            submitted_at=submitted_at,
        )
        self.db.add(row)
        await self.db.flush()
        return LearnerMapId(row.id)

    async def update_learner_map_graph(
        self, learner_map_id: LearnerMapId, nodes: Sequence[dict], edges: Sequence[dict],
    ) -> bool:
        """Replace nodes/edges of a draft map. False when the map is not a draft."""
        result = await self.db.execute(
            update(LearnerMapModel)
            .where(LearnerMapModel.id == learner_map_id)
            .where(LearnerMapModel.status == MapStatus.DRAFT.value)
            .values(nodes=list(nodes), edges=list(edges))
            .execution_options(synchronize_session="evaluate")
        )
        return result.rowcount == 1

    async def write_learner_map_status(
        self,
        learner_map_id: LearnerMapId,
        status: MapStatus,
        submitted_at: datetime | None,
        expected_attempt: int,
    ) -> bool:
        """Move a draft attempt to status. False when another writer got there first."""
        result = await self.db.execute(
            update(LearnerMapModel)
            .where(LearnerMapModel.id == learner_map_id)
            .where(LearnerMapModel.attempt == expected_attempt)
            .where(LearnerMapModel.status == MapStatus.DRAFT.value)
            .values(status=status.value, submitted_at=submitted_at)
            .execution_options(synchronize_session="evaluate")
        )
        return result.rowcount == 1

    async def save_control_text(
        self, learner_map_id: LearnerMapId, text: str, submitted_at: datetime,
        expected_attempt: int,
    ) -> bool:
        result = await self.db.execute(
            update(LearnerMapModel)
            .where(LearnerMapModel.id == learner_map_id)
            .where(LearnerMapModel.attempt == expected_attempt)
            .where(LearnerMapModel.status == MapStatus.DRAFT.value)
            .values(
                control_text=text,
                nodes=None,
                edges=None,
                status=MapStatus.SUBMITTED.value,
                submitted_at=submitted_at,
            )
            .execution_options(synchronize_session="evaluate")
        )
        return result.rowcount == 1

    async def reset_for_new_attempt(
        self, learner_map_id: LearnerMapId, current_attempt: int,
    ) -> bool:
        """Reopen a submitted map as a draft of attempt current_attempt + 1."""
        result = await self.db.execute(
            update(LearnerMapModel)
            .where(LearnerMapModel.id == learner_map_id)
            .where(LearnerMapModel.attempt == current_attempt)
            .where(LearnerMapModel.status != MapStatus.DRAFT.value)
            .values(
                status=MapStatus.DRAFT.value,
                attempt=current_attempt + 1,
                submitted_at=None,
            )
            .execution_options(synchronize_session="evaluate")
        )
        return result.rowcount == 1

    async def insert_diagnosis(self, diagnosis: NewDiagnosis) -> DiagnosisId:
        result = diagnosis.result
        row = DiagnosisModel(
            goal_map_id=diagnosis.goal_map_id,
            learner_map_id=diagnosis.learner_map_id,
            summary=result.summary_line,
            per_link=result.to_dict(),
            score=result.score,
            total_goal_edges=result.total_goal_edges,
            rubric_version=RUBRIC_VERSION,
        )
        self.db.add(row)
        await self.db.flush()
        return DiagnosisId(row.id)

    # ─── Transaction ─────────────────────────────────────────────

    async def commit(self) -> None:
        await self.db.commit()

    async def rollback(self) -> None:
        await self.db.rollback()
