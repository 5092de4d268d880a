"""Assignment Analytics Service: teacher dashboard reads and analytics export.

Invariants:
    - get_analytics_for_assignment raises AssignmentNotFoundError both when the
      assignment does not exist and when teacher_id did not create it
    - A missing goal map surfaces as GoalMapNotFoundError
    - Learner details are diagnosed fresh from the stored edges; nothing is written
    - get_multiple_learner_maps skips ids that cannot be resolved

Design Decisions:
    - Read-only: no commit, no locking; a diagnosis written concurrently may or may not show
    - Grouping, summary and export formatting live in core/; this module only does IO
"""

import logging
from datetime import datetime
from typing import Sequence

from kitmap.core.analytics import build_assignment_summary, build_learner_rows
from kitmap.core.comparator import compare_maps
from kitmap.core.domain_types import (
    AssignmentId, ExportFormat, LearnerMapId, UserId,
)
from kitmap.core.edge_classifier import classify_edges, summarize_classification
from kitmap.core.errors import (
    AssignmentNotFoundError,
    ErrorContext,
    GoalMapNotFoundError,
    LearnerMapNotFoundError,
    ResourceNotFoundError,
)
from kitmap.core.export_serializer import (
    DEFAULT_FILENAME_PREFIX, ExportResult, export_analytics,
)
from kitmap.core.repository_protocols import KitMapRepository
from kitmap.schemas.analytics import (
    AssignmentAnalytics,
    AssignmentSummary,
    ClassifiedEdgeOut,
    LearnerAnalytics,
    LearnerMapDetails,
    TeacherAssignment,
)
from kitmap.schemas.graph import DiagnosisOut, GoalMapOut
from kitmap.schemas.learner_map import LearnerMapOut

logger = logging.getLogger(__name__)


class AssignmentAnalyticsService:
    """Teacher-facing analytics over one repository."""

    def __init__(
        self,
        repo: KitMapRepository,
        filename_prefix: str = DEFAULT_FILENAME_PREFIX,
    ):
        self.repo = repo
        self.filename_prefix = filename_prefix

    async def get_teacher_assignments(
        self, teacher_id: UserId,
    ) -> list[TeacherAssignment]:
        """Assignments created by teacher_id, newest first."""
        rows = await self.repo.read_teacher_assignments(teacher_id)
        return [TeacherAssignment.of(r) for r in rows]

    async def get_analytics_for_assignment(
        self, teacher_id: UserId, assignment_id: AssignmentId,
    ) -> AssignmentAnalytics:
        ctx = ErrorContext(user_id=teacher_id, assignment_id=assignment_id)
        assignment = await self.repo.read_assignment(assignment_id)
        if assignment is None or assignment.created_by != teacher_id:
            logger.warning(
                "Analytics requested for unknown or foreign assignment",
                extra={"assignment_id": assignment_id, "user_id": teacher_id},
            )
            raise AssignmentNotFoundError(assignment_id, ctx)

        goal_map = await self.repo.read_goal_map(assignment.goal_map_id)
        if goal_map is None:
            raise GoalMapNotFoundError(assignment.goal_map_id, ctx)

        rows = await self.repo.read_assignment_learner_rows(assignment_id)
        learners = build_learner_rows(rows)
        summary = build_assignment_summary(learners)

        return AssignmentAnalytics(
            assignment=TeacherAssignment.from_assignment(
                assignment,
                goal_map_title=goal_map.title,
                total_submissions=summary.submitted_count,
                avg_score=summary.avg_score,
            ),
            goal_map=GoalMapOut.of(goal_map),
            learners=[LearnerAnalytics.of(r) for r in learners],
            summary=AssignmentSummary.of(summary),
        )

    async def get_learner_map_for_analytics(
        self, learner_map_id: LearnerMapId, teacher_id: UserId | None = None,
    ) -> LearnerMapDetails:
        """One learner map with its goal map, a fresh diagnosis and edge classes.

        With teacher_id set, maps on assignments that teacher did not create
        are reported as not found.
        """
        ctx = ErrorContext(user_id=teacher_id, learner_map_id=learner_map_id)
        learner_map = await self.repo.read_learner_map_by_id(learner_map_id)
        if learner_map is None:
            raise LearnerMapNotFoundError(learner_map_id, ctx)
        if teacher_id is not None:
            assignment = await self.repo.read_assignment(learner_map.assignment_id)
            if assignment is None or assignment.created_by != teacher_id:
                logger.warning(
                    "Learner map requested for foreign assignment",
                    extra={"learner_map_id": learner_map_id, "user_id": teacher_id},
                )
                raise LearnerMapNotFoundError(learner_map_id, ctx)

        goal_map = await self.repo.read_goal_map(learner_map.goal_map_id)
        if goal_map is None:
            raise GoalMapNotFoundError(learner_map.goal_map_id, ctx)

        user_name = await self.repo.read_user_name(learner_map.user_id)
        diagnosis = compare_maps(goal_map.edges, learner_map.edges)
        classified = classify_edges(goal_map.edges, learner_map.edges, diagnosis)

        return LearnerMapDetails(
            learner_map=LearnerMapOut.of(
                learner_map, user_name or learner_map.user_id,
            ),
            goal_map=GoalMapOut.of(goal_map),
            diagnosis=DiagnosisOut.of(diagnosis),
            edge_classifications=[ClassifiedEdgeOut.of(c) for c in classified],
            classification_counts=summarize_classification(classified),
        )

    async def get_multiple_learner_maps(
        self,
        learner_map_ids: Sequence[LearnerMapId],
        teacher_id: UserId | None = None,
    ) -> list[LearnerMapDetails]:
        details: list[LearnerMapDetails] = []
        for learner_map_id in learner_map_ids:
            try:
                details.append(
                    await self.get_learner_map_for_analytics(
                        learner_map_id, teacher_id,
                    ),
                )
            except ResourceNotFoundError as e:
                logger.info(
                    f"Skipping learner map: {e.message}",
                    extra={"learner_map_id": learner_map_id},
                )
        return details

    async def export_analytics_data(
        self,
        teacher_id: UserId,
        assignment_id: AssignmentId,
        fmt: ExportFormat,
        now: datetime | None = None,
    ) -> ExportResult:
        """Aggregate then serialize; exportedAt and the filename use export time."""
        analytics = await self.get_analytics_for_assignment(
            teacher_id, assignment_id,
        )
        result = export_analytics(
            analytics.export_payload(), fmt, now=now,
            prefix=self.filename_prefix,
        )
        logger.info(
            f"Analytics exported as {fmt.value}",
            extra={"assignment_id": assignment_id, "user_id": teacher_id},
        )
        return result
