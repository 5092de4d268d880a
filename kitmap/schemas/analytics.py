"""Analytics Schemas: teacher-facing assignment analytics, learner map details, exports.

Invariants:
    - AssignmentAnalytics dumps (by_alias) to {assignment, goalMap, learners, summary},
      the payload the export serializer consumes
    - Summary statistics are None (null) when no learner has a score
    - Missing classified edges carry the placeholder id "missing-{source}-{target}"

Design Decisions:
    - Rendering hints for missing edges (dashed, animated) live here, on the wire
      model, never on the core ClassifiedEdge variants
"""

from datetime import datetime

from kitmap.core.analytics import AssignmentSummary as SummaryRow
from kitmap.core.analytics import LearnerAnalyticsRow
from kitmap.core.domain_types import EdgeClass
from kitmap.core.edge_classifier import ClassifiedEdge, MissingEdge
from kitmap.core.entities import Assignment, TeacherAssignmentRow
from kitmap.core.export_serializer import ExportResult
from kitmap.schemas.graph import CamelModel, DiagnosisOut, GoalMapOut
from kitmap.schemas.learner_map import LearnerMapOut


class TeacherAssignment(CamelModel):
    id: str
    title: str
    goal_map_id: str
    goal_map_title: str | None = None
    kit_id: str | None = None
    total_submissions: int = 0
    avg_score: float | None = None
    created_at: datetime
    due_at: datetime | None = None

    @classmethod
    def of(cls, row: TeacherAssignmentRow) -> "TeacherAssignment":
        return cls.from_assignment(
            row.assignment,
            goal_map_title=row.goal_map_title,
            total_submissions=row.submission_count,
            avg_score=row.avg_score,
        )

    @classmethod
    def from_assignment(
        cls,
        assignment: Assignment,
        goal_map_title: str | None,
        total_submissions: int,
        avg_score: float | None = None,
    ) -> "TeacherAssignment":
        return cls(
            id=assignment.id,
            title=assignment.title,
            goal_map_id=assignment.goal_map_id,
            goal_map_title=goal_map_title,
            kit_id=assignment.kit_id,
            total_submissions=total_submissions,
            avg_score=avg_score,
            created_at=assignment.created_at,
            due_at=assignment.due_at,
        )


class LearnerAnalytics(CamelModel):
    user_id: str
    user_name: str
    learner_map_id: str
    status: str
    score: float | None = None
    attempt: int
    submitted_at: datetime | None = None
    correct: int = 0
    missing: int = 0
    excessive: int = 0
    total_goal_edges: int = 0

    @classmethod
    def of(cls, row: LearnerAnalyticsRow) -> "LearnerAnalytics":
        return cls(
            user_id=row.user_id,
            user_name=row.user_name,
            learner_map_id=row.learner_map_id,
            status=row.status.value,
            score=row.score,
            attempt=row.attempt,
            submitted_at=row.submitted_at,
            correct=row.correct,
            missing=row.missing,
            excessive=row.excessive,
            total_goal_edges=row.total_goal_edges,
        )


class AssignmentSummary(CamelModel):
    total_learners: int
    submitted_count: int
    draft_count: int
    avg_score: float | None = None
    median_score: float | None = None
    highest_score: float | None = None
    lowest_score: float | None = None

    @classmethod
    def of(cls, summary: SummaryRow) -> "AssignmentSummary":
        return cls(
            total_learners=summary.total_learners,
            submitted_count=summary.submitted_count,
            draft_count=summary.draft_count,
            avg_score=summary.avg_score,
            median_score=summary.median_score,
            highest_score=summary.highest_score,
            lowest_score=summary.lowest_score,
        )


class AssignmentAnalytics(CamelModel):
    assignment: TeacherAssignment
    goal_map: GoalMapOut
    learners: list[LearnerAnalytics] = []
    summary: AssignmentSummary

    def export_payload(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class ClassifiedEdgeOut(CamelModel):
    """One learner edge, or one synthesized missing goal edge, with its class."""
    id: str
    source: str
    target: str
    classification: EdgeClass
    dashed: bool = False
    animated: bool = False

    @classmethod
    def of(cls, item: ClassifiedEdge) -> "ClassifiedEdgeOut":
        if isinstance(item, MissingEdge):
            return cls(
                id=item.placeholder_id,
                source=item.source,
                target=item.target,
                classification=item.classification,
                dashed=True,
                animated=True,
            )
        return cls(
            id=item.edge.id,
            source=item.edge.source,
            target=item.edge.target,
            classification=item.classification,
        )


class LearnerMapDetails(CamelModel):
    learner_map: LearnerMapOut
    goal_map: GoalMapOut
    diagnosis: DiagnosisOut
    edge_classifications: list[ClassifiedEdgeOut] = []
    classification_counts: dict[str, int] = {}


class LearnerMapBatch(CamelModel):
    learner_map_ids: list[str] = []


class ExportResultOut(CamelModel):
    filename: str
    data: str
    content_type: str

    @classmethod
    def of(cls, result: ExportResult) -> "ExportResultOut":
        return cls(
            filename=result.filename,
            data=result.data,
            content_type=result.content_type,
        )
