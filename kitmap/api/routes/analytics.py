"""Analytics Routes: teacher dashboard reads and analytics export.

Invariants:
    - The teacher id is the X-User-Id header; foreign assignments answer 404
    - Learner map details are only served to the teacher who created the
      assignment; other learner maps answer 404 (or are left out of a batch)
    - Export returns the file body in an ExportResult envelope, never a stream
"""

from fastapi import APIRouter, Depends, Query

from kitmap.api.dependencies import get_analytics_service, get_user_id
from kitmap.core.domain_types import ExportFormat, UserId
from kitmap.schemas.analytics import (
    AssignmentAnalytics,
    ExportResultOut,
    LearnerMapBatch,
    LearnerMapDetails,
    TeacherAssignment,
)
from kitmap.services.assignment_analytics import AssignmentAnalyticsService

router = APIRouter(prefix="/api/v1/analytics", tags=["analytics"])


@router.get("/assignments", response_model=list[TeacherAssignment])
async def list_teacher_assignments(
    teacher_id: UserId = Depends(get_user_id),
    service: AssignmentAnalyticsService = Depends(get_analytics_service),
):
    return await service.get_teacher_assignments(teacher_id)


@router.get(
    "/assignments/{assignment_id}", response_model=AssignmentAnalytics,
)
async def assignment_analytics(
    assignment_id: str,
    teacher_id: UserId = Depends(get_user_id),
    service: AssignmentAnalyticsService = Depends(get_analytics_service),
):
    return await service.get_analytics_for_assignment(teacher_id, assignment_id)


@router.post(
    "/assignments/{assignment_id}/export", response_model=ExportResultOut,
)
async def export_assignment_analytics(
    assignment_id: str,
    fmt: ExportFormat = Query(ExportFormat.CSV, alias="format"),
    teacher_id: UserId = Depends(get_user_id),
    service: AssignmentAnalyticsService = Depends(get_analytics_service),
):
    result = await service.export_analytics_data(teacher_id, assignment_id, fmt)
    return ExportResultOut.of(result)


@router.get(
    "/learner-maps/{learner_map_id}", response_model=LearnerMapDetails,
)
async def learner_map_details(
    learner_map_id: str,
    teacher_id: UserId = Depends(get_user_id),
    service: AssignmentAnalyticsService = Depends(get_analytics_service),
):
    return await service.get_learner_map_for_analytics(learner_map_id, teacher_id)


@router.post("/learner-maps", response_model=list[LearnerMapDetails])
async def learner_map_batch(
    body: LearnerMapBatch,
    teacher_id: UserId = Depends(get_user_id),
    service: AssignmentAnalyticsService = Depends(get_analytics_service),
):
    return await service.get_multiple_learner_maps(
        body.learner_map_ids, teacher_id,
    )
