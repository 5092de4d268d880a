"""Learner Map Routes: student save/submit/re-attempt, own diagnosis, peer stats.

Invariants:
    - Every route acts on the (X-User-Id, assignment_id) learner map
    - Failures surface as KitMapError and are rendered by the global handlers
"""

from fastapi import APIRouter, Depends, status

from kitmap.api.dependencies import (
    get_repository, get_user_id, get_workflow,
)
from kitmap.core.domain_types import UserId
from kitmap.core.errors import ErrorContext, LearnerMapNotFoundError
from kitmap.infrastructure.repository import SqlKitMapRepository
from kitmap.schemas.graph import DiagnosisOut, EdgeOut
from kitmap.schemas.learner_map import (
    ControlTextSubmit,
    DiagnosisViewOut,
    LearnerMapOut,
    LearnerMapSave,
    LearnerMapSaved,
    NewAttemptResponse,
    PeerStatsOut,
    SubmitResponse,
)
from kitmap.services.diagnosis_workflow import DiagnosisWorkflow
from kitmap.services.peer_statistics import get_peer_stats

router = APIRouter(prefix="/api/v1/assignments", tags=["learner-maps"])


@router.put("/{assignment_id}/learner-map", response_model=LearnerMapSaved)
async def save_learner_map(
    assignment_id: str,
    body: LearnerMapSave,
    user_id: UserId = Depends(get_user_id),
    workflow: DiagnosisWorkflow = Depends(get_workflow),
):
    nodes, edges = body.graph_dicts()
    learner_map_id = await workflow.save_learner_map(
        user_id, assignment_id, nodes, edges,
    )
    return LearnerMapSaved(learner_map_id=learner_map_id)


@router.post(
    "/{assignment_id}/learner-map/submit",
    response_model=SubmitResponse,
    status_code=status.HTTP_201_CREATED,
)
async def submit_learner_map(
    assignment_id: str,
    user_id: UserId = Depends(get_user_id),
    workflow: DiagnosisWorkflow = Depends(get_workflow),
):
    outcome = await workflow.submit(user_id, assignment_id)
    return SubmitResponse(
        diagnosis_id=outcome.diagnosis_id,
        learner_map_id=outcome.learner_map_id,
        attempt=outcome.attempt,
        diagnosis=DiagnosisOut.of(outcome.diagnosis),
    )


@router.post(
    "/{assignment_id}/learner-map/control-text",
    response_model=LearnerMapSaved,
    status_code=status.HTTP_201_CREATED,
)
async def submit_control_text(
    assignment_id: str,
    body: ControlTextSubmit,
    user_id: UserId = Depends(get_user_id),
    workflow: DiagnosisWorkflow = Depends(get_workflow),
):
    learner_map_id = await workflow.submit_control_text(
        user_id, assignment_id, body.text,
    )
    return LearnerMapSaved(learner_map_id=learner_map_id)


@router.post(
    "/{assignment_id}/learner-map/new-attempt",
    response_model=NewAttemptResponse,
)
async def start_new_attempt(
    assignment_id: str,
    user_id: UserId = Depends(get_user_id),
    workflow: DiagnosisWorkflow = Depends(get_workflow),
):
    attempt = await workflow.start_new_attempt(user_id, assignment_id)
    return NewAttemptResponse(attempt=attempt)


@router.get(
    "/{assignment_id}/learner-map/diagnosis", response_model=DiagnosisViewOut,
)
async def get_diagnosis(
    assignment_id: str,
    user_id: UserId = Depends(get_user_id),
    workflow: DiagnosisWorkflow = Depends(get_workflow),
):
    view = await workflow.get_diagnosis(user_id, assignment_id)
    if view is None:
        raise LearnerMapNotFoundError(
            f"{assignment_id}/{user_id}",
            ErrorContext(user_id=user_id, assignment_id=assignment_id),
        )
    record = view.diagnosis
    return DiagnosisViewOut(
        learner_map=LearnerMapOut.of(view.learner_map),
        goal_edges=[EdgeOut.of(e) for e in view.goal_edges],
        diagnosis_id=record.id if record else None,
        diagnosis=DiagnosisOut.of(record.result) if record else None,
    )


@router.get("/{assignment_id}/peer-stats", response_model=PeerStatsOut)
async def peer_stats(
    assignment_id: str,
    user_id: UserId = Depends(get_user_id),
    repo: SqlKitMapRepository = Depends(get_repository),
):
    stats = await get_peer_stats(repo, user_id, assignment_id)
    return PeerStatsOut.of(stats)
