"""Diagnosis Workflow: save, submit, re-attempt and control-text submission of learner maps.

Invariants:
    - Per attempt: draft -> submitted exactly once; submitted -> draft only via start_new_attempt
    - submit writes the status transition and the diagnosis row in one transaction, or nothing
    - The status check is a conditional UPDATE: a concurrent second submitter gets
      AlreadySubmittedError and no diagnosis row is created for it
    - A learner map pointing at a deleted goal map fails with GoalMapNotFoundError
      before anything is written
    - start_new_attempt never touches existing diagnosis rows
    - submit_control_text never produces a diagnosis

Design Decisions:
    - Orchestrates IO around the pure compare_maps (functional core, imperative shell)
    - Raises named KitMapError subclasses; the API layer maps them to HTTP responses
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Sequence

from kitmap.core.comparator import DiagnosisResult, compare_maps
from kitmap.core.domain_types import (
    AssignmentId, DiagnosisId, LearnerMapId, MapStatus, UserId,
)
from kitmap.core.entities import DiagnosisRecord, LearnerMap, NewDiagnosis
from kitmap.core.errors import (
    AlreadySubmittedError,
    AssignmentNotFoundError,
    ErrorContext,
    GoalMapNotFoundError,
    LearnerMapNotFoundError,
    NoPreviousAttemptError,
    PreviousAttemptNotSubmittedError,
)
from kitmap.core.graph_model import Edge
from kitmap.core.repository_protocols import KitMapRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SubmissionOutcome:
    diagnosis_id: DiagnosisId
    learner_map_id: LearnerMapId
    attempt: int
    diagnosis: DiagnosisResult


@dataclass(frozen=True)
class DiagnosisView:
    """Student-facing diagnosis: current learner map, goal edges, latest diagnosis."""
    learner_map: LearnerMap
    goal_edges: tuple[Edge, ...]
    diagnosis: DiagnosisRecord | None


def _now() -> datetime:
    return datetime.now(timezone.utc)


class DiagnosisWorkflow:
    """Learner-map state machine plus diagnosis persistence."""

    def __init__(self, repo: KitMapRepository):
        self.repo = repo

    async def save_learner_map(
        self,
        user_id: UserId,
        assignment_id: AssignmentId,
        nodes: Sequence[dict],
        edges: Sequence[dict],
    ) -> LearnerMapId:
        """Create the draft on first save, otherwise overwrite the draft's graph."""
        assignment = await self.repo.read_assignment(assignment_id)
        if not assignment:
            raise AssignmentNotFoundError(assignment_id)

        existing = await self.repo.read_learner_map(assignment_id, user_id)
        if existing is None:
            learner_map_id = await self.repo.create_learner_map(
                assignment, user_id, nodes, edges,
            )
            await self.repo.commit()
            logger.info(
                "Learner map created",
                extra={"learner_map_id": learner_map_id, "user_id": user_id},
            )
            return learner_map_id

        if existing.status.is_terminal:
            raise AlreadySubmittedError(
                existing.id, ErrorContext(learner_map_id=existing.id),
            )
        if not await self.repo.update_learner_map_graph(existing.id, nodes, edges):
            await self.repo.rollback()
            raise AlreadySubmittedError(existing.id)
        await self.repo.commit()
        return existing.id

    async def submit(
        self, user_id: UserId, assignment_id: AssignmentId,
    ) -> SubmissionOutcome:
        """Diagnose the current attempt and freeze it."""
        ctx = ErrorContext(user_id=user_id, assignment_id=assignment_id)
        learner_map = await self.repo.read_learner_map(assignment_id, user_id)
        if learner_map is None:
            raise LearnerMapNotFoundError(f"{assignment_id}/{user_id}", ctx)
        ctx.learner_map_id = learner_map.id

        if learner_map.status.is_terminal:
            logger.warning(
                "Submission rejected: already submitted",
                extra={"learner_map_id": learner_map.id, "attempt": learner_map.attempt},
            )
            raise AlreadySubmittedError(learner_map.id, ctx)

        goal_map = await self.repo.read_goal_map(learner_map.goal_map_id)
        if goal_map is None:
            logger.error(
                "Learner map references a missing goal map",
                extra={"learner_map_id": learner_map.id},
            )
            raise GoalMapNotFoundError(learner_map.goal_map_id, ctx)

        result = compare_maps(goal_map.edges, learner_map.edges)

        claimed = await self.repo.write_learner_map_status(
            learner_map.id, MapStatus.SUBMITTED, _now(),
            expected_attempt=learner_map.attempt,
        )
        if not claimed:
            await self.repo.rollback()
            logger.warning(
                "Submission lost race: already submitted",
                extra={"learner_map_id": learner_map.id, "attempt": learner_map.attempt},
            )
            raise AlreadySubmittedError(learner_map.id, ctx)

        try:
            diagnosis_id = await self.repo.insert_diagnosis(NewDiagnosis(
                goal_map_id=goal_map.id,
                learner_map_id=learner_map.id,
                result=result,
            ))
            await self.repo.commit()
        except Exception:
            await self.repo.rollback()
            raise

        logger.info(
            "Learner map submitted",
            extra={
                "learner_map_id": learner_map.id,
                "diagnosis_id": diagnosis_id,
                "attempt": learner_map.attempt,
                "score": result.score,
            },
        )
        return SubmissionOutcome(
            diagnosis_id=diagnosis_id,
            learner_map_id=learner_map.id,
            attempt=learner_map.attempt,
            diagnosis=result,
        )

    async def start_new_attempt(
        self, user_id: UserId, assignment_id: AssignmentId,
    ) -> int:
        """Reopen a submitted map as a fresh draft. Returns the new attempt number."""
        ctx = ErrorContext(user_id=user_id, assignment_id=assignment_id)
        learner_map = await self.repo.read_learner_map(assignment_id, user_id)
        if learner_map is None:
            raise NoPreviousAttemptError(assignment_id, ctx)
        ctx.learner_map_id = learner_map.id

        if not learner_map.status.is_terminal:
            raise PreviousAttemptNotSubmittedError(learner_map.id, ctx)

        if not await self.repo.reset_for_new_attempt(
            learner_map.id, learner_map.attempt,
        ):
            await self.repo.rollback()
            raise PreviousAttemptNotSubmittedError(learner_map.id, ctx)
        await self.repo.commit()

        new_attempt = learner_map.attempt + 1
        logger.info(
            "New attempt started",
            extra={"learner_map_id": learner_map.id, "attempt": new_attempt},
        )
        return new_attempt

    async def submit_control_text(
        self, user_id: UserId, assignment_id: AssignmentId, text: str,
    ) -> LearnerMapId:
        """Submit free text instead of a map. Returns the learner map id."""
        ctx = ErrorContext(user_id=user_id, assignment_id=assignment_id)
        assignment = await self.repo.read_assignment(assignment_id)
        if not assignment:
            raise AssignmentNotFoundError(assignment_id, ctx)

        existing = await self.repo.read_learner_map(assignment_id, user_id)
        if existing is None:
            learner_map_id = await self.repo.create_learner_map(
                assignment, user_id, None, None,
                status=MapStatus.SUBMITTED,
                submitted_at=_now(),
                control_text=text,
            )
            await self.repo.commit()
        else:
            ctx.learner_map_id = existing.id
            if existing.status.is_terminal:
                raise AlreadySubmittedError(existing.id, ctx)
            if not await self.repo.save_control_text(
                existing.id, text, _now(), expected_attempt=existing.attempt,
            ):
                await self.repo.rollback()
                raise AlreadySubmittedError(existing.id, ctx)
            await self.repo.commit()
            learner_map_id = existing.id

        logger.info(
            "Control text submitted",
            extra={"learner_map_id": learner_map_id, "user_id": user_id},
        )
        return learner_map_id

    async def get_diagnosis(
        self, user_id: UserId, assignment_id: AssignmentId,
    ) -> DiagnosisView | None:
        """Latest diagnosis for the student's map; None without a learner map."""
        learner_map = await self.repo.read_learner_map(assignment_id, user_id)
        if learner_map is None:
            return None
        goal_map = await self.repo.read_goal_map(learner_map.goal_map_id)
        if goal_map is None:
            raise GoalMapNotFoundError(learner_map.goal_map_id)
        return DiagnosisView(
            learner_map=learner_map,
            goal_edges=goal_map.edges,
            diagnosis=await self.repo.read_latest_diagnosis(learner_map.id),
        )
