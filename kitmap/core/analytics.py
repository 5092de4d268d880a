"""Assignment Analytics: collapse learner attempts into per-learner rows and a summary.

Invariants:
    - Exactly one row per user: the most recent attempt, chosen by
      max (attempt, updated_at, diagnosis created_at) within the user's group
    - A draft attempt never carries a diagnosis (score None, counts 0)
    - Score statistics consider non-null scores only; all None when there are none
    - Never raises on empty input

Design Decisions:
    - Explicit group-by-user + replace-if-newer over relying on query ORDER BY
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable

from kitmap.core.domain_types import LearnerMapId, MapStatus, Score, UserId
from kitmap.core.entities import LearnerAttemptRow
from kitmap.core.score_stats import summarize_scores

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


@dataclass(frozen=True)
class LearnerAnalyticsRow:
    user_id: UserId
    user_name: str
    learner_map_id: LearnerMapId
    status: MapStatus
    score: Score | None
    attempt: int
    submitted_at: datetime | None
    correct: int
    missing: int
    excessive: int
    total_goal_edges: int


@dataclass(frozen=True)
class AssignmentSummary:
    total_learners: int
    submitted_count: int
    draft_count: int
    avg_score: float | None
    median_score: float | None
    highest_score: float | None
    lowest_score: float | None


def _recency(row: LearnerAttemptRow) -> tuple[int, datetime, datetime]:
    lm = row.learner_map
    return (
        lm.attempt,
        lm.updated_at or _EPOCH,
        row.diagnosis.created_at if row.diagnosis else _EPOCH,
    )


def select_latest_attempts(
    rows: Iterable[LearnerAttemptRow],
) -> list[LearnerAttemptRow]:
    """Keep the most recent attempt row per user, in first-seen user order."""
    latest: dict[str, LearnerAttemptRow] = {}
    for row in rows:
        user_id = row.learner_map.user_id
        current = latest.get(user_id)
        if current is None or _recency(row) > _recency(current):
            latest[user_id] = row
    return list(latest.values())


def build_learner_row(row: LearnerAttemptRow) -> LearnerAnalyticsRow:
    lm = row.learner_map
    diagnosis = row.diagnosis if lm.status.is_terminal else None
    result = diagnosis.result if diagnosis else None
    return LearnerAnalyticsRow(
        user_id=lm.user_id,
        user_name=row.user_name,
        learner_map_id=lm.id,
        status=lm.status,
        score=result.score if result else None,
        attempt=lm.attempt,
        submitted_at=lm.submitted_at,
        correct=len(result.correct) if result else 0,
        missing=len(result.missing) if result else 0,
        excessive=len(result.excessive) if result else 0,
        total_goal_edges=result.total_goal_edges if result else 0,
    )


def build_learner_rows(
    rows: Iterable[LearnerAttemptRow],
) -> list[LearnerAnalyticsRow]:
    """Latest attempt per learner, ordered by display name then user id."""
    learners = [build_learner_row(r) for r in select_latest_attempts(rows)]
    learners.sort(key=lambda r: (r.user_name.casefold(), r.user_id))
    return learners


def build_assignment_summary(
    learners: list[LearnerAnalyticsRow],
) -> AssignmentSummary:
    stats = summarize_scores(r.score for r in learners)
    return AssignmentSummary(
        total_learners=len(learners),
        submitted_count=sum(1 for r in learners if r.status.is_terminal),
        draft_count=sum(1 for r in learners if r.status is MapStatus.DRAFT),
        avg_score=stats.avg,
        median_score=stats.median,
        highest_score=stats.highest,
        lowest_score=stats.lowest,
    )
