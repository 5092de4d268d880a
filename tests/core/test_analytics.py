"""Tests for assignment analytics: latest attempt per learner, rows and summary."""

from datetime import datetime, timedelta, timezone

from kitmap.core.analytics import (
    build_assignment_summary,
    build_learner_rows,
    select_latest_attempts,
)
from kitmap.core.comparator import compare_maps
from kitmap.core.domain_types import MapStatus
from kitmap.core.entities import DiagnosisRecord, LearnerAttemptRow, LearnerMap
from kitmap.core.graph_model import Edge

T0 = datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)
GOAL = [Edge("g1", "a", "b"), Edge("g2", "b", "c")]


def _row(user_id, name, status, attempt=1, learner_edges=(), updated=T0,
         diagnosed=None, lm_id=None):
    lm = LearnerMap(
        id=lm_id or f"lm-{user_id}",
        assignment_id="as-1",
        goal_map_id="gm-1",
        user_id=user_id,
        status=status,
        attempt=attempt,
        edges=tuple(learner_edges),
        submitted_at=updated if status.is_terminal else None,
        updated_at=updated,
    )
    diagnosis = None
    if diagnosed is not None:
        diagnosis = DiagnosisRecord(
            id=f"d-{user_id}-{attempt}-{diagnosed.isoformat()}",
            goal_map_id="gm-1",
            learner_map_id=lm.id,
            result=compare_maps(GOAL, list(learner_edges)),
            created_at=diagnosed,
        )
    return LearnerAttemptRow(learner_map=lm, user_name=name, diagnosis=diagnosis)


def test_keeps_only_highest_attempt_per_user():
    old = _row("u1", "Ana", MapStatus.SUBMITTED, attempt=1, diagnosed=T0)
    new = _row("u1", "Ana", MapStatus.SUBMITTED, attempt=2,
               updated=T0 + timedelta(hours=1), diagnosed=T0 + timedelta(hours=1))
    latest = select_latest_attempts([new, old])
    assert latest == [new]


def test_ties_on_attempt_break_on_latest_diagnosis():
    first = _row("u1", "Ana", MapStatus.SUBMITTED, attempt=2,
                 learner_edges=[Edge("l1", "a", "b")], diagnosed=T0)
    second = _row("u1", "Ana", MapStatus.SUBMITTED, attempt=2,
                  learner_edges=[Edge("l1", "a", "b"), Edge("l2", "b", "c")],
                  diagnosed=T0 + timedelta(minutes=5))
    assert select_latest_attempts([second, first]) == [second]
    assert select_latest_attempts([first, second]) == [second]


def test_draft_rows_carry_no_diagnosis():
    row = _row("u1", "Ana", MapStatus.DRAFT, attempt=2,
               learner_edges=[Edge("l1", "a", "b")], diagnosed=T0)
    [learner] = build_learner_rows([row])
    assert learner.status is MapStatus.DRAFT
    assert learner.score is None
    assert (learner.correct, learner.missing, learner.excessive) == (0, 0, 0)
    assert learner.total_goal_edges == 0


def test_submitted_row_counts_come_from_diagnosis():
    row = _row("u1", "Ana", MapStatus.SUBMITTED,
               learner_edges=[Edge("l1", "a", "b"), Edge("l2", "x", "a")],
               diagnosed=T0)
    [learner] = build_learner_rows([row])
    assert learner.score == 0.5
    assert (learner.correct, learner.missing, learner.excessive) == (1, 1, 1)
    assert learner.total_goal_edges == 2
    assert learner.submitted_at == T0


def test_rows_sorted_by_name_then_user_id():
    rows = [
        _row("u3", "bruno", MapStatus.DRAFT),
        _row("u2", "Ana", MapStatus.DRAFT),
        _row("u1", "ana", MapStatus.DRAFT),
    ]
    assert [r.user_id for r in build_learner_rows(rows)] == ["u1", "u2", "u3"]


def test_summary_over_non_null_scores_only():
    rows = [
        _row("u1", "A", MapStatus.SUBMITTED,
             learner_edges=[Edge("l1", "a", "b"), Edge("l2", "b", "c")], diagnosed=T0),
        _row("u2", "B", MapStatus.SUBMITTED,
             learner_edges=[Edge("l1", "a", "b")], diagnosed=T0),
        _row("u3", "C", MapStatus.GRADED, learner_edges=[], diagnosed=T0),
        _row("u4", "D", MapStatus.DRAFT),
    ]
    summary = build_assignment_summary(build_learner_rows(rows))
    assert summary.total_learners == 4
    assert summary.submitted_count == 3
    assert summary.draft_count == 1
    assert summary.avg_score == 0.5
    assert summary.median_score == 0.5
    assert summary.highest_score == 1.0
    assert summary.lowest_score == 0.0


def test_empty_assignment_summary_is_zero_and_null_filled():
    summary = build_assignment_summary(build_learner_rows([]))
    assert summary.total_learners == 0
    assert summary.submitted_count == 0
    assert summary.draft_count == 0
    assert summary.avg_score is None
    assert summary.median_score is None
    assert summary.highest_score is None
    assert summary.lowest_score is None
