"""Assignment Analytics Service: teacher reads over seeded submissions, drafts and control text.

Invariants:
    - Non-owners and unknown ids get the same AssignmentNotFoundError
    - Learner rows reflect each student's latest attempt only
"""

import json
from datetime import datetime, timezone

import pytest

from kitmap.core.domain_types import ExportFormat
from kitmap.core.errors import (
    AssignmentNotFoundError,
    GoalMapNotFoundError,
    LearnerMapNotFoundError,
)
from kitmap.services.assignment_analytics import AssignmentAnalyticsService
from kitmap.services.diagnosis_workflow import DiagnosisWorkflow

TEACHER_ID = "teacher-1"
HALF_RIGHT = [
    {"id": "l1", "source": "c1", "target": "link1"},
    {"id": "l2", "source": "x", "target": "c1"},
]
ALL_RIGHT = [
    {"id": "l1", "source": "c1", "target": "link1"},
    {"id": "l2", "source": "link1", "target": "c2"},
]


@pytest.fixture
def service(repo):
    return AssignmentAnalyticsService(repo)


@pytest.fixture
async def classroom(repo, seed_assignment):
    """student-1 scores 0.5; student-2 scored 1.0 then reopened; student-3 sent text."""
    workflow = DiagnosisWorkflow(repo)
    await workflow.save_learner_map("student-1", "as-1", [], HALF_RIGHT)
    s1 = await workflow.submit("student-1", "as-1")
    await workflow.save_learner_map("student-2", "as-1", [], ALL_RIGHT)
    await workflow.submit("student-2", "as-1")
    await workflow.start_new_attempt("student-2", "as-1")
    await workflow.submit_control_text("student-3", "as-1", "Plants need light.")
    return {"student-1": s1}


async def test_analytics_rows_use_latest_attempt(service, classroom):
    analytics = await service.get_analytics_for_assignment(TEACHER_ID, "as-1")

    assert [l.user_name for l in analytics.learners] == ["Ana", "Bea", "Caio"]
    ana, bea, caio = analytics.learners
    assert ana.status == "submitted"
    assert ana.score == 0.5
    assert (ana.correct, ana.missing, ana.excessive, ana.total_goal_edges) == (1, 1, 1, 2)
    assert ana.submitted_at is not None
    assert bea.status == "draft"
    assert bea.attempt == 2
    assert bea.score is None
    assert bea.correct == 0
    assert caio.status == "submitted"
    assert caio.score is None


async def test_analytics_summary(service, classroom):
    analytics = await service.get_analytics_for_assignment(TEACHER_ID, "as-1")

    summary = analytics.summary
    assert summary.total_learners == 3
    assert summary.submitted_count == 2
    assert summary.draft_count == 1
    assert summary.avg_score == 0.5
    assert summary.median_score == 0.5
    assert summary.highest_score == 0.5
    assert summary.lowest_score == 0.5
    assert analytics.assignment.total_submissions == 2
    assert analytics.goal_map.title == "Photosynthesis"
    assert len(analytics.goal_map.edges) == 2


async def test_analytics_for_assignment_without_learners(service, seed_assignment):
    analytics = await service.get_analytics_for_assignment(TEACHER_ID, "as-1")

    assert analytics.learners == []
    assert analytics.summary.total_learners == 0
    assert analytics.summary.avg_score is None
    assert analytics.summary.median_score is None


async def test_foreign_and_unknown_assignments_look_the_same(service, seed_assignment):
    with pytest.raises(AssignmentNotFoundError) as foreign:
        await service.get_analytics_for_assignment("teacher-2", "as-1")
    with pytest.raises(AssignmentNotFoundError) as unknown:
        await service.get_analytics_for_assignment(TEACHER_ID, "as-missing")

    assert foreign.value.code == unknown.value.code == "ASSIGNMENT_NOT_FOUND"
    assert foreign.value.http_status == unknown.value.http_status == 404


async def test_analytics_with_deleted_goal_map(service, seed_dangling_assignment):
    with pytest.raises(GoalMapNotFoundError):
        await service.get_analytics_for_assignment(TEACHER_ID, "as-orphan")


async def test_teacher_assignments_list(service, classroom):
    [row] = await service.get_teacher_assignments(TEACHER_ID)

    assert row.id == "as-1"
    assert row.goal_map_title == "Photosynthesis"
    assert row.total_submissions == 2
    assert row.avg_score == pytest.approx(0.75)
    assert await service.get_teacher_assignments("teacher-2") == []


async def test_learner_map_details_classify_edges(service, classroom):
    details = await service.get_learner_map_for_analytics(
        classroom["student-1"].learner_map_id,
    )

    assert details.learner_map.user_name == "Ana"
    assert details.diagnosis.score == 0.5
    assert [(c.id, c.classification.value) for c in details.edge_classifications] == [
        ("l1", "correct"),
        ("l2", "excessive"),
        ("missing-link1-c2", "missing"),
    ]
    missing = details.edge_classifications[-1]
    assert missing.dashed and missing.animated
    assert details.classification_counts == {
        "correct": 1, "missing": 1, "excessive": 1, "neutral": 0,
    }


async def test_learner_map_details_unknown_id(service, seed_assignment):
    with pytest.raises(LearnerMapNotFoundError):
        await service.get_learner_map_for_analytics("lm-missing")


async def test_learner_map_details_scoped_to_assignment_owner(service, classroom):
    lm_id = classroom["student-1"].learner_map_id

    details = await service.get_learner_map_for_analytics(lm_id, TEACHER_ID)
    assert details.learner_map.id == lm_id

    with pytest.raises(LearnerMapNotFoundError):
        await service.get_learner_map_for_analytics(lm_id, "teacher-2")
    assert await service.get_multiple_learner_maps([lm_id], "teacher-2") == []


async def test_multiple_learner_maps_skip_unknown_ids(service, classroom):
    lm_id = classroom["student-1"].learner_map_id

    details = await service.get_multiple_learner_maps([lm_id, "lm-missing"])

    assert [d.learner_map.id for d in details] == [lm_id]
    assert await service.get_multiple_learner_maps([]) == []


async def test_export_csv_has_one_row_per_learner(service, classroom):
    now = datetime(2026, 10, 18, 10, 44, 12, tzinfo=timezone.utc)
    result = await service.export_analytics_data(
        TEACHER_ID, "as-1", ExportFormat.CSV, now=now,
    )

    lines = result.data.strip().split("\n")
    assert lines[0].startswith("UserID,UserName,LearnerMapID,Status")
    assert len(lines) == 4
    assert result.filename == "KB-Analytics-2026-10-18T1044.csv"


async def test_export_json_keeps_analytics_payload(service, classroom):
    result = await service.export_analytics_data(
        TEACHER_ID, "as-1", ExportFormat.JSON,
    )

    parsed = json.loads(result.data)
    assert parsed["assignment"]["id"] == "as-1"
    assert parsed["summary"]["totalLearners"] == 3
    assert len(parsed["learners"]) == 3
    assert parsed["learners"][0]["learnerMapId"]
    assert parsed["exportedAt"].endswith("Z")


async def test_export_uses_configured_prefix(repo, classroom):
    service = AssignmentAnalyticsService(repo, filename_prefix="Class-7")
    result = await service.export_analytics_data(
        TEACHER_ID, "as-1", ExportFormat.JSON,
    )
    assert result.filename.startswith("Class-7-")
    assert result.filename.endswith(".json")
