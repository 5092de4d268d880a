"""Peer Statistics Service: standing among classmates read from submitted diagnoses."""

from kitmap.core.peer_stats import EMPTY_PEER_STATS
from kitmap.services.diagnosis_workflow import DiagnosisWorkflow
from kitmap.services.peer_statistics import get_peer_stats

HALF_RIGHT = [
    {"id": "l1", "source": "c1", "target": "link1"},
    {"id": "l2", "source": "x", "target": "c1"},
]
ALL_RIGHT = [
    {"id": "l1", "source": "c1", "target": "link1"},
    {"id": "l2", "source": "link1", "target": "c2"},
]


async def _submit(workflow, user_id, edges):
    await workflow.save_learner_map(user_id, "as-1", [], edges)
    await workflow.submit(user_id, "as-1")


async def test_user_above_single_peer(repo, seed_assignment):
    workflow = DiagnosisWorkflow(repo)
    await _submit(workflow, "student-1", ALL_RIGHT)
    await _submit(workflow, "student-2", HALF_RIGHT)

    stats = await get_peer_stats(repo, "student-1", "as-1")

    assert stats.count == 1
    assert stats.avg_score == 0.5
    assert stats.user_percentile == 100.0


async def test_drafts_are_not_peers(repo, seed_assignment):
    workflow = DiagnosisWorkflow(repo)
    await _submit(workflow, "student-1", ALL_RIGHT)
    await workflow.save_learner_map("student-2", "as-1", [], HALF_RIGHT)

    assert await get_peer_stats(repo, "student-1", "as-1") == EMPTY_PEER_STATS


async def test_best_attempt_counts_for_the_user(repo, seed_assignment):
    workflow = DiagnosisWorkflow(repo)
    await _submit(workflow, "student-1", HALF_RIGHT)
    await workflow.start_new_attempt("student-1", "as-1")
    await workflow.save_learner_map("student-1", "as-1", [], ALL_RIGHT)
    await workflow.submit("student-1", "as-1")
    await _submit(workflow, "student-2", HALF_RIGHT)

    stats = await get_peer_stats(repo, "student-1", "as-1")

    assert stats.count == 1
    assert stats.user_percentile == 100.0


async def test_user_without_submission_still_gets_peer_stats(repo, seed_assignment):
    workflow = DiagnosisWorkflow(repo)
    await _submit(workflow, "student-2", HALF_RIGHT)

    stats = await get_peer_stats(repo, "student-1", "as-1")

    assert stats.count == 1
    assert stats.median_score == 0.5
    assert stats.user_percentile == 0.0


async def test_assignment_without_submissions(repo, seed_assignment):
    assert await get_peer_stats(repo, "student-1", "as-1") == EMPTY_PEER_STATS
