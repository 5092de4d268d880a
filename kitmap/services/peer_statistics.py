"""Peer Statistics Service: a student's standing among classmates on one assignment.

Invariants:
    - Only diagnoses of submitted (or graded) learner maps are considered
    - Never raises for an assignment without submissions; returns EMPTY_PEER_STATS
"""

import logging

from kitmap.core.domain_types import AssignmentId, UserId
from kitmap.core.peer_stats import PeerStats, compute_peer_stats
from kitmap.core.repository_protocols import KitMapRepository

logger = logging.getLogger(__name__)


async def get_peer_stats(
    repo: KitMapRepository, user_id: UserId, assignment_id: AssignmentId,
) -> PeerStats:
    submitted = await repo.read_submitted_scores(assignment_id)
    stats = compute_peer_stats(user_id, submitted)
    logger.debug(
        f"Peer stats over {stats.count} peer scores",
        extra={"assignment_id": assignment_id, "user_id": user_id},
    )
    return stats
