"""Peer Statistics: one student's standing among same-assignment classmates.

Invariants:
    - Input is the scores of submitted learner maps only; the caller filters drafts
    - The user's own submissions never count as peers
    - No peer scores: count == 0 and every statistic is None
    - Statistics rounded half-up to 2 decimals, percentile to 1 decimal
    - user_percentile = 100 * |peer scores strictly below the user's best| / |peer scores|

Design Decisions:
    - A user without any scored submission is ranked with a best score of 0.0
      (kept as-is, see DESIGN.md open questions)
"""

from dataclasses import dataclass
from typing import Iterable

from kitmap.core.domain_types import (
    PERCENTILE_DECIMALS, SCORE_DECIMALS, UserId, round_half_up,
)
from kitmap.core.entities import SubmittedScore
from kitmap.core.score_stats import summarize_scores


@dataclass(frozen=True)
class PeerStats:
    count: int
    avg_score: float | None
    median_score: float | None
    highest_score: float | None
    lowest_score: float | None
    user_percentile: float | None


EMPTY_PEER_STATS = PeerStats(
    count=0, avg_score=None, median_score=None,
    highest_score=None, lowest_score=None, user_percentile=None,
)


def user_best_score(own: Iterable[SubmittedScore]) -> float:
    """Best score across the user's attempts; unscored or absent counts as 0.0."""
    return max((s.score or 0.0 for s in own), default=0.0)


def percentile_rank(best: float, peer_scores: list[float]) -> float:
    below = sum(1 for s in peer_scores if s < best)
    return round_half_up(below / len(peer_scores) * 100, PERCENTILE_DECIMALS)


def compute_peer_stats(
    user_id: UserId, submitted: Iterable[SubmittedScore],
) -> PeerStats:
    own: list[SubmittedScore] = []
    peer_scores: list[float] = []
    for entry in submitted:
        if entry.user_id == user_id:
            own.append(entry)
        elif entry.score is not None:
            peer_scores.append(entry.score)

    if not peer_scores:
        return EMPTY_PEER_STATS

    stats = summarize_scores(peer_scores).rounded(SCORE_DECIMALS)
    return PeerStats(
        count=stats.count,
        avg_score=stats.avg,
        median_score=stats.median,
        highest_score=stats.highest,
        lowest_score=stats.lowest,
        user_percentile=percentile_rank(user_best_score(own), peer_scores),
    )
