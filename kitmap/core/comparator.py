"""Map Comparator: diffs a goal edge set against a learner edge set.

Invariants:
    - Membership is decided on Edge.key (source, target), never on Edge.id
    - correct + missing partition the goal edges: len(correct) + len(missing) == total_goal_edges
    - Output lists keep each input's original relative order (filtered, never re-sorted)
    - Empty goal map scores 1.0 regardless of the learner edges
    - Pure: identical inputs give identical results, no hidden state
"""

from dataclasses import dataclass
from typing import Sequence

from kitmap.core.domain_types import SCORE_DECIMALS, Score, round_half_up
from kitmap.core.graph_model import Edge, EdgeRef, edge_keys


@dataclass(frozen=True)
class DiagnosisResult:
    """Outcome of comparing one learner map with its goal map."""
    correct: tuple[EdgeRef, ...]
    missing: tuple[EdgeRef, ...]
    excessive: tuple[EdgeRef, ...]
    score: Score
    total_goal_edges: int

    def to_dict(self) -> dict:
        """Persisted per-link shape (diagnoses.per_link JSON column)."""
        return {
            "correct": [e.to_dict() for e in self.correct],
            "missing": [e.to_dict() for e in self.missing],
            "excessive": [e.to_dict() for e in self.excessive],
            "score": self.score,
            "totalGoalEdges": self.total_goal_edges,
        }

    @classmethod
    def from_dict(cls, raw: dict, score: float | None = None) -> "DiagnosisResult":
        """Rebuild from per_link JSON. Missing lists default to empty."""
        correct = tuple(EdgeRef.from_dict(e) for e in raw.get("correct") or ())
        missing = tuple(EdgeRef.from_dict(e) for e in raw.get("missing") or ())
        return cls(
            correct=correct,
            missing=missing,
            excessive=tuple(
                EdgeRef.from_dict(e) for e in raw.get("excessive") or ()
            ),
            score=Score(score if score is not None else raw.get("score", 0.0)),
            total_goal_edges=raw.get(
                "totalGoalEdges", len(correct) + len(missing),
            ),
        )

    @property
    def summary_line(self) -> str:
        return (
            f"Correct: {len(self.correct)}, Missing: {len(self.missing)}, "
            f"Excessive: {len(self.excessive)}"
        )


def compute_score(correct_count: int, total_goal_edges: int) -> Score:
    """correct / total rounded half-up to 2 decimals; 1.0 for an empty goal map."""
    if total_goal_edges <= 0:
        return Score(1.0)
    return Score(round_half_up(correct_count / total_goal_edges, SCORE_DECIMALS))


def compare_maps(
    goal_edges: Sequence[Edge], learner_edges: Sequence[Edge],
) -> DiagnosisResult:
    """Classify every goal edge as correct/missing and every learner edge as excessive or not."""
    goal_set = edge_keys(goal_edges)
    learner_set = edge_keys(learner_edges)

    correct = tuple(EdgeRef.of(e) for e in goal_edges if e.key in learner_set)
    missing = tuple(EdgeRef.of(e) for e in goal_edges if e.key not in learner_set)
    excessive = tuple(
        EdgeRef.of(e) for e in learner_edges if e.key not in goal_set
    )

    return DiagnosisResult(
        correct=correct,
        missing=missing,
        excessive=excessive,
        score=compute_score(len(correct), len(goal_edges)),
        total_goal_edges=len(goal_edges),
    )
