"""Edge Classifier: per-instance display classification built on compare_maps.

Invariants:
    - Output covers every learner edge once, in input order, followed by one
      MissingEdge per missing goal edge: len(out) == len(learner) + len(missing)
    - Correct goal edges are not emitted separately; the matching learner edge stands for them
    - Multiplicity: a correct pair admits as many CORRECT learner edges as the goal
      map has instances of it; further learner duplicates are EXCESSIVE
    - NEUTRAL only appears when the supplied diagnosis came from other inputs

Design Decisions:
    - Tagged variants (CorrectEdge | ExcessiveEdge | NeutralEdge | MissingEdge) instead
      of forcing missing relations into the Edge shape with rendering hints attached
"""

from collections import Counter
from dataclasses import dataclass
from typing import ClassVar, Sequence, Union

from kitmap.core.comparator import DiagnosisResult, compare_maps
from kitmap.core.domain_types import EdgeClass, EdgeKey
from kitmap.core.graph_model import Edge, edge_keys


@dataclass(frozen=True)
class CorrectEdge:
    classification: ClassVar[EdgeClass] = EdgeClass.CORRECT
    edge: Edge


@dataclass(frozen=True)
class ExcessiveEdge:
    classification: ClassVar[EdgeClass] = EdgeClass.EXCESSIVE
    edge: Edge


@dataclass(frozen=True)
class NeutralEdge:
    classification: ClassVar[EdgeClass] = EdgeClass.NEUTRAL
    edge: Edge


@dataclass(frozen=True)
class MissingEdge:
    """A goal relation absent from the learner map."""
    classification: ClassVar[EdgeClass] = EdgeClass.MISSING
    source: str
    target: str

    @property
    def placeholder_id(self) -> str:
        return f"missing-{self.source}-{self.target}"


ClassifiedEdge = Union[CorrectEdge, ExcessiveEdge, NeutralEdge, MissingEdge]


def _classify_learner_edge(
    edge: Edge,
    correct_budget: Counter[EdgeKey],
    excessive_keys: set[EdgeKey],
) -> ClassifiedEdge:
    key = edge.key
    if key in excessive_keys:
        return ExcessiveEdge(edge)
    if key in correct_budget:
        if correct_budget[key] == 0:
            return ExcessiveEdge(edge)
        correct_budget[key] -= 1
        return CorrectEdge(edge)
    return NeutralEdge(edge)


def classify_edges(
    goal_edges: Sequence[Edge],
    learner_edges: Sequence[Edge],
    diagnosis: DiagnosisResult | None = None,
) -> list[ClassifiedEdge]:
    """Classify learner edges and synthesize missing goal edges."""
    if diagnosis is None:
        diagnosis = compare_maps(goal_edges, learner_edges)

    # one CORRECT learner instance per correct goal instance of the same pair
    correct_budget = Counter(e.key for e in diagnosis.correct)
    excessive_keys = edge_keys(diagnosis.excessive)

    out: list[ClassifiedEdge] = [
        _classify_learner_edge(e, correct_budget, excessive_keys)
        for e in learner_edges
    ]
    out.extend(MissingEdge(m.source, m.target) for m in diagnosis.missing)
    return out


def summarize_classification(classified: Sequence[ClassifiedEdge]) -> dict[str, int]:
    """Count classified edges per class; every class present, zero-filled."""
    counts = Counter(c.classification for c in classified)
    return {cls.value: counts.get(cls, 0) for cls in EdgeClass}
