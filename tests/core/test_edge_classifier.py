"""Tests for classify_edges: per-instance classification with synthesized missing edges."""

from kitmap.core.comparator import compare_maps
from kitmap.core.domain_types import EdgeClass
from kitmap.core.edge_classifier import (
    CorrectEdge,
    ExcessiveEdge,
    MissingEdge,
    NeutralEdge,
    classify_edges,
    summarize_classification,
)
from kitmap.core.graph_model import Edge


def _edge(source, target, edge_id=None):
    return Edge(id=edge_id or f"e-{source}-{target}", source=source, target=target)


def test_every_learner_edge_classified_once_plus_missing():
    goal = [_edge("a", "b"), _edge("b", "c"), _edge("c", "d")]
    learner = [_edge("a", "b"), _edge("x", "y"), _edge("c", "d"), _edge("a", "b")]
    diagnosis = compare_maps(goal, learner)
    out = classify_edges(goal, learner)
    assert len(out) == len(learner) + len(diagnosis.missing)


def test_learner_edges_keep_input_order_then_missing():
    goal = [_edge("c1", "link1"), _edge("link1", "c2")]
    learner = [_edge("x", "c1"), _edge("c1", "link1")]
    out = classify_edges(goal, learner)
    assert [type(c) for c in out] == [ExcessiveEdge, CorrectEdge, MissingEdge]
    assert out[0].edge.id == "e-x-c1"
    assert out[1].edge.id == "e-c1-link1"
    assert (out[2].source, out[2].target) == ("link1", "c2")


def test_duplicate_correct_pair_yields_one_correct_one_excessive():
    goal = [_edge("a", "b")]
    learner = [_edge("a", "b", "first"), _edge("a", "b", "second")]
    out = classify_edges(goal, learner)
    assert [c.classification for c in out] == [EdgeClass.CORRECT, EdgeClass.EXCESSIVE]
    assert out[0].edge.id == "first"
    assert out[1].edge.id == "second"


def test_duplicate_goal_pair_admits_as_many_correct_learner_edges():
    goal = [_edge("a", "b", "g1"), _edge("a", "b", "g2")]
    learner = [_edge("a", "b", "l1"), _edge("a", "b", "l2")]
    diagnosis = compare_maps(goal, learner)

    counts = summarize_classification(classify_edges(goal, learner))

    assert counts["correct"] == len(diagnosis.correct) == 2
    assert counts["excessive"] == len(diagnosis.excessive) == 0


def test_learner_duplicates_beyond_goal_multiplicity_are_excessive():
    goal = [_edge("a", "b", "g1"), _edge("a", "b", "g2")]
    learner = [_edge("a", "b", "l1"), _edge("a", "b", "l2"), _edge("a", "b", "l3")]
    out = classify_edges(goal, learner)
    assert [c.classification for c in out] == [
        EdgeClass.CORRECT, EdgeClass.CORRECT, EdgeClass.EXCESSIVE,
    ]
    assert out[2].edge.id == "l3"


def test_missing_edge_placeholder_id():
    out = classify_edges([_edge("p", "q")], [])
    assert out == [MissingEdge("p", "q")]
    assert out[0].placeholder_id == "missing-p-q"


def test_neutral_only_with_diagnosis_from_other_inputs():
    goal = [_edge("a", "b")]
    foreign = compare_maps([_edge("m", "n")], [_edge("m", "n")])
    out = classify_edges(goal, [_edge("a", "b")], diagnosis=foreign)
    assert out == [NeutralEdge(_edge("a", "b"))]


def test_no_neutral_edges_with_own_diagnosis():
    goal = [_edge("a", "b"), _edge("b", "c")]
    learner = [_edge("a", "b"), _edge("q", "r"), _edge("b", "c"), _edge("q", "r")]
    out = classify_edges(goal, learner)
    assert all(c.classification is not EdgeClass.NEUTRAL for c in out)


def test_summarize_classification_zero_fills():
    out = classify_edges([_edge("a", "b")], [_edge("a", "b"), _edge("a", "b")])
    assert summarize_classification(out) == {
        "correct": 1, "missing": 0, "excessive": 1, "neutral": 0,
    }


def test_summarize_empty():
    assert summarize_classification([]) == {
        "correct": 0, "missing": 0, "excessive": 0, "neutral": 0,
    }
