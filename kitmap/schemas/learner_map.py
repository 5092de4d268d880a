"""Learner Map Schemas: request and response bodies for the student-facing routes.

Invariants:
    - ControlTextSubmit.text: 1-10000 chars, stripped, non-empty
    - Responses expose camelCase keys (learnerMapId, diagnosisId, ...)
"""

from datetime import datetime

from pydantic import Field, field_validator

from kitmap.core.entities import LearnerMap
from kitmap.core.peer_stats import PeerStats
from kitmap.schemas.graph import (
    CamelModel, DiagnosisOut, EdgeIn, EdgeOut, NodeIn, NodeOut,
)


class LearnerMapSave(CamelModel):
    nodes: list[NodeIn] = []
    edges: list[EdgeIn] = []

    def graph_dicts(self) -> tuple[list[dict], list[dict]]:
        """Nodes and edges in the stored React Flow dict shape."""
        return (
            [n.model_dump(exclude_none=True) for n in self.nodes],
            [e.model_dump(exclude_none=True) for e in self.edges],
        )


class ControlTextSubmit(CamelModel):
    text: str = Field(min_length=1, max_length=10_000)

    @field_validator("text")
    @classmethod
    def strip_text(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("text cannot be empty or whitespace")
        return v


class LearnerMapSaved(CamelModel):
    learner_map_id: str


class SubmitResponse(CamelModel):
    diagnosis_id: str
    learner_map_id: str
    attempt: int
    diagnosis: DiagnosisOut


class NewAttemptResponse(CamelModel):
    attempt: int


class LearnerMapOut(CamelModel):
    id: str
    user_id: str
    user_name: str | None = None
    status: str
    attempt: int
    submitted_at: datetime | None = None
    control_text: str | None = None
    nodes: list[NodeOut] = []
    edges: list[EdgeOut] = []

    @classmethod
    def of(
        cls, learner_map: LearnerMap, user_name: str | None = None,
    ) -> "LearnerMapOut":
        return cls(
            id=learner_map.id,
            user_id=learner_map.user_id,
            user_name=user_name,
            status=learner_map.status.value,
            attempt=learner_map.attempt,
            submitted_at=learner_map.submitted_at,
            control_text=learner_map.control_text,
            nodes=[NodeOut.of(n) for n in learner_map.nodes],
            edges=[EdgeOut.of(e) for e in learner_map.edges],
        )


class DiagnosisViewOut(CamelModel):
    """Student's own latest diagnosis with the goal edges it was scored against."""
    learner_map: LearnerMapOut
    goal_edges: list[EdgeOut] = []
    diagnosis_id: str | None = None
    diagnosis: DiagnosisOut | None = None


class PeerStatsOut(CamelModel):
    count: int
    avg_score: float | None = None
    median_score: float | None = None
    highest_score: float | None = None
    lowest_score: float | None = None
    user_percentile: float | None = None

    @classmethod
    def of(cls, stats: PeerStats) -> "PeerStatsOut":
        return cls(
            count=stats.count,
            avg_score=stats.avg_score,
            median_score=stats.median_score,
            highest_score=stats.highest_score,
            lowest_score=stats.lowest_score,
            user_percentile=stats.user_percentile,
        )
