"""Graph Schemas: Pydantic models for concept-map nodes and edges at the API boundary.

Invariants:
    - Shape matches React Flow: "type" carries the node/edge kind, position is {x, y}
    - Request bodies are converted to plain dicts before reaching the services
    - Output models are built from core value types, never from ORM rows

Design Decisions:
    - Separate from analytics schemas: graph data is consumed by the map editor and
      viewer, analytics payloads by the teacher dashboard and the exporter
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from kitmap.core.comparator import DiagnosisResult
from kitmap.core.graph_model import Edge, EdgeRef, GoalMap, Node


class CamelModel(BaseModel):
    """camelCase on the wire, snake_case in Python."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PositionIn(BaseModel):
    x: float = 0.0
    y: float = 0.0


class NodeIn(BaseModel):
    """A node as sent by the map editor."""
    id: str = Field(min_length=1)
    type: str | None = None
    position: PositionIn = PositionIn()
    data: Any = None


class EdgeIn(BaseModel):
    """An edge as sent by the map editor. id is informational only."""
    id: str = ""
    source: str = Field(min_length=1)
    target: str = Field(min_length=1)
    type: str | None = None


class NodeOut(BaseModel):
    id: str
    type: str | None = None
    position: PositionIn
    data: Any = None

    @classmethod
    def of(cls, node: Node) -> "NodeOut":
        return cls(
            id=node.id,
            type=node.kind,
            position=PositionIn(x=node.position.x, y=node.position.y),
            data=node.data,
        )


class EdgeOut(BaseModel):
    id: str
    source: str
    target: str
    type: str | None = None

    @classmethod
    def of(cls, edge: Edge) -> "EdgeOut":
        return cls(
            id=edge.id, source=edge.source, target=edge.target, type=edge.kind,
        )


class GoalMapOut(CamelModel):
    id: str
    title: str
    nodes: list[NodeOut] = []
    edges: list[EdgeOut] = []
    direction: str

    @classmethod
    def of(cls, goal_map: GoalMap) -> "GoalMapOut":
        return cls(
            id=goal_map.id,
            title=goal_map.title,
            nodes=[NodeOut.of(n) for n in goal_map.nodes],
            edges=[EdgeOut.of(e) for e in goal_map.edges],
            direction=goal_map.direction.value,
        )


class EdgeRefOut(CamelModel):
    source: str
    target: str
    edge_id: str | None = None

    @classmethod
    def of(cls, ref: EdgeRef) -> "EdgeRefOut":
        return cls(source=ref.source, target=ref.target, edge_id=ref.edge_id)


class DiagnosisOut(CamelModel):
    """Per-link comparison result with its score."""
    correct: list[EdgeRefOut] = []
    missing: list[EdgeRefOut] = []
    excessive: list[EdgeRefOut] = []
    score: float
    total_goal_edges: int

    @classmethod
    def of(cls, result: DiagnosisResult) -> "DiagnosisOut":
        return cls(
            correct=[EdgeRefOut.of(e) for e in result.correct],
            missing=[EdgeRefOut.of(e) for e in result.missing],
            excessive=[EdgeRefOut.of(e) for e in result.excessive],
            score=result.score,
            total_goal_edges=result.total_goal_edges,
        )
