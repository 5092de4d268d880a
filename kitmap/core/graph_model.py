"""Graph Model: immutable value types for concept-map nodes and edges.

Invariants:
    - Node identity is Node.id
    - Edge identity for comparison is Edge.key == (source, target), never Edge.id
    - Several edges may share one key; they are duplicates of one logical relation
    - All types are frozen dataclasses with no behavior beyond (de)serialization

Design Decisions:
    - Stored graphs use the React Flow dict shape ("type" holds the kind);
      from_dict tolerates missing position/data so legacy rows still load
"""

from dataclasses import dataclass, field
from typing import Any, Iterable

from kitmap.core.domain_types import EdgeKey, GoalMapDirection, GoalMapId, NodeId


@dataclass(frozen=True)
class Position:
    x: float = 0.0
    y: float = 0.0


@dataclass(frozen=True)
class Node:
    """A concept or link node. data is opaque to the engine."""
    id: NodeId
    position: Position = field(default_factory=Position)
    kind: str | None = None
    data: Any = None

    @classmethod
    def from_dict(cls, raw: dict) -> "Node":
        pos = raw.get("position") or {}
        return cls(
            id=NodeId(str(raw["id"])),
            position=Position(x=pos.get("x", 0.0), y=pos.get("y", 0.0)),
            kind=raw.get("type"),
            data=raw.get("data"),
        )

    def to_dict(self) -> dict:
        out: dict = {
            "id": self.id,
            "position": {"x": self.position.x, "y": self.position.y},
            "data": self.data,
        }
        if self.kind is not None:
            out["type"] = self.kind
        return out


@dataclass(frozen=True)
class Edge:
    """A directed relation between two nodes."""
    id: str
    source: NodeId
    target: NodeId
    kind: str | None = None

    @property
    def key(self) -> EdgeKey:
        return (self.source, self.target)

    @classmethod
    def from_dict(cls, raw: dict) -> "Edge":
        return cls(
            id=str(raw.get("id", "")),
            source=NodeId(str(raw["source"])),
            target=NodeId(str(raw["target"])),
            kind=raw.get("type"),
        )

    def to_dict(self) -> dict:
        out = {"id": self.id, "source": self.source, "target": self.target}
        if self.kind is not None:
            out["type"] = self.kind
        return out


@dataclass(frozen=True)
class EdgeRef:
    """Diagnosis entry: one relation plus the id of the edge that carried it."""
    source: NodeId
    target: NodeId
    edge_id: str | None = None

    @property
    def key(self) -> EdgeKey:
        return (self.source, self.target)

    @classmethod
    def of(cls, edge: Edge) -> "EdgeRef":
        return cls(source=edge.source, target=edge.target, edge_id=edge.id)

    @classmethod
    def from_dict(cls, raw: dict) -> "EdgeRef":
        return cls(
            source=NodeId(str(raw["source"])),
            target=NodeId(str(raw["target"])),
            edge_id=raw.get("edgeId"),
        )

    def to_dict(self) -> dict:
        out = {"source": self.source, "target": self.target}
        if self.edge_id is not None:
            out["edgeId"] = self.edge_id
        return out


@dataclass(frozen=True)
class GoalMap:
    """Teacher-authored reference graph. Read-only to the engine."""
    id: GoalMapId
    title: str
    nodes: tuple[Node, ...] = ()
    edges: tuple[Edge, ...] = ()
    direction: GoalMapDirection = GoalMapDirection.BI


def parse_nodes(raw: Iterable[dict] | None) -> tuple[Node, ...]:
    """Parse a stored node array. None (e.g. control-text rows) yields ()."""
    if not raw:
        return ()
    return tuple(Node.from_dict(n) for n in raw)


def parse_edges(raw: Iterable[dict] | None) -> tuple[Edge, ...]:
    """Parse a stored edge array. None yields ()."""
    if not raw:
        return ()
    return tuple(Edge.from_dict(e) for e in raw)


def edge_keys(edges: Iterable[Edge | EdgeRef]) -> set[EdgeKey]:
    return {e.key for e in edges}
