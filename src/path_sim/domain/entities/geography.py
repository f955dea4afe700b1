from collections.abc import Hashable
from dataclasses import dataclass, field

NodeId = Hashable


# Core geometry types used by the graph model
@dataclass(frozen=True)
class NodeRef:
    """Identity and position of a node as reported by a resolver."""

    id: NodeId
    lat: float
    lon: float


@dataclass(frozen=True)
class Edge:
    source: NodeId
    target: NodeId
    weight: float  # metres, possibly scaled
    bidirectional: bool = True

    def other(self, node_id: NodeId) -> NodeId:
        return self.target if node_id == self.source else self.source


@dataclass(frozen=True)
class Node:
    id: NodeId
    lat: float
    lon: float
    edges: tuple[Edge, ...] = field(default=(), compare=False, repr=False)

    @property
    def latitude(self) -> float:
        return self.lat

    @property
    def longitude(self) -> float:
        return self.lon

    def ref(self) -> NodeRef:
        return NodeRef(self.id, self.lat, self.lon)


@dataclass(frozen=True)
class BoundingBox:
    south: float
    west: float
    north: float
    east: float

    def contains(self, lat: float, lon: float) -> bool:
        return self.south <= lat <= self.north and self.west <= lon <= self.east

    def as_ltrb(self) -> tuple[float, float, float, float]:
        """(left, bottom, right, top), the order osmnx expects."""
        return self.west, self.south, self.east, self.north
