# path_sim/services/local.py
import numpy as np

from path_sim.domain.entities.geography import BoundingBox, NodeId, NodeRef
from path_sim.domain.errors import GraphFetchError
from path_sim.domain.graph import Graph
from path_sim.domain.mechanics.geo import haversine_many_m


class GraphNearestResolver:
    """Nearest node by great-circle distance over an in-memory graph."""

    def __init__(self, graph: Graph):
        if len(graph) == 0:
            raise GraphFetchError("cannot resolve against an empty graph")
        nodes = list(graph.nodes())
        self._ids: list[NodeId] = [n.id for n in nodes]
        self._lats = np.array([n.lat for n in nodes], dtype=float)
        self._lons = np.array([n.lon for n in nodes], dtype=float)

    def resolve_nearest(self, lat: float, lon: float) -> NodeRef:
        i = int(np.argmin(haversine_many_m(self._lats, self._lons, lat, lon)))
        return NodeRef(self._ids[i], float(self._lats[i]), float(self._lons[i]))


class LocalGraphFetcher:
    """Serves crops of a preloaded graph, standing in for the network service."""

    def __init__(self, graph: Graph):
        self.graph = graph

    def fetch_graph(self, bbox: BoundingBox, hint_node_id: NodeId) -> Graph:
        sub = self.graph.crop(bbox)
        if hint_node_id not in sub:
            raise GraphFetchError(
                f"hint node {hint_node_id!r} is outside the requested area",
                hint_node_id=hint_node_id,
            )
        return sub
