# path_sim/domain/graph.py
from __future__ import annotations

import math
from collections.abc import Iterable, Iterator, Mapping

from path_sim.domain.entities.geography import BoundingBox, Edge, Node, NodeId, NodeRef
from path_sim.domain.errors import GraphIntegrityError
from path_sim.domain.mechanics.geo import haversine_m

NodeLike = Node | NodeRef | tuple[NodeId, float, float]
EdgeLike = Edge | tuple


def _to_node(n: NodeLike) -> Node:
    if isinstance(n, Node):
        return n
    if isinstance(n, NodeRef):
        return Node(n.id, n.lat, n.lon)
    nid, lat, lon = n
    return Node(nid, float(lat), float(lon))


def _to_edge(e: EdgeLike) -> Edge:
    if isinstance(e, Edge):
        return e
    # (u, v, w) or (u, v, w, bidirectional)
    return Edge(e[0], e[1], float(e[2]), bool(e[3]) if len(e) > 3 else True)


class Graph:
    """
    Immutable road graph: node id -> Node, with outgoing edges attached to each node.
    Build through load_graph(); the constructor trusts its input.
    """

    def __init__(self, nodes: Mapping[NodeId, Node], edges: list[Edge]):
        self._nodes = dict(nodes)
        self._edges = edges

    # ---------------- lookup ----------------

    def get_node(self, node_id: NodeId) -> Node | None:
        return self._nodes.get(node_id)

    def __getitem__(self, node_id: NodeId) -> Node:
        return self._nodes[node_id]

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._nodes

    def __iter__(self) -> Iterator[NodeId]:
        return iter(self._nodes)

    def __len__(self) -> int:
        return len(self._nodes)

    def nodes(self) -> Iterable[Node]:
        return self._nodes.values()

    @property
    def edges(self) -> list[Edge]:
        return list(self._edges)

    def neighbors(self, node_id: NodeId) -> Iterator[tuple[NodeId, float]]:
        """Yield (neighbor_id, weight) in edge insertion order."""
        for e in self._nodes[node_id].edges:
            yield e.other(node_id), e.weight

    def edge_weight(self, u: NodeId, v: NodeId) -> float | None:
        best = None
        for w_id, w in self.neighbors(u):
            if w_id == v and (best is None or w < best):
                best = w
        return best

    # ---------------- derived graphs ----------------

    def crop(self, bbox: BoundingBox) -> Graph:
        keep = [n for n in self._nodes.values() if bbox.contains(n.lat, n.lon)]
        ids = {n.id for n in keep}
        edges = [e for e in self._edges if e.source in ids and e.target in ids]
        return load_graph(keep, edges)

    @classmethod
    def from_networkx(cls, G, *, weight: str = "length", weight_scale: float = 1.0) -> Graph:
        """
        Convert an OSMnx-style networkx graph (node attrs 'y'/'x', edge attr 'length').
        Parallel edges collapse to the shortest one; missing lengths fall back to haversine.
        """
        nodes = [(nid, float(d["y"]), float(d["x"])) for nid, d in G.nodes(data=True)]
        pos = {nid: (lat, lon) for nid, lat, lon in nodes}
        directed = G.is_directed()
        best: dict[tuple, float] = {}
        for u, v, data in G.edges(data=True):
            L = data.get(weight)
            if L is None:
                L = haversine_m(*pos[u], *pos[v])
            key = (u, v)
            if not directed and (v, u) in best:
                key = (v, u)
            if key not in best or L < best[key]:
                best[key] = float(L)
        edges = [
            Edge(u, v, L * weight_scale, bidirectional=not directed) for (u, v), L in best.items()
        ]
        return load_graph(nodes, edges)


def load_graph(nodes: Iterable[NodeLike], edges: Iterable[EdgeLike]) -> Graph:
    """
    Validate and assemble a Graph.
    Raises GraphIntegrityError on duplicate node ids, dangling edge endpoints,
    or weights that are negative or not finite.
    """
    by_id: dict[NodeId, Node] = {}
    for raw in nodes:
        n = _to_node(raw)
        if n.id in by_id:
            raise GraphIntegrityError(f"duplicate node id {n.id!r}", node_id=n.id)
        by_id[n.id] = n

    adj: dict[NodeId, list[Edge]] = {nid: [] for nid in by_id}
    edge_list: list[Edge] = []
    for raw in edges:
        e = _to_edge(raw)
        for end in (e.source, e.target):
            if end not in by_id:
                raise GraphIntegrityError(
                    f"edge {e.source!r}->{e.target!r} references missing node {end!r}",
                    source=e.source,
                    target=e.target,
                    missing=end,
                )
        if not math.isfinite(e.weight) or e.weight < 0:
            raise GraphIntegrityError(
                f"edge {e.source!r}->{e.target!r} has invalid weight {e.weight!r}",
                source=e.source,
                target=e.target,
            )
        adj[e.source].append(e)
        if e.bidirectional and e.target != e.source:
            adj[e.target].append(e)
        edge_list.append(e)

    final = {nid: Node(n.id, n.lat, n.lon, tuple(adj[nid])) for nid, n in by_id.items()}
    return Graph(final, edge_list)
