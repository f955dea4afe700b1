# path_sim/app/session.py
from path_sim.app.protocols import GraphFetcher, NearestNodeResolver
from path_sim.domain.entities.geography import BoundingBox, Node, NodeId, NodeRef
from path_sim.domain.errors import InvalidStateError, OutOfBoundsError
from path_sim.domain.graph import Graph
from path_sim.domain.mechanics.geo import bbox_from_polygon, create_circle, within_radius
from path_sim.search.engine import SearchEngine, SearchOutcome, StepRecord
from path_sim.search.trace import PathTracer, reconstruct


def _node_id(n: Node | NodeRef | NodeId) -> NodeId:
    return n.id if isinstance(n, (Node, NodeRef)) else n


class PathfindingSession:
    """
    Binds a loaded graph, the start/end selection and one SearchEngine.

    reset() only clears search state; selections and the graph are kept.
    clear_selection() is the "new start point" reset.
    """

    def __init__(
        self,
        engine: SearchEngine | None = None,
        *,
        resolver: NearestNodeResolver | None = None,
        fetcher: GraphFetcher | None = None,
        radius_km: float = 2.0,
        circle_points: int = 64,
    ):
        self.engine = engine or SearchEngine()
        self.resolver, self.fetcher = resolver, fetcher
        self.radius_km, self.circle_points = radius_km, circle_points
        self.graph: Graph | None = None
        self.start_node: Node | None = None
        self.end_node: Node | None = None
        self.selection_center: NodeRef | None = None
        self.selection_circle: list[tuple[float, float]] = []

    # ---------------- state ----------------

    @property
    def finished(self) -> bool:
        return self.engine.finished

    @property
    def outcome(self) -> SearchOutcome | None:
        return self.engine.outcome

    @property
    def started(self) -> bool:
        return self.engine.graph is not None

    @property
    def selection_bbox(self) -> BoundingBox | None:
        return bbox_from_polygon(self.selection_circle) if self.selection_circle else None

    def get_node(self, node_id: NodeId) -> Node | None:
        return self.graph.get_node(node_id) if self.graph is not None else None

    # ---------------- selection ----------------

    def set_graph(self, graph: Graph) -> None:
        self.graph = graph
        self.engine.reset()
        # rebind to the new graph's nodes; selections it lacks are dropped
        if self.start_node is not None:
            self.start_node = graph.get_node(self.start_node.id)
        if self.end_node is not None:
            self.end_node = graph.get_node(self.end_node.id)

    def _lookup(self, node: Node | NodeRef | NodeId) -> Node:
        nid = _node_id(node)
        real = self.get_node(nid)
        if real is None:
            raise OutOfBoundsError(nid)
        return real

    def set_start_node(self, node: Node | NodeRef | NodeId) -> None:
        self.start_node = self._lookup(node)

    def set_end_node(self, node: Node | NodeRef | NodeId) -> None:
        self.end_node = self._lookup(node)

    def clear_selection(self) -> None:
        self.reset()
        self.start_node = None
        self.end_node = None

    def select_start(self, lat: float, lon: float) -> Node:
        """Resolve the nearest node, fetch the graph around it and make it the start."""
        if self.resolver is None or self.fetcher is None:
            raise InvalidStateError("select_start needs a resolver and a graph fetcher")
        ref = self.resolver.resolve_nearest(lat, lon)
        circle = create_circle(ref.lat, ref.lon, self.radius_km, self.circle_points)
        # a failed fetch leaves the previous graph and selection in place
        graph = self.fetcher.fetch_graph(bbox_from_polygon(circle), ref.id)
        self.clear_selection()
        self.selection_center, self.selection_circle = ref, circle
        self.set_graph(graph)
        self.set_start_node(ref)
        return self.start_node

    def select_end(self, lat: float, lon: float) -> Node:
        if self.resolver is None:
            raise InvalidStateError("select_end needs a resolver")
        if self.graph is None or self.selection_center is None:
            raise InvalidStateError("pick a start point before the end point")
        c = self.selection_center
        if not within_radius(c.lat, c.lon, self.radius_km, lat, lon):
            raise OutOfBoundsError(None, "pick a point inside the selection radius")
        ref = self.resolver.resolve_nearest(lat, lon)
        self.set_end_node(ref)
        self.reset()
        return self.end_node

    # ---------------- search ----------------

    def start(self) -> None:
        if self.graph is None:
            raise InvalidStateError("no graph loaded")
        if self.start_node is None or self.end_node is None:
            raise InvalidStateError(
                "start and end nodes must both be selected",
                start=self.start_node is not None,
                end=self.end_node is not None,
            )
        self.engine.start(self.graph, self.start_node, self.end_node)

    def next_step(self) -> list[StepRecord]:
        return self.engine.next_step()

    def reset(self) -> None:
        self.engine.reset()

    def route(self) -> list[Node]:
        return reconstruct(self.engine, self.end_node)

    def tracer(self) -> PathTracer:
        return PathTracer(self.engine, self.end_node)
