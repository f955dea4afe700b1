# path_sim/services/osm.py
from path_sim.domain.entities.geography import BoundingBox, NodeId, NodeRef
from path_sim.domain.errors import GraphFetchError
from path_sim.domain.graph import Graph
from path_sim.services.local import GraphNearestResolver


class OsmnxGraphFetcher:
    """Downloads the OpenStreetMap road network inside a bounding box through osmnx."""

    def __init__(self, network_type: str = "drive", weight_scale: float = 1.0):
        self.network_type, self.weight_scale = network_type, weight_scale

    def fetch_graph(self, bbox: BoundingBox, hint_node_id: NodeId) -> Graph:
        import osmnx as ox

        try:
            G = ox.graph_from_bbox(bbox.as_ltrb(), network_type=self.network_type)
        except Exception as exc:
            raise GraphFetchError(f"graph download failed: {exc}", bbox=bbox) from exc
        graph = Graph.from_networkx(G, weight="length", weight_scale=self.weight_scale)
        if hint_node_id not in graph:
            raise GraphFetchError(
                f"hint node {hint_node_id!r} missing from downloaded graph",
                hint_node_id=hint_node_id,
            )
        return graph


class OsmnxNearestResolver:
    """Nearest OSM road node to a coordinate, searched within search_m metres."""

    def __init__(self, network_type: str = "drive", search_m: float = 500.0):
        self.network_type, self.search_m = network_type, search_m

    def resolve_nearest(self, lat: float, lon: float) -> NodeRef:
        import osmnx as ox

        try:
            G = ox.graph_from_point((lat, lon), dist=self.search_m, network_type=self.network_type)
        except Exception as exc:
            raise GraphFetchError(f"nearest node lookup failed: {exc}", lat=lat, lon=lon) from exc
        # great-circle argmin over the unprojected download
        return GraphNearestResolver(Graph.from_networkx(G)).resolve_nearest(lat, lon)
