# tests/services/test_adapters.py
import sys
import types

import pytest

from path_sim.domain.entities.geography import BoundingBox
from path_sim.domain.errors import GraphFetchError
from path_sim.domain.graph import load_graph
from path_sim.services.local import GraphNearestResolver
from path_sim.services.osm import OsmnxGraphFetcher, OsmnxNearestResolver


def test_graph_resolver_picks_closest_node():
    g = load_graph([("a", 50.0, 14.0), ("b", 50.01, 14.0), ("c", 50.0, 14.01)], [])
    r = GraphNearestResolver(g)
    ref = r.resolve_nearest(50.008, 14.001)
    assert (ref.id, ref.lat, ref.lon) == ("b", 50.01, 14.0)
    assert r.resolve_nearest(49.0, 14.02).id == "c"


def test_graph_resolver_needs_nodes():
    with pytest.raises(GraphFetchError):
        GraphNearestResolver(load_graph([], []))


@pytest.fixture
def fake_osmnx(monkeypatch):
    nx = pytest.importorskip("networkx")
    calls = {}

    def graph_from_bbox(bbox, network_type):
        calls["bbox"] = (bbox, network_type)
        G = nx.MultiDiGraph()
        G.add_node(10, y=50.0, x=14.0)
        G.add_node(11, y=50.001, x=14.0)
        G.add_edge(10, 11, length=111.0)
        G.add_edge(11, 10, length=111.0)
        return G

    def graph_from_point(center, dist, network_type):
        calls["point"] = (center, dist, network_type)
        if center == (0.0, 0.0):
            raise ValueError("Found no graph nodes within the requested polygon")
        return graph_from_bbox(None, network_type)

    def nearest_nodes(G, X, Y):
        # unprojected graphs need scikit-learn here, which is not installed
        raise ImportError("scikit-learn must be installed to search an unprojected graph")

    mod = types.ModuleType("osmnx")
    mod.graph_from_bbox = graph_from_bbox
    mod.graph_from_point = graph_from_point
    mod.distance = types.SimpleNamespace(nearest_nodes=nearest_nodes)
    monkeypatch.setitem(sys.modules, "osmnx", mod)
    return calls


def test_osm_fetcher_converts_download(fake_osmnx):
    box = BoundingBox(south=49.99, west=13.99, north=50.01, east=14.01)
    g = OsmnxGraphFetcher(network_type="walk", weight_scale=0.5).fetch_graph(box, 10)
    assert fake_osmnx["bbox"] == ((13.99, 49.99, 14.01, 50.01), "walk")
    assert g.edge_weight(10, 11) == 55.5
    with pytest.raises(GraphFetchError):
        OsmnxGraphFetcher().fetch_graph(box, 999)


def test_osm_resolver(fake_osmnx):
    r = OsmnxNearestResolver(search_m=300.0)
    ref = r.resolve_nearest(50.0009, 14.0)
    assert (ref.id, ref.lat, ref.lon) == (11, 50.001, 14.0)
    assert fake_osmnx["point"] == ((50.0009, 14.0), 300.0, "drive")
    assert r.resolve_nearest(50.0001, 14.0001).id == 10
    with pytest.raises(GraphFetchError) as ei:
        r.resolve_nearest(0.0, 0.0)
    assert isinstance(ei.value.__cause__, ValueError)
