# runtime/registries.py
from collections.abc import Callable

from path_sim.app.protocols import GraphFetcher, NearestNodeResolver
from path_sim.config.models import (
    GraphSourceInlineModel,
    GraphSourceOsmModel,
    GraphSourceUnion,
)
from path_sim.domain.entities.geography import Edge
from path_sim.domain.graph import Graph, load_graph
from path_sim.domain.mechanics.geo import haversine_m
from path_sim.services.local import GraphNearestResolver, LocalGraphFetcher
from path_sim.services.osm import OsmnxGraphFetcher, OsmnxNearestResolver

Collaborators = tuple[GraphFetcher, NearestNodeResolver]
SourceFactory = Callable[[GraphSourceUnion], Collaborators]

_source_registry: dict[str, SourceFactory] = {}


# ------------------- Graph source registry ---------------------------


def register_source(kind: str):
    def deco(fn: SourceFactory):
        _source_registry[kind] = fn
        return fn

    return deco


def make_collaborators(cfg: GraphSourceUnion) -> Collaborators:
    try:
        factory = _source_registry[cfg.kind]
    except KeyError:
        raise ValueError(f"Unknown graph source kind {cfg.kind!r}")
    return factory(cfg)


@register_source("osm")
def _make_osm(cfg: GraphSourceOsmModel) -> Collaborators:
    return (
        OsmnxGraphFetcher(cfg.network_type, cfg.weight_scale),
        OsmnxNearestResolver(cfg.network_type, cfg.nearest_search_m),
    )


def graph_from_inline(cfg: GraphSourceInlineModel) -> Graph:
    pos = {n.id: (n.lat, n.lon) for n in cfg.nodes}
    edges = []
    for e in cfg.edges:
        if e.weight is not None:
            w = e.weight
        elif e.source in pos and e.target in pos:
            w = haversine_m(*pos[e.source], *pos[e.target])
        else:
            w = 0.0  # dangling endpoint; load_graph reports it
        edges.append(Edge(e.source, e.target, w * cfg.weight_scale, e.bidirectional))
    return load_graph([(n.id, n.lat, n.lon) for n in cfg.nodes], edges)


@register_source("inline")
def _make_inline(cfg: GraphSourceInlineModel) -> Collaborators:
    graph = graph_from_inline(cfg)
    return LocalGraphFetcher(graph), GraphNearestResolver(graph)
