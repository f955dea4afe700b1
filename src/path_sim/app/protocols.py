from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from path_sim.domain.entities.geography import BoundingBox, NodeId, NodeRef
from path_sim.domain.graph import Graph
from path_sim.search.engine import SearchOutcome, StepRecord


# ------------- Collaborators --------------------
@runtime_checkable
class GraphFetcher(Protocol):
    """
    Responsibilities:
    • Return a connected road graph covering the bounding box.
    • hint_node_id is expected to lie inside the box.
    Failures (network, parsing) raise GraphFetchError; never return a partial graph silently.
    """

    def fetch_graph(self, bbox: BoundingBox, hint_node_id: NodeId) -> Graph: ...


@runtime_checkable
class NearestNodeResolver(Protocol):
    """
    Resolve a coordinate to the closest known road node.
    No guarantee the id is in the currently loaded graph; callers check membership.
    """

    def resolve_nearest(self, lat: float, lon: float) -> NodeRef: ...


# ------------- Driver boundary --------------------
@runtime_checkable
class StepConsumer(Protocol):
    """Receives per-step batches and the terminal outcome (e.g. a renderer or recorder)."""

    def on_steps(self, records: Sequence[StepRecord]) -> None: ...
    def on_finished(self, outcome: SearchOutcome) -> None: ...
