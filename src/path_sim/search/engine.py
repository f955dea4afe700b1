# search/engine.py

import heapq
import math
import time
from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum

from path_sim.domain.entities.geography import Node, NodeId
from path_sim.domain.errors import InvalidStateError
from path_sim.domain.graph import Graph

from .hooks import NoopHooks, SearchHooks


class SearchState(Enum):
    IDLE = "idle"
    RUNNING = "running"
    FINISHED = "finished"


class SearchOutcome(Enum):
    FOUND = "found"
    UNREACHABLE = "unreachable"


@dataclass
class Scratch:
    distance: float = math.inf
    referer: NodeId | None = None
    parent: NodeId | None = None
    visited: bool = False


@dataclass(frozen=True)
class StepRecord:
    """A node touched by one step, with the node it was reached from (None for the origin)."""

    node: Node
    referer: Node | None
    distance: float


def _node_id(n: Node | NodeId) -> NodeId:
    return n.id if isinstance(n, Node) else n


class SearchEngine:
    """
    Stepwise Dijkstra over a read-only Graph.

    All per-search bookkeeping lives in a scratch table keyed by node id, so one
    Graph can back any number of engines. Each next_step() call does exactly one
    frontier pop; pacing belongs to the caller. Equal distances pop FIFO.
    """

    def __init__(self, hooks: SearchHooks | None = None):
        self._hooks = hooks or NoopHooks()
        self._clear()

    def _clear(self) -> None:
        self._state = SearchState.IDLE
        self._outcome: SearchOutcome | None = None
        self._graph: Graph | None = None
        self._origin: NodeId | None = None
        self._target: NodeId | None = None
        self._scratch: dict[NodeId, Scratch] = {}
        self._q: list[tuple[float, int, NodeId]] = []
        self._open: set[NodeId] = set()
        self._seq = 0
        self._steps = 0
        self._visited_order: list[NodeId] = []
        self._t0 = 0.0

    # ---------------- state ----------------

    @property
    def state(self) -> SearchState:
        return self._state

    @property
    def finished(self) -> bool:
        return self._state is SearchState.FINISHED

    @property
    def outcome(self) -> SearchOutcome | None:
        return self._outcome

    @property
    def graph(self) -> Graph | None:
        return self._graph

    @property
    def origin(self) -> Node | None:
        return self._graph.get_node(self._origin) if self._graph is not None else None

    @property
    def target(self) -> Node | None:
        return self._graph.get_node(self._target) if self._graph is not None else None

    @property
    def frontier_size(self) -> int:
        return len(self._open)

    @property
    def steps_taken(self) -> int:
        return self._steps

    @property
    def visited_order(self) -> list[NodeId]:
        return list(self._visited_order)

    def distance(self, node: Node | NodeId) -> float:
        sc = self._scratch.get(_node_id(node))
        return sc.distance if sc else math.inf

    def referer(self, node: Node | NodeId) -> Node | None:
        sc = self._scratch.get(_node_id(node))
        return self._graph[sc.referer] if sc and sc.referer is not None else None

    def parent(self, node: Node | NodeId) -> Node | None:
        sc = self._scratch.get(_node_id(node))
        return self._graph[sc.parent] if sc and sc.parent is not None else None

    def is_visited(self, node: Node | NodeId) -> bool:
        sc = self._scratch.get(_node_id(node))
        return bool(sc and sc.visited)

    def in_frontier(self, node: Node | NodeId) -> bool:
        return _node_id(node) in self._open

    def snapshot(self) -> dict[NodeId, tuple[float, NodeId | None, NodeId | None, bool]]:
        return {
            nid: (sc.distance, sc.referer, sc.parent, sc.visited)
            for nid, sc in self._scratch.items()
        }

    # ---------------- lifecycle ----------------

    def start(self, graph: Graph, origin: Node | NodeId, target: Node | NodeId) -> None:
        o, t = _node_id(origin), _node_id(target)
        for role, nid in (("origin", o), ("target", t)):
            if nid not in graph:
                self._hooks.error(reason=f"{role}_not_in_graph", node_id=nid)
                raise InvalidStateError(f"{role} {nid!r} is not in the graph", node_id=nid)
        self._clear()
        self._graph, self._origin, self._target = graph, o, t
        self._state = SearchState.RUNNING
        self._t0 = time.perf_counter()
        self._hooks.search_start(origin=o, target=t, nodes=len(graph))
        self._scratch[o] = Scratch(distance=0.0)
        self._push(o, 0.0)

    def reset(self) -> None:
        self._clear()

    def _push(self, nid: NodeId, d: float) -> None:
        self._seq += 1
        heapq.heappush(self._q, (d, self._seq, nid))
        self._open.add(nid)

    def _pop(self) -> NodeId | None:
        while self._q:
            d, _, nid = heapq.heappop(self._q)
            sc = self._scratch[nid]
            # lazy deletion: skip visited nodes and superseded entries
            if sc.visited or d > sc.distance:
                continue
            return nid
        return None

    def _finish(self, outcome: SearchOutcome) -> None:
        self._state = SearchState.FINISHED
        self._outcome = outcome
        self._q.clear()
        self._open.clear()
        self._hooks.search_end(
            outcome=outcome.value,
            steps=self._steps,
            visited=len(self._visited_order),
            wall_ms=(time.perf_counter() - self._t0) * 1000,
        )

    def _promote_parents(self) -> None:
        nid = self._target
        while nid is not None:
            sc = self._scratch[nid]
            sc.parent = sc.referer
            nid = sc.referer

    def _record(self, nid: NodeId) -> StepRecord:
        sc = self._scratch[nid]
        ref = self._graph[sc.referer] if sc.referer is not None else None
        return StepRecord(self._graph[nid], ref, sc.distance)

    # ---------------- stepping ----------------

    def next_step(self) -> list[StepRecord]:
        """
        Expand one node. Returns the relaxed neighbours followed by the popped node.
        Empty when idle or finished.
        """
        if self._state is not SearchState.RUNNING:
            return []

        nid = self._pop()
        if nid is None:
            self._finish(SearchOutcome.UNREACHABLE)
            return []

        self._steps += 1
        cur = self._scratch[nid]
        cur.visited = True
        self._open.discard(nid)
        self._visited_order.append(nid)

        if nid == self._target:
            self._promote_parents()
            out = [self._record(nid)]
            self._hooks.step(
                nid, seq=self._steps, updated=0, frontier=0, visited=len(self._visited_order)
            )
            self._finish(SearchOutcome.FOUND)
            return out

        updated: list[StepRecord] = []
        for vid, w in self._graph.neighbors(nid):
            sc = self._scratch.setdefault(vid, Scratch())
            if sc.visited:
                continue
            cand = cur.distance + w
            if cand < sc.distance:
                sc.distance, sc.referer = cand, nid
                self._push(vid, cand)
                updated.append(self._record(vid))
        updated.append(self._record(nid))

        self._hooks.step(
            nid,
            seq=self._steps,
            updated=len(updated) - 1,
            frontier=len(self._open),
            visited=len(self._visited_order),
        )
        if not self._open:
            self._finish(SearchOutcome.UNREACHABLE)
        return updated

    def steps(self, max_steps: int | None = None) -> Iterator[list[StepRecord]]:
        """Yield next_step() batches until finished, or until max_steps pops."""
        n = 0
        while self._state is SearchState.RUNNING:
            if max_steps is not None and n >= max_steps:
                break
            yield self.next_step()
            n += 1

    def run(self, max_steps: int | None = None) -> SearchOutcome | None:
        for _ in self.steps(max_steps):
            pass
        return self._outcome
