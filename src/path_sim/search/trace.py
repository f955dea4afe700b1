# search/trace.py
from path_sim.domain.entities.geography import Node
from path_sim.domain.errors import NoPathFoundError

from .engine import SearchEngine, SearchOutcome


def _require_found(engine: SearchEngine, target: Node) -> None:
    origin = engine.origin
    if engine.outcome is not SearchOutcome.FOUND:
        raise NoPathFoundError(origin.id if origin else None, target.id)
    if target.id != origin.id and engine.parent(target) is None:
        # finished, but this node was never put on the route
        raise NoPathFoundError(origin.id, target.id)


def reconstruct(engine: SearchEngine, target: Node | None = None) -> list[Node]:
    """Origin -> target route from the engine's parent links."""
    target = target or engine.target
    if target is None:
        raise NoPathFoundError(None, None)
    _require_found(engine, target)
    route = [target]
    node = engine.parent(target)
    while node is not None:
        route.append(node)
        node = engine.parent(node)
    route.reverse()
    return route


def path_cost(engine: SearchEngine, route: list[Node]) -> float:
    return engine.distance(route[-1]) if route else 0.0


class PathTracer:
    """
    Walks the found route one hop per call, target first.
    step() returns (child, parent) for the hop just taken, or None once the origin is reached.
    """

    def __init__(self, engine: SearchEngine, target: Node | None = None):
        target = target or engine.target
        if target is None:
            raise NoPathFoundError(None, None)
        _require_found(engine, target)
        self._engine = engine
        self._cursor: Node = target
        self._done = engine.parent(target) is None

    @property
    def cursor(self) -> Node:
        return self._cursor

    @property
    def done(self) -> bool:
        return self._done

    def step(self) -> tuple[Node, Node] | None:
        if self._done:
            return None
        child = self._cursor
        parent = self._engine.parent(child)
        self._cursor = parent
        self._done = self._engine.parent(parent) is None
        return child, parent

    def __iter__(self):
        while (hop := self.step()) is not None:
            yield hop
