# path_sim/domain/errors.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(eq=False)
class PathSimError(Exception):
    reason_code: str
    message: str
    details: dict[str, Any] | None = None

    def __str__(self) -> str:
        return self.message


class GraphIntegrityError(PathSimError):
    """Malformed graph input (dangling endpoints, duplicate ids, bad weights)."""

    def __init__(self, message: str, **details: Any):
        super().__init__("graph_integrity", message, details or None)


class OutOfBoundsError(PathSimError):
    """Selected point resolved to a node outside the loaded graph."""

    def __init__(self, node_id, message: str | None = None):
        super().__init__(
            "out_of_bounds",
            message or f"node {node_id!r} is not in the loaded graph",
            {"node_id": node_id},
        )
        self.node_id = node_id


class InvalidStateError(PathSimError):
    def __init__(self, message: str, **details: Any):
        super().__init__("invalid_state", message, details or None)


class NoPathFoundError(PathSimError):
    def __init__(self, origin_id, target_id):
        super().__init__(
            "no_path",
            f"no path from {origin_id!r} to {target_id!r}",
            {"origin_id": origin_id, "target_id": target_id},
        )


class GraphFetchError(PathSimError):
    """Graph fetch or nearest-node lookup failed in a collaborator."""

    def __init__(self, message: str, **details: Any):
        super().__init__("graph_fetch_failed", message, details or None)
