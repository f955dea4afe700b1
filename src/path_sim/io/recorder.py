# io/recorder.py
import json
import logging
import sys
from collections.abc import Sequence
from dataclasses import asdict, dataclass
from typing import Protocol

from path_sim.search.engine import SearchOutcome, StepRecord

log = logging.getLogger("path_sim.recorder")


# Analytics events, one per touched node plus one terminal outcome
@dataclass
class NodeTouched:
    run_id: str
    seq: int  # step batch index
    node_id: str
    referer_id: str | None
    distance: float
    lat: float
    lon: float


@dataclass
class SearchFinished:
    run_id: str
    seq: int
    outcome: str


class Sink(Protocol):
    def write(self, ev) -> None: ...


class JsonlSink:
    def __init__(self, fp=sys.stdout):
        self.fp = fp

    def write(self, ev) -> None:
        self.fp.write(json.dumps({"event": type(ev).__name__, **asdict(ev)}) + "\n")


class MemorySink:
    def __init__(self):
        self.events: list = []

    def write(self, ev) -> None:
        self.events.append(ev)


class Recorder:
    """Fans step batches and the search outcome out to sinks; usable as a StepConsumer."""

    def __init__(self, *sinks: Sink, run_id: str = "local"):
        self.sinks = sinks or (JsonlSink(),)
        self.run_id = run_id
        self._seq = 0

    def emit(self, ev):
        for s in self.sinks:
            try:
                s.write(ev)
            except Exception:
                log.exception("sink %s failed", type(s).__name__)  # never break the search

    def on_steps(self, records: Sequence[StepRecord]) -> None:
        self._seq += 1
        for r in records:
            self.emit(
                NodeTouched(
                    self.run_id,
                    self._seq,
                    str(r.node.id),
                    None if r.referer is None else str(r.referer.id),
                    r.distance,
                    r.node.lat,
                    r.node.lon,
                )
            )

    def on_finished(self, outcome: SearchOutcome) -> None:
        self.emit(SearchFinished(self.run_id, self._seq, outcome.value))
