# path_sim/app/animation.py
import math
from dataclasses import dataclass

from path_sim.app.protocols import StepConsumer
from path_sim.app.session import PathfindingSession
from path_sim.domain.entities.geography import Node
from path_sim.search.engine import SearchOutcome
from path_sim.search.trace import PathTracer

Color = tuple[int, int, int]

SEARCH_COLOR: Color = (253, 128, 93)
ROUTE_COLOR: Color = (160, 100, 250)


@dataclass(frozen=True)
class Waypoint:
    coordinates: tuple[float, float]  # (lon, lat)
    timestamp: float


@dataclass(frozen=True)
class TripSegment:
    """One animated edge: two timed waypoints, drawn in color."""

    waypoints: tuple[Waypoint, Waypoint]
    color: Color

    @property
    def duration(self) -> float:
        return self.waypoints[1].timestamp - self.waypoints[0].timestamp


class AnimationDriver:
    """
    Frame-paced consumer of a PathfindingSession.

    Each tick runs steps_per_tick search expansions and turns every touched node into a
    timed segment from its referer. Once the search finishes with a route, one route hop
    is traced per tick. Segment duration is the coordinate distance times speed_factor,
    so the timeline (``timer``) runs ahead of the playback clock (``time``); the animation
    has ended when the clock catches up after tracing is complete.
    """

    def __init__(
        self,
        session: PathfindingSession,
        *,
        steps_per_tick: int = 1,
        speed_factor: float = 50_000.0,
        search_color: Color = SEARCH_COLOR,
        route_color: Color = ROUTE_COLOR,
        consumer: StepConsumer | None = None,
    ):
        self.session = session
        self.steps_per_tick = max(1, steps_per_tick)
        self.speed_factor = speed_factor
        self.search_color, self.route_color = search_color, route_color
        self.consumer = consumer
        self._clear_timeline()

    def _clear_timeline(self) -> None:
        self.segments: list[TripSegment] = []
        self.timer = 0.0
        self.time = 0.0
        self.started = False
        self.paused = False
        self.ended = False
        self._tracer: PathTracer | None = None
        self._notified = False
        self._first_tick = True

    # ---------------- controls ----------------

    def start(self) -> None:
        self.clear()
        self.session.start()
        self.started = True

    def clear(self) -> None:
        self.session.reset()
        self._clear_timeline()

    def pause(self) -> None:
        self.paused = True

    def resume(self) -> None:
        self.paused = False
        self._first_tick = True

    def toggle(self) -> None:
        if self.paused:
            self.resume()
        else:
            self.pause()

    # ---------------- timeline ----------------

    def _add(self, node: Node | None, referer: Node | None, color: Color) -> TripSegment | None:
        if node is None or referer is None:
            return None
        dt = math.hypot(node.lon - referer.lon, node.lat - referer.lat) * self.speed_factor
        seg = TripSegment(
            (
                Waypoint((referer.lon, referer.lat), self.timer),
                Waypoint((node.lon, node.lat), self.timer + dt),
            ),
            color,
        )
        self.segments.append(seg)
        self.timer += dt
        return seg

    def _trace_hop(self) -> TripSegment | None:
        if self.session.outcome is not SearchOutcome.FOUND:
            return None
        if self._tracer is None:
            self._tracer = self.session.tracer()
        hop = self._tracer.step()
        if hop is None:
            return None
        child, parent = hop
        return self._add(parent, child, self.route_color)

    @property
    def tracing_done(self) -> bool:
        if self.session.outcome is SearchOutcome.UNREACHABLE:
            return True
        return self._tracer is not None and self._tracer.done

    def tick(self, dt: float) -> list[TripSegment]:
        """Advance one frame of dt time units; returns the segments added."""
        if not self.started or self.paused or self.ended:
            return []
        added: list[TripSegment] = []
        for _ in range(self.steps_per_tick):
            records = self.session.next_step()
            if not records:
                break
            if self.consumer:
                self.consumer.on_steps(records)
            for r in records:
                seg = self._add(r.node, r.referer, self.search_color)
                if seg:
                    added.append(seg)

        if self.session.finished:
            if not self._notified:
                self._notified = True
                if self.consumer:
                    self.consumer.on_finished(self.session.outcome)
            seg = self._trace_hop()
            if seg:
                added.append(seg)
            self.ended = self.tracing_done and self.time >= self.timer

        # first frame after start/resume only establishes the reference time
        if not self._first_tick and not self.ended:
            self.time += dt
        self._first_tick = False
        return added

    def run(self, dt: float = 16.0, max_ticks: int | None = None) -> int:
        """Tick until the animation ends (or max_ticks); returns ticks taken."""
        if dt <= 0:
            raise ValueError(f"dt must be positive, got {dt}")
        n = 0
        while self.started and not self.ended and not self.paused:
            if max_ticks is not None and n >= max_ticks:
                break
            self.tick(dt)
            n += 1
        return n
