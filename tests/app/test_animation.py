# tests/app/test_animation.py
import pytest

from path_sim.app.animation import ROUTE_COLOR, SEARCH_COLOR, AnimationDriver
from path_sim.app.session import PathfindingSession
from path_sim.domain.graph import load_graph
from path_sim.io.recorder import MemorySink, NodeTouched, Recorder, SearchFinished

NODES = [("A", 50.0, 14.0), ("B", 50.001, 14.0), ("C", 50.0, 14.001), ("D", 50.001, 14.001)]


def _session(edges, start="A", end="D") -> PathfindingSession:
    s = PathfindingSession()
    s.set_graph(load_graph(NODES, edges))
    s.set_start_node(start)
    s.set_end_node(end)
    return s


@pytest.fixture
def diamond_session() -> PathfindingSession:
    return _session([("A", "B", 1.0), ("A", "C", 4.0), ("B", "D", 1.0), ("C", "D", 1.0)])


def test_search_then_route_segments(diamond_session: PathfindingSession):
    d = AnimationDriver(diamond_session)
    d.start()
    d.run(dt=16.0, max_ticks=1_000)
    assert d.ended
    colors = [s.color for s in d.segments]
    assert colors == [SEARCH_COLOR] * 5 + [ROUTE_COLOR] * 2
    # route is traced target -> origin
    first_hop, second_hop = d.segments[-2:]
    assert first_hop.waypoints[0].coordinates == (14.001, 50.001)
    assert first_hop.waypoints[1].coordinates == (14.0, 50.001)
    assert second_hop.waypoints[1].coordinates == (14.0, 50.0)
    assert d.time >= d.timer


def test_timeline_is_contiguous(diamond_session: PathfindingSession):
    d = AnimationDriver(diamond_session, speed_factor=1000.0)
    d.start()
    d.run()
    for prev, nxt in zip(d.segments, d.segments[1:]):
        assert nxt.waypoints[0].timestamp == pytest.approx(prev.waypoints[1].timestamp)
    assert all(s.duration == pytest.approx(1.0) for s in d.segments)
    assert d.timer == pytest.approx(len(d.segments))


def test_pause_freezes_progress(diamond_session: PathfindingSession):
    d = AnimationDriver(diamond_session)
    d.start()
    d.tick(16.0)
    d.tick(16.0)
    n, t = len(d.segments), d.time
    d.toggle()
    assert d.paused
    assert d.tick(16.0) == []
    assert d.run() == 0
    assert (len(d.segments), d.time) == (n, t)
    d.toggle()
    assert not d.paused
    assert d.tick(16.0)
    assert d.time == t  # first frame after resume only re-anchors the clock


def test_many_steps_per_tick(diamond_session: PathfindingSession):
    d = AnimationDriver(diamond_session, steps_per_tick=10)
    d.start()
    d.tick(16.0)
    assert diamond_session.finished
    assert [s.color for s in d.segments][-1] == ROUTE_COLOR


def test_unreachable_ends_without_route():
    s = _session([("A", "B", 1.0), ("C", "D", 1.0)])
    sink = MemorySink()
    d = AnimationDriver(s, consumer=Recorder(sink, run_id="r"))
    d.start()
    d.run(max_ticks=1_000)
    assert d.ended
    assert all(seg.color == SEARCH_COLOR for seg in d.segments)
    assert isinstance(sink.events[-1], SearchFinished)
    assert sink.events[-1].outcome == "unreachable"


def test_recorder_sees_every_touched_node(diamond_session: PathfindingSession):
    sink = MemorySink()
    d = AnimationDriver(diamond_session, consumer=Recorder(sink, run_id="r-1"))
    d.start()
    d.run(max_ticks=1_000)
    touched = [e for e in sink.events if isinstance(e, NodeTouched)]
    assert [(e.seq, e.node_id, e.referer_id) for e in touched] == [
        (1, "B", "A"),
        (1, "C", "A"),
        (1, "A", None),
        (2, "D", "B"),
        (2, "B", "A"),
        (3, "D", "B"),
    ]
    finished = [e for e in sink.events if isinstance(e, SearchFinished)]
    assert len(finished) == 1 and finished[0].outcome == "found" and finished[0].seq == 3


def test_clear_resets_timeline_and_search(diamond_session: PathfindingSession):
    d = AnimationDriver(diamond_session)
    d.start()
    d.run(max_ticks=1_000)
    d.clear()
    assert d.segments == [] and d.timer == 0.0 and not d.started
    assert not diamond_session.finished
    assert d.tick(16.0) == []
    # selections survive a clear, so the same search can be replayed
    d.start()
    d.run(max_ticks=1_000)
    assert [s.color for s in d.segments].count(ROUTE_COLOR) == 2


@pytest.mark.parametrize("dt", [0.0, -16.0])
def test_run_rejects_non_positive_frame_time(diamond_session: PathfindingSession, dt):
    d = AnimationDriver(diamond_session)
    d.start()
    with pytest.raises(ValueError):
        d.run(dt=dt)
    assert not diamond_session.finished
