# main.py
import argparse
import json

from path_sim.app.build import build
from path_sim.io.recorder import JsonlSink, Recorder
from path_sim.search.engine import SearchOutcome


def positive_float(text: str) -> float:
    value = float(text)
    if value <= 0:
        raise argparse.ArgumentTypeError(f"expected a positive number, got {text}")
    return value


def run(cfg: dict, start: tuple[float, float], end: tuple[float, float], *, dt: float = 16.0):
    app = build(cfg, recorder=Recorder(JsonlSink(), run_id=cfg["run_id"]))

    # Same flow as the map UI: pick a start, graph loads around it, pick an end inside the radius
    app.session.select_start(*start)
    app.session.select_end(*end)

    app.driver.start()
    ticks = app.driver.run(dt=dt)
    route = app.session.route() if app.session.outcome is SearchOutcome.FOUND else []
    return ticks, route


if __name__ == "__main__":
    p = argparse.ArgumentParser(description="Animate a Dijkstra search over a road graph.")
    p.add_argument("config", help="scenario JSON file")
    p.add_argument("--start", nargs=2, type=float, required=True, metavar=("LAT", "LON"))
    p.add_argument("--end", nargs=2, type=float, required=True, metavar=("LAT", "LON"))
    p.add_argument("--dt", type=positive_float, default=16.0, help="frame time per tick")
    args = p.parse_args()

    with open(args.config) as f:
        cfg = json.load(f)
    ticks, route = run(cfg, tuple(args.start), tuple(args.end), dt=args.dt)
    print(json.dumps({"ticks": ticks, "route": [n.id for n in route]}, default=str))
