# path_sim/app/build.py
from collections.abc import Mapping
from dataclasses import dataclass

from path_sim.app.animation import AnimationDriver
from path_sim.app.protocols import GraphFetcher, NearestNodeResolver
from path_sim.app.session import PathfindingSession
from path_sim.config.models import ScenarioModel
from path_sim.io.recorder import JsonlSink, Recorder
from path_sim.io.search_logging import SearchLogging  # JSON logs
from path_sim.runtime.registries import make_collaborators
from path_sim.search.engine import SearchEngine, SearchOutcome
from path_sim.search.hooks import NoopHooks


@dataclass
class App:
    config: ScenarioModel
    engine: SearchEngine
    session: PathfindingSession
    driver: AnimationDriver
    fetcher: GraphFetcher
    resolver: NearestNodeResolver
    recorder: Recorder | None

    def solve(self) -> SearchOutcome | None:
        """Batch mode: run the selected search to completion without animation."""
        self.session.start()
        return self.engine.run(max_steps=self.config.search.max_steps)


def build(
    cfg: ScenarioModel | Mapping,
    *,
    use_logging: bool = True,
    recorder: Recorder | None = None,
    record: bool = False,
) -> App:
    # 0) Validate config
    model = cfg if isinstance(cfg, ScenarioModel) else ScenarioModel.model_validate(cfg)

    # 1) Hooks
    hooks = (
        SearchLogging(
            run_id=model.run_id,
            level=model.log.level,
            debug=model.log.debug,
            sample_every=model.log.sample_every,
        )
        if use_logging
        else NoopHooks()
    )
    engine = SearchEngine(hooks=hooks)

    # 2) Collaborators
    fetcher, resolver = make_collaborators(model.graph_source)

    # 3) Session & driver
    session = PathfindingSession(
        engine,
        resolver=resolver,
        fetcher=fetcher,
        radius_km=model.selection.radius_km,
        circle_points=model.selection.circle_points,
    )
    if recorder is None and record:
        recorder = Recorder(JsonlSink(), run_id=model.run_id)
    driver = AnimationDriver(
        session,
        steps_per_tick=model.search.steps_per_tick,
        speed_factor=model.animation.speed_factor,
        search_color=model.animation.search_color,
        route_color=model.animation.route_color,
        consumer=recorder,
    )

    return App(model, engine, session, driver, fetcher, resolver, recorder)
