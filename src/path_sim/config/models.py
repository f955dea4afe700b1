from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class LogModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    debug: bool = False
    sample_every: int = Field(default=1, ge=1)


class SearchModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    steps_per_tick: int = Field(default=1, ge=1)
    max_steps: int | None = Field(default=None, ge=1)


class SelectionModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    radius_km: float = Field(default=2.0, gt=0)
    circle_points: int = Field(default=64, ge=8)


class AnimationModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    speed_factor: float = Field(default=50_000.0, gt=0)
    search_color: tuple[int, int, int] = (253, 128, 93)
    route_color: tuple[int, int, int] = (160, 100, 250)

    @field_validator("search_color", "route_color")
    @classmethod
    def _rgb(cls, v: tuple[int, int, int]) -> tuple[int, int, int]:
        if any(c < 0 or c > 255 for c in v):
            raise ValueError("colour channels must be in 0..255")
        return v


# ----------------- GRAPH SOURCES ---------------------


class GraphSourceOsmModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    kind: Literal["osm"] = "osm"
    network_type: Literal["drive", "drive_service", "walk", "bike", "all"] = "drive"
    weight_scale: float = Field(default=1.0, gt=0)
    nearest_search_m: float = Field(default=500.0, gt=0)


class InlineNodeModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    id: int | str
    lat: float
    lon: float


class InlineEdgeModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    source: int | str
    target: int | str
    weight: float | None = None  # None => haversine metres
    bidirectional: bool = True


class GraphSourceInlineModel(BaseModel):
    """Literal graph, served locally (demos and tests)."""

    model_config = ConfigDict(extra="forbid")
    kind: Literal["inline"] = "inline"
    nodes: list[InlineNodeModel]
    edges: list[InlineEdgeModel] = Field(default_factory=list)
    weight_scale: float = Field(default=1.0, gt=0)

    @model_validator(mode="after")
    def _check_nodes(self):
        if not self.nodes:
            raise ValueError("inline graph needs at least one node")
        return self


GraphSourceUnion = Annotated[
    GraphSourceOsmModel | GraphSourceInlineModel, Field(discriminator="kind")
]


# ------------------------------------------------------------------


class ScenarioModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    name: str
    run_id: str
    log: LogModel = LogModel()
    search: SearchModel = SearchModel()
    selection: SelectionModel = SelectionModel()
    animation: AnimationModel = AnimationModel()
    graph_source: GraphSourceUnion = Field(default_factory=GraphSourceOsmModel)
