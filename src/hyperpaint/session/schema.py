"""Pydantic models for the ``4d-session/v1`` session document."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field

from hyperpaint.model import Category, Point4D

SCHEMA_ID = "4d-session/v1"


def _properties_or_empty(value: Any) -> Any:
    """Treat a null or non-object properties block as empty, so defaults apply."""
    return value if isinstance(value, Mapping) else {}


Properties = Annotated[dict[str, Any], BeforeValidator(_properties_or_empty)]


class Position4DRecord(BaseModel):
    """A 4D position as stored in a session file."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    w: float = 0.0

    def to_point(self) -> Point4D:
        return Point4D(self.x, self.y, self.z, self.w)


class NodeRecord(BaseModel):
    """A stored hyper-node. The id is informational; imports assign new ids."""

    model_config = ConfigDict(populate_by_name=True)

    id: str | None = Field(default=None, description="Node id at export time")
    position_4d: Position4DRecord = Field(alias="position4D", description="4D position")
    category: Category = Field(alias="type", description="Consciousness type")
    properties: Properties = Field(default_factory=dict, description="Node properties")


class StrokePointRecord(BaseModel):
    """One sample of a stored stroke."""

    model_config = ConfigDict(populate_by_name=True)

    position_4d: Position4DRecord = Field(alias="position4D")
    properties: Properties = Field(default_factory=dict)


class StrokeRecord(BaseModel):
    """A stored hyper-stroke."""

    model_config = ConfigDict(populate_by_name=True)

    id: str | None = Field(default=None, description="Stroke id at export time")
    stroke_type: str = Field(default="4DBrush", alias="type", description="Brush tool")
    category: Category = Field(alias="consciousnessType", description="Consciousness type")
    points: list[StrokePointRecord] = Field(default_factory=list, alias="points4D")
    properties: Properties = Field(default_factory=dict, description="Stroke properties")


class StatsRecord(BaseModel):
    """Store statistics at export time."""

    model_config = ConfigDict(populate_by_name=True)

    total_nodes: int = Field(default=0, alias="totalNodes")
    active_nodes: int = Field(default=0, alias="activeNodes")
    stroke_count: int = Field(default=0, alias="strokeCount")
    average_kernel_coupling: float = Field(default=0.0, alias="averageKernelCoupling")


class StoreRecord(BaseModel):
    """The ``data`` block: the serialized spatial store."""

    nodes: list[NodeRecord] = Field(default_factory=list)
    strokes: list[StrokeRecord] = Field(default_factory=list)
    stats: StatsRecord = Field(default_factory=StatsRecord)
    projection: str = "slice"
    w_slice: float = 0.0


class ProjectionRecord(BaseModel):
    """Projection mode, slice coordinate and parameter values."""

    mode: str = "slice"
    w_slice: float = 0.0
    params: dict[str, float] = Field(default_factory=dict)


class CameraRecord(BaseModel):
    """Camera position and target. Opaque to the core, passed through unchanged."""

    pos: tuple[float, float, float] = (8.0, 8.0, 12.0)
    target: tuple[float, float, float] = (0.0, 0.0, 0.0)


class SessionDocument(BaseModel):
    """Top-level session document."""

    model_config = ConfigDict(populate_by_name=True)

    schema_: str = Field(default=SCHEMA_ID, alias="schema")
    app: str = "hyperpaint"
    version: str = ""
    timestamp: str = ""
    projection: ProjectionRecord = Field(default_factory=ProjectionRecord)
    camera: CameraRecord = Field(default_factory=CameraRecord)
    data: StoreRecord = Field(default_factory=StoreRecord)
