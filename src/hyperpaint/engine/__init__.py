"""Projection engine: spatial store, incremental scheduler, paint gestures, studio facade."""

from hyperpaint.engine.paint import BrushSettings, BrushTool, PaintGesture
from hyperpaint.engine.scheduler import (
    HIDDEN_TRANSFORM,
    InstanceBuffer,
    InstanceTransform,
    PassState,
    ProjectionScheduler,
)
from hyperpaint.engine.store import SpatialStore, StoreStats, distance_4d
from hyperpaint.engine.studio import HyperspaceStudio

__all__ = [
    "HIDDEN_TRANSFORM",
    "BrushSettings",
    "BrushTool",
    "HyperspaceStudio",
    "InstanceBuffer",
    "InstanceTransform",
    "PaintGesture",
    "PassState",
    "ProjectionScheduler",
    "SpatialStore",
    "StoreStats",
    "distance_4d",
]
