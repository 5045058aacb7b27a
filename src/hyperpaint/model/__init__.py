"""Domain model: Point4D, Point3D, HyperNode, HyperStroke, Category."""

from hyperpaint.model.point import Point3D, Point4D
from hyperpaint.model.ids import IdSequence
from hyperpaint.model.node import (
    DEFAULT_SLICE_TOLERANCE,
    NODE_PROPERTY_DEFAULTS,
    Category,
    HyperNode,
    merge_node_properties,
)
from hyperpaint.model.stroke import (
    STROKE_PROPERTY_DEFAULTS,
    HyperStroke,
    StrokeFrozenError,
    StrokePoint,
)

__all__ = [
    "DEFAULT_SLICE_TOLERANCE",
    "NODE_PROPERTY_DEFAULTS",
    "STROKE_PROPERTY_DEFAULTS",
    "Category",
    "HyperNode",
    "HyperStroke",
    "IdSequence",
    "Point3D",
    "Point4D",
    "StrokeFrozenError",
    "StrokePoint",
    "merge_node_properties",
]
