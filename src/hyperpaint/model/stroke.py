"""HyperStroke dataclass: an ordered polyline painted through 4D space."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from hyperpaint.model.node import Category
from hyperpaint.model.point import Point4D

STROKE_PROPERTY_DEFAULTS: dict[str, Any] = {
    "size": 2.0,
    "intensity": 1.0,
    "coherence": 0.7,
    "kernelCoupling": 1.0,
}


class StrokeFrozenError(Exception):
    """Raised when a point is appended to a stroke that has been stored."""

    pass


@dataclass
class StrokePoint:
    """One sample of a stroke: a 4D position plus a property snapshot."""

    position: Point4D
    properties: dict[str, Any] = field(default_factory=dict)


@dataclass
class HyperStroke:
    """An ordered, append-only polyline through 4D space.

    Points are appended while the paint gesture is active. Once the stroke is
    handed to the store it is frozen and further appends raise
    StrokeFrozenError.
    """

    id: str
    stroke_type: str  # brush tool that produced the stroke, e.g. "4DBrush"
    category: Category
    points: list[StrokePoint] = field(default_factory=list)
    properties: dict[str, Any] = field(default_factory=lambda: dict(STROKE_PROPERTY_DEFAULTS))
    frozen: bool = False

    def add_point(self, position: Point4D, properties: dict[str, Any] | None = None) -> None:
        """Append a sample with a copy of the given properties.

        Raises:
            StrokeFrozenError: If the stroke has already been stored.
        """
        if self.frozen:
            raise StrokeFrozenError(f"Stroke '{self.id}' is frozen")
        self.points.append(StrokePoint(position=position, properties=dict(properties or {})))

    def freeze(self) -> None:
        """Mark the stroke as complete."""
        self.frozen = True

    @property
    def last_position(self) -> Point4D | None:
        """Position of the most recent sample, or None for an empty stroke."""
        if not self.points:
            return None
        return self.points[-1].position
