"""Paint gestures: record a hyper-stroke and place interpolated nodes while painting."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from hyperpaint.engine.store import distance_4d
from hyperpaint.model.node import Category
from hyperpaint.model.point import Point4D

if TYPE_CHECKING:
    from hyperpaint.engine.scheduler import ProjectionScheduler
    from hyperpaint.engine.store import SpatialStore
    from hyperpaint.model.stroke import HyperStroke

logger = logging.getLogger(__name__)

MIN_SAMPLE_DISTANCE = 0.2  # samples closer than this to the last point are ignored
INTERPOLATION_STEP = 0.1  # spacing of nodes placed between two samples


class BrushTool(StrEnum):
    """Paint tools. The tool name becomes the stroke type."""

    BRUSH = "4DBrush"
    NODE = "4DNode"
    FLOW = "4DFlow"
    KERNEL = "4DKernel"
    ERASER = "4DEraser"


@dataclass
class BrushSettings:
    """Current brush configuration, snapshotted into every stroke sample."""

    tool: BrushTool = BrushTool.BRUSH
    category: Category = Category.AI
    size: float = 2.0
    intensity: float = 1.0
    coherence: float = 0.7
    kernel_coupling: float = 1.0

    @property
    def instance_scale(self) -> float:
        return self.size * 0.1

    def snapshot(self) -> dict[str, Any]:
        """Properties recorded with each stroke sample."""
        return {
            "tool": self.tool.value,
            "consciousnessType": self.category.value,
            "size": self.size,
            "intensity": self.intensity,
            "coherence": self.coherence,
            "kernelCoupling": self.kernel_coupling,
        }

    def node_properties(self) -> dict[str, Any]:
        """Properties given to each node placed by the brush."""
        return {
            "intensity": self.intensity,
            "coherence": self.coherence,
            "kernelCoupling": self.kernel_coupling,
        }


def interpolate(start: Point4D, end: Point4D, t: float) -> Point4D:
    """Linear interpolation between two 4D points."""
    return Point4D(
        x=start.x + (end.x - start.x) * t,
        y=start.y + (end.y - start.y) * t,
        z=start.z + (end.z - start.z) * t,
        w=start.w + (end.w - start.w) * t,
    )


class PaintGesture:
    """One continuous paint gesture at a time.

    Each placed point is written straight into the instance buffers through
    the scheduler's incremental path. Stats are refreshed once, when the
    stroke is stored on ``end``.
    """

    def __init__(
        self,
        store: SpatialStore,
        scheduler: ProjectionScheduler,
        brush: BrushSettings | None = None,
    ) -> None:
        self.store = store
        self.scheduler = scheduler
        self.brush = brush if brush is not None else BrushSettings()
        self.stroke: HyperStroke | None = None

    @property
    def active(self) -> bool:
        return self.stroke is not None

    def begin(self, position: Point4D) -> HyperStroke:
        """Start a stroke at ``position``, discarding any unfinished one."""
        if self.stroke is not None:
            logger.debug("Discarding unfinished stroke %s", self.stroke.id)
        self.stroke = self.store.create_stroke(self.brush.tool.value, self.brush.category)
        self.stroke.add_point(position, self.brush.snapshot())
        self._place(position)
        return self.stroke

    def extend(self, position: Point4D) -> int:
        """Add a sample to the active stroke.

        Samples within MIN_SAMPLE_DISTANCE of the previous one are ignored.
        Otherwise nodes are placed every INTERPOLATION_STEP along the segment.

        Returns:
            Number of nodes placed.
        """
        if self.stroke is None:
            return 0
        last = self.stroke.last_position
        if last is None:
            return 0
        distance = distance_4d(position, last)
        if distance <= MIN_SAMPLE_DISTANCE:
            return 0

        self.stroke.add_point(position, self.brush.snapshot())
        steps = math.ceil(distance / INTERPOLATION_STEP)
        placed = 0
        for i in range(1, steps + 1):
            if self._place(interpolate(last, position, i / steps)):
                placed += 1
        return placed

    def end(self) -> HyperStroke | None:
        """Store the active stroke. A no-op when no gesture is active."""
        if self.stroke is None:
            return None
        stroke = self.stroke
        self.stroke = None
        self.store.add_stroke(stroke)
        logger.debug("Stored stroke %s with %d samples", stroke.id, len(stroke.points))
        return stroke

    def cancel(self) -> None:
        """Drop the active stroke without storing it."""
        self.stroke = None

    def _place(self, position: Point4D) -> bool:
        category = self.brush.category
        if not self.scheduler.pending and self.scheduler.buffers[category].is_full:
            logger.debug("No capacity left for %s, dropping painted point", category)
            return False
        self.scheduler.add_instance(position, category, self.brush.instance_scale)
        self.store.add_node(position, category, self.brush.node_properties(), recompute=False)
        return True
