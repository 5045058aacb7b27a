"""HyperNode dataclass: a single point placed in 4D space."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from hyperpaint.model.point import Point4D

if TYPE_CHECKING:
    from hyperpaint.model.point import Point3D
    from hyperpaint.projection.functions import ProjectionMode
    from hyperpaint.projection.params import ProjectionParameters

# Visibility band around the w-slice used for rendering and activeNodes stats
DEFAULT_SLICE_TOLERANCE = 2.0

NODE_PROPERTY_DEFAULTS: dict[str, Any] = {
    "intensity": 1.0,
    "coherence": 0.7,
    "kernelCoupling": 1.0,
    "age": 0,
}


class Category(StrEnum):
    """Consciousness type of a node or stroke.

    Drives styling and the per-category instance capacity.
    """

    HUMAN = "human"
    AI = "ai"
    HYBRID = "hybrid"
    KERNEL = "kernel"


def merge_node_properties(properties: dict[str, Any] | None) -> dict[str, Any]:
    """Merge caller properties over the node defaults, key by key."""
    merged = dict(NODE_PROPERTY_DEFAULTS)
    if properties:
        merged.update(properties)
    return merged


@dataclass(frozen=True)
class HyperNode:
    """A point in 4D space with a category and rendering properties.

    Nodes are never mutated after creation; they are only removed by clearing
    the whole store.
    """

    id: str
    position: Point4D
    category: Category

    # intensity >= 0, coherence in [0, 1] nominal, kernelCoupling >= 0, age >= 0,
    # plus any extra keys supplied by the caller
    properties: dict[str, Any] = field(default_factory=lambda: dict(NODE_PROPERTY_DEFAULTS))

    def is_visible_at_slice(
        self, w_slice: float, tolerance: float = DEFAULT_SLICE_TOLERANCE
    ) -> bool:
        """Check whether the node lies within ``tolerance`` of the w-slice."""
        return abs(self.position.w - w_slice) <= tolerance

    def project(
        self,
        mode: ProjectionMode | str,
        w_slice: float,
        params: ProjectionParameters,
    ) -> Point3D:
        """Project the node position into 3D under the given mode."""
        from hyperpaint.projection.functions import project_point

        return project_point(self.position, mode, w_slice, params)
