"""SpatialStore: owns the 4D nodes and strokes, the w-slice, the projection mode and stats."""

from __future__ import annotations

import logging
import math
from dataclasses import asdict, dataclass
from typing import Any

from hyperpaint.model.ids import IdSequence
from hyperpaint.model.node import (
    DEFAULT_SLICE_TOLERANCE,
    Category,
    HyperNode,
    merge_node_properties,
)
from hyperpaint.model.point import Point4D
from hyperpaint.model.stroke import HyperStroke
from hyperpaint.projection.functions import ProjectionMode
from hyperpaint.projection.params import is_numeric

logger = logging.getLogger(__name__)


@dataclass
class StoreStats:
    """Aggregate statistics derived from the node set and the w-slice."""

    total_nodes: int = 0
    active_nodes: int = 0  # nodes within the default tolerance of the w-slice
    stroke_count: int = 0
    average_kernel_coupling: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        """Wire representation with camelCase keys."""
        return {
            "totalNodes": self.total_nodes,
            "activeNodes": self.active_nodes,
            "strokeCount": self.stroke_count,
            "averageKernelCoupling": self.average_kernel_coupling,
        }


def distance_4d(a: Point4D, b: Point4D) -> float:
    """Euclidean distance between two 4D points."""
    return math.hypot(a.x - b.x, a.y - b.y, a.z - b.z, a.w - b.w)


def _coupling(node: HyperNode) -> float:
    # Non-numeric couplings count as 0
    value = node.properties.get("kernelCoupling")
    return value if is_numeric(value) else 0


class SpatialStore:
    """Append-only container of hyper-nodes and hyper-strokes.

    The stats are always recomputed from the nodes, strokes and w-slice; they
    are never edited on their own. ``generation`` increases whenever the
    projection inputs held here change (slice, mode, clear), so a scheduler can
    tell that an in-flight pass is stale.
    """

    def __init__(self) -> None:
        self.nodes: list[HyperNode] = []
        self.strokes: list[HyperStroke] = []
        self.stats = StoreStats()
        self.generation = 0
        self._w_slice = 0.0
        self._projection_mode = ProjectionMode.SLICE
        self._node_ids = IdSequence("node")
        self._stroke_ids = IdSequence("stroke")

    @property
    def w_slice(self) -> float:
        return self._w_slice

    @w_slice.setter
    def w_slice(self, value: float) -> None:
        self._w_slice = float(value)
        self.generation += 1
        self.recompute_stats()

    @property
    def projection_mode(self) -> ProjectionMode:
        return self._projection_mode

    @projection_mode.setter
    def projection_mode(self, value: ProjectionMode | str) -> None:
        self._projection_mode = ProjectionMode.parse(value)
        self.generation += 1

    def add_node(
        self,
        position: Point4D,
        category: Category | str,
        properties: dict[str, Any] | None = None,
        *,
        recompute: bool = True,
    ) -> HyperNode:
        """Create a node with a fresh id and append it.

        Args:
            position: 4D position of the node.
            category: Consciousness type.
            properties: Overrides merged over the property defaults.
            recompute: Whether to refresh stats now. The paint path defers
                this until the stroke is complete.

        Returns:
            The stored node.
        """
        node = HyperNode(
            id=self._node_ids.next(),
            position=position,
            category=Category(category),
            properties=merge_node_properties(properties),
        )
        self.nodes.append(node)
        if recompute:
            self.recompute_stats()
        return node

    def create_stroke(self, stroke_type: str, category: Category | str) -> HyperStroke:
        """Start a new, empty stroke with a fresh id. It is not stored yet."""
        return HyperStroke(
            id=self._stroke_ids.next(),
            stroke_type=stroke_type,
            category=Category(category),
        )

    def add_stroke(self, stroke: HyperStroke) -> None:
        """Freeze a completed stroke and append it."""
        stroke.freeze()
        self.strokes.append(stroke)
        self.recompute_stats()

    def nodes_in_slice(
        self, w_slice: float, tolerance: float = DEFAULT_SLICE_TOLERANCE
    ) -> list[HyperNode]:
        """Nodes within ``tolerance`` of ``w_slice``, in insertion order."""
        return [node for node in self.nodes if node.is_visible_at_slice(w_slice, tolerance)]

    def distance_4d(self, a: Point4D, b: Point4D) -> float:
        """Euclidean distance between two 4D points."""
        return distance_4d(a, b)

    def recompute_stats(self) -> StoreStats:
        """Recompute the aggregate statistics from the current state."""
        total = len(self.nodes)
        coupling_sum = sum(_coupling(node) for node in self.nodes)
        self.stats = StoreStats(
            total_nodes=total,
            active_nodes=len(self.nodes_in_slice(self._w_slice)),
            stroke_count=len(self.strokes),
            average_kernel_coupling=(coupling_sum / total) if total else 0.0,
        )
        return self.stats

    def clear(self) -> None:
        """Remove every node and stroke and reset slice, mode and ids."""
        self.nodes = []
        self.strokes = []
        self._w_slice = 0.0
        self._projection_mode = ProjectionMode.SLICE
        self._node_ids.reset()
        self._stroke_ids.reset()
        self.generation += 1
        self.recompute_stats()
        logger.debug("Spatial store cleared")

    def serialize(self) -> dict[str, Any]:
        """Snapshot of nodes, strokes, stats, mode and slice with wire keys."""
        return {
            "nodes": [
                {
                    "id": node.id,
                    "position4D": node.position.as_dict(),
                    "type": node.category.value,
                    "properties": dict(node.properties),
                }
                for node in self.nodes
            ],
            "strokes": [_serialize_stroke(stroke) for stroke in self.strokes],
            "stats": self.stats.to_dict(),
            "projection": self._projection_mode.value,
            "w_slice": self._w_slice,
        }


def _serialize_stroke(stroke: HyperStroke) -> dict[str, Any]:
    return {
        "id": stroke.id,
        "type": stroke.stroke_type,
        "consciousnessType": stroke.category.value,
        "points4D": [
            {"position4D": asdict(point.position), "properties": dict(point.properties)}
            for point in stroke.points
        ],
        "properties": dict(stroke.properties),
    }
