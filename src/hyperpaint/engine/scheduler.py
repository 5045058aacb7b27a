"""Incremental projection scheduler: re-project the store into bounded instance buffers.

Small node sets are re-projected synchronously. Large ones are processed in
fixed-size chunks, one chunk per host tick, with a resumable PassState carrying
the per-category write cursors between ticks.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from hyperpaint.model.node import DEFAULT_SLICE_TOLERANCE, Category, HyperNode
from hyperpaint.projection.functions import project_point
from hyperpaint.projection.params import is_numeric

if TYPE_CHECKING:
    from hyperpaint.engine.store import SpatialStore
    from hyperpaint.model.point import Point4D
    from hyperpaint.projection.params import ProjectionParameters

logger = logging.getLogger(__name__)

DEFAULT_MAX_INSTANCES = 20000
DEFAULT_BATCH_THRESHOLD = 5000  # node count at which passes become batched
DEFAULT_BATCH_SIZE = 500  # nodes per chunk
INSTANCE_SCALE = 0.1  # world-space scale per unit of intensity / brush size


@dataclass(frozen=True)
class InstanceTransform:
    """Render-ready transform for one instance: a position and a uniform scale."""

    x: float
    y: float
    z: float
    scale: float


# Zero-scale transform written into every unused slot
HIDDEN_TRANSFORM = InstanceTransform(0.0, 0.0, 0.0, 0.0)


class InstanceBuffer:
    """Fixed-capacity transform slots for one category.

    Slots at or beyond ``count`` are inert and should not be drawn.
    """

    def __init__(self, category: Category, capacity: int) -> None:
        self.category = category
        self.capacity = capacity
        self.slots: list[InstanceTransform] = [HIDDEN_TRANSFORM] * capacity
        self.count = 0

    @property
    def is_full(self) -> bool:
        return self.count >= self.capacity

    def write(self, index: int, transform: InstanceTransform) -> None:
        self.slots[index] = transform

    def append(self, transform: InstanceTransform) -> bool:
        """Write at the next free slot. Returns False when the buffer is full."""
        if self.is_full:
            return False
        self.slots[self.count] = transform
        self.count += 1
        return True

    def hide_from(self, index: int) -> None:
        """Reset every slot from ``index`` to the end to the hidden transform."""
        if index < self.capacity:
            self.slots[index:] = [HIDDEN_TRANSFORM] * (self.capacity - index)

    def visible(self) -> list[InstanceTransform]:
        """The currently valid transforms."""
        return self.slots[: self.count]


@dataclass
class PassState:
    """Progress of one full projection pass, threaded through successive ticks."""

    generation: int  # store generation the pass was started against
    param_values: dict[str, float]  # parameter snapshot the pass was started with
    next_index: int = 0  # next node to scan
    cursors: dict[Category, int] = field(default_factory=lambda: {c: 0 for c in Category})
    ticks: int = 0
    dropped: int = 0  # visible nodes that found their category buffer full


def instance_scale(node: HyperNode) -> float:
    """Uniform render scale for a node, derived from its intensity.

    A missing, zero or non-numeric intensity scales as 1.
    """
    intensity = node.properties.get("intensity")
    if not is_numeric(intensity) or not intensity:
        intensity = 1
    return intensity * INSTANCE_SCALE


class ProjectionScheduler:
    """Keep per-category instance buffers in sync with a SpatialStore.

    Call ``request_pass()`` whenever the slice, mode or parameters change, and
    ``step()`` once per host tick while ``pending`` is true. A request made
    while a pass is in flight discards that pass and starts over against the
    latest state; ``step()`` does the same when it notices the store or the
    parameters changed underneath it.
    """

    def __init__(
        self,
        store: SpatialStore,
        params: ProjectionParameters,
        max_instances: int = DEFAULT_MAX_INSTANCES,
        batch_threshold: int = DEFAULT_BATCH_THRESHOLD,
        batch_size: int = DEFAULT_BATCH_SIZE,
        on_pass_complete: Callable[[ProjectionScheduler], None] | None = None,
    ) -> None:
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        self.store = store
        self.params = params
        self.max_instances = max_instances
        self.batch_threshold = batch_threshold
        self.batch_size = batch_size
        self.on_pass_complete = on_pass_complete

        capacity = max_instances // len(Category)
        self.buffers: dict[Category, InstanceBuffer] = {
            category: InstanceBuffer(category, capacity) for category in Category
        }

        self.completed_passes = 0
        self.restarted_passes = 0
        self.last_pass_ticks = 0
        self._pass: PassState | None = None

    @property
    def capacity(self) -> int:
        """Slots per category."""
        return self.max_instances // len(Category)

    @property
    def pending(self) -> bool:
        """Whether a batched pass is in flight."""
        return self._pass is not None

    @property
    def active_instance_count(self) -> dict[Category, int]:
        return {category: buffer.count for category, buffer in self.buffers.items()}

    @property
    def active_instances(self) -> int:
        return sum(buffer.count for buffer in self.buffers.values())

    def request_pass(self) -> bool:
        """Start a full re-projection of the store.

        Returns:
            True if the pass completed synchronously, False if it was batched
            and needs further ``step()`` calls.
        """
        if self._pass is not None:
            self.restarted_passes += 1
            logger.debug(
                "Discarding in-flight projection pass at node %d", self._pass.next_index
            )
            self._pass = None

        state = self._new_pass()
        total = len(self.store.nodes)
        if total < self.batch_threshold:
            self._project_range(state, 0, total)
            state.next_index = total
            state.ticks = 1
            self._finish(state)
            return True

        logger.debug("Starting batched projection pass over %d nodes", total)
        self._pass = state
        return self._process_chunk(state)

    def step(self) -> bool:
        """Process one chunk of the pending pass.

        Returns:
            True when no pass remains pending.
        """
        if self._pass is None:
            return True
        if self._is_stale(self._pass):
            logger.debug("Projection inputs changed mid-pass, restarting")
            return self.request_pass()
        return self._process_chunk(self._pass)

    def run_until_complete(self) -> int:
        """Drive ``step()`` until the current pass finishes.

        Returns:
            Number of ticks the pass consumed (0 if nothing was pending).
        """
        if self._pass is None:
            return 0
        while not self.step():
            pass
        return self.last_pass_ticks

    def add_instance(self, position: Point4D, category: Category | str, scale: float) -> bool:
        """Append one projected point for an in-progress paint gesture.

        Does not recompute stats. While a batched pass is in flight nothing is
        written; the pass reads the live node list and will place the point.

        Returns:
            True if the transform was written, False if it was dropped.
        """
        if self._pass is not None:
            return False
        buffer = self.buffers[Category(category)]
        if buffer.is_full:
            logger.debug("Instance buffer for %s full, dropping point", buffer.category)
            return False
        projected = project_point(
            position, self.store.projection_mode, self.store.w_slice, self.params
        )
        return buffer.append(InstanceTransform(projected.x, projected.y, projected.z, scale))

    def reset_buffers(self) -> None:
        """Hide every slot, zero the counts and drop any pending pass."""
        self._pass = None
        for buffer in self.buffers.values():
            buffer.hide_from(0)
            buffer.count = 0

    def _new_pass(self) -> PassState:
        return PassState(generation=self.store.generation, param_values=self.params.values())

    def _is_stale(self, state: PassState) -> bool:
        return (
            state.generation != self.store.generation
            or state.param_values != self.params.values()
        )

    def _process_chunk(self, state: PassState) -> bool:
        total = len(self.store.nodes)
        end = min(state.next_index + self.batch_size, total)
        self._project_range(state, state.next_index, end)
        state.next_index = end
        state.ticks += 1

        if end >= total:
            self._pass = None
            self._finish(state)
            return True

        # Counts track the running cursors so the renderer only sees written slots
        for category, buffer in self.buffers.items():
            buffer.count = state.cursors[category]
        return False

    def _project_range(self, state: PassState, start: int, end: int) -> None:
        nodes = self.store.nodes
        mode = self.store.projection_mode
        w_slice = self.store.w_slice

        for index in range(start, end):
            node = nodes[index]
            if not node.is_visible_at_slice(w_slice, DEFAULT_SLICE_TOLERANCE):
                continue
            buffer = self.buffers[node.category]
            cursor = state.cursors[node.category]
            if cursor >= buffer.capacity:
                state.dropped += 1
                continue
            projected = node.project(mode, w_slice, self.params)
            buffer.write(
                cursor,
                InstanceTransform(projected.x, projected.y, projected.z, instance_scale(node)),
            )
            state.cursors[node.category] = cursor + 1

    def _finish(self, state: PassState) -> None:
        for category, buffer in self.buffers.items():
            cursor = state.cursors[category]
            buffer.hide_from(cursor)
            buffer.count = cursor

        self.completed_passes += 1
        self.last_pass_ticks = state.ticks
        self.store.recompute_stats()

        if state.dropped:
            logger.debug("Projection pass dropped %d instances over capacity", state.dropped)
        logger.debug(
            "Projection pass complete: ticks=%d, instances=%d",
            state.ticks,
            self.active_instances,
        )

        if self.on_pass_complete is not None:
            self.on_pass_complete(self)
