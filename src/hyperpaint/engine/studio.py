"""HyperspaceStudio: the single owner of parameters, store, scheduler and paint state.

Every collaborator input (slice, mode and parameter edits, paint samples,
imports) arrives here as a discrete call. Changes that affect projection
request a new pass on the scheduler; the host calls ``step()`` once per tick.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from hyperpaint.corpora.sample_space import DEFAULT_SEED, populate_sample_space
from hyperpaint.engine.paint import BrushSettings, PaintGesture
from hyperpaint.engine.scheduler import (
    DEFAULT_BATCH_SIZE,
    DEFAULT_BATCH_THRESHOLD,
    DEFAULT_MAX_INSTANCES,
    ProjectionScheduler,
)
from hyperpaint.engine.store import SpatialStore
from hyperpaint.model.point import Point4D
from hyperpaint.projection.functions import ProjectionMode
from hyperpaint.projection.params import ProjectionParameters, get_preset
from hyperpaint.projection.validator import validate_params
from hyperpaint.session.io import export_session, import_session
from hyperpaint.session.schema import CameraRecord

if TYPE_CHECKING:
    from collections.abc import Mapping

    from hyperpaint.config import StudioSettings
    from hyperpaint.model.node import Category, HyperNode
    from hyperpaint.model.stroke import HyperStroke
    from hyperpaint.projection.params import ProjectionPreset
    from hyperpaint.projection.validator import ValidationResult
    from hyperpaint.session.io import ImportReport

logger = logging.getLogger(__name__)


class HyperspaceStudio:
    """Facade over the projection core.

    Example:
        >>> studio = HyperspaceStudio()
        >>> nodes = studio.load_sample()
        >>> studio.set_mode("perspective")
        True
    """

    def __init__(
        self,
        max_instances: int = DEFAULT_MAX_INSTANCES,
        batch_threshold: int = DEFAULT_BATCH_THRESHOLD,
        batch_size: int = DEFAULT_BATCH_SIZE,
        sample_seed: int = DEFAULT_SEED,
        params: ProjectionParameters | None = None,
    ) -> None:
        self.params = params if params is not None else ProjectionParameters()
        self.store = SpatialStore()
        self.scheduler = ProjectionScheduler(
            self.store,
            self.params,
            max_instances=max_instances,
            batch_threshold=batch_threshold,
            batch_size=batch_size,
        )
        self.brush = BrushSettings()
        self.gesture = PaintGesture(self.store, self.scheduler, self.brush)
        self.camera = CameraRecord()
        self.sample_seed = sample_seed

    @classmethod
    def from_settings(cls, settings: StudioSettings | None = None) -> HyperspaceStudio:
        """Build a studio from StudioSettings (the cached settings by default)."""
        if settings is None:
            from hyperpaint.config import get_settings

            settings = get_settings()
        return cls(
            max_instances=settings.max_instances,
            batch_threshold=settings.batch_threshold,
            batch_size=settings.batch_size,
            sample_seed=settings.sample_seed,
        )

    # Projection inputs

    def set_slice(self, w_slice: float) -> bool:
        """Move the w-slice and re-project. Returns True if the pass finished."""
        self.store.w_slice = w_slice
        return self.scheduler.request_pass()

    def set_mode(self, mode: ProjectionMode | str) -> bool:
        """Switch projection mode (unknown names become slice) and re-project."""
        self.store.projection_mode = mode
        return self.scheduler.request_pass()

    def set_param(self, key: str, value: float, clamp: bool = True) -> float:
        """Set one projection parameter and re-project.

        Raises:
            KeyError: If the key is not a known parameter.
        """
        stored = self.params.set(key, value, clamp=clamp)
        self.scheduler.request_pass()
        return stored

    def apply_preset(self, name: str) -> ProjectionPreset:
        """Apply a named preset's mode and parameter values, then re-project.

        Preset values are applied as given, without clamping.

        Raises:
            UnknownPresetError: If the preset does not exist.
        """
        preset = get_preset(name)
        self.store.projection_mode = preset.mode
        self.params.apply(preset.params, clamp=False)
        self.scheduler.request_pass()
        logger.info("Applied projection preset %s", name)
        return preset

    def validate(self) -> ValidationResult:
        """Classify the current parameters."""
        return validate_params(self.params)

    # Content

    def add_node(
        self,
        position: Point4D,
        category: Category | str,
        properties: dict[str, Any] | None = None,
    ) -> HyperNode:
        """Insert a node and re-project so it shows up in the buffers."""
        node = self.store.add_node(position, category, properties)
        self.scheduler.request_pass()
        return node

    def begin_stroke(self, x: float, y: float, z: float) -> HyperStroke:
        """Start a paint gesture at a 3D pick point on the current w-slice."""
        return self.gesture.begin(Point4D(x, y, z, self.store.w_slice))

    def continue_stroke(self, x: float, y: float, z: float) -> int:
        """Extend the active gesture. Returns the number of nodes placed."""
        return self.gesture.extend(Point4D(x, y, z, self.store.w_slice))

    def end_stroke(self) -> HyperStroke | None:
        """Finish the active gesture and store its stroke."""
        return self.gesture.end()

    def load_sample(self, seed: int | None = None) -> list[HyperNode]:
        """Replace the content with the sample space."""
        self.clear()
        nodes = populate_sample_space(self.store, self.sample_seed if seed is None else seed)
        self.scheduler.request_pass()
        logger.info("Loaded sample space with %d nodes", len(nodes))
        return nodes

    def clear(self) -> None:
        """Empty the store, hide every instance and drop any active gesture."""
        self.gesture.cancel()
        self.store.clear()
        self.scheduler.reset_buffers()

    # Host integration

    def step(self) -> bool:
        """Advance the pending projection pass by one tick."""
        return self.scheduler.step()

    def export_session(self) -> dict[str, Any]:
        return export_session(self)

    def import_session(self, document: str | bytes | Mapping[str, Any]) -> ImportReport:
        return import_session(self, document)
