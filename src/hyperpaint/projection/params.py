"""Projection parameters: slider-style ranges for d, a, b, R, c and named presets."""

from __future__ import annotations

import logging
import math
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)

PARAMETER_KEYS: tuple[str, ...] = ("d", "a", "b", "R", "c")


@dataclass
class ParameterRange:
    """A single tunable parameter with its slider bounds.

    ``value`` is not clamped on direct assignment; only ``clamp`` does that.
    """

    value: float
    min_val: float
    max_val: float
    step: float

    def clamp(self, value: float) -> float:
        """Clamp a value into [min_val, max_val]."""
        return max(self.min_val, min(self.max_val, value))


def _default_ranges() -> dict[str, ParameterRange]:
    return {
        "d": ParameterRange(value=8.0, min_val=2.0, max_val=24.0, step=0.5),  # perspective distance
        "a": ParameterRange(value=0.2, min_val=-1.0, max_val=1.0, step=0.01),  # x shear from w
        "b": ParameterRange(value=0.2, min_val=-1.0, max_val=1.0, step=0.01),  # z shear from w
        "R": ParameterRange(value=12.0, min_val=2.0, max_val=24.0, step=0.5),  # stereographic radius
        "c": ParameterRange(value=8.0, min_val=-12.0, max_val=24.0, step=0.5),  # stereographic offset
    }


def is_numeric(value: Any) -> bool:
    """Check that a value is a real finite-or-infinite number and not a bool."""
    return isinstance(value, int | float) and not isinstance(value, bool) and not math.isnan(value)


@dataclass
class ProjectionParameters:
    """The parameter set shared by the projection functions and the validator.

    Instances are passed explicitly to every consumer; there is no global.
    """

    ranges: dict[str, ParameterRange] = field(default_factory=_default_ranges)

    def __getitem__(self, key: str) -> ParameterRange:
        return self.ranges[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self.ranges)

    def __contains__(self, key: object) -> bool:
        return key in self.ranges

    @property
    def d(self) -> float:
        return self.ranges["d"].value

    @property
    def a(self) -> float:
        return self.ranges["a"].value

    @property
    def b(self) -> float:
        return self.ranges["b"].value

    @property
    def R(self) -> float:  # noqa: N802
        return self.ranges["R"].value

    @property
    def c(self) -> float:
        return self.ranges["c"].value

    def value(self, key: str) -> float:
        """Get the current value of a parameter.

        Raises:
            KeyError: If the key is not a known parameter.
        """
        return self.ranges[key].value

    def set(self, key: str, value: float, clamp: bool = True) -> float:
        """Set a parameter value, clamping into its range by default.

        Args:
            key: Parameter key (d, a, b, R, c).
            value: New value.
            clamp: Whether to clamp into [min_val, max_val] like a slider would.

        Returns:
            The value actually stored.

        Raises:
            KeyError: If the key is not a known parameter.
        """
        param = self.ranges[key]
        param.value = param.clamp(float(value)) if clamp else float(value)
        return param.value

    def apply(self, values: Mapping[str, Any], clamp: bool = True) -> list[str]:
        """Apply a mapping of values, skipping unknown keys and non-numeric values.

        Returns:
            Keys that were ignored.
        """
        ignored: list[str] = []
        for key, raw in values.items():
            if key not in self.ranges or not is_numeric(raw):
                logger.warning("Ignoring projection parameter %s=%r", key, raw)
                ignored.append(key)
                continue
            self.set(key, raw, clamp=clamp)
        return ignored

    def values(self) -> dict[str, float]:
        """Snapshot of the current values as a plain dict."""
        return {key: param.value for key, param in self.ranges.items()}


class UnknownPresetError(KeyError):
    """Raised when a projection preset name is not registered."""

    pass


@dataclass(frozen=True)
class ProjectionPreset:
    """A named combination of projection mode and parameter values."""

    name: str
    mode: str
    params: dict[str, float]


PROJECTION_PRESETS: dict[str, ProjectionPreset] = {
    "flat-slice": ProjectionPreset(
        name="Flat Slice",
        mode="slice",
        params={"d": 8, "a": 0, "b": 0, "R": 12, "c": 8},
    ),
    "deep-perspective": ProjectionPreset(
        name="Deep Perspective",
        mode="perspective",
        params={"d": 4, "a": 0.2, "b": 0.2, "R": 12, "c": 8},
    ),
    "w-parallax": ProjectionPreset(
        name="W-Parallax",
        mode="orthogonal",
        params={"d": 8, "a": 0.6, "b": 0.4, "R": 12, "c": 8},
    ),
    "hyperbolic-compress": ProjectionPreset(
        name="Hyperbolic Compress",
        mode="stereographic",
        params={"d": 8, "a": 0.2, "b": 0.2, "R": 6, "c": 4},
    ),
    "extreme-perspective": ProjectionPreset(
        name="Extreme Perspective",
        mode="perspective",
        params={"d": 1.5, "a": 0.2, "b": 0.2, "R": 12, "c": 8},
    ),
}


def get_preset(name: str) -> ProjectionPreset:
    """Look up a preset by key.

    Raises:
        UnknownPresetError: If no preset is registered under ``name``.
    """
    try:
        return PROJECTION_PRESETS[name]
    except KeyError:
        valid = ", ".join(PROJECTION_PRESETS)
        raise UnknownPresetError(f"Unknown preset: {name}. Valid presets: {valid}") from None
