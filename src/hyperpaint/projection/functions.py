"""Projection functions: map a 4D point to 3D under one of four projection modes.

All four functions are pure and deterministic. ``project_point`` dispatches on
the mode and falls back to ``slice`` for anything it does not recognize.
"""

from __future__ import annotations

import math
from enum import StrEnum
from typing import TYPE_CHECKING

from hyperpaint.model.point import Point3D, Point4D

if TYPE_CHECKING:
    from hyperpaint.projection.params import ProjectionParameters

# Denominators smaller than this in magnitude are clamped to it, keeping the sign
MIN_DENOMINATOR = 1e-6


class ProjectionMode(StrEnum):
    """The four 4D-to-3D projection models."""

    SLICE = "slice"
    PERSPECTIVE = "perspective"
    ORTHOGONAL = "orthogonal"
    STEREOGRAPHIC = "stereographic"

    @classmethod
    def parse(cls, value: object) -> ProjectionMode:
        """Convert a mode name to a ProjectionMode, defaulting to SLICE."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.lower())
            except ValueError:
                pass
        return cls.SLICE


def _safe_denominator(value: float) -> float:
    """Clamp a denominator away from zero so the scale stays finite."""
    if abs(value) < MIN_DENOMINATOR:
        return math.copysign(MIN_DENOMINATOR, value) if value != 0.0 else MIN_DENOMINATOR
    return value


def project_slice(point: Point4D) -> Point3D:
    """Drop w. No parameter dependence."""
    return Point3D(point.x, point.y, point.z)


def project_perspective(
    point: Point4D, w_slice: float, params: ProjectionParameters
) -> Point3D:
    """Scale by d / (d + (w - w_slice)).

    Points on the slice are unscaled; points further along w shrink.
    """
    d = params.d
    s = d / _safe_denominator(d + (point.w - w_slice))
    return Point3D(point.x * s, point.y * s, point.z * s)


def project_orthogonal(
    point: Point4D, w_slice: float, params: ProjectionParameters
) -> Point3D:
    """Shear x and z by w. The slice coordinate is intentionally unused."""
    return Point3D(point.x + params.a * point.w, point.y, point.z + params.b * point.w)


def project_stereographic(
    point: Point4D, w_slice: float, params: ProjectionParameters
) -> Point3D:
    """Scale by R / (wo + R) where wo = (w - w_slice) + c."""
    radius = params.R
    wo = (point.w - w_slice) + params.c
    s = radius / _safe_denominator(wo + radius)
    return Point3D(point.x * s, point.y * s, point.z * s)


def project_point(
    point: Point4D,
    mode: ProjectionMode | str,
    w_slice: float,
    params: ProjectionParameters,
) -> Point3D:
    """Project a 4D point into 3D.

    Args:
        point: The 4D position.
        mode: Projection mode (enum or name). Unknown names fall back to slice.
        w_slice: Current w-slice coordinate.
        params: Projection parameters to read d, a, b, R, c from.

    Returns:
        The projected 3D point.
    """
    match ProjectionMode.parse(mode):
        case ProjectionMode.PERSPECTIVE:
            return project_perspective(point, w_slice, params)
        case ProjectionMode.ORTHOGONAL:
            return project_orthogonal(point, w_slice, params)
        case ProjectionMode.STEREOGRAPHIC:
            return project_stereographic(point, w_slice, params)
        case _:
            return project_slice(point)
