"""4D-to-3D projection: parameters, projection functions, parameter validation."""

from hyperpaint.projection.functions import (
    MIN_DENOMINATOR,
    ProjectionMode,
    project_orthogonal,
    project_perspective,
    project_point,
    project_slice,
    project_stereographic,
)
from hyperpaint.projection.params import (
    PARAMETER_KEYS,
    PROJECTION_PRESETS,
    ParameterRange,
    ProjectionParameters,
    ProjectionPreset,
    UnknownPresetError,
    get_preset,
)
from hyperpaint.projection.validator import SafetyLevel, ValidationResult, validate_params

__all__ = [
    "MIN_DENOMINATOR",
    "PARAMETER_KEYS",
    "PROJECTION_PRESETS",
    "ParameterRange",
    "ProjectionMode",
    "ProjectionParameters",
    "ProjectionPreset",
    "SafetyLevel",
    "UnknownPresetError",
    "ValidationResult",
    "get_preset",
    "project_orthogonal",
    "project_perspective",
    "project_point",
    "project_slice",
    "project_stereographic",
    "validate_params",
]
