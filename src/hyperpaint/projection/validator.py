"""Parameter safety validator: classify projection parameters as safe, warning or danger."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from hyperpaint.projection.params import ProjectionParameters


class SafetyLevel(StrEnum):
    """Safety band of a single parameter."""

    SAFE = "safe"
    WARNING = "warning"
    DANGER = "danger"


@dataclass
class ValidationResult:
    """Warnings and dangers keyed by parameter name, each with a reason.

    A parameter missing from both mappings is safe.
    """

    warnings: dict[str, str] = field(default_factory=dict)
    dangers: dict[str, str] = field(default_factory=dict)

    def level(self, key: str) -> SafetyLevel:
        """Get the safety band for a parameter. Dangers win over warnings."""
        if key in self.dangers:
            return SafetyLevel.DANGER
        if key in self.warnings:
            return SafetyLevel.WARNING
        return SafetyLevel.SAFE


def validate_params(params: ProjectionParameters) -> ValidationResult:
    """Check projection parameters against the stability rules.

    Values outside their slider range are tolerated and classified like any
    other value. The function has no side effects.

    Args:
        params: Parameter set to check.

    Returns:
        ValidationResult with human-readable reasons.
    """
    result = ValidationResult()

    if params.d < 0.5:
        result.dangers["d"] = "projection unstable at d < 0.5"
    elif params.d < 1.5:
        result.warnings["d"] = "perspective may be extreme"

    if abs(params.a) > 1.5:
        result.warnings["a"] = "high w-blend may distort"
    if abs(params.b) > 1.5:
        result.warnings["b"] = "high w-blend may distort"

    if params.R < 1:
        result.dangers["R"] = "stereographic radius too small"

    if params.c < -10:
        result.warnings["c"] = "large negative offset"

    return result
