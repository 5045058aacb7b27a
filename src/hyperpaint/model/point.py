"""Point dataclasses: positions in 4D space and their 3D projections."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Point4D:
    """A position in 4D space. Immutable once created."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    w: float = 0.0  # fourth-dimension coordinate, compared against the w-slice

    def as_dict(self) -> dict[str, float]:
        """Return the point as a plain ``{x, y, z, w}`` dict."""
        return {"x": self.x, "y": self.y, "z": self.z, "w": self.w}


@dataclass(frozen=True)
class Point3D:
    """A projected position in 3D space."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def as_dict(self) -> dict[str, float]:
        """Return the point as a plain ``{x, y, z}`` dict."""
        return {"x": self.x, "y": self.y, "z": self.z}
