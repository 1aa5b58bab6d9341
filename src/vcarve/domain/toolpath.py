"""Toolpath output records."""

from dataclasses import dataclass
from typing import Any

from vcarve.domain.geometry import Point


@dataclass(frozen=True, slots=True)
class ToolPathSegment:
    """One sample of the toolpath.

    Attributes:
        center: Tool center point in the drawing plane
        depth: Cutting depth (positive, into the stock)
        contour_index: Contour the sample belongs to
    """

    center: Point
    depth: float
    contour_index: int

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for IPC."""
        return {
            "center": self.center.to_dict(),
            "depth": self.depth,
            "contour_index": self.contour_index,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ToolPathSegment":
        """Deserialize from dictionary."""
        return cls(
            center=Point.from_dict(data["center"]),
            depth=data["depth"],
            contour_index=data["contour_index"],
        )
