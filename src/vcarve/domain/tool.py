"""Conical cutter model."""

import math
from dataclasses import dataclass, field


@dataclass
class ConicalTool:
    """A V-bit: cutting radius grows linearly with plunge depth.

    ``radius = depth * tan(angle)``, up to the tool's maximum radius.

    Attributes:
        angle: Cone half-angle in degrees
        radius: Maximum cutting radius
    """

    angle: float
    radius: float
    _tan: float = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if not 0.0 < self.angle < 90.0:
            raise ValueError(f"Tool half-angle must be in (0, 90), got {self.angle}")
        if self.radius <= 0.0:
            raise ValueError(f"Tool radius must be positive, got {self.radius}")
        self._tan = math.tan(math.radians(self.angle))

    @property
    def diameter(self) -> float:
        return self.radius * 2

    @property
    def max_depth(self) -> float:
        """Depth at which the cone reaches its maximum radius."""
        return self.radius / self._tan

    def depth_at_radius(self, radius: float) -> float:
        """Plunge depth giving a cutting radius of ``radius``, clipped to max depth.

        Raises:
            ValueError: If ``radius`` is negative
        """
        if radius < 0:
            raise ValueError(f"Radius must not be negative, got {radius}")
        return min(radius, self.radius) / self._tan

    def radius_at_depth(self, depth: float) -> float:
        """Cutting radius at ``depth``, clipped to the maximum radius.

        Raises:
            ValueError: If ``depth`` is negative
        """
        if depth < 0:
            raise ValueError(f"Depth must not be negative, got {depth}")
        return min(depth * self._tan, self.radius)
