"""Core geometric value types.

This module defines the 2D primitives shared by every other module:
- Point: An immutable 2D point/vector with vector algebra
- Rect: An axis-aligned bounding box with a box-to-box distance metric
- UNINITIALIZED: Sentinel point meaning "no current point yet"
"""

import math
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class Point:
    """A point (or vector) in 2D space.

    Immutable and hashable for use in sets/dicts.

    Attributes:
        x: X coordinate in drawing units
        y: Y coordinate in drawing units
    """

    x: float
    y: float

    def __add__(self, other: "Point") -> "Point":
        return Point(self.x + other.x, self.y + other.y)

    def __sub__(self, other: "Point") -> "Point":
        return Point(self.x - other.x, self.y - other.y)

    def __mul__(self, factor: float) -> "Point":
        return Point(self.x * factor, self.y * factor)

    __rmul__ = __mul__

    def __truediv__(self, divisor: float) -> "Point":
        return Point(self.x / divisor, self.y / divisor)

    def __neg__(self) -> "Point":
        return Point(-self.x, -self.y)

    @property
    def length(self) -> float:
        """Euclidean length of the vector."""
        return math.hypot(self.x, self.y)

    @property
    def angle(self) -> float:
        """Polar angle of the vector in radians, in (-pi, pi]."""
        return math.atan2(self.y, self.x)

    @property
    def is_uninitialized(self) -> bool:
        """True for the NaN sentinel used before a current point exists."""
        return math.isnan(self.x) or math.isnan(self.y)

    def normalize(self) -> "Point":
        """Return the unit vector in the same direction.

        Raises:
            ZeroDivisionError: If the vector has zero length
        """
        length = self.length
        if length == 0.0:
            raise ZeroDivisionError("Cannot normalize a zero-length vector")
        return Point(self.x / length, self.y / length)

    def dot(self, other: "Point") -> float:
        """Dot product with another vector."""
        return self.x * other.x + self.y * other.y

    def cross(self, other: "Point") -> float:
        """Z component of the 3D cross product with another vector."""
        return self.x * other.y - self.y * other.x

    def perpendicular(self) -> "Point":
        """Vector rotated 90 degrees counter-clockwise."""
        return Point(-self.y, self.x)

    def rotate(self, angle: float) -> "Point":
        """Vector rotated counter-clockwise by ``angle`` radians."""
        cos_a = math.cos(angle)
        sin_a = math.sin(angle)
        return Point(self.x * cos_a - self.y * sin_a, self.x * sin_a + self.y * cos_a)

    def distance_to(self, other: "Point") -> float:
        """Euclidean distance to another point."""
        return math.hypot(self.x - other.x, self.y - other.y)

    def is_close(self, other: "Point", tolerance: float) -> bool:
        """Check whether another point lies within ``tolerance``."""
        return self.distance_to(other) <= tolerance

    def rounded(self, decimals: int) -> "Point":
        """Point with both coordinates rounded to ``decimals`` places."""
        return Point(round(self.x, decimals) + 0.0, round(self.y, decimals) + 0.0)

    def to_tuple(self) -> tuple[float, float]:
        """Convert to simple (x, y) tuple."""
        return (self.x, self.y)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for IPC."""
        return {"x": self.x, "y": self.y}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Point":
        """Deserialize from dictionary."""
        return cls(x=data["x"], y=data["y"])


UNINITIALIZED = Point(math.nan, math.nan)


def signed_angle(a: Point, b: Point) -> float:
    """Signed rotation from vector ``a`` to vector ``b``.

    Uses ``atan2(cross, dot)`` so the result is the shorter rotation, in
    (-pi, pi]. Positive means counter-clockwise.

    Examples:
        >>> signed_angle(Point(1, 0), Point(0, 1))
        1.5707963267948966
    """
    return math.atan2(a.cross(b), a.dot(b))


@dataclass(frozen=True, slots=True)
class Rect:
    """An axis-aligned rectangle.

    Attributes:
        min_x: Left edge
        min_y: Bottom edge (top in y-down drawings)
        max_x: Right edge
        max_y: Top edge (bottom in y-down drawings)
    """

    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @classmethod
    def from_points(cls, points: Iterable[Point]) -> "Rect":
        """Smallest rectangle enclosing all ``points``.

        Raises:
            ValueError: If ``points`` is empty
        """
        pts = list(points)
        if not pts:
            raise ValueError("Cannot build a bounding box from no points")
        xs = [p.x for p in pts]
        ys = [p.y for p in pts]
        return cls(min(xs), min(ys), max(xs), max(ys))

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    @property
    def mid_x(self) -> float:
        return (self.min_x + self.max_x) / 2

    @property
    def mid_y(self) -> float:
        return (self.min_y + self.max_y) / 2

    def distance_to(self, other: "Rect") -> float:
        """Largest horizontal/vertical gap between this and another rectangle.

        Negative values mean the rectangles overlap along both axes.

        Examples:
            >>> Rect(0, 0, 1, 1).distance_to(Rect(3, 0, 4, 1))
            2.0
        """
        return max(
            abs(self.mid_x - other.mid_x) - (self.width + other.width) / 2,
            abs(self.mid_y - other.mid_y) - (self.height + other.height) / 2,
        )

    def union(self, other: "Rect") -> "Rect":
        """Smallest rectangle enclosing both rectangles."""
        return Rect(
            min(self.min_x, other.min_x),
            min(self.min_y, other.min_y),
            max(self.max_x, other.max_x),
            max(self.max_y, other.max_y),
        )

    def contains(self, point: Point) -> bool:
        """Check whether a point lies inside or on the rectangle."""
        return self.min_x <= point.x <= self.max_x and self.min_y <= point.y <= self.max_y
