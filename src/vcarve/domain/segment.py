"""Outline segment model.

A contour is decomposed into segments of four kinds:
- LineSegment: A straight line
- QuadraticBezierSegment: A quadratic Bezier curve (one control point)
- CubicBezierSegment: A cubic Bezier curve (two control points)
- JoinSegment: A zero-length corner join sweeping between two normals

Every segment answers the same four questions: point_at(t), normal_at(t),
bounding_box() and closest_point(p). Normals are the tangent rotated 90
degrees counter-clockwise, multiplied by the owning contour's winding so
that they always point into the region the tool should move into.
"""

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar

from vcarve.domain import _bezier
from vcarve.domain.geometry import Point, Rect, signed_angle

# Gauss-Legendre nodes and weights on [0, 1]; exact for polynomials up to degree 5
_GL_NODES = (0.5 - 0.5 * math.sqrt(0.6), 0.5, 0.5 + 0.5 * math.sqrt(0.6))
_GL_WEIGHTS = (5.0 / 18.0, 8.0 / 18.0, 5.0 / 18.0)


class SegmentKind(str, Enum):
    """Segment variant tag, used for serialization."""

    LINE = "line"
    QUADRATIC = "quadratic"
    CUBIC = "cubic"
    JOIN = "join"


@dataclass(eq=False, kw_only=True)
class Segment(ABC):
    """Common interface of all outline segments.

    Segments compare by identity: two segments with equal coordinates are
    still different parts of the outline.

    Attributes:
        contour_index: Index of the owning contour
        winding: +1 or -1, set once the whole contour is known
    """

    kind: ClassVar[SegmentKind]

    contour_index: int = 0
    winding: int = 1
    _bbox: Rect | None = field(default=None, init=False, repr=False)

    @property
    @abstractmethod
    def start(self) -> Point:
        """First point of the segment."""

    @property
    @abstractmethod
    def end(self) -> Point:
        """Last point of the segment."""

    @abstractmethod
    def point_at(self, t: float) -> Point:
        """Position at parameter ``t`` in [0, 1]."""

    @abstractmethod
    def raw_normal_at(self, t: float) -> Point:
        """Unit normal at ``t`` before the winding is applied."""

    @abstractmethod
    def _compute_bounding_box(self) -> Rect:
        """Compute the axis-aligned bounding box."""

    @abstractmethod
    def closest_point(self, p: Point) -> tuple[Point, float]:
        """Closest point on the segment to ``p`` and the distance to it."""

    def normal_at(self, t: float) -> Point:
        """Unit normal at ``t`` pointing into the carving side."""
        return self.raw_normal_at(t) * self.winding

    def bounding_box(self) -> Rect:
        """Axis-aligned bounding box (cached)."""
        if self._bbox is None:
            self._bbox = self._compute_bounding_box()
        return self._bbox

    def derivative_at(self, t: float) -> Point:
        """Derivative of point_at with respect to ``t``."""
        return Point(0.0, 0.0)

    def area_term(self) -> float:
        """Contribution of this segment to its contour's signed area.

        Integrates ``(x dy - y dx) / 2`` over the segment. Summed over a
        closed contour this is the shoelace area, exact for curves as well:
        the integrand is a polynomial of degree <= 5 for cubics.
        """
        total = 0.0
        for t, w in zip(_GL_NODES, _GL_WEIGHTS, strict=True):
            p = self.point_at(t)
            d = self.derivative_at(t)
            total += w * (p.x * d.y - p.y * d.x)
        return total / 2.0

    def sample_parameters(self, count: int) -> list[float]:
        """Evenly spaced parameters 0..1 inclusive, ``count`` intervals."""
        return [i / count for i in range(count + 1)]

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for IPC."""
        data = self._geometry_dict()
        data["kind"] = self.kind.value
        data["contour_index"] = self.contour_index
        data["winding"] = self.winding
        return data

    @abstractmethod
    def _geometry_dict(self) -> dict[str, Any]:
        """Serialize the variant-specific geometry."""

    @staticmethod
    def from_dict(data: dict[str, Any]) -> "Segment":
        """Deserialize any segment variant from a dictionary."""
        kind = SegmentKind(data["kind"])
        common = {"contour_index": data["contour_index"], "winding": data["winding"]}
        pt = Point.from_dict

        if kind == SegmentKind.LINE:
            return LineSegment(pt(data["start"]), pt(data["end"]), **common)
        if kind == SegmentKind.QUADRATIC:
            return QuadraticBezierSegment(
                pt(data["start"]), pt(data["control"]), pt(data["end"]), **common
            )
        if kind == SegmentKind.CUBIC:
            return CubicBezierSegment(
                pt(data["start"]),
                pt(data["control1"]),
                pt(data["control2"]),
                pt(data["end"]),
                **common,
            )
        return JoinSegment(
            pt(data["anchor"]),
            pt(data["start_normal"]),
            pt(data["end_normal"]),
            **common,
        )


@dataclass(eq=False)
class LineSegment(Segment):
    """A straight line from ``p0`` to ``p1``."""

    kind: ClassVar[SegmentKind] = SegmentKind.LINE

    p0: Point
    p1: Point

    @property
    def start(self) -> Point:
        return self.p0

    @property
    def end(self) -> Point:
        return self.p1

    @property
    def vector(self) -> Point:
        return self.p1 - self.p0

    @property
    def length(self) -> float:
        return self.vector.length

    def point_at(self, t: float) -> Point:
        if t <= 0.0:
            return self.p0
        if t >= 1.0:
            return self.p1
        return self.p0 + self.vector * t

    def derivative_at(self, t: float) -> Point:  # noqa: ARG002
        return self.vector

    def raw_normal_at(self, t: float) -> Point:  # noqa: ARG002
        return self.vector.normalize().perpendicular()

    def _compute_bounding_box(self) -> Rect:
        return Rect.from_points([self.p0, self.p1])

    def closest_point(self, p: Point) -> tuple[Point, float]:
        v = self.vector
        w = p - self.p0
        c1 = w.dot(v)
        if c1 <= 0:
            return self.p0, w.length
        c2 = v.dot(v)
        if c2 <= c1:
            return self.p1, p.distance_to(self.p1)
        foot = self.p0 + v * (c1 / c2)
        return foot, p.distance_to(foot)

    def _geometry_dict(self) -> dict[str, Any]:
        return {"start": self.p0.to_dict(), "end": self.p1.to_dict()}

    def __str__(self) -> str:
        return f"Line S:[{self.p0.x:.3f}:{self.p0.y:.3f}] E:[{self.p1.x:.3f}:{self.p1.y:.3f}]"


@dataclass(eq=False, kw_only=True)
class BezierSegment(Segment):
    """Shared behaviour of quadratic and cubic curve segments."""

    projection_samples: ClassVar[int] = 32
    projection_tolerance: ClassVar[float] = 1e-6

    @property
    @abstractmethod
    def control_points(self) -> list[Point]:
        """All control points, endpoints included."""

    @property
    def start(self) -> Point:
        return self.control_points[0]

    @property
    def end(self) -> Point:
        return self.control_points[-1]

    def point_at(self, t: float) -> Point:
        return _bezier.evaluate(self.control_points, t)

    def derivative_at(self, t: float) -> Point:
        return _bezier.derivative(self.control_points, t)

    def raw_normal_at(self, t: float) -> Point:
        return _bezier.normal(self.control_points, t)

    def _compute_bounding_box(self) -> Rect:
        return _bezier.bounding_box(self.control_points)

    def closest_point(self, p: Point) -> tuple[Point, float]:
        _, point, distance = _bezier.project(
            self.control_points,
            p,
            samples=self.projection_samples,
            tolerance=self.projection_tolerance,
        )
        return point, distance


@dataclass(eq=False)
class QuadraticBezierSegment(BezierSegment):
    """A quadratic Bezier curve."""

    kind: ClassVar[SegmentKind] = SegmentKind.QUADRATIC

    p0: Point
    control: Point
    p1: Point

    @property
    def control_points(self) -> list[Point]:
        return [self.p0, self.control, self.p1]

    def _geometry_dict(self) -> dict[str, Any]:
        return {
            "start": self.p0.to_dict(),
            "control": self.control.to_dict(),
            "end": self.p1.to_dict(),
        }

    def __str__(self) -> str:
        return (
            f"Quadratic S:[{self.p0.x:.3f}:{self.p0.y:.3f}] E:[{self.p1.x:.3f}:{self.p1.y:.3f}] "
            f"C:[{self.control.x:.3f}:{self.control.y:.3f}]"
        )


@dataclass(eq=False)
class CubicBezierSegment(BezierSegment):
    """A cubic Bezier curve."""

    kind: ClassVar[SegmentKind] = SegmentKind.CUBIC

    p0: Point
    control1: Point
    control2: Point
    p1: Point

    @property
    def control_points(self) -> list[Point]:
        return [self.p0, self.control1, self.control2, self.p1]

    def _geometry_dict(self) -> dict[str, Any]:
        return {
            "start": self.p0.to_dict(),
            "control1": self.control1.to_dict(),
            "control2": self.control2.to_dict(),
            "end": self.p1.to_dict(),
        }

    def __str__(self) -> str:
        return (
            f"Cubic S:[{self.p0.x:.3f}:{self.p0.y:.3f}] E:[{self.p1.x:.3f}:{self.p1.y:.3f}] "
            f"C1:[{self.control1.x:.3f}:{self.control1.y:.3f}] "
            f"C2:[{self.control2.x:.3f}:{self.control2.y:.3f}]"
        )


@dataclass(eq=False)
class JoinSegment(Segment):
    """A zero-length segment bridging a jump in the outline normal.

    The join sits on a single anchor point. Its normal sweeps along the
    shorter arc from ``start_normal`` to ``end_normal`` so the tool travels
    around the corner instead of jumping across it. When the turn has the
    same sign as the contour winding the corner encloses the carving side,
    no relief is needed, and the join reports a fixed mid-normal instead.

    ``start_normal`` and ``end_normal`` are stored before the winding is
    applied, like every other segment's geometry.
    """

    kind: ClassVar[SegmentKind] = SegmentKind.JOIN

    anchor: Point
    start_normal: Point
    end_normal: Point

    @property
    def start(self) -> Point:
        return self.anchor

    @property
    def end(self) -> Point:
        return self.anchor

    @property
    def sweep_angle(self) -> float:
        """Signed shorter-path rotation from start to end normal."""
        return signed_angle(self.start_normal, self.end_normal)

    @property
    def sweeps(self) -> bool:
        """True when the corner needs relief (turn opposite to the winding)."""
        return self.sweep_angle * self.winding < 0

    def point_at(self, t: float) -> Point:  # noqa: ARG002
        return self.anchor

    def raw_normal_at(self, t: float) -> Point:
        angle = self.sweep_angle
        if self.sweeps:
            return self.start_normal.rotate(angle * t)
        return self.start_normal.rotate(angle / 2)

    def _compute_bounding_box(self) -> Rect:
        return Rect(self.anchor.x, self.anchor.y, self.anchor.x, self.anchor.y)

    def closest_point(self, p: Point) -> tuple[Point, float]:
        return self.anchor, p.distance_to(self.anchor)

    def _geometry_dict(self) -> dict[str, Any]:
        return {
            "anchor": self.anchor.to_dict(),
            "start_normal": self.start_normal.to_dict(),
            "end_normal": self.end_normal.to_dict(),
        }

    def __str__(self) -> str:
        return (
            f"Join A:[{self.anchor.x:.3f}:{self.anchor.y:.3f}] "
            f"sweep:{math.degrees(self.sweep_angle):.1f}"
        )
