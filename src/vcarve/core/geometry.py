"""Geometric operations on contours and segment chains.

This module provides the mathematical utilities used by the assembler and
by tests of the orientation invariants:
- Point-in-polygon testing (ray casting algorithm)
- Line segment intersection
- Corner turn angles and total normal turning of a contour
- Detection of curve segments whose normals cannot be trusted ("hooks")

All functions are pure, stateless, and designed for use in parallel processing.
"""

from vcarve.domain import BezierSegment, Point, Segment, signed_angle


def point_in_polygon(point: Point, polygon: list[Point]) -> bool:
    """Determine if a point is inside a polygon using ray casting algorithm.

    Casts a horizontal ray from the point to the right and counts intersections
    with polygon edges. Odd number of intersections = inside, even = outside.

    Args:
        point: The point to test
        polygon: List of points forming the polygon boundary

    Returns:
        True if point is inside polygon, False otherwise

    Examples:
        >>> square = [Point(0.0, 0.0), Point(2.0, 0.0), Point(2.0, 2.0), Point(0.0, 2.0)]
        >>> point_in_polygon(Point(1.0, 1.0), square)
        True
        >>> point_in_polygon(Point(3.0, 3.0), square)
        False
    """
    n = len(polygon)
    if n < 3:
        return False

    inside = False
    x, y = point.x, point.y
    j = n - 1

    for i in range(n):
        xi, yi = polygon[i].x, polygon[i].y
        xj, yj = polygon[j].x, polygon[j].y

        if ((yi > y) != (yj > y)) and (x < (xj - xi) * (y - yi) / (yj - yi) + xi):
            inside = not inside

        j = i

    return inside


def line_intersection(p1: Point, p2: Point, p3: Point, p4: Point) -> Point | None:
    """Find intersection point of two line segments.

    Uses parametric line equations to find intersection. Returns None if lines
    are parallel or if intersection is outside either segment.

    Args:
        p1: First endpoint of segment 1
        p2: Second endpoint of segment 1
        p3: First endpoint of segment 2
        p4: Second endpoint of segment 2

    Returns:
        Point at intersection if segments intersect, None otherwise
    """
    x1, y1 = p1.x, p1.y
    x2, y2 = p2.x, p2.y
    x3, y3 = p3.x, p3.y
    x4, y4 = p4.x, p4.y

    denom = (x1 - x2) * (y3 - y4) - (y1 - y2) * (x3 - x4)

    # Lines are parallel or coincident
    if abs(denom) < 1e-10:
        return None

    t = ((x1 - x3) * (y3 - y4) - (y1 - y3) * (x3 - x4)) / denom
    u = -((x1 - x2) * (y1 - y3) - (y1 - y2) * (x1 - x3)) / denom

    if 0 <= t <= 1 and 0 <= u <= 1:
        return Point(x1 + t * (x2 - x1), y1 + t * (y2 - y1))

    return None


def corner_turn(before: Segment, after: Segment) -> float:
    """Signed turn between the end normal of one segment and the start of the next.

    Both normals are taken before the winding is applied, so the sign is the
    drawing-direction turn: positive turns counter-clockwise.
    """
    return signed_angle(before.raw_normal_at(1.0), after.raw_normal_at(0.0))


def total_turning(segments: list[Segment], samples: int = 16) -> float:
    """Total signed rotation of the normal around a closed segment chain.

    Sums the rotation inside every segment (sampled) and the jump between
    consecutive segments, wrapping from the last segment to the first. Joins
    contribute their swept rotation. For a simple closed contour the result
    is +-2*pi.

    Args:
        segments: Segments of one closed contour, in order
        samples: Intervals sampled inside each segment

    Returns:
        Total rotation in radians
    """
    total = 0.0
    previous: Point | None = None
    first: Point | None = None

    for segment in segments:
        for i in range(samples + 1):
            n = segment.raw_normal_at(i / samples)
            if previous is None:
                first = n
            else:
                total += signed_angle(previous, n)
            previous = n

    if previous is not None and first is not None:
        total += signed_angle(previous, first)

    return total


def find_normal_anomaly(segment: Segment, samples: int = 32) -> str | None:
    """Check a curve segment for geometry whose normals cannot be trusted.

    Curves whose control points make them fold back on themselves ("hooks")
    have normals near the fold that point across the curve. This is
    reported, never corrected.

    Detects:
    - cusps: the derivative vanishes strictly inside the curve
    - tangent reversal: the tangent turns by more than 90 degrees between
      two neighbouring samples
    - self-intersection: two non-adjacent pieces of the sampled curve cross

    Args:
        segment: Segment to check (non-curves are never anomalous)
        samples: Sampling density along the curve

    Returns:
        A short reason string, or None when the curve is well-behaved
    """
    if not isinstance(segment, BezierSegment):
        return None

    controls = segment.control_points
    scale = sum(b.distance_to(a) for a, b in zip(controls, controls[1:], strict=False))
    if scale == 0.0:
        return "degenerate curve"

    derivatives = [segment.derivative_at(i / samples) for i in range(samples + 1)]
    for d in derivatives[1:-1]:
        if d.length < 1e-6 * scale:
            return "cusp inside curve"

    for a, b in zip(derivatives, derivatives[1:], strict=False):
        if a.length > 0 and b.length > 0 and a.dot(b) < 0:
            return "tangent reversal"

    points = [segment.point_at(i / samples) for i in range(samples + 1)]
    for i in range(len(points) - 1):
        for j in range(i + 2, len(points) - 1):
            if i == 0 and j == len(points) - 2 and points[0] == points[-1]:
                continue
            if line_intersection(points[i], points[i + 1], points[j], points[j + 1]):
                return "self-intersection"

    return None
