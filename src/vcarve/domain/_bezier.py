"""Internal Bezier curve math.

This is an internal module holding the parametric helpers used by the curve
segments. Curves are given as their control points in order:
[start, control, end] for quadratics, [start, control1, control2, end] for
cubics. Not intended for public use.
"""

import math

from vcarve.domain.geometry import Point, Rect

# Nudge used to step off a zero-length derivative at cusps
_CUSP_NUDGE = 1e-4

_GOLDEN = (math.sqrt(5.0) - 1.0) / 2.0


def evaluate(points: list[Point], t: float) -> Point:
    """Position on the curve at parameter ``t``.

    Uses the Bernstein-weighted combination of the control points. The
    endpoints are returned exactly at t=0 and t=1 so that adjacent segments
    share coordinate-identical vertices.

    Args:
        points: 3 (quadratic) or 4 (cubic) control points
        t: Curve parameter in [0, 1]

    Returns:
        Point on the curve
    """
    if t <= 0.0:
        return points[0]
    if t >= 1.0:
        return points[-1]

    mt = 1.0 - t
    if len(points) == 3:
        p0, p1, p2 = points
        a, b, c = mt * mt, 2 * mt * t, t * t
        return Point(
            a * p0.x + b * p1.x + c * p2.x,
            a * p0.y + b * p1.y + c * p2.y,
        )

    p0, p1, p2, p3 = points
    a, b, c, d = mt * mt * mt, 3 * mt * mt * t, 3 * mt * t * t, t * t * t
    return Point(
        a * p0.x + b * p1.x + c * p2.x + d * p3.x,
        a * p0.y + b * p1.y + c * p2.y + d * p3.y,
    )


def derivative(points: list[Point], t: float) -> Point:
    """First derivative (tangent vector, not normalized) at ``t``."""
    mt = 1.0 - t
    if len(points) == 3:
        p0, p1, p2 = points
        return (p1 - p0) * (2 * mt) + (p2 - p1) * (2 * t)

    p0, p1, p2, p3 = points
    return (
        (p1 - p0) * (3 * mt * mt)
        + (p2 - p1) * (6 * mt * t)
        + (p3 - p2) * (3 * t * t)
    )


def tangent(points: list[Point], t: float) -> Point:
    """Unit tangent at ``t``.

    At a cusp (control point coinciding with an endpoint) the derivative
    vanishes; the direction is then taken slightly inside the curve, and
    finally from the chord.

    Raises:
        ZeroDivisionError: If every control point coincides
    """
    d = derivative(points, t)
    if d.length > 1e-12:
        return d.normalize()

    nudged = t + _CUSP_NUDGE if t < 0.5 else t - _CUSP_NUDGE
    d = derivative(points, nudged)
    if d.length > 1e-12:
        return d.normalize()

    return (points[-1] - points[0]).normalize()


def normal(points: list[Point], t: float) -> Point:
    """Unit normal at ``t``: the tangent rotated 90 degrees counter-clockwise."""
    return tangent(points, t).perpendicular()


def _axis_extrema_quadratic(a: float, b: float, c: float) -> list[float]:
    denominator = a - 2 * b + c
    if abs(denominator) < 1e-12:
        return []
    t = (a - b) / denominator
    return [t] if 0.0 < t < 1.0 else []


def _axis_extrema_cubic(a: float, b: float, c: float, d: float) -> list[float]:
    # Derivative coefficients of the cubic Bernstein polynomial, divided by 3
    da, db, dc = b - a, c - b, d - c
    qa = da - 2 * db + dc
    qb = 2 * (db - da)
    qc = da

    if abs(qa) < 1e-12:
        if abs(qb) < 1e-12:
            return []
        roots = [-qc / qb]
    else:
        discriminant = qb * qb - 4 * qa * qc
        if discriminant < 0:
            return []
        root = math.sqrt(discriminant)
        roots = [(-qb + root) / (2 * qa), (-qb - root) / (2 * qa)]

    return [t for t in roots if 0.0 < t < 1.0]


def bounding_box(points: list[Point]) -> Rect:
    """Tight axis-aligned bounding box of the curve.

    Evaluates the curve at its endpoints and at every parameter where the
    derivative of one coordinate vanishes.
    """
    if len(points) == 3:
        ts = _axis_extrema_quadratic(*(p.x for p in points))
        ts += _axis_extrema_quadratic(*(p.y for p in points))
    else:
        ts = _axis_extrema_cubic(*(p.x for p in points))
        ts += _axis_extrema_cubic(*(p.y for p in points))

    candidates = [points[0], points[-1]] + [evaluate(points, t) for t in ts]
    return Rect.from_points(candidates)


def project(
    points: list[Point],
    target: Point,
    samples: int = 32,
    tolerance: float = 1e-6,
    max_iterations: int = 64,
) -> tuple[float, Point, float]:
    """Find the point on the curve closest to ``target``.

    There is no closed form for cubic curves, so the curve is first sampled
    at ``samples`` evenly spaced parameters; the best sample's neighbourhood
    is then narrowed with a golden-section search on the squared distance.

    Args:
        points: Control points of the curve
        target: Query point
        samples: Number of intervals in the initial lookup table
        tolerance: Parameter-space width at which refinement stops
        max_iterations: Hard cap on refinement iterations

    Returns:
        Tuple of (t, closest point, distance)
    """

    def dist2(t: float) -> float:
        p = evaluate(points, t)
        dx = p.x - target.x
        dy = p.y - target.y
        return dx * dx + dy * dy

    best_index = 0
    best_value = math.inf
    for i in range(samples + 1):
        value = dist2(i / samples)
        if value < best_value:
            best_value = value
            best_index = i

    lo = max(0.0, (best_index - 1) / samples)
    hi = min(1.0, (best_index + 1) / samples)

    x1 = hi - _GOLDEN * (hi - lo)
    x2 = lo + _GOLDEN * (hi - lo)
    f1 = dist2(x1)
    f2 = dist2(x2)
    iterations = 0
    while hi - lo > tolerance and iterations < max_iterations:
        if f1 < f2:
            hi, x2, f2 = x2, x1, f1
            x1 = hi - _GOLDEN * (hi - lo)
            f1 = dist2(x1)
        else:
            lo, x1, f1 = x1, x2, f2
            x2 = lo + _GOLDEN * (hi - lo)
            f2 = dist2(x2)
        iterations += 1

    t = (lo + hi) / 2
    best_t = best_index / samples
    # Refinement never does worse than the best lookup sample (endpoints included)
    if dist2(t) > best_value:
        t = best_t

    closest = evaluate(points, t)
    return t, closest, closest.distance_to(target)
