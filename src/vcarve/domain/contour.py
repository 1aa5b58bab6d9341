"""Assembled contours.

A contour owns the ordered chain of segments produced for one closed
subpath. Its winding is decided once the full loop is known and is then
copied onto every segment it owns.
"""

from dataclasses import dataclass, field
from enum import Enum, auto

from vcarve.domain.geometry import Point, Rect
from vcarve.domain.segment import JoinSegment, LineSegment, Segment


class WindingDirection(Enum):
    """Contour winding direction in a y-up coordinate frame.

    Positive signed area is counter-clockwise. In y-down drawings (SVG)
    the visual sense is mirrored, which does not affect the algorithms.
    """

    CLOCKWISE = auto()
    COUNTER_CLOCKWISE = auto()


@dataclass
class Contour:
    """A closed chain of segments.

    Attributes:
        index: Contour index within the drawing
        segments: Ordered segments, joins included
        signed_area: Signed area enclosed by the segments
        winding: +1 or -1 once resolved, 0 before
        implicitly_closed: True when no close command ended the subpath
        is_hole: True when the contour is nested inside an odd number of others
    """

    index: int
    segments: list[Segment] = field(default_factory=list)
    signed_area: float = 0.0
    winding: int = 0
    implicitly_closed: bool = False
    is_hole: bool = False

    @property
    def direction(self) -> WindingDirection:
        """Drawing direction derived from the signed area."""
        if self.signed_area >= 0:
            return WindingDirection.COUNTER_CLOCKWISE
        return WindingDirection.CLOCKWISE

    @property
    def start(self) -> Point:
        return self.segments[0].start

    @property
    def join_count(self) -> int:
        return sum(1 for s in self.segments if isinstance(s, JoinSegment))

    def outline_segments(self) -> list[Segment]:
        """Segments excluding joins."""
        return [s for s in self.segments if not isinstance(s, JoinSegment)]

    def bounding_box(self) -> Rect:
        box = self.segments[0].bounding_box()
        for segment in self.segments[1:]:
            box = box.union(segment.bounding_box())
        return box

    def polygon(self, samples_per_segment: int = 8) -> list[Point]:
        """Approximate the contour with a closed polygon.

        Args:
            samples_per_segment: Intervals sampled per outline segment

        Returns:
            Polygon vertices, without repeating the first point
        """
        points: list[Point] = []
        for segment in self.outline_segments():
            count = 1 if isinstance(segment, LineSegment) else samples_per_segment
            for t in segment.sample_parameters(count)[:-1]:
                points.append(segment.point_at(t))
        return points

    def apply_winding(self, winding: int) -> None:
        """Set the winding of the contour and every segment it owns."""
        self.winding = winding
        for segment in self.segments:
            segment.winding = winding
