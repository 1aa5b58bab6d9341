"""Path assembly and orientation resolution.

This module turns the absolute draw operations of one drawing into closed
contours of segments whose normals all point into the carving side:

1. Walk the operations, building one segment per line/curve step. A close
   step appends a closing line when a position gap remains.
2. At closure, sum the signed-area terms of the contour's segments; the sign
   gives the winding (+1 counter-clockwise, -1 clockwise).
3. Optionally flip the winding of contours nested inside an odd number of
   others (holes), so the tool carves the material around them.
4. Insert join segments at corners where the material wraps around the
   tool, including the closure corner.
5. Report curve segments whose normals cannot be trusted ("hooks").
"""

from dataclasses import dataclass, field

import structlog

from vcarve.core.geometry import corner_turn, find_normal_anomaly, point_in_polygon
from vcarve.domain import (
    UNINITIALIZED,
    Contour,
    CubicBezierSegment,
    DrawCommand,
    DrawOperation,
    JoinSegment,
    LineSegment,
    Point,
    QuadraticBezierSegment,
    Segment,
)
from vcarve.exceptions import PathAssemblyError

logger = structlog.get_logger(__name__)

# Lines shorter than this carry no usable direction
_MIN_SEGMENT_LENGTH = 1e-9


@dataclass(frozen=True)
class NormalWarning:
    """A segment whose normals may point across the outline.

    Attributes:
        contour_index: Contour owning the segment
        segment_index: Position of the segment within the contour
        reason: What was detected
    """

    contour_index: int
    segment_index: int
    reason: str


@dataclass
class AssemblyResult:
    """Contours produced from one drawing.

    Attributes:
        contours: Assembled contours in drawing order
        warnings: Segments with unreliable normals
    """

    contours: list[Contour] = field(default_factory=list)
    warnings: list[NormalWarning] = field(default_factory=list)

    @property
    def segments(self) -> list[Segment]:
        """All segments of all contours, in order."""
        return [segment for contour in self.contours for segment in contour.segments]

    @property
    def join_count(self) -> int:
        return sum(contour.join_count for contour in self.contours)


@dataclass
class ContourAccumulator:
    """Mutable walk state threaded through the operation loop.

    Attributes:
        contour_index: Index the next finished contour receives
        initial: First point of the current subpath
        current: Current pen position
        segments: Segments of the contour being built
        area: Running signed-area sum of ``segments``
        command_index: Index of the operation being processed
    """

    contour_index: int = 0
    initial: Point = UNINITIALIZED
    current: Point = UNINITIALIZED
    segments: list[Segment] = field(default_factory=list)
    area: float = 0.0
    command_index: int = 0

    @property
    def has_segments(self) -> bool:
        return bool(self.segments)

    def move_to(self, point: Point) -> None:
        self.initial = point
        self.current = point

    def append(self, segment: Segment) -> None:
        segment.contour_index = self.contour_index
        self.segments.append(segment)
        self.area += segment.area_term()
        self.current = segment.end

    def take_contour(self, implicitly_closed: bool) -> Contour:
        """Hand over the finished contour and reset for the next one."""
        contour = Contour(
            index=self.contour_index,
            segments=self.segments,
            signed_area=self.area,
            implicitly_closed=implicitly_closed,
        )
        self.contour_index += 1
        self.segments = []
        self.area = 0.0
        self.current = self.initial
        return contour


class PathAssembler:
    """Builds oriented contours from absolute draw operations.

    Example:
        assembler = PathAssembler(precision=0.01)
        result = assembler.assemble(parse_path_data("M0 0 H10 V10 H0 Z"))
        for contour in result.contours:
            print(contour.winding, len(contour.segments))
    """

    def __init__(
        self,
        precision: float = 0.01,
        join_angle_tolerance: float = 1e-6,
        resolve_holes: bool = True,
        anomaly_samples: int = 32,
    ) -> None:
        """Initialize the assembler.

        Args:
            precision: Distance below which two points coincide
            join_angle_tolerance: Normals closer than this (radians) need no join
            resolve_holes: Flip the winding of nested contours
            anomaly_samples: Sampling density for hook detection
        """
        self.precision = precision
        self.join_angle_tolerance = join_angle_tolerance
        self.resolve_holes = resolve_holes
        self.anomaly_samples = anomaly_samples

    def assemble(
        self,
        operations: list[DrawOperation],
        first_contour_index: int = 0,
    ) -> AssemblyResult:
        """Assemble draw operations into oriented contours.

        Args:
            operations: Absolute draw operations of one drawing
            first_contour_index: Index given to the first contour

        Returns:
            AssemblyResult with contours and normal warnings

        Raises:
            PathAssemblyError: If a drawing step has no current point
        """
        acc = ContourAccumulator(contour_index=first_contour_index)
        contours: list[Contour] = []

        for op in operations:
            acc.command_index = op.index

            if op.command == DrawCommand.MOVE:
                if acc.has_segments:
                    contours.append(self._close(acc, implicit=True))
                acc.move_to(op.points[0])
                continue

            if op.command == DrawCommand.CLOSE:
                if acc.has_segments:
                    contours.append(self._close(acc, implicit=False))
                else:
                    acc.current = acc.initial
                continue

            if acc.current.is_uninitialized:
                raise PathAssemblyError(
                    acc.contour_index, op.index, f"'{op.command.value}' before any move"
                )

            segment = self._build_segment(acc.current, op)
            if segment is None:
                logger.debug(
                    "Skipped degenerate segment",
                    contour=acc.contour_index,
                    command_index=op.index,
                    command=op.command.value,
                )
                continue
            acc.append(segment)

        if acc.has_segments:
            contours.append(self._close(acc, implicit=True))

        self._resolve_windings(contours)

        result = AssemblyResult(contours=contours)
        for contour in contours:
            contour.segments = self._insert_joins(contour)
            result.warnings.extend(self._check_normals(contour))

        return result

    def _build_segment(self, current: Point, op: DrawOperation) -> Segment | None:
        end = op.points[-1]

        if op.command in (DrawCommand.LINE, DrawCommand.HORIZONTAL, DrawCommand.VERTICAL):
            if current.distance_to(end) < _MIN_SEGMENT_LENGTH:
                return None
            return LineSegment(current, end)

        controls = [current, *op.points]
        if all(p.distance_to(current) < _MIN_SEGMENT_LENGTH for p in controls):
            return None

        if op.command == DrawCommand.QUADRATIC:
            return QuadraticBezierSegment(current, op.points[0], end)
        return CubicBezierSegment(current, op.points[0], op.points[1], end)

    def _close(self, acc: ContourAccumulator, implicit: bool) -> Contour:
        if acc.current.distance_to(acc.initial) > self.precision:
            acc.append(LineSegment(acc.current, acc.initial))

        if implicit:
            logger.warning(
                "Subpath closed implicitly",
                contour=acc.contour_index,
                command_index=acc.command_index,
            )

        return acc.take_contour(implicitly_closed=implicit)

    def _resolve_windings(self, contours: list[Contour]) -> None:
        """Assign each contour its winding, once, from area sign and nesting."""
        polygons = [contour.polygon() for contour in contours]

        for i, contour in enumerate(contours):
            winding = 1 if contour.signed_area >= 0 else -1

            if self.resolve_holes and polygons[i]:
                probe = polygons[i][0]
                depth = sum(
                    1
                    for j, polygon in enumerate(polygons)
                    if j != i and point_in_polygon(probe, polygon)
                )
                if depth % 2 == 1:
                    contour.is_hole = True
                    winding = -winding

            contour.apply_winding(winding)

    def _insert_joins(self, contour: Contour) -> list[Segment]:
        """Return the contour's segments with corner joins inserted.

        A join goes after a segment when the turn to the following segment
        (wrapping around at closure) runs against the winding, i.e. the
        tool would otherwise jump across a corner the material wraps around.
        """
        outline = contour.segments
        result: list[Segment] = []

        for i, segment in enumerate(outline):
            result.append(segment)
            following = outline[(i + 1) % len(outline)]

            turn = corner_turn(segment, following)
            if abs(turn) <= self.join_angle_tolerance or turn * contour.winding >= 0:
                continue

            result.append(
                JoinSegment(
                    segment.end,
                    segment.raw_normal_at(1.0),
                    following.raw_normal_at(0.0),
                    contour_index=contour.index,
                    winding=contour.winding,
                )
            )

        return result

    def _check_normals(self, contour: Contour) -> list[NormalWarning]:
        warnings: list[NormalWarning] = []
        for segment_index, segment in enumerate(contour.segments):
            reason = find_normal_anomaly(segment, self.anomaly_samples)
            if reason is None:
                continue
            warnings.append(NormalWarning(contour.index, segment_index, reason))
        return warnings
