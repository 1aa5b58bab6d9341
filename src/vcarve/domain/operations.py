"""Draw operations produced by the path-data parser.

A draw operation is one absolute-coordinate drawing step of an outline:
move, line, horizontal/vertical line, cubic or quadratic curve, or close.
The parser resolves relative commands before building operations, so the
assembler only ever sees absolute coordinates.
"""

from dataclasses import dataclass, field
from enum import Enum

from vcarve.domain.geometry import Point


class DrawCommand(str, Enum):
    """Kind of drawing step."""

    MOVE = "move"
    LINE = "line"
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"
    CUBIC = "cubic"
    QUADRATIC = "quadratic"
    CLOSE = "close"


# Number of points carried by each command
POINT_COUNTS: dict[DrawCommand, int] = {
    DrawCommand.MOVE: 1,
    DrawCommand.LINE: 1,
    DrawCommand.HORIZONTAL: 1,
    DrawCommand.VERTICAL: 1,
    DrawCommand.CUBIC: 3,
    DrawCommand.QUADRATIC: 2,
    DrawCommand.CLOSE: 0,
}


@dataclass(frozen=True, slots=True)
class DrawOperation:
    """One absolute drawing step.

    Attributes:
        command: The kind of step
        points: Control points followed by the end point; horizontal and
            vertical lines carry their fully resolved end point
        index: Position of the originating command in the source, for errors
    """

    command: DrawCommand
    points: tuple[Point, ...] = field(default_factory=tuple)
    index: int = 0

    def __post_init__(self) -> None:
        expected = POINT_COUNTS[self.command]
        if len(self.points) != expected:
            raise ValueError(
                f"{self.command.value} takes {expected} points, got {len(self.points)}"
            )

    @property
    def end(self) -> Point | None:
        """End point of the step, None for close."""
        return self.points[-1] if self.points else None


def move_to(x: float, y: float, index: int = 0) -> DrawOperation:
    return DrawOperation(DrawCommand.MOVE, (Point(x, y),), index)


def line_to(x: float, y: float, index: int = 0) -> DrawOperation:
    return DrawOperation(DrawCommand.LINE, (Point(x, y),), index)


def quad_to(cx: float, cy: float, x: float, y: float, index: int = 0) -> DrawOperation:
    return DrawOperation(DrawCommand.QUADRATIC, (Point(cx, cy), Point(x, y)), index)


def cubic_to(
    c1x: float, c1y: float, c2x: float, c2y: float, x: float, y: float, index: int = 0
) -> DrawOperation:
    return DrawOperation(
        DrawCommand.CUBIC, (Point(c1x, c1y), Point(c2x, c2y), Point(x, y)), index
    )


def close_path(index: int = 0) -> DrawOperation:
    return DrawOperation(DrawCommand.CLOSE, (), index)
