"""Domain models for vcarve.

This module contains the core domain models representing points, outline
segments, contours, the cutting tool and the toolpath. All models are
designed to be:

- Immutable where possible (using frozen dataclasses)
- Serializable for inter-process communication (parallel processing)
- Independent of the input format

Key classes:
- Point / Rect: 2D value types
- Segment and its variants: Line, quadratic, cubic and join segments
- DrawOperation: One absolute drawing step from the parser
- Contour: A closed chain of segments with its winding
- ConicalTool: The V-bit cone model
- ToolPathSegment: One toolpath sample (center, depth, contour)
"""

from vcarve.domain.contour import Contour, WindingDirection
from vcarve.domain.geometry import UNINITIALIZED, Point, Rect, signed_angle
from vcarve.domain.operations import (
    DrawCommand,
    DrawOperation,
    close_path,
    cubic_to,
    line_to,
    move_to,
    quad_to,
)
from vcarve.domain.segment import (
    BezierSegment,
    CubicBezierSegment,
    JoinSegment,
    LineSegment,
    QuadraticBezierSegment,
    Segment,
    SegmentKind,
)
from vcarve.domain.tool import ConicalTool
from vcarve.domain.toolpath import ToolPathSegment

__all__: list[str] = [
    # Enums
    "DrawCommand",
    "SegmentKind",
    "WindingDirection",
    # Core types
    "UNINITIALIZED",
    "BezierSegment",
    "ConicalTool",
    "Contour",
    "CubicBezierSegment",
    "DrawOperation",
    "JoinSegment",
    "LineSegment",
    "Point",
    "QuadraticBezierSegment",
    "Rect",
    "Segment",
    "ToolPathSegment",
    # Helpers
    "close_path",
    "cubic_to",
    "line_to",
    "move_to",
    "quad_to",
    "signed_angle",
]
