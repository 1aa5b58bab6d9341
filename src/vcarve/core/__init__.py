"""Core processing algorithms for vcarve.

This module contains the core algorithms for:

- Geometry operations (point-in-polygon, normal turning, hook detection)
- Path assembly (contour closure, winding, holes, corner joins)
- Safe-depth solving (radius search against neighbouring segments)
- Pipeline orchestration (sources to G-code program)

Key functions:
- point_in_polygon: Test if point is inside polygon
- line_intersection: Find intersection of two line segments
- corner_turn: Signed normal jump between two segments
- total_turning: Total normal rotation around a closed contour
- find_normal_anomaly: Detect curves with unreliable normals
- init_worker: Process pool initializer building a worker's solver once
- solve_segment: Picklable per-segment solve for worker processes

Key classes:
- PathAssembler: Builds oriented contours from draw operations
- SafeDepthSolver: Finds the safe tool radius per sample
- ToolpathGenerator: Solves a drawing serially or in parallel
- CarveProcessor: Runs the full pipeline on an input file
"""

from vcarve.core.assembler import AssemblyResult, NormalWarning, PathAssembler
from vcarve.core.geometry import (
    corner_turn,
    find_normal_anomaly,
    line_intersection,
    point_in_polygon,
    total_turning,
)
from vcarve.core.processor import CarveProcessor, CarveResult, Drawing
from vcarve.core.solver import SafeDepthSolver, ToolpathGenerator, init_worker, solve_segment

__all__ = [
    # Assembler classes
    "AssemblyResult",
    # Processor classes
    "CarveProcessor",
    "CarveResult",
    "Drawing",
    "NormalWarning",
    "PathAssembler",
    # Solver classes
    "SafeDepthSolver",
    "ToolpathGenerator",
    # Geometry functions
    "corner_turn",
    "find_normal_anomaly",
    "line_intersection",
    "point_in_polygon",
    "init_worker",
    "solve_segment",
    "total_turning",
]
