"""Safe-depth solver.

For every sample along every segment this module finds the deepest plunge of
the conical tool that does not cut into any nearby segment:

1. Take the sample's surface point ``p`` and normal ``n``.
2. Keep only segments whose bounding box lies within one tool diameter of
   the current segment's box (broad phase).
3. Binary-search the largest radius ``r`` for which no neighbour is closer
   to the tool center ``p + n * r`` than ``r`` (minus the tool precision).
4. Convert the radius into a depth with the cone model.

Segments are independent of each other once the outline is assembled, so
the work is spread over worker processes, one task per segment.

Key components:
- init_worker: Process pool initializer holding the drawing of one worker
- solve_segment: Top-level picklable function for parallel execution
- SafeDepthSolver: Per-sample radius search over a fixed segment list
- ToolpathGenerator: Runs the solver over a drawing, serially or in parallel
"""

import os
import time
import traceback
from collections.abc import Callable
from concurrent.futures import ProcessPoolExecutor, as_completed
from typing import Any

import structlog

from vcarve.config import MachineConfig, PrecisionConfig, ToolConfig
from vcarve.domain import ConicalTool, JoinSegment, Point, Segment, ToolPathSegment
from vcarve.exceptions import GeometryError

logger = structlog.get_logger(__name__)


class SafeDepthSolver:
    """Finds the safe tool radius for samples of one drawing's segments.

    The segment list is only read, never modified, so one solver may be
    shared by any number of samples.

    Example:
        solver = SafeDepthSolver(segments, ToolConfig(), PrecisionConfig())
        path = solver.solve(segments[0])
    """

    def __init__(
        self,
        segments: list[Segment],
        tool: ToolConfig,
        precision: PrecisionConfig,
        max_depth: float | None = None,
    ) -> None:
        """Initialize the solver.

        Args:
            segments: All segments of the drawing, across all contours
            tool: Cutter geometry
            precision: Rounding, search and sampling granularities
            max_depth: Machine depth limit (None = tool limit only)
        """
        self.segments = segments
        self.tool = ConicalTool(angle=tool.angle, radius=tool.radius)
        self.precision = precision
        self.max_depth = max_depth

    def neighbours(self, segment: Segment) -> list[Segment]:
        """Segments whose bounding box lies within one tool diameter of ``segment``."""
        box = segment.bounding_box()
        reach = self.tool.diameter
        return [
            other
            for other in self.segments
            if other is not segment and box.distance_to(other.bounding_box()) <= reach
        ]

    def solve(self, segment: Segment) -> list[ToolPathSegment]:
        """Toolpath samples for one segment, in parameter order."""
        neighbours = self.neighbours(segment)
        result: list[ToolPathSegment] = []

        for t in segment.sample_parameters(self.precision.sample_count):
            p = segment.point_at(t)
            n = segment.normal_at(t)
            boundary = t in (0.0, 1.0)

            radius = self.safe_radius(segment, p, n, neighbours, boundary)
            depth = self.tool.depth_at_radius(radius)
            if self.max_depth is not None:
                depth = min(depth, self.max_depth)

            result.append(ToolPathSegment(p + n * radius, depth, segment.contour_index))

        return result

    def safe_radius(
        self,
        segment: Segment,
        p: Point,
        n: Point,
        neighbours: list[Segment],
        boundary: bool,
    ) -> float:
        """Largest radius at which the tool clears every neighbour.

        Starts at zero with a step of the tool's maximum radius, growing
        while the tool clears every neighbour and shrinking once it does
        not, halving the step each time. Stops when the step drops below the
        search resolution or the maximum radius is reached without touching.

        Returns:
            The largest radius verified safe; 0.0 when none is
        """
        max_radius = self.tool.radius
        resolution = self.precision.step_resolution

        radius = 0.0
        safe = 0.0
        step = max_radius
        grow = True

        while step >= resolution:
            radius = min(radius + step if grow else radius - step, max_radius)
            if self._touches(segment, p, n, radius, neighbours, boundary):
                grow = False
            else:
                safe = max(safe, radius)
                if radius >= max_radius:
                    break
                grow = True
            step /= 2

        return safe

    def _touches(
        self,
        segment: Segment,
        p: Point,
        n: Point,
        radius: float,
        neighbours: list[Segment],
        boundary: bool,
    ) -> bool:
        """Check whether a tool of ``radius`` centered at ``p + n*r`` cuts a neighbour."""
        center = p + n * radius
        is_join = isinstance(segment, JoinSegment)
        limit = radius - self.precision.tool_precision
        shared = self.precision.tool_precision / 10

        for other in neighbours:
            hit, distance = other.closest_point(center)
            # Neighbours sharing the sampled vertex must not limit the depth there
            if (boundary or is_join) and hit.is_close(p, shared):
                continue
            if distance < limit:
                return True
        return False


_worker_solver: SafeDepthSolver | None = None


def init_worker(
    segment_dicts: list[dict[str, Any]],
    tool_dict: dict[str, Any],
    precision_dict: dict[str, Any],
    max_depth: float | None = None,
) -> None:
    """Build the solver of the current worker process.

    Used as the ProcessPoolExecutor initializer so the drawing is sent to
    and deserialized by each worker once, not once per task.

    Args:
        segment_dicts: Serialized segments of the whole drawing
        tool_dict: Serialized tool configuration
        precision_dict: Serialized precision configuration
        max_depth: Machine depth limit
    """
    global _worker_solver
    _worker_solver = SafeDepthSolver(
        [Segment.from_dict(d) for d in segment_dicts],
        ToolConfig(**tool_dict),
        PrecisionConfig(**precision_dict),
        max_depth=max_depth,
    )


def solve_segment(segment_index: int) -> dict[str, Any]:
    """Solve the toolpath of one segment of the worker's drawing.

    Top-level function designed to be picklable for use with ProcessPoolExecutor.
    Requires ``init_worker`` to have run in the same process.

    Args:
        segment_index: Index of the segment to solve

    Returns:
        Dictionary containing either:
        - Success: {"index": int, "samples": list[dict], "duration_ms": float}
        - Error: {"index": int, "error": str, "traceback": str, "duration_ms": float}
    """
    start_time = time.time()

    try:
        if _worker_solver is None:
            raise RuntimeError("Worker solver is not initialized")
        samples = _worker_solver.solve(_worker_solver.segments[segment_index])

        return {
            "index": segment_index,
            "samples": [s.to_dict() for s in samples],
            "duration_ms": (time.time() - start_time) * 1000,
        }

    except Exception as e:
        return {
            "index": segment_index,
            "error": str(e),
            "traceback": traceback.format_exc(),
            "duration_ms": (time.time() - start_time) * 1000,
        }


class ToolpathGenerator:
    """Generates the ordered toolpath of a drawing.

    Runs the safe-depth search for every segment, either in-process or on a
    process pool, then concatenates the per-segment results in segment order
    and groups them by contour with a stable sort.

    Example:
        generator = ToolpathGenerator(ToolConfig(), PrecisionConfig(), max_workers=1)
        toolpath = generator.generate(result.segments)
    """

    def __init__(
        self,
        tool: ToolConfig,
        precision: PrecisionConfig,
        machine: MachineConfig | None = None,
        max_workers: int | None = None,
    ) -> None:
        """Initialize the generator.

        Args:
            tool: Cutter geometry
            precision: Rounding, search and sampling granularities
            machine: Machine limits (depth cap)
            max_workers: Worker processes (None = auto, 1 = in-process)
        """
        self.tool = tool
        self.precision = precision
        self.machine = machine or MachineConfig()
        self.max_workers = max_workers

    def generate(
        self,
        segments: list[Segment],
        progress_callback: Callable[[int, int], None] | None = None,
    ) -> list[ToolPathSegment]:
        """Solve every segment and return the toolpath grouped by contour.

        Args:
            segments: All segments of the drawing
            progress_callback: Optional callback(completed, total)

        Returns:
            Toolpath samples, grouped by contour index, segment order kept

        Raises:
            GeometryError: If solving a segment fails
        """
        workers = self.max_workers or os.cpu_count() or 1
        if workers == 1 or len(segments) < 2:
            per_segment = self._generate_serial(segments, progress_callback)
        else:
            per_segment = self._generate_parallel(segments, workers, progress_callback)

        toolpath = [sample for samples in per_segment for sample in samples]
        toolpath.sort(key=lambda s: s.contour_index)

        logger.debug(
            "Toolpath generated",
            segments=len(segments),
            samples=len(toolpath),
            workers=workers,
        )
        return toolpath

    def _generate_serial(
        self,
        segments: list[Segment],
        progress_callback: Callable[[int, int], None] | None,
    ) -> list[list[ToolPathSegment]]:
        solver = SafeDepthSolver(
            segments, self.tool, self.precision, max_depth=self.machine.max_depth
        )
        per_segment: list[list[ToolPathSegment]] = []
        for completed, segment in enumerate(segments, start=1):
            per_segment.append(solver.solve(segment))
            if progress_callback is not None:
                progress_callback(completed, len(segments))
        return per_segment

    def _generate_parallel(
        self,
        segments: list[Segment],
        workers: int,
        progress_callback: Callable[[int, int], None] | None,
    ) -> list[list[ToolPathSegment]]:
        segment_dicts = [s.to_dict() for s in segments]
        tool_dict = self.tool.model_dump()
        precision_dict = self.precision.model_dump()

        results: dict[int, list[ToolPathSegment]] = {}
        total = len(segments)
        completed = 0

        with ProcessPoolExecutor(
            max_workers=workers,
            initializer=init_worker,
            initargs=(segment_dicts, tool_dict, precision_dict, self.machine.max_depth),
        ) as executor:
            pending = {executor.submit(solve_segment, index): index for index in range(total)}

            for future in as_completed(pending):
                index = pending[future]
                result = future.result()

                if "error" in result:
                    logger.error(
                        "Segment solve failed",
                        segment=index,
                        error=result["error"],
                        traceback=result.get("traceback"),
                    )
                    executor.shutdown(wait=False, cancel_futures=True)
                    raise GeometryError(
                        f"Failed to solve segment {index}: {result['error']}"
                    )

                results[index] = [ToolPathSegment.from_dict(d) for d in result["samples"]]

                completed += 1
                if progress_callback is not None:
                    progress_callback(completed, total)

        return [results[index] for index in range(total)]
