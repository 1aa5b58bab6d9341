"""Tests for the safe-depth solver and toolpath generation."""

from unittest.mock import MagicMock, Mock, patch

import pytest

from vcarve.config import MachineConfig, PrecisionConfig, ToolConfig
from vcarve.core.assembler import PathAssembler
from vcarve.core import solver as solver_module
from vcarve.core.solver import SafeDepthSolver, ToolpathGenerator, init_worker, solve_segment
from vcarve.domain import JoinSegment, LineSegment, Point, Segment
from vcarve.io import parse_path_data


def assemble(path_data: str) -> list[Segment]:
    return PathAssembler().assemble(parse_path_data(path_data)).segments


@pytest.fixture
def tool() -> ToolConfig:
    return ToolConfig(angle=45.0, radius=2.0)


@pytest.fixture
def precision() -> PrecisionConfig:
    return PrecisionConfig()


class TestNeighbours:
    """Tests for the bounding-box broad phase."""

    def test_far_segments_are_excluded(
        self, tool: ToolConfig, precision: PrecisionConfig
    ) -> None:
        near = LineSegment(Point(0, 3), Point(10, 3))
        far = LineSegment(Point(0, 50), Point(10, 50))
        subject = LineSegment(Point(0, 0), Point(10, 0))
        solver = SafeDepthSolver([subject, near, far], tool, precision)
        assert solver.neighbours(subject) == [near]

    def test_segment_is_not_its_own_neighbour(
        self, tool: ToolConfig, precision: PrecisionConfig
    ) -> None:
        subject = LineSegment(Point(0, 0), Point(10, 0))
        solver = SafeDepthSolver([subject], tool, precision)
        assert solver.neighbours(subject) == []


class TestSafeRadius:
    """Tests for the radius search."""

    def test_isolated_line_reaches_full_radius(
        self, tool: ToolConfig, precision: PrecisionConfig
    ) -> None:
        line = LineSegment(Point(0, 0), Point(10, 0))
        samples = SafeDepthSolver([line], tool, precision).solve(line)

        assert len(samples) == precision.sample_count + 1
        for sample in samples:
            assert sample.depth == pytest.approx(2.0)
            assert sample.center.y == pytest.approx(2.0)

    def test_centers_follow_the_normal(
        self, tool: ToolConfig, precision: PrecisionConfig
    ) -> None:
        line = LineSegment(Point(0, 0), Point(10, 0), winding=-1)
        samples = SafeDepthSolver([line], tool, precision).solve(line)
        assert samples[0].center == Point(0, -2.0)

    def test_parallel_neighbour_limits_radius(
        self, tool: ToolConfig, precision: PrecisionConfig
    ) -> None:
        bottom = LineSegment(Point(0, 0), Point(40, 0))
        top = LineSegment(Point(40, 2), Point(0, 2))
        solver = SafeDepthSolver([bottom, top], tool, precision)

        radius = solver.safe_radius(
            bottom, Point(20, 0), Point(0, 1), solver.neighbours(bottom), boundary=False
        )
        assert radius == pytest.approx(1.0, abs=0.03)
        assert radius < tool.radius

    def test_touching_geometry_gives_zero_radius(
        self, tool: ToolConfig, precision: PrecisionConfig
    ) -> None:
        bottom = LineSegment(Point(0, 0), Point(10, 0))
        crossing = LineSegment(Point(5, -5), Point(5, 5))
        solver = SafeDepthSolver([bottom, crossing], tool, precision)

        radius = solver.safe_radius(
            bottom, Point(5, 0), Point(0, 1), [crossing], boundary=False
        )
        assert radius == 0.0

    def test_shared_vertex_does_not_limit_boundary_sample(
        self, tool: ToolConfig, precision: PrecisionConfig
    ) -> None:
        first = LineSegment(Point(0, 0), Point(10, 0))
        # Continues straight on from the first line's end
        second = LineSegment(Point(10, 0), Point(20, 0))
        solver = SafeDepthSolver([first, second], tool, precision)

        samples = solver.solve(first)
        assert samples[-1].depth == pytest.approx(2.0)

    def test_convex_corner_sample_has_zero_depth(
        self, tool: ToolConfig, precision: PrecisionConfig
    ) -> None:
        segments = assemble("M0 0 L10 0 L10 10 L0 10 Z")
        samples = SafeDepthSolver(segments, tool, precision).solve(segments[0])
        assert samples[0].depth == 0.0
        assert samples[-1].depth == 0.0
        assert samples[5].depth == pytest.approx(2.0)

    def test_join_anchor_is_ignored(
        self, tool: ToolConfig, precision: PrecisionConfig
    ) -> None:
        segments = assemble("M0 0 L20 0 L20 10 L10 10 L10 20 L0 20 Z")
        join = next(s for s in segments if isinstance(s, JoinSegment))
        samples = SafeDepthSolver(segments, tool, precision).solve(join)

        for sample in samples:
            assert sample.depth == pytest.approx(2.0)
            assert sample.center.distance_to(Point(10, 10)) == pytest.approx(2.0)

    def test_machine_depth_caps_the_cut(
        self, tool: ToolConfig, precision: PrecisionConfig
    ) -> None:
        line = LineSegment(Point(0, 0), Point(10, 0))
        samples = SafeDepthSolver([line], tool, precision, max_depth=0.5).solve(line)
        assert all(sample.depth == 0.5 for sample in samples)

    def test_narrower_cone_cuts_deeper(self, precision: PrecisionConfig) -> None:
        line = LineSegment(Point(0, 0), Point(10, 0))
        narrow = SafeDepthSolver([line], ToolConfig(angle=30.0), precision).solve(line)
        wide = SafeDepthSolver([line], ToolConfig(angle=60.0), precision).solve(line)
        assert narrow[5].depth > wide[5].depth


class TestSolveSegment:
    """Tests for the picklable worker functions."""

    @pytest.fixture(autouse=True)
    def fresh_worker(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(solver_module, "_worker_solver", None)

    def test_returns_serialized_samples(
        self, tool: ToolConfig, precision: PrecisionConfig
    ) -> None:
        segments = assemble("M0 0 L10 0 L10 10 L0 10 Z")
        dicts = [s.to_dict() for s in segments]
        init_worker(dicts, tool.model_dump(), precision.model_dump(), 25.0)

        result = solve_segment(1)
        assert result["index"] == 1
        assert "error" not in result
        assert len(result["samples"]) == 11
        assert result["duration_ms"] >= 0

    def test_matches_in_process_solve(
        self, tool: ToolConfig, precision: PrecisionConfig
    ) -> None:
        segments = assemble("M0 0 L20 0 L20 10 L10 10 L10 20 L0 20 Z")
        expected = SafeDepthSolver(segments, tool, precision, max_depth=25.0).solve(
            segments[2]
        )
        dicts = [s.to_dict() for s in segments]
        init_worker(dicts, tool.model_dump(), precision.model_dump(), 25.0)

        assert solve_segment(2)["samples"] == [s.to_dict() for s in expected]

    def test_drawing_is_deserialized_once(
        self, tool: ToolConfig, precision: PrecisionConfig
    ) -> None:
        dicts = [s.to_dict() for s in assemble("M0 0 L10 0 L10 10 L0 10 Z")]
        with patch.object(Segment, "from_dict", wraps=Segment.from_dict) as from_dict:
            init_worker(dicts, tool.model_dump(), precision.model_dump())
            for index in range(len(dicts)):
                solve_segment(index)
        assert from_dict.call_count == len(dicts)

    def test_errors_are_returned_not_raised(
        self, tool: ToolConfig, precision: PrecisionConfig
    ) -> None:
        init_worker([], tool.model_dump(), precision.model_dump())

        result = solve_segment(3)
        assert result["index"] == 3
        assert "error" in result
        assert "traceback" in result

    def test_uninitialized_worker_reports_error(self) -> None:
        result = solve_segment(0)
        assert "not initialized" in result["error"]


class TestToolpathGenerator:
    """Tests for ToolpathGenerator class."""

    @pytest.fixture
    def generator(self, tool: ToolConfig, precision: PrecisionConfig) -> ToolpathGenerator:
        return ToolpathGenerator(tool, precision, MachineConfig(), max_workers=1)

    def test_samples_grouped_by_contour(self, generator: ToolpathGenerator) -> None:
        segments = assemble("M0 0 L10 0 L10 10 L0 10 Z M20 0 L30 0 L30 10 L20 10 Z")
        # Interleave the two contours' segments
        interleaved = [s for pair in zip(segments[:4], segments[4:], strict=True) for s in pair]

        toolpath = generator.generate(interleaved)

        indices = [sample.contour_index for sample in toolpath]
        assert indices == sorted(indices)
        assert indices.count(0) == indices.count(1) == 44

    def test_segment_order_kept_within_contour(
        self, generator: ToolpathGenerator, tool: ToolConfig, precision: PrecisionConfig
    ) -> None:
        segments = assemble("M0 0 L10 0 L10 10 L0 10 Z")
        solver = SafeDepthSolver(segments, tool, precision, max_depth=25.0)
        expected = [sample for segment in segments for sample in solver.solve(segment)]
        assert generator.generate(segments) == expected

    def test_progress_callback(self, generator: ToolpathGenerator) -> None:
        calls: list[tuple[int, int]] = []
        generator.generate(
            assemble("M0 0 L10 0 L10 10 Z"), lambda done, total: calls.append((done, total))
        )
        assert calls == [(1, 3), (2, 3), (3, 3)]

    def test_empty_drawing(self, generator: ToolpathGenerator) -> None:
        assert generator.generate([]) == []

    def test_parallel_matches_serial(self, tool: ToolConfig, precision: PrecisionConfig) -> None:
        segments = assemble("M0 0 L20 0 L20 10 L10 10 L10 20 L0 20 Z")
        serial = ToolpathGenerator(tool, precision, max_workers=1).generate(segments)
        parallel = ToolpathGenerator(tool, precision, max_workers=2).generate(segments)
        assert parallel == serial


    def test_parallel_tasks_carry_only_an_index(
        self, tool: ToolConfig, precision: PrecisionConfig, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr(solver_module, "_worker_solver", None)
        segments = assemble("M0 0 L10 0 L10 10 L0 10 Z")
        executor = MagicMock()
        executor.__enter__.return_value = executor
        executor.submit.side_effect = lambda fn, *args: Mock(
            **{"result.return_value": fn(*args)}
        )

        def make_executor(max_workers: int, initializer, initargs) -> MagicMock:
            initializer(*initargs)
            return executor

        generator = ToolpathGenerator(tool, precision, MachineConfig(), max_workers=2)
        with patch("vcarve.core.solver.ProcessPoolExecutor", side_effect=make_executor):
            with patch("vcarve.core.solver.as_completed", side_effect=list):
                toolpath = generator.generate(segments)

        assert [c.args[1:] for c in executor.submit.call_args_list] == [(0,), (1,), (2,), (3,)]
        assert toolpath == ToolpathGenerator(tool, precision, max_workers=1).generate(segments)
