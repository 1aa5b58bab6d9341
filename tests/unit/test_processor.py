"""Tests for the processing orchestrator."""

from pathlib import Path
from unittest.mock import Mock, patch

import pytest
import structlog

from vcarve.config import ProcessingConfig, VCarveSettings
from vcarve.core.processor import CarveProcessor, CarveResult, Drawing
from vcarve.exceptions import MalformedInputError, SourceLoadError
from vcarve.io import PathSource

SQUARE = "M0 0 L10 0 L10 10 L0 10 Z"


@pytest.fixture
def settings() -> VCarveSettings:
    """Create single-worker test settings."""
    return VCarveSettings(processing=ProcessingConfig(max_workers=1))


@pytest.fixture
def processor(settings: VCarveSettings) -> CarveProcessor:
    return CarveProcessor(settings, logger=structlog.get_logger("vcarve.test"))


@pytest.fixture
def svg_file(tmp_path: Path) -> Path:
    path = tmp_path / "logo.svg"
    path.write_text(
        '<svg xmlns="http://www.w3.org/2000/svg">'
        f'<path id="outer" d="{SQUARE}"/>'
        '<path id="other" d="M20 0 L30 0 L30 10 L20 10 Z"/>'
        "</svg>",
        encoding="utf-8",
    )
    return path


class TestInit:
    """Tests for CarveProcessor initialization."""

    def test_configures_logging_when_no_logger_given(self, settings: VCarveSettings) -> None:
        with patch("vcarve.core.processor.configure_logging") as mock_logging:
            mock_logging.return_value = Mock()
            processor = CarveProcessor(settings)

            assert processor.config == settings
            mock_logging.assert_called_once_with(
                log_file=None, console_level="WARNING", file_level="DEBUG"
            )

    def test_uses_given_logger(self, processor: CarveProcessor) -> None:
        assert processor.stats.error_count == 0
        assert processor.generator.max_workers == 1


class TestBuildDrawing:
    """Tests for drawing assembly across sources."""

    def test_contour_indices_continue_across_sources(self, processor: CarveProcessor) -> None:
        sources = [
            PathSource(name="a", path_data=SQUARE + " M20 0 L30 0 L30 10 Z"),
            PathSource(name="b", path_data=SQUARE),
        ]
        drawing = processor.build_drawing(sources)

        assert [c.index for c in drawing.contours] == [0, 1, 2]
        assert processor.stats.contour_count == 3
        assert processor.stats.segment_count == len(drawing.segments)

    def test_unsupported_source_is_skipped(self, processor: CarveProcessor) -> None:
        sources = [
            PathSource(name="arc", path_data="M0 0 A5 5 0 0 1 10 0 Z"),
            PathSource(name="square", path_data=SQUARE),
        ]
        drawing = processor.build_drawing(sources)

        assert len(drawing.contours) == 1
        assert drawing.contours[0].index == 0
        assert [name for name, _ in drawing.skipped] == ["arc"]
        assert processor.stats.error_count == 1

    def test_malformed_source_aborts(self, processor: CarveProcessor) -> None:
        sources = [
            PathSource(name="square", path_data=SQUARE),
            PathSource(name="broken", path_data="M0 0 L10 #"),
        ]
        with pytest.raises(MalformedInputError):
            processor.build_drawing(sources)

    def test_cusp_is_reported(self, processor: CarveProcessor) -> None:
        drawing = processor.build_drawing(
            [PathSource(name="cusp", path_data="M0 0 C10 10 0 10 10 0 Z")]
        )
        assert drawing.warnings
        assert processor.stats.warning_count == len(drawing.warnings)

    def test_each_normal_warning_is_logged_once(self, settings: VCarveSettings) -> None:
        logger = Mock()
        processor = CarveProcessor(settings, logger=logger)

        with patch("vcarve.core.assembler.logger") as assembler_logger:
            drawing = processor.build_drawing(
                [PathSource(name="cusp", path_data="M0 0 C10 10 0 10 10 0 Z")]
            )

        events = [c.args[0] for c in logger.warning.call_args_list]
        assert events.count("Unrepresentable normal") == len(drawing.warnings) == 1
        assert not assembler_logger.warning.called

    def test_join_count(self, processor: CarveProcessor) -> None:
        drawing = processor.build_drawing(
            [PathSource(name="L", path_data="M0 0 L20 0 L20 10 L10 10 L10 20 L0 20 Z")]
        )
        assert drawing.join_count == 1
        assert processor.stats.join_count == 1


class TestCarve:
    """Tests for toolpath solving."""

    def test_toolpath_covers_every_segment(self, processor: CarveProcessor) -> None:
        result = processor.carve([PathSource(name="square", path_data=SQUARE)])

        assert isinstance(result, CarveResult)
        samples_per_segment = processor.config.precision.sample_count + 1
        assert len(result.toolpath) == 4 * samples_per_segment
        # Both ends of every segment sit on a convex corner
        assert result.zero_depth_count == 8
        assert processor.stats.sample_count == len(result.toolpath)

    def test_progress_is_reported(self, processor: CarveProcessor) -> None:
        calls: list[tuple[int, int]] = []
        processor.carve(
            [PathSource(name="square", path_data=SQUARE)],
            lambda done, total: calls.append((done, total)),
        )
        assert calls[-1] == (4, 4)

    def test_empty_drawing(self) -> None:
        assert Drawing().segments == []
        assert Drawing().join_count == 0


class TestLoadSources:
    """Tests for input loading."""

    def test_svg_sources(self, processor: CarveProcessor, svg_file: Path) -> None:
        sources = processor.load_sources(svg_file)
        assert [s.name for s in sources] == ["outer", "other"]

    def test_font_requires_glyphs(self, processor: CarveProcessor, tmp_path: Path) -> None:
        with pytest.raises(ValueError, match="glyphs"):
            processor.load_sources(tmp_path / "font.ttf")

    def test_missing_file(self, processor: CarveProcessor, tmp_path: Path) -> None:
        with pytest.raises(SourceLoadError):
            processor.load_sources(tmp_path / "missing.svg")


class TestProcess:
    """Tests for the full pipeline."""

    def test_writes_program_next_to_input(
        self, processor: CarveProcessor, svg_file: Path
    ) -> None:
        stats = processor.process(svg_file)

        program = svg_file.with_suffix(".gcode")
        assert program.exists()
        text = program.read_text(encoding="utf-8")
        assert text.startswith("%\n(Generated by vcarve)\n")
        assert "(contour 0)" in text
        assert "(contour 1)" in text
        assert stats.contour_count == 2
        assert stats.sources_processed == 1
        assert stats.end_time is not None
        assert stats.avg_source_time_ms is not None

    def test_custom_output_path(
        self, processor: CarveProcessor, svg_file: Path, tmp_path: Path
    ) -> None:
        output = tmp_path / "custom.nc"
        processor.process(svg_file, output)
        assert output.exists()
        assert not svg_file.with_suffix(".gcode").exists()

    def test_malformed_input_is_logged_and_raised(
        self, processor: CarveProcessor, tmp_path: Path
    ) -> None:
        path = tmp_path / "bad.svg"
        path.write_text('<svg><path d="M0 0 L1"/></svg>', encoding="utf-8")

        with pytest.raises(MalformedInputError):
            processor.process(path)

        assert processor.stats.error_count == 1
        assert not path.with_suffix(".gcode").exists()
