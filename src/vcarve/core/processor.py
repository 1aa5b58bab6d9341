"""Processing orchestration for the carving pipeline.

This module coordinates the full workflow: load sources, parse and assemble
their outlines, solve the safe depth of every sample, and write the program.

Key components:
- Drawing: All contours of one input, with diagnostics
- CarveResult: A drawing and its toolpath
- CarveProcessor: Main orchestrator class
"""

import time
import traceback
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

import structlog

from vcarve.config import VCarveSettings
from vcarve.core.assembler import NormalWarning, PathAssembler
from vcarve.core.solver import ToolpathGenerator
from vcarve.domain import Contour, Segment, ToolPathSegment
from vcarve.exceptions import PathAssemblyError, UnsupportedCommandError
from vcarve.io import FontReader, GCodeWriter, PathSource, SvgReader
from vcarve.utils import ProcessingLogger, ProcessingStats, configure_logging

FONT_SUFFIXES = frozenset({".ttf", ".otf"})


@dataclass
class Drawing:
    """All contours of one input.

    Attributes:
        contours: Contours of every source, with globally unique indices
        warnings: Segments with unreliable normals
        skipped: (source name, reason) of sources that could not be assembled
    """

    contours: list[Contour] = field(default_factory=list)
    warnings: list[NormalWarning] = field(default_factory=list)
    skipped: list[tuple[str, str]] = field(default_factory=list)

    @property
    def segments(self) -> list[Segment]:
        return [segment for contour in self.contours for segment in contour.segments]

    @property
    def join_count(self) -> int:
        return sum(contour.join_count for contour in self.contours)


@dataclass
class CarveResult:
    """Outcome of carving one input."""

    drawing: Drawing
    toolpath: list[ToolPathSegment]

    @property
    def zero_depth_count(self) -> int:
        return sum(1 for sample in self.toolpath if sample.depth == 0.0)


class CarveProcessor:
    """Orchestrates toolpath generation.

    Manages the complete workflow:
    1. Load sources (SVG paths or font glyphs)
    2. Parse and assemble each source into oriented contours
    3. Solve the safe depth of every sample across the whole drawing
    4. Write the G-code program

    Example:
        processor = CarveProcessor(VCarveSettings())
        stats = processor.process(Path("drawing.svg"))
    """

    def __init__(
        self,
        config: VCarveSettings,
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        """Initialize the processor with configuration.

        Args:
            config: vcarve settings
            logger: Logger to use (configured from ``config`` if None)
        """
        self.config = config
        self.logger = logger or configure_logging(
            log_file=config.logging.log_file,
            console_level=config.logging.log_level,
            file_level=config.logging.file_log_level,
        )
        self.processing_logger = ProcessingLogger(self.logger)
        self.assembler = PathAssembler(
            precision=config.precision.tool_precision,
            join_angle_tolerance=config.processing.join_angle_tolerance,
            resolve_holes=config.processing.resolve_holes,
        )
        self.generator = ToolpathGenerator(
            tool=config.tool,
            precision=config.precision,
            machine=config.machine,
            max_workers=config.processing.max_workers,
        )
        self.writer = GCodeWriter(config.machine, config.precision)

    @property
    def stats(self) -> ProcessingStats:
        return self.processing_logger.stats

    def load_sources(
        self,
        input_path: Path,
        glyphs: str | None = None,
        size: float = 25.0,
    ) -> list[PathSource]:
        """Read the outlines of an SVG document or a font.

        Args:
            input_path: SVG, TTF or OTF file
            glyphs: Text to lay out (fonts only)
            size: Em size in drawing units (fonts only)

        Returns:
            Sources in drawing order

        Raises:
            SourceLoadError: If the file cannot be read
            GlyphNotFoundError: If a requested character has no glyph
            ValueError: If a font is given without ``glyphs``
        """
        if input_path.suffix.lower() in FONT_SUFFIXES:
            if not glyphs:
                raise ValueError("Font input requires the glyphs to carve")
            with FontReader(input_path) as reader:
                return reader.text_sources(glyphs, size)

        return list(SvgReader(input_path).iter_sources())

    def build_drawing(self, sources: list[PathSource]) -> Drawing:
        """Parse and assemble every source into one drawing.

        A source using an unsupported command, or that cannot be assembled,
        is skipped and reported; malformed path data aborts the whole input.

        Raises:
            MalformedInputError: If a source's path data is not well formed
        """
        drawing = Drawing()
        next_index = 0

        for source in sources:
            self.processing_logger.log_source_start(source.name)
            try:
                operations = source.draw_operations()
                result = self.assembler.assemble(operations, first_contour_index=next_index)
            except (UnsupportedCommandError, PathAssemblyError) as e:
                self.processing_logger.log_source_error(source.name, e)
                drawing.skipped.append((source.name, str(e)))
                continue

            for contour in result.contours:
                self.processing_logger.log_contour(
                    source.name,
                    contour.index,
                    segments=len(contour.segments),
                    joins=contour.join_count,
                    winding=contour.winding,
                    is_hole=contour.is_hole,
                )
            for warning in result.warnings:
                self.processing_logger.log_normal_warning(
                    source.name, warning.contour_index, warning.segment_index, warning.reason
                )

            drawing.contours.extend(result.contours)
            drawing.warnings.extend(result.warnings)
            next_index += len(result.contours)

        return drawing

    def carve(
        self,
        sources: list[PathSource],
        progress_callback: Callable[[int, int], None] | None = None,
    ) -> CarveResult:
        """Build the drawing and solve its toolpath.

        Args:
            sources: Outlines to carve together
            progress_callback: Optional callback(completed, total) per segment

        Returns:
            CarveResult with the drawing and the grouped toolpath
        """
        drawing = self.build_drawing(sources)
        toolpath = self.generator.generate(drawing.segments, progress_callback)
        result = CarveResult(drawing=drawing, toolpath=toolpath)

        self.processing_logger.log_toolpath(
            "drawing", samples=len(toolpath), zero_depth=result.zero_depth_count
        )
        return result

    def process(
        self,
        input_path: Path,
        output_path: Path | None = None,
        glyphs: str | None = None,
        size: float = 25.0,
        progress_callback: Callable[[int, int], None] | None = None,
    ) -> ProcessingStats:
        """Carve an input file and write its G-code program.

        Args:
            input_path: SVG, TTF or OTF file
            output_path: Program path (default: input with .gcode suffix)
            glyphs: Text to lay out (fonts only)
            size: Em size in drawing units (fonts only)
            progress_callback: Optional callback(completed, total) per segment

        Returns:
            ProcessingStats with counts, timing, and error details

        Raises:
            SourceLoadError: If the input cannot be read
            MalformedInputError: If path data is not well formed
            ProgramWriteError: If the program cannot be written
        """
        stats = self.stats
        stats.start_time = time.time()

        if output_path is None:
            output_path = GCodeWriter.get_program_path(input_path)

        self.logger.info(
            "Starting processing",
            input=str(input_path),
            output=str(output_path),
            max_workers=self.config.processing.max_workers,
        )

        sources = self.load_sources(input_path, glyphs=glyphs, size=size)
        start = time.time()
        try:
            result = self.carve(sources, progress_callback)
        except Exception as e:
            self.processing_logger.log_source_error(
                input_path.name, e, traceback=traceback.format_exc()
            )
            raise

        self.processing_logger.log_source_complete(
            input_path.name,
            contours=len(result.drawing.contours),
            samples=len(result.toolpath),
            duration_ms=(time.time() - start) * 1000,
        )

        self.writer.write(result.toolpath, output_path)
        stats.end_time = time.time()

        self.logger.info(
            "Processing complete",
            output=str(output_path),
            contours=stats.contour_count,
            samples=stats.sample_count,
            zero_depth=stats.zero_depth_count,
            warnings=stats.warning_count,
            errors=stats.error_count,
            duration_seconds=round(stats.duration_seconds, 2),
            avg_source_ms=stats.avg_source_time_ms,
        )

        return stats
