"""CLI application entry point for vcarve.

This module provides the main CLI interface using Typer.
"""

import os
from pathlib import Path
from typing import Annotated

import typer
from pydantic import ValidationError

from vcarve import __version__
from vcarve.cli.output import (
    SYM_OK,
    console,
    create_progress,
    print_cancellation_notice,
    print_drawing_summary,
    print_error,
    print_header,
    print_input_info,
    print_processing_info,
    print_step,
    print_success,
)
from vcarve.config import (
    LoggingConfig,
    MachineConfig,
    PrecisionConfig,
    ProcessingConfig,
    ToolConfig,
    VCarveSettings,
)
from vcarve.core import CarveProcessor
from vcarve.core.processor import FONT_SUFFIXES
from vcarve.exceptions import (
    MalformedInputError,
    ProgramWriteError,
    SourceLoadError,
    VCarveError,
)
from vcarve.io import GCodeWriter

SUPPORTED_SUFFIXES = FONT_SUFFIXES | {".svg"}

# Create the Typer app
app = typer.Typer(
    name="vcarve",
    help="Generate V-carving toolpaths from SVG outlines and font glyphs.",
    add_completion=False,
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold blue]vcarve[/bold blue] v{__version__}")
        raise typer.Exit()


@app.command()
def carve(
    input_path: Annotated[
        Path,
        typer.Argument(
            help="Path to input SVG, TTF or OTF file",
            show_default=False,
        ),
    ],
    output: Annotated[
        Path | None,
        typer.Option(
            "--output",
            "-o",
            help="Output path (default: {name}.gcode)",
        ),
    ] = None,
    glyphs: Annotated[
        str | None,
        typer.Option(
            "--glyphs",
            "-g",
            help="Text to carve (font inputs only)",
        ),
    ] = None,
    size: Annotated[
        float,
        typer.Option(
            "--size",
            "-s",
            help="Glyph em size in drawing units (font inputs only)",
            min=0.0,
        ),
    ] = 25.0,
    angle: Annotated[
        float,
        typer.Option(
            "--angle",
            "-a",
            help="Cone half-angle of the tool in degrees",
        ),
    ] = 45.0,
    radius: Annotated[
        float,
        typer.Option(
            "--radius",
            "-r",
            help="Maximum cutting radius of the tool",
        ),
    ] = 2.0,
    feed_rate: Annotated[
        int,
        typer.Option(
            "--feed-rate",
            "-f",
            help="Cutting feed rate",
        ),
    ] = 100,
    precision: Annotated[
        float,
        typer.Option(
            "--precision",
            help="Tool movement precision (rounding and comparisons)",
        ),
    ] = 0.01,
    step_resolution: Annotated[
        float,
        typer.Option(
            "--step-resolution",
            help="Smallest radius step of the depth search",
        ),
    ] = 0.01,
    trace_step: Annotated[
        float,
        typer.Option(
            "--trace-step",
            help="Parametric sampling step along each segment",
        ),
    ] = 0.1,
    workers: Annotated[
        int | None,
        typer.Option(
            "--workers",
            "-j",
            help="Number of parallel workers (default: auto)",
            min=1,
        ),
    ] = None,
    dry_run: Annotated[
        bool,
        typer.Option(
            "--dry-run",
            help="Assemble the outlines and report them without writing a program",
        ),
    ] = False,
    log_file: Annotated[
        Path | None,
        typer.Option(
            "--log-file",
            help="Write detailed logs to file",
        ),
    ] = None,
    log_level: Annotated[
        str,
        typer.Option(
            "--log-level",
            help="Logging level (DEBUG|INFO|WARNING|ERROR)",
        ),
    ] = "WARNING",
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Verbose console output",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Minimal console output",
        ),
    ] = False,
    _version: Annotated[  # noqa: ARG001
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """Generate a V-carving G-code program from an SVG drawing or font glyphs.

    For every point of the outline the tool plunges as deep as it can
    without cutting into a neighbouring part of the drawing.

    Example:
        vcarve logo.svg

    This will create logo.gcode next to the input. For fonts, pass the text:

        vcarve Roboto-Regular.ttf --glyphs "AB" --size 40
    """
    # Validate mutually exclusive options
    if verbose and quiet:
        print_error("Cannot use --verbose and --quiet together")
        raise typer.Exit(code=1)

    # Validate input file exists
    if not input_path.exists():
        print_error(
            f"Input file not found: {input_path}",
            details=f"The file '{input_path}' does not exist or is not accessible.",
        )
        raise typer.Exit(code=1)

    if not input_path.is_file():
        print_error(
            f"Input path is not a file: {input_path}",
            details="Please provide a path to an SVG, TTF or OTF file.",
        )
        raise typer.Exit(code=1)

    suffix = input_path.suffix.lower()
    if suffix not in SUPPORTED_SUFFIXES:
        print_error(
            f"Unsupported input type: {input_path.suffix or '(none)'}",
            details="Valid inputs: .svg, .ttf, .otf",
        )
        raise typer.Exit(code=1)

    if suffix in FONT_SUFFIXES and not glyphs:
        print_error(
            "Font input requires --glyphs",
            details='Pass the text to carve, e.g. --glyphs "AB".',
        )
        raise typer.Exit(code=1)

    # Create settings from CLI arguments
    try:
        settings = VCarveSettings(
            tool=ToolConfig(angle=angle, radius=radius),
            precision=PrecisionConfig(
                tool_precision=precision,
                step_resolution=step_resolution,
                trace_step=trace_step,
            ),
            machine=MachineConfig(feed_rate=feed_rate),
            processing=ProcessingConfig(max_workers=workers),
            logging=LoggingConfig(
                log_file=log_file,
                log_level=log_level if not quiet else "WARNING",
            ),
        )
    except ValidationError as e:
        print_error("Invalid settings", details=str(e))
        raise typer.Exit(code=1) from None

    # Print header
    if not quiet:
        print_header(__version__)

    try:
        processor = CarveProcessor(settings)

        # Handle --dry-run mode
        if dry_run:
            _handle_dry_run(processor, input_path, glyphs, size, quiet, verbose)
            raise typer.Exit(code=0)

        actual_output_path = output or GCodeWriter.get_program_path(input_path)

        if not quiet:
            actual_workers = workers if workers else os.cpu_count() or 1
            print_step("Carving")
            print_processing_info(actual_workers, is_auto=(workers is None))

        try:
            if not quiet:
                with create_progress() as progress:
                    task_id = progress.add_task("Solving segments", total=None)

                    def update_progress(completed: int, total: int) -> None:
                        progress.update(task_id, completed=completed, total=total)

                    stats = processor.process(
                        input_path,
                        output_path=actual_output_path,
                        glyphs=glyphs,
                        size=size,
                        progress_callback=update_progress,
                    )
            else:
                stats = processor.process(
                    input_path,
                    output_path=actual_output_path,
                    glyphs=glyphs,
                    size=size,
                )
        except KeyboardInterrupt:
            if not quiet:
                print_cancellation_notice()
            raise typer.Exit(code=130) from None  # Standard Unix SIGINT exit code

        if not quiet:
            print_success(
                output_path=str(actual_output_path),
                file_size=_format_file_size(actual_output_path),
                total_time_s=stats.duration_seconds,
                contours=stats.contour_count,
                samples=stats.sample_count,
                zero_depth=stats.zero_depth_count,
                warnings=stats.warning_count,
                errors=stats.error_count,
            )

    except SourceLoadError as e:
        print_error(f"Could not load input: {e.reason}")
        raise typer.Exit(code=1)
    except MalformedInputError as e:
        print_error("Malformed path data", details=str(e))
        raise typer.Exit(code=1)
    except ProgramWriteError as e:
        print_error(f"Could not write program: {e.reason}")
        raise typer.Exit(code=1)
    except VCarveError as e:
        print_error(str(e))
        raise typer.Exit(code=1)
    except typer.Exit:
        # Re-raise typer.Exit to allow clean exits
        raise
    except Exception as e:
        print_error(f"Unexpected error: {e}")
        raise typer.Exit(code=1)


def _handle_dry_run(
    processor: CarveProcessor,
    input_path: Path,
    glyphs: str | None,
    size: float,
    quiet: bool,
    verbose: bool,
) -> None:
    """Handle --dry-run mode.

    Args:
        processor: Configured processor
        input_path: Path to the input file
        glyphs: Text to lay out (fonts only)
        size: Glyph em size
        quiet: Suppress output
        verbose: Show verbose output
    """
    if not quiet:
        print_step("Loading input")

    sources = processor.load_sources(input_path, glyphs=glyphs, size=size)

    if not quiet:
        input_type = "font" if input_path.suffix.lower() in FONT_SUFFIXES else "SVG"
        print_input_info(str(input_path), input_type, len(sources))
        print_step("Assembling (dry run)")

    drawing = processor.build_drawing(sources)

    if not quiet:
        print_drawing_summary(
            contours=len(drawing.contours),
            segments=len(drawing.segments),
            joins=drawing.join_count,
            holes=sum(1 for contour in drawing.contours if contour.is_hole),
            warnings=[
                f"contour {w.contour_index} segment {w.segment_index}: {w.reason}"
                for w in drawing.warnings
            ],
            skipped=drawing.skipped,
            verbose=verbose,
        )
        console.print(f"\n[bold green]{SYM_OK} Dry run complete[/bold green] – no program written")


def _format_file_size(path: Path) -> str:
    """Format file size in human-readable form.

    Args:
        path: Path to file

    Returns:
        Human-readable file size (e.g., "428 KB")
    """
    try:
        size_bytes = path.stat().st_size
    except OSError:
        return "unknown"

    if size_bytes < 1024:
        return f"{size_bytes} B"
    elif size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.0f} KB"
    else:
        return f"{size_bytes / (1024 * 1024):.1f} MB"


def cli() -> None:
    """Entry point for the CLI application."""
    app()


def main() -> None:
    """Entry point for the CLI application (alias for cli)."""
    cli()


if __name__ == "__main__":
    cli()
