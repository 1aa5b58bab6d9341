"""Rich console output helpers for the CLI.

This module provides user-friendly console output using Rich library
with progress bars and formatted messages.
"""


from rich.console import Console
from rich.progress import (
    BarColumn,
    Progress,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.text import Text

console = Console()

# Unicode symbols for consistent visual language
SYM_STEP = "▸"  # Step indicator
SYM_OK = "✓"  # Success
SYM_ERR = "✗"  # Error
SYM_WARN = "!"  # Warning
SYM_DOT = "·"  # Separator/secondary info


def create_progress() -> Progress:
    """Create a rich progress bar for segment solving.

    Returns:
        Configured Progress instance with bar and time elapsed.
    """
    return Progress(
        TextColumn("  "),
        BarColumn(bar_width=40, complete_style="green", finished_style="green"),
        TaskProgressColumn(),
        TimeElapsedColumn(),
        console=console,
        transient=False,
    )


def print_header(version: str) -> None:
    """Print application header.

    Args:
        version: Application version string
    """
    console.print(f"\n[bold]vcarve[/bold] v{version}")
    console.print("─" * 44)


def print_step(message: str) -> None:
    """Print a processing step indicator.

    Args:
        message: Step description message
    """
    console.print(f"\n{SYM_STEP} {message}")


def print_input_info(input_path: str, input_type: str, source_count: int) -> None:
    """Print input file information.

    Args:
        input_path: Path to the input file
        input_type: Input format (e.g., "SVG", "TrueType")
        source_count: Number of paths or glyphs read
    """
    # Use Text to safely handle paths with special characters
    line = Text("  ")
    line.append(input_path)
    line.append(f" ({input_type})")
    console.print(line)
    plural = "source" if source_count == 1 else "sources"
    console.print(f"  {source_count:,} {plural}")


def print_drawing_summary(
    contours: int,
    segments: int,
    joins: int,
    holes: int,
    warnings: list[str],
    skipped: list[tuple[str, str]],
    verbose: bool,
) -> None:
    """Print the assembled drawing.

    Args:
        contours: Number of contours
        segments: Number of segments, joins included
        joins: Number of corner joins
        holes: Number of contours resolved as holes
        warnings: Descriptions of segments with unreliable normals
        skipped: (source, reason) of sources that could not be assembled
        verbose: Whether to list warnings and skipped sources in full
    """
    console.print(
        f"  [green]{contours}[/green] contours {SYM_DOT} {segments} segments "
        f"{SYM_DOT} {joins} joins {SYM_DOT} {holes} holes"
    )

    if warnings:
        console.print(f"  [yellow]{SYM_WARN} {len(warnings)} unrepresentable normals[/yellow]")
        if verbose:
            for warning in warnings[:20]:
                console.print(f"    {warning}")
            if len(warnings) > 20:
                console.print(f"    {SYM_DOT}{SYM_DOT}{SYM_DOT} (+{len(warnings) - 20} more)")

    if skipped:
        console.print(f"  [red]{SYM_ERR} {len(skipped)} sources skipped[/red]")
        if verbose:
            for name, reason in skipped:
                line = Text("    ")
                line.append(name, style="bold")
                line.append(f": {reason}")
                console.print(line)


def _format_time(seconds: float) -> str:
    """Format seconds into human-readable time string."""
    if seconds < 1:
        return f"{seconds * 1000:.0f}ms"
    elif seconds < 60:
        return f"{seconds:.1f}s"
    else:
        mins = int(seconds // 60)
        secs = seconds % 60
        return f"{mins}m {secs:.1f}s"


def print_processing_info(workers: int, is_auto: bool = False) -> None:
    """Print processing configuration.

    Args:
        workers: Number of parallel workers
        is_auto: Whether the count was auto-detected
    """
    auto_suffix = " (auto)" if is_auto else ""
    console.print(f"  {workers} workers{auto_suffix} {SYM_DOT} Ctrl+C to cancel")


def print_success(
    output_path: str,
    file_size: str,
    total_time_s: float,
    contours: int,
    samples: int,
    zero_depth: int,
    warnings: int,
    errors: int,
) -> None:
    """Print success message with summary.

    Args:
        output_path: Path to output program
        file_size: Human-readable file size string
        total_time_s: Total processing time in seconds
        contours: Number of contours carved
        samples: Number of toolpath samples written
        zero_depth: Samples where the tool cannot plunge at all
        warnings: Number of unrepresentable-normal warnings
        errors: Number of sources that failed
    """
    time_str = _format_time(total_time_s)

    # Success header
    console.print(f"\n[bold green]{SYM_OK} Complete[/bold green] in {time_str}")

    # Output file info
    line = Text("  ")
    line.append(output_path, style="bold")
    line.append(f" ({file_size})")
    console.print(line)

    # Stats line
    error_style = "red" if errors > 0 else "green"
    console.print(
        f"  {contours} contours {SYM_DOT} {samples} samples {SYM_DOT} "
        f"[{error_style}]{errors} errors[/{error_style}]"
    )
    if zero_depth or warnings:
        console.print(
            f"  [yellow]{zero_depth} zero-depth samples {SYM_DOT} {warnings} warnings[/yellow]"
        )


def print_error(message: str, details: str | None = None) -> None:
    """Print error message.

    Args:
        message: Main error message
        details: Optional detailed error information
    """
    console.print(f"\n[bold red]{SYM_ERR} Error:[/bold red] {message}")
    if details:
        console.print(f"  {details}")


def print_cancellation_notice() -> None:
    """Print cancellation acknowledgment."""
    console.print(f"\n{SYM_DOT} [bold]Cancelled[/bold]")
    console.print("  No output file created")
