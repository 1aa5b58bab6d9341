"""Command-line interface for vcarve.

This module provides the CLI using Typer with rich output for
user-friendly feedback and progress reporting.

Key features:
- Progress bars for segment solving
- Verbose/quiet output modes
- Dry-run mode for inspecting assembled outlines
- Detailed error reporting
"""

from vcarve.cli.app import cli, main

__all__ = ["cli", "main"]
