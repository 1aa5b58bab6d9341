"""I/O layer for vcarve.

This module handles reading drawing sources and writing machine programs.
It provides a clean abstraction layer between file formats and the
domain models.

Key responsibilities:
- Tokenize SVG path data into absolute draw operations
- Extract path elements from SVG documents
- Extract glyph outlines from TTF/OTF fonts using fonttools
- Write G-code programs

Key classes:
- SvgReader: Load SVG documents
- FontReader: Load fonts and lay out glyph outlines
- GCodeWriter: Save toolpaths as G-code
"""

from vcarve.io.parser import parse_path_data
from vcarve.io.reader import FontReader, OperationPen, PathSource, SvgReader
from vcarve.io.writer import GCodeWriter

__all__ = [
    "FontReader",
    "GCodeWriter",
    "OperationPen",
    "PathSource",
    "SvgReader",
    "parse_path_data",
]
