"""Drawing sources.

This module provides the readers that extract outlines from input files:
- SvgReader: Every ``path`` element of an SVG document
- FontReader: Glyph outlines of a TTF/OTF font, laid out as a line of text

Both produce PathSource objects, which resolve to absolute draw operations.
"""

from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path
from xml.etree import ElementTree

from fontTools.pens.basePen import BasePen
from fontTools.ttLib import TTFont

from vcarve.domain import DrawCommand, DrawOperation, Point
from vcarve.exceptions import GlyphNotFoundError, SourceLoadError
from vcarve.io.parser import parse_path_data


@dataclass
class PathSource:
    """One outline to carve.

    Attributes:
        name: Human-readable identity (element id, glyph name)
        path_data: SVG path data, parsed on demand
        operations: Ready-made draw operations (takes precedence)
    """

    name: str
    path_data: str = ""
    operations: list[DrawOperation] | None = field(default=None, repr=False)

    def draw_operations(self) -> list[DrawOperation]:
        """Absolute draw operations of this source.

        Raises:
            UnsupportedCommandError: If the path data uses arcs or shorthands
            MalformedInputError: If the path data is not well formed
        """
        if self.operations is not None:
            return self.operations
        return parse_path_data(self.path_data)


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


class SvgReader:
    """Loads an SVG document and extracts its path elements.

    Example:
        reader = SvgReader(Path("drawing.svg"))
        for source in reader.iter_sources():
            print(source.name)
    """

    def __init__(self, svg_path: Path) -> None:
        """Initialize the SVG reader.

        Args:
            svg_path: Path to the SVG file
        """
        self._svg_path = svg_path

    def iter_sources(self) -> Iterator[PathSource]:
        """Yield one PathSource per ``path`` element, in document order.

        Raises:
            SourceLoadError: If the file is missing or is not valid XML
        """
        if not self._svg_path.exists():
            raise SourceLoadError(str(self._svg_path), "file not found")

        try:
            tree = ElementTree.parse(self._svg_path)
        except ElementTree.ParseError as e:
            raise SourceLoadError(str(self._svg_path), str(e)) from e

        count = 0
        for element in tree.getroot().iter():
            if _local_name(element.tag) != "path":
                continue
            data = element.get("d")
            if not data or not data.strip():
                continue
            name = element.get("id") or f"path{count}"
            count += 1
            yield PathSource(name=name, path_data=data)


class OperationPen(BasePen):
    """fontTools pen that records an outline as draw operations.

    Applies a uniform scale, a horizontal offset and a Y flip, so that font
    units (y-up) land in drawing units (y-down) with the baseline at y=0.
    TrueType implied on-curve points and components are resolved by BasePen.
    """

    def __init__(self, glyph_set, scale: float = 1.0, offset_x: float = 0.0) -> None:
        super().__init__(glyph_set)
        self.scale = scale
        self.offset_x = offset_x
        self.operations: list[DrawOperation] = []

    def _point(self, pt: tuple[float, float]) -> Point:
        x, y = pt
        return Point(self.offset_x + x * self.scale, -y * self.scale + 0.0)

    def _add(self, command: DrawCommand, *pts: tuple[float, float]) -> None:
        points = tuple(self._point(p) for p in pts)
        self.operations.append(DrawOperation(command, points, len(self.operations)))

    def _moveTo(self, pt):
        self._add(DrawCommand.MOVE, pt)

    def _lineTo(self, pt):
        self._add(DrawCommand.LINE, pt)

    def _curveToOne(self, pt1, pt2, pt3):
        self._add(DrawCommand.CUBIC, pt1, pt2, pt3)

    def _qCurveToOne(self, pt1, pt2):
        self._add(DrawCommand.QUADRATIC, pt1, pt2)

    def _closePath(self):
        self._add(DrawCommand.CLOSE)

    def _endPath(self):
        # Open contours are closed by the assembler on the next move
        pass


class FontReader:
    """Loads TTF/OTF fonts and extracts glyph outlines.

    Example:
        with FontReader(Path("font.ttf")) as reader:
            sources = reader.text_sources("AB", size=40)
    """

    def __init__(self, font_path: Path) -> None:
        """Initialize the font reader.

        Args:
            font_path: Path to the TTF or OTF font file
        """
        self._font_path = font_path
        self._font: TTFont | None = None

    def load(self) -> None:
        """Load the font file.

        Raises:
            SourceLoadError: If the font file is missing or invalid
        """
        if not self._font_path.exists():
            raise SourceLoadError(str(self._font_path), "file not found")

        try:
            self._font = TTFont(str(self._font_path))
        except Exception as e:
            raise SourceLoadError(str(self._font_path), str(e)) from e

    def _require_font(self) -> TTFont:
        if self._font is None:
            raise RuntimeError("Font not loaded. Call load() first.")
        return self._font

    @property
    def units_per_em(self) -> int:
        """Return font's units per em.

        Raises:
            RuntimeError: If font has not been loaded yet
        """
        return self._require_font()["head"].unitsPerEm  # type: ignore[attr-defined]

    def glyph_name(self, char: str) -> str:
        """Name of the glyph mapped to ``char``.

        Raises:
            GlyphNotFoundError: If the font has no glyph for ``char``
        """
        cmap = self._require_font().getBestCmap() or {}
        name = cmap.get(ord(char))
        if name is None:
            raise GlyphNotFoundError(char)
        return name

    def glyph_operations(
        self, glyph_name: str, size: float, offset_x: float = 0.0
    ) -> list[DrawOperation]:
        """Outline of one glyph as draw operations.

        Args:
            glyph_name: Glyph to draw
            size: Em size in drawing units
            offset_x: Horizontal position of the glyph origin

        Raises:
            GlyphNotFoundError: If the glyph does not exist
        """
        font = self._require_font()
        glyph_set = font.getGlyphSet()
        if glyph_name not in glyph_set:
            raise GlyphNotFoundError(glyph_name)

        pen = OperationPen(glyph_set, scale=size / self.units_per_em, offset_x=offset_x)
        glyph_set[glyph_name].draw(pen)
        return pen.operations

    def text_sources(self, text: str, size: float) -> list[PathSource]:
        """Lay out ``text`` on one baseline, one source per glyph.

        Whitespace advances the pen without producing a source.

        Args:
            text: Characters to draw
            size: Em size in drawing units

        Raises:
            GlyphNotFoundError: If a character has no glyph
        """
        font = self._require_font()
        scale = size / self.units_per_em
        metrics = font["hmtx"]

        sources: list[PathSource] = []
        x = 0.0
        for char in text:
            name = self.glyph_name(char)
            advance, _ = metrics[name]
            if not char.isspace():
                operations = self.glyph_operations(name, size, offset_x=x)
                if operations:
                    sources.append(PathSource(name=name, operations=operations))
            x += advance * scale
        return sources

    def close(self) -> None:
        """Close the font file and free resources."""
        if self._font is not None:
            self._font.close()
            self._font = None

    def __enter__(self) -> "FontReader":
        """Context manager entry."""
        self.load()
        return self

    def __exit__(self, _exc_type: object, _exc_val: object, _exc_tb: object) -> None:
        """Context manager exit."""
        self.close()
