"""End-to-end carving of glyphs from a generated TrueType font."""

from pathlib import Path

import pytest
import structlog
from fontTools.fontBuilder import FontBuilder
from fontTools.pens.ttGlyphPen import TTGlyphPen

from vcarve.config import ProcessingConfig, VCarveSettings
from vcarve.core import CarveProcessor
from vcarve.exceptions import GlyphNotFoundError


def _square(pen: TTGlyphPen, x0: int, y0: int, x1: int, y1: int, clockwise: bool) -> None:
    corners = [(x0, y0), (x0, y1), (x1, y1), (x1, y0)]
    if not clockwise:
        corners.reverse()
    pen.moveTo(corners[0])
    for corner in corners[1:]:
        pen.lineTo(corner)
    pen.closePath()


@pytest.fixture
def font_file(tmp_path: Path) -> Path:
    """Build a font whose "O" is a square ring and "I" a plain bar."""
    empty = TTGlyphPen(None).glyph()

    ring = TTGlyphPen(None)
    _square(ring, 100, 0, 500, 400, clockwise=True)
    _square(ring, 200, 100, 400, 300, clockwise=False)

    bar = TTGlyphPen(None)
    _square(bar, 100, 0, 200, 600, clockwise=True)

    fb = FontBuilder(1000, isTTF=True)
    fb.setupGlyphOrder([".notdef", "space", "O", "I"])
    fb.setupCharacterMap({ord(" "): "space", ord("O"): "O", ord("I"): "I"})
    fb.setupGlyf({".notdef": empty, "space": empty, "O": ring.glyph(), "I": bar.glyph()})
    fb.setupHorizontalMetrics(
        {".notdef": (500, 0), "space": (250, 0), "O": (600, 0), "I": (300, 0)}
    )
    fb.setupHorizontalHeader(ascent=800, descent=-200)
    fb.setupNameTable({"familyName": "Carve Test", "styleName": "Regular"})
    fb.setupOS2()
    fb.setupPost()

    path = tmp_path / "CarveTest.ttf"
    fb.save(str(path))
    return path


@pytest.fixture
def processor() -> CarveProcessor:
    settings = VCarveSettings(processing=ProcessingConfig(max_workers=1))
    return CarveProcessor(settings, logger=structlog.get_logger("vcarve.test"))


def _depths(program: str) -> list[float]:
    return [
        -float(line.rsplit("Z", 1)[1])
        for line in program.splitlines()
        if line.startswith("G01 X")
    ]


def test_glyph_with_counter(processor: CarveProcessor, font_file: Path) -> None:
    sources = processor.load_sources(font_file, glyphs="O", size=25.0)
    drawing = processor.build_drawing(sources)

    assert [s.name for s in sources] == ["O"]
    assert len(drawing.contours) == 2
    assert [c.is_hole for c in drawing.contours] == [False, True]
    # Every corner of the counter wraps around the carved ring
    assert drawing.contours[1].join_count == 4


def test_text_layout_and_program(
    processor: CarveProcessor, font_file: Path, tmp_path: Path
) -> None:
    output = tmp_path / "word.gcode"
    stats = processor.process(font_file, output, glyphs="I O", size=25.0)

    program = output.read_text(encoding="utf-8")
    assert stats.contour_count == 3
    assert "(contour 2)" in program

    depths = _depths(program)
    assert depths
    # The ring is 2.5 units wide, so the 2-unit tool never reaches full depth
    assert max(depths) < 2.0
    assert min(depths) == 0.0


def test_missing_glyph(processor: CarveProcessor, font_file: Path) -> None:
    with pytest.raises(GlyphNotFoundError):
        processor.load_sources(font_file, glyphs="X")
