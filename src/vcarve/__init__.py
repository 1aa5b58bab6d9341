"""vcarve - Generate V-carve toolpaths from 2D vector outlines.

vcarve converts closed 2D outlines (SVG paths or font glyphs) into a 3D tool
motion path for a conical cutter. For every point sampled along the outline,
the deepest plunge that does not cut into any other part of the outline is
searched, producing the characteristic variable-depth V-carve engraving.

Example:
    $ vcarve lettering.svg

This will create lettering.gcode next to the input file.
"""

__version__ = "0.1.0"
__author__ = "vcarve contributors"

__all__ = ["__author__", "__version__"]
