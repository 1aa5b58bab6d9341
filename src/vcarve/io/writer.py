"""G-code program writer.

This module serializes a toolpath into a line-oriented motion program:

    %
    (Generated by vcarve)
    G01 F100 (feed rate)
    (contour 0)
    G00 Z0.5
    G00 X1 Y-2
    G01 X1 Y-2 Z-0.5
    ...
    G00 Z0.5
    (end)
    G28 G91 X0 Y0 Z0.5

Y and depth are negated to match the machine's coordinate convention; every
number is rounded to the configured tool precision.
"""

from pathlib import Path

from vcarve.config import MachineConfig, PrecisionConfig
from vcarve.domain import ToolPathSegment
from vcarve.exceptions import ProgramWriteError


class GCodeWriter:
    """Writes toolpaths as G-code programs.

    Example:
        writer = GCodeWriter(MachineConfig(), PrecisionConfig())
        writer.write(toolpath, Path("drawing.gcode"))
    """

    def __init__(self, machine: MachineConfig, precision: PrecisionConfig) -> None:
        """Initialize the writer.

        Args:
            machine: Feed rate and safe height
            precision: Rounding applied to emitted coordinates
        """
        self._machine = machine
        self._precision = precision

    def format_number(self, value: float) -> str:
        """Round to tool precision and drop trailing zeros ("1.50" -> "1.5")."""
        decimals = self._precision.precision_decimals
        text = f"{self._precision.round(value):.{decimals}f}"
        if "." in text:
            text = text.rstrip("0").rstrip(".")
        return "0" if text in ("-0", "") else text

    def _move(self, code: str, sample: ToolPathSegment, with_depth: bool) -> str:
        x = self.format_number(sample.center.x)
        y = self.format_number(-sample.center.y)
        if not with_depth:
            return f"{code} X{x} Y{y}"
        z = self.format_number(-sample.depth)
        return f"{code} X{x} Y{y} Z{z}"

    def render_lines(self, toolpath: list[ToolPathSegment]) -> list[str]:
        """Build the program as a list of lines.

        A retract and a rapid move to the first sample bracket every change
        of contour index.

        Args:
            toolpath: Samples grouped by contour index

        Returns:
            Program lines without line terminators
        """
        safe = self.format_number(self._machine.safe_height)
        lines = [
            "%",
            "(Generated by vcarve)",
            f"G01 F{self._machine.feed_rate} (feed rate)",
        ]

        contour_index: int | None = None
        for sample in toolpath:
            if sample.contour_index != contour_index:
                contour_index = sample.contour_index
                lines.append(f"(contour {contour_index})")
                lines.append(f"G00 Z{safe}")
                lines.append(self._move("G00", sample, with_depth=False))
            lines.append(self._move("G01", sample, with_depth=True))

        lines.append(f"G00 Z{safe}")
        lines.append("(end)")
        lines.append(f"G28 G91 X0 Y0 Z{safe}")
        return lines

    def render(self, toolpath: list[ToolPathSegment]) -> str:
        """Build the program text."""
        return "\n".join(self.render_lines(toolpath)) + "\n"

    def write(self, toolpath: list[ToolPathSegment], output_path: Path) -> None:
        """Write the program to ``output_path``.

        Raises:
            ProgramWriteError: If the file cannot be written
        """
        try:
            output_path.write_text(self.render(toolpath), encoding="utf-8")
        except OSError as e:
            raise ProgramWriteError(str(output_path), str(e)) from e

    @staticmethod
    def get_program_path(input_path: Path) -> Path:
        """Program path next to the input: drawing.svg -> drawing.gcode."""
        return input_path.with_suffix(".gcode")
