"""Exception hierarchy for vcarve."""


class VCarveError(Exception):
    """Base exception for all vcarve errors."""

    pass


class PathDataError(VCarveError):
    """Errors related to path-data command strings."""

    pass


class UnsupportedCommandError(PathDataError):
    """A path command the segment model cannot represent."""

    def __init__(self, command: str, command_index: int, contour_index: int = 0) -> None:
        self.command = command
        self.command_index = command_index
        self.contour_index = contour_index
        super().__init__(
            f"Path command '{command}' is not supported "
            f"(contour {contour_index}, command #{command_index})"
        )


class MalformedInputError(PathDataError):
    """A coordinate token that cannot be parsed as a number."""

    def __init__(self, token: str, command_index: int, reason: str = "not a number") -> None:
        self.token = token
        self.command_index = command_index
        self.reason = reason
        super().__init__(
            f"Malformed path data at command #{command_index}: '{token}' ({reason})"
        )


class GeometryError(VCarveError):
    """Errors in geometric calculations."""

    pass


class PathAssemblyError(GeometryError):
    """A draw operation sequence that cannot be assembled into contours."""

    def __init__(self, contour_index: int, command_index: int, reason: str) -> None:
        self.contour_index = contour_index
        self.command_index = command_index
        self.reason = reason
        super().__init__(
            f"Cannot assemble contour {contour_index} at command #{command_index}: {reason}"
        )


class SourceError(VCarveError):
    """Errors related to loading drawing sources."""

    pass


class SourceLoadError(SourceError):
    """Error loading an SVG document or font file."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to load '{path}': {reason}")


class GlyphNotFoundError(SourceError):
    """Requested glyph not found in font."""

    def __init__(self, glyph_name: str) -> None:
        self.glyph_name = glyph_name
        super().__init__(f"Glyph '{glyph_name}' not found in font")


class OutputError(VCarveError):
    """Errors related to writing the machine program."""

    pass


class ProgramWriteError(OutputError):
    """Error writing the G-code program."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to write program '{path}': {reason}")
