"""Path-data tokenizer.

Turns an SVG path-data string (the ``d`` attribute) into absolute draw
operations. Supported commands are M, L, H, V, C, Q, Z in absolute and
relative form, with implicit command repetition. Arcs and the smooth-curve
shorthands are rejected.

Example:
    >>> ops = parse_path_data("M0 0 h10 v10 h-10 z")
    >>> [op.command.value for op in ops]
    ['move', 'horizontal', 'vertical', 'horizontal', 'close']
"""

import re

from vcarve.domain import UNINITIALIZED, DrawCommand, DrawOperation, Point
from vcarve.exceptions import MalformedInputError, UnsupportedCommandError

# Every letter except the exponent marker starts a command word
_TOKEN_RE = re.compile(r"[A-DF-Za-df-z][A-Za-z]*|[^\sA-DF-Za-df-z,]+")
_NUMBER_RE = re.compile(r"[-+]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][-+]?\d+)?")

_ARG_COUNTS: dict[str, int] = {
    "M": 2,
    "L": 2,
    "H": 1,
    "V": 1,
    "C": 6,
    "Q": 4,
    "Z": 0,
}

_UNSUPPORTED = frozenset("AaSsTt")


def _tokenize(path_data: str) -> list[str]:
    """Split path data into command letters and number strings.

    Numbers glued together ("10-5", "0.5.5") are split apart the way SVG
    allows. Close commands take no coordinates, so another command may follow
    them directly ("zM"). Any other run of letters ("nan") and any chunk that
    is not entirely made of numbers is returned as is, to be reported by the
    parser.
    """
    tokens: list[str] = []
    for chunk in _TOKEN_RE.findall(path_data):
        if chunk.isalpha():
            if all(letter in "Zz" for letter in chunk[:-1]):
                tokens.extend(chunk)
            else:
                tokens.append(chunk)
            continue

        numbers = _NUMBER_RE.findall(chunk)
        if "".join(numbers) == chunk:
            tokens.extend(numbers)
        else:
            tokens.append(chunk)
    return tokens


def _number(token: str, command_index: int) -> float:
    try:
        return float(token)
    except ValueError:
        raise MalformedInputError(token, command_index) from None


class _PathParser:
    """Stateful walk over the token list."""

    def __init__(self, tokens: list[str]) -> None:
        self.tokens = tokens
        self.pos = 0
        self.operations: list[DrawOperation] = []
        self.current = UNINITIALIZED
        self.initial = UNINITIALIZED
        self.moves = 0

    @property
    def command_index(self) -> int:
        return len(self.operations)

    @property
    def contour_index(self) -> int:
        return max(self.moves - 1, 0)

    def _has_number(self) -> bool:
        return self.pos < len(self.tokens) and not self.tokens[self.pos].isalpha()

    def _args(self, command: str, count: int) -> list[float]:
        values: list[float] = []
        for _ in range(count):
            if not self._has_number():
                found = self.tokens[self.pos] if self.pos < len(self.tokens) else "<end>"
                raise MalformedInputError(
                    found,
                    self.command_index,
                    f"'{command}' expects {count} coordinates",
                )
            values.append(_number(self.tokens[self.pos], self.command_index))
            self.pos += 1
        return values

    def _emit(self, command: DrawCommand, points: tuple[Point, ...]) -> None:
        self.operations.append(DrawOperation(command, points, self.command_index))
        if points:
            self.current = points[-1]

    def parse(self) -> list[DrawOperation]:
        command = ""
        while self.pos < len(self.tokens):
            token = self.tokens[self.pos]
            if token.isalpha() and len(token) > 1:
                raise MalformedInputError(token, self.command_index)
            if token.isalpha():
                command = token
                self.pos += 1
            elif not command:
                raise MalformedInputError(token, self.command_index, "expected a command")
            elif command in "Zz":
                raise MalformedInputError(token, self.command_index, "'Z' takes no coordinates")

            if command in _UNSUPPORTED or command.upper() not in _ARG_COUNTS:
                raise UnsupportedCommandError(command, self.command_index, self.contour_index)

            command = self._step(command)
        return self.operations

    def _step(self, command: str) -> str:
        """Process one command occurrence; returns the command implied next."""
        upper = command.upper()
        relative = command.islower()
        args = self._args(command, _ARG_COUNTS[upper])

        origin = self.current
        if relative and origin.is_uninitialized:
            # A leading relative move is taken as absolute
            origin = Point(0.0, 0.0)
        if not relative:
            origin = Point(0.0, 0.0)

        def pt(x: float, y: float) -> Point:
            return Point(origin.x + x, origin.y + y)

        if upper == "M":
            point = pt(args[0], args[1])
            self.initial = point
            self.moves += 1
            self._emit(DrawCommand.MOVE, (point,))
            return "l" if relative else "L"

        if upper == "Z":
            self._emit(DrawCommand.CLOSE, ())
            self.current = self.initial
            return command

        if self.current.is_uninitialized:
            raise MalformedInputError(command, self.command_index, "drawing before a move")

        if upper == "L":
            self._emit(DrawCommand.LINE, (pt(args[0], args[1]),))
        elif upper == "H":
            x = self.current.x + args[0] if relative else args[0]
            self._emit(DrawCommand.HORIZONTAL, (Point(x, self.current.y),))
        elif upper == "V":
            y = self.current.y + args[0] if relative else args[0]
            self._emit(DrawCommand.VERTICAL, (Point(self.current.x, y),))
        elif upper == "C":
            self._emit(
                DrawCommand.CUBIC,
                (pt(args[0], args[1]), pt(args[2], args[3]), pt(args[4], args[5])),
            )
        elif upper == "Q":
            self._emit(DrawCommand.QUADRATIC, (pt(args[0], args[1]), pt(args[2], args[3])))

        return command


def parse_path_data(path_data: str | None) -> list[DrawOperation]:
    """Parse SVG path data into absolute draw operations.

    Args:
        path_data: Contents of a path's ``d`` attribute

    Returns:
        Draw operations in order; empty for blank input

    Raises:
        UnsupportedCommandError: For arcs (A/a), smooth curves (S/s/T/t) or
            unknown command letters
        MalformedInputError: For tokens that are not numbers (including words
            such as "nan"), missing
            coordinates, or coordinates without a command
    """
    if path_data is None or not path_data.strip():
        return []
    return _PathParser(_tokenize(path_data)).parse()
