"""Tests for the path-data tokenizer."""

import pytest

from vcarve.domain import DrawCommand, Point
from vcarve.exceptions import MalformedInputError, PathDataError, UnsupportedCommandError
from vcarve.io import parse_path_data


def ends(path_data: str) -> list[Point | None]:
    return [op.end for op in parse_path_data(path_data)]


class TestCommands:
    """Tests for supported commands."""

    def test_absolute_square(self) -> None:
        ops = parse_path_data("M0 0 L10 0 L10 10 Z")
        assert [op.command for op in ops] == [
            DrawCommand.MOVE,
            DrawCommand.LINE,
            DrawCommand.LINE,
            DrawCommand.CLOSE,
        ]
        assert ops[2].end == Point(10, 10)

    def test_horizontal_and_vertical(self) -> None:
        ops = parse_path_data("M0 0 h10 v10 h-10 z")
        assert [op.command.value for op in ops] == [
            "move",
            "horizontal",
            "vertical",
            "horizontal",
            "close",
        ]
        assert ends("M0 0 h10 v10 h-10 z")[1:4] == [Point(10, 0), Point(10, 10), Point(0, 10)]

    def test_absolute_horizontal_keeps_y(self) -> None:
        assert ends("M3 4 H10 V-2") == [Point(3, 4), Point(10, 4), Point(10, -2)]

    def test_quadratic_and_cubic_points(self) -> None:
        quad = parse_path_data("M10 10 q5 5 10 0")[1]
        assert quad.command == DrawCommand.QUADRATIC
        assert quad.points == (Point(15, 15), Point(20, 10))

        cubic = parse_path_data("M0 0 C1 1 2 2 3 0")[1]
        assert cubic.command == DrawCommand.CUBIC
        assert cubic.points == (Point(1, 1), Point(2, 2), Point(3, 0))

    def test_relative_cubic(self) -> None:
        cubic = parse_path_data("M1 1 c1 1 2 2 3 0")[1]
        assert cubic.points == (Point(2, 2), Point(3, 3), Point(4, 1))

    def test_command_indices_are_sequential(self) -> None:
        ops = parse_path_data("M0 0 L1 0 1 1 Z")
        assert [op.index for op in ops] == [0, 1, 2, 3]


class TestImplicitBehaviour:
    """Tests for implicit repetition and current-point rules."""

    def test_coordinates_after_move_are_lines(self) -> None:
        ops = parse_path_data("M0 0 10 0 10 10")
        assert [op.command for op in ops] == [
            DrawCommand.MOVE,
            DrawCommand.LINE,
            DrawCommand.LINE,
        ]

    def test_relative_move_continues_as_relative_lines(self) -> None:
        assert ends("m1 1 2 2") == [Point(1, 1), Point(3, 3)]

    def test_repeated_relative_line(self) -> None:
        assert ends("M0 0 l1 0 1 0") == [Point(0, 0), Point(1, 0), Point(2, 0)]

    def test_leading_relative_move_is_absolute(self) -> None:
        assert ends("m5 5 l1 1") == [Point(5, 5), Point(6, 6)]

    def test_close_returns_to_subpath_start(self) -> None:
        result = ends("M0 0 L10 0 L10 10 Z m5 5 l1 0")
        assert result[-2:] == [Point(5, 5), Point(6, 5)]

    def test_blank_input(self) -> None:
        assert parse_path_data("") == []
        assert parse_path_data("   \n") == []
        assert parse_path_data(None) == []


class TestNumberFormats:
    """Tests for number tokenization."""

    def test_commas_and_whitespace(self) -> None:
        assert ends("M0,0 L10,0\nL 10 , 10") == [Point(0, 0), Point(10, 0), Point(10, 10)]

    def test_glued_negative_numbers(self) -> None:
        assert ends("M0-5L10-5") == [Point(0, -5), Point(10, -5)]

    def test_glued_decimals(self) -> None:
        assert ends("M.5.5") == [Point(0.5, 0.5)]

    def test_exponents(self) -> None:
        assert ends("M1e1 2E-1") == [Point(10, 0.2)]

    def test_signed_numbers(self) -> None:
        assert ends("M+1 -1") == [Point(1, -1)]

    def test_close_glued_to_next_command(self) -> None:
        commands = [op.command for op in parse_path_data("M0 0 L1 1zm5 5")]
        assert commands == [
            DrawCommand.MOVE,
            DrawCommand.LINE,
            DrawCommand.CLOSE,
            DrawCommand.MOVE,
        ]


class TestErrors:
    """Tests for unsupported and malformed input."""

    @pytest.mark.parametrize("command", ["A", "a", "S", "s", "T", "t"])
    def test_arcs_and_shorthands_are_unsupported(self, command: str) -> None:
        with pytest.raises(UnsupportedCommandError) as exc_info:
            parse_path_data(f"M0 0 {command}1 1 0 0 1 10 10")
        assert exc_info.value.command == command
        assert exc_info.value.command_index == 1
        assert f"'{command}'" in str(exc_info.value)

    def test_unknown_letter_is_unsupported(self) -> None:
        with pytest.raises(UnsupportedCommandError) as exc_info:
            parse_path_data("M0 0 L1 1 X5")
        assert exc_info.value.command == "X"
        assert exc_info.value.command_index == 2

    def test_unsupported_reports_its_contour(self) -> None:
        with pytest.raises(UnsupportedCommandError) as exc_info:
            parse_path_data("M0 0 L1 0 L1 1 Z M5 5 A1 1 0 0 1 6 6")
        assert exc_info.value.contour_index == 1
        assert exc_info.value.command_index == 5
        assert "contour 1" in str(exc_info.value)

    def test_first_contour_is_index_zero(self) -> None:
        with pytest.raises(UnsupportedCommandError) as exc_info:
            parse_path_data("M0 0 S1 1 2 2")
        assert exc_info.value.contour_index == 0

    @pytest.mark.parametrize(
        ("path_data", "token"),
        [
            ("M0 0 L nan 5", "nan"),
            ("M0 0 L10 0 inf", "inf"),
            ("M0 0 L10 0 L5 Infinity", "Infinity"),
        ],
    )
    def test_words_are_malformed_numbers(self, path_data: str, token: str) -> None:
        with pytest.raises(MalformedInputError) as exc_info:
            parse_path_data(path_data)
        assert exc_info.value.token == token

    def test_bad_number(self) -> None:
        with pytest.raises(MalformedInputError) as exc_info:
            parse_path_data("M0 0 L10 #5")
        assert exc_info.value.token == "#5"
        assert exc_info.value.command_index == 1

    def test_missing_coordinates(self) -> None:
        with pytest.raises(MalformedInputError) as exc_info:
            parse_path_data("M0 0 L10")
        assert exc_info.value.token == "<end>"

    def test_numbers_before_any_command(self) -> None:
        with pytest.raises(MalformedInputError, match="expected a command"):
            parse_path_data("10 10 L5 5")

    def test_numbers_after_close(self) -> None:
        with pytest.raises(MalformedInputError):
            parse_path_data("M0 0 L1 1 Z 5 5")

    def test_draw_before_move(self) -> None:
        with pytest.raises(MalformedInputError, match="before a move"):
            parse_path_data("L5 5")

    def test_errors_share_a_base_class(self) -> None:
        with pytest.raises(PathDataError):
            parse_path_data("M0 0 A1 1 0 0 1 2 2")
