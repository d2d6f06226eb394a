"""Tests for line/column to offset conversion."""

from __future__ import annotations

import pytest

from polymer_lsp.errors import PositionOutOfRange
from polymer_lsp.models import Position, SourceRange
from polymer_lsp.positions import to_offset, to_position, to_range

TEXTS = [
    "",
    "<",
    "one line",
    "first\nsecond\n",
    "\n\n\n",
    "<dom-module>\n  <template>\n    <div>{{value}}</div>\n  </template>\n</dom-module>",
    "näive\nüñíçødé\n",
]


class TestPositions:
    """Test conversion between positions and offsets."""

    def test_to_offset(self):
        text = "abc\ndef\n\nghi"
        assert to_offset(text, Position(0, 0)) == 0
        assert to_offset(text, Position(0, 3)) == 3
        assert to_offset(text, Position(1, 0)) == 4
        assert to_offset(text, Position(1, 2)) == 6
        assert to_offset(text, Position(2, 0)) == 8
        assert to_offset(text, Position(3, 3)) == 12

    def test_to_position(self):
        text = "abc\ndef\n\nghi"
        assert to_position(text, 0) == Position(0, 0)
        assert to_position(text, 3) == Position(0, 3)
        assert to_position(text, 4) == Position(1, 0)
        assert to_position(text, 8) == Position(2, 0)
        assert to_position(text, 12) == Position(3, 3)

    @pytest.mark.parametrize("text", TEXTS)
    def test_round_trip(self, text):
        """Every in-bounds position survives offset conversion unchanged."""
        for line_number, line in enumerate(text.split("\n")):
            for column in range(len(line) + 1):
                position = Position(line_number, column)
                assert to_position(text, to_offset(text, position)) == position

    @pytest.mark.parametrize("text", TEXTS)
    def test_offset_round_trip(self, text):
        for offset in range(len(text) + 1):
            assert to_offset(text, to_position(text, offset)) == offset

    def test_line_out_of_range(self):
        with pytest.raises(PositionOutOfRange):
            to_offset("abc\ndef", Position(2, 0))

    def test_column_out_of_range(self):
        with pytest.raises(PositionOutOfRange):
            to_offset("abc\ndef", Position(0, 4))
        with pytest.raises(PositionOutOfRange):
            to_offset("abc\ndef", Position(1, 4))

    def test_negative_position(self):
        with pytest.raises(PositionOutOfRange):
            to_offset("abc", Position(0, -1))
        with pytest.raises(PositionOutOfRange):
            to_offset("abc", Position(-1, 0))

    def test_offset_out_of_range(self):
        with pytest.raises(PositionOutOfRange):
            to_position("abc", 4)
        with pytest.raises(PositionOutOfRange):
            to_position("abc", -1)

    def test_out_of_range_is_value_error(self):
        with pytest.raises(ValueError):
            to_offset("", Position(1, 0))

    def test_to_range(self):
        text = "<a>\n<b></b>"
        assert to_range("x.html", text, 4, 7) == SourceRange(
            url="x.html", start=Position(1, 0), end=Position(1, 3)
        )
