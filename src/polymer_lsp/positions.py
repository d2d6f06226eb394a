"""Conversion between line/column positions and offsets into document text."""

from __future__ import annotations

from .errors import PositionOutOfRange
from .models import Position, SourceRange


def to_offset(text: str, position: Position) -> int:
    """Convert a position into an offset into ``text``.

    Args:
        text: The document text
        position: Zero-based line and column

    Returns:
        The offset of ``position`` in ``text``

    Raises:
        PositionOutOfRange: If the line or column lies outside of ``text``
    """
    if position.line < 0 or position.column < 0:
        raise PositionOutOfRange(f"Negative position {position}")

    offset = 0
    for _ in range(position.line):
        newline = text.find("\n", offset)
        if newline == -1:
            raise PositionOutOfRange(f"Line {position.line} is past the end of the text")
        offset = newline + 1

    line_end = text.find("\n", offset)
    if line_end == -1:
        line_end = len(text)
    if position.column > line_end - offset:
        raise PositionOutOfRange(
            f"Column {position.column} is past the end of line {position.line}"
        )
    return offset + position.column


def to_position(text: str, offset: int) -> Position:
    """Convert an offset into ``text`` into a position. Inverse of ``to_offset``."""
    if offset < 0 or offset > len(text):
        raise PositionOutOfRange(f"Offset {offset} is outside of the text")
    line = text.count("\n", 0, offset)
    line_start = text.rfind("\n", 0, offset) + 1
    return Position(line=line, column=offset - line_start)


def to_range(url: str, text: str, start: int, end: int) -> SourceRange:
    """Build a ``SourceRange`` from two offsets into ``text``."""
    return SourceRange(url=url, start=to_position(text, start), end=to_position(text, end))
