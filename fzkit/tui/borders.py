"""Border shapes and the characters that draw them."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum


class BorderShape(IntEnum):
    NONE = 0
    ROUNDED = 1
    SHARP = 2
    BOLD = 3
    BLOCK = 4
    THIN_BLOCK = 5
    DOUBLE = 6
    HORIZONTAL = 7
    VERTICAL = 8
    TOP = 9
    BOTTOM = 10
    LEFT = 11
    RIGHT = 12

    def has_right(self) -> bool:
        return self not in _NO_RIGHT

    def has_top(self) -> bool:
        return self not in _NO_TOP


_NO_RIGHT = frozenset(
    {
        BorderShape.NONE,
        BorderShape.LEFT,
        BorderShape.TOP,
        BorderShape.BOTTOM,
        BorderShape.HORIZONTAL,
    }
)
_NO_TOP = frozenset(
    {
        BorderShape.NONE,
        BorderShape.LEFT,
        BorderShape.RIGHT,
        BorderShape.BOTTOM,
        BorderShape.VERTICAL,
    }
)


@dataclass(frozen=True)
class BorderStyle:
    """A shape and its edge and corner characters."""

    shape: BorderShape
    top: str
    bottom: str
    left: str
    right: str
    top_left: str
    top_right: str
    bottom_left: str
    bottom_right: str


# top, bottom, left, right, top-left, top-right, bottom-left, bottom-right
_ASCII = "--||++++"
_ROUNDED = "──││╭╮╰╯"
_UNICODE = {
    BorderShape.SHARP: "──││┌┐└┘",
    BorderShape.BOLD: "━━┃┃┏┓┗┛",
    BorderShape.BLOCK: "▀▄▌▐▛▜▙▟",
    BorderShape.THIN_BLOCK: "▔▁▏▕🭽🭾🭼🭿",
    BorderShape.DOUBLE: "══║║╔╗╚╝",
}


def make_border_style(shape: BorderShape, unicode: bool = True) -> BorderStyle:
    """Border characters for shape, plain ASCII unless unicode is set."""
    chars = _UNICODE.get(shape, _ROUNDED) if unicode else _ASCII
    return BorderStyle(shape, *chars)


def make_transparent_border() -> BorderStyle:
    """A rounded border drawn entirely with spaces."""
    return BorderStyle(BorderShape.ROUNDED, *(" " * 8))