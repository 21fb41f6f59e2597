"""A terminal window drawn with plain escape sequences."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Protocol, Tuple

import regex
from wcwidth import wcwidth

from fzkit.tui.borders import BorderShape, BorderStyle
from fzkit.tui.theme import Attr, Color, ColorPair, FillReturn, Palette
from fzkit.util.common import string_width

_GRAPHEME = regex.compile(r"\X")

_AROUND = frozenset(
    {
        BorderShape.ROUNDED,
        BorderShape.SHARP,
        BorderShape.BOLD,
        BorderShape.BLOCK,
        BorderShape.THIN_BLOCK,
        BorderShape.DOUBLE,
    }
)

_ATTR_CODES = (
    (Attr.BOLD, "1"),
    (Attr.DIM, "2"),
    (Attr.ITALIC, "3"),
    (Attr.UNDERLINE, "4"),
    (Attr.BLINK, "5"),
    (Attr.REVERSE, "7"),
    (Attr.STRIKE_THROUGH, "9"),
)


class Output(Protocol):
    """What a window needs from the renderer that owns it."""

    def csi(self, code: str) -> str: ...

    def stderr_internal(self, text: str, allow_nlcr: bool, reset_code: str) -> None: ...

    def move(self, y: int, x: int) -> None: ...


@dataclass(frozen=True)
class WrappedLine:
    """A piece of a line that fits the window, with its display width."""

    text: str
    display_width: int


def repeat(char: str, times: int) -> str:
    """char repeated times times; empty when times is not positive."""
    return char * times if times > 0 else ""


def cleanse(text: str) -> str:
    """Remove escape characters from text."""
    return text.replace("\x1b", "")


def _rune_width(char: str) -> int:
    return max(wcwidth(char), 0)


def _trunc_divmod(a: int, b: int) -> Tuple[int, int]:
    quotient = abs(a) // abs(b)
    if (a >= 0) != (b > 0):
        quotient = -quotient
    return quotient, a - quotient * b


def attr_codes(attr: Attr) -> List[str]:
    """SGR parameters for the given attributes."""
    if attr & Attr.CLEAR:
        return []
    return [code for flag, code in _ATTR_CODES if attr & flag]


def color_codes(fg: Color, bg: Color) -> List[str]:
    """SGR parameters for a foreground and background colour."""
    codes: List[str] = []
    for color, offset in ((fg, 0), (bg, 10)):
        c = int(color)
        if c == Color.DEFAULT:
            continue
        if Color(c).is_24():
            r, g, b = (c >> 16) & 0xFF, (c >> 8) & 0xFF, c & 0xFF
            codes.append(f"{38 + offset};2;{r};{g};{b}")
        elif Color.BLACK <= c <= Color.WHITE:
            codes.append(str(c + 30 + offset))
        elif Color.WHITE < c < 16:
            codes.append(str(c + 90 + offset - 8))
        elif 16 <= c < 256:
            codes.append(f"{38 + offset};5;{c}")
    return codes


def wrap_line(text: str, prefix_length: int, limit: int, tabstop: int) -> List[WrappedLine]:
    """Split text into pieces no wider than limit, the first after prefix_length columns."""
    lines: List[WrappedLine] = []
    width = 0
    line = ""
    for cluster in _GRAPHEME.findall(text):
        piece = cluster
        if cluster == "\t":
            w = tabstop - (prefix_length + width) % tabstop
            piece = repeat(" ", w)
        elif cluster[0] == "\r":
            w = 1
        else:
            w = string_width(cluster)
        width += w

        if prefix_length + width <= limit:
            line += piece
        else:
            lines.append(WrappedLine(line, width - w))
            line = piece
            prefix_length = 0
            width = w
    lines.append(WrappedLine(line, width))
    return lines


class LightWindow:
    """A rectangular region of the screen, drawn through its renderer."""

    def __init__(
        self,
        renderer: Output,
        top: int,
        left: int,
        width: int,
        height: int,
        preview: bool,
        border_style: BorderStyle,
        palette: Palette,
        colored: bool = True,
        tabstop: int = 8,
        fg: Color = Color.DEFAULT,
        bg: Color = Color.DEFAULT,
    ) -> None:
        self.renderer = renderer
        self.top = top
        self.left = left
        self.width = width
        self.height = height
        self.preview = preview
        self.border = border_style
        self.palette = palette
        self.colored = colored
        self.tabstop = tabstop
        self.fg = fg
        self.bg = bg
        self.x = 0
        self.y = 0
        self.closed = False
        self._draw_border(False)

    # borders

    def _border_color(self) -> ColorPair:
        return self.palette.preview_border if self.preview else self.palette.border

    def draw_border(self) -> None:
        self._draw_border(False)

    def draw_hborder(self) -> None:
        self._draw_border(True)

    def _draw_border(self, only_horizontal: bool) -> None:
        shape = self.border.shape
        if shape in _AROUND:
            self._draw_border_around(only_horizontal)
        elif shape == BorderShape.HORIZONTAL:
            self._draw_border_horizontal(True, True)
        elif shape == BorderShape.TOP:
            self._draw_border_horizontal(True, False)
        elif shape == BorderShape.BOTTOM:
            self._draw_border_horizontal(False, True)
        elif only_horizontal:
            return
        elif shape == BorderShape.VERTICAL:
            self._draw_border_vertical(True, True)
        elif shape == BorderShape.LEFT:
            self._draw_border_vertical(True, False)
        elif shape == BorderShape.RIGHT:
            self._draw_border_vertical(False, True)

    def _draw_border_horizontal(self, top: bool, bottom: bool) -> None:
        color = self._border_color()
        hw = _rune_width(self.border.top) or 1
        count = _trunc_divmod(self.width, hw)[0]
        if top:
            self.move(0, 0)
            self.cprint(color, repeat(self.border.top, count))
        if bottom:
            self.move(self.height - 1, 0)
            self.cprint(color, repeat(self.border.bottom, count))

    def _draw_border_vertical(self, left: bool, right: bool) -> None:
        inner = self.width - 2
        if not left or not right:
            inner += 1
        color = self._border_color()
        for y in range(self.height):
            self.move(y, 0)
            if left:
                self.cprint(color, self.border.left)
            self.cprint(color, repeat(" ", inner))
            if right:
                self.cprint(color, self.border.right)

    def _draw_border_around(self, only_horizontal: bool) -> None:
        b = self.border
        self.move(0, 0)
        color = self._border_color()
        hw = _rune_width(b.top) or 1
        tcw = _rune_width(b.top_left) + _rune_width(b.top_right)
        bcw = _rune_width(b.bottom_left) + _rune_width(b.bottom_right)
        count, rem = _trunc_divmod(self.width - tcw, hw)
        self.cprint(
            color, b.top_left + repeat(b.top, count) + repeat(" ", rem) + b.top_right
        )
        if not only_horizontal:
            vw = _rune_width(b.left)
            for y in range(1, self.height - 1):
                self.move(y, 0)
                self.cprint(color, b.left)
                self.cprint(color, repeat(" ", self.width - vw * 2))
                self.cprint(color, b.right)
        self.move(self.height - 1, 0)
        count, rem = _trunc_divmod(self.width - bcw, hw)
        self.cprint(
            color,
            b.bottom_left + repeat(b.bottom, count) + repeat(" ", rem) + b.bottom_right,
        )

    # geometry

    def refresh(self) -> None:
        """Put the renderer's cursor back at this window's cursor."""
        self.renderer.move(self.top + self.y, self.left + self.x)

    def close(self) -> None:
        """Mark the window as no longer in use."""
        self.closed = True

    def enclose(self, y: int, x: int) -> bool:
        """Whether the screen position lies inside the window."""
        return (
            self.left <= x < self.left + self.width
            and self.top <= y < self.top + self.height
        )

    def move(self, y: int, x: int) -> None:
        self.x = x
        self.y = y
        self.renderer.move(self.top + y, self.left + x)

    def move_and_clear(self, y: int, x: int) -> None:
        """Move and blank the rest of the line inside the window."""
        self.move(y, x)
        self.print(repeat(" ", self.width - x))
        self.move(y, x)

    # printing

    def _csi_color(self, fg: Color, bg: Color, attr: Attr) -> Tuple[bool, str]:
        codes = attr_codes(attr) + color_codes(fg, bg)
        code = self.renderer.csi(";" + ";".join(codes) + "m")
        return bool(codes), code

    def print(self, text: str) -> None:
        self._cprint2(Color.DEFAULT, self.bg, Attr.REGULAR, text)

    def cprint(self, pair: ColorPair, text: str) -> None:
        _, code = self._csi_color(pair.fg, pair.bg, pair.attr)
        self.renderer.stderr_internal(cleanse(text), False, code)
        self.renderer.csi("m")

    def _cprint2(self, fg: Color, bg: Color, attr: Attr, text: str) -> None:
        has_colors, code = self._csi_color(fg, bg, attr)
        self.renderer.stderr_internal(cleanse(text), False, code)
        if has_colors:
            self.renderer.csi("m")

    def _fill(self, text: str, reset_code: str) -> FillReturn:
        all_lines = text.split("\n")
        for i, line in enumerate(all_lines):
            lines = wrap_line(line, self.x, self.width, self.tabstop)
            for j, wrapped in enumerate(lines):
                self.renderer.stderr_internal(wrapped.text, False, reset_code)
                self.x += wrapped.display_width

                if j < len(lines) - 1 or i < len(all_lines) - 1:
                    if self.y + 1 >= self.height:
                        return FillReturn.SUSPEND
                    self.move_and_clear(self.y, self.x)
                    self.move(self.y + 1, 0)
                    self.renderer.stderr_internal(reset_code, True, "")
        if self.x + 1 >= self.width:
            if self.y + 1 >= self.height:
                return FillReturn.SUSPEND
            self.move(self.y + 1, 0)
            self.renderer.stderr_internal(reset_code, True, "")
            return FillReturn.NEXT_LINE
        return FillReturn.CONTINUE

    def _set_bg(self) -> str:
        if self.bg != Color.DEFAULT:
            _, code = self._csi_color(Color.DEFAULT, self.bg, Attr.REGULAR)
            return code
        # clears the dim attribute left behind by a CR marker
        return "\x1b[m"

    def fill(self, text: str) -> FillReturn:
        """Write text at the cursor, wrapping at the window's edge."""
        self.move(self.y, self.x)
        return self._fill(text, self._set_bg())

    def cfill(self, fg: Color, bg: Color, attr: Attr, text: str) -> FillReturn:
        """Like fill, in the given colours; defaults fall back to the window's."""
        self.move(self.y, self.x)
        if fg == Color.DEFAULT:
            fg = self.fg
        if bg == Color.DEFAULT:
            bg = self.bg
        has_colors, reset_code = self._csi_color(fg, bg, attr)
        if has_colors:
            try:
                return self._fill(text, reset_code)
            finally:
                self.renderer.csi("m")
        return self._fill(text, self._set_bg())

    def finish_fill(self) -> None:
        """Blank everything after the cursor."""
        if self.y < self.height:
            self.move_and_clear(self.y, self.x)
        for y in range(self.y + 1, self.height):
            self.move_and_clear(y, 0)

    def erase(self) -> None:
        self.draw_border()
        self.move(0, 0)
        self.finish_fill()
        self.move(0, 0)

    def erase_maybe(self) -> bool:
        return False