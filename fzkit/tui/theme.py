"""Colours, text attributes and colour themes for the terminal renderers."""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from enum import IntEnum, IntFlag
from typing import ClassVar


class Attr(IntFlag):
    """Text attributes; UNDEFINED means "inherit from the base theme"."""

    UNDEFINED = 0
    BOLD = 1
    DIM = 1 << 1
    ITALIC = 1 << 2
    UNDERLINE = 1 << 3
    BLINK = 1 << 4
    BLINK2 = 1 << 5
    REVERSE = 1 << 6
    STRIKE_THROUGH = 1 << 7
    REGULAR = 1 << 8
    CLEAR = 1 << 9

    def merge(self, other: "Attr") -> "Attr":
        return Attr(self | other)


class Color(int):
    """A terminal colour: a palette index, a 24-bit value, or a special value."""

    UNDEFINED: ClassVar["Color"]
    DEFAULT: ClassVar["Color"]
    BLACK: ClassVar["Color"]
    RED: ClassVar["Color"]
    GREEN: ClassVar["Color"]
    YELLOW: ClassVar["Color"]
    BLUE: ClassVar["Color"]
    MAGENTA: ClassVar["Color"]
    CYAN: ClassVar["Color"]
    WHITE: ClassVar["Color"]

    def is_default(self) -> bool:
        return self == -1

    def is_24(self) -> bool:
        """Whether this is a 24-bit RGB colour."""
        return self > 0 and (self & (1 << 24)) > 0

    def __repr__(self) -> str:
        return f"Color({int(self)})"


Color.UNDEFINED = Color(-2)
Color.DEFAULT = Color(-1)
Color.BLACK = Color(0)
Color.RED = Color(1)
Color.GREEN = Color(2)
Color.YELLOW = Color(3)
Color.BLUE = Color(4)
Color.MAGENTA = Color(5)
Color.CYAN = Color(6)
Color.WHITE = Color(7)


class FillReturn(IntEnum):
    """Outcome of filling text into a window."""

    CONTINUE = 0
    NEXT_LINE = 1
    SUSPEND = 2


def hex_to_color(rrggbb: str) -> Color:
    """Convert '#rrggbb' to a 24-bit colour; raises ValueError if malformed."""
    r = int(rrggbb[1:3], 16)
    g = int(rrggbb[3:5], 16)
    b = int(rrggbb[5:7], 16)
    return Color((1 << 24) + (r << 16) + (g << 8) + b)


@dataclass(frozen=True)
class ColorAttr:
    """A colour together with text attributes, as set in a theme."""

    color: Color = Color.UNDEFINED
    attr: Attr = Attr.UNDEFINED


@dataclass(frozen=True)
class ColorPair:
    """Foreground, background and attributes used for drawing."""

    fg: Color
    bg: Color
    attr: Attr = Attr.UNDEFINED

    def has_bg(self) -> bool:
        if self.attr & Attr.REVERSE:
            return self.fg != Color.DEFAULT
        return self.bg != Color.DEFAULT

    def _merge(self, other: "ColorPair", keep: Color) -> "ColorPair":
        fg = other.fg if other.fg != keep else self.fg
        bg = other.bg if other.bg != keep else self.bg
        return ColorPair(fg, bg, Attr(self.attr).merge(other.attr))

    def with_attr(self, attr: Attr) -> "ColorPair":
        return replace(self, attr=Attr(self.attr).merge(attr))

    def merge_attr(self, other: "ColorPair") -> "ColorPair":
        return self.with_attr(other.attr)

    def merge(self, other: "ColorPair") -> "ColorPair":
        """Take the other pair's colours except where they are undefined."""
        return self._merge(other, Color.UNDEFINED)

    def merge_non_default(self, other: "ColorPair") -> "ColorPair":
        """Take the other pair's colours except where they are the default."""
        return self._merge(other, Color.DEFAULT)


def _undefined() -> ColorAttr:
    return ColorAttr(Color.UNDEFINED, Attr.UNDEFINED)


@dataclass
class ColorTheme:
    """Colours for every element of the interface."""

    colored: bool = True
    input: ColorAttr = field(default_factory=_undefined)
    disabled: ColorAttr = field(default_factory=_undefined)
    fg: ColorAttr = field(default_factory=_undefined)
    bg: ColorAttr = field(default_factory=_undefined)
    preview_fg: ColorAttr = field(default_factory=_undefined)
    preview_bg: ColorAttr = field(default_factory=_undefined)
    dark_bg: ColorAttr = field(default_factory=_undefined)
    gutter: ColorAttr = field(default_factory=_undefined)
    prompt: ColorAttr = field(default_factory=_undefined)
    match: ColorAttr = field(default_factory=_undefined)
    current: ColorAttr = field(default_factory=_undefined)
    current_match: ColorAttr = field(default_factory=_undefined)
    spinner: ColorAttr = field(default_factory=_undefined)
    info: ColorAttr = field(default_factory=_undefined)
    cursor: ColorAttr = field(default_factory=_undefined)
    selected: ColorAttr = field(default_factory=_undefined)
    header: ColorAttr = field(default_factory=_undefined)
    separator: ColorAttr = field(default_factory=_undefined)
    scrollbar: ColorAttr = field(default_factory=_undefined)
    border: ColorAttr = field(default_factory=_undefined)
    preview_border: ColorAttr = field(default_factory=_undefined)
    preview_scrollbar: ColorAttr = field(default_factory=_undefined)
    border_label: ColorAttr = field(default_factory=_undefined)
    preview_label: ColorAttr = field(default_factory=_undefined)


@dataclass(frozen=True)
class Palette:
    """The colour pairs derived from a resolved theme."""

    prompt: ColorPair
    normal: ColorPair
    input: ColorPair
    disabled: ColorPair
    match: ColorPair
    cursor: ColorPair
    cursor_empty: ColorPair
    selected: ColorPair
    current: ColorPair
    current_match: ColorPair
    current_cursor: ColorPair
    current_cursor_empty: ColorPair
    current_selected: ColorPair
    current_selected_empty: ColorPair
    spinner: ColorPair
    info: ColorPair
    header: ColorPair
    separator: ColorPair
    scrollbar: ColorPair
    border: ColorPair
    preview: ColorPair
    preview_border: ColorPair
    border_label: ColorPair
    preview_label: ColorPair
    preview_scrollbar: ColorPair
    preview_spinner: ColorPair


_THEME_ATTRS = tuple(f.name for f in fields(ColorTheme) if f.name != "colored")


def _theme(colored: bool, fallback: Color, **colors) -> ColorTheme:
    values = {}
    for name in _THEME_ATTRS:
        value = colors.get(name, fallback)
        values[name] = value if isinstance(value, ColorAttr) else ColorAttr(Color(value))
    return ColorTheme(colored=colored, **values)


def empty_theme() -> ColorTheme:
    """A theme where every element is undefined."""
    return _theme(True, Color.UNDEFINED)


def no_color_theme() -> ColorTheme:
    """A colourless theme that marks matches and the current line by attributes."""
    return _theme(
        False,
        Color.DEFAULT,
        match=ColorAttr(Color.DEFAULT, Attr.UNDERLINE),
        current=ColorAttr(Color.DEFAULT, Attr.REVERSE),
        current_match=ColorAttr(Color.DEFAULT, Attr.REVERSE | Attr.UNDERLINE),
    )


def default16() -> ColorTheme:
    """The base theme for 16-colour terminals."""
    return _theme(
        True,
        Color.UNDEFINED,
        input=Color.DEFAULT,
        fg=Color.DEFAULT,
        bg=Color.DEFAULT,
        dark_bg=Color.BLACK,
        prompt=Color.BLUE,
        match=Color.GREEN,
        current=Color.YELLOW,
        current_match=Color.GREEN,
        spinner=Color.GREEN,
        info=Color.WHITE,
        cursor=Color.RED,
        selected=Color.MAGENTA,
        header=Color.CYAN,
        border=Color.BLACK,
        border_label=Color.WHITE,
    )


def dark256() -> ColorTheme:
    """The base theme for 256-colour terminals with a dark background."""
    return _theme(
        True,
        Color.UNDEFINED,
        input=Color.DEFAULT,
        fg=Color.DEFAULT,
        bg=Color.DEFAULT,
        dark_bg=236,
        prompt=110,
        match=108,
        current=254,
        current_match=151,
        spinner=148,
        info=144,
        cursor=161,
        selected=168,
        header=109,
        border=59,
        border_label=145,
    )


def light256() -> ColorTheme:
    """The base theme for 256-colour terminals with a light background."""
    return _theme(
        True,
        Color.UNDEFINED,
        input=Color.DEFAULT,
        fg=Color.DEFAULT,
        bg=Color.DEFAULT,
        dark_bg=251,
        prompt=25,
        match=66,
        current=237,
        current_match=23,
        spinner=65,
        info=101,
        cursor=161,
        selected=168,
        header=31,
        border=145,
        border_label=59,
    )


def _overlay(base: ColorAttr, top: ColorAttr) -> ColorAttr:
    color = top.color if top.color != Color.UNDEFINED else base.color
    attr = top.attr if top.attr != Attr.UNDEFINED else base.attr
    return ColorAttr(color, attr)


_FROM_BASE = (
    "input",
    "fg",
    "bg",
    "dark_bg",
    "prompt",
    "match",
    "current",
    "current_match",
    "spinner",
    "info",
    "cursor",
    "selected",
    "header",
    "border",
    "border_label",
)

# (element, element it falls back to); order matters
_DERIVED = (
    ("disabled", "input"),
    ("gutter", "dark_bg"),
    ("preview_fg", "fg"),
    ("preview_bg", "bg"),
    ("preview_label", "border_label"),
    ("preview_border", "border"),
    ("separator", "border"),
    ("scrollbar", "border"),
    ("preview_scrollbar", "preview_border"),
)


def init_theme(theme: ColorTheme, base_theme: ColorTheme, force_black: bool) -> Palette:
    """Fill the undefined parts of theme from base_theme and return its palette."""
    if force_black:
        theme.bg = ColorAttr(Color.BLACK, Attr.UNDEFINED)
    for name in _FROM_BASE:
        setattr(theme, name, _overlay(getattr(base_theme, name), getattr(theme, name)))
    for name, fallback in _DERIVED:
        setattr(theme, name, _overlay(getattr(theme, fallback), getattr(theme, name)))
    return make_palette(theme)


def _pair(fg: ColorAttr, bg: ColorAttr) -> ColorPair:
    bg_color = bg.color
    if fg.color == Color.DEFAULT and fg.attr & Attr.REVERSE:
        bg_color = Color.DEFAULT
    return ColorPair(fg.color, bg_color, fg.attr)


def make_palette(theme: ColorTheme) -> Palette:
    """Derive the drawing colour pairs from a resolved theme."""
    blank = ColorAttr(theme.fg.color, Attr.REGULAR)
    return Palette(
        prompt=_pair(theme.prompt, theme.bg),
        normal=_pair(theme.fg, theme.bg),
        input=_pair(theme.input, theme.bg),
        disabled=_pair(theme.disabled, theme.bg),
        match=_pair(theme.match, theme.bg),
        cursor=_pair(theme.cursor, theme.gutter),
        cursor_empty=_pair(blank, theme.gutter),
        selected=_pair(theme.selected, theme.gutter),
        current=_pair(theme.current, theme.dark_bg),
        current_match=_pair(theme.current_match, theme.dark_bg),
        current_cursor=_pair(theme.cursor, theme.dark_bg),
        current_cursor_empty=_pair(blank, theme.dark_bg),
        current_selected=_pair(theme.selected, theme.dark_bg),
        current_selected_empty=_pair(blank, theme.dark_bg),
        spinner=_pair(theme.spinner, theme.bg),
        info=_pair(theme.info, theme.bg),
        header=_pair(theme.header, theme.bg),
        separator=_pair(theme.separator, theme.bg),
        scrollbar=_pair(theme.scrollbar, theme.bg),
        border=_pair(theme.border, theme.bg),
        preview=_pair(theme.preview_fg, theme.preview_bg),
        preview_border=_pair(theme.preview_border, theme.preview_bg),
        border_label=_pair(theme.border_label, theme.bg),
        preview_label=_pair(theme.preview_label, theme.preview_bg),
        preview_scrollbar=_pair(theme.preview_scrollbar, theme.preview_bg),
        preview_spinner=_pair(theme.spinner, theme.preview_bg),
    )