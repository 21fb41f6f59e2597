"""Display-width measurement, clamping and other small helpers."""

from __future__ import annotations

import os
from array import array
from typing import Callable, Iterable, TypeVar, Union

import regex
from wcwidth import wcwidth

UINT16_MAX = 0xFFFF

_GRAPHEME = regex.compile(r"\X")

T = TypeVar("T")


class Slab:
    """Preallocated scratch arrays of 16- and 32-bit integers."""

    __slots__ = ("i16", "i32")

    def __init__(self, size16: int, size32: int) -> None:
        self.i16 = array("h", bytes(2 * size16))
        self.i32 = array("i", bytes(array("i").itemsize * size32))


def _rune_width(char: str) -> int:
    return max(wcwidth(char), 0)


def _cluster_width(cluster: str) -> int:
    for char in cluster:
        width = _rune_width(char)
        if width > 0:
            return width
    return 0


def _graphemes(text: str) -> list:
    return _GRAPHEME.findall(text)


def string_width(text: str) -> int:
    """Display width of text, where each CR and LF takes one column."""
    return (
        sum(_cluster_width(g) for g in _graphemes(text))
        + text.count("\n")
        + text.count("\r")
    )


def runes_width(
    runes: Union[str, Iterable[str]], prefix_width: int, tabstop: int, limit: int
) -> tuple:
    """Return (width, overflow index); the index is -1 if limit is never exceeded."""
    text = runes if isinstance(runes, str) else "".join(runes)
    width = 0
    idx = 0
    for cluster in _graphemes(text):
        if cluster == "\t":
            w = tabstop - (prefix_width + width) % tabstop
        else:
            w = string_width(cluster)
        width += w
        if width > limit:
            return width, idx
        idx += len(cluster)
    return width, -1


def truncate(text: str, limit: int) -> tuple:
    """Cut text to at most limit columns; return (text, width)."""
    kept = []
    width = 0
    for cluster in _graphemes(text):
        w = string_width(cluster)
        if width + w > limit:
            break
        width += w
        kept.append(cluster)
    return "".join(kept), width


def constrain(val: T, minimum: T, maximum: T) -> T:
    """Limit val to the range [minimum, maximum]."""
    if val < minimum:
        return minimum
    if val > maximum:
        return maximum
    return val


def as_uint16(val: int) -> int:
    return constrain(val, 0, UINT16_MAX)


def once(next_response: bool) -> Callable[[], bool]:
    """Return a function giving next_response on the first call and False after."""
    state = next_response

    def respond() -> bool:
        nonlocal state
        previous, state = state, False
        return previous

    return respond


def repeat_to_fill(text: str, length: int, limit: int) -> str:
    """Repeat text (of display width length) to fill limit columns."""
    times, rest = divmod(limit, length)
    output = text * times
    if rest > 0:
        for char in text:
            rest -= _rune_width(char)
            if rest < 0:
                break
            output += char
            if rest == 0:
                break
    return output


def is_tty() -> bool:
    """Whether standard input is a terminal."""
    return os.isatty(0)


def to_tty() -> bool:
    """Whether standard output is a terminal."""
    return os.isatty(1)