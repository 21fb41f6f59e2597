"""Compact text storage that keeps pure ASCII input as bytes."""

from __future__ import annotations

from itertools import takewhile
from typing import Iterable, Union

from fzkit.util.common import as_uint16

_LATIN1_SPACES = frozenset("\t\n\v\f\r \x85\xa0")


def _is_space(char: str) -> bool:
    if ord(char) <= 0xFF:
        return char in _LATIN1_SPACES
    return char.isspace()


class Chars:
    """A line of input, held as bytes when ASCII and as text otherwise."""

    __slots__ = ("_data", "_trim_length", "index")

    def __init__(self, data: Union[bytes, str] = b"", index: int = 0) -> None:
        self._data: Union[bytes, str] = data
        self._trim_length: int | None = None
        self.index = index

    @classmethod
    def from_bytes(cls, data: bytes) -> "Chars":
        """Build from UTF-8 bytes; invalid sequences become U+FFFD."""
        data = bytes(data)
        if data.isascii():
            return cls(data)
        return cls(data.decode("utf-8", errors="replace"))

    @classmethod
    def from_runes(cls, runes: Union[str, Iterable[Union[str, int]]]) -> "Chars":
        """Build from characters or code points; always kept as text."""
        if isinstance(runes, str):
            return cls(runes)
        return cls("".join(chr(r) if isinstance(r, int) else r for r in runes))

    def is_bytes(self) -> bool:
        return isinstance(self._data, bytes)

    def __len__(self) -> int:
        return len(self._data)

    def __getitem__(self, i: int) -> str:
        item = self._data[i]
        return chr(item) if isinstance(item, int) else item

    def __iter__(self):
        if isinstance(self._data, bytes):
            return iter(self._data.decode("ascii"))
        return iter(self._data)

    def __str__(self) -> str:
        if isinstance(self._data, bytes):
            return self._data.decode("ascii")
        return self._data

    def __repr__(self) -> str:
        return f"Chars({self._data!r}, index={self.index})"

    def trim_length(self) -> int:
        """Length without leading and trailing whitespace, capped to 16 bits."""
        if self._trim_length is None:
            leading = self.leading_whitespaces()
            if leading == len(self):
                self._trim_length = 0
            else:
                self._trim_length = as_uint16(
                    len(self) - leading - self.trailing_whitespaces()
                )
        return self._trim_length

    def leading_whitespaces(self) -> int:
        return sum(1 for _ in takewhile(_is_space, self))

    def trailing_whitespaces(self) -> int:
        return sum(1 for _ in takewhile(_is_space, reversed(str(self))))

    def trim_trailing_whitespaces(self) -> None:
        count = self.trailing_whitespaces()
        if count:
            self._data = self._data[:-count]
            self._trim_length = None

    def to_runes(self) -> str:
        """The characters as text."""
        return str(self)

    def prepend(self, prefix: str) -> None:
        if isinstance(self._data, bytes) and prefix.isascii():
            self._data = prefix.encode("ascii") + self._data
        else:
            self._data = prefix + str(self)
        self._trim_length = None