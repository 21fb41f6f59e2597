"""Splitting lines into fields and selecting fields by index ranges."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional, Sequence

from fzkit.util.chars import Chars

RANGE_ELLIPSIS = 0

_INTEGER = re.compile(r"[+-]?[0-9]+")
_AWK_FIELD = re.compile(r"[^\t ]+[\t ]*")


@dataclass(frozen=True)
class Range:
    """A field range; RANGE_ELLIPSIS on either side means open-ended."""

    begin: int
    end: int


@dataclass
class Token:
    """A field of a line and the number of characters before it."""

    text: Chars
    prefix_length: int


@dataclass(frozen=True)
class Delimiter:
    """How to split a line; with neither field set, fields are AWK-style."""

    regex: Optional[re.Pattern] = None
    string: Optional[str] = None


def _new_range(begin: int, end: int) -> Range:
    if begin == 1:
        begin = RANGE_ELLIPSIS
    if end == -1:
        end = RANGE_ELLIPSIS
    return Range(begin, end)


def _index(part: str, expression: str) -> int:
    if not _INTEGER.fullmatch(part) or int(part) == 0:
        raise ValueError(f"invalid range expression: {expression!r}")
    return int(part)


def parse_range(text: str) -> Range:
    """Parse an expression such as '3', '..', '2..', '..-1' or '1..3'.

    Raises ValueError for a malformed expression or a zero index.
    """
    if text == "..":
        return _new_range(RANGE_ELLIPSIS, RANGE_ELLIPSIS)
    if text.startswith(".."):
        return _new_range(RANGE_ELLIPSIS, _index(text[2:], text))
    if text.endswith(".."):
        return _new_range(_index(text[:-2], text), RANGE_ELLIPSIS)
    if ".." in text:
        parts = text.split("..")
        if len(parts) != 2:
            raise ValueError(f"invalid range expression: {text!r}")
        return _new_range(_index(parts[0], text), _index(parts[1], text))
    index = _index(text, text)
    return _new_range(index, index)


def _to_chars(text: str) -> Chars:
    return Chars.from_bytes(text.encode("utf-8"))


def _with_prefix_lengths(pieces: Sequence[str], begin: int) -> List[Token]:
    result = []
    prefix_length = begin
    for piece in pieces:
        chars = _to_chars(piece)
        result.append(Token(chars, prefix_length))
        prefix_length += len(chars)
    return result


def _split_after(text: str, separator: str) -> List[str]:
    if not separator:
        return list(text)
    parts = text.split(separator)
    return [part + separator for part in parts[:-1]] + [parts[-1]]


def tokenize(text: str, delimiter: Delimiter) -> List[Token]:
    """Split text into tokens, each keeping its trailing delimiter."""
    if delimiter.string is None and delimiter.regex is None:
        stripped = text.lstrip("\t ")
        return _with_prefix_lengths(
            _AWK_FIELD.findall(stripped), len(text) - len(stripped)
        )

    if delimiter.string is not None:
        return _with_prefix_lengths(_split_after(text, delimiter.string), 0)

    pieces = []
    begin = 0
    for match in delimiter.regex.finditer(text):
        pieces.append(text[begin : match.end()])
        begin = match.end()
    if begin < len(text):
        pieces.append(text[begin:])
    return _with_prefix_lengths(pieces, 0)


def join_tokens(tokens: Sequence[Token]) -> str:
    return "".join(str(item.text) for item in tokens)


def transform(tokens: Sequence[Token], with_nth: Sequence[Range]) -> List[Token]:
    """Select the fields named by each range, one token per range."""
    count = len(tokens)
    result = []
    for rng in with_nth:
        parts: List[Chars] = []
        min_idx = 0
        if rng.begin == rng.end:
            idx = rng.begin
            if idx == RANGE_ELLIPSIS:
                parts.append(_to_chars(join_tokens(tokens)))
            else:
                if idx < 0:
                    idx += count + 1
                if 1 <= idx <= count:
                    min_idx = idx - 1
                    parts.append(tokens[idx - 1].text)
        else:
            if rng.begin == RANGE_ELLIPSIS:
                begin, end = 1, rng.end
                if end < 0:
                    end += count + 1
            elif rng.end == RANGE_ELLIPSIS:
                begin, end = rng.begin, count
                if begin < 0:
                    begin += count + 1
            else:
                begin, end = rng.begin, rng.end
                if begin < 0:
                    begin += count + 1
                if end < 0:
                    end += count + 1
            min_idx = max(0, begin - 1)
            parts.extend(
                tokens[i - 1].text for i in range(max(begin, 1), min(end, count) + 1)
            )

        if not parts:
            merged = _to_chars("")
        elif len(parts) == 1:
            merged = parts[0]
        else:
            merged = _to_chars("".join(str(part) for part in parts))

        prefix_length = tokens[min_idx].prefix_length if min_idx < count else 0
        result.append(Token(merged, prefix_length))
    return result