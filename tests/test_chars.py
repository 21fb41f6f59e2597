import pytest

from fzkit.util.chars import Chars


def test_to_chars_ascii():
    chars = Chars.from_bytes(b"foobar")
    assert chars.is_bytes()
    assert str(chars) == "foobar"


def test_chars_length():
    chars = Chars.from_bytes("\tabc한글  ".encode())
    assert not chars.is_bytes()
    assert len(chars) == 8
    assert chars.trim_length() == 5


def test_chars_to_string():
    text = "\tabc한글  "
    assert str(Chars.from_bytes(text.encode())) == text


@pytest.mark.parametrize(
    "text, expected",
    [
        ("hello", 5),
        ("hello ", 5),
        ("hello  ", 5),
        (" hello", 5),
        ("  hello", 5),
        (" hello ", 5),
        ("  hello  ", 5),
        ("h   o", 5),
        ("  h   o  ", 5),
        ("         ", 0),
    ],
)
def test_trim_length(text, expected):
    assert Chars.from_bytes(text.encode()).trim_length() == expected


def test_getitem_in_both_modes():
    ascii_chars = Chars.from_bytes(b"abc")
    wide = Chars.from_bytes("a한b".encode())
    assert ascii_chars[1] == "b"
    assert wide[1] == "한"
    with pytest.raises(IndexError):
        ascii_chars[3]


def test_from_runes_never_bytes():
    chars = Chars.from_runes("abc")
    assert not chars.is_bytes()
    assert str(chars) == "abc"
    assert str(Chars.from_runes([ord("x"), "y"])) == "xy"


def test_leading_and_trailing_whitespaces():
    chars = Chars.from_bytes(b"  ab   ")
    assert chars.leading_whitespaces() == 2
    assert chars.trailing_whitespaces() == 3


def test_trim_trailing_whitespaces():
    chars = Chars.from_bytes("한글 \t ".encode())
    chars.trim_trailing_whitespaces()
    assert str(chars) == "한글"
    assert chars.trailing_whitespaces() == 0


def test_to_runes_round_trip():
    text = "xy한"
    assert Chars.from_bytes(text.encode()).to_runes() == text


def test_prepend_keeps_mode():
    ascii_chars = Chars.from_bytes(b"bar")
    ascii_chars.prepend("foo")
    assert ascii_chars.is_bytes()
    assert str(ascii_chars) == "foobar"

    wide = Chars.from_bytes("글".encode())
    wide.prepend("한")
    assert not wide.is_bytes()
    assert str(wide) == "한글"


def test_prepend_non_ascii_to_bytes_switches_to_text():
    chars = Chars.from_bytes(b"bar")
    chars.prepend("한")
    assert not chars.is_bytes()
    assert str(chars) == "한bar"
    assert len(chars) == 4


def test_invalid_utf8_is_replaced():
    chars = Chars.from_bytes(b"a\xffb")
    assert str(chars) == "a\ufffdb"