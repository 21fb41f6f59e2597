import io
import os

import pytest

from fzkit.tui.borders import BorderShape, make_border_style
from fzkit.tui.events import Event, EventType, MouseEvent, alt_key, ctrl_alt_key, key
from fzkit.tui.light import (
    LightRenderer,
    TermSize,
    is_light_renderer_supported,
    ttyname,
)
from fzkit.tui.theme import dark256, default16

LF = "\x1b[2m␊"


@pytest.fixture
def make_renderer():
    opened = []

    def factory(data=b"", mouse=False, clear_on_exit=True, fullscreen=False):
        read_fd, write_fd = os.pipe()
        if data:
            os.write(write_fd, data)
        os.close(write_fd)
        ttyin = os.fdopen(read_fd, "rb", buffering=0)
        opened.append(ttyin)
        out = io.StringIO()
        renderer = LightRenderer(
            default16(),
            False,
            mouse,
            8,
            clear_on_exit,
            fullscreen,
            lambda h: h,
            ttyin,
            out,
        )
        renderer.esc_delay = 0
        return renderer, out

    yield factory
    for f in opened:
        f.close()


@pytest.mark.parametrize(
    "data, expected",
    [
        (b"a", key("a")),
        ("한".encode("utf-8"), key("한")),
        (b"\x03", Event(EventType.CTRL_C)),
        (b"\x01", Event(EventType.CTRL_A)),
        (b"\x7f", Event(EventType.BSPACE)),
        (b"\x00", Event(EventType.CTRL_SPACE)),
        (b"\x1b", Event(EventType.ESC)),
        (b"\x1b[A", Event(EventType.UP)),
        (b"\x1b[D", Event(EventType.LEFT)),
        (b"\x1b\x1b[A", Event(EventType.ALT_UP)),
        (b"\x1b[Z", Event(EventType.BTAB)),
        (b"\x1bOP", Event(EventType.F1)),
        (b"\x1b[3~", Event(EventType.DEL)),
        (b"\x1b[3;5~", Event(EventType.CTRL_DELETE)),
        (b"\x1b[2~", Event(EventType.INSERT)),
        (b"\x1b[15~", Event(EventType.F5)),
        (b"\x1b[24~", Event(EventType.F12)),
        (b"\x1b[5~", Event(EventType.PG_UP)),
        (b"\x1b[1;2A", Event(EventType.S_UP)),
        (b"\x1b[1;3B", Event(EventType.ALT_DOWN)),
        (b"\x1b[1;10C", Event(EventType.ALT_S_RIGHT)),
        (b"\x1bx", alt_key("x")),
        (b"\x1b\x01", ctrl_alt_key("a")),
        (b"\x1b\x7f", Event(EventType.ALT_BS)),
    ],
)
def test_get_char_decodes_keys(make_renderer, data, expected):
    renderer, _ = make_renderer(data)
    assert renderer.get_char() == expected


def test_get_char_consumes_one_key_at_a_time(make_renderer):
    renderer, _ = make_renderer(b"ab\x1b[B")
    assert [renderer.get_char() for _ in range(3)] == [
        key("a"),
        key("b"),
        Event(EventType.DOWN),
    ]


def test_bracketed_paste_markers_are_dropped(make_renderer):
    renderer, _ = make_renderer(b"\x1b[200~x\x1b[201~y")
    assert renderer.get_char() == key("x")
    assert renderer.get_char() == key("y")


def test_mouse_click(make_renderer):
    renderer, _ = make_renderer(b"\x1b[<0;5;3M", mouse=True)
    event = renderer.get_char()
    assert event.type == EventType.MOUSE
    assert event.mouse_event == MouseEvent(2, 4, 0, True, True, False, False)


def test_mouse_scroll_has_direction(make_renderer):
    renderer, _ = make_renderer(b"\x1b[<64;5;3M\x1b[<65;5;3M", mouse=True)
    up = renderer.get_char().mouse_event
    down = renderer.get_char().mouse_event
    assert up.s == -down.s
    assert not up.left and not up.down


def test_mouse_ignored_when_disabled(make_renderer):
    renderer, _ = make_renderer(b"\x1b[<0;5;3M", mouse=False)
    with pytest.raises(OSError):
        renderer.get_char()


def test_get_char_on_closed_input_raises(make_renderer):
    renderer, _ = make_renderer(b"")
    with pytest.raises(OSError):
        renderer.get_char()


def test_csi_returns_sequence_and_flush_hides_cursor(make_renderer):
    renderer, out = make_renderer()
    assert renderer.csi("J") == "\x1b[J"
    renderer.flush()
    assert out.getvalue() == "\x1b[?25l\x1b[J\x1b[?25h"
    renderer.flush()
    assert out.getvalue() == "\x1b[?25l\x1b[J\x1b[?25h"


def test_stderr_internal_filters_and_marks_newlines(make_renderer):
    renderer, out = make_renderer()
    renderer.stderr_internal("a\x07b\nc", False, "")
    renderer.flush()
    assert out.getvalue() == "\x1b[?25l" + "ab" + LF + "c" + "\x1b[?25h"


def test_move_tracks_position(make_renderer):
    renderer, out = make_renderer()
    renderer.move(3, 5)
    renderer.move(1, 0)
    renderer.flush()
    assert (renderer.y, renderer.x) == (1, 0)
    assert "\x1b[3B\r\x1b[5C" in out.getvalue()
    assert "\x1b[2A\r" in out.getvalue()


def test_pass_through_is_verbatim(make_renderer):
    renderer, out = make_renderer()
    renderer.pass_through(0, 0, "\x07raw")
    renderer.flush()
    assert "\x1b7\x07raw\x1b8" in out.getvalue()


def test_size_falls_back_to_environment(make_renderer, monkeypatch):
    monkeypatch.setenv("COLUMNS", "100")
    monkeypatch.setenv("LINES", "30")
    renderer, _ = make_renderer()
    assert renderer.max_y() == 30
    assert renderer.max_x() == 100
    renderer.resize(lambda h: min(h, 10))
    renderer.refresh()
    assert renderer.max_y() == 10


def test_size_of_non_terminal(make_renderer):
    renderer, _ = make_renderer()
    assert renderer.size() == TermSize(0, 0, 0, 0)


def test_init_needs_a_terminal(make_renderer):
    renderer, _ = make_renderer()
    with pytest.raises(OSError):
        renderer.init()


def test_default_theme_for_256_colours(make_renderer, monkeypatch):
    monkeypatch.setenv("TERM", "xterm-256color")
    renderer, _ = make_renderer()
    assert renderer.default_theme() == dark256()


def test_clear_and_close(make_renderer):
    renderer, out = make_renderer(clear_on_exit=False)
    renderer.clear()
    renderer.close()
    text = out.getvalue()
    assert "\x1b[J" in text
    assert text.endswith("\x1b[u\x1b[?25h")


def test_pause_with_clear_switches_screen(make_renderer):
    renderer, out = make_renderer()
    renderer.pause(True)
    assert "\x1b[?1049h" in out.getvalue()


def test_new_window(make_renderer):
    renderer, out = make_renderer()
    window = renderer.new_window(
        2, 3, 10, 4, False, make_border_style(BorderShape.SHARP, True)
    )
    renderer.refresh_windows([window])
    assert window.enclose(2, 3)
    assert not window.enclose(6, 3)
    assert "┌" in out.getvalue()
    assert renderer.need_scrollbar_redraw() is False
    assert renderer.top() == 0


def test_platform_queries():
    assert is_light_renderer_supported() is True
    name = ttyname()
    assert name == "" or name.startswith("/dev/")