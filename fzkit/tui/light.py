"""A renderer that draws below the cursor with plain escape sequences."""

from __future__ import annotations

import fcntl
import os
import re
import struct
import subprocess
import sys
import termios
import time
import tty
from dataclasses import dataclass
from typing import IO, Any, Callable, List, Optional, Sequence, Tuple

from fzkit.tui.borders import BorderStyle
from fzkit.tui.events import (
    DOUBLE_CLICK_DURATION,
    Event,
    EventType,
    MouseEvent,
    alt_key,
    ctrl_alt_key,
)
from fzkit.tui.theme import (
    ColorTheme,
    Palette,
    dark256,
    default16,
    init_theme,
    make_palette,
)
from fzkit.tui.window import LightWindow

DEFAULT_WIDTH = 80
DEFAULT_HEIGHT = 24

DEFAULT_ESC_DELAY = 100
ESC_POLL_INTERVAL = 5
OFFSET_POLL_TRIES = 10
MAX_INPUT_BUFFER = 1024 * 1024

CONSOLE_DEVICE = "/dev/tty"

CR = "\x1b[2m␍"
LF = "\x1b[2m␊"

_ESC = EventType.ESC.value

_OFFSET = re.compile(rb"(.*)\x1b\[([0-9]+);([0-9]+)R")
_OFFSET_BEGIN = re.compile(rb"\x1b\[[0-9]+;[0-9]+R")
_INTEGER = re.compile(r"[+-]?[0-9]+")
_MOUSE_END = re.compile(rb"[mM]")

_DEV_PREFIXES = ("/dev/pts/", "/dev/")

_SIMPLE_KEYS = {
    EventType.CTRL_C.value: EventType.CTRL_C,
    EventType.CTRL_G.value: EventType.CTRL_G,
    EventType.CTRL_Q.value: EventType.CTRL_Q,
    127: EventType.BSPACE,
    0: EventType.CTRL_SPACE,
    28: EventType.CTRL_BACK_SLASH,
    29: EventType.CTRL_RIGHT_BRACKET,
    30: EventType.CTRL_CARET,
    31: EventType.CTRL_SLASH,
}

# final byte -> (plain, with alt)
_ARROWS = {
    ord("D"): (EventType.LEFT, EventType.ALT_LEFT),
    ord("C"): (EventType.RIGHT, EventType.ALT_RIGHT),
    ord("B"): (EventType.DOWN, EventType.ALT_DOWN),
    ord("A"): (EventType.UP, EventType.ALT_UP),
}

# final byte -> (shift, alt, alt+shift)
_MODIFIED_ARROWS = {
    ord("A"): (EventType.S_UP, EventType.ALT_UP, EventType.ALT_S_UP),
    ord("B"): (EventType.S_DOWN, EventType.ALT_DOWN, EventType.ALT_S_DOWN),
    ord("C"): (EventType.S_RIGHT, EventType.ALT_RIGHT, EventType.ALT_S_RIGHT),
    ord("D"): (EventType.S_LEFT, EventType.ALT_LEFT, EventType.ALT_S_LEFT),
}

_SS3_KEYS = {
    ord("Z"): EventType.BTAB,
    ord("H"): EventType.HOME,
    ord("F"): EventType.END,
    ord("P"): EventType.F1,
    ord("Q"): EventType.F2,
    ord("R"): EventType.F3,
    ord("S"): EventType.F4,
}

_F9_TO_F12 = {
    ord("0"): EventType.F9,
    ord("1"): EventType.F10,
    ord("3"): EventType.F11,
    ord("4"): EventType.F12,
}

_F1_TO_F8 = {
    ord("1"): EventType.F1,
    ord("2"): EventType.F2,
    ord("3"): EventType.F3,
    ord("4"): EventType.F4,
    ord("5"): EventType.F5,
    ord("7"): EventType.F6,
    ord("8"): EventType.F7,
    ord("9"): EventType.F8,
}

_SINGLE_DIGIT_KEYS = {
    ord("4"): EventType.END,
    ord("5"): EventType.PG_UP,
    ord("6"): EventType.PG_DN,
}


@dataclass(frozen=True)
class TermSize:
    """Terminal size in cells and in pixels."""

    lines: int
    columns: int
    px_width: int
    px_height: int


def _atoi(text: str, default: int) -> int:
    return int(text) if _INTEGER.fullmatch(text) else default


def _get_env(name: str, default: int) -> int:
    value = os.environ.get(name, "")
    if not value:
        return default
    return _atoi(value, default)


def _decode_rune(data: bytes) -> Tuple[str, int]:
    """First UTF-8 character of data and its size; U+FFFD and 1 if invalid."""
    lead = data[0]
    if lead < 0x80:
        return chr(lead), 1
    if 0xC0 <= lead <= 0xDF:
        size = 2
    elif 0xE0 <= lead <= 0xEF:
        size = 3
    elif 0xF0 <= lead <= 0xF7:
        size = 4
    else:
        return "\ufffd", 1
    try:
        return bytes(data[:size]).decode("utf-8"), size
    except UnicodeDecodeError:
        return "\ufffd", 1


def is_light_renderer_supported() -> bool:
    return True


def ttyname() -> str:
    """Path of the terminal device behind standard error, or empty."""
    try:
        rdev = os.fstat(2).st_rdev
    except OSError:
        return ""
    for prefix in _DEV_PREFIXES:
        try:
            entries = list(os.scandir(prefix))
        except OSError:
            continue
        for entry in entries:
            try:
                info = entry.stat(follow_symlinks=False)
            except OSError:
                continue
            if info.st_rdev == rdev:
                return prefix + entry.name
    return ""


def _open_tty() -> Optional[IO[bytes]]:
    try:
        return open(CONSOLE_DEVICE, "rb", buffering=0)
    except OSError:
        name = ttyname()
        if name:
            try:
                return open(name, "rb", buffering=0)
            except OSError:
                pass
    return None


def tty_in() -> IO[Any]:
    """The terminal to read keys from, falling back to standard input."""
    return _open_tty() or sys.stdin


class LightRenderer:
    """Draws the interface inline on the terminal, reading keys from the tty."""

    def __init__(
        self,
        theme: ColorTheme,
        force_black: bool = False,
        mouse: bool = True,
        tabstop: int = 8,
        clear_on_exit: bool = True,
        fullscreen: bool = False,
        max_height_func: Optional[Callable[[int], int]] = None,
        ttyin: Optional[IO[bytes]] = None,
        output: Optional[IO[str]] = None,
    ) -> None:
        if ttyin is None:
            ttyin = _open_tty()
            if ttyin is None:
                raise OSError(f"Failed to open {CONSOLE_DEVICE}")
        self.theme = theme
        self.force_black = force_black
        self.mouse = mouse
        self.tabstop = tabstop
        self.clear_on_exit = clear_on_exit
        self.fullscreen = fullscreen
        self.max_height_func = max_height_func or (lambda height: height)
        self.ttyin = ttyin
        self.output = output if output is not None else sys.stderr
        self.esc_delay = DEFAULT_ESC_DELAY
        self.palette: Optional[Palette] = None
        self.width = 0
        self.height = 0
        self.yoffset = 0
        self.y = 0
        self.x = 0
        self._up_one_line = False
        self._queued: List[str] = []
        self._buffer = bytearray()
        self._orig_state: Optional[list] = None
        self._prev_down_time = float("-inf")
        self._clicks: List[Tuple[int, int]] = []

    # output

    def pass_through(self, y: int, x: int, data: str) -> None:
        """Queue data verbatim, keeping the cursor where it was."""
        self._queued.append("\x1b7" + data + "\x1b8")

    def sync(self, hard: bool = False) -> None:
        """Nothing to synchronise; output goes out on flush."""

    def _stderr(self, text: str) -> None:
        self.stderr_internal(text, True, "")

    def stderr_internal(self, text: str, allow_nlcr: bool, reset_code: str) -> None:
        """Queue text without control characters; CR and LF become markers unless allowed."""
        out = []
        for char in text:
            nlcr = char in "\r\n"
            if char >= " " or char == "\x1b" or nlcr:
                if nlcr and not allow_nlcr:
                    out.append((CR if char == "\r" else LF) + reset_code)
                elif char != "\ufffd":
                    out.append(char)
        self._queued.append("".join(out))

    def csi(self, code: str) -> str:
        """Queue a control sequence and return it."""
        full = "\x1b[" + code
        self._stderr(full)
        return full

    def flush(self) -> None:
        """Write the queued output with the cursor hidden."""
        queued = "".join(self._queued)
        if queued:
            self.output.write("\x1b[?25l" + queued + "\x1b[?25h")
            if hasattr(self.output, "flush"):
                self.output.flush()
        self._queued.clear()

    def move(self, y: int, x: int) -> None:
        if self.y < y:
            self.csi(f"{y - self.y}B")
        elif self.y > y:
            self.csi(f"{self.y - y}A")
        self._stderr("\r")
        if x > 0:
            self.csi(f"{x}C")
        self.y = y
        self.x = x

    def _origin(self) -> None:
        self.move(0, 0)

    def _make_space(self) -> None:
        self._stderr("\n")
        self.csi("G")

    def _smcup(self) -> None:
        self.csi("?1049h")

    def _rmcup(self) -> None:
        self.csi("?1049l")

    def _enable_mouse(self) -> None:
        if self.mouse:
            self.csi("?1000h")
            self.csi("?1002h")
            self.csi("?1006h")

    def _disable_mouse(self) -> None:
        if self.mouse:
            self.csi("?1000l")
            self.csi("?1002l")
            self.csi("?1006l")

    # terminal state

    def _fd(self) -> int:
        return self.ttyin.fileno()

    def _init_platform(self) -> None:
        fd = self._fd()
        try:
            self._orig_state = termios.tcgetattr(fd)
        except termios.error as exc:
            raise OSError(str(exc)) from exc
        tty.setraw(fd)

    def _setup_terminal(self) -> None:
        try:
            tty.setraw(self._fd())
        except (termios.error, OSError):
            pass

    def _restore_terminal(self) -> None:
        if self._orig_state is None:
            return
        try:
            termios.tcsetattr(self._fd(), termios.TCSANOW, self._orig_state)
        except (termios.error, OSError):
            pass

    def _update_terminal_size(self) -> None:
        try:
            size = os.get_terminal_size(self._fd())
        except (OSError, ValueError):
            self.width = _get_env("COLUMNS", DEFAULT_WIDTH)
            self.height = self.max_height_func(_get_env("LINES", DEFAULT_HEIGHT))
        else:
            self.width = size.columns
            self.height = self.max_height_func(size.lines)

    def default_theme(self) -> ColorTheme:
        """The base theme suited to the terminal's colour support."""
        if "256" in os.environ.get("TERM", ""):
            return dark256()
        try:
            result = subprocess.run(
                ["tput", "colors"], capture_output=True, text=True, check=True
            )
        except (OSError, subprocess.SubprocessError):
            return default16()
        if _atoi(result.stdout.strip(), 16) > 16:
            return dark256()
        return default16()

    def init(self) -> None:
        """Put the terminal in raw mode and make room for the interface."""
        self.esc_delay = _atoi(os.environ.get("ESCDELAY", ""), DEFAULT_ESC_DELAY)
        self._init_platform()
        self._update_terminal_size()
        self.palette = init_theme(self.theme, self.default_theme(), self.force_black)

        if self.fullscreen:
            self._smcup()
        else:
            if self.clear_on_exit:
                self.csi("J")
            y, x = self._find_offset()
            self.mouse = self.mouse and y >= 0
            if x > 0 and self.clear_on_exit:
                self._up_one_line = True
                self._make_space()
            for _ in range(1, self.max_y()):
                self._make_space()

        self._enable_mouse()
        self.csi(f"{self.max_y() - 1}A")
        self.csi("G")
        self.csi("K")
        if not self.clear_on_exit and not self.fullscreen:
            self.csi("s")
        if not self.fullscreen and self.mouse:
            self.yoffset, _ = self._find_offset()

    def resize(self, max_height_func: Callable[[int], int]) -> None:
        self.max_height_func = max_height_func

    def _find_offset(self) -> Tuple[int, int]:
        """Ask the terminal for the cursor position; (-1, -1) if it never answers."""
        self.csi("6n")
        self.flush()
        data = bytearray()
        for tries in range(OFFSET_POLL_TRIES):
            data = self._get_bytes_internal(data, tries > 0)
            match = _OFFSET.search(data)
            if match:
                self._buffer += match.group(1)
                return int(match.group(2)) - 1, int(match.group(3)) - 1
        return -1, -1

    # input

    def _getch(self, nonblock: bool) -> Tuple[int, bool]:
        fd = self._fd()
        try:
            os.set_blocking(fd, not nonblock)
            data = os.read(fd, 1)
        except OSError:
            return 0, False
        if not data:
            return 0, False
        return data[0], True

    def _get_bytes(self) -> bytearray:
        return self._get_bytes_internal(self._buffer, False)

    def _get_bytes_internal(self, buffer: bytearray, nonblock: bool) -> bytearray:
        c, ok = self._getch(nonblock)
        if not nonblock and not ok:
            self.close()
            raise OSError(f"Failed to read {CONSOLE_DEVICE}")

        polls = self.esc_delay // ESC_POLL_INTERVAL
        retries = polls if c == _ESC or nonblock else 0
        buffer.append(c)

        previous = c
        while True:
            c, ok = self._getch(True)
            if not ok:
                if retries > 0:
                    retries -= 1
                    time.sleep(ESC_POLL_INTERVAL / 1000)
                    continue
                break
            if c == _ESC and previous != c:
                retries = polls
            else:
                retries = 0
            buffer.append(c)
            previous = c

            if len(buffer) > MAX_INPUT_BUFFER:
                self.close()
                raise RuntimeError(f"Input buffer overflow ({len(buffer)})")
        return buffer

    def get_char(self) -> Event:
        """Read the next key or mouse event, blocking until one arrives."""
        if not self._buffer:
            self._buffer = self._get_bytes()
        if not self._buffer:
            raise RuntimeError("Empty buffer")
        event, size = self._decode()
        del self._buffer[:size]
        return event

    def _decode(self) -> Tuple[Event, int]:
        first = self._buffer[0]
        simple = _SIMPLE_KEYS.get(first)
        if simple is not None:
            return Event(simple), 1
        if first == _ESC:
            event, size = self._esc_sequence()
            if event.type == EventType.INVALID:
                self._buffer = self._get_bytes()
                event, size = self._esc_sequence()
            return event, size
        if first <= EventType.CTRL_Z.value:
            return Event(EventType(first)), 1
        char, size = _decode_rune(self._buffer)
        if char == "\ufffd":
            return Event(EventType.ESC), 1
        return Event(EventType.RUNE, char), size

    def _esc_sequence(self) -> Tuple[Event, int]:
        buf = self._buffer
        if len(buf) < 2:
            return Event(EventType.ESC), 1

        match = _OFFSET_BEGIN.match(buf)
        if match:
            return Event(EventType.INVALID), match.end()

        size = 2
        if 1 <= buf[1] <= 26:
            return ctrl_alt_key(chr(buf[1] + ord("a") - 1)), size
        alt = False
        if len(buf) > 2 and buf[1] == _ESC:
            del buf[0]
            alt = True

        invalid = Event(EventType.INVALID)
        second = buf[1]
        if second == _ESC:
            return Event(EventType.ESC), size
        if second == 127:
            return Event(EventType.ALT_BS), size
        if second in b"[O":
            if len(buf) < 3:
                return invalid, size
            size = 3
            third = buf[2]
            if third in _ARROWS:
                plain, with_alt = _ARROWS[third]
                return Event(with_alt if alt else plain), size
            if third in _SS3_KEYS:
                return Event(_SS3_KEYS[third]), size
            if third == ord("<"):
                return self._mouse_sequence(size)
            if third in b"123456":
                if len(buf) < 4:
                    return invalid, size
                size = 4
                fourth = buf[3]
                if third == ord("2"):
                    if fourth == ord("~"):
                        return Event(EventType.INSERT), size
                    if len(buf) > 4 and buf[4] == ord("~"):
                        size = 5
                        if fourth in _F9_TO_F12:
                            return Event(_F9_TO_F12[fourth]), size
                    if (
                        len(buf) > 5
                        and fourth == ord("0")
                        and buf[4] in b"01"
                        and buf[5] == ord("~")
                    ):
                        # bracketed paste markers are dropped
                        del buf[:6]
                        return self.get_char(), 0
                    return invalid, size
                if third == ord("3"):
                    if fourth == ord("~"):
                        return Event(EventType.DEL), size
                    if len(buf) == 6 and buf[5] == ord("~"):
                        size = 6
                        if buf[4] == ord("5"):
                            return Event(EventType.CTRL_DELETE), size
                        if buf[4] == ord("2"):
                            return Event(EventType.S_DELETE), size
                    return invalid, size
                if third in _SINGLE_DIGIT_KEYS:
                    return Event(_SINGLE_DIGIT_KEYS[third]), size
                # third == "1"
                if fourth == ord("~"):
                    return Event(EventType.HOME), size
                if fourth in _F1_TO_F8:
                    if len(buf) == 5 and buf[4] == ord("~"):
                        return Event(_F1_TO_F8[fourth]), 5
                    return invalid, size
                if fourth == ord(";"):
                    if len(buf) < 6:
                        return invalid, size
                    size = 6
                    modifier = buf[4]
                    if modifier in b"1235":
                        with_alt = modifier == ord("3")
                        alt_shift = modifier == ord("1") and buf[5] == ord("0")
                        final = buf[5]
                        if alt_shift:
                            if len(buf) < 7:
                                return invalid, size
                            size = 7
                            final = buf[6]
                        if final in _MODIFIED_ARROWS:
                            shifted, alted, both = _MODIFIED_ARROWS[final]
                            if with_alt:
                                return Event(alted), size
                            if alt_shift:
                                return Event(both), size
                            return Event(shifted), size

        char, rune_size = _decode_rune(buf[1:])
        return alt_key(char), 1 + rune_size

    def _mouse_sequence(self, size: int) -> Tuple[Event, int]:
        buf = self._buffer
        invalid = Event(EventType.INVALID)
        if len(buf) < 9 or not self.mouse:
            return invalid, size

        rest = bytes(buf[size:])
        found = _MOUSE_END.search(rest)
        if found is None:
            return invalid, size
        end = found.start()

        elems = rest[:end].decode("latin-1").split(";", 2)
        if len(elems) != 3:
            return invalid, size

        t = _atoi(elems[0], -1)
        x = _atoi(elems[1], -1) - 1
        y = _atoi(elems[2], -1) - 1 - self.yoffset
        if t < 0 or x < 0:
            return invalid, size
        size += end + 1

        down = rest[end] == ord("M")

        scroll = 0
        if t >= 64:
            t -= 64
            scroll = -1 if t & 0b1 == 1 else 1

        left = t & 0b11 == 0
        mod = t & 0b1100 > 0
        drag = t & 0b100000 > 0

        if scroll != 0:
            return (
                Event(EventType.MOUSE, "", MouseEvent(y, x, scroll, False, False, False, mod)),
                size,
            )

        double = False
        if down and not drag:
            now = time.monotonic()
            if not left:
                self._clicks = []
            elif now - self._prev_down_time < DOUBLE_CLICK_DURATION:
                self._clicks.append((x, y))
            else:
                self._clicks = [(x, y)]
            self._prev_down_time = now
        elif (
            len(self._clicks) > 1
            and self._clicks[-2] == self._clicks[-1]
            and time.monotonic() - self._prev_down_time < DOUBLE_CLICK_DURATION
        ):
            double = True
            self._clicks = []
        return (
            Event(EventType.MOUSE, "", MouseEvent(y, x, 0, left, down, double, mod)),
            size,
        )

    # lifecycle

    def pause(self, clear: bool) -> None:
        self._disable_mouse()
        self._restore_terminal()
        if clear:
            if self.fullscreen:
                self._rmcup()
            else:
                self._smcup()
                self.csi("H")
            self.flush()

    def resume(self, clear: bool, sigcont: bool) -> None:
        self._setup_terminal()
        if clear:
            if self.fullscreen:
                self._smcup()
            else:
                self._rmcup()
            self._enable_mouse()
            self.flush()
        elif sigcont and not self.fullscreen and self.mouse:
            # the offset taken at start is likely stale after being stopped
            self._disable_mouse()
            self.mouse = False

    def clear(self) -> None:
        if self.fullscreen:
            self.csi("H")
        self._origin()
        self.csi("J")
        self.flush()

    def need_scrollbar_redraw(self) -> bool:
        return False

    def refresh_windows(self, windows: Sequence[LightWindow]) -> None:
        self.flush()

    def refresh(self) -> None:
        self._update_terminal_size()

    def close(self) -> None:
        """Clean up the screen and give the terminal back its original mode."""
        if self.clear_on_exit:
            if self.fullscreen:
                self._rmcup()
            else:
                self._origin()
                if self._up_one_line:
                    self.csi("A")
                self.csi("J")
        elif not self.fullscreen:
            self.csi("u")
        self._disable_mouse()
        self.flush()
        self._restore_terminal()

    # geometry

    def top(self) -> int:
        return self.yoffset

    def max_x(self) -> int:
        return self.width

    def max_y(self) -> int:
        if self.height == 0:
            self._update_terminal_size()
        return self.height

    def size(self) -> TermSize:
        """Size of the terminal in cells and pixels; zeros if unknown."""
        try:
            packed = fcntl.ioctl(self._fd(), termios.TIOCGWINSZ, b"\0" * 8)
        except OSError:
            return TermSize(0, 0, 0, 0)
        rows, cols, xpixel, ypixel = struct.unpack("HHHH", packed)
        return TermSize(rows, cols, xpixel, ypixel)

    def new_window(
        self,
        top: int,
        left: int,
        width: int,
        height: int,
        preview: bool,
        border_style: BorderStyle,
    ) -> LightWindow:
        if self.palette is None:
            self.palette = make_palette(self.theme)
        if preview:
            fg, bg = self.theme.preview_fg.color, self.theme.preview_bg.color
        else:
            fg, bg = self.theme.fg.color, self.theme.bg.color
        return LightWindow(
            self,
            top,
            left,
            width,
            height,
            preview,
            border_style,
            self.palette,
            self.theme.colored,
            self.tabstop,
            fg,
            bg,
        )