# fzkit

fzkit holds the parts an interactive fuzzy finder needs underneath its screen:
field splitting, shell quoting, thread coordination, display-width arithmetic,
key and mouse events, colour themes, and a small renderer that draws inline on
a POSIX terminal with plain ANSI escape sequences.

## Modules

- `fzkit.tokenizer`: `tokenize(text, delimiter)` splits a line into `Token`s.
  Each token keeps its trailing delimiter and its `prefix_length`. The default
  `Delimiter()` splits AWK-style on blanks and tabs. `Delimiter(string=...)`
  splits on a literal string and `Delimiter(regex=...)` splits on a compiled
  pattern. `parse_range` reads field expressions such as `3`, `..`, `2..`,
  `..-1` or `1..3` into a `Range`, and raises `ValueError` when an expression is
  malformed or uses index zero. `transform(tokens, ranges)` selects one token per
  range. `join_tokens` joins tokens back into a string.
- `fzkit.shell`: `quote_entry(entry, shell=None)` quotes an entry for `cmd`,
  PowerShell or a POSIX shell. When no shell is given it uses `$SHELL`, and
  `cmd` if that is unset.
- `fzkit.util.atomicbool`: `AtomicBool`, a lock-guarded flag with `value`,
  `set()` and truth testing.
- `fzkit.util.eventbox`: `EventBox`. Threads `set()` keyed events, and other
  threads block in `wait(callback)` or `wait_for(event)`. `unwatch()` and
  `watch()` control which events wake the waiting threads, and `peek()` checks
  for an event without waiting.
- `fzkit.util.chars`: `Chars`, a line of text stored as bytes when it is pure
  ASCII. It provides `trim_length()`, leading and trailing whitespace counts,
  `trim_trailing_whitespaces()` and `prepend()`.
- `fzkit.util.common`: display-width helpers (`string_width`, `runes_width`,
  `truncate`, `repeat_to_fill`), `constrain`, `as_uint16`, `once`, `Slab`
  (preallocated integer arrays), and `is_tty` / `to_tty`.
- `fzkit.util.process`: `exec_command` and `exec_command_with` start a command
  through a shell with `subprocess.Popen`. They can put it in its own process
  group. `kill_command` sends SIGKILL to that group. The module also has
  `is_windows` and `set_stdin`.
- `fzkit.tui.events`: `EventType`, `Event`, `MouseEvent` and the helpers `key`,
  `alt_key` and `ctrl_alt_key`.
- `fzkit.tui.borders`: `BorderShape`, `BorderStyle`, `make_border_style(shape, unicode=True)`
  and `make_transparent_border()`.
- `fzkit.tui.theme`: `Attr`, `Color`, `hex_to_color`, `ColorAttr`, `ColorPair`,
  `ColorTheme` and the themes `empty_theme`, `no_color_theme`, `default16`,
  `dark256` and `light256`. `init_theme` fills the undefined parts of a theme
  from a base theme and returns a `Palette`. `make_palette` derives a
  `Palette` from a theme.
- `fzkit.tui.window`: `LightWindow` draws borders and prints or fills text with
  wrapping (`print`, `cprint`, `fill`, `cfill`, `finish_fill`, `erase`). It also
  has the helpers `wrap_line`, `attr_codes`, `color_codes`, `cleanse` and `repeat`.
- `fzkit.tui.light`: `LightRenderer` puts the terminal in raw mode and reads keys
  and SGR mouse reports into `Event`s with `get_char()`. It queues escape
  sequences and writes them on `flush()`, and creates windows with
  `new_window()`. It reads from `/dev/tty` unless a `ttyin` file is passed, and
  writes to standard error unless an `output` stream is passed. The module also
  provides `TermSize`, `ttyname()` and `tty_in()`.

## Installation

```
pip install fzkit
```

## Examples

Select fields from a line:

```python
from fzkit.tokenizer import Delimiter, join_tokens, parse_range, tokenize, transform

tokens = tokenize("  abc:  def:  ghi:  jkl", Delimiter())
ranges = [parse_range(expr) for expr in "1..2,3".split(",")]
print(join_tokens(transform(tokens, ranges)))  # "abc:  def:  ghi:  "
```

Quote an entry for a POSIX shell:

```python
from fzkit.shell import quote_entry

quote_entry("it's", shell="bash")  # 'it'\''s'
```

Measure display width:

```python
from fzkit.util.common import string_width, truncate

string_width("─")          # 1
truncate("가나다라마", 7)   # ("가나다", 6)
```

Coordinate threads:

```python
from fzkit.util.eventbox import EventBox

box = EventBox()
box.set(1, "ready")
box.wait(lambda events: events.clear())
```

Resolve a colour theme:

```python
from fzkit.tui.theme import dark256, empty_theme, hex_to_color, init_theme

theme = empty_theme()
palette = init_theme(theme, dark256(), False)
hex_to_color("#ff0000").is_24()  # True
```

## What it does not do

fzkit has no fuzzy matching or scoring and no command-line program. It also has
no full-screen renderer. `LightRenderer` needs a POSIX terminal because it uses
`termios`. Putting these pieces together into a finder is up to the caller.

## Running the tests

```
pip install "fzkit[test]"
python -m pytest
```