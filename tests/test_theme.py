import pytest

from fzkit.tui.theme import (
    Attr,
    Color,
    ColorAttr,
    ColorPair,
    ColorTheme,
    dark256,
    default16,
    empty_theme,
    hex_to_color,
    init_theme,
    light256,
    make_palette,
    no_color_theme,
)


@pytest.mark.parametrize(
    "expr, rgb",
    [
        ("#ff0000", (255, 0, 0)),
        ("#010203", (1, 2, 3)),
        ("#102030", (16, 32, 48)),
        ("#ffffff", (255, 255, 255)),
    ],
)
def test_hex_to_color(expr, rgb):
    color = hex_to_color(expr)
    assert color.is_24()
    assert ((color >> 16) & 0xFF, (color >> 8) & 0xFF, color & 0xFF) == rgb


def test_hex_to_color_rejects_garbage():
    with pytest.raises(ValueError):
        hex_to_color("#zz0000")


def test_color_predicates():
    assert Color.DEFAULT.is_default()
    assert not Color(3).is_default()
    assert not Color.UNDEFINED.is_24()
    assert not Color(200).is_24()


def test_attr_merge():
    assert Attr.BOLD.merge(Attr.UNDERLINE) == Attr.BOLD | Attr.UNDERLINE
    assert Attr.UNDEFINED.merge(Attr.DIM) == Attr.DIM


def test_has_bg():
    assert ColorPair(Color.DEFAULT, Color(1), Attr.REGULAR).has_bg()
    assert not ColorPair(Color.DEFAULT, Color.DEFAULT).has_bg()
    assert ColorPair(Color(2), Color.DEFAULT, Attr.REVERSE).has_bg()
    assert not ColorPair(Color.DEFAULT, Color(1), Attr.REVERSE).has_bg()


def test_merge_skips_undefined():
    base = ColorPair(Color(1), Color(2), Attr.BOLD)
    merged = base.merge(ColorPair(Color.UNDEFINED, Color(5), Attr.UNDERLINE))
    assert merged == ColorPair(Color(1), Color(5), Attr.BOLD | Attr.UNDERLINE)


def test_merge_non_default_skips_default():
    base = ColorPair(Color(1), Color(2), Attr.BOLD)
    merged = base.merge_non_default(ColorPair(Color.DEFAULT, Color(6), Attr.DIM))
    assert merged == ColorPair(Color(1), Color(6), Attr.BOLD | Attr.DIM)


def test_with_attr_and_merge_attr():
    base = ColorPair(Color(4), Color(5), Attr.BOLD)
    assert base.with_attr(Attr.ITALIC).attr == Attr.BOLD | Attr.ITALIC
    other = ColorPair(Color(9), Color(9), Attr.REVERSE)
    assert base.merge_attr(other) == ColorPair(Color(4), Color(5), Attr.BOLD | Attr.REVERSE)


def test_empty_theme_equals_default_construction():
    assert empty_theme() == ColorTheme()
    assert empty_theme().prompt == ColorAttr(Color.UNDEFINED, Attr.UNDEFINED)


def test_init_theme_fills_from_base():
    theme = empty_theme()
    palette = init_theme(theme, dark256(), False)
    assert theme.prompt.color == 110
    assert theme.gutter.color == 236
    assert theme.preview_fg.color == Color.DEFAULT
    assert theme.preview_scrollbar.color == 59
    assert palette.prompt == ColorPair(Color(110), Color.DEFAULT, Attr.UNDEFINED)
    assert palette.current_match == ColorPair(Color(151), Color(236), Attr.UNDEFINED)


def test_init_theme_keeps_user_choice():
    theme = empty_theme()
    theme.prompt = ColorAttr(Color(5), Attr.BOLD)
    init_theme(theme, light256(), False)
    assert theme.prompt == ColorAttr(Color(5), Attr.BOLD)
    assert theme.match.color == 66


def test_init_theme_force_black():
    theme = empty_theme()
    palette = init_theme(theme, default16(), True)
    assert theme.bg.color == Color.BLACK
    assert palette.normal.bg == Color.BLACK
    assert palette.preview.bg == Color.BLACK


def test_reverse_default_fg_drops_background():
    theme = empty_theme()
    theme.current = ColorAttr(Color.DEFAULT, Attr.REVERSE)
    palette = init_theme(theme, dark256(), False)
    assert palette.current == ColorPair(Color.DEFAULT, Color.DEFAULT, Attr.REVERSE)


def test_empty_entries_use_regular_attr():
    palette = init_theme(empty_theme(), default16(), False)
    assert palette.cursor_empty.attr == Attr.REGULAR
    assert palette.current_selected_empty.bg == Color.BLACK


def test_no_color_theme_palette():
    theme = no_color_theme()
    assert not theme.colored
    palette = make_palette(theme)
    assert palette.match == ColorPair(Color.DEFAULT, Color.DEFAULT, Attr.UNDERLINE)
    assert palette.current_match.attr == Attr.REVERSE | Attr.UNDERLINE


def test_base_themes_are_fresh():
    first = default16()
    first.prompt = ColorAttr(Color(9))
    assert default16().prompt.color == Color.BLUE