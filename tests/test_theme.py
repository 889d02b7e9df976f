from dataclasses import FrozenInstanceError, fields

import pytest

from ghdash.config import (
    ColorTheme,
    ColorThemeBackground,
    ColorThemeBorder,
    ColorThemeText,
    default_config,
)
from ghdash.theme import DEFAULT_THEME, AdaptiveColor, parse_theme


def _colors():
    return ColorTheme(
        text=ColorThemeText(
            primary="#111111",
            secondary="#222222",
            inverted="#333333",
            faint="#444444",
            warning="#555555",
            success="#666666",
        ),
        background=ColorThemeBackground(selected="#777777"),
        border=ColorThemeBorder(primary="#888888", secondary="#999999", faint="#aaaaaa"),
    )


def _configured():
    cfg = default_config()
    cfg.theme.colors = _colors()
    return cfg


def test_default_config_uses_default_theme():
    assert parse_theme(default_config()) == DEFAULT_THEME


def test_missing_theme_section_uses_default_theme():
    cfg = default_config()
    cfg.theme = None
    assert parse_theme(cfg) == DEFAULT_THEME


def test_default_theme_values():
    assert DEFAULT_THEME.primary_border == AdaptiveColor(light="013", dark="008")
    assert DEFAULT_THEME.warning_text == AdaptiveColor(light="001", dark="001")


def test_configured_colours_are_mapped():
    theme = parse_theme(_configured())
    assert theme.selected_background == AdaptiveColor("#777777", "#777777")
    assert theme.primary_text == AdaptiveColor("#111111", "#111111")
    assert theme.faint_border == AdaptiveColor("#aaaaaa", "#aaaaaa")
    assert theme.warning_text == AdaptiveColor("#555555", "#555555")


def test_configured_colours_same_for_light_and_dark():
    theme = parse_theme(_configured())
    for f in fields(theme):
        color = getattr(theme, f.name)
        assert color.light == color.dark


def test_configured_theme_leaves_default_alone():
    parse_theme(_configured())
    assert parse_theme(default_config()) == DEFAULT_THEME


def test_theme_is_frozen():
    with pytest.raises(FrozenInstanceError):
        DEFAULT_THEME.primary_text = AdaptiveColor("#000000", "#000000")