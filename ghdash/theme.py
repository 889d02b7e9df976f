"""Colour theme of the dashboard."""

from __future__ import annotations

from dataclasses import dataclass

from ghdash.config import Config


@dataclass(frozen=True)
class AdaptiveColor:
    """A colour with separate values for light and dark terminals."""

    light: str
    dark: str


@dataclass(frozen=True)
class Theme:
    selected_background: AdaptiveColor
    primary_border: AdaptiveColor
    faint_border: AdaptiveColor
    secondary_border: AdaptiveColor
    faint_text: AdaptiveColor
    primary_text: AdaptiveColor
    secondary_text: AdaptiveColor
    inverted_text: AdaptiveColor
    success_text: AdaptiveColor
    warning_text: AdaptiveColor


DEFAULT_THEME = Theme(
    primary_border=AdaptiveColor(light="013", dark="008"),
    secondary_border=AdaptiveColor(light="008", dark="007"),
    selected_background=AdaptiveColor(light="006", dark="008"),
    faint_border=AdaptiveColor(light="254", dark="000"),
    primary_text=AdaptiveColor(light="000", dark="015"),
    secondary_text=AdaptiveColor(light="244", dark="251"),
    faint_text=AdaptiveColor(light="007", dark="245"),
    inverted_text=AdaptiveColor(light="015", dark="236"),
    success_text=AdaptiveColor(light="002", dark="002"),
    warning_text=AdaptiveColor(light="001", dark="001"),
)


def _same(hex_color: str) -> AdaptiveColor:
    return AdaptiveColor(light=hex_color, dark=hex_color)


def parse_theme(config: Config) -> Theme:
    """Theme from the configured colours, or the default theme when none are set."""
    colors = config.theme.colors if config.theme is not None else None
    if colors is None:
        return DEFAULT_THEME
    return Theme(
        selected_background=_same(colors.background.selected),
        primary_border=_same(colors.border.primary),
        faint_border=_same(colors.border.faint),
        secondary_border=_same(colors.border.secondary),
        faint_text=_same(colors.text.faint),
        primary_text=_same(colors.text.primary),
        secondary_text=_same(colors.text.secondary),
        inverted_text=_same(colors.text.inverted),
        success_text=_same(colors.text.success),
        warning_text=_same(colors.text.warning),
    )