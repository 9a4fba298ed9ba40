"""Theme system: color palettes and Textual theme builders."""

from __future__ import annotations

from textual.theme import Theme as TextualTheme

DEFAULT_THEME = {
    "background": "#272822",
    "panel": "#1e1e1e",
    "panel_alt": "#3e3d32",
    "text": "#f8f8f2",
    "muted": "#75715e",
    "accent": "#66d9ef",
    "accent_alt": "#e6db74",
    "green": "#a6e22e",
    "orange": "#fd971f",
    "pink": "#f92672",
    "highlight": "#49483e",
}

SOLARIZED_LIGHT_THEME: dict[str, str] = {
    "background": "#fdf6e3",
    "panel": "#eee8d5",
    "panel_alt": "#e4ddc8",
    "text": "#586e75",
    "muted": "#93a1a1",
    "accent": "#268bd2",
    "accent_alt": "#b58900",
    "green": "#859900",
    "orange": "#cb4b16",
    "pink": "#d33682",
    "highlight": "#dcd4bc",
}

THEMES: dict[str, dict[str, str]] = {
    "monokai": DEFAULT_THEME,
    "solarized-light": SOLARIZED_LIGHT_THEME,
}
THEME_NAMES: list[str] = list(THEMES.keys())

# Active palette for Rich markup; replaced in place when the theme changes
THEME_COLORS = DEFAULT_THEME.copy()


def _build_textual_theme(name: str, colors: dict[str, str]) -> TextualTheme:
    """Convert an app color dict to a Textual Theme with $th-* CSS variables."""
    variables = {
        "th-background": colors["background"],
        "th-panel": colors["panel"],
        "th-panel-alt": colors["panel_alt"],
        "th-highlight": colors["highlight"],
        "th-accent": colors["accent"],
        "th-accent-alt": colors["accent_alt"],
        "th-muted": colors["muted"],
        "th-text": colors["text"],
        "th-green": colors["green"],
    }
    return TextualTheme(
        name=name,
        primary=colors["accent"],
        secondary=colors["accent_alt"],
        accent=colors["green"],
        foreground=colors["text"],
        background=colors["background"],
        surface=colors["panel"],
        panel=colors["panel_alt"],
        warning=colors["orange"],
        error=colors["pink"],
        success=colors["green"],
        dark=name != "solarized-light",
        variables=variables,
    )


TEXTUAL_THEMES: dict[str, TextualTheme] = {
    name: _build_textual_theme(name, colors) for name, colors in THEMES.items()
}


def apply_theme_colors(theme_name: str) -> str:
    """Point THEME_COLORS at the named palette and return the resolved name."""
    resolved = theme_name if theme_name in THEMES else THEME_NAMES[0]
    THEME_COLORS.clear()
    THEME_COLORS.update(THEMES[resolved])
    return resolved


def next_theme_name(current: str) -> str:
    """Return the theme after ``current`` in cycling order."""
    try:
        idx = THEME_NAMES.index(current)
    except ValueError:
        idx = -1
    return THEME_NAMES[(idx + 1) % len(THEME_NAMES)]


__all__ = [
    "DEFAULT_THEME",
    "TEXTUAL_THEMES",
    "THEMES",
    "THEME_COLORS",
    "THEME_NAMES",
    "apply_theme_colors",
    "next_theme_name",
]
