"""Listing theme definitions and selection helpers.

Themes are ANSI palettes for the annotated listing columns.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class UITheme:
    """Semantic ANSI palette used by the listing renderer."""

    name: str
    reset: str
    entry_dir: str
    entry_file: str
    entry_executable: str
    entry_symlink: str
    entry_submodule: str
    revision: str
    message: str


DEFAULT_THEME = UITheme(
    name="default",
    reset="\033[0m",
    entry_dir="\033[1;34m",
    entry_file="\033[38;5;252m",
    entry_executable="\033[1;32m",
    entry_symlink="\033[38;5;44m",
    entry_submodule="\033[38;5;214m",
    revision="\033[38;5;229m",
    message="\033[38;5;250m",
)

OCEAN_THEME = UITheme(
    name="ocean",
    reset="\033[0m",
    entry_dir="\033[1;38;5;45m",
    entry_file="\033[38;5;252m",
    entry_executable="\033[38;5;84m",
    entry_symlink="\033[38;5;117m",
    entry_submodule="\033[38;5;215m",
    revision="\033[38;5;153m",
    message="\033[2;38;5;110m",
)

PLAIN_THEME = UITheme(
    name="plain",
    reset="",
    entry_dir="",
    entry_file="",
    entry_executable="",
    entry_symlink="",
    entry_submodule="",
    revision="",
    message="",
)

_THEMES: dict[str, UITheme] = {
    DEFAULT_THEME.name: DEFAULT_THEME,
    OCEAN_THEME.name: OCEAN_THEME,
}


def available_theme_names() -> tuple[str, ...]:
    """Return selectable non-plain theme names."""
    return tuple(sorted(_THEMES.keys()))


def normalize_theme_name(name: str | None) -> str:
    """Return a valid theme name, falling back to default."""
    if not name:
        return DEFAULT_THEME.name
    candidate = str(name).strip().lower()
    if candidate in _THEMES:
        return candidate
    return DEFAULT_THEME.name


def resolve_theme(name: str | None, *, no_color: bool = False) -> UITheme:
    """Return concrete theme for requested name and color mode."""
    if no_color:
        return PLAIN_THEME
    return _THEMES[normalize_theme_name(name)]


__all__ = [
    "UITheme",
    "DEFAULT_THEME",
    "OCEAN_THEME",
    "PLAIN_THEME",
    "available_theme_names",
    "normalize_theme_name",
    "resolve_theme",
]
