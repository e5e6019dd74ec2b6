"""
CV themes: immutable style bundles and their registry.
"""

from __future__ import annotations

from .base import Theme, ThemeColors, ThemeFontSizes, ThemeFonts, ThemeLayout, ThemeSpacing, to_mm
from .builtin import MINIMAL_THEME, MODERN_THEME, PROFESSIONAL_THEME
from .theme_registry import (
    DEFAULT_THEME_NAME,
    get_theme,
    resolve_theme,
    list_themes,
    register_theme,
    unregister_theme,
)

# Register built-in themes
register_theme(PROFESSIONAL_THEME)
register_theme(MODERN_THEME)
register_theme(MINIMAL_THEME)

__all__ = [
    "Theme",
    "ThemeColors",
    "ThemeFonts",
    "ThemeSpacing",
    "ThemeFontSizes",
    "ThemeLayout",
    "to_mm",
    "PROFESSIONAL_THEME",
    "MODERN_THEME",
    "MINIMAL_THEME",
    "DEFAULT_THEME_NAME",
    "register_theme",
    "get_theme",
    "resolve_theme",
    "list_themes",
    "unregister_theme",
]
