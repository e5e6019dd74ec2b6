"""
Built-in themes.

professional is the default and matches the layout the page planner is
tuned for; modern and minimal trade density for whitespace.
"""

from __future__ import annotations

from .base import Theme, ThemeColors, ThemeFontSizes, ThemeFonts, ThemeLayout, ThemeSpacing

PROFESSIONAL_THEME = Theme(
    name="professional",
    display_name="Professional",
    description="Conservative design perfect for corporate environments and traditional industries",
)

MODERN_THEME = Theme(
    name="modern",
    display_name="Modern",
    description="Clean, contemporary design for tech companies, startups, and creative roles",
    colors=ThemeColors(
        primary="#3498db",
        secondary="#2980b9",
        text="#2c3e50",
        border="#3498db",
        accent="#e74c3c",
    ),
    fonts=ThemeFonts(
        main="Roboto, sans-serif",
        headings="Roboto, sans-serif",
        fallback="Arial, sans-serif",
    ),
    spacing=ThemeSpacing(section="16px", element="10px", micro="5px", large="16px"),
    font_sizes=ThemeFontSizes(name="22pt", section_header="14pt", job_title="12pt"),
    layout=ThemeLayout(border_style="accent"),
)

MINIMAL_THEME = Theme(
    name="minimal",
    display_name="Minimal",
    description="Minimalist design with generous whitespace for design-focused roles",
    colors=ThemeColors(
        primary="#333333",
        secondary="#666666",
        text="#333333",
        border="#999999",
        accent="#999999",
        surface="#ffffff",
        chip_background="#ffffff",
        chip_border="#cccccc",
    ),
    fonts=ThemeFonts(
        main="Open Sans, sans-serif",
        headings="Open Sans, sans-serif",
        fallback="Arial, sans-serif",
    ),
    spacing=ThemeSpacing(section="20px", element="12px", micro="6px", large="20px"),
    font_sizes=ThemeFontSizes(section_header="13pt"),
    layout=ThemeLayout(border_style="subtle", line_height=1.5),
)
