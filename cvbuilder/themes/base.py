"""
Theme value objects.

A theme is an immutable bundle of visual constants consumed by the layout
engine. Lengths are kept as CSS strings ("8px", "10pt", "20mm") because
they go straight into the stylesheet; to_mm() converts them when the
page planner needs numbers.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, fields, replace
from typing import Any, Dict, Mapping, Optional

_LENGTH_RE = re.compile(r"^\s*(-?\d+(?:\.\d+)?)\s*(px|pt|mm|cm|in)?\s*$", re.IGNORECASE)
_HEX_COLOR_RE = re.compile(r"^#([A-Fa-f0-9]{6}|[A-Fa-f0-9]{3})$")
_THEME_NAME_RE = re.compile(r"^[a-z0-9-]+$")

_MM_PER_UNIT = {
    "px": 25.4 / 96,
    "pt": 25.4 / 72,
    "mm": 1.0,
    "cm": 10.0,
    "in": 25.4,
}


def to_mm(length: str) -> float:
    """
    Convert a CSS absolute length to millimetres.

    Unitless values are read as pixels, which is what browsers do for
    most of the properties a theme sets.
    """
    match = _LENGTH_RE.match(str(length))
    if not match:
        raise ValueError(f"Unsupported CSS length: {length!r}")
    value, unit = match.groups()
    return float(value) * _MM_PER_UNIT[(unit or "px").lower()]


@dataclass(frozen=True)
class ThemeColors:
    primary: str = "#2c3e50"
    secondary: str = "#333333"
    text: str = "#000000"
    background: str = "#ffffff"
    border: str = "#2c3e50"
    accent: str = "#2c3e50"
    muted: str = "#666666"
    surface: str = "#f9f9f9"
    chip_background: str = "#f0f5ff"
    chip_border: str = "#d0e0ff"


@dataclass(frozen=True)
class ThemeFonts:
    main: str = "Georgia, serif"
    headings: str = "Georgia, serif"
    fallback: str = "Times New Roman, serif"


@dataclass(frozen=True)
class ThemeSpacing:
    section: str = "8px"
    element: str = "6px"
    micro: str = "3px"
    large: str = "12px"
    tiny: str = "2px"
    page_margin: str = "20mm"


@dataclass(frozen=True)
class ThemeFontSizes:
    name: str = "20pt"
    section_header: str = "12pt"
    job_title: str = "11pt"
    body: str = "10pt"
    supporting: str = "9pt"


@dataclass(frozen=True)
class ThemeLayout:
    page_width: str = "210mm"
    page_height: str = "297mm"
    line_height: float = 1.4
    border_style: str = "solid"


@dataclass(frozen=True)
class Theme:
    name: str
    display_name: str
    description: str = ""
    colors: ThemeColors = ThemeColors()
    fonts: ThemeFonts = ThemeFonts()
    spacing: ThemeSpacing = ThemeSpacing()
    font_sizes: ThemeFontSizes = ThemeFontSizes()
    layout: ThemeLayout = ThemeLayout()

    @property
    def content_width_mm(self) -> float:
        return to_mm(self.layout.page_width) - 2 * to_mm(self.spacing.page_margin)

    @property
    def content_height_mm(self) -> float:
        return to_mm(self.layout.page_height) - 2 * to_mm(self.spacing.page_margin)

    @classmethod
    def from_dict(cls, record: Mapping[str, Any], base: Optional["Theme"] = None) -> "Theme":
        """
        Build a theme from a stored theme record.

        The record uses the storage field names (displayName, typography,
        fontSizes, borderStyle). Anything it leaves out is taken from base,
        or from the dataclass defaults.
        """
        name = str(record.get("name") or "").strip().lower()
        if not _THEME_NAME_RE.match(name):
            raise ValueError(
                "Theme name must contain only lowercase letters, numbers, and hyphens"
            )

        base = base or cls(name=name, display_name=name)

        colors = _merge(base.colors, record.get("colors"))
        for f in fields(ThemeColors):
            value = getattr(colors, f.name)
            if not _HEX_COLOR_RE.match(value):
                raise ValueError(f"colors.{f.name} must be a valid hex color: {value!r}")

        typography = dict(record.get("typography") or {})
        if "body" in typography and "main" not in typography:
            typography["main"] = typography["body"]
        typography.pop("body", None)

        layout = base.layout
        if record.get("borderStyle"):
            layout = replace(layout, border_style=str(record["borderStyle"]))

        spacing = _merge(base.spacing, record.get("spacing"))
        font_sizes = _merge(base.font_sizes, _snake_keys(record.get("fontSizes")))
        _check_lengths("spacing", spacing)
        _check_lengths("fontSizes", font_sizes)
        _check_lengths("layout", layout, ("page_width", "page_height"))

        return cls(
            name=name,
            display_name=str(record.get("displayName") or base.display_name or name),
            description=str(record.get("description") or base.description),
            colors=colors,
            fonts=_merge(base.fonts, typography),
            spacing=spacing,
            font_sizes=font_sizes,
            layout=layout,
        )


def _check_lengths(group: str, values, names=None) -> None:
    for name in names or [f.name for f in fields(values)]:
        value = getattr(values, name)
        try:
            to_mm(value)
        except ValueError:
            raise ValueError(f"{group}.{name} must be an absolute CSS length: {value!r}") from None


def _snake_keys(values: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    return {re.sub(r"(?<!^)(?=[A-Z])", "_", k).lower(): v for k, v in (values or {}).items()}


def _merge(current, values: Optional[Mapping[str, Any]]):
    if not values:
        return current
    known = {f.name for f in fields(current)}
    updates = {k: str(v) for k, v in _snake_keys(values).items() if k in known and v}
    return replace(current, **updates)
