"""
Layout model: the transient tree between the normalized CV and the HTML.

Section -> LayoutUnit | ColumnGroup -> LayoutUnit -> Line.
Everything here is immutable and rebuilt for every render.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Optional, Sequence, Tuple

from ..themes import Theme


class SectionKind(str, Enum):
    SUMMARY = "summary"
    SKILLS = "skills"
    EXPERIENCE = "experience"
    PROJECTS = "projects"
    EDUCATION = "education"
    CERTIFICATIONS = "certifications"
    LANGUAGES = "languages"
    INTERESTS = "interests"


# Fixed rendering order
SECTION_ORDER: Tuple[SectionKind, ...] = tuple(SectionKind)

# Section kind -> localization key of its header
SECTION_HEADER_KEYS = {
    SectionKind.SUMMARY: "professional_summary",
    SectionKind.SKILLS: "technical_skills",
    SectionKind.EXPERIENCE: "professional_experience",
    SectionKind.PROJECTS: "projects",
    SectionKind.EDUCATION: "education",
    SectionKind.CERTIFICATIONS: "certifications",
    SectionKind.LANGUAGES: "languages",
    SectionKind.INTERESTS: "interests",
}


class UnitKind(str, Enum):
    SUMMARY = "summary"
    SKILL_CATEGORY = "skill-category"
    EXPERIENCE = "experience-item"
    PROJECT = "project-item"
    EDUCATION = "education-item"
    CERTIFICATION = "certification-item"
    INLINE = "inline-item"


class LineRole(str, Enum):
    TITLE = "title"
    SUBTITLE = "subtitle"    # company / institution / issuer
    PERIOD = "period"
    TEXT = "text"
    BULLET = "bullet"
    LABELED = "labeled"      # "Label: value"
    CHIP = "chip"            # one skill inside a category


@dataclass(frozen=True)
class Line:
    role: LineRole
    text: str
    label: Optional[str] = None
    keep_with_next: bool = False


@dataclass(frozen=True)
class LayoutUnit:
    """
    A block of content with a stable id.

    Atomic units (every entry) move to the next page whole; the summary
    paragraph and inline lines may flow across a page boundary.
    """
    uid: str
    kind: UnitKind
    lines: Tuple[Line, ...]
    atomic: bool = True

    def lines_with_role(self, role: LineRole) -> Tuple[Line, ...]:
        return tuple(line for line in self.lines if line.role == role)


class ColumnFill(str, Enum):
    SPLIT = "split"  # contiguous halves, left column first
    WRAP = "wrap"    # flex-wrap, row by row


@dataclass(frozen=True)
class ColumnGroup:
    units: Tuple[LayoutUnit, ...]
    column_count: int = 2
    fill: ColumnFill = ColumnFill.SPLIT

    @property
    def columns(self) -> Tuple[Tuple[LayoutUnit, ...], ...]:
        """Units per column, each column in document order."""
        if self.fill == ColumnFill.WRAP:
            return tuple(self.units[i::self.column_count] for i in range(self.column_count))
        return split_into_columns(self.units, self.column_count)

    @property
    def rows(self) -> Tuple[Tuple[LayoutUnit, ...], ...]:
        """Units side by side at the same vertical position."""
        columns = self.columns
        depth = max((len(c) for c in columns), default=0)
        return tuple(
            tuple(column[r] for column in columns if r < len(column))
            for r in range(depth)
        )


def split_into_columns(units: Sequence[LayoutUnit], column_count: int) -> Tuple[Tuple[LayoutUnit, ...], ...]:
    """
    Sequential fill by count: the first columns take ceil(n / columns) units.
    """
    if column_count < 1:
        raise ValueError("column_count must be at least 1")
    per_column = math.ceil(len(units) / column_count) if units else 0
    columns = []
    for i in range(column_count):
        columns.append(tuple(units[i * per_column:(i + 1) * per_column]))
    return tuple(columns)


@dataclass(frozen=True)
class Section:
    kind: SectionKind
    header: str
    units: Tuple[LayoutUnit, ...] = ()
    column_group: Optional[ColumnGroup] = None

    @property
    def uid(self) -> str:
        return f"section-{self.kind.value}"

    @property
    def children(self) -> Tuple[LayoutUnit, ...]:
        """All units in document order."""
        if self.column_group is not None:
            return self.column_group.units
        return self.units

    @property
    def is_empty(self) -> bool:
        return not self.children


@dataclass(frozen=True)
class ContactRow:
    key: str
    label: str
    value: str


@dataclass(frozen=True)
class HeaderBlock:
    name: str
    title: Optional[str] = None
    contact: Tuple[ContactRow, ...] = ()


@dataclass(frozen=True)
class Document:
    language: str
    header: HeaderBlock
    sections: Tuple[Section, ...]
    theme: Theme

    def section(self, kind: SectionKind) -> Optional[Section]:
        for section in self.sections:
            if section.kind == kind:
                return section
        return None

    def units(self) -> Tuple[LayoutUnit, ...]:
        return tuple(unit for section in self.sections for unit in section.children)


# ------------------------- Render-time configuration -------------------------

DEFAULT_PAGE_BREAK_THRESHOLD_MM = 85.0


@dataclass(frozen=True)
class PageSpec:
    """
    Physical page handed to the render backend.

    Backend margins stay at zero: visual margins are part of the document
    (theme page_margin emitted through @page), so the layout engine owns
    all spacing.
    """
    width_mm: float = 210.0
    height_mm: float = 297.0
    format: str = "A4"

    @property
    def margins(self) -> dict:
        return {"top": "0mm", "right": "0mm", "bottom": "0mm", "left": "0mm"}


A4 = PageSpec()


_OPTION_KEYS = {
    "pageBreakThreshold": "page_break_threshold",
    "titleSectionConnection": "title_section_connection",
    "twoColumnSkills": "two_column_skills",
    "sectionSpacing": "section_spacing",
    "elementSpacing": "element_spacing",
}


@dataclass(frozen=True)
class RenderOptions:
    """
    Render-time knobs, never persisted.

    page_break_threshold: distance in mm above the bottom of the content
        area below which a unit may no longer start; 0 turns early breaks off.
    section_spacing / element_spacing: gaps in mm; None keeps the theme values.
    language: overrides the CV's own language when set.
    """
    page_break_threshold: float = DEFAULT_PAGE_BREAK_THRESHOLD_MM
    title_section_connection: bool = True
    two_column_skills: bool = True
    section_spacing: Optional[float] = None
    element_spacing: Optional[float] = None
    language: Optional[str] = None
    theme: Optional[str] = None
    extra: Mapping[str, Any] = field(default_factory=dict, compare=False)

    def __post_init__(self) -> None:
        if self.page_break_threshold < 0:
            raise ValueError("page_break_threshold must not be negative")
        for name in ("section_spacing", "element_spacing"):
            value = getattr(self, name)
            if value is not None and value < 0:
                raise ValueError(f"{name} must not be negative")

    @classmethod
    def from_dict(cls, values: Optional[Mapping[str, Any]]) -> "RenderOptions":
        """
        Build options from a request payload (camelCase or snake_case keys).

        None values fall back to the defaults; unknown keys are kept in extra.
        """
        known = {}
        extra = {}
        for key, value in (values or {}).items():
            name = _OPTION_KEYS.get(key, key)
            if name in cls.__dataclass_fields__ and name != "extra":
                if value is not None:
                    known[name] = value
            else:
                extra[key] = value
        if "page_break_threshold" in known:
            known["page_break_threshold"] = float(known["page_break_threshold"])
        for name in ("title_section_connection", "two_column_skills"):
            if name in known:
                known[name] = bool(known[name])
        for name in ("section_spacing", "element_spacing"):
            if name in known:
                known[name] = float(known[name])
        return cls(**known, extra=extra)
