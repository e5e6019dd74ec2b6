"""
Pagination constraint engine.

Two outputs, both derived from the layout tree and the render options:

1. A ConstraintSet: backend-independent break rules (atomicity, glue,
   column integrity, forced early breaks) serialised to print CSS.
   The render backend honours them as hints.

2. A PagePlan: a walk over the document with estimated block heights
   that applies the threshold rule. A block may not start below
   (content bottom - threshold); a block that does not fit moves whole
   to the next page. Glued blocks (a section header and its first row)
   are decided together. Blocks pushed by the threshold although they
   would still have fit become forced breaks in the HTML, since the
   backend would not break there by itself.

Heights are estimates (line counts times line height, wrapping from an
average glyph width), not a box-model computation. The plan is a
deterministic heuristic; the backend's real flow layout stays the final
authority.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Dict, FrozenSet, Iterable, List, Optional, Tuple

from ..themes import Theme, to_mm
from .model import (
    ColumnGroup,
    Document,
    HeaderBlock,
    LayoutUnit,
    LineRole,
    RenderOptions,
    Section,
    UnitKind,
)


class BreakRule(str, Enum):
    AVOID_INSIDE = "avoid-inside"
    AVOID_AFTER = "avoid-after"
    AVOID_BEFORE = "avoid-before"
    PAGE_BEFORE = "page-before"


class ConstraintFamily(str, Enum):
    ATOMICITY = "atomicity"
    GLUE = "glue"
    COLUMNS = "columns"
    THRESHOLD = "threshold"


_RULE_CSS = {
    BreakRule.AVOID_INSIDE: ("break-inside: avoid-page", "page-break-inside: avoid"),
    BreakRule.AVOID_AFTER: ("break-after: avoid-page", "page-break-after: avoid"),
    BreakRule.AVOID_BEFORE: ("break-before: avoid-page", "page-break-before: avoid"),
    BreakRule.PAGE_BEFORE: ("break-before: page", "page-break-before: always"),
}

# Class names shared with the HTML templates
SECTION_CLASS = "section"
SECTION_HEADER_CLASS = "section-header"
KEEP_WITH_NEXT_CLASS = "keep-with-next"
FORCED_BREAK_CLASS = "forced-break"
COLUMN_GROUP_CLASS = "column-group"

ATOMIC_UNIT_KINDS = (
    UnitKind.EXPERIENCE,
    UnitKind.PROJECT,
    UnitKind.EDUCATION,
    UnitKind.CERTIFICATION,
    UnitKind.SKILL_CATEGORY,
)


@dataclass(frozen=True)
class Constraint:
    family: ConstraintFamily
    selector: str
    rules: Tuple[BreakRule, ...]

    def to_css(self) -> str:
        declarations = []
        for rule in self.rules:
            declarations.extend(f"{decl} !important;" for decl in _RULE_CSS[rule])
        body = "\n  ".join(declarations)
        return f"{self.selector} {{\n  {body}\n}}"


@dataclass(frozen=True)
class ConstraintSet:
    constraints: Tuple[Constraint, ...]

    def family(self, family: ConstraintFamily) -> Tuple[Constraint, ...]:
        return tuple(c for c in self.constraints if c.family == family)

    def rules_for(self, selector: str) -> FrozenSet[BreakRule]:
        return frozenset(
            rule for c in self.constraints if c.selector == selector for rule in c.rules
        )

    def to_css(self) -> str:
        return "\n".join(c.to_css() for c in self.constraints)


def unit_selector(kind: UnitKind) -> str:
    return f".{kind.value}"


def build_constraint_set(options: Optional[RenderOptions] = None) -> ConstraintSet:
    """
    Declare the break rules for a render.

    Item-level glue (title, subtitle, period kept with the next line) is
    always on; section-header glue follows options.title_section_connection.
    """
    options = options or RenderOptions()
    constraints: List[Constraint] = [
        Constraint(
            ConstraintFamily.ATOMICITY,
            ", ".join(unit_selector(kind) for kind in ATOMIC_UNIT_KINDS),
            (BreakRule.AVOID_INSIDE,),
        ),
        Constraint(ConstraintFamily.ATOMICITY, ".page-header", (BreakRule.AVOID_INSIDE, BreakRule.AVOID_AFTER)),
        Constraint(ConstraintFamily.GLUE, f".{KEEP_WITH_NEXT_CLASS}", (BreakRule.AVOID_AFTER,)),
    ]
    if options.title_section_connection:
        constraints.extend([
            Constraint(ConstraintFamily.GLUE, f".{SECTION_HEADER_CLASS}", (BreakRule.AVOID_AFTER,)),
            Constraint(ConstraintFamily.GLUE, f".{SECTION_HEADER_CLASS} + *", (BreakRule.AVOID_BEFORE,)),
        ])
    constraints.append(
        Constraint(ConstraintFamily.COLUMNS, f".{COLUMN_GROUP_CLASS} .unit", (BreakRule.AVOID_INSIDE,))
    )
    if options.page_break_threshold > 0:
        constraints.append(
            Constraint(ConstraintFamily.THRESHOLD, f".{FORCED_BREAK_CLASS}", (BreakRule.PAGE_BEFORE,))
        )
    return ConstraintSet(tuple(constraints))


# ------------------------- Height estimation -------------------------

# Average glyph width as a fraction of the font size
AVG_GLYPH_RATIO = 0.5
# Chips carry padding and borders around each skill
CHIP_EXTRA_CHARS = 3
CHIP_LINE_FACTOR = 1.6
BULLET_INDENT = "16px"
COLUMN_GAP = "20px"
BOXED_PADDING = "8px"
HEADER_RULE = "3px"  # header underline plus its padding

_BOXED_KINDS = (UnitKind.CERTIFICATION, UnitKind.SKILL_CATEGORY)


@dataclass(frozen=True)
class Metrics:
    """Theme and option lengths resolved to millimetres."""
    line_height: float
    name_mm: float
    section_header_mm: float
    job_title_mm: float
    body_mm: float
    supporting_mm: float
    content_width_mm: float
    content_height_mm: float
    section_gap_mm: float
    element_gap_mm: float
    micro_mm: float
    large_mm: float

    @classmethod
    def from_theme(cls, theme: Theme, options: Optional[RenderOptions] = None) -> "Metrics":
        options = options or RenderOptions()
        section_gap = options.section_spacing
        element_gap = options.element_spacing
        return cls(
            line_height=theme.layout.line_height,
            name_mm=to_mm(theme.font_sizes.name),
            section_header_mm=to_mm(theme.font_sizes.section_header),
            job_title_mm=to_mm(theme.font_sizes.job_title),
            body_mm=to_mm(theme.font_sizes.body),
            supporting_mm=to_mm(theme.font_sizes.supporting),
            content_width_mm=theme.content_width_mm,
            content_height_mm=theme.content_height_mm,
            section_gap_mm=to_mm(theme.spacing.section) if section_gap is None else section_gap,
            element_gap_mm=to_mm(theme.spacing.element) if element_gap is None else element_gap,
            micro_mm=to_mm(theme.spacing.micro),
            large_mm=to_mm(theme.spacing.large),
        )

    def line_mm(self, font_mm: float) -> float:
        return font_mm * self.line_height


def estimate_wrapped_lines(text: str, font_mm: float, width_mm: float) -> int:
    if not text:
        return 0
    chars_per_line = max(1, int(width_mm / (font_mm * AVG_GLYPH_RATIO)))
    return max(1, math.ceil(len(text) / chars_per_line))


def estimate_unit_height(unit: LayoutUnit, metrics: Metrics, width_mm: Optional[float] = None) -> float:
    """Estimated rendered height of a unit in millimetres, spacing excluded."""
    width = metrics.content_width_mm if width_mm is None else width_mm
    boxed = unit.kind in _BOXED_KINDS
    if boxed:
        width -= 2 * to_mm(BOXED_PADDING)

    height = 0.0
    chip_chars = 0
    for line in unit.lines:
        if not line.text:
            continue
        if line.role == LineRole.CHIP:
            chip_chars += len(line.text) + CHIP_EXTRA_CHARS
            continue
        if line.role == LineRole.TITLE:
            font = metrics.supporting_mm if unit.kind == UnitKind.SKILL_CATEGORY else metrics.job_title_mm
        elif unit.kind == UnitKind.CERTIFICATION and line.role == LineRole.LABELED:
            font = metrics.supporting_mm
        else:
            font = metrics.body_mm
        text = f"{line.label}: {line.text}" if line.label else line.text
        line_width = width - to_mm(BULLET_INDENT) if line.role == LineRole.BULLET else width
        height += estimate_wrapped_lines(text, font, line_width) * metrics.line_mm(font)

    if chip_chars:
        chip_rows = estimate_wrapped_lines("x" * chip_chars, metrics.supporting_mm, width)
        height += chip_rows * metrics.supporting_mm * CHIP_LINE_FACTOR

    if boxed:
        height += 2 * to_mm(BOXED_PADDING)
    return height


def estimate_header_height(header: HeaderBlock, metrics: Metrics) -> float:
    left = metrics.line_mm(metrics.name_mm)
    if header.title:
        left += metrics.line_mm(metrics.job_title_mm)
    right = len(header.contact) * metrics.line_mm(metrics.supporting_mm)
    return max(left, right) + metrics.large_mm


def estimate_section_header_height(metrics: Metrics) -> float:
    return metrics.line_mm(metrics.section_header_mm) + to_mm(HEADER_RULE) + metrics.micro_mm


def column_width_mm(group: ColumnGroup, metrics: Metrics) -> float:
    gaps = (group.column_count - 1) * to_mm(COLUMN_GAP)
    return (metrics.content_width_mm - gaps) / group.column_count


# ------------------------- Page planning -------------------------

@dataclass(frozen=True)
class Block:
    """
    One pagination decision: a unit, a column row, or a glued pseudo-unit.

    anchor: element id that receives a forced break (the section when the
        block carries the section header).
    min_fit_mm: height that must fit on the current page for the block to
        start there (the whole block when atomic).
    """
    anchor: str
    uids: Tuple[str, ...]
    height_mm: float
    min_fit_mm: float
    atomic: bool
    spacing_after_mm: float


@dataclass(frozen=True)
class Placement:
    anchor: str
    uids: Tuple[str, ...]
    page: int
    top_mm: float
    height_mm: float
    forced_break: bool = False
    overflows: bool = False


@dataclass(frozen=True)
class PagePlan:
    placements: Tuple[Placement, ...]
    page_count: int
    content_height_mm: float
    threshold_mm: float

    def page_of(self, uid: str) -> Optional[int]:
        """Page on which the element starts."""
        for placement in self.placements:
            if uid in placement.uids:
                return placement.page
        return None

    def pages(self) -> Dict[int, List[str]]:
        """Page number -> ids starting on it, in document order."""
        result: Dict[int, List[str]] = {n: [] for n in range(1, self.page_count + 1)}
        for placement in self.placements:
            result[placement.page].extend(placement.uids)
        return result

    @property
    def forced_breaks(self) -> FrozenSet[str]:
        return frozenset(p.anchor for p in self.placements if p.forced_break)

    @property
    def overflowing(self) -> Tuple[str, ...]:
        return tuple(p.anchor for p in self.placements if p.overflows)


def _section_rows(section: Section, metrics: Metrics) -> List[Tuple[Tuple[LayoutUnit, ...], float]]:
    if section.column_group is not None:
        group = section.column_group
        width = column_width_mm(group, metrics)
        return [
            (row, max(estimate_unit_height(u, metrics, width) for u in row))
            for row in group.rows
        ]
    return [((unit,), estimate_unit_height(unit, metrics)) for unit in section.units]


def _first_line_mm(unit: LayoutUnit, metrics: Metrics) -> float:
    return metrics.line_mm(metrics.body_mm) if unit.lines else 0.0


def build_blocks(document: Document, options: RenderOptions, metrics: Metrics) -> List[Block]:
    """Flatten the document into pagination decisions, in order."""
    header_h = estimate_header_height(document.header, metrics)
    blocks = [Block("page-header", ("page-header",), header_h, header_h, True, 0.0)]
    section_header_h = estimate_section_header_height(metrics)

    for section in document.sections:
        rows = _section_rows(section, metrics)
        if not rows:
            continue
        for i, (units, height) in enumerate(rows):
            atomic = all(u.atomic for u in units)
            min_fit = height if atomic else min(height, _first_line_mm(units[0], metrics))
            last = i == len(rows) - 1
            spacing = metrics.section_gap_mm if last else metrics.element_gap_mm
            uids = tuple(u.uid for u in units)
            if i == 0 and options.title_section_connection:
                blocks.append(Block(
                    anchor=section.uid,
                    uids=(section.uid,) + uids,
                    height_mm=section_header_h + height,
                    min_fit_mm=section_header_h + min_fit,
                    atomic=atomic,
                    spacing_after_mm=spacing,
                ))
                continue
            if i == 0:
                blocks.append(Block(section.uid, (section.uid,), section_header_h, section_header_h, True, 0.0))
            blocks.append(Block(uids[0], uids, height, min_fit, atomic, spacing))
    return blocks


def plan_pages(document: Document, options: Optional[RenderOptions] = None) -> PagePlan:
    """
    Walk the document and assign every block to a page.

    Per block, with the cursor measured from the top of the content area:
    - cursor past (content height - threshold): next page
    - min_fit does not fit below the cursor: next page
    - otherwise place the block and advance by its height
    A block at the top of a page is always placed; one taller than a page
    is flagged as overflowing and left to the backend.
    """
    options = options or RenderOptions()
    metrics = Metrics.from_theme(document.theme, options)
    page_h = metrics.content_height_mm
    threshold = options.page_break_threshold
    limit = page_h - threshold

    placements: List[Placement] = []
    page, cursor = 1, 0.0
    for block in build_blocks(document, options, metrics):
        at_top = cursor <= 0.0
        fits = cursor + block.min_fit_mm <= page_h
        past_threshold = threshold > 0 and cursor > limit
        forced = False
        if not at_top and (past_threshold or not fits):
            forced = fits  # the backend would not break here on its own
            page, cursor = page + 1, 0.0

        overflows = block.atomic and block.height_mm > page_h
        placements.append(Placement(
            anchor=block.anchor,
            uids=block.uids,
            page=page,
            top_mm=round(cursor, 3),
            height_mm=round(block.height_mm, 3),
            forced_break=forced,
            overflows=overflows,
        ))

        cursor += block.height_mm
        while cursor > page_h:
            cursor -= page_h
            page += 1
        cursor += block.spacing_after_mm

    return PagePlan(
        placements=tuple(placements),
        page_count=page,
        content_height_mm=page_h,
        threshold_mm=threshold,
    )


def iter_anchors(plan: PagePlan) -> Iterable[str]:
    return (p.anchor for p in plan.placements)
