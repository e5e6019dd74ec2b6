"""
Layout engine: section/item rendering, pagination constraints and HTML.
"""

from .model import (
    A4,
    DEFAULT_PAGE_BREAK_THRESHOLD_MM,
    ColumnFill,
    ColumnGroup,
    Document,
    HeaderBlock,
    LayoutUnit,
    Line,
    LineRole,
    PageSpec,
    RenderOptions,
    Section,
    SectionKind,
    UnitKind,
    split_into_columns,
)
from .sections import build_document
from .pagination import BreakRule, ConstraintSet, PagePlan, build_constraint_set, plan_pages
from .html import generate_html, render_document_html

__all__ = [
    "A4",
    "DEFAULT_PAGE_BREAK_THRESHOLD_MM",
    "ColumnFill",
    "ColumnGroup",
    "Document",
    "HeaderBlock",
    "LayoutUnit",
    "Line",
    "LineRole",
    "PageSpec",
    "RenderOptions",
    "Section",
    "SectionKind",
    "UnitKind",
    "split_into_columns",
    "build_document",
    "BreakRule",
    "ConstraintSet",
    "PagePlan",
    "build_constraint_set",
    "plan_pages",
    "generate_html",
    "render_document_html",
]
