"""
CV data checks and layout suggestions.

validate_cv_data reports what a CV needs before it is worth rendering;
get_layout_suggestions and optimize_layout_for_content look at content
volume and say (or do) what keeps the document to a sensible page count.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .document import normalize_cv
from .layout.model import RenderOptions
from .layout.pagination import plan_pages
from .layout.sections import build_document
from .logging_utils import LOG
from .shared import VerificationResult
from .themes import resolve_theme

REQUIRED_FIELDS = ("personalInfo", "summary", "experience", "skills", "education")

MAX_EXPERIENCE_WARNING = 10
MAX_PROJECTS_WARNING = 8

SUGGEST_TOTAL_ITEMS = 10
SUGGEST_EXPERIENCE = 6
SUGGEST_PROJECTS = 5
SUGGEST_SUMMARY_CHARS = 500
SUGGEST_PAGES = 2

OPTIMIZED_EXPERIENCE = 6
OPTIMIZED_PROJECTS = 5
OPTIMIZED_SUMMARY_CHARS = 480
OPTIMIZED_RESPONSIBILITIES = 4


@dataclass(frozen=True)
class LayoutSuggestion:
    type: str
    message: str
    recommendation: str


@dataclass(frozen=True)
class OptimizationResult:
    optimized_data: Dict[str, Any]
    suggestions: List[LayoutSuggestion] = field(default_factory=list)
    applied: bool = False


def validate_cv_data(cv: Any) -> VerificationResult:
    """
    Check that a CV carries the minimum needed for a render.

    Returns:
        VerificationResult; errors for missing required content, warnings
        for entry counts that usually spill over too many pages
    """
    data = normalize_cv(cv)
    errs: List[str] = []
    warns: List[str] = []

    # An empty list or map counts as missing: no experience entry means no CV
    for name in REQUIRED_FIELDS:
        if not data.get(name):
            errs.append(f"Missing required field: {name}")

    info = data.get("personalInfo") or {}
    if info and (not info.get("name") or not info.get("title")):
        errs.append("Missing required personal information")

    if len(data.get("experience") or []) > MAX_EXPERIENCE_WARNING:
        warns.append("Large number of experience entries may affect layout")
    if len(data.get("projects") or []) > MAX_PROJECTS_WARNING:
        warns.append("Large number of projects may affect layout")

    return VerificationResult(ok=not errs, errors=errs, warnings=warns)


def estimate_page_count(cv: Any, options: Optional[RenderOptions] = None) -> int:
    options = options or RenderOptions()
    document = build_document(normalize_cv(cv), resolve_theme(options.theme), options)
    return plan_pages(document, options).page_count


def get_layout_suggestions(cv: Any, options: Optional[RenderOptions] = None) -> List[LayoutSuggestion]:
    data = normalize_cv(cv)
    experience_count = len(data["experience"])
    project_count = len(data["projects"])
    suggestions: List[LayoutSuggestion] = []

    if experience_count + project_count > SUGGEST_TOTAL_ITEMS:
        suggestions.append(LayoutSuggestion(
            "content",
            "Consider reducing content or using compact layout",
            "Use compact spacing and limit items per section",
        ))
    if experience_count > SUGGEST_EXPERIENCE:
        suggestions.append(LayoutSuggestion(
            "experience",
            "Large number of experience entries detected",
            "Consider prioritizing most recent or relevant positions",
        ))
    if project_count > SUGGEST_PROJECTS:
        suggestions.append(LayoutSuggestion(
            "projects",
            "Many projects detected",
            "Focus on 3-5 most significant projects",
        ))
    if len(data["summary"] or "") > SUGGEST_SUMMARY_CHARS:
        suggestions.append(LayoutSuggestion(
            "summary",
            "Professional summary is quite long",
            "Consider condensing to 2-3 key sentences",
        ))

    pages = estimate_page_count(data, options)
    if pages > SUGGEST_PAGES:
        suggestions.append(LayoutSuggestion(
            "pages",
            f"Estimated length is {pages} pages",
            "Aim for at most 2 pages; trim older entries and long bullet lists",
        ))
    return suggestions


def optimize_layout_for_content(
    cv: Any, auto_optimize: bool = False, options: Optional[RenderOptions] = None
) -> OptimizationResult:
    """
    Suggest, and optionally apply, content trimming.

    With auto_optimize the returned data keeps the first 6 experiences,
    the first 5 projects, 4 responsibilities per experience, and a summary
    cut to 480 characters plus "..." when it is longer than 500.
    The input is never modified.
    """
    data = copy.deepcopy(normalize_cv(cv))
    suggestions = get_layout_suggestions(data, options)

    if auto_optimize:
        data["experience"] = [
            {**exp, "responsibilities": exp["responsibilities"][:OPTIMIZED_RESPONSIBILITIES]}
            for exp in data["experience"][:OPTIMIZED_EXPERIENCE]
        ]
        data["projects"] = data["projects"][:OPTIMIZED_PROJECTS]
        summary = data["summary"]
        if summary and len(summary) > SUGGEST_SUMMARY_CHARS:
            data["summary"] = summary[:OPTIMIZED_SUMMARY_CHARS] + "..."
        LOG.debug("Applied layout optimizations (%d suggestions)", len(suggestions))

    return OptimizationResult(optimized_data=data, suggestions=suggestions, applied=auto_optimize)
