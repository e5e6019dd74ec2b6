"""
HTML generation for rendered CVs.

Turns a layout Document into one self-contained, print-ready HTML page:
theme stylesheet, pagination constraint CSS, and the forced early breaks
chosen by the page planner. Jinja2 autoescaping covers all CV text.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping, Optional, Union

from jinja2 import Environment, FileSystemLoader

from ..document import normalize_cv
from ..logging_utils import LOG
from ..themes import Theme, resolve_theme
from .model import A4, Document, LineRole, PageSpec, RenderOptions
from .pagination import Metrics, PagePlan, build_constraint_set, plan_pages
from .sections import build_document

_TEMPLATES_DIR = Path(__file__).parent / "templates"

_ENV = Environment(
    loader=FileSystemLoader(str(_TEMPLATES_DIR)),
    autoescape=True,
    trim_blocks=True,
    lstrip_blocks=True,
)
_ENV.globals["LineRole"] = LineRole

CV_TEMPLATE = "cv.html.j2"


def coerce_options(options: Union[RenderOptions, Mapping[str, Any], None]) -> RenderOptions:
    if isinstance(options, RenderOptions):
        return options
    return RenderOptions.from_dict(options)


def render_document_html(
    document: Document,
    options: Optional[RenderOptions] = None,
    plan: Optional[PagePlan] = None,
    page: PageSpec = A4,
) -> str:
    """
    Render a layout Document to HTML.

    Args:
        document: Layout tree built by build_document
        options: Render options (thresholds, glue, spacing)
        plan: Precomputed page plan; planned here when omitted
        page: Physical page, used for the @page size

    Returns:
        Complete HTML document as a string
    """
    options = options or RenderOptions()
    plan = plan or plan_pages(document, options)
    metrics = Metrics.from_theme(document.theme, options)
    constraints = build_constraint_set(options)

    if plan.forced_breaks:
        LOG.debug("Forced page breaks before: %s", ", ".join(sorted(plan.forced_breaks)))
    if plan.overflowing:
        LOG.warning("Content taller than a page: %s", ", ".join(plan.overflowing))

    return _ENV.get_template(CV_TEMPLATE).render(
        document=document,
        theme=document.theme,
        page=page,
        forced=plan.forced_breaks,
        constraints_css=constraints.to_css(),
        section_gap=f"{metrics.section_gap_mm:.2f}mm",
        element_gap=f"{metrics.element_gap_mm:.2f}mm",
    )


def render_template(name: str, **context: Any) -> str:
    """Render one of the bundled templates (autoescaped)."""
    context.setdefault("page", A4)
    return _ENV.get_template(name).render(**context)


def generate_html(
    cv: Any,
    options: Union[RenderOptions, Mapping[str, Any], None] = None,
    theme: Union[Theme, str, Mapping[str, Any], None] = None,
) -> str:
    """
    Normalize a CV record, lay it out and render it to HTML.

    theme wins over options.theme; both default to the professional theme.
    """
    options = coerce_options(options)
    resolved = resolve_theme(theme if theme is not None else options.theme)
    document = build_document(normalize_cv(cv), resolved, options)
    return render_document_html(document, options)
