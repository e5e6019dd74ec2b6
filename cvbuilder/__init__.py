# cvbuilder/__init__.py

from .assembly import DocumentAssembler, RenderFailure, RetryConfig, produce
from .cover_letter import CoverLetter, CoverLetterWriter
from .document import normalize_cv
from .layout import PageSpec, RenderOptions, build_document, generate_html, plan_pages
from .renderers import RenderError
from .themes import Theme, get_theme

__all__ = [
    "DocumentAssembler",
    "RenderFailure",
    "RetryConfig",
    "produce",
    "CoverLetter",
    "CoverLetterWriter",
    "normalize_cv",
    "PageSpec",
    "RenderOptions",
    "build_document",
    "generate_html",
    "plan_pages",
    "RenderError",
    "Theme",
    "get_theme",
]
