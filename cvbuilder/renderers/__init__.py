"""
CV rendering interfaces and implementations.

This module provides pluggable and interchangeable render backends.
"""

from .base import CVRenderer, RenderError
from .html_renderer import HtmlCVRenderer
from .pdf_renderer import PlaywrightPdfRenderer
from .renderer_registry import get_renderer, list_renderers, register_renderer, unregister_renderer

# Register built-in renderers
register_renderer("playwright-pdf", PlaywrightPdfRenderer)
register_renderer("html", HtmlCVRenderer)

__all__ = [
    "CVRenderer",
    "RenderError",
    "HtmlCVRenderer",
    "PlaywrightPdfRenderer",
    "register_renderer",
    "get_renderer",
    "list_renderers",
    "unregister_renderer",
]
