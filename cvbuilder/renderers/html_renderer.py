"""
HTML pass-through renderer for previews.
"""

from __future__ import annotations

from ..layout.model import A4, PageSpec
from .base import CVRenderer, RenderError


class HtmlCVRenderer(CVRenderer):
    """Print-ready HTML preview (no browser involved)."""

    extension = ".html"

    def render(self, html: str, page_spec: PageSpec = A4) -> bytes:
        if not html:
            raise RenderError("Nothing to render: HTML document is empty")
        return html.encode("utf-8")
