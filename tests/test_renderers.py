"""Tests for CV renderer interfaces and implementations."""

import logging
from unittest.mock import MagicMock

import pytest
from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from cvbuilder.layout.model import A4, PageSpec
from cvbuilder.renderers import (
    CVRenderer,
    HtmlCVRenderer,
    PlaywrightPdfRenderer,
    RenderError,
    get_renderer,
    list_renderers,
    register_renderer,
    unregister_renderer,
)
from cvbuilder.renderers.pdf_renderer import DEFAULT_LAUNCH_ARGS, is_transient_browser_error


def make_factory(pdf=b"%PDF-1.7"):
    """Mock sync_playwright(): factory() is a context manager yielding p."""
    factory = MagicMock()
    factory.return_value.__exit__.return_value = False
    p = factory.return_value.__enter__.return_value
    browser = p.chromium.launch.return_value
    page = browser.new_page.return_value
    page.pdf.return_value = pdf
    return factory, p, browser, page


class TestCVRendererInterface:
    """Tests for the CVRenderer abstract interface."""

    def test_cv_renderer_is_abstract(self):
        """CVRenderer cannot be instantiated directly."""
        with pytest.raises(TypeError):
            CVRenderer()

    def test_cv_renderer_requires_render_method(self):
        """Subclasses must implement the render method."""
        class IncompleteCVRenderer(CVRenderer):
            pass

        with pytest.raises(TypeError):
            IncompleteCVRenderer()

    def test_render_error_transient_flag(self):
        assert not RenderError("x").transient
        assert RenderError("x", transient=True).transient


class TestRendererRegistry:
    def test_builtin_renderers_listed(self):
        names = [r["name"] for r in list_renderers()]

        assert "playwright-pdf" in names
        assert "html" in names

    def test_descriptions_are_first_docstring_line(self):
        descriptions = {r["name"]: r["description"] for r in list_renderers()}

        assert descriptions["html"] == "Print-ready HTML preview (no browser involved)."

    def test_get_renderer_returns_instances(self):
        assert isinstance(get_renderer("html"), HtmlCVRenderer)
        assert get_renderer("nonexistent") is None

    def test_get_renderer_passes_kwargs(self):
        renderer = get_renderer("playwright-pdf", settle_ms=0)

        assert isinstance(renderer, PlaywrightPdfRenderer)
        assert renderer.settle_ms == 0

    def test_register_and_unregister(self):
        class Custom(CVRenderer):
            """Custom test renderer."""

            def render(self, html, page_spec=A4):
                return b"x"

        register_renderer("custom-test", Custom)
        try:
            assert isinstance(get_renderer("custom-test"), Custom)
        finally:
            unregister_renderer("custom-test")
        assert get_renderer("custom-test") is None


class TestHtmlCVRenderer:
    def test_returns_utf8_bytes(self):
        out = HtmlCVRenderer().render("<p>Café</p>")

        assert out == "<p>Café</p>".encode("utf-8")
        assert HtmlCVRenderer.extension == ".html"

    def test_empty_html_raises(self):
        with pytest.raises(RenderError) as exc_info:
            HtmlCVRenderer().render("")

        assert not exc_info.value.transient


class TestPlaywrightPdfRenderer:
    def test_prints_a4_with_backgrounds_and_css_page_size(self):
        factory, p, browser, page = make_factory()

        out = PlaywrightPdfRenderer(playwright_factory=factory).render("<html></html>")

        assert out == b"%PDF-1.7"
        p.chromium.launch.assert_called_once_with(headless=True, args=list(DEFAULT_LAUNCH_ARGS))
        page.set_content.assert_called_once_with("<html></html>", wait_until="networkidle", timeout=30_000)
        page.wait_for_timeout.assert_called_once_with(500)
        page.pdf.assert_called_once_with(
            format="A4",
            print_background=True,
            prefer_css_page_size=True,
            margin={"top": "0mm", "right": "0mm", "bottom": "0mm", "left": "0mm"},
            scale=1.0,
        )
        browser.close.assert_called_once()

    def test_waits_for_fonts_before_printing(self):
        factory, _, _, page = make_factory()

        PlaywrightPdfRenderer(playwright_factory=factory).render("<html></html>")

        scripts = [c.args[0] for c in page.evaluate.call_args_list]
        assert any("document.fonts.ready" in s for s in scripts)

    def test_explicit_page_size_without_format(self):
        factory, _, _, page = make_factory()

        PlaywrightPdfRenderer(playwright_factory=factory).render("<html></html>", PageSpec(100, 200, ""))

        kwargs = page.pdf.call_args.kwargs
        assert kwargs["width"] == "100mm"
        assert kwargs["height"] == "200mm"
        assert "format" not in kwargs

    def test_custom_timeouts(self):
        factory, _, _, page = make_factory()

        PlaywrightPdfRenderer(playwright_factory=factory, load_timeout_ms=1000, settle_ms=0).render("x")

        assert page.set_content.call_args.kwargs["timeout"] == 1000
        page.wait_for_timeout.assert_called_once_with(0)

    def test_timeout_is_transient_and_browser_closed(self):
        factory, _, browser, page = make_factory()
        page.set_content.side_effect = PlaywrightTimeoutError("Timeout 30000ms exceeded.")

        with pytest.raises(RenderError) as exc_info:
            PlaywrightPdfRenderer(playwright_factory=factory).render("<html></html>")

        assert exc_info.value.transient
        assert "Precise PDF generation failed" in str(exc_info.value)
        browser.close.assert_called_once()

    def test_launch_failure_is_permanent(self):
        factory, p, browser, _ = make_factory()
        p.chromium.launch.side_effect = PlaywrightError("Executable doesn't exist at /ms-playwright/chromium")

        with pytest.raises(RenderError) as exc_info:
            PlaywrightPdfRenderer(playwright_factory=factory).render("<html></html>")

        assert not exc_info.value.transient
        browser.close.assert_not_called()

    def test_other_backend_errors_wrapped_as_permanent(self):
        """Errors outside Playwright's own types still come out as RenderError."""
        factory, p, _, _ = make_factory()
        cause = OSError("spawn chromium ENOENT")
        p.chromium.launch.side_effect = cause

        with pytest.raises(RenderError) as exc_info:
            PlaywrightPdfRenderer(playwright_factory=factory).render("<html></html>")

        assert not exc_info.value.transient
        assert exc_info.value.__cause__ is cause
        assert "spawn chromium ENOENT" in str(exc_info.value)

    def test_close_failure_only_logged(self, caplog):
        factory, _, browser, _ = make_factory()
        browser.close.side_effect = RuntimeError("already gone")

        with caplog.at_level(logging.WARNING, logger="cvbuilder"):
            out = PlaywrightPdfRenderer(playwright_factory=factory).render("<html></html>")

        assert out == b"%PDF-1.7"
        assert "Failed to close browser: already gone" in caplog.text

    @pytest.mark.parametrize(
        "message, transient",
        [
            ("Target closed", True),
            ("Browser has been closed", True),
            ("Page crashed", True),
            ("Browser disconnected", True),
            ("net::ERR_INVALID_URL", False),
        ],
    )
    def test_transient_classification(self, message, transient):
        assert is_transient_browser_error(PlaywrightError(message)) is transient

    def test_timeout_error_always_transient(self):
        assert is_transient_browser_error(PlaywrightTimeoutError("waiting for load"))
