"""
PDF renderer backed by headless Chromium through Playwright.

One browser per render call: nothing is shared between calls, so
renders can run side by side in worker threads.
"""

from __future__ import annotations

from typing import Callable, Optional, Sequence

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError
from playwright.sync_api import sync_playwright

from ..layout.model import A4, PageSpec
from ..logging_utils import LOG
from .base import CVRenderer, RenderError

DEFAULT_LAUNCH_ARGS = (
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-gpu",
)
DEFAULT_LOAD_TIMEOUT_MS = 30_000
DEFAULT_SETTLE_MS = 500

# Browser failures that usually go away on a fresh launch
_TRANSIENT_MARKERS = (
    "target closed",
    "target page, context or browser has been closed",
    "browser has been closed",
    "browser closed",
    "crash",
    "disconnected",
    "connection closed",
    "timeout",
)


def is_transient_browser_error(exc: BaseException) -> bool:
    if isinstance(exc, PlaywrightTimeoutError):
        return True
    msg = str(exc).lower()
    return any(marker in msg for marker in _TRANSIENT_MARKERS)


class PlaywrightPdfRenderer(CVRenderer):
    """A4 PDF via headless Chromium (Playwright)."""

    extension = ".pdf"

    def __init__(
        self,
        playwright_factory: Optional[Callable[[], object]] = None,
        launch_args: Sequence[str] = DEFAULT_LAUNCH_ARGS,
        load_timeout_ms: int = DEFAULT_LOAD_TIMEOUT_MS,
        settle_ms: int = DEFAULT_SETTLE_MS,
    ):
        self._playwright_factory = playwright_factory or sync_playwright
        self.launch_args = list(launch_args)
        self.load_timeout_ms = load_timeout_ms
        self.settle_ms = settle_ms

    def render(self, html: str, page_spec: PageSpec = A4) -> bytes:
        try:
            with self._playwright_factory() as p:
                browser = p.chromium.launch(headless=True, args=self.launch_args)
                try:
                    return self._print(browser, html, page_spec)
                finally:
                    self._close(browser)
        except RenderError:
            raise
        except PlaywrightError as e:
            raise RenderError(
                f"Precise PDF generation failed: {e}",
                transient=is_transient_browser_error(e),
            ) from e
        except Exception as e:
            raise RenderError(f"Precise PDF generation failed: {e}", transient=False) from e

    def _print(self, browser, html: str, page_spec: PageSpec) -> bytes:
        page = browser.new_page()
        page.set_content(html, wait_until="networkidle", timeout=self.load_timeout_ms)

        # Web fonts change line wrapping; print only once they are in
        page.evaluate("() => document.fonts.ready.then(() => true)")
        page.evaluate("() => document.body.offsetHeight")
        page.wait_for_timeout(self.settle_ms)

        size = {"format": page_spec.format} if page_spec.format else {
            "width": f"{page_spec.width_mm}mm",
            "height": f"{page_spec.height_mm}mm",
        }
        pdf = page.pdf(
            **size,
            print_background=True,
            prefer_css_page_size=True,
            margin=page_spec.margins,
            scale=1.0,
        )
        LOG.debug("Rendered PDF (%d bytes)", len(pdf or b""))
        return pdf

    @staticmethod
    def _close(browser) -> None:
        try:
            browser.close()
        except Exception as e:
            LOG.warning("Failed to close browser: %s", e)
