"""
Document assembly and render retry driver.

Normalizes, lays out and generates HTML once per request, then hands the
HTML to a render backend inside a bounded retry loop. Transient backend
failures and empty output are retried; anything else fails at once.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional, Union

from .layout.html import generate_html
from .layout.model import A4, PageSpec, RenderOptions
from .logging_utils import LOG
from .renderers import CVRenderer, RenderError, get_renderer
from .themes import Theme

DEFAULT_RENDERER = "playwright-pdf"

OptionsLike = Union[RenderOptions, Mapping[str, Any], None]
ThemeLike = Union[Theme, str, Mapping[str, Any], None]


@dataclass(frozen=True)
class RetryConfig:
    max_attempts: int = 2
    delay_s: float = 1.0


class RenderFailure(RenderError):
    """Rendering gave up; attempts says how many backend calls were made."""

    def __init__(self, message: str, attempts: int):
        super().__init__(message, transient=False)
        self.attempts = attempts


def resolve_renderer(renderer: Union[CVRenderer, str, None]) -> CVRenderer:
    if isinstance(renderer, CVRenderer):
        return renderer
    name = renderer or DEFAULT_RENDERER
    found = get_renderer(name)
    if found is None:
        raise ValueError(f"Unknown renderer: {name}")
    return found


class DocumentAssembler:
    """
    Produces finished documents from CV records.

    The renderer, retry policy and sleep function are injectable so the
    retry loop can be driven without a browser or real delays.
    """

    def __init__(
        self,
        renderer: Union[CVRenderer, str, None] = None,
        *,
        retry_config: Optional[RetryConfig] = None,
        page_spec: PageSpec = A4,
        _sleep: Callable[[float], None] = time.sleep,
    ):
        self._renderer = resolve_renderer(renderer)
        self._retry = retry_config or RetryConfig()
        self._page_spec = page_spec
        self._sleep = _sleep

    @property
    def renderer(self) -> CVRenderer:
        return self._renderer

    def produce_html(self, cv: Any, options: OptionsLike = None, theme: ThemeLike = None) -> str:
        return generate_html(cv, options, theme)

    def produce(self, cv: Any, options: OptionsLike = None, theme: ThemeLike = None) -> bytes:
        """
        Render a CV record to document bytes.

        Raises:
            RenderFailure: When every attempt failed or returned nothing
        """
        html = self.produce_html(cv, options, theme)
        return self.render_html(html)

    def render_html(self, html: str) -> bytes:
        max_attempts = max(1, self._retry.max_attempts)
        last_exc: Optional[RenderError] = None
        reason = "empty output"

        for attempt in range(1, max_attempts + 1):
            try:
                data = self._renderer.render(html, self._page_spec)
            except RenderError as e:
                if not e.transient:
                    raise RenderFailure(f"Render failed (non-retryable): {e}", attempts=attempt) from e
                last_exc, reason = e, str(e)
                LOG.warning("Render attempt %d/%d failed: %s", attempt, max_attempts, e)
            else:
                if data:
                    return data
                last_exc, reason = None, "empty output"
                LOG.warning("Render attempt %d/%d returned an empty document", attempt, max_attempts)

            if attempt < max_attempts:
                self._sleep(self._retry.delay_s)

        raise RenderFailure(
            f"Render failed after {max_attempts} attempts: {reason}", attempts=max_attempts
        ) from last_exc


def produce(
    cv: Any,
    options: OptionsLike = None,
    theme: ThemeLike = None,
    renderer: Union[CVRenderer, str, None] = None,
) -> bytes:
    """One-shot convenience wrapper around DocumentAssembler.produce."""
    return DocumentAssembler(renderer).produce(cv, options, theme)
