"""
Shared OpenAI helper utilities for adjusters and the cover letter writer.
"""

from __future__ import annotations

import html
import json
import os
import random
import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, TypeVar

import requests

from ..logging_utils import LOG

T = TypeVar("T")

DEFAULT_MODEL = "gpt-4o-mini"
JOB_DESCRIPTION_MAX_CHARS = 5000


def default_model() -> str:
    return os.environ.get("OPENAI_MODEL") or DEFAULT_MODEL


@dataclass(frozen=True)
class RetryConfig:
    max_attempts: int = 8
    base_delay_s: float = 0.75
    max_delay_s: float = 20.0
    write_multiplier: float = 1.6
    deterministic: bool = False


def strip_markdown_fences(text: str) -> str:
    text = text.strip()
    if text.startswith("```json"):
        text = text[len("```json") :]
    elif text.startswith("```"):
        text = text[len("```") :]
    if text.endswith("```"):
        text = text[: -len("```")]
    return text.strip()


def extract_json_object(text: str) -> Optional[Dict[str, Any]]:
    """
    Robustly extract a JSON object from model output.

    Handles:
    - pure JSON
    - fenced code blocks
    - extra commentary around JSON
    """
    if not isinstance(text, str):
        return None

    cleaned = strip_markdown_fences(text)

    try:
        obj = json.loads(cleaned)
        return obj if isinstance(obj, dict) else None
    except ValueError:
        pass

    start = cleaned.find("{")
    end = cleaned.rfind("}")
    if start == -1 or end == -1 or end <= start:
        return None

    try:
        obj = json.loads(cleaned[start : end + 1])
    except ValueError:
        return None
    return obj if isinstance(obj, dict) else None


def completion_text(completion: Any) -> Optional[str]:
    """First choice's message content, or None for an empty/odd response."""
    choices = getattr(completion, "choices", None)
    if not choices:
        return None
    message = getattr(choices[0], "message", None)
    return getattr(message, "content", None)


class OpenAIRetry:
    """
    One retry layer around an OpenAI call: 429/5xx and network errors are
    retried with exponential backoff (full jitter), Retry-After wins.
    """

    def __init__(
        self,
        *,
        retry: RetryConfig,
        sleep: Callable[[float], None],
    ):
        self._retry = retry
        self._sleep = sleep

    def _get_status_code(self, exc: Exception) -> Optional[int]:
        for attr in ("status_code", "status", "http_status"):
            val = getattr(exc, attr, None)
            if isinstance(val, int):
                return val
        resp = getattr(exc, "response", None)
        if resp is not None:
            sc = getattr(resp, "status_code", None)
            if isinstance(sc, int):
                return sc
        return None

    def _get_retry_after_s(self, exc: Exception) -> Optional[float]:
        headers = getattr(exc, "headers", None)
        resp = getattr(exc, "response", None)
        if headers is None and resp is not None:
            headers = getattr(resp, "headers", None)
        if not headers:
            return None
        ra = headers.get("retry-after") or headers.get("Retry-After")
        if ra is None:
            return None
        try:
            return float(ra)
        except (TypeError, ValueError):
            return None

    def _is_transient(self, exc: Exception) -> bool:
        status = self._get_status_code(exc)
        if status == 429:
            return True
        if status is not None and 500 <= status <= 599:
            return True

        msg = str(exc).lower()
        transient_markers = (
            "timeout",
            "timed out",
            "temporarily unavailable",
            "connection reset",
            "connection aborted",
            "connection refused",
            "remote disconnected",
            "bad gateway",
            "service unavailable",
            "gateway timeout",
        )
        return any(m in msg for m in transient_markers)

    def _sleep_with_backoff(self, attempt_idx: int, *, is_write: bool, exc: Exception) -> None:
        retry_after = self._get_retry_after_s(exc)
        if retry_after is not None and retry_after > 0:
            self._sleep(min(self._retry.max_delay_s, retry_after))
            return

        mult = self._retry.write_multiplier if is_write else 1.0
        capped = min(self._retry.max_delay_s, self._retry.base_delay_s * (2**attempt_idx) * mult)
        delay = capped if self._retry.deterministic else random.random() * capped
        self._sleep(max(0.25, delay))

    def call(self, fn: Callable[[], T], *, is_write: bool, op_name: str) -> T:
        last_exc: Optional[Exception] = None
        for attempt in range(self._retry.max_attempts):
            try:
                return fn()
            except Exception as e:
                last_exc = e
                if not self._is_transient(e):
                    raise RuntimeError(f"{op_name} failed (non-retryable): {e}") from e
                if attempt >= self._retry.max_attempts - 1:
                    status = self._get_status_code(e)
                    raise RuntimeError(
                        f"{op_name} failed after {self._retry.max_attempts} attempts"
                        + (f" (HTTP {status})" if status else "")
                        + f": {e}"
                    ) from e
                self._sleep_with_backoff(attempt, is_write=is_write, exc=e)

        raise RuntimeError(f"{op_name} failed unexpectedly: {last_exc}")


_DROP_BLOCKS_RE = re.compile(r"<(script|style|noscript)[^>]*>.*?</\1>", re.DOTALL | re.IGNORECASE)
_TAG_RE = re.compile(r"<[^>]+>")
_WS_RE = re.compile(r"\s+")


def html_to_text(page: str) -> str:
    text = _DROP_BLOCKS_RE.sub("", page)
    text = _TAG_RE.sub(" ", text)
    text = html.unescape(text)
    return _WS_RE.sub(" ", text).strip()


def fetch_job_description(url: str, *, timeout: float = 15) -> str:
    """
    Fetch a job posting and reduce it to plain text.

    Returns:
        Cleaned text content (max 5000 chars), or empty string if the fetch fails.
    """
    try:
        resp = requests.get(
            url,
            timeout=timeout,
            headers={
                "User-Agent": "cvbuilder/1.0",
                "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            },
        )
    except requests.RequestException as e:
        LOG.warning("Failed to fetch job description from %s (%s)", url, type(e).__name__)
        return ""

    if resp.status_code != 200:
        LOG.warning("Failed to fetch job description from %s (HTTP %s)", url, resp.status_code)
        return ""

    return html_to_text(resp.text or "")[:JOB_DESCRIPTION_MAX_CHARS]
