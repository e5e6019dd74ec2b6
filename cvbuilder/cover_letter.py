"""
Cover letter generation.

Prompt in, text out: the writer sends the CV and the job offer to the
language model and returns whatever text comes back, stamped with its
creation time. to_html() turns a letter into a printable page for the
PDF renderers.
"""

from __future__ import annotations

import json
import os
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, List, Mapping, Optional

from openai import OpenAI

from .adjusters.openai_utils import OpenAIRetry, RetryConfig, completion_text, default_model
from .document import normalize_cv, to_plain_value
from .layout.html import render_template
from .logging_utils import LOG
from .shared import format_prompt

COVER_LETTER_PROMPT = "cover_letter"
COVER_LETTER_TEMPLATE = "cover_letter.html.j2"


@dataclass(frozen=True)
class CoverLetter:
    content: str
    created_at: str

    @property
    def paragraphs(self) -> List[str]:
        blocks = [" ".join(block.split()) for block in self.content.split("\n\n")]
        return [block for block in blocks if block]

    def to_dict(self) -> dict:
        return {"content": self.content, "createdAt": self.created_at}

    def to_html(self, title: str = "Cover Letter") -> str:
        return render_template(COVER_LETTER_TEMPLATE, title=title, paragraphs=self.paragraphs)


class CoverLetterWriter:
    def __init__(
        self,
        model: Optional[str] = None,
        api_key: Optional[str] = None,
        *,
        retry_config: Optional[RetryConfig] = None,
        _sleep: Callable[[float], None] = time.sleep,
        _now: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self._model = model or default_model()
        self._api_key = api_key or os.environ.get("OPENAI_API_KEY")
        self._retry = retry_config or RetryConfig()
        self._sleep = _sleep
        self._now = _now

    def generate(self, cv: Any, job_offer: Any, requirements: str = "") -> CoverLetter:
        """
        Write a cover letter for one CV and one job offer.

        Raises:
            ValueError: When the CV or the job offer is missing
            RuntimeError: When no API key is configured, the API call fails,
                or the model returns nothing
        """
        if not cv or not job_offer:
            raise ValueError("CV and job offer data required")
        if not self._api_key:
            raise RuntimeError("Cover letter generation requires OPENAI_API_KEY")

        system_prompt = format_prompt(COVER_LETTER_PROMPT, requirements=requirements or "None.")
        if not system_prompt:
            raise RuntimeError("Failed to load cover letter prompt template")

        payload = {
            "cv": normalize_cv(cv),
            "job_offer": job_offer if isinstance(job_offer, str) else to_plain_value(job_offer),
        }
        client = OpenAI(api_key=self._api_key)
        retryer = OpenAIRetry(retry=self._retry, sleep=self._sleep)
        completion = retryer.call(
            lambda: client.chat.completions.create(
                model=self._model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": json.dumps(payload, ensure_ascii=False)},
                ],
                temperature=0.7,
            ),
            is_write=True,
            op_name="Cover letter completion",
        )

        content = (completion_text(completion) or "").strip()
        if not content:
            raise RuntimeError("Cover letter completion returned no text")

        LOG.info("Generated cover letter (%d chars)", len(content))
        return CoverLetter(content=content, created_at=self._now().isoformat())


def cover_letter_from_dict(record: Mapping[str, Any]) -> CoverLetter:
    return CoverLetter(content=str(record.get("content") or ""), created_at=str(record.get("createdAt") or ""))
