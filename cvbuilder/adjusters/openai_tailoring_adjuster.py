"""
OpenAI-based CV tailoring adjuster.

Rewrites a CV for a specific job offer. The model sees the CV JSON and
the job description and answers with an adjusted CV JSON; the answer is
merged back onto the original so sections the model must not touch
(languages, interests) survive unchanged.

Any failure (no API key, API error, unusable answer, adjusted CV that no
longer validates) keeps the original CV.
"""

from __future__ import annotations

import json
import os
import time
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from openai import OpenAI

from ..logging_utils import LOG
from ..shared import UnitOfWork, format_prompt
from ..validation import validate_cv_data
from .base import CVAdjuster
from .openai_utils import (
    OpenAIRetry,
    RetryConfig,
    completion_text,
    default_model,
    extract_json_object,
    fetch_job_description,
)

SYSTEM_PROMPT = "cv_tailoring_system"

# Sections taken from the model's answer when present
TAILORED_SECTIONS = ("summary", "skills", "experience", "projects", "education", "certifications")


def _param(kwargs: Dict[str, Any], name: str) -> str:
    return kwargs.get(name.replace("-", "_")) or kwargs.get(name) or ""


def merge_tailored_cv(original: Dict[str, Any], tailored: Dict[str, Any]) -> Dict[str, Any]:
    """
    Overlay the tailored sections on the original CV.

    personalInfo keeps everything but the title; the model may only
    retitle the candidate.
    """
    merged = dict(original)
    info = original.get("personalInfo")
    new_title = (tailored.get("personalInfo") or {}).get("title")
    if isinstance(info, dict) and new_title:
        merged["personalInfo"] = {**info, "title": new_title}
    for section in TAILORED_SECTIONS:
        if tailored.get(section):
            merged[section] = tailored[section]
    return merged


class OpenAITailoringAdjuster(CVAdjuster):
    """
    Adjuster that uses OpenAI to tailor a CV to a job description.
    """

    def __init__(
        self,
        model: Optional[str] = None,
        api_key: Optional[str] = None,
        *,
        retry_config: Optional[RetryConfig] = None,
        _sleep: Callable[[float], None] = time.sleep,
    ):
        self._model = model or default_model()
        self._api_key = api_key or os.environ.get("OPENAI_API_KEY")
        self._retry = retry_config or RetryConfig()
        self._sleep = _sleep

    def name(self) -> str:
        return "openai-tailoring"

    def description(self) -> str:
        return "Tailors the CV to a job description using OpenAI"

    def validate_params(self, **kwargs) -> None:
        if not _param(kwargs, "job-url") and not _param(kwargs, "job-description"):
            raise ValueError(
                f"Adjuster '{self.name()}' requires either non-empty 'job-url' or 'job-description'"
            )

    def adjust(self, work: UnitOfWork, **kwargs) -> UnitOfWork:
        self.validate_params(**kwargs)
        cv_data = self._load_input_json(work)
        tailored = self.tailor(
            cv_data,
            job_description=_param(kwargs, "job-description"),
            job_url=_param(kwargs, "job-url"),
            requirements=_param(kwargs, "requirements"),
        )
        return self._write_output_json(work, tailored)

    def tailor(
        self,
        cv_data: Dict[str, Any],
        *,
        job_description: str = "",
        job_url: str = "",
        requirements: str = "",
    ) -> Dict[str, Any]:
        """
        Return the tailored CV, or cv_data itself when tailoring fails.
        """
        if not self._api_key:
            LOG.warning("CV tailoring skipped: OPENAI_API_KEY is not set.")
            return cv_data

        if not job_description and job_url:
            LOG.info("Fetching job description from %s", job_url)
            job_description = fetch_job_description(job_url)
        if not job_description:
            LOG.warning("CV tailoring skipped: no job description available.")
            return cv_data

        system_prompt = format_prompt(
            SYSTEM_PROMPT,
            requirements=requirements or "None.",
        )
        if not system_prompt:
            LOG.warning("CV tailoring skipped: failed to load prompt template")
            return cv_data

        client = OpenAI(api_key=self._api_key)
        retryer = OpenAIRetry(retry=self._retry, sleep=self._sleep)
        user_payload = {"job_description": job_description, "original_json": cv_data}

        try:
            completion = retryer.call(
                lambda: client.chat.completions.create(
                    model=self._model,
                    messages=[
                        {"role": "system", "content": system_prompt},
                        {"role": "user", "content": json.dumps(user_payload, ensure_ascii=False)},
                    ],
                    temperature=0.2,
                ),
                is_write=True,
                op_name="CV tailoring completion",
            )
        except RuntimeError as e:
            LOG.warning("CV tailoring error (%s); using original JSON.", e)
            return cv_data

        content = completion_text(completion)
        if not content:
            LOG.warning("CV tailoring: empty completion; using original JSON.")
            return cv_data

        tailored = extract_json_object(content)
        if tailored is None:
            LOG.warning("CV tailoring: invalid JSON response; using original JSON.")
            return cv_data

        merged = merge_tailored_cv(cv_data, tailored)
        result = validate_cv_data(merged)
        if not result.ok:
            LOG.warning(
                "CV tailoring: adjusted CV failed validation (%s); using original JSON.",
                ", ".join(result.errors),
            )
            return cv_data

        merged["metadata"] = {
            "tailoredFor": job_url or "job description",
            "tailoredDate": datetime.now(timezone.utc).isoformat(),
        }
        LOG.info("The CV was tailored to the job description.")
        return merged
