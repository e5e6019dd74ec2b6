"""
Shared models and text utilities.

Defines common data structures (units of work, step statuses, verification
results) and text helpers used across normalization, adjustment and rendering.
"""

from __future__ import annotations

import re

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .cli_config import UserConfig

from .logging_utils import LOG, fmt_issues

# ------------------------- Models -------------------------
@dataclass(frozen=True)
class VerificationResult:
    ok: bool
    errors: List[str]
    warnings: List[str]


class StepName(str, Enum):
    Adjust = "Adjust"
    Verify = "Verify"
    Render = "Render"


@dataclass
class StepStatus:
    step: StepName
    warnings: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.warnings and not self.errors


@dataclass
class UnitOfWork:
    """
    Container for one CV moving through the adjust/verify/render steps.

    initial_input preserves the original JSON path before adjustments.
    input/output represent the current step's paths.
    """
    config: "UserConfig"
    input: Path
    output: Path
    initial_input: Optional[Path] = None
    step_statuses: Dict[StepName, StepStatus] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.initial_input is None:
            self.initial_input = self.input

    def _get_step_status(self, step: StepName) -> StepStatus:
        status = self.step_statuses.get(step)
        if status is None:
            status = StepStatus(step=step)
            self.step_statuses[step] = status
        return status

    def ensure_step_status(self, step: StepName) -> StepStatus:
        return self._get_step_status(step)

    def add_warning(self, step: StepName, message: str) -> None:
        self._get_step_status(step).warnings.append(message)

    def add_error(self, step: StepName, message: str) -> None:
        self._get_step_status(step).errors.append(message)

    def record(self, step: StepName, result: VerificationResult) -> None:
        status = self._get_step_status(step)
        status.errors.extend(result.errors)
        status.warnings.extend(result.warnings)

    def has_no_errors(self, step: Optional[StepName] = None) -> bool:
        if step is None:
            return all(not status.errors for status in self.step_statuses.values())
        status = self.step_statuses.get(step)
        return not status.errors if status else True


def get_status_icons(work: UnitOfWork) -> Dict[StepName, str]:
    """Generate status icons for pipeline steps based on UnitOfWork statuses."""
    def icon_for(step_name: StepName) -> str:
        status = work.step_statuses.get(step_name)
        if status is None:
            return "➖"
        if status.errors:
            return "❌"
        if status.warnings:
            return "⚠️ "
        return "✅"

    return {step_name: icon_for(step_name) for step_name in StepName}


def select_issue_step(work: UnitOfWork) -> StepName:
    for candidate in (StepName.Render, StepName.Verify, StepName.Adjust):
        status = work.step_statuses.get(candidate)
        if status and (status.errors or status.warnings):
            return candidate
    return StepName.Render


def emit_work_status(work: UnitOfWork, step: Optional[StepName] = None) -> str:
    icons = get_status_icons(work)
    issue_step = step or select_issue_step(work)
    status = work.step_statuses.get(issue_step)
    issues = fmt_issues(status.errors, status.warnings) if status else "-"
    input_path = work.initial_input or work.input
    return (
        f"{icons[StepName.Adjust]}"
        f"{icons[StepName.Verify]}"
        f"{icons[StepName.Render]} "
        f"{input_path.name} | "
        f"{issues}"
    )

# ------------------------- Text helpers -------------------------

_WS_RE = re.compile(r"\s+")


def normalize_text_for_processing(s: str) -> str:
    """
    Normalize what we consider "text":
    - convert NBSP to normal space
    - replace soft hyphen with real hyphen
    - normalize newlines
    """
    s = s.replace("\u00A0", " ")
    s = s.replace("\u00AD", "-")  # preserve "high-quality"
    s = s.replace("\r\n", "\n").replace("\r", "\n")
    return s


def clean_text(text: str) -> str:
    """Collapse whitespace for single-line display."""
    text = normalize_text_for_processing(text)
    text = _WS_RE.sub(" ", text)
    return text.strip()

# ---------------------- Prompt Loading ----------------------

_PROMPTS_DIR = Path(__file__).parent / "adjusters" / "prompts"


def load_prompt(prompt_name: str) -> Optional[str]:
    """
    Load a prompt template from cvbuilder/adjusters/prompts/{prompt_name}.md.

    Returns:
        The prompt text, or None if the file doesn't exist or can't be read
    """
    prompt_path = _PROMPTS_DIR / f"{prompt_name}.md"
    try:
        return prompt_path.read_text(encoding="utf-8")
    except OSError as e:
        LOG.error("Failed to read prompt %s: %s", prompt_path, e)
        return None


def format_prompt(prompt_name: str, **kwargs) -> Optional[str]:
    """
    Load a prompt template and format it with the provided variables.

    Example:
        >>> prompt = format_prompt("cv_tailoring_system", requirements="")
        >>> if prompt:
        ...     print(prompt[:50])
    """
    template = load_prompt(prompt_name)
    if template is None:
        return None

    try:
        return template.format(**kwargs)
    except (KeyError, IndexError, ValueError) as e:
        LOG.error("Failed to format prompt %s: %s", prompt_name, e)
        return None
