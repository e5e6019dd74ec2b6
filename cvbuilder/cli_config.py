"""
CLI configuration data structures.

Defines stage configuration dataclasses and UserConfig used across
the three-phase CLI architecture.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, Optional

from .layout.model import RenderOptions


class OutputFormat(str, Enum):
    PDF = "pdf"
    HTML = "html"

    @property
    def renderer_name(self) -> str:
        return "playwright-pdf" if self is OutputFormat.PDF else "html"


@dataclass
class AdjustStage:
    """Configuration for the adjust stage."""
    name: str = "openai-tailoring"
    params: Dict[str, str] = field(default_factory=dict)  # Adjuster parameters (job-url=..., ...)
    openai_model: Optional[str] = None
    dry_run: bool = False  # If True, only adjust without rendering


@dataclass
class CoverLetterStage:
    """Configuration for the cover letter written next to each rendered CV."""
    params: Dict[str, str] = field(default_factory=dict)  # job-url=... | job-description=..., requirements=...
    openai_model: Optional[str] = None


@dataclass
class RenderStage:
    """Configuration for the render stage."""
    format: OutputFormat = OutputFormat.PDF
    theme: Optional[str] = None
    options: RenderOptions = field(default_factory=RenderOptions)
    output: Optional[Path] = None  # Explicit output file (single input only)


@dataclass
class ParallelStage:
    """Configuration for directory mode."""
    workers: int


@dataclass
class UserConfig:
    """Configuration gathered from user input."""

    input: Optional[Path] = None
    target_dir: Optional[Path] = None

    # Stage configurations (None if stage not requested)
    adjust: Optional[AdjustStage] = None
    render: Optional[RenderStage] = None
    cover_letter: Optional[CoverLetterStage] = None
    parallel: Optional[ParallelStage] = None

    suggest: bool = False
    list: Optional[str] = None  # themes | renderers | adjusters

    # Execution settings
    debug: bool = False
    verbosity: int = 0
    log_file: Optional[str] = None

    @property
    def has_adjust(self) -> bool:
        return self.adjust is not None

    @property
    def has_render(self) -> bool:
        return self.render is not None and not (self.adjust and self.adjust.dry_run)

    @property
    def has_cover_letter(self) -> bool:
        return self.cover_letter is not None and self.has_render

    @property
    def documents_dir(self) -> Path:
        return self.target_dir / "documents"

    @property
    def adjusted_json_dir(self) -> Path:
        return self.target_dir / "adjusted_data"
