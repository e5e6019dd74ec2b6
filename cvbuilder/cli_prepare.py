"""
CLI Phase 2: Prepare execution environment.

Validates inputs and prepares directories for execution.
No actual execution - just setup.
"""

from __future__ import annotations

from pathlib import Path
from typing import List

from .adjusters import get_adjuster
from .cli_config import UserConfig
from .i18n import SUPPORTED_LANGUAGES, is_supported_language
from .logging_utils import LOG
from .themes import get_theme


def collect_inputs(src: Path) -> List[Path]:
    """Collect CV JSON files: the file itself, or every *.json below a folder."""
    if src.is_file():
        return [src]

    if not src.is_dir():
        raise FileNotFoundError(f"Path not found or not a file/folder: {src}")

    return sorted(p for p in src.rglob("*.json") if p.is_file())


def prepare_execution_environment(config: UserConfig) -> UserConfig:
    """
    Phase 2: Validate inputs and prepare execution environment.

    - Validates input path, theme, language and adjuster name
    - Creates target directory
    - No execution yet

    Returns the same config (for chaining).
    """
    if config.list:
        return config

    if config.input is None:
        raise ValueError("--input is required")
    if config.target_dir is None:
        raise ValueError("--target is required")
    if not config.input.exists():
        LOG.error("Input not found: %s", config.input)
        raise FileNotFoundError(f"Input not found: {config.input}")

    if config.render:
        if config.render.theme and get_theme(config.render.theme) is None:
            LOG.error("Use --list themes to see available themes")
            raise ValueError(f"Unknown theme: {config.render.theme}")
        language = config.render.options.language
        if language and not is_supported_language(language):
            raise ValueError(
                f"Unsupported language: {language} (supported: {', '.join(SUPPORTED_LANGUAGES)})"
            )
        if config.render.output and config.input.is_dir():
            raise ValueError("--output can only be used with a single input file")

    if config.adjust:
        adjuster = get_adjuster(config.adjust.name)
        if adjuster is None:
            LOG.error("Use --list adjusters to see available adjusters")
            raise ValueError(f"Unknown adjuster: {config.adjust.name}")
        adjuster.validate_params(**config.adjust.params)

    if config.cover_letter:
        params = config.cover_letter.params
        if not (params.get("job-url") or "").strip() and not (params.get("job-description") or "").strip():
            raise ValueError("--cover-letter requires either non-empty 'job-url' or 'job-description'")

    config.target_dir.mkdir(parents=True, exist_ok=True)
    if not config.target_dir.is_dir():
        LOG.error("Target is not a directory: %s", config.target_dir)
        raise ValueError(f"Target is not a directory: {config.target_dir}")

    return config
