"""
CLI Phase 3: Execute pipeline.

Runs adjust -> verify -> render for every input file with explicit
paths, and writes a cover letter next to each document when asked.
Each step records its errors and warnings on the UnitOfWork; a failed
adjustment falls back to the original JSON, a failed render fails the
file.
"""

from __future__ import annotations

import json
import traceback
from dataclasses import replace
from pathlib import Path
from typing import List

from .adjusters import get_adjuster, list_adjusters
from .adjusters.openai_utils import fetch_job_description
from .assembly import DocumentAssembler
from .cli_config import UserConfig
from .cli_prepare import collect_inputs
from .cover_letter import CoverLetterWriter
from .logging_utils import LOG
from .renderers import RenderError, list_renderers
from .shared import StepName, UnitOfWork, emit_work_status
from .themes import list_themes
from .validation import get_layout_suggestions, validate_cv_data

_LISTINGS = {
    "themes": list_themes,
    "renderers": list_renderers,
    "adjusters": list_adjusters,
}


def print_listing(kind: str) -> int:
    entries = _LISTINGS[kind]()
    print(f"Available {kind}:")
    for entry in entries:
        print(f"  {entry['name']:<20} {entry['description']}")
    return 0


def _relative_parent(input_file: Path, source_root: Path) -> Path:
    try:
        return input_file.parent.resolve().relative_to(source_root)
    except ValueError:
        return Path(".")


def execute_adjust(work: UnitOfWork, rel_parent: Path) -> UnitOfWork:
    config = work.config
    stage = config.adjust
    work.ensure_step_status(StepName.Adjust)
    output = config.adjusted_json_dir / rel_parent / f"{work.input.stem}.adjusted.json"

    kwargs = {}
    if stage.openai_model:
        kwargs["model"] = stage.openai_model
    adjuster = get_adjuster(stage.name, **kwargs)
    if adjuster is None:
        work.add_error(StepName.Adjust, f"unknown adjuster: {stage.name}")
        return work

    try:
        adjusted = adjuster.adjust(replace(work, output=output), **stage.params)
    except Exception as e:
        # Keep rendering from the original JSON
        work.add_warning(StepName.Adjust, f"adjust failed ({type(e).__name__}): {e}")
        if config.debug:
            LOG.error(traceback.format_exc())
        return work

    LOG.debug("Adjusted JSON written to %s", adjusted.output)
    return replace(work, input=adjusted.output, output=adjusted.output)


def execute_verify(work: UnitOfWork, cv_data: dict) -> UnitOfWork:
    work.record(StepName.Verify, validate_cv_data(cv_data))
    if work.config.suggest:
        options = work.config.render.options if work.config.render else None
        for suggestion in get_layout_suggestions(cv_data, options):
            work.add_warning(StepName.Verify, f"{suggestion.message} ({suggestion.recommendation})")
    return work


def execute_render(work: UnitOfWork, cv_data: dict, rel_parent: Path) -> UnitOfWork:
    stage = work.config.render
    work.ensure_step_status(StepName.Render)
    try:
        assembler = DocumentAssembler(stage.format.renderer_name)
        output = stage.output or (
            work.config.documents_dir / rel_parent / f"{work.initial_input.stem}{assembler.renderer.extension}"
        )
        data = assembler.produce(cv_data, stage.options, stage.theme)
    except (RenderError, ValueError) as e:
        work.add_error(StepName.Render, f"render failed: {e}")
        if work.config.debug:
            LOG.error(traceback.format_exc())
        return work

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_bytes(data)
    return replace(work, output=output)


def execute_cover_letter(work: UnitOfWork, cv_data: dict) -> UnitOfWork:
    """
    Write <name>.cover_letter.<ext> next to the rendered document.

    A letter that cannot be written is a warning on the render step; the
    CV document itself is already on disk.
    """
    stage = work.config.cover_letter
    params = stage.params
    job_offer = (params.get("job-description") or "").strip()
    if not job_offer and params.get("job-url"):
        job_offer = fetch_job_description(params["job-url"])
    if not job_offer:
        work.add_warning(StepName.Render, "cover letter skipped: no job description available")
        return work

    try:
        letter = CoverLetterWriter(model=stage.openai_model).generate(
            cv_data, job_offer, params.get("requirements") or ""
        )
        assembler = DocumentAssembler(work.config.render.format.renderer_name)
        data = assembler.render_html(letter.to_html())
    except (RenderError, RuntimeError, ValueError) as e:
        work.add_warning(StepName.Render, f"cover letter failed: {e}")
        if work.config.debug:
            LOG.error(traceback.format_exc())
        return work

    output = work.output.with_name(f"{work.initial_input.stem}.cover_letter{assembler.renderer.extension}")
    output.write_bytes(data)
    LOG.debug("Cover letter written to %s", output)
    return work


def execute_single(config: UserConfig, input_file: Path, source_root: Path) -> UnitOfWork:
    """Process one CV JSON file through every configured step."""
    rel_parent = _relative_parent(input_file, source_root)
    work = UnitOfWork(config=config, input=input_file, output=input_file)

    if config.has_adjust:
        work = execute_adjust(work, rel_parent)

    try:
        with work.input.open("r", encoding="utf-8") as f:
            cv_data = json.load(f)
    except (OSError, ValueError) as e:
        work.add_error(StepName.Render, f"unreadable JSON ({type(e).__name__}): {e}")
        return work

    work = execute_verify(work, cv_data)

    if config.has_render:
        work = execute_render(work, cv_data, rel_parent)
        if config.has_cover_letter and work.has_no_errors(StepName.Render):
            work = execute_cover_letter(work, cv_data)

    return work


def summarize(works: List[UnitOfWork]) -> int:
    """Log the per-run summary; exit code 1 when any file failed to render."""
    failed = [w for w in works if not w.has_no_errors(StepName.Render)]
    failed_ids = {id(w) for w in failed}
    partial = [w for w in works if id(w) not in failed_ids and not all(s.ok for s in w.step_statuses.values())]
    LOG.info("=" * 60)
    LOG.info(
        "📊 %d file(s): %d fully successful, %d with issues, %d failed",
        len(works),
        len(works) - len(partial) - len(failed),
        len(partial),
        len(failed),
    )
    for work in sorted(failed, key=lambda w: w.initial_input.name):
        LOG.error("Failed: %s", work.initial_input)
    return 1 if failed else 0


def execute_pipeline(config: UserConfig) -> int:
    """
    Phase 3: Execute the pipeline based on user configuration.

    Returns exit code (0 = success, 1 = failure).
    """
    if config.list:
        return print_listing(config.list)

    inputs = collect_inputs(config.input)
    if not inputs:
        LOG.error("No matching input files found.")
        return 1

    source_root = (config.input if config.input.is_dir() else config.input.parent).resolve()

    if config.parallel and len(inputs) > 1 and config.parallel.workers > 1:
        from .cli_parallel import execute_parallel_pipeline

        return execute_parallel_pipeline(config, inputs, source_root)

    works = []
    for input_file in inputs:
        work = execute_single(config, input_file, source_root)
        LOG.info("%s", emit_work_status(work))
        works.append(work)
    return summarize(works)
