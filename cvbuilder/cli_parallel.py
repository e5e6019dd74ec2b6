"""
CLI Parallel Processing Module.

Renders a folder of CV files with a bounded pool of worker threads.
Each worker runs the single-file pipeline, browser included, so no
render state is shared between files.
"""

from __future__ import annotations

import traceback
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import List

from .cli_config import UserConfig
from .cli_execute import execute_single, summarize
from .logging_utils import LOG
from .shared import StepName, UnitOfWork, emit_work_status


def execute_parallel_pipeline(config: UserConfig, inputs: List[Path], source_root: Path) -> int:
    """
    Process all inputs with config.parallel.workers threads.

    Results are logged in completion order; the summary lists failures
    sorted by file name.

    Returns:
        Exit code (0 = all success, 1 = one or more failed)
    """
    if not config.parallel:
        raise ValueError("execute_parallel_pipeline called without parallel configuration")

    n_workers = config.parallel.workers
    LOG.info("Processing %d files with %d parallel workers", len(inputs), n_workers)

    works: List[UnitOfWork] = []
    with ThreadPoolExecutor(max_workers=n_workers) as executor:
        future_to_file = {
            executor.submit(execute_single, config, input_file, source_root): input_file
            for input_file in inputs
        }

        for future in as_completed(future_to_file):
            input_file = future_to_file[future]
            try:
                work = future.result()
            except Exception as e:
                LOG.error("✗ %s | Unexpected error: %s", input_file.name, e)
                if config.debug:
                    LOG.error(traceback.format_exc())
                work = UnitOfWork(config=config, input=input_file, output=input_file)
                work.add_error(StepName.Render, f"unexpected error: {e}")
            LOG.info("%s", emit_work_status(work))
            works.append(work)

    return summarize(works)
