"""
Logging helpers for cvbuilder.

Defines the package logger and simple utilities for configuring
console and optional file logging.
"""

from __future__ import annotations

import logging
from typing import List, Optional

LOG = logging.getLogger("cvbuilder")

# Verbosity levels
VERBOSITY_QUIET = 0    # Minimal output (default)
VERBOSITY_NORMAL = 1   # Standard output with status icons
VERBOSITY_VERBOSE = 2  # Detailed debug output

_NOISY_LOGGERS = ("httpx", "httpcore", "openai", "urllib3", "asyncio")


def setup_logging(debug: bool, log_file: Optional[str] = None, verbosity: int = VERBOSITY_QUIET) -> None:
    """
    Setup logging with verbosity control.

    Args:
        debug: Debug flag (overrides verbosity to VERBOSITY_VERBOSE)
        log_file: Optional log file path
        verbosity: Verbosity level (0=quiet, 1=normal, 2=verbose)
    """
    if debug:
        verbosity = VERBOSITY_VERBOSE

    if verbosity >= VERBOSITY_VERBOSE:
        level = logging.DEBUG
    elif verbosity >= VERBOSITY_NORMAL:
        level = logging.INFO
    else:
        level = logging.WARNING  # Quiet mode: only warnings and errors

    if verbosity >= VERBOSITY_NORMAL:
        console_format = logging.Formatter("%(levelname)s: %(message)s")
    else:
        console_format = logging.Formatter("%(message)s")

    # Handlers may already be configured (e.g. by pytest); update them in place
    if logging.root.handlers:
        for handler in logging.root.handlers:
            if isinstance(handler, logging.StreamHandler) and not isinstance(handler, logging.FileHandler):
                handler.setLevel(level)
                handler.setFormatter(console_format)
        logging.root.setLevel(level)
    else:
        console = logging.StreamHandler()
        console.setLevel(level)
        console.setFormatter(console_format)
        logging.basicConfig(level=level, handlers=[console], force=True)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)  # always full detail in file
        file_handler.setFormatter(
            logging.Formatter(
                "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        logging.root.addHandler(file_handler)
        # The file always gets DEBUG records, even in quiet console mode
        logging.root.setLevel(logging.DEBUG)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def fmt_issues(errors: List[str], warnings: List[str]) -> str:
    """
    Compact error/warning string for the one-line-per-file log.
    """
    parts: List[str] = []
    if errors:
        parts.append("errors: " + ", ".join(errors))
    if warnings:
        parts.append("warnings: " + ", ".join(warnings))
    return " | ".join(parts) if parts else "-"
