"""
CLI Phase 1: Gather user requirements.

Parses command-line arguments and returns UserConfig dataclass.
No side effects - just parsing and conversion.
"""

from __future__ import annotations

import argparse
import os
from pathlib import Path
from typing import Dict, List, Optional

from .cli_config import AdjustStage, CoverLetterStage, OutputFormat, ParallelStage, RenderStage, UserConfig
from .layout.model import DEFAULT_PAGE_BREAK_THRESHOLD_MM, RenderOptions

LIST_CHOICES = ("themes", "renderers", "adjusters")


def default_workers() -> int:
    return max(1, min(4, os.cpu_count() or 1))


def _parse_stage_params(tokens: Optional[List[str]]) -> Dict[str, str]:
    """
    Parse stage parameter tokens into a dictionary.

    Format: key=value key2=value2 flag
    Example: ["job-url=https://example.com/job", "dry-run"]
    A bare token becomes a flag with the value "true".
    """
    params: Dict[str, str] = {}
    for token in tokens or []:
        if "=" in token:
            key, value = token.split("=", 1)
            params[key.strip()] = value.strip()
        elif token.strip():
            params[token.strip()] = "true"
    return params


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cvbuilder",
        description="Render CV JSON files to paginated A4 PDF or HTML.",
        epilog="""
Examples:
  Render one CV to PDF:
    cvbuilder --input cv.json --target output/

  Render a folder of CVs to HTML with the modern theme, 4 workers:
    cvbuilder --input cvs/ --target output/ --format html --theme modern --workers 4

  Tailor to a job offer, then render:
    cvbuilder --input cv.json --target output/ \\
      --adjust job-url=https://example.com/jobs/123 requirements="Keep it to 2 pages"

  Render and write a matching cover letter:
    cvbuilder --input cv.json --target output/ --cover-letter job-description="Senior Go developer"

  Show layout suggestions only:
    cvbuilder --input cv.json --target output/ --suggest --adjust dry-run job-description="..."

  List available themes:
    cvbuilder --list themes
""",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument("--input", help="CV JSON file or folder of JSON files")
    parser.add_argument("--target", help="Target output directory")
    parser.add_argument("--output", help="Output file (single input only)")
    parser.add_argument("--format", choices=[f.value for f in OutputFormat], default=OutputFormat.PDF.value,
                        help="Output format (default: pdf)")
    parser.add_argument("--theme", help="Theme name (default: professional)")
    parser.add_argument("--language", help="Label language, overrides the CV's own (en, fr)")
    parser.add_argument("--page-break-threshold", type=float, default=DEFAULT_PAGE_BREAK_THRESHOLD_MM,
                        metavar="MM",
                        help="No item may start closer than this to the bottom of the page; 0 disables")
    parser.add_argument("--no-title-section-connection", action="store_true",
                        help="Allow a page break between a section header and its first item")
    parser.add_argument("--single-column-skills", action="store_true",
                        help="Stack skill categories instead of the two-column grid")
    parser.add_argument("--adjust", nargs="*", metavar="PARAM",
                        help="Adjust stage: tailor the CV before rendering. "
                             "Parameters: [name=<adjuster>] job-url=<url> | job-description=<text> "
                             "[requirements=<text>] [openai-model=<model>] [dry-run]")
    parser.add_argument("--cover-letter", nargs="*", metavar="PARAM",
                        help="Also write <name>.cover_letter.{pdf,html} next to each document. "
                             "Parameters: job-url=<url> | job-description=<text> "
                             "[requirements=<text>] [openai-model=<model>]")
    parser.add_argument("--suggest", action="store_true",
                        help="Report layout suggestions (content volume, estimated pages)")
    parser.add_argument("--workers", type=int, default=None,
                        help=f"Parallel workers for folder input (default: {default_workers()})")
    parser.add_argument("--list", choices=LIST_CHOICES, help="List available components and exit")
    parser.add_argument("--debug", action="store_true", help="Verbose logs + stack traces on failure.")
    parser.add_argument("--verbosity", type=int, choices=[0, 1, 2], default=0,
                        help="0=quiet, 1=normal (status per file), 2=verbose")
    parser.add_argument("--log-file",
                        help="Optional path to a log file. If set, all output is also written there.")
    return parser


def gather_user_requirements(argv: Optional[List[str]] = None) -> UserConfig:
    """
    Phase 1: Parse command-line arguments and return user configuration.

    No side effects - just parsing and conversion to UserConfig.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.list:
        return UserConfig(list=args.list, debug=args.debug, verbosity=args.verbosity, log_file=args.log_file)

    adjust_stage = None
    if args.adjust is not None:
        params = _parse_stage_params(args.adjust)
        adjust_stage = AdjustStage(
            name=params.pop("name", AdjustStage.name),
            openai_model=params.pop("openai-model", None),
            dry_run=params.pop("dry-run", None) is not None,
            params=params,
        )

    cover_letter_stage = None
    if args.cover_letter is not None:
        params = _parse_stage_params(args.cover_letter)
        cover_letter_stage = CoverLetterStage(openai_model=params.pop("openai-model", None), params=params)

    try:
        options = RenderOptions(
            page_break_threshold=args.page_break_threshold,
            title_section_connection=not args.no_title_section_connection,
            two_column_skills=not args.single_column_skills,
            language=args.language,
            theme=args.theme,
        )
    except ValueError as e:
        parser.error(str(e))
    if args.workers is not None and args.workers < 1:
        parser.error("--workers must be at least 1")
    render_stage = RenderStage(
        format=OutputFormat(args.format),
        theme=args.theme,
        options=options,
        output=Path(args.output) if args.output else None,
    )

    return UserConfig(
        input=Path(args.input) if args.input else None,
        target_dir=Path(args.target) if args.target else None,
        adjust=adjust_stage,
        render=render_stage,
        cover_letter=cover_letter_stage,
        parallel=ParallelStage(workers=args.workers or default_workers()),
        suggest=args.suggest,
        debug=args.debug,
        verbosity=args.verbosity,
        log_file=args.log_file,
    )
