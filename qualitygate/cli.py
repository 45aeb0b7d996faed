"""Command-line interface for the quality gate."""

import argparse
import json
import logging
import os
import sys
import time
from pathlib import Path
from typing import Dict, List, Optional

from .config import build_config
from .errors import QualityGateError
from .gates import StageStatus, Verdict, evaluate, render_markdown, render_text
from .stages import (
    check_coverage,
    load_stage_file,
    parse_needs_json,
    read_coverage_percent,
    stages_from_args,
)
from .utils import append_step_summary, write_step_outputs, write_text

logger = logging.getLogger(__name__)

RESULT_FILE = "gate-result.json"
REPORT_FILE = "gate-report.md"

EXIT_OK = 0
EXIT_FAIL = 1
EXIT_INPUT_ERROR = 2


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="qualitygate",
        description="Quality gate – combine upstream stage results into one pass/fail/warn verdict",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging on stderr")
    sub = parser.add_subparsers(dest="command", required=True)

    ev = sub.add_parser("evaluate", help="Evaluate stage results")
    ev.add_argument(
        "--stage",
        action="append",
        default=[],
        metavar="NAME=STATUS[:required|:optional]",
        help="Stage result (repeatable, order is kept)",
    )
    ev.add_argument("--needs-json", help="JSON object of upstream job results")
    ev.add_argument("--needs-file", help="File holding a JSON object of upstream job results")
    ev.add_argument("--config", help="YAML gate configuration file")
    ev.add_argument("--required", help="Comma-separated required stage names")
    ev.add_argument("--allow-skip", help="Comma-separated required stages that may be skipped")
    ev.add_argument(
        "--skipped-is-pass",
        action="store_true",
        default=None,
        help="Count every skipped required stage as a pass",
    )
    ev.add_argument(
        "--no-skipped-is-pass",
        dest="skipped_is_pass",
        action="store_false",
        default=None,
        help="Treat skipped required stages as warnings even if configured otherwise",
    )
    ev.add_argument("--title", help="Report title")
    ev.add_argument(
        "--out",
        default=os.environ.get("OUT_DIR", "quality-gate"),
        help="Output directory (default: $OUT_DIR or ./quality-gate)",
    )
    ev.add_argument(
        "--format",
        choices=("text", "markdown", "json"),
        default="text",
        help="Report format printed to stdout (default: text)",
    )
    ev.add_argument("--step-summary", action="store_true", help="Append the Markdown report to the step summary")
    ev.add_argument("--github-output", action="store_true", help="Write verdict/blocking step outputs")
    ev.add_argument("--fail-on-warn", action="store_true", help="Exit non-zero on a warn verdict")

    cov = sub.add_parser("coverage", help="Reduce a coverage percentage to a stage status")
    src = cov.add_mutually_exclusive_group(required=True)
    src.add_argument("--percent", help="Coverage percentage")
    src.add_argument("--report", help="Cobertura XML or coverage.py JSON report")
    cov.add_argument("--threshold", type=float, required=True, help="Minimum coverage percentage")
    return parser


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _write_error(out_dir: Path, message: str) -> None:
    write_text(out_dir / RESULT_FILE, json.dumps({"error": message}, indent=2))


def _run_evaluate(args: argparse.Namespace) -> int:
    out_dir = Path(args.out)
    out_dir.mkdir(parents=True, exist_ok=True)

    try:
        config = build_config(
            config_path=Path(args.config) if args.config else None,
            overrides={
                "required": args.required,
                "allow_skip": args.allow_skip,
                "skipped_is_pass": args.skipped_is_pass,
                "title": args.title,
            },
        )
        stages = []
        if args.needs_file:
            stages.extend(load_stage_file(Path(args.needs_file), config.required))
        if args.needs_json:
            stages.extend(parse_needs_json(args.needs_json, config.required))
        stages.extend(stages_from_args(args.stage, config.required))
    except QualityGateError as e:
        logger.error("%s", e)
        _write_error(out_dir, str(e))
        return EXIT_INPUT_ERROR

    verdict = evaluate(stages, config)
    markdown = render_markdown(verdict, title=config.title)

    result: Dict[str, object] = {
        "title": config.title,
        "timestamp": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
        "config": {
            "required": list(config.required),
            "allowSkip": list(config.allow_skip),
            "skippedIsPass": config.skipped_is_pass,
        },
    }
    result.update(verdict.to_dict())
    write_text(out_dir / RESULT_FILE, json.dumps(result, indent=2))
    write_text(out_dir / REPORT_FILE, markdown)

    if args.format == "markdown":
        sys.stdout.write(markdown)
    elif args.format == "json":
        sys.stdout.write(json.dumps(verdict.to_dict(), indent=2) + "\n")
    else:
        sys.stdout.write(render_text(verdict))

    if args.step_summary and not append_step_summary(markdown):
        logger.warning("--step-summary given but no step summary file is configured")
    if args.github_output:
        outputs = {"verdict": verdict.overall.value, "blocking": ",".join(verdict.blocking_ordered)}
        try:
            if not write_step_outputs(outputs):
                logger.warning("--github-output given but no step output file is configured")
        except ValueError as e:
            logger.warning("Step outputs not written: %s", e)

    if verdict.overall is Verdict.FAIL:
        return EXIT_FAIL
    if verdict.overall is Verdict.WARN and args.fail_on_warn:
        return EXIT_FAIL
    return EXIT_OK


def _run_coverage(args: argparse.Namespace) -> int:
    if args.report:
        percent: object = read_coverage_percent(Path(args.report))
        if percent is None:
            logger.error("No total coverage found in %s", args.report)
    else:
        percent = args.percent

    status = check_coverage(percent, args.threshold)
    logger.info("Coverage %s against threshold %.2f: %s", percent, args.threshold, status.value)
    sys.stdout.write(status.value + "\n")
    return EXIT_OK if status is StageStatus.SUCCESS else EXIT_FAIL


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the quality gate CLI."""
    parser = _build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    if args.command == "coverage":
        return _run_coverage(args)
    return _run_evaluate(args)
