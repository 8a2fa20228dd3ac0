from __future__ import annotations

import argparse
import logging
import os
import sys
from collections.abc import Mapping, Sequence
from pathlib import Path

from lcov_prefixer.adapters.filesystem.local_report_store import LocalReportStoreAdapter
from lcov_prefixer.application.use_cases.coverage_report_rewriter import (
    CoverageReportRewriter,
    RewriteSummary,
)
from lcov_prefixer.cli.config import load_config, parse_bool
from lcov_prefixer.domain.actions import ActionPipeline
from lcov_prefixer.domain.errors import MalformedInputError
from lcov_prefixer.logging_utils import configure_logging
from lcov_prefixer.rules import (
    GenerateSonarPropertiesAction,
    NormalizeCoveragePathsAction,
    ValidateCoveragePrefixAction,
    classify_from_env,
)


EXIT_OK = 0
EXIT_MALFORMED_INPUT = 1
EXIT_PREFIX_MISMATCH = 3

DEFAULT_ACTIONS = "normalize-paths,validate-prefix"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lcov-prefixer",
        description="Prefix source paths in an LCOV coverage report so SonarQube can resolve them.",
    )

    parser.add_argument("--input", required=False, help="LCOV report to rewrite. Falls back to COVERAGE_REPORT.")
    parser.add_argument(
        "--output",
        required=False,
        help="Where to write the rewritten report. Falls back to COVERAGE_OUTPUT.",
    )
    parser.add_argument(
        "--in-place",
        action="store_true",
        help="Rewrite the input report atomically, keeping a .bak copy until it validates.",
    )
    parser.add_argument(
        "--prefix",
        required=False,
        help="Path prefix to prepend, e.g. src. Falls back to COVERAGE_PATH_PREFIX.",
    )
    parser.add_argument(
        "--separator",
        required=False,
        help="Separator between prefix and path (default /). Falls back to COVERAGE_PATH_SEPARATOR.",
    )
    parser.add_argument("--keep-backup", action="store_true", help="Keep the .bak copy of an in-place rewrite.")
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Exit non-zero when a source path still lacks the prefix after rewriting.",
    )
    parser.add_argument("--dry-run", action="store_true")

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    try:
        configure_logging(os.environ.get("LOG_LEVEL", "INFO"), os.environ.get("LOG_FORMAT", "json"))
    except ValueError as error:
        parser.error(str(error))
    logger = logging.getLogger(__name__)

    args = parser.parse_args(argv)
    try:
        config = load_config(args=args, env=os.environ)
    except ValueError as error:
        parser.error(str(error))

    logger.info(
        "cli configuration resolved",
        extra={
            "event": "cli.config.resolved",
            "report_path": str(config.report_path),
            "output_path": str(config.output_path) if config.output_path else None,
            "prefix": config.prefix,
            "separator": config.separator,
            "dry_run": config.dry_run,
            "keep_backup": config.keep_backup,
            "strict": config.strict,
        },
    )

    try:
        rewriter = CoverageReportRewriter(
            store=LocalReportStoreAdapter(),
            action_pipeline=_build_action_pipeline(os.environ, strict=config.strict),
        )
    except (RuntimeError, ValueError) as error:
        logger.exception("cli setup failed", extra={"event": "cli.setup.failed"})
        parser.error(str(error))

    try:
        summary = rewriter.execute(
            report_path=config.report_path,
            prefix=config.prefix,
            output_path=config.output_path,
            separator=config.separator,
            dry_run=config.dry_run,
            keep_backup=config.keep_backup,
        )
    except MalformedInputError as error:
        logger.error(
            "coverage report is malformed",
            extra={
                "event": "cli.report.malformed",
                "report_path": str(config.report_path),
                "line_number": error.line_number,
            },
        )
        print(f"error: {error}", file=sys.stderr)
        return EXIT_MALFORMED_INPUT

    _print_summary(summary)
    if not summary.success:
        return EXIT_PREFIX_MISMATCH
    return EXIT_OK


def _build_action_pipeline(env: Mapping[str, str], *, strict: bool = False) -> ActionPipeline:
    raw_actions = (env.get("COVERAGE_ACTIONS") or DEFAULT_ACTIONS).strip()
    action_names = [item.strip().lower() for item in raw_actions.split(",") if item.strip()]
    actions = []

    for action_name in action_names:
        if action_name == "normalize-paths":
            actions.append(NormalizeCoveragePathsAction())
            continue

        if action_name == "validate-prefix":
            actions.append(ValidateCoveragePrefixAction(strict=strict))
            continue

        if action_name == "write-sonar-properties":
            feature_prefix = (env.get("SONAR_FEATURE_BRANCH_PREFIX") or "feature/").strip()
            branch = classify_from_env(env, feature_prefix=feature_prefix)
            target_path = Path(env.get("SONAR_PROPERTIES_FILE") or "sonar-project.properties").expanduser()
            actions.append(
                GenerateSonarPropertiesAction(
                    branch,
                    target_path=target_path,
                    overwrite=parse_bool(env.get("SONAR_PROPERTIES_OVERWRITE", "false"), "SONAR_PROPERTIES_OVERWRITE"),
                    reference_branch=(env.get("SONAR_REFERENCE_BRANCH") or "main").strip(),
                    project_key=(env.get("SONAR_PROJECT_KEY") or "").strip() or None,
                    project_name=(env.get("SONAR_PROJECT_NAME") or "").strip() or None,
                )
            )
            continue

        raise RuntimeError(
            "Unknown action in COVERAGE_ACTIONS: "
            f"'{action_name}'. Allowed values: normalize-paths, validate-prefix, write-sonar-properties"
        )

    return ActionPipeline(actions)


def _print_summary(summary: RewriteSummary) -> None:
    mode = "DRY-RUN" if summary.dry_run else "RUN"
    print(f"[{mode}] Report: {summary.report_path}")
    print(f"Output: {summary.output_path}{' (in place)' if summary.in_place else ''}")
    print(f"Prefix: {summary.prefix}")
    print(f"Records: {summary.records}")
    print(f"Source paths: {summary.total_paths}")
    print(f"Rewritten paths: {summary.rewritten_paths}")
    print(f"Already prefixed: {summary.already_prefixed_paths}")
    if not summary.structure_preserved:
        print("warning: record structure differs between input and output")
    if summary.validation is not None:
        print(f"Prefixed after rewrite: {summary.validation.prefixed_paths}/{summary.validation.total_paths}")
    print(f"Written: {'yes' if summary.written else 'no'}")
    if summary.backup_path:
        print(f"Backup kept: {summary.backup_path}")

    for result in summary.action_results:
        status = "ok" if result.success else "failed"
        print(f"- {result.action_name} [{status}]: {result.message}")
    if summary.error:
        print(f"error: {summary.error}")
