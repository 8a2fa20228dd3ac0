from __future__ import annotations
"""Application use case for rewriting one coverage report on disk."""

from dataclasses import dataclass
import logging
from pathlib import Path

from lcov_prefixer.domain.actions import ActionPipeline
from lcov_prefixer.domain.entities import ActionResult, CoverageReport, PrefixValidation, ReportContext
from lcov_prefixer.domain.lcov import parse_report
from lcov_prefixer.domain.normalizer import clean_prefix, validate_source_prefixes
from lcov_prefixer.domain.ports import ReportStorePort


LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class RewriteSummary:
    """Outcome of one `CoverageReportRewriter.execute()` call."""

    report_path: Path
    output_path: Path
    prefix: str
    dry_run: bool
    in_place: bool
    records: int
    total_paths: int
    rewritten_paths: int
    already_prefixed_paths: int
    structure_preserved: bool
    validation: PrefixValidation | None
    action_results: tuple[ActionResult, ...]
    written: bool
    backup_path: Path | None
    success: bool
    error: str | None


@dataclass(slots=True)
class CoverageReportRewriter:
    """Core orchestration use case.

    Responsibilities:
    - read the report through `ReportStorePort`
    - run the `ActionPipeline` over a `ReportContext`
    - write the result atomically, backing up an in-place target first
    - drop the backup once the written report validates
    - support dry-run planning with no side effects
    """

    store: ReportStorePort
    action_pipeline: ActionPipeline

    def execute(
        self,
        report_path: Path,
        prefix: str,
        output_path: Path | None = None,
        separator: str = "/",
        dry_run: bool = False,
        keep_backup: bool = False,
    ) -> RewriteSummary:
        """Rewrite one coverage report.

        Args:
            report_path: LCOV report to read.
            prefix: Path prefix expected by the analysis tool.
            output_path: Destination; `None` rewrites `report_path` in place.
            separator: Separator placed between prefix and path.
            dry_run: When `True`, run the actions but write nothing.
            keep_backup: Keep the in-place backup even when validation passes.

        Raises:
            MalformedInputError: the report has an empty `SF:` path. Nothing
                is written.
            OSError: reading or writing failed.
        """
        prefix = clean_prefix(prefix, separator)
        target_path = output_path or report_path
        in_place = target_path == report_path

        text = self.store.read_text(report_path)
        LOGGER.info(
            "coverage report read",
            extra={
                "event": "rewriter.report.read",
                "report_path": str(report_path),
                "size": len(text),
            },
        )

        context = ReportContext(
            report_path=report_path,
            output_path=target_path,
            prefix=prefix,
            separator=separator,
            original_text=text,
            text=text,
            dry_run=dry_run,
        )
        action_results = tuple(self.action_pipeline.run(context, fail_fast=True))

        failed_actions = [result.action_name for result in action_results if not result.success]
        error = f"One or more actions failed: {', '.join(failed_actions)}" if failed_actions else None
        normalization = context.normalization
        total_paths = normalization.total_paths if normalization else 0
        rewritten_paths = normalization.rewritten_paths if normalization else 0
        already_prefixed_paths = normalization.already_prefixed_paths if normalization else 0

        input_report = parse_report(context.original_text)
        output_report = parse_report(context.text)
        structure_preserved = _same_structure(input_report, output_report)
        if not structure_preserved:
            LOGGER.warning(
                "coverage report structure changed by rewrite",
                extra={
                    "event": "rewriter.report.structure_changed",
                    "report_path": str(report_path),
                    "input_records": len(input_report.records),
                    "output_records": len(output_report.records),
                },
            )

        written = False
        backup_path: Path | None = None
        validation = context.validation

        if dry_run:
            LOGGER.info(
                "coverage report dry-run planned",
                extra={
                    "event": "rewriter.report.dry_run",
                    "output_path": str(target_path),
                    "rewritten_paths": rewritten_paths,
                },
            )
        elif in_place and context.text == context.original_text:
            LOGGER.info(
                "coverage report unchanged, nothing to write",
                extra={"event": "rewriter.report.unchanged", "report_path": str(report_path)},
            )
        else:
            if in_place:
                backup_path = self.store.backup(report_path)
                LOGGER.info(
                    "coverage report backed up",
                    extra={"event": "rewriter.report.backup", "backup_path": str(backup_path)},
                )

            self.store.write_text_atomic(target_path, context.text)
            written = True

            validation = validate_source_prefixes(self.store.read_text(target_path), prefix, separator)
            if backup_path is not None and validation.ok and not keep_backup:
                self.store.discard(backup_path)
                backup_path = None

            LOGGER.info(
                "coverage report written",
                extra={
                    "event": "rewriter.report.written",
                    "output_path": str(target_path),
                    "rewritten_paths": rewritten_paths,
                    "validated": validation.ok,
                    "backup_path": str(backup_path) if backup_path else None,
                },
            )

        summary = RewriteSummary(
            report_path=report_path,
            output_path=target_path,
            prefix=prefix,
            dry_run=dry_run,
            in_place=in_place,
            records=len(output_report.records),
            total_paths=total_paths,
            rewritten_paths=rewritten_paths,
            already_prefixed_paths=already_prefixed_paths,
            structure_preserved=structure_preserved,
            validation=validation,
            action_results=action_results,
            written=written,
            backup_path=backup_path,
            success=error is None,
            error=error,
        )

        LOGGER.info(
            "rewriter execution completed",
            extra={
                "event": "rewriter.completed",
                "report_path": str(report_path),
                "dry_run": dry_run,
                "written": written,
                "success": summary.success,
            },
        )
        return summary


def _same_structure(before: CoverageReport, after: CoverageReport) -> bool:
    """Record count, hit data and summary counts match, paths aside."""
    if len(before.records) != len(after.records):
        return False
    return all(
        (old.line_hits, old.functions_found, old.functions_hit, old.lines_found, old.lines_hit)
        == (new.line_hits, new.functions_found, new.functions_hit, new.lines_found, new.lines_hit)
        for old, new in zip(before.records, after.records)
    )
