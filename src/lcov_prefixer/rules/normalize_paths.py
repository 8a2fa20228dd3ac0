from __future__ import annotations
"""Rule action to prefix source paths in the report text."""

import logging

from lcov_prefixer.domain.actions import Action
from lcov_prefixer.domain.entities import ActionResult, ReportContext
from lcov_prefixer.domain.normalizer import normalize_source_paths


LOGGER = logging.getLogger(__name__)


class NormalizeCoveragePathsAction(Action):
    """Rewrite `ReportContext.text` so every `SF:` path carries the prefix.

    `MalformedInputError` propagates unchanged; the context text is only
    replaced after the whole report was rewritten.
    """

    @property
    def name(self) -> str:
        return "normalize-paths"

    def execute(self, report_context: ReportContext) -> ActionResult:
        result = normalize_source_paths(
            report_context.text,
            report_context.prefix,
            report_context.separator,
        )
        report_context.text = result.text
        report_context.normalization = result

        LOGGER.info(
            "coverage paths normalized",
            extra={
                "event": "rules.normalize_paths.completed",
                "report_path": str(report_context.report_path),
                "prefix": report_context.prefix,
                "total_paths": result.total_paths,
                "rewritten_paths": result.rewritten_paths,
                "already_prefixed_paths": result.already_prefixed_paths,
            },
        )

        if result.total_paths == 0:
            message = "No source paths found, report left unchanged"
        else:
            message = f"{result.rewritten_paths} of {result.total_paths} source path(s) prefixed"

        return ActionResult(
            action_name=self.name,
            success=True,
            message=message,
            metadata={
                "total_paths": result.total_paths,
                "rewritten_paths": result.rewritten_paths,
                "already_prefixed_paths": result.already_prefixed_paths,
            },
        )
