from __future__ import annotations
"""Rule action to verify every source path carries the prefix."""

import logging

from lcov_prefixer.domain.actions import Action
from lcov_prefixer.domain.entities import ActionResult, ReportContext
from lcov_prefixer.domain.errors import PrefixMismatchError
from lcov_prefixer.domain.normalizer import validate_source_prefixes


LOGGER = logging.getLogger(__name__)


class ValidateCoveragePrefixAction(Action):
    """Check `ReportContext.text` and store the result on the context.

    A mismatch is logged as a warning. It only fails the action when
    `strict` is set.
    """

    def __init__(self, *, strict: bool = False) -> None:
        self._strict = strict

    @property
    def name(self) -> str:
        return "validate-prefix"

    def execute(self, report_context: ReportContext) -> ActionResult:
        validation = validate_source_prefixes(
            report_context.text,
            report_context.prefix,
            report_context.separator,
        )
        report_context.validation = validation
        metadata = {
            "total_paths": validation.total_paths,
            "prefixed_paths": validation.prefixed_paths,
            "mismatched_paths": list(validation.mismatched_paths),
            "strict": self._strict,
        }

        if validation.ok:
            return ActionResult(
                action_name=self.name,
                success=True,
                message=f"All {validation.total_paths} source path(s) carry prefix '{validation.prefix}'",
                metadata=metadata,
            )

        error = PrefixMismatchError(validation.prefix, validation.mismatched_paths)
        LOGGER.warning(
            str(error),
            extra={
                "event": "rules.validate_prefix.mismatch",
                "report_path": str(report_context.report_path),
                "prefix": validation.prefix,
                "mismatched_count": len(validation.mismatched_paths),
            },
        )
        return ActionResult(
            action_name=self.name,
            success=not self._strict,
            message=str(error),
            metadata=metadata,
        )
