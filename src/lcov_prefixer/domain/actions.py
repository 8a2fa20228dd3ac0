from __future__ import annotations
"""Domain action contracts and pipeline composition primitives."""

from abc import ABC, abstractmethod
import logging
from typing import Sequence

from .entities import ActionResult, ReportContext


LOGGER = logging.getLogger(__name__)


class Action(ABC):
    """Pluggable report rule interface.

    Implementers should:
    - read required state from `ReportContext`,
    - update `ReportContext` for downstream rules when needed,
    - return an `ActionResult` describing success/failure.
    """

    @property
    def name(self) -> str:
        """Stable default action name used in summaries/logging."""
        return self.__class__.__name__

    @abstractmethod
    def execute(self, report_context: ReportContext) -> ActionResult:
        """Execute action logic for one coverage report.

        Args:
            report_context: Mutable context for the current report.

        Returns:
            ActionResult with execution outcome details.
        """
        raise NotImplementedError


class ActionPipeline:
    """Ordered sequence of `Action` instances executed per report."""

    def __init__(self, actions: Sequence[Action]) -> None:
        self._actions = tuple(actions)

    @property
    def actions(self) -> tuple[Action, ...]:
        """Read-only ordered actions configured for this pipeline."""
        return self._actions

    def run(self, report_context: ReportContext, *, fail_fast: bool = False) -> list[ActionResult]:
        """Run configured actions in order for one report context.

        An exception raised by an action is logged with the action name and
        report path, then propagates and stops the pipeline.

        Args:
            report_context: Mutable per-report execution context.
            fail_fast: Stop executing remaining actions after first failed action.
        """
        results: list[ActionResult] = []
        for action in self._actions:
            try:
                result = action.execute(report_context)
            except Exception:
                LOGGER.exception(
                    "report action raised",
                    extra={
                        "event": "pipeline.action.raised",
                        "action_name": action.name,
                        "report_path": str(report_context.report_path),
                        "completed_actions": [item.action_name for item in results],
                    },
                )
                raise
            LOGGER.debug(
                "report action finished",
                extra={
                    "event": "pipeline.action.finished",
                    "action_name": action.name,
                    "success": result.success,
                },
            )
            if not result.action_name:
                result.action_name = action.name
            results.append(result)
            if fail_fast and not result.success:
                break
        return results
