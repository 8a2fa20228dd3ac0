from __future__ import annotations
"""Core domain entities shared by use cases and rule actions.

These models stay free of I/O so the CLI, tests and any other caller can build
them directly.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any


@dataclass(slots=True)
class CoverageRecord:
    """One per-file LCOV record.

    Attributes:
        source_path: Path declared by the `SF:` line.
        line_hits: `(line_number, execution_count)` pairs from `DA:` lines.
        functions_found: `FNF:` summary count.
        functions_hit: `FNH:` summary count.
        lines_found: `LF:` summary count.
        lines_hit: `LH:` summary count.
    """

    source_path: str
    line_hits: list[tuple[int, int]] = field(default_factory=list)
    functions_found: int = 0
    functions_hit: int = 0
    lines_found: int = 0
    lines_hit: int = 0


@dataclass(slots=True)
class CoverageReport:
    """Ordered LCOV records as read from one report."""

    records: list[CoverageRecord] = field(default_factory=list)

    @property
    def source_paths(self) -> list[str]:
        return [record.source_path for record in self.records]


@dataclass(slots=True)
class PrefixValidation:
    """Outcome of checking that every source path carries the prefix.

    Attributes:
        prefix: Prefix that was checked.
        total_paths: Number of `SF:` lines found.
        prefixed_paths: Number of those that carry `prefix + separator`.
        mismatched_paths: Paths lacking the prefix, in report order.
    """

    prefix: str
    total_paths: int
    prefixed_paths: int
    mismatched_paths: tuple[str, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.mismatched_paths


@dataclass(slots=True)
class NormalizationResult:
    """Rewritten report text plus counters for logging and summaries."""

    text: str
    total_paths: int
    rewritten_paths: int
    already_prefixed_paths: int


@dataclass(slots=True)
class ReportContext:
    """Mutable per-report context passed through the action pipeline.

    Rules read and write this object to share intermediate information.

    Attributes:
        report_path: Report file the text was read from.
        output_path: Destination of the rewritten report.
        prefix: Path prefix expected by the analysis tool.
        separator: Separator placed between prefix and path.
        original_text: Report text as read, never modified.
        text: Current report text, rewritten by actions.
        normalization: Counters of the last normalization, if one ran.
        validation: Result of the last prefix validation, if one ran.
        dry_run: Whether actions must avoid writing files.
        metadata: Generic key/value bag for cross-rule communication.
    """

    report_path: Path
    output_path: Path
    prefix: str
    separator: str
    original_text: str
    text: str
    normalization: NormalizationResult | None = None
    validation: PrefixValidation | None = None
    dry_run: bool = False
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class ActionResult:
    """Standard result returned by each `Action.execute()` call.

    Attributes:
        action_name: Action identifier for logs and summaries.
        success: Whether the action succeeded.
        message: Human-readable action outcome.
        metadata: Optional structured result payload for downstream consumers.
    """

    action_name: str
    success: bool
    message: str = ""
    metadata: dict[str, Any] = field(default_factory=dict)


class BranchCategory(str, Enum):
    PULL_REQUEST = "pull_request"
    FEATURE = "feature"
    OTHER = "other"


@dataclass(slots=True, frozen=True)
class BranchInfo:
    """Branch being built, as classified for SonarQube analysis.

    Attributes:
        category: Pull request, feature branch or anything else.
        branch_name: Branch name without the `refs/heads/` prefix.
        pull_request_id: Pull request key, only for pull requests.
        source_branch: Pull request source branch, without `refs/heads/`.
        target_branch: Pull request target branch, without `refs/heads/`.
    """

    category: BranchCategory
    branch_name: str
    pull_request_id: str | None = None
    source_branch: str | None = None
    target_branch: str | None = None
