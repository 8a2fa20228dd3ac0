from __future__ import annotations
"""Errors raised by coverage path normalization."""

from typing import Sequence


class CoverageNormalizationError(Exception):
    """Base class for all normalizer errors."""


class MalformedInputError(CoverageNormalizationError):
    """An `SF:` line declares no path.

    Attributes:
        line_number: 1-based line number of the offending line.
        line: Raw line content without its line ending.
    """

    def __init__(self, line_number: int, line: str) -> None:
        self.line_number = line_number
        self.line = line
        super().__init__(f"Empty source path on line {line_number}: {line!r}")


class PrefixMismatchError(CoverageNormalizationError):
    """Source paths still lack the expected prefix after normalization.

    Informational: callers decide whether this fails the build.
    """

    def __init__(self, prefix: str, paths: Sequence[str]) -> None:
        self.prefix = prefix
        self.paths = tuple(paths)
        preview = ", ".join(self.paths[:5])
        more = f" (+{len(self.paths) - 5} more)" if len(self.paths) > 5 else ""
        super().__init__(
            f"{len(self.paths)} source path(s) do not start with prefix '{prefix}': {preview}{more}"
        )
