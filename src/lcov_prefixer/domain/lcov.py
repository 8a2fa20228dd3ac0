from __future__ import annotations
"""Read-only LCOV record parsing.

Only the tags Jest emits for summaries are interpreted; every other tag is
ignored here and left untouched by the normalizer.
"""

from .entities import CoverageRecord, CoverageReport
from .errors import MalformedInputError


SOURCE_FILE_MARKER = "SF:"
LINE_DATA_MARKER = "DA:"
END_OF_RECORD = "end_of_record"

_SUMMARY_FIELDS = {
    "FNF:": "functions_found",
    "FNH:": "functions_hit",
    "LF:": "lines_found",
    "LH:": "lines_hit",
}


def split_lines(text: str) -> list[str]:
    """Split on line feeds only, keeping each line's ending.

    Form feeds, bare carriage returns and the Unicode separators that
    `str.splitlines` also breaks on stay inside their line.
    """
    pieces = text.split("\n")
    lines = [piece + "\n" for piece in pieces[:-1]]
    if pieces[-1]:
        lines.append(pieces[-1])
    return lines


def strip_line_ending(line: str) -> tuple[str, str]:
    """Split a line into `(content, line_ending)`."""
    content = line.rstrip("\r\n")
    return content, line[len(content):]


def parse_report(text: str) -> CoverageReport:
    """Parse LCOV text into records.

    A record without a trailing `end_of_record` is still returned. Numeric
    fields that fail to parse are skipped rather than rejected.

    Raises:
        MalformedInputError: an `SF:` line has an empty path.
    """
    report = CoverageReport()
    current: CoverageRecord | None = None

    for line_number, line in enumerate(split_lines(text), start=1):
        raw_line, _ = strip_line_ending(line)
        if raw_line.startswith(SOURCE_FILE_MARKER):
            path = raw_line[len(SOURCE_FILE_MARKER):]
            if not path.strip():
                raise MalformedInputError(line_number, raw_line)
            current = CoverageRecord(source_path=path)
            report.records.append(current)
            continue

        if raw_line == END_OF_RECORD:
            current = None
            continue

        if current is None:
            continue

        if raw_line.startswith(LINE_DATA_MARKER):
            parts = raw_line[len(LINE_DATA_MARKER):].split(",")
            if len(parts) >= 2 and parts[0].isdigit() and parts[1].isdigit():
                current.line_hits.append((int(parts[0]), int(parts[1])))
            continue

        for marker, attribute in _SUMMARY_FIELDS.items():
            if raw_line.startswith(marker):
                value = raw_line[len(marker):].strip()
                if value.isdigit():
                    setattr(current, attribute, int(value))
                break

    return report
