from __future__ import annotations
"""Coverage path normalization.

Rewrites `SF:` lines so every source path is relative to the root the
analysis tool expects. Pure text-to-text, no I/O.
"""

from .entities import NormalizationResult, PrefixValidation
from .errors import MalformedInputError
from .lcov import SOURCE_FILE_MARKER, split_lines, strip_line_ending


def clean_prefix(prefix: str, separator: str = "/") -> str:
    """Return `prefix` without trailing separators.

    Raises:
        ValueError: the separator is empty or the prefix is blank.
    """
    if not separator:
        raise ValueError("Path separator must not be empty")
    cleaned = prefix.strip().rstrip(separator)
    if not cleaned:
        raise ValueError("Path prefix must not be empty")
    return cleaned


def has_prefix(path: str, prefix: str, separator: str = "/") -> bool:
    return path.startswith(prefix + separator)


def normalize_source_paths(text: str, prefix: str, separator: str = "/") -> NormalizationResult:
    """Prepend `prefix + separator` to every `SF:` path that lacks it.

    All other lines, and the line endings of rewritten lines, are kept byte
    for byte. Applying the function twice gives the same text as once.

    Args:
        text: Raw LCOV report text.
        prefix: Opaque path prefix, e.g. `src` or `apps/web`.
        separator: Separator placed between prefix and path.

    Raises:
        MalformedInputError: an `SF:` line has an empty path. Nothing is
            returned in that case.
        ValueError: the prefix or separator is empty.
    """
    prefix = clean_prefix(prefix, separator)
    lead = prefix + separator

    output: list[str] = []
    total = 0
    rewritten = 0

    for line_number, line in enumerate(split_lines(text), start=1):
        if not line.startswith(SOURCE_FILE_MARKER):
            output.append(line)
            continue

        content, ending = strip_line_ending(line)
        path = content[len(SOURCE_FILE_MARKER):]
        if not path.strip():
            raise MalformedInputError(line_number, content)

        total += 1
        if path.startswith(lead):
            output.append(line)
            continue

        rewritten += 1
        output.append(f"{SOURCE_FILE_MARKER}{lead}{path}{ending}")

    return NormalizationResult(
        text="".join(output),
        total_paths=total,
        rewritten_paths=rewritten,
        already_prefixed_paths=total - rewritten,
    )


def validate_source_prefixes(text: str, prefix: str, separator: str = "/") -> PrefixValidation:
    """Count `SF:` paths and collect those lacking `prefix + separator`.

    Empty paths count as mismatches here; they are never raised.
    """
    prefix = clean_prefix(prefix, separator)
    mismatched: list[str] = []
    total = 0

    for raw_line in split_lines(text):
        if not raw_line.startswith(SOURCE_FILE_MARKER):
            continue
        line, _ = strip_line_ending(raw_line)
        total += 1
        path = line[len(SOURCE_FILE_MARKER):]
        if not has_prefix(path, prefix, separator):
            mismatched.append(path)

    return PrefixValidation(
        prefix=prefix,
        total_paths=total,
        prefixed_paths=total - len(mismatched),
        mismatched_paths=tuple(mismatched),
    )
