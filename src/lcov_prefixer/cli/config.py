from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Mapping


TRUE_VALUES = {"1", "true", "yes", "on"}
FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass(slots=True)
class AppConfig:
    report_path: Path
    output_path: Path | None
    prefix: str
    separator: str
    dry_run: bool
    keep_backup: bool
    strict: bool


def load_config(args, env: Mapping[str, str]) -> AppConfig:
    report_raw = _normalize_empty(args.input) or _normalize_empty(env.get("COVERAGE_REPORT"))
    output_raw = _normalize_empty(args.output) or _normalize_empty(env.get("COVERAGE_OUTPUT"))
    prefix = _normalize_empty(args.prefix) or _normalize_empty(env.get("COVERAGE_PATH_PREFIX"))
    # separator is not stripped: only an unset or empty value falls back
    separator = args.separator or env.get("COVERAGE_PATH_SEPARATOR") or "/"
    in_place = args.in_place or parse_bool(env.get("COVERAGE_IN_PLACE", "false"), "COVERAGE_IN_PLACE")
    keep_backup = args.keep_backup or parse_bool(env.get("COVERAGE_KEEP_BACKUP", "false"), "COVERAGE_KEEP_BACKUP")
    strict = args.strict or parse_bool(env.get("COVERAGE_STRICT", "false"), "COVERAGE_STRICT")

    if not report_raw:
        raise ValueError("Missing coverage report. Use --input or set COVERAGE_REPORT")

    if not prefix:
        raise ValueError("Missing path prefix. Use --prefix or set COVERAGE_PATH_PREFIX")

    if prefix.rstrip(separator) == "":
        raise ValueError("Path prefix must contain more than separators")

    if in_place and output_raw:
        raise ValueError("Use either --output/COVERAGE_OUTPUT or --in-place/COVERAGE_IN_PLACE, not both")

    if not in_place and not output_raw:
        raise ValueError("Missing destination. Use --output, set COVERAGE_OUTPUT, or pass --in-place")

    report_path = Path(report_raw).expanduser()
    output_path = Path(output_raw).expanduser() if output_raw else None
    if output_path is not None and output_path == report_path:
        output_path = None

    return AppConfig(
        report_path=report_path,
        output_path=output_path,
        prefix=prefix,
        separator=separator,
        dry_run=args.dry_run,
        keep_backup=keep_backup,
        strict=strict,
    )


def parse_bool(value: str, name: str) -> bool:
    normalized = value.strip().lower()
    if normalized in TRUE_VALUES:
        return True
    if normalized in FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be a boolean (true/false)")


def _normalize_empty(value: str | None) -> str | None:
    if value is None:
        return None
    stripped = value.strip()
    return stripped if stripped else None
