from __future__ import annotations

from pathlib import Path

import pytest


JEST_REPORT = (
    "TN:\n"
    "SF:utils/helper.ts\n"
    "FN:3,formatName\n"
    "FNF:1\n"
    "FNH:1\n"
    "FNDA:4,formatName\n"
    "DA:3,4\n"
    "DA:4,4\n"
    "DA:9,0\n"
    "LF:3\n"
    "LH:2\n"
    "BRF:0\n"
    "BRH:0\n"
    "end_of_record\n"
    "TN:\n"
    "SF:src/components/Button.tsx\n"
    "FNF:0\n"
    "FNH:0\n"
    "DA:1,1\n"
    "LF:1\n"
    "LH:1\n"
    "end_of_record\n"
)


@pytest.fixture
def jest_report() -> str:
    return JEST_REPORT


@pytest.fixture
def report_file(tmp_path: Path) -> Path:
    path = tmp_path / "coverage" / "lcov.info"
    path.parent.mkdir()
    path.write_bytes(JEST_REPORT.encode("utf-8"))
    return path
