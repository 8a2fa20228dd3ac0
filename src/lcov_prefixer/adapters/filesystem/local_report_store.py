from __future__ import annotations

import os
import shutil
import tempfile
from pathlib import Path

from lcov_prefixer.domain.ports import ReportStorePort


class LocalReportStoreAdapter(ReportStorePort):
    def __init__(
        self,
        *,
        backup_suffix: str = ".bak",
        encoding: str = "utf-8",
        errors: str = "surrogateescape",
    ) -> None:
        self._backup_suffix = backup_suffix
        self._encoding = encoding
        # undecodable bytes round-trip unchanged
        self._errors = errors

    def read_text(self, path: Path) -> str:
        # newline="" keeps \r\n intact
        with path.open("r", encoding=self._encoding, errors=self._errors, newline="") as handle:
            return handle.read()

    def write_text_atomic(self, path: Path, text: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=str(path.parent))
        try:
            with os.fdopen(fd, "w", encoding=self._encoding, errors=self._errors, newline="") as handle:
                handle.write(text)
            if path.exists():
                shutil.copymode(path, tmp_name)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def backup(self, path: Path) -> Path:
        backup_path = path.with_name(path.name + self._backup_suffix)
        shutil.copy2(path, backup_path)
        return backup_path

    def discard(self, path: Path) -> None:
        path.unlink(missing_ok=True)
