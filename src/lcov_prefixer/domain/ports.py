from __future__ import annotations
"""Hexagonal architecture port interfaces.

Use cases depend only on these abstractions; adapters provide the concrete
filesystem behavior.
"""

from abc import ABC, abstractmethod
from pathlib import Path


class ReportStorePort(ABC):
    """Coverage report persistence."""

    @abstractmethod
    def read_text(self, path: Path) -> str:
        """Return report text with line endings preserved."""
        raise NotImplementedError

    @abstractmethod
    def write_text_atomic(self, path: Path, text: str) -> None:
        """Replace `path` with `text` so readers never see a partial file."""
        raise NotImplementedError

    @abstractmethod
    def backup(self, path: Path) -> Path:
        """Copy `path` next to itself and return the copy's path."""
        raise NotImplementedError

    @abstractmethod
    def discard(self, path: Path) -> None:
        """Remove a file created by `backup`."""
        raise NotImplementedError
