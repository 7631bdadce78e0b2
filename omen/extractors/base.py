"""Base classes for declaration extractors."""

from __future__ import annotations

import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import FrozenSet

from ..config import ExtractOptions
from ..models import FileIndex


class UnsupportedFileTypeError(ValueError):
    """Raised when no extractor handles a file's extension."""

    def __init__(self, path: str) -> None:
        suffix = Path(path).suffix or "<none>"
        super().__init__(f"Unsupported file type: {suffix} ({path})")
        self.path = path
        self.suffix = suffix


class Extractor(ABC):
    """Contract for extractors that turn one file's text into a ``FileIndex``."""

    extensions: FrozenSet[str] = frozenset()

    def __init__(self, options: ExtractOptions | None = None) -> None:
        self.options = options or ExtractOptions()

    def supports(self, path: str) -> bool:
        """Return True when this extractor handles the file's extension."""
        return Path(path).suffix.lower() in self.extensions

    @abstractmethod
    def extract(self, path: str, content: str, root: str) -> FileIndex:
        """Produce declarations for ``path``; ``root`` anchors the relative path."""


def relative_to_root(path: str, root: str) -> str:
    """Return ``path`` relative to ``root`` with forward slashes."""
    return Path(os.path.relpath(path, root)).as_posix()


__all__ = ["Extractor", "UnsupportedFileTypeError", "relative_to_root"]
