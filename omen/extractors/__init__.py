"""Declaration extractors and extension-based dispatch."""

from __future__ import annotations

from typing import List, Optional

from ..config import ExtractOptions
from ..models import FileIndex
from .base import Extractor, UnsupportedFileTypeError, relative_to_root
from .python import PythonExtractor
from .tree_sitter import TypeScriptExtractor, clean_doc_comment


class ExtractorRegistry:
    """Routes a file to the first extractor that supports its extension."""

    def __init__(
        self,
        options: ExtractOptions | None = None,
        extractors: Optional[List[Extractor]] = None,
    ) -> None:
        self.options = options or ExtractOptions()
        if extractors is None:
            extractors = [TypeScriptExtractor(self.options), PythonExtractor(self.options)]
        self._extractors = list(extractors)

    @property
    def extensions(self) -> frozenset[str]:
        supported: set[str] = set()
        for extractor in self._extractors:
            supported.update(extractor.extensions)
        return frozenset(supported)

    def extractor_for(self, path: str) -> Extractor:
        for extractor in self._extractors:
            if extractor.supports(path):
                return extractor
        raise UnsupportedFileTypeError(path)

    def parse_file(self, path: str, content: str, root: str) -> FileIndex:
        """Extract declarations from ``content``; unknown extensions raise."""
        return self.extractor_for(path).extract(path, content, root)


def parse_file(
    path: str, content: str, root: str, options: ExtractOptions | None = None
) -> FileIndex:
    """Convenience wrapper around a one-off :class:`ExtractorRegistry`."""
    return ExtractorRegistry(options).parse_file(path, content, root)


SUPPORTED_EXTENSIONS = TypeScriptExtractor.extensions | PythonExtractor.extensions


__all__ = [
    "Extractor",
    "ExtractorRegistry",
    "PythonExtractor",
    "SUPPORTED_EXTENSIONS",
    "TypeScriptExtractor",
    "UnsupportedFileTypeError",
    "clean_doc_comment",
    "parse_file",
    "relative_to_root",
]
