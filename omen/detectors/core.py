"""Shared detector types and raw-text helpers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Set

from ..models import ApiEndpoint, DbTable, FileIndex

RouteRule = Callable[[FileIndex, str], List[ApiEndpoint]]
SchemaRule = Callable[[FileIndex, str], List[DbTable]]


@dataclass
class Findings:
    """Accumulator for detector output; rules return lists, callers merge."""

    technologies: Set[str] = field(default_factory=set)
    endpoints: List[ApiEndpoint] = field(default_factory=list)
    tables: List[DbTable] = field(default_factory=list)

    def merge(self, other: "Findings") -> None:
        self.technologies.update(other.technologies)
        self.endpoints.extend(other.endpoints)
        self.tables.extend(other.tables)


def line_of(text: str, index: int) -> int:
    """Return the 1-based line number for a character index."""
    return text.count("\n", 0, index) + 1


def line_offset(text: str, line: int) -> int:
    """Return the character index where 1-based ``line`` starts."""
    offset = 0
    for _ in range(line - 1):
        newline = text.find("\n", offset)
        if newline == -1:
            return len(text)
        offset = newline + 1
    return offset


def join_paths(prefix: str, route: str) -> str:
    """Concatenate a controller prefix and a route with single slashes."""
    parts = [part.strip("/") for part in (prefix, route)]
    joined = "/".join(part for part in parts if part)
    return f"/{joined}"


def has_any(text: str, markers: Iterable[str]) -> bool:
    return any(marker in text for marker in markers)


__all__ = [
    "Findings",
    "RouteRule",
    "SchemaRule",
    "has_any",
    "join_paths",
    "line_of",
    "line_offset",
]
