"""Framework signal detection over a single extracted file."""

from __future__ import annotations

from typing import Dict, Tuple

from ..models import FileIndex
from .core import Findings, RouteRule, SchemaRule, join_paths, line_of
from .routes import (
    decorator_routes,
    express_routes,
    nest_routes,
    next_routes,
    rest_framework_routes,
)
from .schemas import declarative_tables, entity_tables, model_field_tables, prisma_tables
from .technologies import TECHNOLOGY_MARKERS, detect_technologies

_SCRIPT_ROUTES: Tuple[RouteRule, ...] = (express_routes, nest_routes, next_routes)
_SCRIPT_SCHEMAS: Tuple[SchemaRule, ...] = (entity_tables, prisma_tables)

ROUTE_RULES: Dict[str, Tuple[RouteRule, ...]] = {
    "python": (decorator_routes, rest_framework_routes),
    "typescript": _SCRIPT_ROUTES,
    "javascript": _SCRIPT_ROUTES,
}

SCHEMA_RULES: Dict[str, Tuple[SchemaRule, ...]] = {
    "python": (declarative_tables, model_field_tables),
    "typescript": _SCRIPT_SCHEMAS,
    "javascript": _SCRIPT_SCHEMAS,
}


def detect(file_index: FileIndex, content: str) -> Findings:
    """Run every rule registered for the file's language."""
    findings = Findings(technologies=detect_technologies(file_index))
    for rule in ROUTE_RULES.get(file_index.language, ()):
        findings.endpoints.extend(rule(file_index, content))
    for rule in SCHEMA_RULES.get(file_index.language, ()):
        findings.tables.extend(rule(file_index, content))
    return findings


__all__ = [
    "Findings",
    "ROUTE_RULES",
    "SCHEMA_RULES",
    "TECHNOLOGY_MARKERS",
    "detect",
    "detect_technologies",
    "join_paths",
    "line_of",
]
