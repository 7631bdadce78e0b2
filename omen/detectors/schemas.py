"""Schema rules: recover ORM tables and columns from model declarations."""

from __future__ import annotations

import re
from typing import List, Optional, Tuple

from ..logging import get_logger
from ..models import DbColumn, DbTable, FileIndex
from ..scanning import capture_balanced, split_top_level
from .core import has_any, line_offset

logger = get_logger("detectors.schemas")

# ---------------------------------------------------------------------------
# Python: declarative ORM columns (SQLAlchemy)
# ---------------------------------------------------------------------------

_DECLARATIVE_MARKERS = ("db.Model", "declarative_base", "DeclarativeBase", "Base)")
_FOREIGN_KEY = re.compile(r"ForeignKey\(\s*['\"]([\w.]+)['\"]")
_NOT_NULL = re.compile(r"\bnullable\s*=\s*False\b")
_PRIMARY_KEY = re.compile(r"\bprimary_key\s*=\s*True\b")
_TOP_LEVEL_CLASS = re.compile(r"^class\s", re.MULTILINE)


def declarative_tables(file_index: FileIndex, content: str) -> List[DbTable]:
    if not has_any(content, _DECLARATIVE_MARKERS):
        return []
    tables: List[DbTable] = []
    for record in file_index.classes:
        if not record.properties:
            continue
        start, end = _class_span(content, record.line)
        columns = [_declarative_column(prop, content, start, end) for prop in record.properties]
        tables.append(
            DbTable(
                name=record.name,
                file=file_index.relative_path,
                line=record.line,
                columns=columns,
            )
        )
    return tables


def _declarative_column(descriptor: str, content: str, start: int, end: int) -> DbColumn:
    name, _, declared = descriptor.partition(":")
    name = name.strip()
    call = _column_call(content, name, start, end)
    foreign = _FOREIGN_KEY.search(call)
    return DbColumn(
        name=name,
        type=declared.strip(),
        nullable=_NOT_NULL.search(call) is None,
        primary=_PRIMARY_KEY.search(call) is not None,
        foreign=foreign.group(1) if foreign else None,
    )


def _column_call(content: str, name: str, start: int, end: int) -> str:
    """Return the balanced ``Column(...)``/``mapped_column(...)`` for ``name``."""
    pattern = re.compile(
        r"^[ \t]+" + re.escape(name) + r"\s*(?::[^=\n]*)?=\s*(?:\w+\.)?(?:Column|mapped_column)\(",
        re.MULTILINE,
    )
    match = pattern.search(content, start, end)
    if match is None:
        return ""
    return capture_balanced(content, match.end() - 1)


def _class_span(content: str, line: int) -> Tuple[int, int]:
    """Offsets from a class header up to the next column-0 class header."""
    start = line_offset(content, line)
    following = _TOP_LEVEL_CLASS.search(content, start + 1)
    return start, following.start() if following else len(content)


# ---------------------------------------------------------------------------
# Python: model fields (Django)
# ---------------------------------------------------------------------------

_MODEL_MARKER = "models.Model"
_MODEL_FIELD = re.compile(r"^[ \t]+(\w+)\s*=\s*models\.(\w+)\(", re.MULTILINE)
_NULLABLE = re.compile(r"\bnull\s*=\s*True\b")
_RELATION_FIELDS = {"ForeignKey", "OneToOneField", "ManyToManyField"}


def model_field_tables(file_index: FileIndex, content: str) -> List[DbTable]:
    if _MODEL_MARKER not in content:
        return []
    tables: List[DbTable] = []
    for record in file_index.classes:
        start, end = _class_span(content, record.line)
        block = content[start:end]
        columns = [_model_field(match, block) for match in _MODEL_FIELD.finditer(block)]
        if columns:
            tables.append(
                DbTable(
                    name=record.name,
                    file=file_index.relative_path,
                    line=record.line,
                    columns=columns,
                )
            )
    return tables


def _model_field(match: "re.Match[str]", block: str) -> DbColumn:
    field_type = match.group(2)
    call = capture_balanced(block, match.end() - 1)
    args = call[1:-1] if call.endswith(")") else call[1:]
    foreign: Optional[str] = None
    if field_type in _RELATION_FIELDS:
        parts = split_top_level(args)
        if parts:
            target = parts[0]
            if target.startswith("to="):
                target = target[3:].strip()
            foreign = target.strip("'\"")
    return DbColumn(
        name=match.group(1),
        type=field_type,
        nullable=_NULLABLE.search(args) is not None,
        primary=_PRIMARY_KEY.search(args) is not None,
        foreign=foreign,
    )


# ---------------------------------------------------------------------------
# TS/JS: decorated entities (TypeORM)
# ---------------------------------------------------------------------------

_ENTITY_MARKER = "@Entity"
_DECORATOR_CALL = r"@\w+\((?:[^()]|\([^()]*\))*\)"
_DECORATOR = re.compile(r"@(\w+)\(((?:[^()]|\([^()]*\))*)\)")
_RELATION_DECORATORS = {"ManyToOne", "OneToOne"}
_RELATION_TARGET = re.compile(r"=>\s*([A-Za-z_$][\w$]*)")
_NULLABLE_OPTION = re.compile(r"\bnullable\s*:\s*true\b")
_MODIFIERS = r"(?:(?:public|private|protected|readonly|declare)\s+)*"


def entity_tables(file_index: FileIndex, content: str) -> List[DbTable]:
    if _ENTITY_MARKER not in content:
        return []
    tables: List[DbTable] = []
    for record in file_index.classes:
        if not record.properties:
            continue
        body = _class_body(content, record.name)
        if body is None:
            continue
        columns: List[DbColumn] = []
        for descriptor in record.properties:
            column = _entity_column(body, descriptor)
            if column is not None:
                columns.append(column)
        if columns:
            tables.append(
                DbTable(
                    name=record.name,
                    file=file_index.relative_path,
                    line=record.line,
                    columns=columns,
                )
            )
    return tables


def _class_body(content: str, name: str) -> Optional[str]:
    header = re.search(r"\bclass\s+" + re.escape(name) + r"\b", content)
    if header is None:
        return None
    opening = content.find("{", header.end())
    if opening == -1:
        return None
    depth = 0
    for index in range(opening, len(content)):
        char = content[index]
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return content[opening : index + 1]
    return content[opening:]


def _entity_column(body: str, descriptor: str) -> Optional[DbColumn]:
    name, _, declared = descriptor.partition(":")
    name = name.strip()
    pattern = re.compile(
        r"((?:[ \t]*" + _DECORATOR_CALL + r"[ \t]*\n)+)[ \t]*" + _MODIFIERS
        + re.escape(name) + r"\s*[!?]?\s*:"
    )
    match = pattern.search(body)
    if match is None:
        return None
    decorators: List[Tuple[str, str]] = _DECORATOR.findall(match.group(1))
    relevant = [
        (kind, args)
        for kind, args in decorators
        if kind.endswith("Column") or kind in _RELATION_DECORATORS
    ]
    if not relevant:
        return None
    foreign: Optional[str] = None
    for kind, args in relevant:
        if kind in _RELATION_DECORATORS:
            target = _RELATION_TARGET.search(args)
            if target:
                foreign = target.group(1)
                break
    return DbColumn(
        name=name,
        type=declared.strip(),
        nullable=any(_NULLABLE_OPTION.search(args) for _, args in relevant),
        primary=any(kind.startswith("Primary") for kind, _ in relevant),
        foreign=foreign,
    )


# ---------------------------------------------------------------------------
# TS/JS: Prisma client
# ---------------------------------------------------------------------------

_PRISMA_MARKERS = ("PrismaClient", "@prisma/client")


def prisma_tables(file_index: FileIndex, content: str) -> List[DbTable]:
    """Prisma models live in ``schema.prisma``, which is not indexed."""
    if has_any(content, _PRISMA_MARKERS):
        logger.debug(
            "Prisma client used in %s; schema.prisma is not parsed", file_index.relative_path
        )
    return []


__all__ = [
    "declarative_tables",
    "entity_tables",
    "model_field_tables",
    "prisma_tables",
]
