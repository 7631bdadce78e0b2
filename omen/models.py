"""Core data models shared across omen components."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional


@dataclass
class FunctionInfo:
    """A function, method or function-valued variable found in a source file."""

    name: str
    params: List[str]
    line: int
    return_type: Optional[str] = None
    is_async: bool = False
    is_exported: bool = False
    description: Optional[str] = None


@dataclass
class ClassInfo:
    """A class declaration with its methods and properties.

    ``properties`` holds ``"name: type"`` strings whose producer depends on the
    source language:

    * TypeScript/JavaScript class fields, with ``any`` for untyped fields.
    * Python ``name = Column(...)`` calls, typed by the first call argument.
    * Python ``name: Type`` class attributes.

    Schema detectors re-read the raw text for column constraints, so the
    property list only needs the column name and type token.
    """

    name: str
    line: int
    methods: List[FunctionInfo] = field(default_factory=list)
    properties: List[str] = field(default_factory=list)
    is_exported: bool = False
    description: Optional[str] = None


@dataclass
class InterfaceInfo:
    """An interface or object-shaped type alias; ``properties`` holds names."""

    name: str
    line: int
    properties: List[str] = field(default_factory=list)
    is_exported: bool = False
    description: Optional[str] = None


@dataclass
class ImportInfo:
    """An import statement; ``source`` is kept exactly as written."""

    source: str
    imports: List[str]
    line: int


@dataclass
class FileIndex:
    """Everything extracted from a single source file."""

    path: str
    relative_path: str
    language: str
    functions: List[FunctionInfo] = field(default_factory=list)
    classes: List[ClassInfo] = field(default_factory=list)
    interfaces: List[InterfaceInfo] = field(default_factory=list)
    imports: List[ImportInfo] = field(default_factory=list)


@dataclass
class ApiEndpoint:
    """An HTTP route inferred from framework patterns."""

    method: str
    path: str
    handler: str
    file: str
    line: int
    auth: bool = False


@dataclass
class DbColumn:
    name: str
    type: str
    nullable: bool = True
    primary: bool = False
    foreign: Optional[str] = None


@dataclass
class DbTable:
    """A database table inferred from ORM model declarations."""

    name: str
    file: str
    line: int
    columns: List[DbColumn] = field(default_factory=list)


@dataclass
class ProjectIndex:
    """Aggregated, format-independent result of one indexing run."""

    project_name: str
    generated: str
    file_count: int = 0
    function_count: int = 0
    class_count: int = 0
    files: List[FileIndex] = field(default_factory=list)
    tech_stack: List[str] = field(default_factory=list)
    api_endpoints: List[ApiEndpoint] = field(default_factory=list)
    db_schema: List[DbTable] = field(default_factory=list)


@dataclass
class GenerationResult:
    """Summary of a generation run returned to the CLI and service."""

    file_count: int
    function_count: int
    class_count: int
    outputs: List[Path] = field(default_factory=list)
