"""Tree-sitter powered declaration extractor for TypeScript and JavaScript."""

from __future__ import annotations

import re
from typing import Dict, List, Optional

import tree_sitter_javascript
import tree_sitter_typescript
from tree_sitter import Language, Node, Parser

from ..config import ExtractOptions
from ..logging import get_logger
from ..models import ClassInfo, FileIndex, FunctionInfo, ImportInfo, InterfaceInfo
from .base import Extractor, UnsupportedFileTypeError, relative_to_root

_GRAMMAR_BY_SUFFIX = {
    ".ts": "typescript",
    ".tsx": "tsx",
    ".js": "javascript",
    ".jsx": "javascript",
}

_LANGUAGE_BY_SUFFIX = {
    ".ts": "typescript",
    ".tsx": "typescript",
    ".js": "javascript",
    ".jsx": "javascript",
}

_FUNCTION_DECLARATIONS = {"function_declaration", "generator_function_declaration"}
_FUNCTION_VALUES = {"arrow_function", "function_expression", "function"}
_CLASS_DECLARATIONS = {"class_declaration", "abstract_class_declaration"}
_FIELD_DEFINITIONS = {"public_field_definition", "field_definition"}
_LEADING_TRIVIA = {"comment", "decorator"}

_JSDOC_BLOCK = re.compile(r"/\*\*(.*?)\*/", re.DOTALL)
_JSDOC_LINE_PREFIX = re.compile(r"^\s*\*\s?")

logger = get_logger("extractors.tree_sitter")


def _load_language(grammar: str) -> Language:
    if grammar == "typescript":
        return Language(tree_sitter_typescript.language_typescript())
    if grammar == "tsx":
        return Language(tree_sitter_typescript.language_tsx())
    return Language(tree_sitter_javascript.language())


def clean_doc_comment(body: str) -> Optional[str]:
    """Turn the inside of a ``/** ... */`` block into a one-line description.

    Leading ``*`` markers are stripped, ``@tag`` lines dropped and the remaining
    lines joined with single spaces.
    """
    lines: List[str] = []
    for raw in body.split("\n"):
        line = _JSDOC_LINE_PREFIX.sub("", raw).strip()
        if line and not line.startswith("@"):
            lines.append(line)
    return " ".join(lines) or None


class TypeScriptExtractor(Extractor):
    """Extracts functions, classes, interfaces and imports from TS/JS sources."""

    extensions = frozenset(_GRAMMAR_BY_SUFFIX)

    def __init__(self, options: ExtractOptions | None = None) -> None:
        super().__init__(options)
        self._parsers: Dict[str, Parser] = {}

    def extract(self, path: str, content: str, root: str) -> FileIndex:
        suffix = _suffix(path)
        grammar = _GRAMMAR_BY_SUFFIX.get(suffix)
        if grammar is None:
            raise UnsupportedFileTypeError(path)

        source_bytes = content.encode("utf-8")
        tree = self._get_parser(grammar).parse(source_bytes)
        if tree.root_node.has_error:
            logger.debug("Recovered from syntax errors while parsing %s", path)

        file_index = FileIndex(
            path=path,
            relative_path=relative_to_root(path, root),
            language=_LANGUAGE_BY_SUFFIX[suffix],
        )
        _DeclarationVisitor(source_bytes, self, file_index).walk(tree.root_node)
        return file_index

    def _get_parser(self, grammar: str) -> Parser:
        parser = self._parsers.get(grammar)
        if parser is None:
            parser = Parser(_load_language(grammar))
            self._parsers[grammar] = parser
        return parser


class _DeclarationVisitor:
    """Single pre-order traversal that fills a ``FileIndex``."""

    def __init__(self, source: bytes, extractor: TypeScriptExtractor, file_index: FileIndex) -> None:
        self._source = source
        self._options = extractor.options
        self._index = file_index

    def walk(self, root: Node) -> None:
        stack = [root]
        while stack:
            node = stack.pop()
            self._visit(node)
            stack.extend(reversed(node.children))

    def _visit(self, node: Node) -> None:
        kind = node.type
        if kind in _FUNCTION_DECLARATIONS:
            self._index.functions.append(self._function(node))
        elif kind in _FUNCTION_VALUES and _is_exported(node):
            # export default function name() {} / export default () => {}
            self._index.functions.append(self._function(node))
        elif kind == "variable_declarator":
            value = node.child_by_field_name("value")
            if value is not None and value.type in _FUNCTION_VALUES:
                self._index.functions.append(self._function_variable(node, value))
        elif kind in _CLASS_DECLARATIONS:
            if self._options.include_classes:
                self._index.classes.append(self._class(node))
        elif kind == "interface_declaration":
            if self._options.include_interfaces:
                self._index.interfaces.append(self._interface(node))
        elif kind == "type_alias_declaration":
            if self._options.include_interfaces:
                alias = self._type_alias(node)
                if alias is not None:
                    self._index.interfaces.append(alias)
        elif kind == "import_statement":
            if self._options.include_imports:
                record = self._import(node)
                if record is not None:
                    self._index.imports.append(record)

    # ------------------------------------------------------------------
    # Declarations

    def _function(self, node: Node) -> FunctionInfo:
        name_node = node.child_by_field_name("name")
        return FunctionInfo(
            name=self._text(name_node) if name_node is not None else "anonymous",
            params=self._params(node),
            line=_declaration_line(node),
            return_type=self._return_type(node),
            is_async=_has_token(node, "async"),
            is_exported=_is_exported(node),
            description=self._doc_comment(_outer_statement(node)),
        )

    def _function_variable(self, declarator: Node, value: Node) -> FunctionInfo:
        statement = declarator.parent or declarator
        outer = _outer_statement(statement)
        name_node = declarator.child_by_field_name("name")
        return FunctionInfo(
            name=self._text(name_node) if name_node is not None else "anonymous",
            params=self._params(value),
            line=_declaration_line(statement),
            return_type=self._return_type(value),
            is_async=_has_token(value, "async"),
            is_exported=outer.type == "export_statement",
            description=self._doc_comment(outer),
        )

    def _class(self, node: Node) -> ClassInfo:
        name_node = node.child_by_field_name("name")
        body = node.child_by_field_name("body")
        methods: List[FunctionInfo] = []
        properties: List[str] = []
        if body is not None:
            for member in body.named_children:
                if member.type in _FIELD_DEFINITIONS:
                    descriptor = self._property_descriptor(member)
                    if descriptor:
                        properties.append(descriptor)
                elif member.type == "method_definition":
                    methods.append(self._method(member))
        return ClassInfo(
            name=self._text(name_node) if name_node is not None else "anonymous",
            line=_declaration_line(node),
            methods=methods,
            properties=properties,
            is_exported=_is_exported(node),
            description=self._doc_comment(_outer_statement(node)),
        )

    def _method(self, node: Node) -> FunctionInfo:
        name_node = node.child_by_field_name("name")
        return FunctionInfo(
            name=self._text(name_node) if name_node is not None else "anonymous",
            params=self._params(node),
            line=_declaration_line(node),
            return_type=self._return_type(node),
            is_async=_has_token(node, "async"),
            is_exported=False,
            description=self._doc_comment(node),
        )

    def _property_descriptor(self, member: Node) -> Optional[str]:
        name_node = member.child_by_field_name("name") or member.child_by_field_name("property")
        if name_node is None:
            return None
        type_node = member.child_by_field_name("type")
        declared = _strip_annotation(self._text(type_node)) if type_node is not None else ""
        return f"{self._text(name_node)}: {declared or 'any'}"

    def _interface(self, node: Node) -> InterfaceInfo:
        name_node = node.child_by_field_name("name")
        return InterfaceInfo(
            name=self._text(name_node) if name_node is not None else "anonymous",
            line=_declaration_line(node),
            properties=self._property_names(node.child_by_field_name("body")),
            is_exported=_is_exported(node),
            description=self._doc_comment(_outer_statement(node)),
        )

    def _type_alias(self, node: Node) -> Optional[InterfaceInfo]:
        value = node.child_by_field_name("value")
        if value is None or value.type != "object_type":
            return None
        name_node = node.child_by_field_name("name")
        return InterfaceInfo(
            name=self._text(name_node) if name_node is not None else "anonymous",
            line=_declaration_line(node),
            properties=self._property_names(value),
            is_exported=_is_exported(node),
            description=self._doc_comment(_outer_statement(node)),
        )

    def _import(self, node: Node) -> Optional[ImportInfo]:
        source_node = node.child_by_field_name("source")
        if source_node is None or source_node.type != "string":
            return None
        names: List[str] = []
        for clause in node.named_children:
            if clause.type != "import_clause":
                continue
            for binding in clause.named_children:
                if binding.type == "identifier":
                    names.append(self._text(binding))
                elif binding.type == "named_imports":
                    for specifier in binding.named_children:
                        if specifier.type != "import_specifier":
                            continue
                        local = specifier.child_by_field_name("alias") or specifier.child_by_field_name("name")
                        if local is not None:
                            names.append(self._text(local))
                elif binding.type == "namespace_import":
                    names.extend(
                        self._text(child) for child in binding.named_children if child.type == "identifier"
                    )
        return ImportInfo(
            source=_unquote(self._text(source_node)),
            imports=names,
            line=node.start_point[0] + 1,
        )

    # ------------------------------------------------------------------
    # Helpers

    def _text(self, node: Node) -> str:
        return self._source[node.start_byte : node.end_byte].decode("utf-8", errors="ignore")

    def _params(self, node: Node) -> List[str]:
        parameters = node.child_by_field_name("parameters")
        if parameters is None:
            single = node.child_by_field_name("parameter")
            return [self._text(single)] if single is not None else []
        return [self._text(child) for child in parameters.named_children if child.type != "comment"]

    def _return_type(self, node: Node) -> Optional[str]:
        annotation = node.child_by_field_name("return_type")
        if annotation is None:
            return None
        return _strip_annotation(self._text(annotation)) or None

    def _property_names(self, container: Optional[Node]) -> List[str]:
        if container is None:
            return []
        names: List[str] = []
        for member in container.named_children:
            if member.type != "property_signature":
                continue
            name_node = member.child_by_field_name("name")
            if name_node is not None:
                names.append(self._text(name_node))
        return names

    def _doc_comment(self, statement: Node) -> Optional[str]:
        """Return the nearest ``/** */`` block in the statement's leading trivia."""
        start = _leading_trivia_start(statement)
        trivia = self._source[start : statement.start_byte].decode("utf-8", errors="ignore")
        blocks = _JSDOC_BLOCK.findall(trivia)
        if not blocks:
            return None
        return clean_doc_comment(blocks[-1])


def _suffix(path: str) -> str:
    dot = path.rfind(".")
    return path[dot:].lower() if dot != -1 else ""


def _outer_statement(node: Node) -> Node:
    parent = node.parent
    if parent is not None and parent.type == "export_statement":
        return parent
    return node


def _is_exported(node: Node) -> bool:
    parent = node.parent
    return parent is not None and parent.type == "export_statement"


def _has_token(node: Node, token: str) -> bool:
    return any(child.type == token for child in node.children)


def _declaration_line(node: Node) -> int:
    """1-based line of the first child that is not a decorator or comment."""
    for child in node.children:
        if child.type not in _LEADING_TRIVIA:
            return child.start_point[0] + 1
    return node.start_point[0] + 1


def _leading_trivia_start(node: Node) -> int:
    sibling = node.prev_sibling
    while sibling is not None and sibling.type in _LEADING_TRIVIA:
        sibling = sibling.prev_sibling
    if sibling is not None:
        return sibling.end_byte
    parent = node.parent
    return parent.start_byte if parent is not None else 0


def _strip_annotation(text: str) -> str:
    return text.lstrip(":").strip()


def _unquote(text: str) -> str:
    if len(text) >= 2 and text[0] == text[-1] and text[0] in "'\"`":
        return text[1:-1]
    return text


__all__ = ["TypeScriptExtractor", "clean_doc_comment"]
