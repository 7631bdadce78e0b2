"""Line-oriented heuristic extractor for Python sources.

No syntax tree is built. A single forward pass over the lines recognises class
headers, methods, top-level functions, class attributes (including ORM
``Column`` calls), imports and docstrings. Multi-line strings and calls are
followed with the state machines in :mod:`omen.scanning`.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple, Union

from ..models import ClassInfo, FileIndex, FunctionInfo, ImportInfo
from ..scanning import (
    ParenBalancer,
    TripleQuoteTracker,
    capture_balanced,
    find_triple_quote,
    split_top_level,
)
from .base import Extractor, UnsupportedFileTypeError, relative_to_root

_CLASS_HEADER = re.compile(r"^class\s+(\w+)\s*[(:]")
_DEF_HEADER = re.compile(r"^(\s*)(async\s+)?def\s+(\w+)\s*\(")
_COLUMN_ATTRIBUTE = re.compile(r"^\s+(\w+)\s*=\s*(?:\w+\.)?Column\(")
_TYPED_ATTRIBUTE = re.compile(r"^\s+(\w+)\s*:\s*(.+?)\s*(?:=|$)")
_IMPORT_LINE = re.compile(r"^(?:from\s+(\S+)\s+)?import\s+(.+)")
_RETURN_ANNOTATION = re.compile(r"^\s*->\s*(.+?)\s*:")
_TYPE_TOKEN = re.compile(r"\s*([^,()]*)")

_IMPLICIT_PARAMS = {"self", "cls"}

Declaration = Union[ClassInfo, FunctionInfo]


@dataclass
class _ScanState:
    current_class: Optional[ClassInfo] = None
    class_indent: int = 0
    body_indent: Optional[int] = None
    pending_description: Optional[str] = None
    last_declaration: Optional[Declaration] = None

    def open_class(self, record: ClassInfo, indent: int) -> None:
        self.current_class = record
        self.class_indent = indent
        self.body_indent = None

    def close_class(self) -> None:
        self.current_class = None
        self.body_indent = None

    def take_description(self) -> Optional[str]:
        description, self.pending_description = self.pending_description, None
        return description


class PythonExtractor(Extractor):
    """Extracts declarations from ``.py`` files without a parser."""

    extensions = frozenset({".py"})

    def extract(self, path: str, content: str, root: str) -> FileIndex:
        if not self.supports(path):
            raise UnsupportedFileTypeError(path)

        file_index = FileIndex(
            path=path,
            relative_path=relative_to_root(path, root),
            language="python",
        )
        lines = content.splitlines()
        state = _ScanState()
        strings = TripleQuoteTracker()

        index = 0
        while index < len(lines):
            line = lines[index]
            line_no = index + 1
            index += 1
            stripped = line.strip()
            indent = len(line) - len(line.lstrip())

            if (
                state.current_class is not None
                and state.body_indent is None
                and not strings.is_open
                and stripped
                and not stripped.startswith("#")
                and indent > state.class_indent
            ):
                state.body_indent = indent

            is_comment = stripped.startswith("#")
            trailing = ""
            if not strings.is_open and not is_comment:
                line, trailing = _split_header_string(line)
            if (strings.is_open or not is_comment) and strings.feed(line):
                completed = strings.take_completed()
                if completed:
                    _attach_docstring(state, completed)
                continue

            if not stripped or is_comment:
                continue

            state.last_declaration = None

            class_match = _CLASS_HEADER.match(line)
            if class_match:
                index = _skip_class_bases(lines, index, line)
                record = ClassInfo(
                    name=class_match.group(1),
                    line=line_no,
                    is_exported=True,
                    description=state.take_description(),
                )
                state.open_class(record, indent)
                state.last_declaration = record
                if self.options.include_classes:
                    file_index.classes.append(record)
                _feed_trailing(state, strings, trailing)
                continue

            def_match = _DEF_HEADER.match(line)

            if state.current_class is not None and indent > state.class_indent:
                if indent == state.body_indent:
                    if def_match is None:
                        index = _class_attribute(state.current_class, lines, index, line)
                    else:
                        params, return_type, index = _read_signature(lines, index, line, def_match)
                        method = FunctionInfo(
                            name=def_match.group(3),
                            params=[p for p in params if p not in _IMPLICIT_PARAMS],
                            line=line_no,
                            return_type=return_type,
                            is_async=bool(def_match.group(2)),
                            is_exported=False,
                            description=state.take_description(),
                        )
                        state.current_class.methods.append(method)
                        state.last_declaration = method
                _feed_trailing(state, strings, trailing)
                continue

            if def_match is not None and indent == 0:
                params, return_type, index = _read_signature(lines, index, line, def_match)
                function = FunctionInfo(
                    name=def_match.group(3),
                    params=params,
                    line=line_no,
                    return_type=return_type,
                    is_async=bool(def_match.group(2)),
                    is_exported=True,
                    description=state.take_description(),
                )
                file_index.functions.append(function)
                state.close_class()
                state.last_declaration = function
                _feed_trailing(state, strings, trailing)
                continue

            _feed_trailing(state, strings, trailing)

            if indent == 0 and state.current_class is not None:
                state.close_class()

            if indent == 0 and self.options.include_imports:
                import_match = _IMPORT_LINE.match(line)
                if import_match:
                    record, index = _read_import(lines, index, import_match, line_no)
                    file_index.imports.append(record)

        return file_index


def _attach_docstring(state: _ScanState, text: str) -> None:
    """A string right after a header documents it; otherwise it waits."""
    if state.last_declaration is not None:
        state.last_declaration.description = text
        state.last_declaration = None
    else:
        state.pending_description = text


def _split_header_string(line: str) -> Tuple[str, str]:
    """Split a header line from a docstring that follows it on the same line."""
    position = find_triple_quote(line)
    if position <= 0:
        return line, ""
    head = line[:position]
    if not head.rstrip().endswith(":"):
        return line, ""
    if not (_CLASS_HEADER.match(head) or _DEF_HEADER.match(head)):
        return line, ""
    return head, line[position:]


def _feed_trailing(state: _ScanState, strings: TripleQuoteTracker, text: str) -> None:
    """Feed the string that followed a header on the same line."""
    if not text or not strings.feed(text):
        return
    completed = strings.take_completed()
    if completed and state.last_declaration is not None:
        _attach_docstring(state, completed)


def _skip_class_bases(lines: Sequence[str], index: int, line: str) -> int:
    """Consume the continuation lines of a base list split over several lines."""
    opening = line.find("(")
    if opening == -1:
        return index
    _, next_index, closed = _collect_call(lines, index, line[opening:])
    return next_index if closed else index


def _collect_call(lines: Sequence[str], index: int, first_chunk: str) -> Tuple[str, int, bool]:
    """Feed ``first_chunk`` and following lines until parentheses balance.

    Returns the joined text, the index of the first unconsumed line and whether
    the call was closed.
    """
    balancer = ParenBalancer()
    balancer.feed(first_chunk)
    while not balancer.done and index < len(lines):
        balancer.feed(lines[index])
        index += 1
    return balancer.text, index, balancer.done


def _class_attribute(record: ClassInfo, lines: Sequence[str], index: int, line: str) -> int:
    column = _COLUMN_ATTRIBUTE.match(line)
    if column:
        call_text, index, _ = _collect_call(lines, index, line[column.end() - 1 :])
        token = _TYPE_TOKEN.match(call_text[1:])
        column_type = token.group(1).strip() if token else ""
        record.properties.append(f"{column.group(1)}: {column_type or 'Unknown'}")
        return index

    typed = _TYPED_ATTRIBUTE.match(line)
    if typed and "def " not in line:
        attr_type = typed.group(2).split("=")[0].strip()
        record.properties.append(f"{typed.group(1)}: {attr_type}")

    return index


def _read_signature(
    lines: Sequence[str], index: int, line: str, match: "re.Match[str]"
) -> Tuple[List[str], Optional[str], int]:
    """Return parameters, return annotation and the next line index."""
    text, next_index, closed = _collect_call(lines, index, line[match.end() - 1 :])
    if not closed:
        # Unterminated signature: keep what the header line shows.
        text, next_index = line[match.end() - 1 :], index
    params_block = capture_balanced(text, 0)
    params = split_top_level(params_block[1:-1] if params_block.endswith(")") else params_block[1:])
    returns = _RETURN_ANNOTATION.match(text[len(params_block) :])
    return params, (returns.group(1) if returns else None), next_index


def _read_import(
    lines: Sequence[str], index: int, match: "re.Match[str]", line_no: int
) -> Tuple[ImportInfo, int]:
    module = match.group(1)
    names_text = match.group(2).split("#", 1)[0]
    if names_text.lstrip().startswith("(") and ")" not in names_text:
        chunks = [names_text]
        while index < len(lines):
            chunk = lines[index].split("#", 1)[0]
            index += 1
            chunks.append(chunk)
            if ")" in chunk:
                break
        names_text = " ".join(chunks)
    names_text = names_text.replace("(", " ").replace(")", " ")
    names = [name.strip().split(" as ")[0].strip() for name in names_text.split(",")]
    names = [name for name in names if name]
    source = module or (names[0] if names else "")
    return ImportInfo(source=source, imports=names, line=line_no), index


__all__ = ["PythonExtractor"]
