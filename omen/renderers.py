"""Markdown and JSON rendering of a :class:`ProjectIndex`."""

from __future__ import annotations

import json
from dataclasses import asdict
from itertools import groupby
from typing import List

from .models import ClassInfo, FileIndex, FunctionInfo, ProjectIndex

MARKDOWN_FILENAME = "AI_CONTEXT.md"
JSON_FILENAME = "AI_CONTEXT.json"


def render_json(index: ProjectIndex) -> str:
    return json.dumps(asdict(index), indent=2)


def render_markdown(index: ProjectIndex) -> str:
    """Render the human/LLM-readable context document."""
    lines: List[str] = [
        f"# AI Context: {index.project_name}",
        "",
        f"Generated: {index.generated}",
        "",
    ]

    if index.tech_stack:
        lines.extend(["## Tech Stack", ""])
        lines.extend(f"- {tech}" for tech in index.tech_stack)
        lines.append("")

    lines.extend(
        [
            "## Statistics",
            "",
            "| Metric | Count |",
            "|--------|-------|",
            f"| Files | {index.file_count} |",
            f"| Functions | {index.function_count} |",
            f"| Classes | {index.class_count} |",
            f"| API Endpoints | {len(index.api_endpoints)} |",
            f"| Database Tables | {len(index.db_schema)} |",
            "",
        ]
    )

    if index.api_endpoints:
        lines.extend(
            [
                "## API Endpoints",
                "",
                "| Method | Path | Handler | Auth | Location |",
                "|--------|------|---------|------|----------|",
            ]
        )
        for endpoint in index.api_endpoints:
            auth = "yes" if endpoint.auth else "no"
            lines.append(
                f"| {endpoint.method} | `{endpoint.path}` | {endpoint.handler} | {auth} "
                f"| {endpoint.file}:{endpoint.line} |"
            )
        lines.append("")

    if index.db_schema:
        lines.extend(["## Database Schema", ""])
        for table in index.db_schema:
            lines.extend([f"### {table.name}", "", f"Defined in `{table.file}:{table.line}`", ""])
            if not table.columns:
                continue
            lines.extend(["| Column | Type | Nullable | Key |", "|--------|------|----------|-----|"])
            for column in table.columns:
                keys = []
                if column.primary:
                    keys.append("PK")
                if column.foreign:
                    keys.append(f"FK -> {column.foreign}")
                nullable = "yes" if column.nullable else "no"
                lines.append(
                    f"| {column.name} | {column.type or '-'} | {nullable} | {', '.join(keys) or '-'} |"
                )
            lines.append("")

    if index.files:
        lines.extend(["## Files", ""])
        for directory, group in groupby(index.files, key=_directory_of):
            lines.extend([f"### {directory}/", ""])
            for file_index in group:
                lines.extend(_render_file(file_index))

    lines.extend(
        [
            "---",
            "",
            "Regenerate this file with `omen generate`. Feed it to an assistant as project "
            "context before asking about the codebase.",
            "",
        ]
    )
    return "\n".join(lines)


def _directory_of(file_index: FileIndex) -> str:
    head, _, _ = file_index.relative_path.rpartition("/")
    return head or "."


def _render_file(file_index: FileIndex) -> List[str]:
    lines = [f"#### `{file_index.relative_path}` ({file_index.language})", ""]

    for record in file_index.classes:
        lines.extend(_render_class(record))

    if file_index.functions:
        lines.append("**Functions:**")
        lines.extend(f"- {_signature(function)}" for function in file_index.functions)
        lines.append("")

    if file_index.interfaces:
        lines.append("**Types:**")
        for interface in file_index.interfaces:
            fields = ", ".join(interface.properties)
            entry = f"- `{interface.name}` {{ {fields} }}" if fields else f"- `{interface.name}`"
            if interface.description:
                entry += f" - {interface.description}"
            lines.append(entry)
        lines.append("")

    if file_index.imports:
        lines.append("**Imports:**")
        for record in file_index.imports:
            names = ", ".join(record.imports)
            lines.append(f"- `{record.source}`" + (f": {names}" if names else ""))
        lines.append("")

    return lines


def _render_class(record: ClassInfo) -> List[str]:
    lines = [f"**Class `{record.name}`** (line {record.line})"]
    if record.description:
        lines.append(f"> {record.description}")
    if record.properties:
        lines.append(f"- Properties: {', '.join(record.properties)}")
    if record.methods:
        lines.append("- Methods:")
        lines.extend(f"  - {_signature(method)}" for method in record.methods)
    lines.append("")
    return lines


def _signature(function: FunctionInfo) -> str:
    prefix = "async " if function.is_async else ""
    text = f"`{prefix}{function.name}({', '.join(function.params)})"
    if function.return_type:
        text += f" -> {function.return_type}"
    text += f"` (line {function.line})"
    if function.description:
        text += f" - {function.description}"
    return text


__all__ = ["JSON_FILENAME", "MARKDOWN_FILENAME", "render_json", "render_markdown"]
