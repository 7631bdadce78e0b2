"""Tests for omen.renderers."""

from __future__ import annotations

import json

from omen.models import (
    ApiEndpoint,
    ClassInfo,
    DbColumn,
    DbTable,
    FileIndex,
    FunctionInfo,
    ImportInfo,
    InterfaceInfo,
    ProjectIndex,
)
from omen.renderers import render_json, render_markdown


def _index() -> ProjectIndex:
    service = FileIndex(
        path="/repo/src/service.ts",
        relative_path="src/service.ts",
        language="typescript",
        functions=[
            FunctionInfo(
                name="load",
                params=["id: string"],
                line=3,
                return_type="Promise<User>",
                is_async=True,
                is_exported=True,
                description="Load a user.",
            )
        ],
        classes=[
            ClassInfo(
                name="UserService",
                line=10,
                methods=[FunctionInfo(name="find", params=[], line=12)],
                properties=["repo: Repository"],
                is_exported=True,
                description="Persists users.",
            )
        ],
        interfaces=[InterfaceInfo(name="User", line=20, properties=["id", "email"])],
        imports=[ImportInfo(source="typeorm", imports=["Repository"], line=1)],
    )
    main = FileIndex(path="/repo/main.py", relative_path="main.py", language="python")
    return ProjectIndex(
        project_name="demo",
        generated="2024-01-01T00:00:00+00:00",
        file_count=2,
        function_count=1,
        class_count=1,
        files=[main, service],
        tech_stack=["Express", "TypeORM"],
        api_endpoints=[
            ApiEndpoint(method="GET", path="/users", handler="list", file="src/routes.ts", line=4, auth=True)
        ],
        db_schema=[
            DbTable(
                name="User",
                file="src/user.entity.ts",
                line=5,
                columns=[
                    DbColumn(name="id", type="number", nullable=False, primary=True),
                    DbColumn(name="org", type="Org", foreign="Org"),
                ],
            )
        ],
    )


def test_render_markdown_sections() -> None:
    text = render_markdown(_index())

    assert text.startswith("# AI Context: demo\n")
    assert "Generated: 2024-01-01T00:00:00+00:00" in text
    assert "## Tech Stack\n\n- Express\n- TypeORM\n" in text
    assert "| Files | 2 |" in text
    assert "| API Endpoints | 1 |" in text
    assert "| GET | `/users` | list | yes | src/routes.ts:4 |" in text
    assert "### User" in text
    assert "| id | number | no | PK |" in text
    assert "| org | Org | yes | FK -> Org |" in text
    assert "### ./" in text
    assert "### src/" in text
    assert "**Class `UserService`** (line 10)" in text
    assert "> Persists users." in text
    assert "- Properties: repo: Repository" in text
    assert "`async load(id: string) -> Promise<User>` (line 3) - Load a user." in text
    assert "- `User` { id, email }" in text
    assert "- `typeorm`: Repository" in text
    assert "omen generate" in text


def test_render_markdown_omits_empty_sections() -> None:
    index = ProjectIndex(project_name="empty", generated="2024-01-01T00:00:00+00:00")

    text = render_markdown(index)

    assert "## API Endpoints" not in text
    assert "## Database Schema" not in text
    assert "## Tech Stack" not in text
    assert "| Files | 0 |" in text


def test_render_json_is_a_full_snapshot() -> None:
    payload = json.loads(render_json(_index()))

    assert payload["project_name"] == "demo"
    assert payload["tech_stack"] == ["Express", "TypeORM"]
    assert payload["api_endpoints"][0]["auth"] is True
    assert payload["db_schema"][0]["columns"][1]["foreign"] == "Org"
    assert payload["files"][1]["classes"][0]["methods"][0]["name"] == "find"
