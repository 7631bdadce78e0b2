"""Tests for the route rules."""

from __future__ import annotations

import textwrap

import pytest

from omen.detectors import detect
from omen.detectors.routes import (
    decorator_routes,
    express_routes,
    nest_routes,
    next_route_path,
    next_routes,
    rest_framework_routes,
)
from omen.extractors import parse_file


def _index(relative: str, source: str):
    content = textwrap.dedent(source).lstrip("\n")
    return parse_file(f"/repo/{relative}", content, "/repo"), content


def test_flask_route_with_methods_list_emits_one_endpoint_per_method() -> None:
    file_index, content = _index(
        "app.py",
        """
        from flask import Flask

        app = Flask(__name__)


        @app.route("/widgets", methods=["GET", "POST"])
        def widgets():
            return []
        """,
    )

    endpoints = decorator_routes(file_index, content)

    assert [(e.method, e.path, e.handler, e.line) for e in endpoints] == [
        ("GET", "/widgets", "widgets", 7),
        ("POST", "/widgets", "widgets", 7),
    ]
    assert all(e.file == "app.py" and e.auth is False for e in endpoints)


def test_flask_defaults_and_verb_decorators() -> None:
    file_index, content = _index(
        "api.py",
        """
        @bp.route('/health')
        def health():
            return "ok"


        @router.delete("/items/<int:item_id>")
        @jwt_required()
        def remove(item_id):
            \"\"\"Delete an item.\"\"\"


        def plain():
            pass
        """,
    )

    endpoints = decorator_routes(file_index, content)

    assert [(e.method, e.path, e.handler) for e in endpoints] == [
        ("GET", "/health", "health"),
        ("DELETE", "/items/<int:item_id>", "remove"),
    ]
    assert all(e.auth for e in endpoints)


def test_decorator_scan_stops_at_previous_definition() -> None:
    file_index, content = _index(
        "views.py",
        """
        @app.route("/first")
        def first():
            pass
        def second():
            pass
        """,
    )

    endpoints = decorator_routes(file_index, content)

    assert [e.handler for e in endpoints] == ["first"]


def test_auth_from_description() -> None:
    file_index, content = _index(
        "views.py",
        """
        @app.route("/me")
        def me():
            \"\"\"Requires auth token.\"\"\"
        """,
    )

    [endpoint] = decorator_routes(file_index, content)

    assert endpoint.auth is True


def test_rest_framework_function_and_class_views() -> None:
    file_index, content = _index(
        "api/views.py",
        """
        from rest_framework.decorators import api_view
        from rest_framework.views import APIView
        from rest_framework.permissions import IsAuthenticated


        @api_view(["GET", "POST"])
        def snippet_list(request):
            pass


        class AccountView(APIView):
            permission_classes = [IsAuthenticated]

            def get(self, request):
                pass

            def put(self, request, pk):
                pass

            def helper(self):
                pass


        class Plain(object):
            def get(self):
                pass
        """,
    )

    endpoints = rest_framework_routes(file_index, content)

    assert [(e.method, e.path, e.handler, e.line) for e in endpoints] == [
        ("GET", "/snippet_list/", "snippet_list", 7),
        ("POST", "/snippet_list/", "snippet_list", 7),
        ("GET", "/accountview/", "AccountView.get", 14),
        ("PUT", "/accountview/", "AccountView.put", 17),
    ]
    assert all(e.auth for e in endpoints)


def test_rest_framework_view_with_multi_line_bases() -> None:
    file_index, content = _index(
        "api/views.py",
        """
        class UserDetailView(
            LoginRequiredMixin,
            APIView,
        ):
            name: str

            def get(self, request):
                pass
        """,
    )

    [endpoint] = rest_framework_routes(file_index, content)

    assert (endpoint.method, endpoint.path, endpoint.handler, endpoint.line) == (
        "GET",
        "/userdetailview/",
        "UserDetailView.get",
        7,
    )
    assert endpoint.auth is True


def test_api_view_without_methods_defaults_to_get() -> None:
    file_index, content = _index(
        "views.py",
        """
        @api_view()
        def ping(request):
            pass
        """,
    )

    [endpoint] = rest_framework_routes(file_index, content)

    assert (endpoint.method, endpoint.path, endpoint.auth) == ("GET", "/ping/", False)


def test_express_calls() -> None:
    file_index, content = _index(
        "src/server.js",
        """
        const express = require('express');
        const app = express();
        const router = express.Router();

        app.get('/users', (req, res) => res.json([]));
        router.post("/users/:id", authenticate, handler);
        """,
    )

    endpoints = express_routes(file_index, content)

    assert [(e.method, e.path, e.handler, e.line) for e in endpoints] == [
        ("GET", "/users", "anonymous", 5),
        ("POST", "/users/:id", "anonymous", 6),
    ]
    assert all(e.auth for e in endpoints)
    assert all(e.file == "src/server.js" for e in endpoints)


def test_nest_controller_routes() -> None:
    file_index, content = _index(
        "src/users.controller.ts",
        """
        import { Controller, Get, Post } from '@nestjs/common';

        @Controller('users')
        export class UsersController {
          @Get()
          findAll() {
            return [];
          }

          @Get(':id')
          async findOne(@Param('id') id: string) {
            return id;
          }

          @Post('/')
          @UseGuards(AuthGuard('jwt'))
          public create(@Body() body: CreateUserDto) {
            return body;
          }
        }
        """,
    )

    endpoints = nest_routes(file_index, content)

    assert [(e.method, e.path, e.handler, e.line) for e in endpoints] == [
        ("GET", "/users", "findAll", 5),
        ("GET", "/users/:id", "findOne", 10),
        ("POST", "/users", "create", 15),
    ]
    assert all(e.auth for e in endpoints)


def test_nest_routes_need_a_controller() -> None:
    file_index, content = _index("src/x.ts", "class A {\n  @Get()\n  run() {}\n}\n")

    assert nest_routes(file_index, content) == []


@pytest.mark.parametrize(
    ("relative", "expected"),
    [
        ("app/api/users/[id]/route.ts", "/api/users/:id"),
        ("src/app/api/route.ts", "/api"),
        ("app/api/(admin)/stats/route.js", "/api/stats"),
        ("pages/api/posts/[...slug].ts", "/api/posts/:slug*"),
        ("pages/api/health/index.js", "/api/health"),
        ("app/api/users/helpers.ts", None),
        ("src/lib/api/users.ts", None),
    ],
)
def test_next_route_path(relative: str, expected) -> None:
    assert next_route_path(relative) == expected


def test_next_app_route_exports() -> None:
    file_index, content = _index(
        "app/api/users/[id]/route.ts",
        """
        export async function GET(request: Request) {
          return Response.json({});
        }
        """,
    )

    [endpoint] = next_routes(file_index, content)

    assert (endpoint.method, endpoint.path, endpoint.handler, endpoint.line) == (
        "GET",
        "/api/users/:id",
        "GET",
        1,
    )
    assert endpoint.file == "app/api/users/[id]/route.ts"


def test_next_multiple_verbs_and_default_export() -> None:
    verbs_index, verbs = _index(
        "app/api/items/route.ts",
        """
        export const POST = async (req: Request) => new Response();
        export async function GET() {}
        function DELETE() {}
        """,
    )
    default_index, default = _index(
        "pages/api/ping.js",
        """
        export default function handler(req, res) {
          res.status(200).end();
        }
        """,
    )

    assert [e.method for e in next_routes(verbs_index, verbs)] == ["GET", "POST"]
    [endpoint] = next_routes(default_index, default)
    assert (endpoint.method, endpoint.path, endpoint.line) == ("GET", "/api/ping", 1)


def test_detect_selects_rules_by_language() -> None:
    file_index, content = _index(
        "server.ts",
        """
        import express from 'express';
        const app = express();
        app.get('/ping', (req, res) => res.send('pong'));
        """,
    )

    findings = detect(file_index, content)

    assert [e.path for e in findings.endpoints] == ["/ping"]
    assert findings.tables == []
