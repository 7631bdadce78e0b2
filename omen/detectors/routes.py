"""Route rules: map framework conventions to :class:`ApiEndpoint` records."""

from __future__ import annotations

import re
from typing import List, Optional, Sequence, Tuple

from ..models import ApiEndpoint, FileIndex
from .core import has_any, join_paths, line_of

HTTP_VERBS = ("GET", "POST", "PUT", "PATCH", "DELETE")

# ---------------------------------------------------------------------------
# Python: route decorators (Flask style)
# ---------------------------------------------------------------------------

_DECORATOR_WINDOW = 10
_ROUTE_DECORATOR = re.compile(
    r"^\s*@(?:\w+\.)+(route|get|post|put|patch|delete)\(\s*[rbu]?['\"]([^'\"]*)['\"]"
)
_METHODS_LIST = re.compile(r"methods\s*=\s*[\[(]([^\])]*)[\])]")
_QUOTED_WORD = re.compile(r"['\"](\w+)['\"]")
_HEADER_LINE = re.compile(r"^\s*(?:async\s+def|def|class)\s")
_PYTHON_AUTH_MARKERS = (
    "@jwt_required",
    "@login_required",
    "@auth_required",
    "@token_required",
    "@requires_auth",
)


def decorator_routes(file_index: FileIndex, content: str) -> List[ApiEndpoint]:
    """Endpoints declared with ``@app.route`` or ``@bp.get`` style decorators."""
    lines = content.splitlines()
    auth_in_file = has_any(content, _PYTHON_AUTH_MARKERS)
    endpoints: List[ApiEndpoint] = []
    for function in file_index.functions:
        route = _scan_decorators(lines, function.line)
        if route is None:
            continue
        path, methods = route
        auth = auth_in_file or "auth" in (function.description or "").lower()
        for method in methods:
            endpoints.append(
                ApiEndpoint(
                    method=method,
                    path=path,
                    handler=function.name,
                    file=file_index.relative_path,
                    line=function.line,
                    auth=auth,
                )
            )
    return endpoints


def _scan_decorators(lines: Sequence[str], line: int) -> Optional[Tuple[str, List[str]]]:
    """Walk upwards from a ``def`` line collecting the nearest route decorator."""
    path: Optional[str] = None
    verb = "ROUTE"
    methods: Optional[List[str]] = None
    lowest = max(0, line - 1 - _DECORATOR_WINDOW)
    for index in range(min(line - 2, len(lines) - 1), lowest - 1, -1):
        text = lines[index]
        if _HEADER_LINE.match(text):
            break
        if path is None:
            match = _ROUTE_DECORATOR.match(text)
            if match:
                verb, path = match.group(1).upper(), match.group(2)
        if methods is None:
            listed = _METHODS_LIST.search(text)
            if listed:
                methods = [word.upper() for word in _QUOTED_WORD.findall(listed.group(1))]
    if path is None:
        return None
    if not methods:
        methods = ["GET"] if verb == "ROUTE" else [verb]
    return path, methods


# ---------------------------------------------------------------------------
# Python: REST framework views
# ---------------------------------------------------------------------------

_API_VIEW = re.compile(
    r"@api_view\(\s*(?:[\[(]([^\])]*)[\])])?[^)]*\)[ \t]*\n"
    r"(?:[ \t]*@[^\n]*\n)*"
    r"[ \t]*(?:async\s+)?def\s+(\w+)"
)
_CLASS_BASES = re.compile(r"^class\s+(\w+)\s*\(([^)]*)\)\s*:", re.MULTILINE)
_VIEW_HANDLERS = {"get", "post", "put", "patch", "delete"}
_DRF_AUTH_MARKERS = (
    "IsAuthenticated",
    "permission_classes",
    "@login_required",
    "LoginRequiredMixin",
)


def rest_framework_routes(file_index: FileIndex, content: str) -> List[ApiEndpoint]:
    """Function views under ``@api_view`` and methods of ``*View`` subclasses."""
    auth = has_any(content, _DRF_AUTH_MARKERS)
    endpoints: List[ApiEndpoint] = []

    for match in _API_VIEW.finditer(content):
        listed = match.group(1)
        methods = [word.upper() for word in _QUOTED_WORD.findall(listed or "")] or ["GET"]
        name = match.group(2)
        for method in methods:
            endpoints.append(
                ApiEndpoint(
                    method=method,
                    path=f"/{name}/",
                    handler=name,
                    file=file_index.relative_path,
                    line=line_of(content, match.start(2)),
                    auth=auth,
                )
            )

    classes = {record.name: record for record in reversed(file_index.classes)}
    for match in _CLASS_BASES.finditer(content):
        name, bases = match.group(1), match.group(2)
        if not any(base.strip().split(".")[-1].endswith("View") for base in bases.split(",")):
            continue
        record = classes.get(name)
        if record is None:
            continue
        for method in record.methods:
            if method.name not in _VIEW_HANDLERS:
                continue
            endpoints.append(
                ApiEndpoint(
                    method=method.name.upper(),
                    path=f"/{name.lower()}/",
                    handler=f"{name}.{method.name}",
                    file=file_index.relative_path,
                    line=method.line,
                    auth=auth,
                )
            )
    return endpoints


# ---------------------------------------------------------------------------
# TS/JS: Express style router calls
# ---------------------------------------------------------------------------

_EXPRESS_CALL = re.compile(
    r"\b(?:app|router)\.(get|post|put|patch|delete)\s*\(\s*(['\"`])([^'\"`]+)\2"
)
_EXPRESS_AUTH_MARKERS = (
    "authenticate",
    "requireAuth",
    "isAuthenticated",
    "verifyToken",
    "authMiddleware",
    "jwt.verify",
)


def express_routes(file_index: FileIndex, content: str) -> List[ApiEndpoint]:
    auth = has_any(content, _EXPRESS_AUTH_MARKERS)
    return [
        ApiEndpoint(
            method=match.group(1).upper(),
            path=match.group(3),
            handler="anonymous",
            file=file_index.relative_path,
            line=line_of(content, match.start()),
            auth=auth,
        )
        for match in _EXPRESS_CALL.finditer(content)
    ]


# ---------------------------------------------------------------------------
# TS/JS: NestJS controllers
# ---------------------------------------------------------------------------

_CONTROLLER = re.compile(r"@Controller\(\s*(?:(['\"`])([^'\"`]*)\1)?")
_NEST_ROUTE = re.compile(r"@(Get|Post|Put|Patch|Delete)\(\s*(?:(['\"`])([^'\"`]*)\2)?\s*\)")
_METHOD_SIGNATURE = re.compile(
    r"^[ \t]*(?:(?:public|private|protected|static|async)\s+)*([A-Za-z_$][\w$]*)\s*\(",
    re.MULTILINE,
)


def nest_routes(file_index: FileIndex, content: str) -> List[ApiEndpoint]:
    controller = _CONTROLLER.search(content)
    if controller is None:
        return []
    base = controller.group(2) or ""
    auth = "@UseGuards" in content or "AuthGuard" in content
    endpoints: List[ApiEndpoint] = []
    for match in _NEST_ROUTE.finditer(content):
        signature = _METHOD_SIGNATURE.search(content, match.end())
        endpoints.append(
            ApiEndpoint(
                method=match.group(1).upper(),
                path=join_paths(base, match.group(3) or ""),
                handler=signature.group(1) if signature else "anonymous",
                file=file_index.relative_path,
                line=line_of(content, match.start()),
                auth=auth,
            )
        )
    return endpoints


# ---------------------------------------------------------------------------
# TS/JS: Next.js API route files
# ---------------------------------------------------------------------------

_NEXT_ROUTE_FILE = re.compile(r"(?:^|/)(app|pages)/api/(.+)$")
_DYNAMIC_SEGMENT = re.compile(r"\[\[?(\.\.\.)?(\w+)\]?\]")
_ROUTE_GROUP = re.compile(r"^\(.*\)$")
_DEFAULT_EXPORT = re.compile(r"^\s*export\s+default\b", re.MULTILINE)
_NEXT_AUTH_MARKERS = ("getServerSession", "getToken", "auth(", "withAuth")


def next_route_path(relative_path: str) -> Optional[str]:
    """Translate a file path under ``app/api`` or ``pages/api`` into a URL path.

    ``app`` router files only count when named ``route.<ext>``; ``index`` files
    map to their directory. ``[id]`` becomes ``:id`` and ``[...slug]`` becomes
    ``:slug*``.
    """
    match = _NEXT_ROUTE_FILE.search(relative_path)
    if match is None:
        return None
    router, rest = match.group(1), match.group(2)
    segments = rest.rsplit(".", 1)[0].split("/")
    if router == "app":
        if segments[-1] != "route":
            return None
        segments = segments[:-1]
    elif segments[-1] == "index":
        segments = segments[:-1]
    converted = ["api"]
    for segment in segments:
        if _ROUTE_GROUP.match(segment):
            continue
        dynamic = _DYNAMIC_SEGMENT.fullmatch(segment)
        if dynamic:
            segment = f":{dynamic.group(2)}{'*' if dynamic.group(1) else ''}"
        converted.append(segment)
    return "/" + "/".join(converted)


def next_routes(file_index: FileIndex, content: str) -> List[ApiEndpoint]:
    path = next_route_path(file_index.relative_path)
    if path is None:
        return []
    auth = has_any(content, _NEXT_AUTH_MARKERS)
    exported = {function.name for function in file_index.functions if function.is_exported}
    handlers = [verb for verb in HTTP_VERBS if verb in exported]
    if not handlers:
        if not _DEFAULT_EXPORT.search(content):
            return []
        return [
            ApiEndpoint(
                method="GET",
                path=path,
                handler="default",
                file=file_index.relative_path,
                line=1,
                auth=auth,
            )
        ]
    return [
        ApiEndpoint(
            method=verb,
            path=path,
            handler=verb,
            file=file_index.relative_path,
            line=1,
            auth=auth,
        )
        for verb in handlers
    ]


__all__ = [
    "HTTP_VERBS",
    "decorator_routes",
    "express_routes",
    "nest_routes",
    "next_route_path",
    "next_routes",
    "rest_framework_routes",
]
