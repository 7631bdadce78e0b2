"""Repository walking: which source files get indexed."""

from __future__ import annotations

import os
from dataclasses import dataclass
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Iterable, Iterator, List, Sequence

from .config import DEFAULT_EXCLUDE_PATHS, DEFAULT_MAX_FILE_SIZE, DEFAULT_OUTPUT_PATH
from .extractors import SUPPORTED_EXTENSIONS
from .logging import get_logger

logger = get_logger("repo_scanner")

_EXCLUDED_DIRS = {
    ".git",
    ".hg",
    ".svn",
    ".venv",
    "venv",
    "node_modules",
    "__pycache__",
    ".pytest_cache",
    ".mypy_cache",
    ".idea",
    ".next",
    DEFAULT_OUTPUT_PATH,
}


@dataclass
class IgnoreRule:
    """Represents an ignore rule parsed from .gitignore or .omen.yml."""

    pattern: str
    directory_only: bool
    anchored: bool
    negate: bool
    has_slash: bool

    def matches(self, rel_path: str, is_dir: bool) -> bool:
        if not self.pattern:
            return False
        if self.directory_only and not is_dir:
            return False

        if self.anchored or self.has_slash:
            if fnmatchcase(rel_path, self.pattern):
                return True
            return self.directory_only and rel_path.startswith(f"{self.pattern}/")

        return any(fnmatchcase(part, self.pattern) for part in rel_path.split("/"))


def build_ignore_rule(pattern: str, negate: bool = False) -> IgnoreRule | None:
    pattern = pattern.strip()
    if not pattern:
        return None

    directory_only = pattern.endswith("/")
    if directory_only:
        pattern = pattern[:-1]

    anchored = pattern.startswith("/")
    if anchored:
        pattern = pattern[1:]

    return IgnoreRule(
        pattern=pattern,
        directory_only=directory_only,
        anchored=anchored,
        negate=negate,
        has_slash="/" in pattern,
    )


def _parse_gitignore(path: Path) -> List[IgnoreRule]:
    if not path.exists():
        return []

    rules: List[IgnoreRule] = []
    for raw_line in path.read_text(encoding="utf-8", errors="ignore").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        negate = line.startswith("!")
        if negate:
            line = line[1:]
        rule = build_ignore_rule(line, negate=negate)
        if rule is not None:
            rules.append(rule)
    return rules


def _exclude_rules(patterns: Iterable[str]) -> List[IgnoreRule]:
    rules: List[IgnoreRule] = []
    for pattern in patterns:
        negate = pattern.startswith("!")
        rule = build_ignore_rule(pattern[1:] if negate else pattern, negate=negate)
        if rule is not None:
            rules.append(rule)
    return rules


def _should_ignore(rel_path: str, is_dir: bool, rules: Sequence[IgnoreRule]) -> bool:
    ignored = False
    for rule in rules:
        if rule.matches(rel_path, is_dir):
            ignored = not rule.negate
    return ignored


def _iter_files(root: Path, rules: Sequence[IgnoreRule]) -> Iterator[Path]:
    for dirpath, dirnames, filenames in os.walk(root):
        current_dir = Path(dirpath)
        rel_dir = current_dir.relative_to(root).as_posix() if current_dir != root else ""

        kept_dirs = []
        for name in sorted(dirnames):
            if name in _EXCLUDED_DIRS:
                continue
            rel_path = f"{rel_dir}/{name}" if rel_dir else name
            if _should_ignore(rel_path, True, rules):
                continue
            kept_dirs.append(name)
        dirnames[:] = kept_dirs

        for filename in sorted(filenames):
            rel_path = f"{rel_dir}/{filename}" if rel_dir else filename
            if _should_ignore(rel_path, False, rules):
                continue
            yield current_dir / filename


class RepoScanner:
    """Walks a repository and lists the source files worth indexing."""

    def __init__(
        self,
        exclude_paths: Sequence[str] = DEFAULT_EXCLUDE_PATHS,
        max_file_size: int = DEFAULT_MAX_FILE_SIZE,
        extensions: Iterable[str] = SUPPORTED_EXTENSIONS,
    ) -> None:
        self.exclude_paths = list(exclude_paths)
        self.max_file_size = max_file_size
        self.extensions = frozenset(extensions)

    def scan(self, root: str | Path) -> List[Path]:
        """Return supported files under ``root`` in a stable, sorted order."""
        root_path = Path(root).expanduser().resolve()
        if not root_path.exists():
            raise FileNotFoundError(f"Repository path not found: {root}")
        if not root_path.is_dir():
            raise NotADirectoryError(f"Repository path is not a directory: {root}")

        rules = _parse_gitignore(root_path / ".gitignore")
        rules.extend(_exclude_rules(self.exclude_paths))

        files: List[Path] = []
        for path in _iter_files(root_path, rules):
            if path.suffix.lower() not in self.extensions:
                continue
            try:
                size = path.stat().st_size
            except OSError as exc:
                logger.warning("Cannot stat %s: %s", path, exc)
                continue
            if size > self.max_file_size:
                logger.debug("Skipping %s (%d bytes exceeds limit)", path, size)
                continue
            files.append(path)
        return files


__all__ = ["IgnoreRule", "RepoScanner", "build_ignore_rule"]
