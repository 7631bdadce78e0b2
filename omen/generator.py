"""Index generation: scan, extract, detect and write context files."""

from __future__ import annotations

from dataclasses import replace
from datetime import UTC, datetime
from pathlib import Path
from typing import Callable, List, Optional

from .config import ExtractOptions, OmenConfig, load_config
from .detectors import Findings, detect
from .extractors import ExtractorRegistry
from .logging import get_logger
from .models import FileIndex, GenerationResult, ProjectIndex
from .renderers import JSON_FILENAME, MARKDOWN_FILENAME, render_json, render_markdown
from .repo_scanner import RepoScanner

_OUTPUT_GITIGNORE = "*\n!.gitignore\n"


class IndexGenerator:
    """Coordinates a single indexing run over a repository."""

    def __init__(
        self,
        registry: ExtractorRegistry | None = None,
        scanner_factory: Callable[[OmenConfig], RepoScanner] | None = None,
    ) -> None:
        # Imports are always extracted; _apply_options strips them per config.
        self.registry = registry or ExtractorRegistry(ExtractOptions(include_imports=True))
        self.scanner_factory = scanner_factory or _default_scanner
        self.logger = get_logger("generator")

    def load_config(self, root: str | Path) -> OmenConfig:
        return load_config(Path(root).expanduser().resolve())

    def build_index(self, root: str | Path, config: OmenConfig | None = None) -> ProjectIndex:
        """Index every supported file under ``root``.

        A failure in one file is logged and that file is left out; the run
        continues with the next file.
        """
        root_path = Path(root).expanduser().resolve()
        config = config or self.load_config(root_path)
        scanner = self.scanner_factory(config)
        paths = scanner.scan(root_path)
        self.logger.debug("Scanner discovered %d files", len(paths))

        index = ProjectIndex(
            project_name=root_path.name,
            generated=datetime.now(UTC).isoformat(),
        )
        findings = Findings()
        for path in paths:
            try:
                content = path.read_text(encoding="utf-8")
                file_index = self.registry.parse_file(str(path), content, str(root_path))
                file_findings = detect(file_index, content)
            except Exception as exc:  # noqa: BLE001
                self.logger.warning("Failed to index %s: %s", path, exc)
                continue

            findings.merge(file_findings)
            file_index = _apply_options(file_index, config)
            index.files.append(file_index)
            index.function_count += len(file_index.functions)
            index.class_count += len(file_index.classes)

        index.file_count = len(index.files)
        index.tech_stack = sorted(findings.technologies)
        index.api_endpoints = findings.endpoints
        index.db_schema = findings.tables
        self.logger.info(
            "Indexed %d files (%d functions, %d classes, %d endpoints, %d tables)",
            index.file_count,
            index.function_count,
            index.class_count,
            len(index.api_endpoints),
            len(index.db_schema),
        )
        return index

    def write_outputs(self, index: ProjectIndex, config: OmenConfig) -> List[Path]:
        output_dir = config.output_dir
        output_dir.mkdir(parents=True, exist_ok=True)
        if output_dir != config.root:
            gitignore = output_dir / ".gitignore"
            if not gitignore.exists():
                gitignore.write_text(_OUTPUT_GITIGNORE, encoding="utf-8")

        outputs: List[Path] = []
        if config.output_format in ("markdown", "both"):
            target = output_dir / MARKDOWN_FILENAME
            target.write_text(render_markdown(index), encoding="utf-8")
            outputs.append(target)
        if config.output_format in ("json", "both"):
            target = output_dir / JSON_FILENAME
            target.write_text(render_json(index), encoding="utf-8")
            outputs.append(target)
        for target in outputs:
            self.logger.info("Wrote %s", target)
        return outputs

    def generate(
        self,
        root: str | Path,
        *,
        output_path: Optional[str] = None,
        output_format: Optional[str] = None,
        include_imports: Optional[bool] = None,
    ) -> GenerationResult:
        """Build the index for ``root`` and write the configured outputs."""
        root_path = Path(root).expanduser().resolve()
        if not root_path.exists():
            raise FileNotFoundError(f"Repository path not found: {root}")
        config = self.load_config(root_path).with_overrides(
            output_path=output_path,
            output_format=output_format,
            include_imports=include_imports,
        )
        index = self.build_index(root_path, config)
        outputs = self.write_outputs(index, config)
        return GenerationResult(
            file_count=index.file_count,
            function_count=index.function_count,
            class_count=index.class_count,
            outputs=outputs,
        )


def _default_scanner(config: OmenConfig) -> RepoScanner:
    return RepoScanner(scan_excludes(config), config.max_file_size)


def scan_excludes(config: OmenConfig) -> List[str]:
    """Configured excludes plus the output directory."""
    excludes = list(config.exclude_paths)
    if config.output_path not in ("", "."):
        excludes.append(f"/{config.output_path.strip('/')}/")
    return excludes


def _apply_options(file_index: FileIndex, config: OmenConfig) -> FileIndex:
    """Drop record kinds the configuration turned off."""
    changes = {}
    if not config.include_imports:
        changes["imports"] = []
    if not config.include_classes:
        changes["classes"] = []
    if not config.include_interfaces:
        changes["interfaces"] = []
    return replace(file_index, **changes) if changes else file_index


__all__ = ["IndexGenerator", "scan_excludes"]
