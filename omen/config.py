"""Configuration loading for omen (.omen.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

CONFIG_FILENAME = ".omen.yml"

OUTPUT_FORMATS = ("markdown", "json", "both")

DEFAULT_OUTPUT_PATH = ".omen-code-index"
DEFAULT_MAX_FILE_SIZE = 1024 * 1024
DEFAULT_EXCLUDE_PATHS = (
    "node_modules/",
    "dist/",
    "build/",
    "*.test.*",
    "*.spec.*",
)


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed or is invalid."""


@dataclass(frozen=True)
class ExtractOptions:
    """Resolved switches the extractors read; never raw settings."""

    include_classes: bool = True
    include_interfaces: bool = True
    include_imports: bool = False


@dataclass
class OmenConfig:
    """Represents the settings defined in .omen.yml, with defaults applied."""

    root: Path
    output_path: str = DEFAULT_OUTPUT_PATH
    output_format: str = "markdown"
    include_classes: bool = True
    include_interfaces: bool = True
    include_imports: bool = False
    exclude_paths: List[str] = field(default_factory=lambda: list(DEFAULT_EXCLUDE_PATHS))
    max_file_size: int = DEFAULT_MAX_FILE_SIZE

    @property
    def output_dir(self) -> Path:
        if self.output_path in ("", "."):
            return self.root
        return self.root / self.output_path

    def with_overrides(
        self,
        *,
        output_path: Optional[str] = None,
        output_format: Optional[str] = None,
        include_imports: Optional[bool] = None,
    ) -> "OmenConfig":
        """Return a copy with CLI/service overrides applied on top."""
        changes: Dict[str, Any] = {}
        if output_path is not None:
            changes["output_path"] = output_path
        if output_format is not None:
            changes["output_format"] = _validate_format(output_format)
        if include_imports is not None:
            changes["include_imports"] = include_imports
        return replace(self, **changes) if changes else self


def load_config(config_path: Path) -> OmenConfig:
    """Load configuration from disk, returning defaults when no file exists."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return OmenConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    config = OmenConfig(root=root)

    output_data = _as_dict(data.get("output"))
    if output_data:
        path = _as_str(output_data.get("path"))
        if path is not None:
            config.output_path = path
        fmt = _as_str(output_data.get("format"))
        if fmt is not None:
            config.output_format = _validate_format(fmt)

    index_data = _as_dict(data.get("index"))
    if index_data:
        config.include_classes = _as_bool(index_data.get("classes"), config.include_classes)
        config.include_interfaces = _as_bool(
            index_data.get("interfaces"), config.include_interfaces
        )
        config.include_imports = _as_bool(index_data.get("imports"), config.include_imports)

    scan_data = _as_dict(data.get("scan"))
    if scan_data:
        if "exclude_paths" in scan_data:
            config.exclude_paths = _as_str_list(scan_data.get("exclude_paths"))
        size = _as_int(scan_data.get("max_file_size"))
        if size is not None:
            if size <= 0:
                raise ConfigError("scan.max_file_size must be a positive integer")
            config.max_file_size = size

    return config


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.name != CONFIG_FILENAME:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Any:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _validate_format(value: str) -> str:
    lowered = value.strip().lower()
    if lowered not in OUTPUT_FORMATS:
        allowed = ", ".join(OUTPUT_FORMATS)
        raise ConfigError(f"Unknown output format '{value}' (expected one of: {allowed})")
    return lowered


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_bool(value: Any, default: bool) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return default


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []


__all__ = [
    "CONFIG_FILENAME",
    "ConfigError",
    "ExtractOptions",
    "OUTPUT_FORMATS",
    "OmenConfig",
    "load_config",
]
