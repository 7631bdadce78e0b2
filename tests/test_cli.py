"""CLI parser and command behaviour tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from omen import cli
from omen.cli import _build_parser


def test_cli_accepts_verbose_before_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["--verbose", "generate"])
    assert args.verbose is True
    assert args.command == "generate"
    assert args.path == "."


def test_cli_accepts_verbose_after_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["generate", "-v"])
    assert args.verbose is True


def test_cli_generate_options() -> None:
    parser = _build_parser()
    args = parser.parse_args(
        ["generate", "repo", "--format", "both", "--output", "ctx", "--include-imports"]
    )
    assert args.path == "repo"
    assert args.output_format == "both"
    assert args.output_path == "ctx"
    assert args.include_imports is True


def test_cli_generate_defaults_leave_config_untouched() -> None:
    args = _build_parser().parse_args(["generate"])
    assert args.output_format is None
    assert args.output_path is None
    assert args.include_imports is None


def test_cli_rejects_unknown_format() -> None:
    with pytest.raises(SystemExit):
        _build_parser().parse_args(["generate", "--format", "html"])


def test_cli_serve_options() -> None:
    args = _build_parser().parse_args(["serve", "--host", "0.0.0.0", "--port", "9000"])
    assert (args.command, args.host, args.port) == ("serve", "0.0.0.0", 9000)


def test_generate_command_prints_summary(repo_builder, capsys) -> None:
    repo_builder.write({"app.py": "def main():\n    pass\n"})

    cli.main(["-q", "generate", str(repo_builder.path())])

    out = capsys.readouterr().out
    assert "Indexed 1 files, 1 functions, 0 classes" in out
    assert "AI_CONTEXT.md" in out
    assert (repo_builder.path() / ".omen-code-index" / "AI_CONTEXT.md").exists()


def test_generate_missing_path_exits_with_status_one(tmp_path: Path, capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["-q", "generate", str(tmp_path / "missing")])

    assert excinfo.value.code == 1
    assert "not found" in capsys.readouterr().err


def test_generate_bad_config_exits_with_status_one(repo_builder, capsys) -> None:
    repo_builder.write({".omen.yml": "output:\n  format: pdf\n"})

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["-q", "generate", str(repo_builder.path())])

    assert excinfo.value.code == 1
    assert "Invalid configuration" in capsys.readouterr().err
