"""CLI entrypoints for omen commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .config import OUTPUT_FORMATS, ConfigError
from .generator import IndexGenerator
from .logging import configure_logging


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    kwargs["default"] = argparse.SUPPRESS if suppress_default else False
    parser.add_argument("-v", "--verbose", **kwargs)


def _add_quiet_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        default=argparse.SUPPRESS if suppress_default else False,
        help="Only report warnings and errors.",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="omen",
        description="Index a codebase into an AI-readable context document.",
    )
    _add_verbose_option(parser)
    _add_quiet_option(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    generate_parser = subparsers.add_parser(
        "generate",
        help="Scan a repository and write AI_CONTEXT files.",
    )
    _add_verbose_option(generate_parser, suppress_default=True)
    _add_quiet_option(generate_parser, suppress_default=True)
    generate_parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Path to the repository root (defaults to current directory).",
    )
    generate_parser.add_argument(
        "--format",
        dest="output_format",
        choices=OUTPUT_FORMATS,
        default=None,
        help="Output format; overrides output.format in .omen.yml.",
    )
    generate_parser.add_argument(
        "--output",
        dest="output_path",
        default=None,
        help="Output directory relative to the repository root.",
    )
    generate_parser.add_argument(
        "--include-imports",
        action="store_true",
        default=None,
        help="Include import records in the generated index.",
    )

    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the HTTP service.",
    )
    _add_verbose_option(serve_parser, suppress_default=True)
    _add_quiet_option(serve_parser, suppress_default=True)
    serve_parser.add_argument("--host", default="127.0.0.1", help="Interface to bind.")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port to listen on.")

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for omen commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), quiet=bool(args.quiet))

    if args.command == "generate":
        generator = IndexGenerator()
        try:
            result = generator.generate(
                args.path,
                output_path=args.output_path,
                output_format=args.output_format,
                include_imports=args.include_imports,
            )
        except (FileNotFoundError, NotADirectoryError) as exc:
            parser.exit(1, f"{exc}\n")
        except ConfigError as exc:
            parser.exit(1, f"Invalid configuration: {exc}\n")
        print(
            f"Indexed {result.file_count} files, {result.function_count} functions, "
            f"{result.class_count} classes"
        )
        for output in result.outputs:
            print(f"Wrote {_relativize(output)}")
    elif args.command == "serve":
        from .service import run_service

        run_service(host=args.host, port=args.port)
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _relativize(path: Path) -> str:
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
