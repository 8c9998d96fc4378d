"""CLI entrypoints for i18nscan commands."""

from __future__ import annotations

import argparse
import dataclasses
import json
import sys
from pathlib import Path

from .config import ConfigError, ScanConfig, load_config
from .logging import configure_logging, get_logger
from .models import ScanResult
from .scanner import Scanner


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    kwargs["default"] = argparse.SUPPRESS if suppress_default else False
    parser.add_argument("-v", "--verbose", **kwargs)


def _add_config_option(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        help="Path to a .i18nscan.yml file (defaults to the one in the project root).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="i18nscan",
        description="Find hard-coded text, missing and unused keys, and broken ICU messages.",
    )
    _add_verbose_option(parser)
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Only log warnings and errors.",
    )
    parser.add_argument(
        "--log-file",
        help="Also write debug-level logs to this file.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    scan_parser = subparsers.add_parser("scan", help="Scan a whole project.")
    _add_verbose_option(scan_parser, suppress_default=True)
    _add_config_option(scan_parser)
    scan_parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Path to the project root (defaults to current directory).",
    )
    scan_parser.add_argument(
        "--output",
        "-o",
        help="Write the JSON result to this file instead of stdout.",
    )
    scan_parser.add_argument(
        "--workers",
        type=int,
        default=1,
        help="Number of files parsed in parallel.",
    )

    check_parser = subparsers.add_parser("check-file", help="Scan a single file.")
    _add_verbose_option(check_parser, suppress_default=True)
    _add_config_option(check_parser)
    check_parser.add_argument("file", help="Source file to scan.")
    check_parser.add_argument(
        "--root",
        default=".",
        help="Project root holding .i18nscan.yml (defaults to current directory).",
    )

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP service.")
    _add_verbose_option(serve_parser, suppress_default=True)
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)

    return parser


def _load(root_arg: str, config_arg: str | None) -> ScanConfig:
    root = Path(root_arg).expanduser().resolve()
    if config_arg is None:
        return load_config(root)
    config = load_config(Path(config_arg))
    return dataclasses.replace(config, root=root)


def _emit(result: ScanResult, output: str | None) -> None:
    payload = json.dumps(result.to_dict(), indent=2)
    if output is None:
        print(payload)
        return
    output_path = Path(output)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(payload + "\n", encoding="utf-8")


def _failed(result: ScanResult) -> bool:
    return result.has_errors or not result.coverage.overall.budget_met


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for i18nscan commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(
        verbose=bool(args.verbose),
        quiet=args.quiet,
        log_file=Path(args.log_file).expanduser() if args.log_file else None,
    )
    logger = get_logger("cli")

    if args.command == "serve":
        from .service.app import run_service

        run_service(host=args.host, port=args.port)
        return

    try:
        if args.command == "scan":
            scanner = Scanner(_load(args.path, args.config), workers=args.workers)
            result = scanner.scan()
            _emit(result, args.output)
        elif args.command == "check-file":
            scanner = Scanner(_load(args.root, args.config))
            result = scanner.scan_single_file(Path(args.file).expanduser().resolve())
            _emit(result, None)
        else:  # pragma: no cover - argparse enforces choices
            parser.exit(1, "Unknown command\n")
    except ConfigError as exc:
        parser.exit(2, f"i18nscan: configuration error: {exc}\n")

    summary = result.summary
    logger.info(
        "%d hard-coded, %d missing, %d unused, %d ICU errors in %d files (%dms)",
        summary.hard_coded,
        summary.missing,
        summary.unused,
        summary.icu_errors,
        summary.total_files,
        summary.scan_time,
    )
    if _failed(result):
        parser.exit(1)


if __name__ == "__main__":
    main(sys.argv[1:])
