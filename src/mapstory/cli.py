"""CLI entrypoint for the map story boundary resolver."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Sequence

from .config import AppConfig, load_config
from .export import write_boundaries_geojson, write_resolution_report
from .resolver import format_resolution_lines, resolve_boundaries
from .util import setup_logging, sha256_file
from .validate import Validator, format_report_lines

LOGGER = logging.getLogger("mapstory.cli")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mapstory",
        description="Resolve administrative boundaries for the Nagarjun map story.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    def add_common(p: argparse.ArgumentParser) -> None:
        p.add_argument(
            "--config",
            default=None,
            help="Path to YAML config. Built-in source list is used when omitted.",
        )
        p.add_argument("--verbose", action="store_true", help="Enable debug logs.")

    resolve_p = subparsers.add_parser(
        "resolve",
        help="Run the source chains and write the boundaries GeoJSON.",
    )
    add_common(resolve_p)
    resolve_p.add_argument(
        "--output",
        default=None,
        help="GeoJSON output path (default: <output_dir>/boundaries.geojson).",
    )
    resolve_p.add_argument(
        "--require-complete",
        action="store_true",
        help="Exit with status 1 when the static fallback had to be used.",
    )

    validate_p = subparsers.add_parser("validate", help="Validate resolver settings.")
    add_common(validate_p)

    sources_p = subparsers.add_parser("sources", help="List the ordered source chains.")
    add_common(sources_p)

    return parser


def _load_and_setup(args: argparse.Namespace) -> AppConfig:
    cfg = load_config(args.config)
    log_path = cfg.paths.logs_dir / "resolve.log" if args.command == "resolve" else None
    setup_logging(log_path, verbose=args.verbose)
    return cfg


def _run_validate(cfg: AppConfig) -> int:
    report = Validator(cfg).run()
    for line in format_report_lines(report):
        LOGGER.info(line)
    return 0 if report.ok else 1


def _run_sources(cfg: AppConfig) -> int:
    for chain, sources in cfg.chains.as_dict().items():
        LOGGER.info("%s chain:", chain)
        for idx, source in enumerate(sources, start=1):
            LOGGER.info("  %d. %s", idx, source.describe())
    return 0


def _run_resolve(cfg: AppConfig, *, output: Path | None, require_complete: bool) -> int:
    validation = Validator(cfg).run()
    for line in format_report_lines(validation):
        LOGGER.info(line)
    if not validation.ok:
        LOGGER.error("Resolution aborted due to validation errors.")
        return 1

    result, report = resolve_boundaries(cfg)
    if cfg.source_path is not None:
        report.summary["config_sha256"] = sha256_file(cfg.source_path)
    for line in format_resolution_lines(report):
        LOGGER.info(line)

    geojson_path = write_boundaries_geojson(output or cfg.paths.boundaries_geojson, result)
    LOGGER.info("Boundaries GeoJSON written to %s", geojson_path)
    report_path = write_resolution_report(cfg.paths.resolution_report, report)
    LOGGER.info("Resolution report written to %s", report_path)

    if require_complete and not result.complete:
        LOGGER.error("Static fallback boundaries were used (--require-complete).")
        return 1
    return 0


def _dispatch(args: argparse.Namespace) -> int:
    cfg = _load_and_setup(args)
    command = str(args.command)
    if command == "resolve":
        output = Path(args.output) if args.output else None
        return _run_resolve(cfg, output=output, require_complete=bool(args.require_complete))
    if command == "validate":
        return _run_validate(cfg)
    if command == "sources":
        return _run_sources(cfg)
    raise ValueError(f"Unknown command: {command}")


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    return _dispatch(args)


if __name__ == "__main__":
    raise SystemExit(main())
