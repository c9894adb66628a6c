"""Validation layer for resolver settings."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Sequence

from .config import AppConfig
from .extract import RegionMatcher
from .models import OUTPUT_LEVELS, BoundarySource

_HEX_COLOR_RE = re.compile(r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")

_CHAIN_LEVELS: dict[str, tuple[str, ...]] = {
    "country": ("country", "province"),
    "municipality": ("municipality",),
    "district": ("district",),
}


@dataclass(slots=True)
class ValidationReport:
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    infos: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    def add_error(self, msg: str) -> None:
        self.errors.append(msg)

    def add_warning(self, msg: str) -> None:
        self.warnings.append(msg)

    def add_info(self, msg: str) -> None:
        self.infos.append(msg)


class Validator:
    """Checks that go beyond what the typed config loader enforces."""

    def __init__(self, cfg: AppConfig) -> None:
        self.cfg = cfg

    def run(self) -> ValidationReport:
        report = ValidationReport()
        for chain, sources in self.cfg.chains.as_dict().items():
            self._validate_chain(report, chain, sources)
        for name in ("province", "municipality", "district"):
            self._validate_target(report, name, getattr(self.cfg.targets, name))
        self._validate_styles(report)
        self._validate_http(report)
        self._validate_paths(report)
        return report

    def _validate_chain(
        self,
        report: ValidationReport,
        chain: str,
        sources: Sequence[BoundarySource],
    ) -> None:
        allowed = _CHAIN_LEVELS[chain]
        for source in sources:
            if source.level not in allowed:
                report.add_error(
                    f"Source {source.source_id} in {chain} chain has level '{source.level}' "
                    f"(expected {' or '.join(allowed)})"
                )

        tiers = [source.tier for source in sources]
        if tiers != sorted(tiers):
            report.add_error(f"{chain} chain tiers must not decrease: {tiers}")

        urls = [source.url for source in sources]
        duplicates = sorted({url for url in urls if urls.count(url) > 1})
        for url in duplicates:
            report.add_warning(f"{chain} chain lists {url} more than once")

        if len(sources) < 2:
            report.add_warning(f"{chain} chain has a single source; any failure skips the level")

        report.add_info(
            f"{chain} chain: {len(sources)} sources, tiers {sorted(set(tiers))}"
        )

    def _validate_target(self, report: ValidationReport, name: str, matcher: RegionMatcher) -> None:
        keys = list(matcher.name_keys)
        if any(not key.strip() for key in keys):
            report.add_error(f"targets.{name}.keys contains a blank key")
        repeated = sorted({key for key in keys if keys.count(key) > 1})
        if repeated:
            report.add_warning(f"targets.{name}.keys lists {', '.join(repeated)} more than once")
        if matcher.hint is not None and matcher.hint.casefold() not in matcher.target.casefold():
            report.add_warning(
                f"targets.{name}.hint '{matcher.hint}' does not occur in target '{matcher.target}'"
            )

    def _validate_styles(self, report: ValidationReport) -> None:
        for level in OUTPUT_LEVELS:
            style = self.cfg.styles.for_level(level)
            for name, value in (("color", style.color), ("fill_color", style.fill_color)):
                if not _HEX_COLOR_RE.match(value):
                    report.add_warning(f"styles.{level}.{name} is not a hex color: {value}")

    def _validate_http(self, report: ValidationReport) -> None:
        timeout = self.cfg.http.request_timeout_s
        if timeout > 120:
            report.add_warning(
                f"http.request_timeout_s={timeout:.0f}s; a dead source delays startup by that much"
            )

    def _validate_paths(self, report: ValidationReport) -> None:
        for name, path in (("output_dir", self.cfg.paths.output_dir), ("logs_dir", self.cfg.paths.logs_dir)):
            if path.exists() and not path.is_dir():
                report.add_error(f"paths.{name} exists but is not a directory: {path}")
                continue
            existing = _nearest_existing(path)
            if not existing.is_dir() or not os.access(existing, os.W_OK):
                report.add_error(f"paths.{name} is not writable: {path} (checked {existing})")


def _nearest_existing(path: Path) -> Path:
    for candidate in (path, *path.parents):
        if candidate.exists():
            return candidate
    return path


def format_report_lines(report: ValidationReport) -> Sequence[str]:
    lines: list[str] = []
    lines.extend(f"[INFO] {msg}" for msg in report.infos)
    lines.extend(f"[WARN] {msg}" for msg in report.warnings)
    lines.extend(f"[ERROR] {msg}" for msg in report.errors)
    if report.ok:
        lines.append("[OK] Validation passed with no errors.")
    return lines
