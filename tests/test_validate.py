from __future__ import annotations

import dataclasses
from pathlib import Path

from mapstory.config import AppConfig, HttpConfig, PathsConfig
from mapstory.extract import RegionMatcher
from mapstory.models import BoundarySource, StyleIntent
from mapstory.validate import Validator, format_report_lines


def _source(source_id: str, level: str, tier: int = 1, url: str | None = None) -> BoundarySource:
    return BoundarySource(
        source_id=source_id,
        url=url or f"https://example.org/{source_id}.geojson",
        level=level,
        trust="official",
        tier=tier,
    )


def test_default_settings_validate_cleanly(cfg: AppConfig) -> None:
    report = Validator(cfg).run()
    assert report.ok
    assert report.warnings == []
    assert list(format_report_lines(report))[-1] == "[OK] Validation passed with no errors."


def test_chain_level_and_tier_errors(cfg: AppConfig) -> None:
    chains = dataclasses.replace(
        cfg.chains,
        country=(_source("c1", "country", tier=2), _source("c2", "country", tier=1)),
        municipality=(_source("m1", "district"),),
    )
    report = Validator(dataclasses.replace(cfg, chains=chains)).run()

    assert not report.ok
    assert any("tiers must not decrease" in err for err in report.errors)
    assert any("m1" in err and "expected municipality" in err for err in report.errors)
    assert any("single source" in warning for warning in report.warnings)


def test_duplicate_urls_warn(cfg: AppConfig) -> None:
    url = "https://example.org/same.geojson"
    chains = dataclasses.replace(
        cfg.chains,
        district=(_source("d1", "district", url=url), _source("d2", "district", url=url)),
    )
    report = Validator(dataclasses.replace(cfg, chains=chains)).run()
    assert report.ok
    assert any(url in warning for warning in report.warnings)


def test_style_and_timeout_warnings(cfg: AppConfig) -> None:
    styles = dataclasses.replace(
        cfg.styles,
        province=StyleIntent(color="blue", weight=3, opacity=1.0, fill_color="#60a5fa", fill_opacity=0.0),
    )
    http = HttpConfig(request_timeout_s=300.0, user_agent="x")
    report = Validator(dataclasses.replace(cfg, styles=styles, http=http)).run()

    assert report.ok
    assert any("styles.province.color" in warning for warning in report.warnings)
    assert any("request_timeout_s" in warning for warning in report.warnings)


def test_output_dir_must_be_a_directory(cfg: AppConfig, tmp_path: Path) -> None:
    blocker = tmp_path / "build"
    blocker.write_text("not a dir", encoding="utf-8")
    paths = PathsConfig(output_dir=blocker, logs_dir=tmp_path / "logs")
    report = Validator(dataclasses.replace(cfg, paths=paths)).run()
    assert any("paths.output_dir" in err for err in report.errors)


def test_output_dir_under_a_file_is_not_writable(cfg: AppConfig, tmp_path: Path) -> None:
    blocker = tmp_path / "build"
    blocker.write_text("not a dir", encoding="utf-8")
    paths = PathsConfig(output_dir=blocker / "page", logs_dir=tmp_path / "fresh" / "logs")
    report = Validator(dataclasses.replace(cfg, paths=paths)).run()

    assert any("paths.output_dir is not writable" in err for err in report.errors)
    assert not any("paths.logs_dir" in err for err in report.errors)


def test_target_key_and_hint_warnings(cfg: AppConfig) -> None:
    targets = dataclasses.replace(
        cfg.targets,
        municipality=RegionMatcher(target="nagarjun", name_keys=("NAME", "NAME"), hint="tokha"),
    )
    report = Validator(dataclasses.replace(cfg, targets=targets)).run()

    assert report.ok
    assert any("targets.municipality.keys lists NAME" in warning for warning in report.warnings)
    assert any("targets.municipality.hint 'tokha'" in warning for warning in report.warnings)
