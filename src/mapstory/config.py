"""Typed configuration loader for `config.yaml`."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, cast

import yaml

from .extract import RegionMatcher
from .models import OUTPUT_LEVELS, BoundarySource, StyleIntent
from .sources import DEFAULT_SETTINGS

VERIFIER_MODES = ("geometric", "coordinate_text")


def _mapping(value: Any, field_name: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise ValueError(f"Expected mapping for '{field_name}'")
    return cast(Mapping[str, Any], value)


def _str(value: Any, field_name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Expected non-empty string for '{field_name}'")
    return value.strip()


def _float(value: Any, field_name: str) -> float:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    raise ValueError(f"Expected float for '{field_name}'")


def _str_list(value: Any, field_name: str) -> tuple[str, ...]:
    if not isinstance(value, list):
        raise ValueError(f"Expected list for '{field_name}'")
    out: list[str] = []
    for idx, item in enumerate(value):
        out.append(_str(item, f"{field_name}[{idx}]"))
    return tuple(out)


def _path_from_cfg(value: Any, field_name: str, root_dir: Path) -> Path:
    raw = _str(value, field_name)
    p = Path(raw)
    return p if p.is_absolute() else root_dir / p


@dataclass(frozen=True, slots=True)
class HttpConfig:
    request_timeout_s: float
    user_agent: str

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> HttpConfig:
        timeout = _float(raw.get("request_timeout_s", 20.0), "http.request_timeout_s")
        if timeout <= 0:
            raise ValueError("http.request_timeout_s must be > 0")
        return cls(
            request_timeout_s=timeout,
            user_agent=_str(raw.get("user_agent"), "http.user_agent"),
        )


@dataclass(frozen=True, slots=True)
class ChainsConfig:
    country: tuple[BoundarySource, ...]
    municipality: tuple[BoundarySource, ...]
    district: tuple[BoundarySource, ...]

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> ChainsConfig:
        chains = cls(
            country=_source_list(raw.get("country"), "chains.country"),
            municipality=_source_list(raw.get("municipality"), "chains.municipality"),
            district=_source_list(raw.get("district"), "chains.district"),
        )
        seen: set[str] = set()
        for source in chains.all_sources:
            if source.source_id in seen:
                raise ValueError(f"Duplicate source id '{source.source_id}' in chains")
            seen.add(source.source_id)
        return chains

    @property
    def all_sources(self) -> tuple[BoundarySource, ...]:
        return (*self.country, *self.municipality, *self.district)

    def as_dict(self) -> dict[str, tuple[BoundarySource, ...]]:
        return {
            "country": self.country,
            "municipality": self.municipality,
            "district": self.district,
        }


def _source_list(value: Any, field_name: str) -> tuple[BoundarySource, ...]:
    if not isinstance(value, list) or not value:
        raise ValueError(f"Expected non-empty list for '{field_name}'")
    sources: list[BoundarySource] = []
    for idx, item in enumerate(value):
        entry = _mapping(item, f"{field_name}[{idx}]")
        try:
            sources.append(BoundarySource.from_mapping(entry))
        except ValueError as exc:
            raise ValueError(f"Invalid {field_name}[{idx}]: {exc}") from exc
    return tuple(sources)


@dataclass(frozen=True, slots=True)
class TargetsConfig:
    province: RegionMatcher
    municipality: RegionMatcher
    district: RegionMatcher

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> TargetsConfig:
        return cls(
            province=_matcher(raw.get("province"), "targets.province"),
            municipality=_matcher(raw.get("municipality"), "targets.municipality"),
            district=_matcher(raw.get("district"), "targets.district"),
        )


def _matcher(value: Any, field_name: str) -> RegionMatcher:
    raw = _mapping(value, field_name)
    aliases_raw = raw.get("aliases")
    hint_raw = raw.get("hint")
    return RegionMatcher(
        target=_str(raw.get("target"), f"{field_name}.target"),
        name_keys=_str_list(raw.get("keys"), f"{field_name}.keys"),
        aliases=_str_list(aliases_raw, f"{field_name}.aliases") if aliases_raw is not None else (),
        hint=_str(hint_raw, f"{field_name}.hint") if hint_raw is not None else None,
    )


@dataclass(frozen=True, slots=True)
class StylesConfig:
    country: StyleIntent
    province: StyleIntent
    municipality: StyleIntent

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> StylesConfig:
        return cls(
            country=StyleIntent.from_mapping(_mapping(raw.get("country"), "styles.country"), "styles.country"),
            province=StyleIntent.from_mapping(_mapping(raw.get("province"), "styles.province"), "styles.province"),
            municipality=StyleIntent.from_mapping(
                _mapping(raw.get("municipality"), "styles.municipality"), "styles.municipality"
            ),
        )

    def for_level(self, level: str) -> StyleIntent:
        if level not in OUTPUT_LEVELS:
            raise KeyError(level)
        return cast(StyleIntent, getattr(self, level))


@dataclass(frozen=True, slots=True)
class VerifierConfig:
    mode: str

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> VerifierConfig:
        mode = _str(raw.get("mode", "geometric"), "verifier.mode").casefold()
        if mode not in VERIFIER_MODES:
            raise ValueError("verifier.mode must be one of: " + ", ".join(VERIFIER_MODES))
        return cls(mode=mode)


@dataclass(frozen=True, slots=True)
class PathsConfig:
    output_dir: Path
    logs_dir: Path

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any], root_dir: Path) -> PathsConfig:
        return cls(
            output_dir=_path_from_cfg(raw.get("output_dir"), "paths.output_dir", root_dir),
            logs_dir=_path_from_cfg(raw.get("logs_dir"), "paths.logs_dir", root_dir),
        )

    @property
    def boundaries_geojson(self) -> Path:
        return self.output_dir / "boundaries.geojson"

    @property
    def resolution_report(self) -> Path:
        return self.output_dir / "resolution_report.json"


@dataclass(frozen=True, slots=True)
class AppConfig:
    source_path: Path | None
    http: HttpConfig
    chains: ChainsConfig
    targets: TargetsConfig
    styles: StylesConfig
    verifier: VerifierConfig
    paths: PathsConfig

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any], source_path: Path | None) -> AppConfig:
        root_dir = source_path.parent.resolve() if source_path is not None else Path.cwd()
        verifier_raw = raw.get("verifier")
        return cls(
            source_path=source_path.resolve() if source_path is not None else None,
            http=HttpConfig.from_mapping(_mapping(raw.get("http"), "http")),
            chains=ChainsConfig.from_mapping(_mapping(raw.get("chains"), "chains")),
            targets=TargetsConfig.from_mapping(_mapping(raw.get("targets"), "targets")),
            styles=StylesConfig.from_mapping(_mapping(raw.get("styles"), "styles")),
            verifier=VerifierConfig.from_mapping(
                {} if verifier_raw is None else _mapping(verifier_raw, "verifier")
            ),
            paths=PathsConfig.from_mapping(_mapping(raw.get("paths"), "paths"), root_dir),
        )


def default_config() -> AppConfig:
    """Settings built from the hardcoded source catalogue."""
    return AppConfig.from_mapping(DEFAULT_SETTINGS, None)


def load_config(path: str | Path | None = None) -> AppConfig:
    """Load and validate the YAML config file into typed settings.

    Without a path the built-in defaults are returned.
    """
    if path is None:
        return default_config()
    cfg_path = Path(path).resolve()
    if not cfg_path.exists():
        raise FileNotFoundError(f"Config file not found: {cfg_path}")
    with cfg_path.open("r", encoding="utf-8") as fh:
        raw = yaml.safe_load(fh)
    if not isinstance(raw, Mapping):
        raise ValueError("Top-level config must be a YAML mapping")
    return AppConfig.from_mapping(cast(Mapping[str, Any], raw), cfg_path)
