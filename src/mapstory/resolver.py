"""Boundary resolution: ordered source chains with a static last resort."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Callable, Iterator, Sequence

import requests

from .config import AppConfig, default_config
from .extract import RegionMatcher, find_region, sample_names
from .fallback import NEPAL_POLYGON, fallback_boundaries
from .fetch import BoundarySourceError, GeoJsonFetcher
from .models import (
    PROVENANCE_DISTRICT_PROXY,
    BoundaryDataset,
    BoundaryFeature,
    BoundarySource,
    Polygon,
    ResolvedBoundaries,
    ResolvedBoundary,
)
from .verify import includes_contested_territory

_LOGGER = logging.getLogger("mapstory.resolver")

COUNTRY_LABEL = "Nepal"

FetchFn = Callable[[BoundarySource], BoundaryDataset]


@dataclass(frozen=True, slots=True)
class SourceAttempt:
    """One fetch of one source during a resolution pass."""

    chain: str
    source_id: str
    url: str
    trust: str
    tier: int
    outcome: str
    detail: str = ""
    feature_count: int | None = None

    @property
    def ok(self) -> bool:
        return self.outcome == "ok"

    def to_dict(self) -> dict[str, Any]:
        return {
            "chain": self.chain,
            "source_id": self.source_id,
            "url": self.url,
            "trust": self.trust,
            "tier": self.tier,
            "outcome": self.outcome,
            "detail": self.detail,
            "feature_count": self.feature_count,
        }


@dataclass(slots=True)
class ResolutionReport:
    attempts: list[SourceAttempt] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    infos: list[str] = field(default_factory=list)
    summary: dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.errors

    def add_error(self, msg: str) -> None:
        self.errors.append(msg)

    def add_warning(self, msg: str) -> None:
        self.warnings.append(msg)

    def add_info(self, msg: str) -> None:
        self.infos.append(msg)

    def attempted_ids(self, chain: str | None = None) -> list[str]:
        return [a.source_id for a in self.attempts if chain is None or a.chain == chain]

    def to_dict(self) -> dict[str, Any]:
        return {
            "attempts": [attempt.to_dict() for attempt in self.attempts],
            "errors": list(self.errors),
            "warnings": list(self.warnings),
            "infos": list(self.infos),
            "summary": dict(self.summary),
        }


def format_resolution_lines(report: ResolutionReport) -> Sequence[str]:
    lines: list[str] = []
    lines.extend(f"[INFO] {msg}" for msg in report.infos)
    lines.extend(f"[WARN] {msg}" for msg in report.warnings)
    lines.extend(f"[ERROR] {msg}" for msg in report.errors)
    if report.ok:
        lines.append("[OK] Boundary resolution finished.")
    return lines


def try_sources_in_order(
    chain: str,
    sources: Sequence[BoundarySource],
    fetch: FetchFn,
    report: ResolutionReport,
) -> BoundaryDataset | None:
    """Fetch each source once, in order, until one yields a dataset.

    Transport, status and parse failures all move on to the next source.
    Returns None when the chain is exhausted.
    """
    previous_tier: int | None = None
    total = len(sources)
    for idx, source in enumerate(sources, start=1):
        if previous_tier is not None and source.tier != previous_tier:
            msg = f"[{chain}] tier {previous_tier} exhausted; escalating to tier {source.tier} sources"
            _LOGGER.warning(msg)
            report.add_warning(msg)
        previous_tier = source.tier
        if source.trust == "community-maintained":
            _LOGGER.warning(
                "[%s] %s is community-maintained; boundaries may be incomplete",
                chain,
                source.source_id,
            )

        _LOGGER.info("[%s] (%d/%d) trying %s", chain, idx, total, source.describe())
        try:
            dataset = fetch(source)
        except BoundarySourceError as exc:
            report.attempts.append(
                SourceAttempt(
                    chain=chain,
                    source_id=source.source_id,
                    url=source.url,
                    trust=source.trust,
                    tier=source.tier,
                    outcome=exc.kind,
                    detail=exc.detail,
                )
            )
            _LOGGER.warning("[%s] (%d/%d) %s failed: %s", chain, idx, total, source.source_id, exc.detail)
            continue

        report.attempts.append(
            SourceAttempt(
                chain=chain,
                source_id=source.source_id,
                url=source.url,
                trust=source.trust,
                tier=source.tier,
                outcome="ok",
                feature_count=len(dataset),
            )
        )
        _LOGGER.info(
            "[%s] %s loaded, features count: %d (skipped %d)",
            chain,
            source.source_id,
            len(dataset),
            dataset.skipped_features,
        )
        report.add_info(f"{chain} data loaded from {source.source_id} ({len(dataset)} features)")
        return dataset

    msg = f"All {total} {chain} sources failed"
    _LOGGER.warning(msg)
    report.add_warning(msg)
    return None


class BoundaryResolver:
    """Run the country, province and municipality chains once.

    The country chain decides the path: when it succeeds, province and
    municipality are resolved from remote data; when it is exhausted, all
    three levels come from the static fallback together.
    """

    def __init__(
        self,
        cfg: AppConfig,
        *,
        fetch: FetchFn | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self.cfg = cfg
        self._fetch = fetch
        self._session = session

    def resolve(self) -> tuple[ResolvedBoundaries, ResolutionReport]:
        report = ResolutionReport()
        _LOGGER.info("Starting boundary resolution.")
        result: ResolvedBoundaries | None
        try:
            with self._open_fetch() as fetch:
                result = self._resolve_remote(fetch, report)
        except Exception as exc:
            _LOGGER.exception("Unexpected error during boundary resolution")
            report.add_warning(f"Unexpected error during remote resolution: {exc}")
            result = None

        if result is None:
            report.add_warning("Falling back to simplified static boundaries.")
            contested = self._verify((NEPAL_POLYGON,), "fallback outline", report)
            result = fallback_boundaries(self.cfg.styles, contested_territory_included=contested)

        report.summary = {
            "sources_attempted": len(report.attempts),
            "sources_failed": sum(1 for attempt in report.attempts if not attempt.ok),
            "fallback_used": result.used_fallback,
            "complete": result.complete,
            "contested_territory_included": result.contested_territory_included,
            "provenance": result.provenance_by_level(),
        }
        for caveat in result.caveats:
            report.add_warning(caveat)
        _LOGGER.info("Boundary resolution finished: %s", report.summary["provenance"])
        return result, report

    @contextmanager
    def _open_fetch(self) -> Iterator[FetchFn]:
        if self._fetch is not None:
            yield self._fetch
            return
        with GeoJsonFetcher(self.cfg.http, session=self._session) as fetcher:
            yield fetcher.fetch

    def _resolve_remote(self, fetch: FetchFn, report: ResolutionReport) -> ResolvedBoundaries | None:
        chains = self.cfg.chains
        country_data = try_sources_in_order("country", chains.country, fetch, report)
        if country_data is None:
            return None

        country = ResolvedBoundary(
            level="country",
            polygons=country_data.polygons,
            style=self.cfg.styles.country,
            provenance=country_data.source.source_id,
            label=COUNTRY_LABEL,
            source_id=country_data.source.source_id,
            source_url=country_data.source.url,
            trust=country_data.source.trust,
        )
        contested = self._verify(country_data.polygons, country_data.source.source_id, report)
        province = self._resolve_province(country_data, fetch, report)
        municipality = self._resolve_municipality(fetch, report)

        caveats: list[str] = []
        if contested is False:
            caveats.append(
                f"Country data from {country_data.source.source_id} does not appear to include "
                "Kalapani, Lipulekh and Limpiyadhura."
            )
        if province is not None and province.proxy:
            caveats.append(f"Province boundary is a proxy: {province.label} district.")
        if province is None:
            caveats.append("Province boundary unresolved.")
        if municipality is None:
            caveats.append("Municipality boundary unresolved.")

        return ResolvedBoundaries(
            country=country,
            province=province,
            municipality=municipality,
            complete=True,
            contested_territory_included=contested,
            caveats=tuple(caveats),
        )

    def _verify(self, polygons: Sequence[Polygon], label: str, report: ResolutionReport) -> bool | None:
        try:
            included = includes_contested_territory(polygons, mode=self.cfg.verifier.mode)
        except Exception as exc:
            _LOGGER.warning("Territory check failed for %s: %s", label, exc)
            return None
        _LOGGER.info(
            "Contested territories (Kalapani, Lipulekh, Limpiyadhura) included in %s: %s",
            label,
            included,
        )
        report.add_info(f"Contested territory check ({self.cfg.verifier.mode}): {included}")
        return included

    def _resolve_province(
        self,
        country_data: BoundaryDataset,
        fetch: FetchFn,
        report: ResolutionReport,
    ) -> ResolvedBoundary | None:
        matcher = self.cfg.targets.province
        feature = find_region(country_data, matcher)
        if feature is not None:
            boundary = self._extracted("province", feature, country_data, matcher)
            _LOGGER.info("Province '%s' found in %s", boundary.label, country_data.source.source_id)
            report.add_info(f"province resolved from {country_data.source.source_id}: {boundary.label}")
            return boundary

        msg = f"Province '{matcher.target}' not found in {country_data.source.source_id}; trying district proxy"
        _LOGGER.warning(msg)
        report.add_warning(msg)

        district_data = try_sources_in_order("district", self.cfg.chains.district, fetch, report)
        if district_data is None:
            return None
        district_matcher = self.cfg.targets.district
        district = find_region(district_data, district_matcher)
        if district is None:
            msg = f"District '{district_matcher.target}' not found in {district_data.source.source_id}"
            _LOGGER.warning(msg)
            report.add_warning(msg)
            return None

        label = district_matcher.resolve_name(district.properties) or district_matcher.target
        _LOGGER.info("Using %s district from %s as province proxy", label, district_data.source.source_id)
        report.add_info(f"province resolved via district proxy from {district_data.source.source_id}: {label}")
        return ResolvedBoundary(
            level="province",
            polygons=district.polygons,
            style=self.cfg.styles.province,
            provenance=PROVENANCE_DISTRICT_PROXY,
            label=label,
            source_id=district_data.source.source_id,
            source_url=district_data.source.url,
            trust=district_data.source.trust,
            proxy=True,
        )

    def _resolve_municipality(self, fetch: FetchFn, report: ResolutionReport) -> ResolvedBoundary | None:
        dataset = try_sources_in_order("municipality", self.cfg.chains.municipality, fetch, report)
        if dataset is None:
            return None
        matcher = self.cfg.targets.municipality
        feature = find_region(dataset, matcher)
        if feature is None:
            msg = f"Municipality '{matcher.target}' not found in {dataset.source.source_id}"
            _LOGGER.warning(msg)
            report.add_warning(msg)
            if matcher.hint:
                _LOGGER.info(
                    "Sample municipalities with '%s': %s",
                    matcher.hint,
                    sample_names(dataset, matcher),
                )
            return None

        boundary = self._extracted("municipality", feature, dataset, matcher)
        _LOGGER.info("Municipality '%s' found in %s", boundary.label, dataset.source.source_id)
        report.add_info(f"municipality resolved from {dataset.source.source_id}: {boundary.label}")
        return boundary

    def _extracted(
        self,
        level: str,
        feature: BoundaryFeature,
        dataset: BoundaryDataset,
        matcher: RegionMatcher,
    ) -> ResolvedBoundary:
        return ResolvedBoundary(
            level=level,
            polygons=feature.polygons,
            style=self.cfg.styles.for_level(level),
            provenance=dataset.source.source_id,
            label=matcher.resolve_name(feature.properties) or matcher.target,
            source_id=dataset.source.source_id,
            source_url=dataset.source.url,
            trust=dataset.source.trust,
        )


def resolve_boundaries(
    cfg: AppConfig | None = None,
    *,
    session: requests.Session | None = None,
) -> tuple[ResolvedBoundaries, ResolutionReport]:
    """Resolve all three levels once. Never raises for source failures."""
    return BoundaryResolver(cfg or default_config(), session=session).resolve()
