from __future__ import annotations

import json
from pathlib import Path

from mapstory.config import AppConfig
from mapstory.export import to_feature_collection, write_boundaries_geojson, write_resolution_report
from mapstory.fallback import fallback_boundaries
from mapstory.models import ResolvedBoundaries, ResolvedBoundary
from mapstory.resolver import ResolutionReport, SourceAttempt


def test_fallback_collection_has_one_feature_per_level(cfg: AppConfig) -> None:
    payload = to_feature_collection(fallback_boundaries(cfg.styles))

    assert payload["type"] == "FeatureCollection"
    assert [f["properties"]["level"] for f in payload["features"]] == ["country", "province", "municipality"]
    country = payload["features"][0]
    assert country["geometry"]["type"] == "Polygon"
    assert country["geometry"]["coordinates"][0][0] == [80.056, 30.447]
    assert country["properties"]["provenance"] == "fallback"
    assert country["properties"]["approximate"] is True
    assert country["properties"]["style"]["color"] == "#34d399"
    assert payload["metadata"]["complete"] is False
    assert payload["metadata"]["caveats"]


def test_unresolved_levels_are_omitted_and_multipolygons_kept(cfg: AppConfig) -> None:
    square = (((85.0, 27.0), (85.1, 27.0), (85.1, 27.1), (85.0, 27.0)),)
    other = (((86.0, 27.0), (86.1, 27.0), (86.1, 27.1), (86.0, 27.0)),)
    result = ResolvedBoundaries(
        country=ResolvedBoundary(
            level="country",
            polygons=(square, other),
            style=cfg.styles.country,
            provenance="source-1",
            label="Nepal",
            source_id="source-1",
            source_url="https://example.org/nepal.geojson",
            trust="official",
        ),
        province=None,
        municipality=None,
        complete=True,
    )
    payload = to_feature_collection(result)

    assert len(payload["features"]) == 1
    assert payload["features"][0]["geometry"]["type"] == "MultiPolygon"
    assert payload["metadata"]["levels"] == {"country": "source-1", "province": None, "municipality": None}


def test_files_are_written_as_json(cfg: AppConfig, tmp_path: Path) -> None:
    geojson_path = write_boundaries_geojson(tmp_path / "out" / "boundaries.geojson", fallback_boundaries(cfg.styles))
    report = ResolutionReport()
    report.attempts.append(
        SourceAttempt(
            chain="country",
            source_id="source-1",
            url="https://example.org/nepal.geojson",
            trust="official",
            tier=1,
            outcome="status",
            detail="HTTP 500",
        )
    )
    report_path = write_resolution_report(tmp_path / "out" / "report.json", report)

    assert json.loads(geojson_path.read_text(encoding="utf-8"))["type"] == "FeatureCollection"
    written = json.loads(report_path.read_text(encoding="utf-8"))
    assert written["attempts"][0]["detail"] == "HTTP 500"
    assert "generated_at_utc" in written
