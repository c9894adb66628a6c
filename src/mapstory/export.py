"""Hand-off of resolved boundaries to the map page as GeoJSON."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from .models import ResolvedBoundaries, ResolvedBoundary
from .resolver import ResolutionReport
from .util import write_json


def boundary_feature(boundary: ResolvedBoundary) -> dict[str, Any]:
    return {
        "type": "Feature",
        "geometry": boundary.to_geometry(),
        "properties": {
            "level": boundary.level,
            "label": boundary.label,
            "provenance": boundary.provenance,
            "source_id": boundary.source_id,
            "source_url": boundary.source_url,
            "trust": boundary.trust,
            "proxy": boundary.proxy,
            "approximate": boundary.approximate,
            "style": boundary.style.to_dict(),
        },
    }


def to_feature_collection(result: ResolvedBoundaries) -> dict[str, Any]:
    """One feature per resolved level, country first.

    Unresolved levels are omitted; the collection-level `metadata` carries
    the completeness flag and caveats.
    """
    return {
        "type": "FeatureCollection",
        "features": [boundary_feature(boundary) for _, boundary in result.items()],
        "metadata": {
            "complete": result.complete,
            "contested_territory_included": result.contested_territory_included,
            "caveats": list(result.caveats),
            "levels": result.provenance_by_level(),
        },
    }


def write_boundaries_geojson(path: Path, result: ResolvedBoundaries) -> Path:
    return write_json(path, to_feature_collection(result))


def write_resolution_report(path: Path, report: ResolutionReport) -> Path:
    payload = report.to_dict()
    payload["generated_at_utc"] = datetime.now(timezone.utc).isoformat()
    return write_json(path, payload)
