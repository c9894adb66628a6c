"""Diagnostic check for the contested far-western territory.

Nepal's 2020 map adds Kalapani, Lipulekh and Limpiyadhura. Older datasets
omit them. The result is logged and reported; it never decides whether a
dataset is used.
"""

from __future__ import annotations

import json
from typing import Any, Iterable

from .models import Polygon, geometry_from_polygons

# Approximate (lon, lat) reference points inside each area.
CONTESTED_REFERENCE_POINTS: dict[str, tuple[float, float]] = {
    "Kalapani": (80.98, 30.21),
    "Lipulekh": (81.03, 30.23),
    "Limpiyadhura": (80.56, 30.41),
}

# Longitude prefixes scanned for by the coordinate-text heuristic.
LEGACY_LONGITUDE_MARKERS = ("80.8", "80.9")


def covered_reference_points(polygons: Iterable[Polygon]) -> list[str]:
    """Names of the reference points covered by any of the polygons."""
    shape, point_factory = _require_shapely()
    geometries = []
    for polygon in polygons:
        geometry = shape(geometry_from_polygons((polygon,)))
        if not geometry.is_valid:
            geometry = geometry.buffer(0)
        geometries.append(geometry)

    covered: list[str] = []
    for name, (lon, lat) in CONTESTED_REFERENCE_POINTS.items():
        point = point_factory(lon, lat)
        if any(geometry.covers(point) for geometry in geometries):
            covered.append(name)
    return covered


def includes_contested_territory(polygons: Iterable[Polygon], *, mode: str = "geometric") -> bool:
    if mode == "geometric":
        return bool(covered_reference_points(polygons))
    if mode == "coordinate_text":
        return coordinate_text_scan(polygons)
    raise ValueError(f"Unknown verifier mode: {mode}")


def coordinate_text_scan(polygons: Iterable[Polygon]) -> bool:
    """Substring scan over serialized coordinates.

    Sensitive to float formatting and precision; any vertex with a matching
    longitude prefix counts, wherever its latitude is.
    """
    for polygon in polygons:
        text = json.dumps(polygon)
        if any(marker in text for marker in LEGACY_LONGITUDE_MARKERS):
            return True
    return False


def _require_shapely() -> tuple[Any, Any]:
    try:
        from shapely.geometry import Point, shape
    except ImportError as exc:  # pragma: no cover
        raise RuntimeError("shapely is required for the geometric territory check") from exc
    return shape, Point
