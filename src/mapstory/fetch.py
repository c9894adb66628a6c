"""HTTP retrieval and GeoJSON shape validation for boundary sources."""

from __future__ import annotations

import logging
import math
from typing import Any, Mapping

import requests

from .config import HttpConfig
from .models import BoundaryDataset, BoundaryFeature, BoundarySource, Polygon, Position, Ring

_LOGGER = logging.getLogger("mapstory.fetch")

FAILURE_KINDS = ("transport", "status", "parse")


class BoundarySourceError(RuntimeError):
    """Raised when a source cannot supply a usable dataset.

    `kind` is `transport` (network error or timeout), `status` (non-2xx
    response) or `parse` (body is not a polygon FeatureCollection). The
    chain driver treats all three the same way.
    """

    def __init__(self, source: BoundarySource, kind: str, detail: str) -> None:
        if kind not in FAILURE_KINDS:
            raise ValueError(f"Unknown failure kind: {kind}")
        super().__init__(f"{source.source_id} {kind} failure: {detail}")
        self.source = source
        self.kind = kind
        self.detail = detail


class GeoJsonFetcher:
    """Fetch one GeoJSON payload per source, once, with a fixed timeout."""

    def __init__(self, cfg: HttpConfig, *, session: requests.Session | None = None) -> None:
        self.cfg = cfg
        self._owns_session = session is None
        self._session = session if session is not None else requests.Session()
        self._session.headers.update(
            {
                "User-Agent": cfg.user_agent,
                "Accept": "application/geo+json, application/json;q=0.9, */*;q=0.1",
            }
        )

    def __enter__(self) -> GeoJsonFetcher:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_session:
            self._session.close()

    def fetch(self, source: BoundarySource) -> BoundaryDataset:
        _LOGGER.debug("GET %s (timeout %.1fs)", source.url, self.cfg.request_timeout_s)
        try:
            response = self._session.get(source.url, timeout=self.cfg.request_timeout_s)
        except requests.Timeout as exc:
            raise BoundarySourceError(
                source, "transport", f"timed out after {self.cfg.request_timeout_s:.1f}s"
            ) from exc
        except requests.RequestException as exc:
            raise BoundarySourceError(source, "transport", str(exc)) from exc

        try:
            response.raise_for_status()
            payload = response.json()
        except requests.HTTPError as exc:
            raise BoundarySourceError(source, "status", f"HTTP {response.status_code}") from exc
        except (ValueError, RecursionError) as exc:
            raise BoundarySourceError(source, "parse", f"invalid JSON: {exc}") from exc
        finally:
            response.close()

        return parse_dataset(payload, source)


def parse_dataset(payload: Any, source: BoundarySource) -> BoundaryDataset:
    """Convert a GeoJSON payload into a dataset of polygon features.

    Features without polygon geometry are skipped; a payload with no usable
    polygon feature is a parse failure, as is any payload the parser cannot
    walk.
    """
    try:
        return _parse_dataset(payload, source)
    except (OverflowError, RecursionError, TypeError, ValueError) as exc:
        raise BoundarySourceError(source, "parse", f"malformed payload: {exc!r}") from exc


def _parse_dataset(payload: Any, source: BoundarySource) -> BoundaryDataset:
    if not isinstance(payload, Mapping):
        raise BoundarySourceError(source, "parse", "payload is not a JSON object")

    payload_type = payload.get("type")
    if payload_type == "Feature":
        raw_features: Any = [payload]
    else:
        raw_features = payload.get("features")
    if not isinstance(raw_features, list):
        raise BoundarySourceError(source, "parse", "payload has no 'features' list")

    features: list[BoundaryFeature] = []
    skipped = 0
    for idx, raw in enumerate(raw_features):
        feature = _parse_feature(raw)
        if feature is None:
            skipped += 1
            _LOGGER.debug("%s: skipped feature %d (no usable polygon geometry)", source.source_id, idx)
            continue
        features.append(feature)

    if not features:
        raise BoundarySourceError(
            source,
            "parse",
            f"no usable polygon features ({len(raw_features)} features in payload)",
        )
    return BoundaryDataset(source=source, features=tuple(features), skipped_features=skipped)


def _parse_feature(raw: Any) -> BoundaryFeature | None:
    if not isinstance(raw, Mapping):
        return None
    geometry = raw.get("geometry")
    if not isinstance(geometry, Mapping):
        return None
    polygons = _parse_polygons(geometry)
    if not polygons:
        return None
    properties_raw = raw.get("properties")
    properties = dict(properties_raw) if isinstance(properties_raw, Mapping) else {}
    return BoundaryFeature(polygons=polygons, properties=properties)


def _parse_polygons(geometry: Mapping[str, Any]) -> tuple[Polygon, ...]:
    geom_type = geometry.get("type")
    coords = geometry.get("coordinates")
    if geom_type == "Polygon":
        polygon = _parse_polygon(coords)
        return (polygon,) if polygon is not None else ()
    if geom_type == "MultiPolygon":
        if not isinstance(coords, list):
            return ()
        polygons: list[Polygon] = []
        for item in coords:
            polygon = _parse_polygon(item)
            if polygon is not None:
                polygons.append(polygon)
        return tuple(polygons)
    if geom_type == "GeometryCollection":
        members = geometry.get("geometries")
        if not isinstance(members, list):
            return ()
        collected: list[Polygon] = []
        for member in members:
            if isinstance(member, Mapping):
                collected.extend(_parse_polygons(member))
        return tuple(collected)
    return ()


def _parse_polygon(raw: Any) -> Polygon | None:
    if not isinstance(raw, list) or not raw:
        return None
    rings: list[Ring] = []
    for ring_raw in raw:
        ring = _parse_ring(ring_raw)
        if ring is None:
            return None
        rings.append(ring)
    return tuple(rings)


def _parse_ring(raw: Any) -> Ring | None:
    if not isinstance(raw, list) or len(raw) < 3:
        return None
    positions: list[Position] = []
    for item in raw:
        if not isinstance(item, (list, tuple)) or len(item) < 2:
            return None
        lon, lat = _coordinate(item[0]), _coordinate(item[1])
        if lon is None or lat is None:
            return None
        positions.append((lon, lat))
    return tuple(positions)


def _coordinate(value: Any) -> float | None:
    if not isinstance(value, (int, float)) or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except OverflowError:
        return None
    return number if math.isfinite(number) else None
