from __future__ import annotations

import pytest
import requests

from conftest import INVALID_JSON, FakeSession, collection, feature, square
from mapstory.config import HttpConfig
from mapstory.fetch import BoundarySourceError, GeoJsonFetcher, parse_dataset
from mapstory.models import BoundarySource

_SOURCE = BoundarySource(
    source_id="source-1",
    url="https://example.org/nepal.geojson",
    level="country",
    trust="official",
)
_HTTP = HttpConfig(request_timeout_s=7.5, user_agent="mapstory-tests/1.0")


def test_parse_dataset_keeps_polygons_and_skips_other_geometry() -> None:
    payload = collection(
        feature({"NAME": "Bagmati"}),
        {
            "type": "Feature",
            "properties": {"NAME": "Islands"},
            "geometry": {"type": "MultiPolygon", "coordinates": [square(80.0, 28.0), square(81.0, 28.0)]},
        },
        {"type": "Feature", "properties": {"NAME": "Pin"}, "geometry": {"type": "Point", "coordinates": [85, 27]}},
        {"type": "Feature", "properties": {"NAME": "Empty"}, "geometry": None},
    )
    dataset = parse_dataset(payload, _SOURCE)

    assert len(dataset) == 2
    assert dataset.skipped_features == 2
    assert [f.properties["NAME"] for f in dataset] == ["Bagmati", "Islands"]
    assert len(dataset.features[1].polygons) == 2
    assert len(dataset.polygons) == 3
    assert dataset.features[0].polygons[0][0][0] == (85.3, 27.7)


def test_parse_dataset_accepts_single_feature() -> None:
    dataset = parse_dataset(feature({"NAME": "Nepal"}), _SOURCE)
    assert len(dataset) == 1


def test_parse_dataset_tolerates_missing_properties() -> None:
    raw = feature({})
    del raw["properties"]
    dataset = parse_dataset(collection(raw), _SOURCE)
    assert dataset.features[0].properties == {}


@pytest.mark.parametrize(
    "payload",
    [
        [],
        {"type": "FeatureCollection"},
        {"type": "FeatureCollection", "features": {}},
        collection(),
        collection({"type": "Feature", "geometry": {"type": "LineString", "coordinates": [[0, 0], [1, 1]]}}),
        collection({"type": "Feature", "geometry": {"type": "Polygon", "coordinates": [[["a", "b"]]]}}),
        collection({"type": "Feature", "geometry": {"type": "Polygon", "coordinates": [[[10**400, 1], [1, 2], [2, 2]]]}}),
        collection({"type": "Feature", "geometry": {"type": "Polygon", "coordinates": [[[float("nan"), 1], [1, 2], [2, 2]]]}}),
    ],
)
def test_parse_dataset_rejects_unusable_payloads(payload: object) -> None:
    with pytest.raises(BoundarySourceError) as excinfo:
        parse_dataset(payload, _SOURCE)
    assert excinfo.value.kind == "parse"
    assert excinfo.value.source is _SOURCE


def test_fetcher_returns_dataset_and_sets_timeout_and_user_agent() -> None:
    session = FakeSession({_SOURCE.url: collection(feature({"NAME": "Nepal"}))})
    fetcher = GeoJsonFetcher(_HTTP, session=session)  # type: ignore[arg-type]

    dataset = fetcher.fetch(_SOURCE)

    assert dataset.source is _SOURCE
    assert session.calls == [_SOURCE.url]
    assert session.timeouts == [7.5]
    assert session.headers["User-Agent"] == "mapstory-tests/1.0"


@pytest.mark.parametrize(
    ("route", "kind"),
    [
        (500, "status"),
        (404, "status"),
        (requests.Timeout("read timed out"), "transport"),
        (requests.ConnectionError("refused"), "transport"),
        (INVALID_JSON, "parse"),
        ((200, RecursionError("maximum recursion depth exceeded")), "parse"),
        ({"type": "FeatureCollection"}, "parse"),
    ],
)
def test_fetcher_maps_failures_to_kinds(route: object, kind: str) -> None:
    session = FakeSession({_SOURCE.url: route})
    fetcher = GeoJsonFetcher(_HTTP, session=session)  # type: ignore[arg-type]

    with pytest.raises(BoundarySourceError) as excinfo:
        fetcher.fetch(_SOURCE)

    assert excinfo.value.kind == kind
    assert session.calls == [_SOURCE.url]


def test_fetcher_leaves_injected_session_open() -> None:
    session = FakeSession()
    with GeoJsonFetcher(_HTTP, session=session):  # type: ignore[arg-type]
        pass
    assert not session.closed


def test_source_error_rejects_unknown_kind() -> None:
    with pytest.raises(ValueError):
        BoundarySourceError(_SOURCE, "dns", "nope")


def test_parse_dataset_skips_features_with_out_of_range_numbers() -> None:
    oversized = {
        "type": "Feature",
        "properties": {"NAME": "Broken"},
        "geometry": {"type": "Polygon", "coordinates": [[[10**400, 27.0], [85.1, 27.0], [85.1, 27.1], [85.0, 27.0]]]},
    }
    dataset = parse_dataset(collection(oversized, feature({"NAME": "Bagmati"})), _SOURCE)

    assert [f.properties["NAME"] for f in dataset] == ["Bagmati"]
    assert dataset.skipped_features == 1


def test_parse_dataset_turns_deep_nesting_into_parse_failure() -> None:
    nested: dict = {"type": "GeometryCollection", "geometries": []}
    for _ in range(5000):
        nested = {"type": "GeometryCollection", "geometries": [nested]}

    with pytest.raises(BoundarySourceError) as excinfo:
        parse_dataset(collection({"type": "Feature", "geometry": nested}), _SOURCE)
    assert excinfo.value.kind == "parse"
