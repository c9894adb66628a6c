from __future__ import annotations

from typing import Any, Mapping

import pytest
import requests

from mapstory.config import AppConfig, default_config

INVALID_JSON = object()


class FakeResponse:
    def __init__(self, status_code: int, payload: Any = None) -> None:
        self.status_code = status_code
        self._payload = payload
        self.closed = False

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error", response=self)

    def json(self) -> Any:
        if isinstance(self._payload, BaseException):
            raise self._payload
        if self._payload is INVALID_JSON:
            raise ValueError("Expecting value: line 1 column 1 (char 0)")
        return self._payload

    def close(self) -> None:
        self.closed = True


class FakeSession:
    """Serves canned responses per URL; unknown URLs fail to connect.

    A route value may be an int (status with empty body), a payload mapping
    (200), `INVALID_JSON`, an exception instance to raise, or a
    `(status, payload)` tuple whose payload may be an exception raised by
    `json()`.
    """

    def __init__(self, routes: Mapping[str, Any] | None = None) -> None:
        self.routes = dict(routes or {})
        self.headers: dict[str, str] = {}
        self.calls: list[str] = []
        self.timeouts: list[Any] = []
        self.closed = False

    def get(self, url: str, timeout: Any = None, **_: Any) -> FakeResponse:
        self.calls.append(url)
        self.timeouts.append(timeout)
        if url not in self.routes:
            raise requests.ConnectionError(f"no route to {url}")
        route = self.routes[url]
        if isinstance(route, BaseException):
            raise route
        if isinstance(route, int):
            return FakeResponse(route, None)
        if isinstance(route, tuple):
            return FakeResponse(route[0], route[1])
        return FakeResponse(200, route)

    def close(self) -> None:
        self.closed = True


def square(lon: float, lat: float, size: float = 0.1) -> list[list[list[float]]]:
    return [
        [
            [lon, lat],
            [lon + size, lat],
            [lon + size, lat + size],
            [lon, lat + size],
            [lon, lat],
        ]
    ]


def feature(properties: Mapping[str, Any], lon: float = 85.3, lat: float = 27.7, size: float = 0.1) -> dict[str, Any]:
    return {
        "type": "Feature",
        "properties": dict(properties),
        "geometry": {"type": "Polygon", "coordinates": square(lon, lat, size)},
    }


def collection(*features: dict[str, Any]) -> dict[str, Any]:
    return {"type": "FeatureCollection", "features": list(features)}


@pytest.fixture
def cfg() -> AppConfig:
    return default_config()


@pytest.fixture
def urls(cfg: AppConfig) -> dict[str, str]:
    return {source.source_id: source.url for source in cfg.chains.all_sources}
