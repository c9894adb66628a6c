"""Built-in boundary source catalogue and default settings.

The source order is significant: each chain is tried top to bottom and the
first source that returns a usable payload wins.
"""

from __future__ import annotations

from typing import Any

_ACESMNDR = "https://raw.githubusercontent.com/Acesmndr/nepal-geojson/master/generated-geojson"
_MESAUGAT = "https://raw.githubusercontent.com/mesaugat/geoJSON-Nepal/master"

DEFAULT_SETTINGS: dict[str, Any] = {
    "http": {
        "request_timeout_s": 20.0,
        "user_agent": "mapstory-boundaries/0.1 (+https://github.com/)",
    },
    "chains": {
        "country": [
            {
                "id": "source-1",
                "url": f"{_ACESMNDR}/nepal-with-provinces-acesmndr.geojson",
                "level": "country",
                "trust": "official",
                "tier": 1,
            },
            {
                "id": "source-2",
                "url": "https://raw.githubusercontent.com/din751/nepal_boundary/main/nepal.geojson",
                "level": "country",
                "trust": "official",
                "tier": 1,
            },
            {
                "id": "source-3",
                "url": "https://localboundries.oknp.org/data/country.geojson",
                "level": "country",
                "trust": "government-verified",
                "tier": 2,
            },
            {
                "id": "source-4",
                "url": f"{_MESAUGAT}/nepal-states.geojson",
                "level": "province",
                "trust": "community-maintained",
                "tier": 2,
            },
        ],
        "municipality": [
            {
                "id": "municipality-1",
                "url": f"{_ACESMNDR}/municipalities.geojson",
                "level": "municipality",
                "trust": "official",
            },
            {
                "id": "municipality-2",
                "url": f"{_MESAUGAT}/nepal-municipalities.geojson",
                "level": "municipality",
                "trust": "community-maintained",
            },
        ],
        "district": [
            {
                "id": "district-1",
                "url": f"{_ACESMNDR}/districts.geojson",
                "level": "district",
                "trust": "official",
            },
            {
                "id": "district-2",
                "url": f"{_MESAUGAT}/nepal-districts-new.geojson",
                "level": "district",
                "trust": "community-maintained",
            },
        ],
    },
    "targets": {
        "province": {
            "target": "bagmati",
            "keys": ["ADM1_EN", "PROVINCE", "NAME"],
            "aliases": ["3", "Province 3"],
        },
        "municipality": {
            "target": "nagarjun",
            "keys": ["NAME"],
            "hint": "nagar",
        },
        "district": {
            "target": "kathmandu",
            "keys": ["NAME", "DISTRICT"],
        },
    },
    "styles": {
        "country": {
            "color": "#34d399",
            "weight": 3,
            "opacity": 0.8,
            "fill_color": "#34d399",
            "fill_opacity": 0.1,
            "class_name": "nepal-highlight",
        },
        "province": {
            "color": "#60a5fa",
            "weight": 3,
            "opacity": 0.0,
            "fill_color": "#60a5fa",
            "fill_opacity": 0.0,
            "class_name": "bagmati-highlight",
        },
        "municipality": {
            "color": "#fbbf24",
            "weight": 3,
            "opacity": 0.0,
            "fill_color": "#fbbf24",
            "fill_opacity": 0.0,
            "class_name": "nagarjun-highlight",
        },
    },
    "verifier": {
        "mode": "geometric",
    },
    "paths": {
        "output_dir": "build",
        "logs_dir": "build/logs",
    },
}
