"""Hardcoded approximate boundaries used when every remote source fails."""

from __future__ import annotations

import logging

from .config import StylesConfig
from .models import PROVENANCE_FALLBACK, Polygon, ResolvedBoundaries, ResolvedBoundary, Ring

_LOGGER = logging.getLogger("mapstory.fallback")

FALLBACK_CAVEAT = (
    "Simplified fallback outline: the far-western edge is approximate and does "
    "not trace the Kalapani, Lipulekh and Limpiyadhura boundary."
)

# Outlines are written as (lat, lon) pairs, as traced on the map.
_NEPAL_LATLON: tuple[tuple[float, float], ...] = (
    (30.447, 80.056), (30.42, 80.52), (30.35, 81.0), (30.25, 81.5), (30.15, 82.0),
    (30.05, 82.5), (29.95, 83.0), (29.85, 83.5), (29.75, 84.0), (29.65, 84.5),
    (29.55, 85.0), (29.45, 85.5), (29.35, 86.0), (29.25, 86.5), (29.15, 87.0),
    (29.05, 87.5), (28.95, 88.0), (28.85, 88.201), (28.7, 88.15), (28.5, 88.0),
    (28.3, 87.8), (28.1, 87.6), (27.9, 87.4), (27.7, 87.2), (27.5, 87.0),
    (27.3, 86.8), (27.1, 86.6), (26.9, 86.4), (26.7, 86.2), (26.5, 86.0),
    (26.4, 85.8), (26.35, 85.6), (26.3, 85.4), (26.25, 85.2), (26.2, 85.0),
    (26.25, 84.8), (26.3, 84.6), (26.35, 84.4), (26.4, 84.2), (26.45, 84.0),
    (26.5, 83.8), (26.55, 83.6), (26.6, 83.4), (26.65, 83.2), (26.7, 83.0),
    (26.8, 82.8), (26.9, 82.6), (27.0, 82.4), (27.1, 82.2), (27.2, 82.0),
    (27.3, 81.8), (27.4, 81.6), (27.5, 81.4), (27.6, 81.2), (27.7, 81.0),
    (27.8, 80.8), (27.9, 80.6), (28.0, 80.4), (28.2, 80.2), (28.5, 80.1),
    (28.8, 80.05), (29.2, 80.03), (29.6, 80.04), (30.0, 80.05), (30.447, 80.056),
)

_BAGMATI_LATLON: tuple[tuple[float, float], ...] = (
    (28.3949, 84.9180), (28.35, 85.1), (28.3, 85.3), (28.25, 85.5), (28.2, 85.7),
    (28.1, 85.9), (28.0, 86.0), (27.9, 86.1), (27.8, 86.15), (27.7, 86.1654),
    (27.6, 86.1), (27.5, 86.05), (27.4, 85.95), (27.3, 85.85), (27.2, 85.75),
    (27.1, 85.65), (27.0873, 85.55), (27.1, 85.45), (27.12, 85.35), (27.15, 85.25),
    (27.2, 85.15), (27.25, 85.05), (27.3, 84.98), (27.4, 84.94), (27.5, 84.92),
    (27.6, 84.91), (27.7, 84.915), (27.8, 84.92), (27.9, 84.93), (28.0, 84.95),
    (28.1, 84.98), (28.2, 85.0), (28.3, 85.02), (28.3949, 84.9180),
)

_NAGARJUN_LATLON: tuple[tuple[float, float], ...] = (
    (27.7800, 85.2200), (27.7780, 85.2250), (27.7750, 85.2300), (27.7720, 85.2350),
    (27.7690, 85.2400), (27.7650, 85.2450), (27.7600, 85.2500), (27.7550, 85.2550),
    (27.7500, 85.2600), (27.7450, 85.2650), (27.7400, 85.2700), (27.7380, 85.2750),
    (27.7360, 85.2800), (27.7350, 85.2850), (27.7340, 85.2900), (27.7335, 85.2950),
    (27.7330, 85.3000), (27.7325, 85.3050), (27.7320, 85.3100), (27.7315, 85.3150),
    (27.7310, 85.3200), (27.7280, 85.3180), (27.7250, 85.3160), (27.7220, 85.3140),
    (27.7190, 85.3120), (27.7160, 85.3100), (27.7130, 85.3080), (27.7100, 85.3060),
    (27.7070, 85.3040), (27.7040, 85.3020), (27.7010, 85.3000), (27.6980, 85.2980),
    (27.6950, 85.2960), (27.6920, 85.2940), (27.6900, 85.2920), (27.6920, 85.2900),
    (27.6940, 85.2880), (27.6960, 85.2860), (27.6980, 85.2840), (27.7000, 85.2820),
    (27.7020, 85.2800), (27.7040, 85.2780), (27.7060, 85.2760), (27.7080, 85.2740),
    (27.7100, 85.2720), (27.7120, 85.2700), (27.7140, 85.2680), (27.7160, 85.2660),
    (27.7180, 85.2640), (27.7200, 85.2620), (27.7220, 85.2600), (27.7240, 85.2580),
    (27.7260, 85.2560), (27.7280, 85.2540), (27.7300, 85.2520), (27.7320, 85.2500),
    (27.7340, 85.2480), (27.7360, 85.2460), (27.7380, 85.2440), (27.7400, 85.2420),
    (27.7420, 85.2400), (27.7440, 85.2380), (27.7460, 85.2360), (27.7480, 85.2340),
    (27.7500, 85.2320), (27.7520, 85.2300), (27.7540, 85.2280), (27.7560, 85.2260),
    (27.7580, 85.2240), (27.7600, 85.2220), (27.7650, 85.2210), (27.7700, 85.2205),
    (27.7750, 85.2202), (27.7800, 85.2200),
)


def _ring_from_latlon(points: tuple[tuple[float, float], ...]) -> Ring:
    return tuple((lon, lat) for lat, lon in points)


NEPAL_POLYGON: Polygon = (_ring_from_latlon(_NEPAL_LATLON),)
BAGMATI_POLYGON: Polygon = (_ring_from_latlon(_BAGMATI_LATLON),)
NAGARJUN_POLYGON: Polygon = (_ring_from_latlon(_NAGARJUN_LATLON),)

_FALLBACK_GEOMETRY: dict[str, tuple[str, Polygon]] = {
    "country": ("Nepal", NEPAL_POLYGON),
    "province": ("Bagmati Province", BAGMATI_POLYGON),
    "municipality": ("Nagarjun Municipality", NAGARJUN_POLYGON),
}


def fallback_boundary(level: str, styles: StylesConfig) -> ResolvedBoundary:
    label, polygon = _FALLBACK_GEOMETRY[level]
    return ResolvedBoundary(
        level=level,
        polygons=(polygon,),
        style=styles.for_level(level),
        provenance=PROVENANCE_FALLBACK,
        label=label,
        approximate=True,
    )


def fallback_boundaries(
    styles: StylesConfig, *, contested_territory_included: bool | None = None
) -> ResolvedBoundaries:
    """All three levels from the static outlines, together.

    `contested_territory_included` is the territory check run on
    `NEPAL_POLYGON`; None means it was not run.
    """
    _LOGGER.warning("Using fallback boundaries. %s", FALLBACK_CAVEAT)
    return ResolvedBoundaries(
        country=fallback_boundary("country", styles),
        province=fallback_boundary("province", styles),
        municipality=fallback_boundary("municipality", styles),
        complete=False,
        contested_territory_included=contested_territory_included,
        caveats=(FALLBACK_CAVEAT,),
    )
