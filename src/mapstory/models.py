"""Domain models shared across the boundary resolution pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator, Mapping

Position = tuple[float, float]
Ring = tuple[Position, ...]
Polygon = tuple[Ring, ...]

LEVELS = ("country", "province", "municipality", "district")
OUTPUT_LEVELS = ("country", "province", "municipality")
TRUST_TAGS = ("official", "government-verified", "community-maintained")

PROVENANCE_FALLBACK = "fallback"
PROVENANCE_DISTRICT_PROXY = "district-proxy"


def _require_str(value: Any, field_name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Expected non-empty string for '{field_name}'")
    return value.strip()


def _require_choice(value: Any, choices: tuple[str, ...], field_name: str) -> str:
    normalized = _require_str(value, field_name).casefold()
    if normalized not in choices:
        raise ValueError(f"'{field_name}' must be one of: {', '.join(choices)}")
    return normalized


@dataclass(frozen=True, slots=True)
class BoundarySource:
    """One remote endpoint serving administrative polygons for a level."""

    source_id: str
    url: str
    level: str
    trust: str
    tier: int = 1

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> BoundarySource:
        source_id = _require_str(data.get("id"), "id")
        url = _require_str(data.get("url"), "url")
        if not url.casefold().startswith(("http://", "https://")):
            raise ValueError(f"Source '{source_id}' url must be http(s): {url}")
        tier_raw = data.get("tier", 1)
        if not isinstance(tier_raw, int) or isinstance(tier_raw, bool) or tier_raw < 1:
            raise ValueError(f"Source '{source_id}' tier must be a positive integer")
        return cls(
            source_id=source_id,
            url=url,
            level=_require_choice(data.get("level"), LEVELS, "level"),
            trust=_require_choice(data.get("trust"), TRUST_TAGS, "trust"),
            tier=tier_raw,
        )

    def describe(self) -> str:
        return f"{self.source_id} [{self.trust}, tier {self.tier}] {self.url}"


@dataclass(frozen=True, slots=True)
class BoundaryFeature:
    """A named region parsed from a GeoJSON feature."""

    polygons: tuple[Polygon, ...]
    properties: Mapping[str, Any] = field(default_factory=dict)

    def to_geometry(self) -> dict[str, Any]:
        return geometry_from_polygons(self.polygons)


@dataclass(frozen=True, slots=True)
class BoundaryDataset:
    """Regions parsed from one fetched payload, in payload order."""

    source: BoundarySource
    features: tuple[BoundaryFeature, ...]
    skipped_features: int = 0

    def __len__(self) -> int:
        return len(self.features)

    def __iter__(self) -> Iterator[BoundaryFeature]:
        return iter(self.features)

    @property
    def polygons(self) -> tuple[Polygon, ...]:
        return tuple(polygon for feature in self.features for polygon in feature.polygons)


@dataclass(frozen=True, slots=True)
class StyleIntent:
    """How the rendering layer should draw a boundary."""

    color: str
    weight: float
    opacity: float
    fill_color: str
    fill_opacity: float
    class_name: str | None = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], field_name: str) -> StyleIntent:
        def _unit(key: str) -> float:
            raw = data.get(key)
            if not isinstance(raw, (int, float)) or isinstance(raw, bool):
                raise ValueError(f"Expected number for '{field_name}.{key}'")
            value = float(raw)
            if value < 0.0 or value > 1.0:
                raise ValueError(f"'{field_name}.{key}' must be between 0 and 1")
            return value

        weight_raw = data.get("weight")
        if not isinstance(weight_raw, (int, float)) or isinstance(weight_raw, bool) or weight_raw < 0:
            raise ValueError(f"Expected non-negative number for '{field_name}.weight'")
        color = _require_str(data.get("color"), f"{field_name}.color")
        fill_raw = data.get("fill_color")
        class_raw = data.get("class_name")
        return cls(
            color=color,
            weight=float(weight_raw),
            opacity=_unit("opacity"),
            fill_color=_require_str(fill_raw, f"{field_name}.fill_color") if fill_raw is not None else color,
            fill_opacity=_unit("fill_opacity"),
            class_name=_require_str(class_raw, f"{field_name}.class_name") if class_raw is not None else None,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "color": self.color,
            "weight": self.weight,
            "opacity": self.opacity,
            "fill_color": self.fill_color,
            "fill_opacity": self.fill_opacity,
            "class_name": self.class_name,
        }


@dataclass(frozen=True, slots=True)
class ResolvedBoundary:
    """Final geometry for one administrative level, owned by the renderer."""

    level: str
    polygons: tuple[Polygon, ...]
    style: StyleIntent
    provenance: str
    label: str
    source_id: str | None = None
    source_url: str | None = None
    trust: str | None = None
    proxy: bool = False
    approximate: bool = False

    @property
    def rings(self) -> tuple[Ring, ...]:
        return tuple(ring for polygon in self.polygons for ring in polygon)

    @property
    def is_fallback(self) -> bool:
        return self.provenance == PROVENANCE_FALLBACK

    def to_geometry(self) -> dict[str, Any]:
        return geometry_from_polygons(self.polygons)


@dataclass(frozen=True, slots=True)
class ResolvedBoundaries:
    """The three output slots handed to the rendering layer."""

    country: ResolvedBoundary | None
    province: ResolvedBoundary | None
    municipality: ResolvedBoundary | None
    complete: bool
    contested_territory_included: bool | None = None
    caveats: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        for level in OUTPUT_LEVELS:
            boundary = getattr(self, level)
            if boundary is not None and boundary.level != level:
                raise ValueError(f"Boundary for slot '{level}' has level '{boundary.level}'")

    def get(self, level: str) -> ResolvedBoundary | None:
        if level not in OUTPUT_LEVELS:
            raise KeyError(level)
        return getattr(self, level)

    def items(self) -> Iterator[tuple[str, ResolvedBoundary]]:
        """Yield `(level, boundary)` for every resolved slot, country first."""
        for level in OUTPUT_LEVELS:
            boundary = getattr(self, level)
            if boundary is not None:
                yield level, boundary

    @property
    def used_fallback(self) -> bool:
        return any(boundary.is_fallback for _, boundary in self.items())

    def provenance_by_level(self) -> dict[str, str | None]:
        out: dict[str, str | None] = {}
        for level in OUTPUT_LEVELS:
            boundary = getattr(self, level)
            out[level] = boundary.provenance if boundary is not None else None
        return out


def geometry_from_polygons(polygons: tuple[Polygon, ...]) -> dict[str, Any]:
    """Build a GeoJSON geometry mapping, collapsing single polygons."""
    as_lists = [[[list(position) for position in ring] for ring in polygon] for polygon in polygons]
    if len(as_lists) == 1:
        return {"type": "Polygon", "coordinates": as_lists[0]}
    return {"type": "MultiPolygon", "coordinates": as_lists}
