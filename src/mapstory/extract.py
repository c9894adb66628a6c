"""Sub-region lookup inside combined boundary datasets."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Sequence

from .models import BoundaryDataset, BoundaryFeature

_LOGGER = logging.getLogger("mapstory.extract")


@dataclass(frozen=True, slots=True)
class RegionMatcher:
    """Name rule for picking one region out of a dataset.

    The region name is the first non-empty value among `name_keys`, in
    order. A region matches when the case-folded `target` occurs in that
    name, or when the name equals one of `aliases` exactly.
    """

    target: str
    name_keys: tuple[str, ...]
    aliases: tuple[str, ...] = ()
    hint: str | None = None

    def __post_init__(self) -> None:
        if not self.target.strip():
            raise ValueError("RegionMatcher target must be non-empty")
        if not self.name_keys:
            raise ValueError("RegionMatcher needs at least one name key")

    def resolve_name(self, properties: Mapping[str, Any]) -> str:
        for key in self.name_keys:
            value = properties.get(key)
            if value is None or isinstance(value, bool):
                continue
            name = str(value).strip()
            if name:
                return name
        return ""

    def matches(self, properties: Mapping[str, Any]) -> bool:
        name = self.resolve_name(properties)
        if not name:
            return False
        if self.target.casefold() in name.casefold():
            return True
        return name in self.aliases


def find_region(dataset: BoundaryDataset, matcher: RegionMatcher) -> BoundaryFeature | None:
    """Return the first region matching `matcher`, or None when absent."""
    matched: list[BoundaryFeature] = [feature for feature in dataset if matcher.matches(feature.properties)]
    if not matched:
        return None
    if len(matched) > 1:
        _LOGGER.warning(
            "%d regions match '%s' in %s; using the first (%s). Others: %s",
            len(matched),
            matcher.target,
            dataset.source.source_id,
            matcher.resolve_name(matched[0].properties),
            _format_names([matcher.resolve_name(feature.properties) for feature in matched[1:]]),
        )
    return matched[0]


def sample_names(
    dataset: BoundaryDataset,
    matcher: RegionMatcher,
    *,
    contains: str | None = None,
    limit: int = 10,
) -> list[str]:
    """List region names for not-found diagnostics, optionally filtered."""
    needle = (contains or matcher.hint or "").casefold()
    names: list[str] = []
    for feature in dataset:
        name = matcher.resolve_name(feature.properties)
        if not name:
            continue
        if needle and needle not in name.casefold():
            continue
        names.append(name)
        if len(names) >= limit:
            break
    return names


def _format_names(values: Sequence[str], limit: int = 5) -> str:
    if len(values) <= limit:
        return ", ".join(values)
    shown = ", ".join(values[:limit])
    return f"{shown}, ... (+{len(values) - limit} more)"
