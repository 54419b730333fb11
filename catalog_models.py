"""
Catalog data model
Satellites, their views and the downloadable image sources for each view
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union

from errors import CatalogSelectionError
from render_options import ScalingMode


def _require(data: Dict[str, Any], key: str) -> Any:
    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object, got {type(data).__name__}")
    if key not in data:
        raise ValueError(f"Missing required key '{key}'")
    return data[key]


def _as_int(value: Any, key: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError(f"'{key}' must be a non-negative integer, got {value!r}")
    return value


def _as_str(value: Any, key: str) -> str:
    if not isinstance(value, str):
        raise ValueError(f"'{key}' must be a string, got {value!r}")
    return value


def _as_list(value: Any, key: str) -> List[Any]:
    if not isinstance(value, list):
        raise ValueError(f"'{key}' must be an array, got {type(value).__name__}")
    return value


@dataclass(frozen=True)
class ImageSource:
    id: int
    url: str
    estimated_size: str
    update_interval_seconds: int
    dimensions: Tuple[int, int]
    default_scaling: ScalingMode
    is_thumbnail: bool = False

    @property
    def pixel_area(self) -> int:
        return self.dimensions[0] * self.dimensions[1]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ImageSource":
        dimensions = _as_list(_require(data, "dimensions"), "dimensions")
        if len(dimensions) != 2:
            raise ValueError(f"'dimensions' must hold exactly two values, got {len(dimensions)}")
        is_thumbnail = data.get("isThumbnail", False)
        if not isinstance(is_thumbnail, bool):
            raise ValueError(f"'isThumbnail' must be a boolean, got {is_thumbnail!r}")
        return cls(
            id=_as_int(_require(data, "id"), "id"),
            url=_as_str(_require(data, "url"), "url"),
            estimated_size=_as_str(_require(data, "estimatedSize"), "estimatedSize"),
            update_interval_seconds=_as_int(_require(data, "updateInterval"), "updateInterval"),
            dimensions=(_as_int(dimensions[0], "dimensions"), _as_int(dimensions[1], "dimensions")),
            default_scaling=ScalingMode.from_wire(
                _as_str(_require(data, "defaultScaling"), "defaultScaling")
            ),
            is_thumbnail=is_thumbnail,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "url": self.url,
            "estimatedSize": self.estimated_size,
            "updateInterval": self.update_interval_seconds,
            "dimensions": list(self.dimensions),
            "isThumbnail": self.is_thumbnail,
            "defaultScaling": self.default_scaling.wire_name,
        }


@dataclass(frozen=True)
class SatelliteView:
    id: int
    name: str
    image_sources: Tuple[ImageSource, ...] = field(default_factory=tuple)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SatelliteView":
        sources = _as_list(_require(data, "imageSources"), "imageSources")
        return cls(
            id=_as_int(_require(data, "id"), "id"),
            name=_as_str(_require(data, "name"), "name"),
            image_sources=tuple(ImageSource.from_dict(item) for item in sources),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "imageSources": [source.to_dict() for source in self.image_sources],
        }

    def find_image_source(self, source_id: int) -> ImageSource:
        for source in self.image_sources:
            if source.id == source_id:
                return source
        raise CatalogSelectionError(f"View '{self.name}' has no image source with id {source_id}")

    def best_image_source(self) -> ImageSource:
        """Largest full-size source; thumbnails only when nothing else exists."""
        if not self.image_sources:
            raise CatalogSelectionError(f"View '{self.name}' has no image sources")
        full_size = [source for source in self.image_sources if not source.is_thumbnail]
        candidates = full_size or list(self.image_sources)
        return max(candidates, key=lambda source: source.pixel_area)


@dataclass(frozen=True)
class Satellite:
    id: int
    name: str
    views: Tuple[SatelliteView, ...] = field(default_factory=tuple)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Satellite":
        views = _as_list(_require(data, "views"), "views")
        return cls(
            id=_as_int(_require(data, "id"), "id"),
            name=_as_str(_require(data, "name"), "name"),
            views=tuple(SatelliteView.from_dict(item) for item in views),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "views": [view.to_dict() for view in self.views]}

    def find_view(self, view_id: int) -> SatelliteView:
        for view in self.views:
            if view.id == view_id:
                return view
        raise CatalogSelectionError(f"Satellite '{self.name}' has no view with id {view_id}")


@dataclass(frozen=True)
class Catalog:
    dns_http_probe_override: Tuple[str, ...] = field(default_factory=tuple)
    satellites: Tuple[Satellite, ...] = field(default_factory=tuple)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Catalog":
        overrides = _as_list(_require(data, "dnsHttpProbeOverride"), "dnsHttpProbeOverride")
        satellites = _as_list(_require(data, "satellites"), "satellites")
        return cls(
            dns_http_probe_override=tuple(_as_str(item, "dnsHttpProbeOverride") for item in overrides),
            satellites=tuple(Satellite.from_dict(item) for item in satellites),
        )

    @classmethod
    def from_json(cls, payload: Union[str, bytes]) -> "Catalog":
        """Parse a catalog document; raises ValueError on any schema mismatch."""
        return cls.from_dict(json.loads(payload))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dnsHttpProbeOverride": list(self.dns_http_probe_override),
            "satellites": [satellite.to_dict() for satellite in self.satellites],
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)

    def find_satellite(self, satellite_id: int) -> Satellite:
        for satellite in self.satellites:
            if satellite.id == satellite_id:
                return satellite
        raise CatalogSelectionError(f"Catalog has no satellite with id {satellite_id}")

    def select(self, satellite_id: int, view_id: int, source_id: Optional[int] = None) -> ImageSource:
        view = self.find_satellite(satellite_id).find_view(view_id)
        if source_id is None:
            return view.best_image_source()
        return view.find_image_source(source_id)


@dataclass(frozen=True)
class CachedCatalog:
    catalog: Catalog
    etag: str
    downloaded_at: int

    def age(self, now: float) -> float:
        return now - self.downloaded_at
