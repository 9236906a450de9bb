"""Geographic value objects."""

from dataclasses import dataclass


@dataclass(frozen=True)
class GeoPoint:
    """A WGS84 coordinate in (latitude, longitude) order."""

    lat: float
    lng: float


@dataclass(frozen=True)
class ViewState:
    """Map viewport framing."""

    center: GeoPoint
    zoom: int


@dataclass(frozen=True)
class ZoneGeometry:
    """Canonical polygon collection.

    Each ring is closed and stored in (lat, lng) order. Outer rings wind
    counter-clockwise and hole rings clockwise.
    """

    polygons: tuple[tuple[GeoPoint, ...], ...]


@dataclass(frozen=True)
class ViewportDefaults:
    """Fixed framing constants for each search mode."""

    center: GeoPoint
    zoom: int = 12
    territorial_overview_zoom: int = 6
    commute_overview_zoom: int = 11
    zone_zoom: int = 12
    school_zoom: int = 15
    school_empty_zoom: int = 14
    property_focus_zoom: int = 14
    commute_origin_zoom: int = 13
    fallback_zone_radius_km: float = 3.0

    @property
    def default_view(self) -> ViewState:
        return ViewState(center=self.center, zoom=self.zoom)
