"""Normalization of boundary payloads into canonical zone geometry."""

import logging
import math
from collections.abc import Sequence

from ask4rent.domain.geo import GeoPoint, ZoneGeometry

_logger = logging.getLogger(__name__)

_KM_PER_DEGREE_LAT = 111.32
_CIRCLE_SEGMENTS = 48


class _MalformedGeometry(ValueError):
    pass


def has_boundary_data(raw: object) -> bool:
    """Return whether a payload carries any boundary at all.

    Lets callers tell "no zone to draw" apart from a boundary that failed to
    normalize. A feature collection without features, or whose features all
    carry a null geometry, has nothing to draw and is not malformed.
    """
    if raw is None:
        return False
    if isinstance(raw, dict):
        kind = raw.get("type")
        features = raw.get("features")
        if kind == "FeatureCollection" and isinstance(features, list):
            return any(_has_geometry(feature) for feature in features)
        if kind == "Feature":
            return _has_geometry(raw)
    if isinstance(raw, dict | list | str):
        return bool(raw)
    return True


def normalize_zone_geometry(raw: object) -> ZoneGeometry | None:
    """Normalize a boundary payload into a canonical polygon collection.

    Accepts a GeoJSON FeatureCollection, a single Feature, or a bare
    Polygon/MultiPolygon geometry. Bare geometries are wrapped into a
    one-feature collection first. Source coordinates are (lng, lat) and are
    swapped on every vertex. Returns None when there is nothing to draw,
    including when the payload is malformed; malformed input is logged and
    can be detected with ``has_boundary_data``.
    """
    if not has_boundary_data(raw):
        return None
    try:
        collection = _as_feature_collection(raw)
        rings: list[tuple[GeoPoint, ...]] = []
        for feature in collection["features"]:
            rings.extend(_feature_rings(feature))
    except (_MalformedGeometry, KeyError, TypeError, ValueError) as exc:
        _logger.warning("Discarding malformed boundary payload: %s", exc)
        return None
    if not rings:
        return None
    return ZoneGeometry(polygons=tuple(rings))


def approximate_circle(
    center: GeoPoint, radius_km: float, segments: int = _CIRCLE_SEGMENTS
) -> ZoneGeometry:
    """Build a closed circular ring around a point for zones without a boundary."""
    lat_radius = radius_km / _KM_PER_DEGREE_LAT
    cos_lat = max(math.cos(math.radians(center.lat)), 1e-6)
    lng_radius = radius_km / (_KM_PER_DEGREE_LAT * cos_lat)
    ring = [
        GeoPoint(
            lat=center.lat + lat_radius * math.sin(2 * math.pi * step / segments),
            lng=center.lng + lng_radius * math.cos(2 * math.pi * step / segments),
        )
        for step in range(segments)
    ]
    ring.append(ring[0])
    return ZoneGeometry(polygons=(tuple(ring),))


def _has_geometry(feature: object) -> bool:
    return not isinstance(feature, dict) or feature.get("geometry") is not None


def _as_feature_collection(raw: object) -> dict:
    if not isinstance(raw, dict):
        raise _MalformedGeometry(f"expected an object, got {type(raw).__name__}")
    kind = raw.get("type")
    if kind == "FeatureCollection":
        features = raw.get("features")
        if not isinstance(features, list):
            raise _MalformedGeometry("feature collection without a features list")
        return raw
    if kind == "Feature":
        return {"type": "FeatureCollection", "features": [raw]}
    if kind in {"Polygon", "MultiPolygon"}:
        return {
            "type": "FeatureCollection",
            "features": [{"type": "Feature", "geometry": raw, "properties": {}}],
        }
    raise _MalformedGeometry(f"unsupported boundary type {kind!r}")


def _feature_rings(feature: object) -> list[tuple[GeoPoint, ...]]:
    if not isinstance(feature, dict):
        raise _MalformedGeometry("feature is not an object")
    geometry = feature.get("geometry")
    if geometry is None:
        return []
    if not isinstance(geometry, dict):
        raise _MalformedGeometry("geometry is not an object")
    kind = geometry.get("type")
    coordinates = geometry.get("coordinates")
    if kind == "Polygon":
        return _polygon_rings(coordinates)
    if kind == "MultiPolygon":
        if not isinstance(coordinates, list):
            raise _MalformedGeometry("multipolygon coordinates are not a list")
        rings: list[tuple[GeoPoint, ...]] = []
        for polygon in coordinates:
            rings.extend(_polygon_rings(polygon))
        return rings
    raise _MalformedGeometry(f"unsupported geometry type {kind!r}")


def _polygon_rings(coordinates: object) -> list[tuple[GeoPoint, ...]]:
    if not isinstance(coordinates, list) or not coordinates:
        raise _MalformedGeometry("polygon without rings")
    rings = []
    for index, raw_ring in enumerate(coordinates):
        ring = _ring(raw_ring)
        outer = index == 0
        if _is_counter_clockwise(ring) != outer:
            ring = tuple(reversed(ring))
        rings.append(ring)
    return rings


def _ring(raw_ring: object) -> tuple[GeoPoint, ...]:
    if not isinstance(raw_ring, list):
        raise _MalformedGeometry("ring is not a list")
    points = [_vertex(position) for position in raw_ring]
    if len(points) < 3:
        raise _MalformedGeometry("ring has fewer than three vertices")
    if points[0] != points[-1]:
        points.append(points[0])
    return tuple(points)


def _vertex(position: object) -> GeoPoint:
    if not isinstance(position, Sequence) or isinstance(position, str):
        raise _MalformedGeometry("vertex is not a coordinate pair")
    if len(position) < 2:
        raise _MalformedGeometry("vertex has fewer than two values")
    lng, lat = float(position[0]), float(position[1])
    return GeoPoint(lat=lat, lng=lng)


def _is_counter_clockwise(ring: tuple[GeoPoint, ...]) -> bool:
    # Shoelace sum in the (lng, lat) plane.
    area = 0.0
    for current, following in zip(ring, ring[1:], strict=False):
        area += current.lng * following.lat - following.lng * current.lat
    return area > 0
