"""Viewport framing for sets of located points."""

from collections.abc import Iterable

from ask4rent.domain.geo import GeoPoint, ViewState

DEFAULT_VIEW = ViewState(center=GeoPoint(lat=-36.8485, lng=174.7633), zoom=12)
SINGLE_POINT_ZOOM = 15

# (span greater than, zoom), widest first.
_ZOOM_THRESHOLDS: tuple[tuple[float, int], ...] = (
    (0.5, 10),
    (0.2, 11),
    (0.1, 12),
    (0.05, 13),
    (0.02, 14),
)


def compute_bounds(
    points: Iterable[GeoPoint], fallback: ViewState = DEFAULT_VIEW
) -> ViewState:
    """Return a center and zoom framing all points.

    The center is the midpoint of the bounding box rather than the centroid,
    so dense clusters do not pull the view away from outliers.
    """
    located = list(points)
    if not located:
        return fallback
    if len(located) == 1:
        return ViewState(center=located[0], zoom=SINGLE_POINT_ZOOM)

    lats = [point.lat for point in located]
    lngs = [point.lng for point in located]
    min_lat, max_lat = min(lats), max(lats)
    min_lng, max_lng = min(lngs), max(lngs)
    center = GeoPoint(lat=(min_lat + max_lat) / 2, lng=(min_lng + max_lng) / 2)
    span = max(max_lat - min_lat, max_lng - min_lng)
    return ViewState(center=center, zoom=zoom_for_span(span))


def zoom_for_span(span: float) -> int:
    """Map the larger bounding-box span in degrees onto a discrete zoom."""
    for threshold, zoom in _ZOOM_THRESHOLDS:
        if span > threshold:
            return zoom
    return SINGLE_POINT_ZOOM
