"""Listing and place models returned by the backend."""

from dataclasses import dataclass

from ask4rent.domain.geo import GeoPoint


@dataclass(frozen=True)
class Property:
    """A rental listing snapshot for the lifetime of a result set."""

    id: str | None
    address: str
    rent_per_week: float | None
    bedrooms: int | None
    bathrooms: int | None
    parking: int | None
    location: GeoPoint
    property_type: str | None = None
    title: str | None = None

    @property
    def key(self) -> str:
        """Identity used to correlate a listing across results and selection."""
        return self.id if self.id else self.address


@dataclass(frozen=True)
class TerritorialAuthority:
    """An administrative area grouping schools."""

    id: str
    name: str
    school_count: int
    location: GeoPoint


@dataclass(frozen=True)
class School:
    """A school with its location."""

    id: str
    name: str
    location: GeoPoint


@dataclass(frozen=True)
class Place:
    """A geocoded place from free-text search."""

    name: str
    display_name: str
    location: GeoPoint


@dataclass(frozen=True)
class Favorite:
    """A favorited listing."""

    listing_id: str
    address: str | None = None
    location: GeoPoint | None = None
