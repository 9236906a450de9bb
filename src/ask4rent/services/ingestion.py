"""Mapping of backend payloads onto domain types.

Every alternate field name and envelope shape is resolved here once; code
downstream only sees the domain dataclasses.
"""

from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from ask4rent.adapters.payloads import (
    FavoritePayload,
    IsochroneResponsePayload,
    PlacePayload,
    PropertyListPayload,
    PropertyPayload,
    RentalsResponsePayload,
    SchoolPayload,
    SchoolsResponsePayload,
    TerritorialAuthorityListPayload,
    TerritorialAuthorityPayload,
)
from ask4rent.domain.geo import GeoPoint
from ask4rent.domain.listings import (
    Favorite,
    Place,
    Property,
    School,
    TerritorialAuthority,
)
from ask4rent.errors import MalformedPayloadError

_ModelT = TypeVar("_ModelT", bound=BaseModel)


def parse_properties(raw: object) -> list[Property]:
    """Map a natural-language query response onto properties."""
    if raw is None:
        return []
    envelope = _validate(
        PropertyListPayload, {"properties": raw} if isinstance(raw, list) else raw, "query"
    )
    return [to_property(item) for item in envelope.properties]


def parse_territorial_authorities(raw: object) -> list[TerritorialAuthority]:
    """Map the territorial authority list."""
    if isinstance(raw, list):
        raw = {"territorial_authorities": raw}
    envelope = _validate(TerritorialAuthorityListPayload, raw, "territorial_authorities")
    return [to_territorial_authority(item) for item in envelope.territorial_authorities]


def parse_schools(raw: object) -> tuple[list[School], Any]:
    """Map a schools-by-territorial-authority response to schools and raw boundary."""
    envelope = _validate(SchoolsResponsePayload, raw, "schools")
    return [to_school(item) for item in envelope.schools], envelope.boundary


def parse_school_rentals(raw: object) -> tuple[list[Property], Any]:
    """Map a rentals-by-school response to properties and raw school zone."""
    envelope = _validate(RentalsResponsePayload, raw, "school_rentals")
    return [to_property(item) for item in envelope.rentals], envelope.boundary


def parse_isochrone(raw: object) -> tuple[list[Property], Any]:
    """Map a driving isochrone response to properties and raw isochrone."""
    envelope = _validate(IsochroneResponsePayload, raw, "isochrone")
    return [to_property(item) for item in envelope.rentals], envelope.isochrone


def parse_places(raw: object) -> list[Place]:
    """Map geocoder hits onto places."""
    if not isinstance(raw, list):
        raise MalformedPayloadError("places", "expected a list of places")
    places = []
    for item in raw:
        payload = _validate(PlacePayload, item, "places")
        name = payload.name or payload.display_name.split(",")[0].strip()
        places.append(
            Place(
                name=name,
                display_name=payload.display_name,
                location=GeoPoint(lat=payload.lat, lng=payload.lon),
            )
        )
    return places


def parse_favorites(raw: object) -> list[Favorite]:
    """Map the favorites list."""
    if isinstance(raw, dict):
        raw = raw.get("favorites", [])
    if not isinstance(raw, list):
        raise MalformedPayloadError("favorites", "expected a list of favorites")
    favorites = []
    for item in raw:
        payload = _validate(FavoritePayload, item, "favorites")
        listing = to_property(payload.property) if payload.property else None
        favorites.append(
            Favorite(
                listing_id=str(payload.listing_id),
                address=listing.address if listing else None,
                location=listing.location if listing else None,
            )
        )
    return favorites


def to_property(payload: PropertyPayload) -> Property:
    return Property(
        id=str(payload.id) if payload.id not in (None, "") else None,
        address=payload.address,
        rent_per_week=payload.rent_per_week,
        bedrooms=payload.bedrooms,
        bathrooms=payload.bathrooms,
        parking=payload.parking,
        location=GeoPoint(lat=payload.latitude, lng=payload.longitude),
        property_type=payload.property_type,
        title=payload.title,
    )


def to_territorial_authority(payload: TerritorialAuthorityPayload) -> TerritorialAuthority:
    return TerritorialAuthority(
        id=str(payload.id) if payload.id not in (None, "") else payload.name,
        name=payload.name,
        school_count=payload.school_count,
        location=GeoPoint(lat=payload.lat, lng=payload.lon),
    )


def to_school(payload: SchoolPayload) -> School:
    return School(
        id=str(payload.id) if payload.id not in (None, "") else payload.name,
        name=payload.name,
        location=GeoPoint(lat=payload.lat, lng=payload.lon),
    )


def _validate(model: type[_ModelT], raw: object, source: str) -> _ModelT:
    if not isinstance(raw, dict):
        raise MalformedPayloadError(source, f"expected an object, got {type(raw).__name__}")
    try:
        return model.model_validate(raw)
    except ValidationError as exc:
        raise MalformedPayloadError(source, str(exc)) from exc
