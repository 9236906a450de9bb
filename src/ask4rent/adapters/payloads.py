"""Pydantic models for backend JSON payloads."""

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class _Payload(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class PropertyPayload(_Payload):
    """Rental listing as returned by the query services."""

    id: str | int | None = Field(
        default=None, validation_alias=AliasChoices("id", "listing_id", "property_id")
    )
    address: str = Field(validation_alias=AliasChoices("address", "full_address"))
    title: str | None = None
    rent_per_week: float | None = Field(
        default=None,
        validation_alias=AliasChoices("rent_per_week", "rentPerWeek", "weekly_rent", "price"),
    )
    bedrooms: int | None = None
    bathrooms: int | None = None
    parking: int | None = Field(
        default=None, validation_alias=AliasChoices("parking", "carparks", "parking_spaces")
    )
    latitude: float = Field(validation_alias=AliasChoices("latitude", "lat"))
    longitude: float = Field(validation_alias=AliasChoices("longitude", "lng", "lon"))
    property_type: str | None = Field(
        default=None, validation_alias=AliasChoices("property_type", "propertyType", "type")
    )


class TerritorialAuthorityPayload(_Payload):
    """Territorial authority summary."""

    id: str | int | None = Field(
        default=None, validation_alias=AliasChoices("id", "ta_id", "ta_code")
    )
    name: str = Field(validation_alias=AliasChoices("name", "ta_name"))
    school_count: int = Field(
        default=0, validation_alias=AliasChoices("school_count", "schoolCount")
    )
    lat: float = Field(validation_alias=AliasChoices("lat", "latitude"))
    lon: float = Field(validation_alias=AliasChoices("lon", "lng", "longitude"))


class SchoolPayload(_Payload):
    """School summary; coordinates arrive under several field names."""

    id: str | int | None = Field(
        default=None, validation_alias=AliasChoices("id", "school_id", "school_number")
    )
    name: str = Field(validation_alias=AliasChoices("name", "school_name", "org_name"))
    lat: float = Field(validation_alias=AliasChoices("lat", "latitude", "y"))
    lon: float = Field(validation_alias=AliasChoices("lon", "lng", "longitude", "x"))


class PropertyListPayload(_Payload):
    """Envelope for listing results."""

    properties: list[PropertyPayload] = Field(
        default_factory=list,
        validation_alias=AliasChoices("properties", "rentals", "results"),
    )


class TerritorialAuthorityListPayload(_Payload):
    """Envelope for the territorial authority list."""

    territorial_authorities: list[TerritorialAuthorityPayload] = Field(
        default_factory=list,
        validation_alias=AliasChoices("territorial_authorities", "tas", "results"),
    )


class SchoolsResponsePayload(_Payload):
    """Schools inside a territorial authority with its optional boundary."""

    schools: list[SchoolPayload] = Field(default_factory=list)
    boundary: Any = Field(
        default=None, validation_alias=AliasChoices("boundary", "geojson", "ta_boundary")
    )


class RentalsResponsePayload(_Payload):
    """Rentals near a school with the school zone boundary, if any."""

    rentals: list[PropertyPayload] = Field(
        default_factory=list, validation_alias=AliasChoices("rentals", "properties")
    )
    boundary: Any = Field(
        default=None,
        validation_alias=AliasChoices("boundary", "school_zone", "zone_geojson", "geojson"),
    )


class IsochroneResponsePayload(_Payload):
    """Rentals reachable within a drive time and the isochrone polygon."""

    rentals: list[PropertyPayload] = Field(
        default_factory=list, validation_alias=AliasChoices("rentals", "properties")
    )
    isochrone: Any = Field(
        default=None, validation_alias=AliasChoices("isochrone", "geometry", "geojson")
    )


class PlacePayload(_Payload):
    """Geocoder search hit."""

    name: str | None = None
    display_name: str
    lat: float
    lon: float


class FavoritePayload(_Payload):
    """Favorite entry; older responses use ``id`` instead of ``listing_id``."""

    listing_id: str | int = Field(validation_alias=AliasChoices("listing_id", "id"))
    property: PropertyPayload | None = None
