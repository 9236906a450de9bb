"""Search state models exposed to the rendering layer."""

from dataclasses import dataclass, field
from enum import StrEnum

from ask4rent.domain.geo import GeoPoint, ViewState, ZoneGeometry
from ask4rent.domain.listings import Property, School, TerritorialAuthority


class SearchMode(StrEnum):
    """Active search mode."""

    HOME = "home"
    PROPERTIES = "properties"
    TERRITORIAL_AUTHORITIES = "territorial_authorities"
    ZONES = "zones"
    COMMUTE = "commute"


class MessageKind(StrEnum):
    """Classification of a user-facing message."""

    INFO = "info"
    NO_RESULTS = "no_results"
    TRANSPORT_ERROR = "transport_error"
    MALFORMED = "malformed"
    SESSION = "session"


@dataclass(frozen=True)
class UserMessage:
    """A message for the notification layer."""

    kind: MessageKind
    text: str


@dataclass(frozen=True)
class SelectionChain:
    """Currently chosen entities for the active mode."""

    territorial_authority: TerritorialAuthority | None = None
    school: School | None = None
    property: Property | None = None
    commute_origin: GeoPoint | None = None


@dataclass(frozen=True)
class CommuteSearch:
    """A completed driving-isochrone search."""

    origin: GeoPoint
    minutes: int
    isochrone: ZoneGeometry | None
    result_properties: tuple[Property, ...]


@dataclass(frozen=True)
class PropertyFilter:
    """Client-side narrowing of a result set. Bounds are inclusive."""

    min_rent: float | None = None
    max_rent: float | None = None
    min_bedrooms: int | None = None
    max_bedrooms: int | None = None
    min_bathrooms: int | None = None
    max_bathrooms: int | None = None


@dataclass(frozen=True)
class ViewSnapshot:
    """Read-only view of the orchestrator state."""

    mode: SearchMode
    view: ViewState
    selection: SelectionChain = field(default_factory=SelectionChain)
    properties: tuple[Property, ...] = ()
    visible_properties: tuple[Property, ...] = ()
    territorial_authorities: tuple[TerritorialAuthority, ...] = ()
    schools: tuple[School, ...] = ()
    zone_boundary: ZoneGeometry | None = None
    zone_boundary_approximate: bool = False
    commute: CommuteSearch | None = None
    filters: PropertyFilter = field(default_factory=PropertyFilter)
    loading: bool = False
    message: UserMessage | None = None

    @property
    def selected_property_key(self) -> str | None:
        selected = self.selection.property
        return selected.key if selected else None

    @property
    def result_text(self) -> str:
        if self.loading:
            return "Searching..."
        count = len(self.visible_properties)
        if count == 0:
            return "No properties found"
        noun = "property" if count == 1 else "properties"
        return f"Found {count} {noun}"
