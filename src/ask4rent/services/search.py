"""Search mode state machine driving the map and result panels."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field, replace
from typing import Protocol, TypeVar

import httpx

from ask4rent.domain.geo import GeoPoint, ViewportDefaults, ViewState
from ask4rent.domain.listings import Place, Property, School, TerritorialAuthority
from ask4rent.domain.search import (
    CommuteSearch,
    MessageKind,
    PropertyFilter,
    SearchMode,
    SelectionChain,
    UserMessage,
    ViewSnapshot,
)
from ask4rent.errors import (
    InvalidTransitionError,
    MalformedPayloadError,
    SessionCreationError,
    SessionRejectedError,
)
from ask4rent.services.bounds import compute_bounds
from ask4rent.services.filters import filter_properties, is_empty
from ask4rent.services.geometry import (
    approximate_circle,
    has_boundary_data,
    normalize_zone_geometry,
)
from ask4rent.services.ingestion import (
    parse_isochrone,
    parse_places,
    parse_properties,
    parse_school_rentals,
    parse_schools,
    parse_territorial_authorities,
)
from ask4rent.services.sessions import SessionLifecycleManager

_logger = logging.getLogger(__name__)

_T = TypeVar("_T")

MIN_PLACE_QUERY_LENGTH = 2
SESSION_MESSAGE = UserMessage(
    kind=MessageKind.SESSION,
    text="Session is being initialized. Please wait a moment and try again.",
)
MALFORMED_MESSAGE = UserMessage(
    kind=MessageKind.MALFORMED, text="Sorry, I couldn't process your request."
)
BOUNDARY_MESSAGE = UserMessage(
    kind=MessageKind.MALFORMED, text="Sorry, I couldn't process the zone boundary."
)


class QueryClient(Protocol):
    """Interface for the backend query services."""

    async def query_properties(self, session_id: str, message: str) -> object:
        """Run a natural-language property query."""

    async def list_territorial_authorities(self, session_id: str) -> object:
        """List territorial authorities."""

    async def schools_by_territorial_authority(
        self, session_id: str, ta_name: str
    ) -> object:
        """Return schools and an optional boundary for a territorial authority."""

    async def rentals_by_school(self, session_id: str, school_name: str) -> object:
        """Return rentals and an optional school zone for a school."""

    async def driving_isochrone(
        self, session_id: str, lon: float, lat: float, minutes: int
    ) -> object:
        """Return rentals and the isochrone polygon for a drive time."""


class PlacesClient(Protocol):
    """Interface for the external geocoder."""

    async def search(self, query: str, limit: int = 8) -> object:
        """Return raw geocoder hits for a free-text query."""


@dataclass
class SearchModeOrchestrator:
    """Coordinates search modes, backend calls, selection and viewport.

    Every transition bumps a request sequence before awaiting anything; a
    response whose ticket is no longer current is dropped on arrival, so a
    slow earlier search can never overwrite a newer mode or selection.
    """

    sessions: SessionLifecycleManager
    query_client: QueryClient
    places_client: PlacesClient
    viewport: ViewportDefaults
    place_search_debounce_seconds: float = 0.3
    _state: ViewSnapshot = field(init=False)
    _sequence: int = field(default=0, init=False)
    _place_sequence: int = field(default=0, init=False)

    def __post_init__(self) -> None:
        self._state = ViewSnapshot(mode=SearchMode.HOME, view=self.viewport.default_view)

    @property
    def snapshot(self) -> ViewSnapshot:
        return self._state

    @property
    def mode(self) -> SearchMode:
        return self._state.mode

    async def submit_query(self, query: str) -> ViewSnapshot:
        """Run a free-text property search."""
        text = query.strip()
        if not text:
            return self._state
        ticket = self._transition(SearchMode.PROPERTIES, loading=True)
        properties, error = await self._fetch(
            lambda token: self.query_client.query_properties(token, text),
            parse_properties,
            failure_text="Couldn't reach the property search. Please try again.",
        )
        if not self._is_current(ticket, "query"):
            return self._state
        if properties is None:
            return self._settle(message=error)
        return self._settle(
            properties=tuple(properties),
            visible_properties=tuple(properties),
            view=compute_bounds(
                (item.location for item in properties), self.viewport.default_view
            ),
            message=_found_message(len(properties)),
        )

    async def show_territorial_authorities(self) -> ViewSnapshot:
        """Enter zone browsing with the list of territorial authorities."""
        ticket = self._transition(
            SearchMode.TERRITORIAL_AUTHORITIES,
            view=ViewState(
                center=self.viewport.center, zoom=self.viewport.territorial_overview_zoom
            ),
            loading=True,
        )
        authorities, error = await self._fetch(
            self.query_client.list_territorial_authorities,
            parse_territorial_authorities,
            failure_text="Couldn't load territorial authorities. Please try again.",
        )
        if not self._is_current(ticket, "territorial_authorities"):
            return self._state
        if authorities is None:
            return self._settle(message=error)
        message = None
        if not authorities:
            message = UserMessage(
                kind=MessageKind.NO_RESULTS, text="No territorial authorities found"
            )
        return self._settle(territorial_authorities=tuple(authorities), message=message)

    async def select_territorial_authority(
        self, authority: TerritorialAuthority
    ) -> ViewSnapshot:
        """Show the schools and boundary of a territorial authority."""
        ticket = self._transition(
            SearchMode.ZONES,
            selection=SelectionChain(territorial_authority=authority),
            view=ViewState(center=authority.location, zoom=self.viewport.zone_zoom),
            loading=True,
        )
        result, error = await self._fetch(
            lambda token: self.query_client.schools_by_territorial_authority(
                token, authority.name
            ),
            parse_schools,
            failure_text=f"Couldn't load schools for {authority.name}. Please try again.",
        )
        if not self._is_current(ticket, "schools"):
            return self._state
        if result is None:
            return self._settle(message=error)
        schools, raw_boundary = result
        boundary = normalize_zone_geometry(raw_boundary)
        message = None
        if not schools:
            message = UserMessage(
                kind=MessageKind.NO_RESULTS, text=f"No schools found in {authority.name}"
            )
        if boundary is None and has_boundary_data(raw_boundary):
            message = BOUNDARY_MESSAGE
        approximate = boundary is None
        if boundary is None:
            boundary = approximate_circle(
                authority.location, self.viewport.fallback_zone_radius_km
            )
        return self._settle(
            schools=tuple(schools),
            zone_boundary=boundary,
            zone_boundary_approximate=approximate,
            message=message,
        )

    async def select_school(self, school: School) -> ViewSnapshot:
        """Show rentals near a school."""
        authority = self._state.selection.territorial_authority
        ticket = self._transition(
            SearchMode.PROPERTIES,
            selection=SelectionChain(territorial_authority=authority, school=school),
            loading=True,
        )
        result, error = await self._fetch(
            lambda token: self.query_client.rentals_by_school(token, school.name),
            parse_school_rentals,
            failure_text=f"Couldn't load rentals near {school.name}. Please try again.",
        )
        if not self._is_current(ticket, "school_rentals"):
            return self._state
        empty_view = ViewState(center=school.location, zoom=self.viewport.school_empty_zoom)
        if result is None:
            return self._settle(view=empty_view, message=error)
        properties, raw_boundary = result
        boundary = normalize_zone_geometry(raw_boundary)
        message = _found_message(len(properties))
        if boundary is None and has_boundary_data(raw_boundary):
            message = BOUNDARY_MESSAGE
        view = empty_view
        if properties:
            view = ViewState(center=school.location, zoom=self.viewport.school_zoom)
        return self._settle(
            properties=tuple(properties),
            visible_properties=tuple(properties),
            zone_boundary=boundary,
            view=view,
            message=message,
        )

    def show_commute(self) -> ViewSnapshot:
        """Enter commute search and wait for an origin."""
        self._transition(
            SearchMode.COMMUTE,
            view=ViewState(
                center=self.viewport.center, zoom=self.viewport.commute_overview_zoom
            ),
        )
        return self._state

    def select_commute_origin(self, origin: GeoPoint) -> ViewSnapshot:
        """Set the commute origin from an address hit or a map click."""
        if self._state.mode is not SearchMode.COMMUTE:
            raise InvalidTransitionError("a commute origin can only be set in commute mode")
        self._transition(
            SearchMode.COMMUTE,
            selection=SelectionChain(commute_origin=origin),
            view=ViewState(center=origin, zoom=self.viewport.commute_origin_zoom),
        )
        return self._state

    async def search_commute(self, minutes: int) -> ViewSnapshot:
        """Find rentals within a driving time of the selected origin."""
        if self._state.mode is not SearchMode.COMMUTE:
            raise InvalidTransitionError("commute search requires commute mode")
        if minutes <= 0:
            raise ValueError("minutes must be positive")
        origin = self._state.selection.commute_origin
        if origin is None:
            self._state = replace(
                self._state,
                message=UserMessage(
                    kind=MessageKind.INFO, text="Select a starting location first."
                ),
            )
            return self._state
        ticket = self._transition(
            SearchMode.COMMUTE,
            selection=SelectionChain(commute_origin=origin),
            view=self._state.view,
            loading=True,
        )
        result, error = await self._fetch(
            lambda token: self.query_client.driving_isochrone(
                token, origin.lng, origin.lat, minutes
            ),
            parse_isochrone,
            failure_text="Couldn't run the commute search. Please try again.",
        )
        if not self._is_current(ticket, "isochrone"):
            return self._state
        origin_view = ViewState(center=origin, zoom=self.viewport.commute_origin_zoom)
        if result is None:
            return self._settle(view=origin_view, message=error)
        properties, raw_isochrone = result
        isochrone = normalize_zone_geometry(raw_isochrone)
        message = _found_message(len(properties))
        if isochrone is None and has_boundary_data(raw_isochrone):
            message = BOUNDARY_MESSAGE
        view = origin_view
        if properties:
            view = compute_bounds(item.location for item in properties)
        return self._settle(
            properties=tuple(properties),
            visible_properties=tuple(properties),
            zone_boundary=isochrone,
            commute=CommuteSearch(
                origin=origin,
                minutes=minutes,
                isochrone=isochrone,
                result_properties=tuple(properties),
            ),
            view=view,
            message=message,
        )

    async def search_places(self, query: str, limit: int = 8) -> list[Place]:
        """Geocode free text for choosing a commute origin.

        Lookups are debounced: a call superseded by a newer one, either
        while waiting out the debounce or while its request is in flight,
        returns an empty list.
        """
        self._place_sequence += 1
        ticket = self._place_sequence
        text = query.strip()
        if len(text) < MIN_PLACE_QUERY_LENGTH:
            return []
        await asyncio.sleep(self.place_search_debounce_seconds)
        if ticket != self._place_sequence:
            return []
        try:
            places = parse_places(await self.places_client.search(text, limit=limit))
        except (httpx.HTTPError, MalformedPayloadError) as exc:
            _logger.warning("Place search failed for %r: %s", text, exc)
            return []
        if ticket != self._place_sequence:
            _logger.debug("Discarding stale place results for %r", text)
            return []
        return places

    def go_home(self) -> ViewSnapshot:
        """Return to the home screen, abandoning any outstanding request."""
        self._transition(SearchMode.HOME, view=self.viewport.default_view)
        return self._state

    async def go_back(self) -> ViewSnapshot:
        """Step back one level in the zone drill-down, otherwise go home."""
        state = self._state
        if state.mode is SearchMode.PROPERTIES and state.selection.school is not None:
            authority = state.selection.territorial_authority
            if authority is not None:
                return await self.select_territorial_authority(authority)
        if state.mode is SearchMode.ZONES:
            return await self.show_territorial_authorities()
        return self.go_home()

    def select_property(self, target: Property | str) -> ViewSnapshot:
        """Highlight a listing from the current results and center on it."""
        key = target.key if isinstance(target, Property) else target
        match = next(
            (item for item in self._state.visible_properties if item.key == key), None
        )
        if match is None:
            _logger.warning("Ignoring selection of unknown listing %s", key)
            return self._state
        self._state = replace(
            self._state,
            selection=replace(self._state.selection, property=match),
            view=ViewState(center=match.location, zoom=self.viewport.property_focus_zoom),
        )
        return self._state

    def apply_filters(self, criteria: PropertyFilter) -> ViewSnapshot:
        """Narrow the visible listings without refetching."""
        visible = self._state.properties
        if not is_empty(criteria):
            visible = filter_properties(visible, criteria)
        selection = self._state.selection
        if selection.property is not None and selection.property not in visible:
            selection = replace(selection, property=None)
        self._state = replace(
            self._state, filters=criteria, visible_properties=visible, selection=selection
        )
        return self._state

    def recenter(self, center: GeoPoint, zoom: int | None = None) -> ViewSnapshot:
        """Apply an explicit user re-center."""
        if zoom is None:
            zoom = self._state.view.zoom
        self._state = replace(self._state, view=ViewState(center=center, zoom=zoom))
        return self._state

    def _transition(
        self,
        mode: SearchMode,
        *,
        selection: SelectionChain | None = None,
        view: ViewState | None = None,
        loading: bool = False,
    ) -> int:
        # Results, boundary, filters and unrelated selections are dropped here,
        # before any backend call is awaited.
        self._sequence += 1
        previous = self._state.mode
        self._state = ViewSnapshot(
            mode=mode,
            view=view or self._state.view,
            selection=selection or SelectionChain(),
            loading=loading,
        )
        if previous is not mode:
            _logger.info("Search mode %s -> %s", previous, mode)
        return self._sequence

    def _settle(self, **changes: object) -> ViewSnapshot:
        self._state = replace(self._state, loading=False, **changes)
        return self._state

    def _is_current(self, ticket: int, action: str) -> bool:
        if ticket == self._sequence:
            return True
        _logger.debug("Discarding stale %s response (ticket %s)", action, ticket)
        return False

    async def _fetch(
        self,
        request: Callable[[str], Awaitable[object]],
        parse: Callable[[object], _T],
        *,
        failure_text: str,
    ) -> tuple[_T | None, UserMessage | None]:
        try:
            raw = await self._with_session(request)
            return parse(raw), None
        except (SessionCreationError, SessionRejectedError) as exc:
            _logger.warning("Search blocked by session state: %s", exc)
            return None, SESSION_MESSAGE
        except httpx.HTTPError as exc:
            _logger.warning("Search request failed: %s", exc)
            return None, UserMessage(kind=MessageKind.TRANSPORT_ERROR, text=failure_text)
        except MalformedPayloadError as exc:
            _logger.warning("Malformed search payload: %s", exc)
            return None, MALFORMED_MESSAGE

    async def _with_session(self, request: Callable[[str], Awaitable[object]]) -> object:
        session = await self.sessions.ensure_session()
        try:
            return await request(session.token)
        except SessionRejectedError:
            _logger.info("Session %s rejected by backend, retrying once", session.token)
            session = await self.sessions.recreate()
            return await request(session.token)


def _found_message(count: int) -> UserMessage:
    if count == 0:
        return UserMessage(kind=MessageKind.NO_RESULTS, text="No properties found")
    noun = "property" if count == 1 else "properties"
    return UserMessage(kind=MessageKind.INFO, text=f"I found {count} {noun} for you")

