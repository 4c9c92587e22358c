"""
Location resolution pipeline.

The resolver coordinates the geocoding client and the device locator and
applies the pure transitions from ``domain.location_state``. Every failure is
caught at the boundary of the operation that caused it and reported as a
``FailureKind``; nothing propagates to the caller.

Searches are tagged with a generation number so a slow response for an old
query can never replace the suggestions of a newer one.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol, Sequence, Tuple

from ..domain import location_state as transitions
from ..domain.address_normalizer import normalize_address
from ..domain.exceptions import (
    DeviceLocationError,
    FailureKind,
    GeocodingError,
    MalformedResponseError,
)
from ..domain.location_state import LocationState
from ..domain.models import GeoPoint, ResolvedAddress, SuggestionEntry

logger = logging.getLogger(__name__)


class GeocodingClientProtocol(Protocol):
    """Protocol describing the geocoding behaviour needed by the resolver."""

    async def search(self, query: str, *, language: str | None = None) -> List[SuggestionEntry]:
        """Return ranked suggestions for free text."""

    async def reverse(self, point: GeoPoint, *, language: str | None = None) -> Dict[str, Any]:
        """Return the raw reverse-geocode response for a point."""


class DeviceLocatorProtocol(Protocol):
    """Protocol for anything that can report the device position."""

    async def locate(self) -> GeoPoint:
        """Return the current position or raise DeviceLocationError."""


@dataclass(frozen=True)
class SearchOutcome:
    suggestions: Tuple[SuggestionEntry, ...] = ()
    applied: bool = True
    failure: Optional[FailureKind] = None


@dataclass(frozen=True)
class ResolutionOutcome:
    location: Optional[GeoPoint] = None
    address: Optional[ResolvedAddress] = None
    failure: Optional[FailureKind] = None

    @property
    def ok(self) -> bool:
        return self.failure is None


class LocationResolver:
    """
    Owns the location state of one editing session.

    Dependency inversion toward protocols makes it easy to plug in the
    Nominatim adapter, the mock client, or test stubs.
    """

    def __init__(
        self,
        geocoding_client: GeocodingClientProtocol,
        device_locator: DeviceLocatorProtocol | None = None,
        language: str | None = None,
        max_suggestions: int = 5,
    ) -> None:
        self._geocoding_client = geocoding_client
        self._device_locator = device_locator
        self.language = language
        self.max_suggestions = max_suggestions
        self._state = LocationState()

    @property
    def state(self) -> LocationState:
        return self._state

    async def search(self, query: str) -> SearchOutcome:
        """
        Fetch suggestions for the query.

        A blank query clears the list without calling the provider.
        """
        self._state, generation = transitions.begin_search(self._state, query)

        if not query.strip():
            return SearchOutcome()

        try:
            suggestions = await self._geocoding_client.search(query, language=self.language)
            suggestions = list(suggestions)[: self.max_suggestions]
        except (GeocodingError, KeyError, TypeError, ValueError) as e:
            kind = (
                FailureKind.NETWORK
                if isinstance(e, GeocodingError) and not isinstance(e, MalformedResponseError)
                else FailureKind.MALFORMED_RESPONSE
            )
            logger.warning("Search for %r failed: %s", query, e)
            applied = transitions.is_current_search(self._state, generation)
            self._state = transitions.apply_search_failure(self._state, generation, kind)
            return SearchOutcome(applied=applied, failure=kind)

        if not transitions.is_current_search(self._state, generation):
            logger.debug("Discarding stale results for %r (generation %d)", query, generation)
            return SearchOutcome(suggestions=tuple(suggestions), applied=False)

        self._state = transitions.apply_search_result(self._state, generation, suggestions)
        return SearchOutcome(suggestions=self._state.suggestions)

    async def select_suggestion(self, entry: SuggestionEntry) -> ResolutionOutcome:
        """Use a suggestion's point as the current location."""
        self._state, generation = transitions.select_point(
            self._state, entry.point, display_text=entry.label
        )
        return await self._reverse_resolve(entry.point, generation)

    async def confirm_search(self) -> ResolutionOutcome | None:
        """
        Select the top suggestion for the current query.

        Returns None when there is no query or nothing to select.
        """
        if not self._state.current_query.strip() or not self._state.suggestions:
            return None
        return await self.select_suggestion(self._state.suggestions[0])

    async def select_point_directly(self, point: GeoPoint | Sequence[float]) -> ResolutionOutcome:
        """
        Use a raw point (map click or marker drag) as the current location.

        Accepts a GeoPoint or a (latitude, longitude) pair. Invalid
        coordinates are rejected and the state is left unchanged.
        """
        try:
            if not isinstance(point, GeoPoint):
                latitude, longitude = point
                point = GeoPoint(latitude=latitude, longitude=longitude)
        except (TypeError, ValueError) as e:
            logger.warning("Rejected point %r: %s", point, e)
            return self._unchanged(FailureKind.INVALID_POINT)

        self._state, generation = transitions.select_point(self._state, point)
        return await self._reverse_resolve(point, generation)

    async def use_device_location(self) -> ResolutionOutcome:
        """
        Resolve the device position and its address.

        ``resolution_in_progress`` is set for the duration of the call and
        always cleared on return, whatever the locator or the reverse lookup
        did.
        """
        if self._device_locator is None:
            return self._unchanged(FailureKind.POSITION_UNAVAILABLE)

        self._state = transitions.begin_device_resolution(self._state)
        try:
            try:
                point = await self._device_locator.locate()
            except DeviceLocationError as e:
                logger.warning("Device location failed: %s", e)
                return self._unchanged(e.kind)

            self._state, generation = transitions.select_point(self._state, point)
            self._state = transitions.clear_query(self._state)
            return await self._reverse_resolve(point, generation)
        finally:
            self._state = transitions.end_device_resolution(self._state)

    def dismiss_suggestions(self) -> None:
        self._state = transitions.dismiss_suggestions(self._state)

    def override_address(self, **fields: str) -> ResolvedAddress:
        """Apply caller edits on top of the resolved address."""
        base = self._state.address or ResolvedAddress.empty()
        address = base.with_overrides(**fields)
        self._state = transitions.apply_address(
            self._state, self._state.resolution_generation, address
        )
        return address

    async def _reverse_resolve(self, point: GeoPoint, generation: int) -> ResolutionOutcome:
        try:
            response = await self._geocoding_client.reverse(point, language=self.language)
        except (GeocodingError, KeyError, TypeError, ValueError) as e:
            kind = (
                FailureKind.NETWORK
                if isinstance(e, GeocodingError) and not isinstance(e, MalformedResponseError)
                else FailureKind.MALFORMED_RESPONSE
            )
            logger.warning("Reverse geocoding %s failed: %s", point, e)
            if generation == self._state.resolution_generation:
                self._state = transitions.apply_failure(self._state, kind)
            else:
                logger.debug("Ignoring failure of superseded lookup for %s", point)
            return ResolutionOutcome(location=point, address=self._state.address, failure=kind)

        address = normalize_address(response)
        self._state = transitions.apply_address(self._state, generation, address)
        return ResolutionOutcome(location=point, address=address)

    def _unchanged(self, kind: FailureKind) -> ResolutionOutcome:
        self._state = transitions.apply_failure(self._state, kind)
        return ResolutionOutcome(
            location=self._state.current_location,
            address=self._state.address,
            failure=kind,
        )
