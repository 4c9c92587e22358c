"""
Session state for location resolution and its pure transitions.

Every function takes the current ``LocationState`` and returns a new one, so
the resolver service only decides *when* to apply a transition.
"""

from dataclasses import dataclass, replace
from typing import Optional, Sequence, Tuple

from .exceptions import FailureKind
from .models import GeoPoint, ResolvedAddress, SuggestionEntry


@dataclass(frozen=True)
class LocationState:
    current_query: str = ""
    suggestions: Tuple[SuggestionEntry, ...] = ()
    suggestions_visible: bool = False
    current_location: Optional[GeoPoint] = None
    address: Optional[ResolvedAddress] = None
    pending_device_requests: int = 0
    search_generation: int = 0
    resolution_generation: int = 0
    last_failure: Optional[FailureKind] = None

    @property
    def resolution_in_progress(self) -> bool:
        return self.pending_device_requests > 0


def begin_search(state: LocationState, query: str) -> Tuple[LocationState, int]:
    """
    Record a new query and tag it with the next generation.

    Returns the new state and the generation the eventual result must carry.
    A blank query clears the suggestion list straight away.
    """
    generation = state.search_generation + 1
    new_state = replace(state, current_query=query, search_generation=generation)
    if not query.strip():
        new_state = replace(new_state, suggestions=(), suggestions_visible=False)
    return new_state, generation


def is_current_search(state: LocationState, generation: int) -> bool:
    return generation == state.search_generation


def apply_search_result(
    state: LocationState,
    generation: int,
    suggestions: Sequence[SuggestionEntry],
) -> LocationState:
    """Replace suggestions, unless a newer search was issued meanwhile."""
    if not is_current_search(state, generation):
        return state
    entries = tuple(suggestions)
    return replace(
        state,
        suggestions=entries,
        suggestions_visible=bool(entries),
        last_failure=None,
    )


def apply_search_failure(
    state: LocationState,
    generation: int,
    kind: FailureKind,
) -> LocationState:
    if not is_current_search(state, generation):
        return state
    return replace(state, suggestions=(), suggestions_visible=False, last_failure=kind)


def dismiss_suggestions(state: LocationState) -> LocationState:
    return replace(state, suggestions=(), suggestions_visible=False)


def select_point(
    state: LocationState,
    point: GeoPoint,
    display_text: Optional[str] = None,
) -> Tuple[LocationState, int]:
    """
    Make ``point`` the current location and close the suggestion list.

    ``display_text`` replaces the query text when given; otherwise the typed
    query stays as it is. Returns the new state and the generation the
    address lookup for this point must carry.
    """
    generation = state.resolution_generation + 1
    query = state.current_query if display_text is None else display_text
    new_state = replace(
        state,
        current_location=point,
        current_query=query,
        suggestions=(),
        suggestions_visible=False,
        resolution_generation=generation,
        last_failure=None,
    )
    return new_state, generation


def apply_address(
    state: LocationState,
    generation: int,
    address: ResolvedAddress,
) -> LocationState:
    """Store the address, unless another point was selected meanwhile."""
    if generation != state.resolution_generation:
        return state
    return replace(state, address=address)


def apply_failure(state: LocationState, kind: FailureKind) -> LocationState:
    """Record a failure; location and address are kept."""
    return replace(state, last_failure=kind)


def begin_device_resolution(state: LocationState) -> LocationState:
    return replace(state, pending_device_requests=state.pending_device_requests + 1)


def end_device_resolution(state: LocationState) -> LocationState:
    return replace(state, pending_device_requests=max(state.pending_device_requests - 1, 0))


def clear_query(state: LocationState) -> LocationState:
    return replace(state, current_query="", suggestions=(), suggestions_visible=False)
