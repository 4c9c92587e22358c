"""
Turns a raw reverse-geocode response into a ResolvedAddress.

This is a best-effort heuristic, not a postal-address parser. It never
raises: anything missing or malformed degrades to an empty string.
"""

from typing import Any, Iterable, Mapping

from .models import ResolvedAddress

STREET_KEYS = ("road", "street")
STREET_NUMBER_KEYS = ("house_number",)
CITY_KEYS = ("city", "town", "village")
AREA_KEYS = (
    "suburb",
    "neighbourhood",
    "district",
    "quarter",
    "state_district",
    "hamlet",
    "county",
)

# "street, number, neighbourhood, city, ..." puts the area third
AREA_SEGMENT_INDEX = 2


def _text(value: Any) -> str:
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return ""


def _first(components: Mapping[str, Any], keys: Iterable[str]) -> str:
    for key in keys:
        value = _text(components.get(key))
        if value:
            return value
    return ""


def area_from_display_name(display_name: str) -> str:
    """
    Guess the area from a comma separated display string.

    Only strings with more than three segments are used; shorter ones do
    not reliably contain a neighbourhood.
    """
    segments = [segment.strip() for segment in display_name.split(",")]
    if len(segments) > AREA_SEGMENT_INDEX + 1:
        return segments[AREA_SEGMENT_INDEX]
    return ""


def normalize_address(response: Any) -> ResolvedAddress:
    """
    Extract street, number, city and area from a reverse-geocode response.

    Args:
        response: Mapping with ``display_name`` and an ``address`` component
            mapping (Nominatim's jsonv2/json shape)

    Returns:
        ResolvedAddress with empty strings for anything not found
    """
    if not isinstance(response, Mapping):
        return ResolvedAddress.empty()

    components = response.get("address")
    if not isinstance(components, Mapping):
        components = {}

    display_name = response.get("display_name")
    display_name = display_name if isinstance(display_name, str) else ""

    area = _first(components, AREA_KEYS)
    if not area and display_name:
        area = area_from_display_name(display_name)

    return ResolvedAddress(
        street=_first(components, STREET_KEYS),
        street_number=_first(components, STREET_NUMBER_KEYS),
        city=_first(components, CITY_KEYS),
        area=area,
        display_address=display_name,
    )
