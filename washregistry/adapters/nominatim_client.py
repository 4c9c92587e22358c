"""
Nominatim API client for forward and reverse geocoding.
"""

import asyncio
import logging
from typing import Any, Dict, List

import requests

from ..config import GeocodingConfig
from ..domain.exceptions import GeocodingError, MalformedResponseError
from ..domain.models import GeoPoint, SuggestionEntry

logger = logging.getLogger(__name__)


class NominatimClient:
    """
    Client for a Nominatim-compatible geocoding service.

    Uses the /search endpoint for suggestions and /reverse for address
    details. The HTTP calls are blocking ``requests`` calls run in a worker
    thread, so the async methods never block the event loop.
    """

    def __init__(self, config: GeocodingConfig | None = None, session: requests.Session | None = None):
        """
        Initialize the Nominatim client.

        Args:
            config: Provider settings (URL, region, language, limits)
            session: Optional requests session, mainly for connection reuse
        """
        self.config = config or GeocodingConfig()
        self.session = session or requests.Session()
        self.headers = {
            "User-Agent": self.config.user_agent,
            "Accept": "application/json",
        }

    async def search(self, query: str, *, language: str | None = None) -> List[SuggestionEntry]:
        """
        Forward geocode free text into ranked suggestions.

        The search is bounded to the configured viewbox and country codes.

        Raises:
            GeocodingError: If the request fails
            MalformedResponseError: If the body is not a list of places
        """
        params = self.search_params(query, language=language)
        data = await asyncio.to_thread(self._get, "search", params)
        return self._parse_search_response(data)

    async def reverse(self, point: GeoPoint, *, language: str | None = None) -> Dict[str, Any]:
        """
        Reverse geocode a point into the raw address response.

        Raises:
            GeocodingError: If the request fails
            MalformedResponseError: If the body is not a JSON object
        """
        params = self.reverse_params(point, language=language)
        data = await asyncio.to_thread(self._get, "reverse", params)

        if not isinstance(data, dict):
            raise MalformedResponseError(f"Unexpected reverse geocode payload: {type(data).__name__}")
        if "error" in data:
            raise MalformedResponseError(f"Reverse geocode failed: {data['error']}")

        return data

    def search_params(self, query: str, *, language: str | None = None) -> Dict[str, Any]:
        return {
            "q": query,
            "countrycodes": ",".join(self.config.country_codes),
            "viewbox": self.config.viewbox.to_bounding_box().to_viewbox(),
            "bounded": 1,
            "accept-language": self.config.language_param(language),
            "format": "json",
            "limit": self.config.result_limit,
        }

    def reverse_params(self, point: GeoPoint, *, language: str | None = None) -> Dict[str, Any]:
        return {
            "format": "json",
            "lat": point.latitude,
            "lon": point.longitude,
            "zoom": self.config.reverse_zoom,
            "addressdetails": 1,
            "accept-language": self.config.language_param(language),
        }

    def _get(self, endpoint: str, params: Dict[str, Any]) -> Any:
        url = f"{self.config.base_url.rstrip('/')}/{endpoint}"
        logger.debug("GET %s params=%s", url, params)

        try:
            response = self.session.get(
                url,
                params=params,
                headers=self.headers,
                timeout=self.config.timeout_seconds,
            )
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            raise GeocodingError(f"Failed to reach geocoding service: {e}") from e

        try:
            return response.json()
        except ValueError as e:
            raise MalformedResponseError(f"Geocoding service returned invalid JSON: {e}") from e

    def _parse_search_response(self, data: Any) -> List[SuggestionEntry]:
        """
        Parse the /search response into suggestion entries.

        Response format:
        [
            {
                "place_id": 123,
                "display_name": "Tahrir Square, Cairo, Egypt",
                "lat": "30.0444",
                "lon": "31.2357"
            }
        ]
        """
        if not isinstance(data, list):
            raise MalformedResponseError(f"Unexpected search payload: {type(data).__name__}")

        suggestions: List[SuggestionEntry] = []

        for item in data[: self.config.result_limit]:
            try:
                point = GeoPoint(
                    latitude=float(item["lat"]),
                    longitude=float(item["lon"]),
                )
                suggestions.append(
                    SuggestionEntry(
                        id=str(item["place_id"]),
                        label=str(item.get("display_name", "")),
                        point=point,
                    )
                )
            except (KeyError, TypeError, ValueError) as e:
                logger.warning("Skipping malformed search result: %s", e)
                continue

        return suggestions
