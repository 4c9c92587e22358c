"""
Mock geocoding client for running without network access.
"""

import json
import math
from pathlib import Path
from typing import Any, Dict, List

from ..domain.models import GeoPoint, SuggestionEntry


class MockGeocodingClient:
    """
    Mock client that simulates Nominatim responses.

    Places are loaded from mock_geocoding_data.json. Search matches the
    query case-insensitively against display names; reverse returns the
    nearest known place.
    """

    def __init__(self, data_file: Path | None = None, result_limit: int = 5):
        """
        Initialize the mock client.

        Args:
            data_file: Optional fixture path, defaults to the bundled JSON
            result_limit: Maximum number of suggestions returned
        """
        self.data_file = data_file or Path(__file__).parent / "mock_geocoding_data.json"
        self.result_limit = result_limit
        self.search_calls: List[str] = []
        self._load_places()

    def _load_places(self):
        """Load mock places from JSON file."""
        if self.data_file.exists():
            with open(self.data_file, "r", encoding="utf-8") as f:
                data = json.load(f)
        else:
            # Fallback to empty if file doesn't exist
            data = {}

        self.places: List[Dict[str, Any]] = data.get("places", [])
        self.device: Dict[str, float] | None = data.get("device")

    async def search(self, query: str, *, language: str | None = None) -> List[SuggestionEntry]:
        self.search_calls.append(query)
        needle = query.strip().lower()

        matches = [
            place for place in self.places
            if needle and needle in place["display_name"].lower()
        ]

        return [
            SuggestionEntry(
                id=str(place["place_id"]),
                label=place["display_name"],
                point=GeoPoint(float(place["lat"]), float(place["lon"])),
            )
            for place in matches[: self.result_limit]
        ]

    async def reverse(self, point: GeoPoint, *, language: str | None = None) -> Dict[str, Any]:
        if not self.places:
            return {}

        def distance(place: Dict[str, Any]) -> float:
            return math.hypot(
                float(place["lat"]) - point.latitude,
                float(place["lon"]) - point.longitude,
            )

        nearest = min(self.places, key=distance)
        return {
            "place_id": nearest["place_id"],
            "lat": str(point.latitude),
            "lon": str(point.longitude),
            "display_name": nearest["display_name"],
            "address": dict(nearest.get("address", {})),
        }

    def device_point(self) -> GeoPoint | None:
        """Fixed device position from the fixture, if any."""
        if not self.device:
            return None
        return GeoPoint(float(self.device["lat"]), float(self.device["lon"]))
