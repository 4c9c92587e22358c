"""
Adapters layer - External integrations (geocoding provider, device location).
"""

from .device_locator import IpApiLocator, StaticLocator
from .mock_geocoding_client import MockGeocodingClient
from .nominatim_client import NominatimClient

__all__ = ["IpApiLocator", "MockGeocodingClient", "NominatimClient", "StaticLocator"]
