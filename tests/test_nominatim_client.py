"""
Tests for the Nominatim adapter and the device locators.
"""

import asyncio
from typing import Any, Dict, List

import pytest
import requests

from washregistry.adapters import device_locator
from washregistry.adapters.device_locator import IpApiLocator, StaticLocator
from washregistry.adapters.nominatim_client import NominatimClient
from washregistry.config import GeocodingConfig
from washregistry.domain.exceptions import (
    DeviceLocationError,
    FailureKind,
    GeocodingError,
    MalformedResponseError,
)
from washregistry.domain.models import GeoPoint


class FakeResponse:
    def __init__(self, payload: Any = None, status_code: int = 200, invalid_json: bool = False):
        self.payload = payload
        self.status_code = status_code
        self.invalid_json = invalid_json

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"HTTP {self.status_code}", response=self)

    def json(self):
        if self.invalid_json:
            raise ValueError("Expecting value")
        return self.payload


class FakeSession:
    """Records requests and replays a canned response or error."""

    def __init__(self, response: FakeResponse | None = None, error: Exception | None = None):
        self.response = response
        self.error = error
        self.calls: List[Dict[str, Any]] = []

    def get(self, url, params=None, headers=None, timeout=None):
        self.calls.append({"url": url, "params": params, "headers": headers, "timeout": timeout})
        if self.error is not None:
            raise self.error
        return self.response


SEARCH_PAYLOAD = [
    {"place_id": 11, "display_name": "Tahrir Square, Cairo, Egypt", "lat": "30.0444196", "lon": "31.2357116"},
    {"place_id": 12, "display_name": "Broken", "lat": "n/a", "lon": "31.2"},
    {"place_id": 13, "display_name": "Missing lon", "lat": "30.1"},
    {"place_id": 14, "display_name": "Giza, Egypt", "lat": "30.0131", "lon": "31.2089"},
]


class TestNominatimSearch:
    """Tests for forward geocoding."""

    def test_sends_bounded_region_language_and_limit(self):
        session = FakeSession(FakeResponse([]))
        client = NominatimClient(GeocodingConfig(user_agent="tests"), session=session)

        asyncio.run(client.search("tahrir", language="ar"))

        call = session.calls[0]
        assert call["url"] == "https://nominatim.openstreetmap.org/search"
        assert call["params"] == {
            "q": "tahrir",
            "countrycodes": "eg",
            "viewbox": "30.5,30.3,31.5,29.8",
            "bounded": 1,
            "accept-language": "ar",
            "format": "json",
            "limit": 5,
        }
        assert call["headers"]["User-Agent"] == "tests"
        assert call["timeout"] == 10

    def test_unknown_language_falls_back_to_english(self):
        session = FakeSession(FakeResponse([]))
        client = NominatimClient(session=session)

        asyncio.run(client.search("tahrir", language="fr"))

        assert session.calls[0]["params"]["accept-language"] == "en"

    def test_parses_coordinates_and_skips_malformed_entries(self):
        client = NominatimClient(session=FakeSession(FakeResponse(SEARCH_PAYLOAD)))

        suggestions = asyncio.run(client.search("cairo"))

        assert [s.id for s in suggestions] == ["11", "14"]
        assert suggestions[0].point == GeoPoint(30.0444196, 31.2357116)
        assert suggestions[0].label == "Tahrir Square, Cairo, Egypt"

    def test_caps_results_at_limit(self):
        payload = [
            {"place_id": i, "display_name": f"Place {i}", "lat": "30.0", "lon": "31.0"}
            for i in range(8)
        ]
        client = NominatimClient(session=FakeSession(FakeResponse(payload)))

        assert len(asyncio.run(client.search("place"))) == 5

    def test_non_list_body_is_malformed(self):
        client = NominatimClient(session=FakeSession(FakeResponse({"error": "nope"})))

        with pytest.raises(MalformedResponseError):
            asyncio.run(client.search("cairo"))

    def test_invalid_json_is_malformed(self):
        client = NominatimClient(session=FakeSession(FakeResponse(invalid_json=True)))

        with pytest.raises(MalformedResponseError):
            asyncio.run(client.search("cairo"))

    @pytest.mark.parametrize(
        "session",
        [
            FakeSession(error=requests.exceptions.ConnectionError("refused")),
            FakeSession(FakeResponse(status_code=503)),
        ],
    )
    def test_transport_errors_raise_geocoding_error(self, session):
        client = NominatimClient(session=session)

        with pytest.raises(GeocodingError) as exc_info:
            asyncio.run(client.search("cairo"))

        assert not isinstance(exc_info.value, MalformedResponseError)


class TestNominatimReverse:
    """Tests for reverse geocoding."""

    def test_sends_point_with_address_details(self):
        payload = {"display_name": "Cairo, Egypt", "address": {"city": "Cairo"}}
        session = FakeSession(FakeResponse(payload))
        client = NominatimClient(session=session)

        response = asyncio.run(client.reverse(GeoPoint(30.0444, 31.2357), language="en"))

        assert response == payload
        assert session.calls[0]["url"].endswith("/reverse")
        assert session.calls[0]["params"] == {
            "format": "json",
            "lat": 30.0444,
            "lon": 31.2357,
            "zoom": 18,
            "addressdetails": 1,
            "accept-language": "en",
        }

    @pytest.mark.parametrize("payload", [[], {"error": "Unable to geocode"}])
    def test_unexpected_payload_is_malformed(self, payload):
        client = NominatimClient(session=FakeSession(FakeResponse(payload)))

        with pytest.raises(MalformedResponseError):
            asyncio.run(client.reverse(GeoPoint(0.0, 0.0)))


class TestIpApiLocator:
    """Tests for failure kind mapping of the IP locator."""

    def _patch(self, monkeypatch, response=None, error=None):
        def fake_get(url, timeout=None):
            if error is not None:
                raise error
            return response

        monkeypatch.setattr(device_locator.requests, "get", fake_get)

    def test_success(self, monkeypatch):
        self._patch(monkeypatch, FakeResponse({"status": "success", "lat": 30.06, "lon": 31.25}))

        point = asyncio.run(IpApiLocator().locate())

        assert point == GeoPoint(30.06, 31.25)

    @pytest.mark.parametrize(
        "response, error, kind",
        [
            (None, requests.exceptions.Timeout("slow"), FailureKind.TIMEOUT),
            (FakeResponse(status_code=403), None, FailureKind.PERMISSION_DENIED),
            (FakeResponse(status_code=500), None, FailureKind.POSITION_UNAVAILABLE),
            (None, requests.exceptions.ConnectionError("offline"), FailureKind.POSITION_UNAVAILABLE),
            (FakeResponse({"status": "fail", "message": "private range"}), None, FailureKind.POSITION_UNAVAILABLE),
            (FakeResponse({"status": "success", "lat": "x", "lon": 1}), None, FailureKind.POSITION_UNAVAILABLE),
        ],
    )
    def test_failure_kinds(self, monkeypatch, response, error, kind):
        self._patch(monkeypatch, response, error)

        with pytest.raises(DeviceLocationError) as exc_info:
            asyncio.run(IpApiLocator().locate())

        assert exc_info.value.kind is kind


class TestStaticLocator:
    def test_returns_point(self):
        point = GeoPoint(30.0, 31.0)

        assert asyncio.run(StaticLocator(point=point).locate()) is point

    def test_without_point_is_unavailable(self):
        with pytest.raises(DeviceLocationError) as exc_info:
            asyncio.run(StaticLocator().locate())

        assert exc_info.value.kind is FailureKind.POSITION_UNAVAILABLE
