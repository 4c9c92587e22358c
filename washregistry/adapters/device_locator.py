"""
Device geolocation adapters.
"""

import asyncio
import logging
from typing import Optional

import requests

from ..config import DeviceConfig
from ..domain.exceptions import DeviceLocationError, FailureKind
from ..domain.models import GeoPoint

logger = logging.getLogger(__name__)


class IpApiLocator:
    """
    Approximates the device position from its public IP address.

    Maps transport problems onto the three device failure kinds:
    - HTTP 401/403/429 -> permission denied
    - timeouts -> timeout
    - anything else -> position unavailable
    """

    DENIED_STATUS_CODES = {401, 403, 429}

    def __init__(self, config: DeviceConfig | None = None):
        self.config = config or DeviceConfig()

    async def locate(self) -> GeoPoint:
        return await asyncio.to_thread(self._locate)

    def _locate(self) -> GeoPoint:
        try:
            response = requests.get(self.config.lookup_url, timeout=self.config.timeout_seconds)
            response.raise_for_status()
            data = response.json()
        except requests.exceptions.Timeout as e:
            raise DeviceLocationError(FailureKind.TIMEOUT, f"Location lookup timed out: {e}") from e
        except requests.exceptions.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            if status in self.DENIED_STATUS_CODES:
                raise DeviceLocationError(
                    FailureKind.PERMISSION_DENIED, f"Location lookup refused (HTTP {status})"
                ) from e
            raise DeviceLocationError(FailureKind.POSITION_UNAVAILABLE, str(e)) from e
        except (requests.exceptions.RequestException, ValueError) as e:
            raise DeviceLocationError(FailureKind.POSITION_UNAVAILABLE, str(e)) from e

        if not isinstance(data, dict) or data.get("status", "success") != "success":
            message = data.get("message", "") if isinstance(data, dict) else ""
            raise DeviceLocationError(FailureKind.POSITION_UNAVAILABLE, message)

        try:
            point = GeoPoint(latitude=float(data["lat"]), longitude=float(data["lon"]))
        except (KeyError, TypeError, ValueError) as e:
            raise DeviceLocationError(FailureKind.POSITION_UNAVAILABLE, f"Bad location payload: {e}") from e

        logger.info("Device located at %s", point)
        return point


class StaticLocator:
    """
    Locator returning a fixed point or a fixed failure.

    Backs the CLI's --lat/--lon options and mock mode.
    """

    def __init__(
        self,
        point: Optional[GeoPoint] = None,
        failure: Optional[FailureKind] = None,
    ):
        if point is None and failure is None:
            failure = FailureKind.POSITION_UNAVAILABLE
        self.point = point
        self.failure = failure

    async def locate(self) -> GeoPoint:
        if self.failure is not None:
            raise DeviceLocationError(self.failure)
        return self.point
