"""
Service layer helpers that orchestrate adapters and domain logic.
"""

from .location_resolver import (
    DeviceLocatorProtocol,
    GeocodingClientProtocol,
    LocationResolver,
    ResolutionOutcome,
    SearchOutcome,
)
from .registration import RegistrationAggregator, RegistrationPayload, SubmissionResult

__all__ = [
    "DeviceLocatorProtocol",
    "GeocodingClientProtocol",
    "LocationResolver",
    "RegistrationAggregator",
    "RegistrationPayload",
    "ResolutionOutcome",
    "SearchOutcome",
    "SubmissionResult",
]
