"""
Domain-specific exception hierarchy and failure kinds for washregistry.
"""

from enum import Enum


class FailureKind(str, Enum):
    """Failure reported to callers instead of a propagated exception."""

    NETWORK = "network"
    MALFORMED_RESPONSE = "malformed_response"
    PERMISSION_DENIED = "permission_denied"
    POSITION_UNAVAILABLE = "position_unavailable"
    TIMEOUT = "timeout"
    INVALID_POINT = "invalid_point"


class RegistryError(Exception):
    """Base class for all application-level errors."""


class ConfigError(RegistryError):
    """Raised when the configuration file cannot be loaded."""


class GeocodingError(RegistryError):
    """Raised when the geocoding provider cannot be reached."""


class MalformedResponseError(GeocodingError):
    """Raised when the geocoding provider returns an unexpected payload."""


class DeviceLocationError(RegistryError):
    """Raised when the device position cannot be determined."""

    def __init__(self, kind: FailureKind, message: str = ""):
        super().__init__(message or kind.value)
        self.kind = kind
