"""
Domain layer - Pure business logic without external dependencies.
"""

from .address_normalizer import normalize_address
from .exceptions import (
    DeviceLocationError,
    FailureKind,
    GeocodingError,
    MalformedResponseError,
    RegistryError,
)
from .location_state import LocationState
from .models import (
    WEEKDAYS,
    BoundingBox,
    DayAvailability,
    GeoPoint,
    RegistrationDraft,
    ResolvedAddress,
    SuggestionEntry,
    TimeSlot,
    WashType,
    WeeklySchedule,
)
from .schedule_editor import EditResult, EditStatus, ScheduleEditor

__all__ = [
    "WEEKDAYS",
    "BoundingBox",
    "DayAvailability",
    "DeviceLocationError",
    "EditResult",
    "EditStatus",
    "FailureKind",
    "GeoPoint",
    "GeocodingError",
    "LocationState",
    "MalformedResponseError",
    "RegistrationDraft",
    "RegistryError",
    "ResolvedAddress",
    "ScheduleEditor",
    "SuggestionEntry",
    "TimeSlot",
    "WashType",
    "WeeklySchedule",
    "normalize_address",
]
