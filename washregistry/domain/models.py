"""
Domain models for the weekly schedule and location resolution.
"""

import math
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Tuple

WEEKDAYS: Tuple[str, ...] = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)

DEFAULT_DAY = "Monday"
DEFAULT_CAPACITY = 2


@dataclass(frozen=True)
class TimeSlot:
    """
    A bookable time window with a capacity, scoped to one day entry.

    Times are kept as "HH:MM" strings; ordering of start and end is left
    to the caller.
    """
    start_time: str
    end_time: str
    capacity: int = DEFAULT_CAPACITY

    @property
    def pair(self) -> Tuple[str, str]:
        """The (start, end) pair that must be unique within a day."""
        return (self.start_time, self.end_time)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "startTime": self.start_time,
            "endTime": self.end_time,
            "slotNumber": self.capacity,
        }

    def __str__(self) -> str:
        return f"{self.start_time} - {self.end_time} ({self.capacity})"


@dataclass(frozen=True)
class DayAvailability:
    """One weekday's slot collection. Labels may repeat across entries."""
    day: str
    slots: Tuple[TimeSlot, ...] = ()

    def has_pair(self, start_time: str, end_time: str, *, skip_index: int | None = None) -> bool:
        """Check if a slot other than ``skip_index`` already uses this pair."""
        for idx, slot in enumerate(self.slots):
            if idx == skip_index:
                continue
            if slot.start_time == start_time and slot.end_time == end_time:
                return True
        return False

    def to_dict(self) -> Dict[str, Any]:
        return {"day": self.day, "slots": [slot.to_dict() for slot in self.slots]}


@dataclass(frozen=True)
class WeeklySchedule:
    """
    Ordered sequence of day entries.

    Insertion order is the display and submission order.
    """
    days: Tuple[DayAvailability, ...] = ()

    @classmethod
    def default(
        cls,
        day: str = DEFAULT_DAY,
        slot: Optional[TimeSlot] = None,
    ) -> "WeeklySchedule":
        """Schedule with a single Monday entry holding the default slot."""
        slot = slot or TimeSlot(start_time="09:00", end_time="10:00")
        return cls(days=(DayAvailability(day=day, slots=(slot,)),))

    def slot_count(self) -> int:
        return sum(len(day.slots) for day in self.days)

    def replace_day(self, day_index: int, day: DayAvailability) -> "WeeklySchedule":
        days = list(self.days)
        days[day_index] = day
        return replace(self, days=tuple(days))

    def to_list(self) -> List[Dict[str, Any]]:
        return [day.to_dict() for day in self.days]


@dataclass(frozen=True)
class GeoPoint:
    """
    A WGS84 coordinate pair.

    Invariant: latitude in [-90, 90] and longitude in [-180, 180].
    """
    latitude: float
    longitude: float

    def __post_init__(self):
        for name, value, bound in (
            ("latitude", self.latitude, 90.0),
            ("longitude", self.longitude, 180.0),
        ):
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ValueError(f"{name} must be a number, got {value!r}")
            if not math.isfinite(value) or not -bound <= value <= bound:
                raise ValueError(f"{name} must be between {-bound} and {bound}, got {value}")

    def __str__(self) -> str:
        return f"{self.latitude:.4f}, {self.longitude:.4f}"


@dataclass(frozen=True)
class BoundingBox:
    """
    Rectangular region used to constrain forward geocoding.

    The default covers Cairo and Giza.
    """
    min_lon: float = 30.5
    max_lat: float = 30.3
    max_lon: float = 31.5
    min_lat: float = 29.8

    def __post_init__(self):
        if self.min_lon >= self.max_lon or self.min_lat >= self.max_lat:
            raise ValueError(f"Invalid bounding box: {self.to_viewbox()}")

    def to_viewbox(self) -> str:
        """Render as the provider's ``left,top,right,bottom`` viewbox."""
        return f"{self.min_lon},{self.max_lat},{self.max_lon},{self.min_lat}"

    def contains(self, point: GeoPoint) -> bool:
        return (
            self.min_lat <= point.latitude <= self.max_lat
            and self.min_lon <= point.longitude <= self.max_lon
        )


@dataclass(frozen=True)
class SuggestionEntry:
    """A labeled candidate location returned by forward geocoding."""
    id: str
    label: str
    point: GeoPoint

    @property
    def title(self) -> str:
        """First segment of the label, used as the headline in lists."""
        return self.label.split(",")[0].strip()


@dataclass(frozen=True)
class ResolvedAddress:
    """Structured address produced by reverse resolution."""
    street: str = ""
    street_number: str = ""
    city: str = ""
    area: str = ""
    display_address: str = ""

    @classmethod
    def empty(cls) -> "ResolvedAddress":
        return cls()

    def with_overrides(self, **fields: str) -> "ResolvedAddress":
        """Return a copy with caller-edited fields applied."""
        return replace(self, **fields)

    def is_empty(self) -> bool:
        return not any(
            (self.street, self.street_number, self.city, self.area, self.display_address)
        )


@dataclass(frozen=True)
class WashType:
    """A wash-service offering with an optional price."""
    name: str = ""
    price: Optional[float] = None
    description: str = ""


@dataclass(frozen=True)
class RegistrationDraft:
    """Everything collected before the payload is built."""
    name: str = ""
    phone_number: str = ""
    address: ResolvedAddress = field(default_factory=ResolvedAddress)
    location: Optional[GeoPoint] = None
    wash_types: Tuple[WashType, ...] = (WashType(),)
    schedule: WeeklySchedule = field(default_factory=WeeklySchedule.default)

    def add_wash_type(self) -> "RegistrationDraft":
        return replace(self, wash_types=self.wash_types + (WashType(),))

    def remove_wash_type(self, index: int) -> "RegistrationDraft":
        if not 0 <= index < len(self.wash_types):
            return self
        wash_types = tuple(wt for i, wt in enumerate(self.wash_types) if i != index)
        return replace(self, wash_types=wash_types)

    def update_wash_type(self, index: int, wash_type: WashType) -> "RegistrationDraft":
        if not 0 <= index < len(self.wash_types):
            return self
        wash_types = list(self.wash_types)
        wash_types[index] = wash_type
        return replace(self, wash_types=tuple(wash_types))
