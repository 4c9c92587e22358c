"""
Editing rules for the weekly availability schedule.

Pure domain logic: every operation takes a schedule and returns an
``EditResult`` holding the new schedule and a status. A rejected edit
returns the input schedule untouched.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any

from .models import (
    DEFAULT_CAPACITY,
    DEFAULT_DAY,
    WEEKDAYS,
    DayAvailability,
    TimeSlot,
    WeeklySchedule,
)
from .parsing import format_hour, parse_capacity


class EditStatus(str, Enum):
    APPLIED = "applied"
    DUPLICATE_SLOT = "duplicate_slot"
    NO_FREE_DEFAULT_SLOT = "no_free_default_slot"
    INVALID_INDEX = "invalid_index"
    INVALID_FIELD = "invalid_field"
    INVALID_LABEL = "invalid_label"


@dataclass(frozen=True)
class EditResult:
    schedule: WeeklySchedule
    status: EditStatus = EditStatus.APPLIED

    @property
    def applied(self) -> bool:
        return self.status is EditStatus.APPLIED


# Accept both the Python field names and the submission aliases
_SLOT_FIELDS = {
    "start_time": "start_time",
    "startTime": "start_time",
    "end_time": "end_time",
    "endTime": "end_time",
    "capacity": "capacity",
    "slotNumber": "capacity",
}


class ScheduleEditor:
    """
    Maintains a conflict-free set of slots per day entry.

    Slot uniqueness is checked per day entry, never across entries: two
    entries labelled "Monday" may hold the same slot.

    Algorithm for new slots:
    1. Start from the base pair (12:00 - 13:00 by default)
    2. If the day already holds that pair, move both hours forward by one,
       wrapping at midnight
    3. Give up after ``max_attempts`` candidates and report exhaustion
    """

    def __init__(
        self,
        default_day: str = DEFAULT_DAY,
        default_slot: TimeSlot | None = None,
        base_start_hour: int = 12,
        base_end_hour: int = 13,
        default_capacity: int = DEFAULT_CAPACITY,
        max_attempts: int = 24,
    ):
        self.default_day = default_day
        self.default_slot = default_slot or TimeSlot("09:00", "10:00", default_capacity)
        self.base_start_hour = base_start_hour
        self.base_end_hour = base_end_hour
        self.default_capacity = default_capacity
        self.max_attempts = max_attempts

    def new_schedule(self) -> WeeklySchedule:
        return WeeklySchedule.default(day=self.default_day, slot=self.default_slot)

    def add_day(self, schedule: WeeklySchedule) -> EditResult:
        """Append a day entry with the default label and one default slot."""
        day = DayAvailability(day=self.default_day, slots=(self.default_slot,))
        return EditResult(replace(schedule, days=schedule.days + (day,)))

    def remove_day(self, schedule: WeeklySchedule, day_index: int) -> EditResult:
        """Remove a day entry. The schedule may end up empty."""
        if not self._valid_day(schedule, day_index):
            return EditResult(schedule, EditStatus.INVALID_INDEX)

        days = tuple(d for i, d in enumerate(schedule.days) if i != day_index)
        return EditResult(replace(schedule, days=days))

    def set_day_label(self, schedule: WeeklySchedule, day_index: int, label: str) -> EditResult:
        """Overwrite the weekday label of an entry."""
        if not self._valid_day(schedule, day_index):
            return EditResult(schedule, EditStatus.INVALID_INDEX)
        if label not in WEEKDAYS:
            return EditResult(schedule, EditStatus.INVALID_LABEL)

        day = replace(schedule.days[day_index], day=label)
        return EditResult(schedule.replace_day(day_index, day))

    def next_free_slot(self, day: DayAvailability) -> TimeSlot | None:
        """
        Find the first whole-hour slot not already used by the day.

        Returns None when all ``max_attempts`` candidates are taken.
        """
        for offset in range(self.max_attempts):
            start_time = format_hour(self.base_start_hour + offset)
            end_time = format_hour(self.base_end_hour + offset)
            if not day.has_pair(start_time, end_time):
                return TimeSlot(start_time, end_time, self.default_capacity)
        return None

    def add_slot(self, schedule: WeeklySchedule, day_index: int) -> EditResult:
        """Append the next free default slot to a day entry."""
        if not self._valid_day(schedule, day_index):
            return EditResult(schedule, EditStatus.INVALID_INDEX)

        day = schedule.days[day_index]
        slot = self.next_free_slot(day)
        if slot is None:
            return EditResult(schedule, EditStatus.NO_FREE_DEFAULT_SLOT)

        day = replace(day, slots=day.slots + (slot,))
        return EditResult(schedule.replace_day(day_index, day))

    def remove_slot(self, schedule: WeeklySchedule, day_index: int, slot_index: int) -> EditResult:
        """Remove one slot. A day may be left with no slots."""
        if not self._valid_slot(schedule, day_index, slot_index):
            return EditResult(schedule, EditStatus.INVALID_INDEX)

        day = schedule.days[day_index]
        slots = tuple(s for i, s in enumerate(day.slots) if i != slot_index)
        return EditResult(schedule.replace_day(day_index, replace(day, slots=slots)))

    def update_slot(
        self,
        schedule: WeeklySchedule,
        day_index: int,
        slot_index: int,
        field: str,
        value: Any,
    ) -> EditResult:
        """
        Change one field of a slot.

        Time changes are rejected with DUPLICATE_SLOT when another slot of
        the same day already has the resulting (start, end) pair. Capacity
        goes through ``parse_capacity``.
        """
        if not self._valid_slot(schedule, day_index, slot_index):
            return EditResult(schedule, EditStatus.INVALID_INDEX)

        attr = _SLOT_FIELDS.get(field)
        if attr is None:
            return EditResult(schedule, EditStatus.INVALID_FIELD)

        day = schedule.days[day_index]
        current = day.slots[slot_index]

        if attr == "capacity":
            updated = replace(current, capacity=parse_capacity(value))
        else:
            updated = replace(current, **{attr: "" if value is None else str(value)})
            if day.has_pair(updated.start_time, updated.end_time, skip_index=slot_index):
                return EditResult(schedule, EditStatus.DUPLICATE_SLOT)

        slots = list(day.slots)
        slots[slot_index] = updated
        return EditResult(schedule.replace_day(day_index, replace(day, slots=tuple(slots))))

    @staticmethod
    def _valid_day(schedule: WeeklySchedule, day_index: int) -> bool:
        return 0 <= day_index < len(schedule.days)

    @classmethod
    def _valid_slot(cls, schedule: WeeklySchedule, day_index: int, slot_index: int) -> bool:
        return cls._valid_day(schedule, day_index) and 0 <= slot_index < len(
            schedule.days[day_index].slots
        )
