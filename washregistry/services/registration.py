"""
Registration aggregator.

Combines the resolved address, the selected point, the wash offerings and
the weekly schedule into the JSON record handed to the submission sink.
Validation problems are collected and returned; nothing is raised.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..config import RegistrationConfig
from ..domain.models import RegistrationDraft, WeeklySchedule
from ..domain.parsing import is_valid_time, sanitize_phone_number

logger = logging.getLogger(__name__)


class _PayloadModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)


class SlotPayload(_PayloadModel):
    start_time: str = Field(alias="startTime")
    end_time: str = Field(alias="endTime")
    slot_number: int = Field(alias="slotNumber", ge=0)


class DayPayload(_PayloadModel):
    day: str
    slots: List[SlotPayload]


class WashTypePayload(_PayloadModel):
    name: str
    price: Optional[float] = None
    description: str = ""


class RegistrationPayload(_PayloadModel):
    name: str
    phone_number: str = Field(alias="phoneNumber")
    address: str
    street: str = ""
    street_number: str = Field("", alias="streetNumber")
    city: str = ""
    area: str = ""
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)
    wash_types: List[WashTypePayload] = Field(default_factory=list, alias="washTypes")
    availability: List[DayPayload] = Field(default_factory=list)

    def to_record(self) -> Dict[str, Any]:
        """JSON-serialisable dict using the sink's camelCase names."""
        return self.model_dump(mode="json", by_alias=True)

    def to_json(self, indent: int | None = 2) -> str:
        return self.model_dump_json(by_alias=True, indent=indent)


@dataclass
class SubmissionResult:
    payload: Optional[RegistrationPayload] = None
    errors: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.payload is not None and not self.errors


class RegistrationAggregator:
    """Validates a draft and turns it into a RegistrationPayload."""

    def __init__(self, config: RegistrationConfig | None = None):
        self.config = config or RegistrationConfig()

    def validate(self, draft: RegistrationDraft) -> List[str]:
        """Return human readable problems; an empty list means valid."""
        errors: List[str] = []

        if not draft.name.strip():
            errors.append("name is required")

        digits = sanitize_phone_number(draft.phone_number, self.config.phone_digits)
        if digits is None or len(digits) != self.config.phone_digits:
            errors.append(f"phone number must have exactly {self.config.phone_digits} digits")

        if draft.location is None:
            errors.append("location is required: pick a suggestion, a map point or the device location")

        errors.extend(self._schedule_errors(draft.schedule))
        return errors

    def build(self, draft: RegistrationDraft) -> SubmissionResult:
        """
        Validate the draft and build the submission payload.

        Returns:
            SubmissionResult with the payload, or with the validation errors
        """
        errors = self.validate(draft)
        if errors:
            logger.info("Registration draft rejected: %s", "; ".join(errors))
            return SubmissionResult(errors=errors)

        digits = sanitize_phone_number(draft.phone_number, self.config.phone_digits)
        address = draft.address

        payload = RegistrationPayload(
            name=draft.name.strip(),
            phone_number=f"{self.config.phone_prefix}{digits}",
            address=address.display_address,
            street=address.street,
            street_number=address.street_number,
            city=address.city,
            area=address.area,
            latitude=draft.location.latitude,
            longitude=draft.location.longitude,
            wash_types=[
                WashTypePayload(name=wt.name, price=wt.price, description=wt.description)
                for wt in draft.wash_types
            ],
            availability=[
                DayPayload(
                    day=day.day,
                    slots=[
                        SlotPayload(
                            start_time=slot.start_time,
                            end_time=slot.end_time,
                            slot_number=slot.capacity,
                        )
                        for slot in day.slots
                    ],
                )
                for day in draft.schedule.days
            ],
        )
        return SubmissionResult(payload=payload)

    @staticmethod
    def _schedule_errors(schedule: WeeklySchedule) -> List[str]:
        errors: List[str] = []

        if schedule.slot_count() == 0:
            errors.append("availability must contain at least one time slot")

        for day_idx, day in enumerate(schedule.days, 1):
            seen = set()
            for slot_idx, slot in enumerate(day.slots, 1):
                where = f"{day.day} (day {day_idx}), slot {slot_idx}"
                if not is_valid_time(slot.start_time) or not is_valid_time(slot.end_time):
                    errors.append(f"{where}: times must be HH:MM")
                if slot.pair in seen:
                    errors.append(f"{where}: duplicate time slot {slot.start_time}-{slot.end_time}")
                seen.add(slot.pair)

        return errors
