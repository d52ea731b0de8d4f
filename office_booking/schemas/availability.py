# office_booking/schemas/availability.py

from datetime import datetime
from typing import Optional

from pydantic import model_validator

from .common import ApiModel, UtcDatetime


class AvailabilityCreate(ApiModel):
    available_from: UtcDatetime
    available_to: UtcDatetime

    @model_validator(mode="after")
    def check_interval(self):
        if self.available_to <= self.available_from:
            raise ValueError("availableTo must be after availableFrom")
        return self


class AvailabilityUpdate(ApiModel):
    available_from: Optional[UtcDatetime] = None
    available_to: Optional[UtcDatetime] = None

    @model_validator(mode="after")
    def check_interval(self):
        if self.available_from and self.available_to and self.available_to <= self.available_from:
            raise ValueError("availableTo must be after availableFrom")
        return self


class AvailabilityRead(ApiModel):
    id: str
    office_id: str
    available_from: datetime
    available_to: datetime
    created_at: datetime


class SlotRead(ApiModel):
    """A free interval, at least the requested duration long."""
    start: datetime
    end: datetime
