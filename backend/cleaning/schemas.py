"""Pydantic request/response schemas used by the API.

Schemas keep API input/output shapes stable and provide validation for
controller handlers and tests. Fields are snake_case in Python and
camelCase on the wire; both spellings are accepted on input.
"""

import datetime as dt
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from typing import List, Optional


class ApiModel(BaseModel):
    """Base schema serialising field names as camelCase."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# the last calendar day is excluded so a job end never overflows `datetime`
LAST_BOOKABLE_DATE = dt.date.max - dt.timedelta(days=1)


def _naive_time(value):
    """Reject times carrying a UTC offset; booking times are local wall-clock times."""
    if value is not None and value.tzinfo is not None:
        raise ValueError("time must not carry a UTC offset")
    return value


class AvailabilityRequest(ApiModel):
    """Request to check cleaner availability.

    Without both `start_time` and `duration` every free slot of the day
    is listed.
    """
    date: dt.date = Field(le=LAST_BOOKABLE_DATE, description="Date to check availability (cannot be Friday)", examples=["2023-11-23"])
    start_time: Optional[dt.time] = Field(default=None, description="Specific start time to check", examples=["10:00"])
    duration: Optional[int] = Field(default=None, description="Duration in hours (2 or 4)", examples=[2])

    _start_time_naive = field_validator("start_time")(_naive_time)


class BookingRequest(ApiModel):
    """Request to create a new booking."""
    date: dt.date = Field(le=LAST_BOOKABLE_DATE, description="Booking date (cannot be Friday)", examples=["2023-11-23"])
    start_time: dt.time = Field(description="Start time (between 08:00 and 22:00)", examples=["10:00"])
    duration: int = Field(description="Duration in hours (must be 2 or 4)", examples=[2])
    cleaner_count: int = Field(default=1, ge=1, le=3, description="Number of cleaners required (1-3)", examples=[2])
    customer_name: str = Field(min_length=1, description="Customer name", examples=["John Doe"])
    customer_phone: Optional[str] = Field(default=None, description="Customer phone number", examples=["+1234567890"])

    _start_time_naive = field_validator("start_time")(_naive_time)


class BookingUpdateRequest(ApiModel):
    """Request to move an existing booking to a new date/time."""
    date: dt.date = Field(le=LAST_BOOKABLE_DATE, description="New booking date (cannot be Friday)", examples=["2023-11-23"])
    start_time: dt.time = Field(description="New start time (between 08:00 and 22:00)", examples=["14:00"])

    _start_time_naive = field_validator("start_time")(_naive_time)


class BookingResponse(ApiModel):
    """Booking details returned by the booking endpoints."""
    id: int
    start_date_time: dt.datetime
    end_date_time: dt.datetime
    duration_hours: int
    cleaner_names: List[str]
    customer_name: str


class CleanerAvailability(ApiModel):
    """Free time slots of a single cleaner on the requested day."""
    cleaner_id: int
    name: str
    vehicle_id: int
    available_time_slots: List[str] = Field(examples=[["08:00 (2h)", "08:00 (4h)", "08:30 (2h)"]])
