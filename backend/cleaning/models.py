"""SQLModel data models.

This module defines the application's database tables using SQLModel.
A `Vehicle` carries a team of `Cleaner`s; a `Booking` reserves one or
more cleaners of the same vehicle for a contiguous block of hours.
Booking times are naive local date-times.
"""

from typing import Optional
from sqlmodel import SQLModel, Field, Relationship
from pydantic import NaiveDatetime
from sqlalchemy import DateTime
from typing import List


class BookingCleaner(SQLModel, table=True):
    """Association row linking a `Booking` to one assigned `Cleaner`."""
    __tablename__ = "booking_cleaner"

    booking_id: Optional[int] = Field(default=None, foreign_key="booking.id", primary_key=True)
    cleaner_id: Optional[int] = Field(default=None, foreign_key="cleaner.id", primary_key=True)


class Vehicle(SQLModel, table=True):
    """A company vehicle; cleaners of one booking always travel together."""
    id: Optional[int] = Field(default=None, primary_key=True)
    licence_plate: str = Field(nullable=False, unique=True)
    cleaners: List['Cleaner'] = Relationship(
        back_populates='vehicle',
        sa_relationship_kwargs={"cascade": "all, delete-orphan", "order_by": "Cleaner.id"},
    )


class Cleaner(SQLModel, table=True):
    """A cleaner assigned to exactly one `Vehicle`."""
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(nullable=False)
    vehicle_id: int = Field(foreign_key='vehicle.id', index=True, nullable=False)
    vehicle: Optional[Vehicle] = Relationship(back_populates='cleaners')
    bookings: List['Booking'] = Relationship(back_populates='cleaners', link_model=BookingCleaner)


class Booking(SQLModel, table=True):
    """A cleaning appointment.

    Fields:
    - `start_date_time` / `end_date_time`: the job window, end is always
      `start + duration_hours`
    - `cleaners`: the cleaners doing the job, all from one vehicle
    """
    id: Optional[int] = Field(default=None, primary_key=True)
    start_date_time: NaiveDatetime = Field(sa_type=DateTime(timezone=False), nullable=False, index=True)
    end_date_time: NaiveDatetime = Field(sa_type=DateTime(timezone=False), nullable=False, index=True)
    duration_hours: int = Field(nullable=False)
    customer_name: str = Field(nullable=False)
    customer_phone: Optional[str] = None
    cleaners: List[Cleaner] = Relationship(
        back_populates='bookings',
        link_model=BookingCleaner,
        sa_relationship_kwargs={"order_by": "Cleaner.id"},
    )
