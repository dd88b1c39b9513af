"""Repository classes encapsulating database operations.

Each repository is small and focused on a single aggregate (vehicles,
cleaners, bookings). Repositories return SQLModel objects and perform
commits/refreshes where appropriate.
"""

from datetime import datetime
from typing import List, Optional, Sequence
from sqlmodel import Session, select
from sqlalchemy import func
from sqlalchemy.orm import selectinload
from . import models


class VehicleRepository:
    """Queries and inserts for `Vehicle` objects."""
    def __init__(self, session: Session):
        self.session = session

    def count(self) -> int:
        """Return the number of stored vehicles."""
        return self.session.exec(select(func.count()).select_from(models.Vehicle)).one()

    def create(self, vehicle: models.Vehicle) -> models.Vehicle:
        """Persist a vehicle together with any cleaners attached to it."""
        self.session.add(vehicle)
        self.session.commit()
        self.session.refresh(vehicle)
        return vehicle

    def list_with_cleaners(self) -> List[models.Vehicle]:
        """Return all vehicles ordered by id with their cleaners loaded."""
        stmt = (
            select(models.Vehicle)
            .options(selectinload(models.Vehicle.cleaners))
            .order_by(models.Vehicle.id)
        )
        return self.session.exec(stmt).all()


class CleanerRepository:
    """Read access to `Cleaner` records."""
    def __init__(self, session: Session):
        self.session = session

    def list_all(self) -> List[models.Cleaner]:
        """Return every cleaner ordered by id."""
        return self.session.exec(select(models.Cleaner).order_by(models.Cleaner.id)).all()


class BookingRepository:
    """CRUD and time-window queries for `Booking` records."""
    def __init__(self, session: Session):
        self.session = session

    def get(self, booking_id: int) -> Optional[models.Booking]:
        """Fetch a booking by id."""
        return self.session.get(models.Booking, booking_id)

    def save(self, booking: models.Booking) -> models.Booking:
        """Insert or update `booking` and return the refreshed instance."""
        self.session.add(booking)
        self.session.commit()
        self.session.refresh(booking)
        return booking

    def list_all(self) -> List[models.Booking]:
        return self.session.exec(select(models.Booking).order_by(models.Booking.id)).all()

    def find_active_for_cleaners(self, cleaner_ids: Sequence[int], start: datetime, end: datetime) -> List[models.Booking]:
        """Return bookings of `cleaner_ids` lying entirely inside `[start, end]`.

        Each booking is returned once even when it is shared by several of
        the requested cleaners; its `cleaners` are loaded eagerly so callers
        can group bookings per cleaner.
        """
        if not cleaner_ids:
            return []
        stmt = (
            select(models.Booking)
            .join(models.BookingCleaner, models.BookingCleaner.booking_id == models.Booking.id)
            .where(
                models.BookingCleaner.cleaner_id.in_(list(cleaner_ids)),
                models.Booking.start_date_time >= start,
                models.Booking.end_date_time <= end,
            )
            .options(selectinload(models.Booking.cleaners))
            .order_by(models.Booking.start_date_time)
            .distinct()
        )
        return self.session.exec(stmt).all()

    def find_conflicting(self, cleaner_ids: Sequence[int], start: datetime, end: datetime) -> List[models.Booking]:
        """Return bookings of `cleaner_ids` overlapping the open interval `(start, end)`.

        Touching intervals (one ends exactly when the other starts) do not
        conflict.
        """
        if not cleaner_ids:
            return []
        stmt = (
            select(models.Booking)
            .join(models.BookingCleaner, models.BookingCleaner.booking_id == models.Booking.id)
            .where(
                models.BookingCleaner.cleaner_id.in_(list(cleaner_ids)),
                models.Booking.start_date_time < end,
                models.Booking.end_date_time > start,
            )
            .options(selectinload(models.Booking.cleaners))
            .distinct()
        )
        return self.session.exec(stmt).all()
