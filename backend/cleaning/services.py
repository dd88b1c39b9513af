"""Business logic services used by HTTP controllers.

This module holds small service classes that coordinate repositories
and the booking rules of the cleaning company:

- the working day runs from 08:00 to 22:00 and nobody works on Fridays
- a job lasts 2 or 4 hours and needs 1 to 3 cleaners
- all cleaners of a job travel in the same vehicle
- a cleaner needs a 30 minute break between two jobs

Services raise `BusinessError` / `ResourceNotFoundError` and leave the
HTTP mapping to the controllers.
"""

import logging
import threading
from collections import defaultdict
from datetime import date, datetime, time, timedelta
from typing import Dict, List
from sqlmodel import Session
from . import models, repositories
from .errors import BusinessError, ResourceNotFoundError
from .schemas import (
    AvailabilityRequest,
    BookingRequest,
    BookingResponse,
    BookingUpdateRequest,
    CleanerAvailability,
)

WORK_START = time(8, 0)
WORK_END = time(22, 0)
BREAK = timedelta(minutes=30)
SLOT_STEP = timedelta(minutes=30)
ALLOWED_DURATIONS = (2, 4)
MIN_CLEANERS = 1
MAX_CLEANERS = 3
FRIDAY = 4

logger = logging.getLogger("cleaning.booking")

# Serialises check-then-write sequences so concurrent requests in one
# process cannot assign the same cleaner twice.
_BOOKING_LOCK = threading.Lock()


def format_time(t: time) -> str:
    """Render `t` as HH:MM, keeping seconds only when they are set."""
    if t.second or t.microsecond:
        return t.isoformat()
    return t.strftime("%H:%M")


def validate_booking_window(day: date, start: time, duration: int, cleaner_count: int) -> None:
    """Raise `BusinessError` if a job cannot be scheduled as requested."""
    if day.weekday() == FRIDAY:
        raise BusinessError("We do not work on Fridays.")
    if duration not in ALLOWED_DURATIONS:
        raise BusinessError("Duration must be 2 or 4 hours.")
    if not MIN_CLEANERS <= cleaner_count <= MAX_CLEANERS:
        raise BusinessError(f"Cleaner count must be between {MIN_CLEANERS} and {MAX_CLEANERS}.")
    if start < WORK_START:
        raise BusinessError(f"Cannot start before {format_time(WORK_START)}")
    # full date-times so a late start cannot wrap past midnight
    try:
        end = datetime.combine(day, start) + timedelta(hours=duration)
    except OverflowError:
        raise BusinessError(f"Must finish before {format_time(WORK_END)}")
    if end > datetime.combine(day, WORK_END):
        raise BusinessError(f"Must finish before {format_time(WORK_END)}")


def is_slot_free(bookings: List[models.Booking], day: date, start: time, duration: int) -> bool:
    """Return True if a job of `duration` hours at `start` fits around `bookings`.

    Each existing booking is widened by the mandatory break on both sides
    before checking for overlap.
    """
    req_start = datetime.combine(day, start)
    req_end = req_start + timedelta(hours=duration)
    if start < WORK_START or req_end > datetime.combine(day, WORK_END):
        return False
    for b in bookings:
        if req_start < b.end_date_time + BREAK and req_end > b.start_date_time - BREAK:
            return False
    return True


def free_slots(bookings: List[models.Booking], day: date) -> List[str]:
    """List every free 2h and 4h start of the day in 30 minute steps."""
    slots = []
    current = datetime.combine(day, WORK_START)
    day_end = datetime.combine(day, WORK_END)
    while current + timedelta(hours=2) <= day_end:
        label = format_time(current.time())
        for duration in ALLOWED_DURATIONS:
            if current + timedelta(hours=duration) > day_end:
                continue
            if is_slot_free(bookings, day, current.time(), duration):
                slots.append(f"{label} ({duration}h)")
        current += SLOT_STEP
    return slots


def to_response(booking: models.Booking) -> BookingResponse:
    """Map a persisted `Booking` to its API representation."""
    return BookingResponse(
        id=booking.id,
        start_date_time=booking.start_date_time,
        end_date_time=booking.end_date_time,
        duration_hours=booking.duration_hours,
        cleaner_names=[c.name for c in booking.cleaners],
        customer_name=booking.customer_name,
    )


class BookingService:
    """Availability lookups and booking creation/rescheduling."""
    def __init__(self, session: Session):
        self.session = session
        self.booking_repo = repositories.BookingRepository(session)
        self.cleaner_repo = repositories.CleanerRepository(session)
        self.vehicle_repo = repositories.VehicleRepository(session)

    def check_availability(self, request: AvailabilityRequest) -> List[CleanerAvailability]:
        """Return the cleaners that have time on `request.date`.

        With both `start_time` and `duration` set, a cleaner is listed with
        that single slot (`"10:00 - 12:00"`) if it is free. Otherwise every
        free slot of the day is listed. Cleaners without any free slot are
        left out.
        """
        day = request.date
        if day.weekday() == FRIDAY:
            raise BusinessError("We do not work on Fridays.")
        if request.duration is not None and request.duration not in ALLOWED_DURATIONS:
            raise BusinessError("Duration must be 2 or 4 hours.")

        cleaners = self.cleaner_repo.list_all()
        by_cleaner = self._bookings_by_cleaner([c.id for c in cleaners], day)

        out = []
        for cleaner in cleaners:
            bookings = by_cleaner.get(cleaner.id, [])
            if request.start_time is not None and request.duration is not None:
                if is_slot_free(bookings, day, request.start_time, request.duration):
                    end = datetime.combine(day, request.start_time) + timedelta(hours=request.duration)
                    slots = [f"{format_time(request.start_time)} - {format_time(end.time())}"]
                else:
                    slots = []
            else:
                slots = free_slots(bookings, day)
            if slots:
                out.append(CleanerAvailability(
                    cleaner_id=cleaner.id,
                    name=cleaner.name,
                    vehicle_id=cleaner.vehicle_id,
                    available_time_slots=slots,
                ))
        return out

    def create_booking(self, request: BookingRequest) -> BookingResponse:
        """Book `cleaner_count` cleaners from a single vehicle.

        Vehicles are tried in id order and the first one with enough free
        cleaners wins; within it the lowest cleaner ids are assigned.
        """
        validate_booking_window(request.date, request.start_time, request.duration, request.cleaner_count)
        start = datetime.combine(request.date, request.start_time)
        end = start + timedelta(hours=request.duration)

        with _BOOKING_LOCK:
            selected = None
            for vehicle in self.vehicle_repo.list_with_cleaners():
                busy = self._busy_cleaner_ids([c.id for c in vehicle.cleaners], start, end)
                free = [c for c in vehicle.cleaners if c.id not in busy]
                if len(free) >= request.cleaner_count:
                    selected = free[:request.cleaner_count]
                    break
            if selected is None:
                logger.info("booking rejected: no %d free cleaner(s) at %s", request.cleaner_count, start.isoformat())
                raise BusinessError("No available cleaners found for the requested time and count constraint.")

            booking = models.Booking(
                start_date_time=start,
                end_date_time=end,
                duration_hours=request.duration,
                customer_name=request.customer_name,
                customer_phone=request.customer_phone,
                cleaners=list(selected),
            )
            saved = self.booking_repo.save(booking)
        logger.info(
            "booking %s created: %s-%s cleaners=%s",
            saved.id, start.isoformat(), end.isoformat(), [c.id for c in saved.cleaners],
        )
        return to_response(saved)

    def update_booking(self, booking_id: int, request: BookingUpdateRequest) -> BookingResponse:
        """Move a booking to a new date/time keeping its cleaners and duration."""
        booking = self.booking_repo.get(booking_id)
        if not booking:
            raise ResourceNotFoundError("Booking not found")

        validate_booking_window(request.date, request.start_time, booking.duration_hours, len(booking.cleaners))
        new_start = datetime.combine(request.date, request.start_time)
        new_end = new_start + timedelta(hours=booking.duration_hours)

        with _BOOKING_LOCK:
            conflicts = self.booking_repo.find_conflicting(
                [c.id for c in booking.cleaners], new_start - BREAK, new_end + BREAK,
            )
            if any(b.id != booking_id for b in conflicts):
                logger.info("booking %s reschedule rejected: cleaners busy at %s", booking_id, new_start.isoformat())
                raise BusinessError("Selected cleaners are not available at the new time.")
            booking.start_date_time = new_start
            booking.end_date_time = new_end
            saved = self.booking_repo.save(booking)
        logger.info("booking %s moved to %s-%s", booking_id, new_start.isoformat(), new_end.isoformat())
        return to_response(saved)

    def get_booking(self, booking_id: int) -> BookingResponse:
        booking = self.booking_repo.get(booking_id)
        if not booking:
            raise ResourceNotFoundError("Booking not found")
        return to_response(booking)

    def _bookings_by_cleaner(self, cleaner_ids: List[int], day: date) -> Dict[int, List[models.Booking]]:
        """Group the bookings of `cleaner_ids` on `day` per cleaner, one query."""
        day_start = datetime.combine(day, time.min)
        day_end = datetime.combine(day, time.max)
        wanted = set(cleaner_ids)
        grouped = defaultdict(list)
        for b in self.booking_repo.find_active_for_cleaners(cleaner_ids, day_start, day_end):
            for c in b.cleaners:
                if c.id in wanted:
                    grouped[c.id].append(b)
        return grouped

    def _busy_cleaner_ids(self, cleaner_ids: List[int], start: datetime, end: datetime) -> set:
        """Ids among `cleaner_ids` whose bookings clash with `[start, end]` plus breaks."""
        wanted = set(cleaner_ids)
        busy = set()
        for b in self.booking_repo.find_conflicting(cleaner_ids, start - BREAK, end + BREAK):
            busy.update(c.id for c in b.cleaners if c.id in wanted)
        return busy


class FleetService:
    """Seed the demo fleet of vehicles and cleaners."""
    def __init__(self, session: Session):
        self.session = session
        self.vehicle_repo = repositories.VehicleRepository(session)

    def seed_demo_fleet(self, vehicles: int = 5, cleaners_per_vehicle: int = 5) -> int:
        """Create `vehicles` vehicles with `cleaners_per_vehicle` cleaners each.

        Does nothing when any vehicle already exists. Vehicles get plates
        `DXB-1000`, `DXB-2000`, ... and cleaners are named `Cleaner <v>-<c>`.
        Returns the number of vehicles created.
        """
        if self.vehicle_repo.count() > 0:
            return 0
        for i in range(1, vehicles + 1):
            vehicle = models.Vehicle(licence_plate=f"DXB-{i * 1000}")
            vehicle.cleaners = [models.Cleaner(name=f"Cleaner {i}-{j}") for j in range(1, cleaners_per_vehicle + 1)]
            self.vehicle_repo.create(vehicle)
        logger.info("seeded %d vehicles with %d cleaners each", vehicles, cleaners_per_vehicle)
        return vehicles
