"""FastAPI application entrypoint and HTTP controllers.

This module defines the HTTP endpoints of the cleaning service booking
API. Controllers are intentionally thin: they accept requests, delegate
to services, and return JSON responses. Domain errors raised by the
services are turned into HTTP responses by the exception handlers
registered here.

Endpoints implemented:
- POST /api/bookings/availability
- POST /api/bookings
- PUT /api/bookings/{booking_id}
- GET /api/bookings/{booking_id}
- GET /health

Run locally from the `backend/` folder with:

    uvicorn cleaning.main:app --reload
"""

from fastapi import FastAPI, Depends, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse, Response
from sqlmodel import Session
import json
import logging
import time
import uuid
from typing import List
from .database import engine, create_db_and_tables, get_session
from . import services
from .errors import BusinessError, ResourceNotFoundError
from .schemas import (
    AvailabilityRequest,
    BookingRequest,
    BookingResponse,
    BookingUpdateRequest,
    CleanerAvailability,
)
from .config import settings

app = FastAPI(
    title="Cleaning Service API",
    version="1.0.0",
    description="API for managing cleaning service bookings and availability",
    openapi_tags=[{"name": "Booking", "description": "Booking management APIs"}],
)
logger = logging.getLogger("cleaning.api")
if not logger.handlers:
    logging.basicConfig(level=settings.LOG_LEVEL)

# Wide-open CORS keeps local frontends and the Swagger UI working without extra config in dev.
if settings.ALLOW_DEV_CORS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

create_db_and_tables()
if settings.SEED_DEMO_DATA:
    with Session(engine) as _session:
        services.FleetService(_session).seed_demo_fleet(
            vehicles=settings.SEED_VEHICLES,
            cleaners_per_vehicle=settings.SEED_CLEANERS_PER_VEHICLE,
        )


@app.middleware("http")
async def request_context_middleware(request: Request, call_next):
    req_id = request.headers.get("X-Request-ID", uuid.uuid4().hex)
    request.state.request_id = req_id
    started = time.perf_counter()
    response: Response
    try:
        response = await call_next(request)
    except Exception:
        elapsed_ms = round((time.perf_counter() - started) * 1000.0, 2)
        logger.exception(
            "request_failed %s",
            json.dumps(
                {
                    "request_id": req_id,
                    "path": request.url.path,
                    "method": request.method,
                    "duration_ms": elapsed_ms,
                    "client": request.client.host if request.client else "unknown",
                },
                ensure_ascii=True,
            ),
        )
        raise
    response.headers["X-Request-ID"] = req_id
    elapsed_ms = round((time.perf_counter() - started) * 1000.0, 2)
    if request.url.path.startswith("/api"):
        logger.info(
            "request_done %s",
            json.dumps(
                {
                    "request_id": req_id,
                    "path": request.url.path,
                    "method": request.method,
                    "status_code": response.status_code,
                    "duration_ms": elapsed_ms,
                    "client": request.client.host if request.client else "unknown",
                },
                ensure_ascii=True,
            ),
        )
    return response


@app.exception_handler(BusinessError)
async def business_error_handler(request: Request, exc: BusinessError):
    logger.warning("business rule violated on %s: %s", request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(ResourceNotFoundError)
async def not_found_handler(request: Request, exc: ResourceNotFoundError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Report malformed payloads as 400 rather than FastAPI's default 422."""
    logger.warning("validation error on %s: %s", request.url.path, exc.errors())
    return JSONResponse(status_code=400, content={"detail": jsonable_encoder(exc.errors())})


@app.post('/api/bookings/availability', response_model=List[CleanerAvailability], tags=["Booking"],
          summary="Check availability")
def check_availability(payload: AvailabilityRequest, db: Session = Depends(get_session)):
    """Get available cleaners for a date, optionally for one start time and duration.

    Without `startTime` and `duration` the response lists every free
    2 and 4 hour slot per cleaner (`"08:00 (2h)"`). With both it lists
    the cleaners free for exactly that job (`"10:00 - 12:00"`).
    """
    return services.BookingService(db).check_availability(payload)


@app.post('/api/bookings', response_model=BookingResponse, status_code=201, tags=["Booking"],
          summary="Create Booking")
def create_booking(payload: BookingRequest, db: Session = Depends(get_session)):
    """Create a new cleaning appointment.

    Cleaners are picked from the first vehicle that has enough of them
    free, respecting working hours and the break between jobs.
    """
    return services.BookingService(db).create_booking(payload)


@app.put('/api/bookings/{booking_id}', response_model=BookingResponse, tags=["Booking"],
         summary="Update Booking")
def update_booking(booking_id: int, payload: BookingUpdateRequest, db: Session = Depends(get_session)):
    """Update date/time of an existing booking, keeping its cleaners."""
    return services.BookingService(db).update_booking(booking_id, payload)


@app.get('/api/bookings/{booking_id}', response_model=BookingResponse, tags=["Booking"],
         summary="Get Booking")
def get_booking(booking_id: int, db: Session = Depends(get_session)):
    return services.BookingService(db).get_booking(booking_id)


@app.get("/")
def home():
    """Send browsers to the Swagger UI."""
    return RedirectResponse(url="/docs")


@app.get("/health")
def health():
    """Lightweight health check for uptime monitoring."""
    return {"status": "ok"}
