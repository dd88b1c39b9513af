from datetime import datetime

from fastapi.testclient import TestClient
from sqlmodel import Session

from cleaning import models, repositories
from cleaning.database import engine
from cleaning.main import app

client = TestClient(app)

THURSDAY = "2023-11-23"
FRIDAY = "2023-11-24"


def _create(**overrides):
    payload = {"date": THURSDAY, "startTime": "10:00", "duration": 2, "cleanerCount": 1, "customerName": "John Doe"}
    payload.update(overrides)
    return client.post('/api/bookings', json=payload)


def test_availability_for_specific_time(fleet):
    r = client.post('/api/bookings/availability', json={"date": THURSDAY, "startTime": "10:00", "duration": 2})
    assert r.status_code == 200
    data = r.json()
    assert len(data) == 2
    assert data[0]["availableTimeSlots"] == ["10:00 - 12:00"]
    assert data[0]["cleanerId"] and data[0]["vehicleId"] == fleet.id
    assert data[0]["name"] == "Cleaner 1"


def test_availability_lists_day_slots(fleet):
    r = client.post('/api/bookings/availability', json={"date": THURSDAY})
    assert r.status_code == 200
    assert r.json()[0]["availableTimeSlots"][0] == "08:00 (2h)"


def test_availability_on_friday_is_bad_request(fleet):
    r = client.post('/api/bookings/availability', json={"date": FRIDAY, "startTime": "10:00", "duration": 2})
    assert r.status_code == 400
    assert r.json()["detail"] == "We do not work on Fridays."


def test_create_booking(fleet):
    r = _create(cleanerCount=2)
    assert r.status_code == 201
    body = r.json()
    assert isinstance(body["id"], int)
    assert body["customerName"] == "John Doe"
    assert body["durationHours"] == 2
    assert body["startDateTime"] == "2023-11-23T10:00:00"
    assert body["endDateTime"] == "2023-11-23T12:00:00"
    assert len(body["cleanerNames"]) == 2

    with Session(engine) as s:
        stored = repositories.BookingRepository(s).list_all()
        assert len(stored) == 1
        assert stored[0].customer_name == "John Doe"
        assert len(stored[0].cleaners) == 2


def test_create_accepts_snake_case_fields(fleet):
    r = client.post('/api/bookings', json={
        "date": THURSDAY, "start_time": "14:00", "duration": 4, "cleaner_count": 1, "customer_name": "Snake",
    })
    assert r.status_code == 201
    assert r.json()["endDateTime"] == "2023-11-23T18:00:00"


def test_create_when_no_cleaners_available(fleet, session):
    session.add(models.Booking(
        start_date_time=datetime(2023, 11, 23, 10, 0),
        end_date_time=datetime(2023, 11, 23, 12, 0),
        duration_hours=2,
        customer_name="Conflict Holder",
        cleaners=list(fleet.cleaners),
    ))
    session.commit()
    r = _create(customerName="Rejected Customer")
    assert r.status_code == 400
    assert "No available cleaners" in r.json()["detail"]


def test_create_rejects_business_rule_violation(fleet):
    r = _create(startTime="07:00")
    assert r.status_code == 400
    assert r.json()["detail"] == "Cannot start before 08:00"


def test_create_rejects_too_many_cleaners(fleet):
    r = _create(cleanerCount=4)
    assert r.status_code == 400
    assert isinstance(r.json()["detail"], list)


def test_create_requires_customer_name(fleet):
    payload = {"date": THURSDAY, "startTime": "10:00", "duration": 2, "cleanerCount": 1}
    r = client.post('/api/bookings', json=payload)
    assert r.status_code == 400


def test_update_booking(fleet):
    created = _create(customerName="To Update").json()
    r = client.put(f"/api/bookings/{created['id']}", json={"date": THURSDAY, "startTime": "14:00"})
    assert r.status_code == 200
    assert r.json()["id"] == created["id"]

    fetched = client.get(f"/api/bookings/{created['id']}")
    assert fetched.status_code == 200
    assert fetched.json()["startDateTime"] == "2023-11-23T14:00:00"
    with Session(engine) as s:
        stored = repositories.BookingRepository(s).get(created["id"])
        assert stored.start_date_time == datetime(2023, 11, 23, 14, 0)


def test_update_unknown_booking_is_not_found():
    r = client.put('/api/bookings/99999', json={"date": THURSDAY, "startTime": "12:00"})
    assert r.status_code == 404
    assert r.json()["detail"] == "Booking not found"


def test_get_unknown_booking_is_not_found():
    assert client.get('/api/bookings/12345').status_code == 404


def test_request_id_header():
    r = client.get('/health')
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}
    assert "X-Request-ID" in r.headers
    echoed = client.get('/health', headers={"X-Request-ID": "abc123"})
    assert echoed.headers["X-Request-ID"] == "abc123"


def test_openapi_document():
    r = client.get('/openapi.json')
    assert r.status_code == 200
    doc = r.json()
    assert doc["info"]["title"] == "Cleaning Service API"
    assert doc["info"]["version"] == "1.0.0"
    assert "/api/bookings/availability" in doc["paths"]


def test_create_rejects_start_time_with_offset(fleet):
    r = _create(startTime="10:00Z")
    assert r.status_code == 400
    assert isinstance(r.json()["detail"], list)


def test_availability_rejects_start_time_with_offset(fleet):
    r = client.post('/api/bookings/availability', json={"date": THURSDAY, "startTime": "10:00+04:00", "duration": 2})
    assert r.status_code == 400


def test_update_rejects_start_time_with_offset(fleet):
    created = _create().json()
    r = client.put(f"/api/bookings/{created['id']}", json={"date": THURSDAY, "startTime": "14:00Z"})
    assert r.status_code == 400


def test_availability_last_two_hour_slot(fleet):
    last = client.post('/api/bookings/availability', json={"date": THURSDAY, "startTime": "20:00", "duration": 2})
    assert last.status_code == 200
    assert last.json()[0]["availableTimeSlots"] == ["20:00 - 22:00"]
    too_late = client.post('/api/bookings/availability', json={"date": THURSDAY, "startTime": "20:30", "duration": 2})
    assert too_late.status_code == 200
    assert too_late.json() == []


def test_create_rejects_last_calendar_day(fleet):
    r = _create(date="9999-12-31", startTime="21:00")
    assert r.status_code == 400
    assert isinstance(r.json()["detail"], list)
