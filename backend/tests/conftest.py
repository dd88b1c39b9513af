import os

# Must be set before `cleaning` is imported anywhere.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SEED_DEMO_DATA"] = "false"

import pytest
from sqlmodel import SQLModel, Session

from cleaning import models
from cleaning.database import engine


@pytest.fixture(autouse=True)
def reset_db():
    """Give every test a fresh in-memory database."""
    SQLModel.metadata.drop_all(engine)
    SQLModel.metadata.create_all(engine)
    yield


@pytest.fixture
def session():
    with Session(engine) as s:
        yield s


@pytest.fixture
def fleet(session):
    """One vehicle `TEST-001` carrying `Cleaner 1` and `Cleaner 2`."""
    vehicle = models.Vehicle(
        licence_plate="TEST-001",
        cleaners=[models.Cleaner(name="Cleaner 1"), models.Cleaner(name="Cleaner 2")],
    )
    session.add(vehicle)
    session.commit()
    session.refresh(vehicle)
    return vehicle
