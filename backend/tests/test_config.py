import pytest

from cleaning.config import Settings


def test_defaults_are_valid(monkeypatch):
    monkeypatch.delenv("SEED_VEHICLES", raising=False)
    monkeypatch.delenv("SEED_CLEANERS_PER_VEHICLE", raising=False)
    s = Settings()
    assert s.SEED_VEHICLES == 5
    assert s.SEED_CLEANERS_PER_VEHICLE == 5
    assert s.in_memory_db


def test_non_integer_seed_count_is_rejected(monkeypatch):
    monkeypatch.setenv("SEED_VEHICLES", "five")
    with pytest.raises(RuntimeError, match="SEED_VEHICLES"):
        Settings()


@pytest.mark.parametrize("name", ["SEED_VEHICLES", "SEED_CLEANERS_PER_VEHICLE"])
def test_seed_counts_must_be_positive(monkeypatch, name):
    monkeypatch.setenv(name, "0")
    with pytest.raises(RuntimeError, match="positive"):
        Settings()


def test_in_memory_db_rejected_outside_dev(monkeypatch):
    monkeypatch.setenv("ENV", "prod")
    monkeypatch.setenv("DATABASE_URL", "sqlite://")
    monkeypatch.delenv("ALLOW_EPHEMERAL_DB", raising=False)
    with pytest.raises(RuntimeError, match="in-memory"):
        Settings()


def test_in_memory_db_allowed_outside_dev_when_opted_in(monkeypatch):
    monkeypatch.setenv("ENV", "prod")
    monkeypatch.setenv("DATABASE_URL", "sqlite://")
    monkeypatch.setenv("ALLOW_EPHEMERAL_DB", "true")
    assert Settings().ENV == "prod"
