"""Application settings and validation."""

import os
from pathlib import Path

BASE = Path(__file__).resolve().parent.parent
IN_MEMORY_DB_URL = "sqlite://"


def _int_env(name: str, default: str) -> int:
    raw = os.getenv(name, default)
    try:
        return int(raw)
    except ValueError:
        raise RuntimeError(f"{name} must be an integer, got {raw!r}")


class Settings:
    ENV: str
    DATABASE_URL: str
    SQL_ECHO: bool
    SEED_DEMO_DATA: bool
    SEED_VEHICLES: int
    SEED_CLEANERS_PER_VEHICLE: int
    ALLOW_DEV_CORS: bool
    ALLOW_EPHEMERAL_DB: bool
    LOG_LEVEL: str

    def __init__(self):
        self.ENV = os.getenv("ENV", "dev").lower()
        self.DATABASE_URL = os.getenv("DATABASE_URL", f"sqlite:///{BASE / 'cleaning.db'}")
        self.SQL_ECHO = os.getenv("SQL_ECHO", "false").lower() == "true"
        self.SEED_DEMO_DATA = os.getenv("SEED_DEMO_DATA", "true").lower() == "true"
        self.SEED_VEHICLES = _int_env("SEED_VEHICLES", "5")
        self.SEED_CLEANERS_PER_VEHICLE = _int_env("SEED_CLEANERS_PER_VEHICLE", "5")
        self.ALLOW_DEV_CORS = os.getenv("ALLOW_DEV_CORS", "true").lower() == "true"
        self.ALLOW_EPHEMERAL_DB = os.getenv("ALLOW_EPHEMERAL_DB", "false").lower() == "true"
        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
        self._validate()

    @property
    def in_memory_db(self) -> bool:
        return self.DATABASE_URL in (IN_MEMORY_DB_URL, "sqlite:///:memory:")

    def _validate(self):
        if self.SEED_VEHICLES < 1 or self.SEED_CLEANERS_PER_VEHICLE < 1:
            raise RuntimeError("SEED_VEHICLES and SEED_CLEANERS_PER_VEHICLE must be positive")
        if self.ENV != "dev" and self.in_memory_db and not self.ALLOW_EPHEMERAL_DB:
            raise RuntimeError("an in-memory DATABASE_URL is only allowed in dev unless ALLOW_EPHEMERAL_DB=true")


settings = Settings()
