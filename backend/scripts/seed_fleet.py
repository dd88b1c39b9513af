"""CLI script to seed the demo fleet (vehicles and cleaners) into the backend DB.
Usage: python scripts/seed_fleet.py [--vehicles N] [--cleaners-per-vehicle N]
"""
import sys
import argparse
import pathlib
# Ensure `backend/` is on sys.path so `cleaning` package imports work when running this script directly
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))
from sqlmodel import Session
from cleaning.config import settings
from cleaning.database import engine, create_db_and_tables
from cleaning import services


def main(vehicles: int, cleaners_per_vehicle: int):
    """Create tables if needed and seed the fleet unless one already exists.

    Results are printed to stdout for a quick CLI feedback loop.
    """
    create_db_and_tables()
    with Session(engine) as session:
        created = services.FleetService(session).seed_demo_fleet(
            vehicles=vehicles, cleaners_per_vehicle=cleaners_per_vehicle,
        )
    if created:
        print(f'Seeded {created} vehicles with {cleaners_per_vehicle} cleaners each into {settings.DATABASE_URL}')
    else:
        print(f'Fleet already present in {settings.DATABASE_URL}; nothing to do')


if __name__ == '__main__':
    parser = argparse.ArgumentParser()
    parser.add_argument('--vehicles', type=int, default=settings.SEED_VEHICLES, help='Number of vehicles to create')
    parser.add_argument('--cleaners-per-vehicle', type=int, default=settings.SEED_CLEANERS_PER_VEHICLE,
                        help='Number of cleaners per vehicle')
    args = parser.parse_args()
    if args.vehicles < 1 or args.cleaners_per_vehicle < 1:
        parser.error('counts must be positive')
    main(args.vehicles, args.cleaners_per_vehicle)
