#!/usr/bin/env python3
"""Create the schema and load sample accounts and flights for local use."""

import asyncio
import logging
import sys
from datetime import datetime, timedelta
from pathlib import Path

# Add the server directory to the Python path
server_dir = Path(__file__).parent.parent / "server"
sys.path.insert(0, str(server_dir))

from sqlalchemy import func, select

from airline.core.database import async_session_factory, close_db, init_db
from airline.core.security import hash_password
from airline.models import Flight, User, UserRole

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

SAMPLE_USERS = [
    ("manager", "manager123", UserRole.MANAGER, "manager@airline.example"),
    ("traveller", "traveller123", UserRole.USER, "traveller@airline.example"),
]

SAMPLE_ROUTES = [
    ("FL001", "Lisbon", "London", 155.0),
    ("FL002", "London", "Paris", 89.5),
    ("FL003", "Paris", "Rome", 120.0),
    ("FL104", "Rome", "Athens", 99.9),
    ("FL215", "Athens", "Lisbon", 210.0),
]


async def create_sample_data():
    """Insert sample data unless the flights table already has rows."""
    logger.info("Creating sample data...")

    async with async_session_factory() as db:
        existing = await db.scalar(select(func.count()).select_from(Flight))
        if existing:
            logger.info("Sample data already exists, skipping...")
            return

        for username, password, role, email in SAMPLE_USERS:
            db.add(User(
                username=username,
                password=hash_password(password),
                role=role.value,
                email=email,
            ))

        base_date = datetime.now().replace(minute=0, second=0, microsecond=0) + timedelta(days=7)
        for i, (number, departure, destination, price) in enumerate(SAMPLE_ROUTES):
            departs = base_date + timedelta(days=i, hours=i * 2)
            db.add(Flight(
                flight_number=number,
                departure=departure,
                destination=destination,
                departure_time=departs,
                arrival_time=departs + timedelta(hours=2, minutes=30),
                price=price,
            ))

        try:
            await db.commit()
        except Exception:
            await db.rollback()
            raise

    logger.info("Sample data created successfully!")


async def main():
    """Main setup function."""
    logger.info("Starting airline booking API setup...")

    await init_db()
    logger.info("Database schema created")

    try:
        await create_sample_data()
    finally:
        await close_db()

    logger.info("Setup completed successfully!")
    logger.info("You can now start the API server with: cd server && uvicorn airline.main:app --reload")


if __name__ == "__main__":
    asyncio.run(main())
