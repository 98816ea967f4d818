#!/usr/bin/env python3
"""Setup script for the wildlife tour coordinator database."""

import asyncio
import logging
import sys
from pathlib import Path

# Add the server directory to the Python path
server_dir = Path(__file__).parent.parent / "server"
sys.path.insert(0, str(server_dir))

from alembic import command
from alembic.config import Config
from sqlalchemy import func, select

from tour_coordinator.core.database import async_session_factory, close_db
from tour_coordinator.models import StaffMember, StaffRole
from tour_coordinator.schemas.staff import RegisterStaffRequest
from tour_coordinator.services.staff_service import StaffService

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

SAMPLE_STAFF = [
    (StaffRole.TOUR_GUIDE, "Nimal", "Silva", "nimal.silva@example.com"),
    (StaffRole.TOUR_GUIDE, "Kamala", "Fernando", "kamala.fernando@example.com"),
    (StaffRole.SAFARI_DRIVER, "Ruwan", "Jayasinghe", "ruwan.jayasinghe@example.com"),
    (StaffRole.SAFARI_DRIVER, "Dilini", "Wickramasinghe", "dilini.w@example.com"),
]


def run_migrations():
    """Apply Alembic migrations up to head."""
    logger.info("Running database migrations...")
    alembic_cfg = Config(str(server_dir / "db" / "alembic.ini"))
    alembic_cfg.set_main_option("script_location", str(server_dir / "db" / "alembic"))
    command.upgrade(alembic_cfg, "head")
    logger.info("Database migrations completed")


async def create_sample_staff():
    """Register a few guides and drivers when the staff table is empty."""
    logger.info("Creating sample staff...")

    async with async_session_factory() as db:
        existing = await db.execute(select(func.count()).select_from(StaffMember))
        if existing.scalar_one() > 0:
            logger.info("Staff already registered, skipping...")
            return

        staff_service = StaffService(db)
        for role, first_name, last_name, email in SAMPLE_STAFF:
            await staff_service.register_staff(
                RegisterStaffRequest(role=role, first_name=first_name, last_name=last_name, email=email)
            )

    logger.info("Sample staff created successfully!")


async def main():
    """Main setup function."""
    logger.info("Starting wildlife tour coordinator setup...")

    # Alembic's async env runs its own event loop
    await asyncio.to_thread(run_migrations)

    await create_sample_staff()
    await close_db()

    logger.info("Setup completed successfully!")
    logger.info("You can now start the API server with: cd server && uvicorn tour_coordinator.main:app --reload")


if __name__ == "__main__":
    asyncio.run(main())
