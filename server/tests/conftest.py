"""Test configuration and fixtures."""

import os
from datetime import date, timedelta
from uuid import uuid4

# Point the application engine at SQLite before the package is imported
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import jwt
import pytest
import pytest_asyncio
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from tour_coordinator.core.config import settings
from tour_coordinator.core.database import Base, get_db
from tour_coordinator.models import *  # noqa: F403 - Import all models
from tour_coordinator.models.staff import StaffRole
from tour_coordinator.schemas.staff import RegisterStaffRequest
from tour_coordinator.services.staff_service import StaffService

# Test database URL (in-memory SQLite for speed)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


def make_token(role: str, user_id: str | None = None) -> str:
    """Issue a bearer token signed with the configured secret."""
    payload = {"sub": user_id or str(uuid4()), "role": role, "email": f"{role}@example.com"}
    return jwt.encode(payload, settings.bearer_token_secret, algorithm=settings.jwt_algorithm)


def _auth_headers(role: str, user_id: str | None = None) -> dict:
    return {"Authorization": f"Bearer {make_token(role, user_id)}"}


@pytest.fixture
def auth_headers():
    """Build Authorization headers for a role, optionally for a specific staff ID."""
    return _auth_headers


@pytest_asyncio.fixture(scope="function")
async def test_engine():
    """Create a test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    # Create tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    # Drop tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def test_session(test_engine):
    """Create a test database session."""
    async_session = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

    async with async_session() as session:
        yield session


@pytest_asyncio.fixture(scope="function")
async def test_app(test_session):
    """Create a test FastAPI application."""
    from fastapi import FastAPI
    from fastapi.exceptions import RequestValidationError

    from tour_coordinator.core.exceptions import (
        ProblemDetailsException,
        generic_exception_handler,
        problem_details_handler,
        request_validation_handler,
    )
    from tour_coordinator.core.middleware import setup_middleware
    from tour_coordinator.routers import health, metrics, notification, rejection, staff, tour

    # Create a simplified test app without lifespan
    app = FastAPI(
        title="Wildlife Tour Coordinator API (Test)",
        description="Test version of the API",
        version="1.0.0-test",
    )

    setup_middleware(app, enable_logging=False)

    # Register exception handlers
    app.add_exception_handler(ProblemDetailsException, problem_details_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    # Register API routers
    app.include_router(health.router)
    app.include_router(tour.router)
    app.include_router(rejection.router)
    app.include_router(staff.router)
    app.include_router(notification.router)
    app.include_router(metrics.router)

    # Override database dependency
    async def override_get_db():
        yield test_session

    app.dependency_overrides[get_db] = override_get_db

    yield app

    # Clean up
    app.dependency_overrides.clear()


@pytest_asyncio.fixture(scope="function")
async def test_client(test_app):
    """Create a test HTTP client."""
    from httpx import ASGITransport
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def tour_date():
    """A tour date two weeks out."""
    return date.today() + timedelta(days=14)


@pytest.fixture
def sample_tour_data(tour_date):
    """Sample tour creation payload."""
    return {
        "booking_id": "BK-1001",
        "preferred_date": tour_date.isoformat(),
        "tour_notes": "Morning game drive, two children in the party"
    }


@pytest.fixture
def sample_guide_data():
    """Sample guide registration payload."""
    return {
        "role": "tourGuide",
        "first_name": "Amani",
        "last_name": "Perera",
        "email": "amani.perera@example.com",
        "phone": "+94 77 123 4567"
    }


async def _register(session, role: StaffRole, first_name: str, last_name: str):
    return await StaffService(session).register_staff(
        RegisterStaffRequest(
            role=role,
            first_name=first_name,
            last_name=last_name,
            email=f"{first_name.lower()}.{last_name.lower()}@example.com",
        )
    )


@pytest_asyncio.fixture
async def guide(test_session):
    """A registered, available tour guide."""
    return await _register(test_session, StaffRole.TOUR_GUIDE, "Nimal", "Silva")


@pytest_asyncio.fixture
async def second_guide(test_session):
    """Another registered, available tour guide."""
    return await _register(test_session, StaffRole.TOUR_GUIDE, "Kamala", "Fernando")


@pytest_asyncio.fixture
async def driver(test_session):
    """A registered, available safari driver."""
    return await _register(test_session, StaffRole.SAFARI_DRIVER, "Ruwan", "Jayasinghe")


@pytest_asyncio.fixture
async def second_driver(test_session):
    """Another registered, available safari driver."""
    return await _register(test_session, StaffRole.SAFARI_DRIVER, "Dilini", "Wickramasinghe")
