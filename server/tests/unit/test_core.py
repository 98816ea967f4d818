"""Tests for settings, engine options and problem documents."""

import pytest
from pydantic import ValidationError as SettingsError
from sqlalchemy.pool import StaticPool

from tour_coordinator.core.config import Settings
from tour_coordinator.core.database import engine_options
from tour_coordinator.core.exceptions import (
    ConcurrentUpdateError,
    InternalServerError,
    InvalidTransitionError,
    NotFoundError,
    StaffUnavailableError,
    problem_type,
)


def test_in_memory_sqlite_shares_one_connection():
    options = engine_options(Settings(database_url="sqlite+aiosqlite:///:memory:"))

    assert options["poolclass"] is StaticPool
    assert options["connect_args"] == {"check_same_thread": False}
    assert "pool_size" not in options


def test_file_sqlite_uses_default_pool():
    options = engine_options(Settings(database_url="sqlite+aiosqlite:///./tours.db"))

    assert "poolclass" not in options
    assert "pool_size" not in options


def test_server_database_gets_sized_pool():
    options = engine_options(Settings(
        database_url="postgresql+asyncpg://u:p@db/tours",
        db_pool_size=8,
        db_max_overflow=2,
    ))

    assert options["pool_size"] == 8
    assert options["max_overflow"] == 2


def test_settings_normalise_environment_and_origins():
    config = Settings(environment="STAGING", log_level="debug", cors_origins="http://a.test, http://b.test,")

    assert config.environment == "staging"
    assert config.log_level == "DEBUG"
    assert config.cors_origins == ["http://a.test", "http://b.test"]
    assert not config.debug


def test_settings_reject_unknown_environment():
    with pytest.raises(SettingsError):
        Settings(environment="qa")


def test_domain_conflicts_carry_code_and_type():
    exc = StaffUnavailableError("abc", "tourGuide", "already assigned to another tour")

    assert exc.status_code == 409
    assert exc.problem_details["type"] == problem_type("staff-unavailable")
    assert exc.problem_details["code"] == "STAFF_UNAVAILABLE"
    assert exc.problem_details["retryable"] is False
    assert exc.problem_details["conflicting_resource"] == {"staff_id": "abc", "role": "tourGuide"}



def test_concurrent_update_is_retryable():
    exc = ConcurrentUpdateError()

    assert exc.status_code == 409
    assert exc.problem_details["type"] == problem_type("concurrent-update")
    assert exc.problem_details["code"] == "CONCURRENT_UPDATE"
    assert exc.problem_details["retryable"] is True

def test_invalid_transition_names_both_statuses():
    exc = InvalidTransitionError("t-1", "Ended", "Started")

    assert exc.problem_details["detail"] == "Tour t-1 cannot move from Ended to Started"
    assert exc.problem_details["conflicting_resource"]["requested_status"] == "Started"


def test_not_found_describes_resource():
    exc = NotFoundError(resource_type="safari driver", resource_id="d-9")

    assert exc.problem_details["detail"] == "The requested safari driver 'd-9' could not be found"
    assert exc.problem_details["resource_id"] == "d-9"


def test_internal_error_reference_matches_body():
    exc = InternalServerError()

    assert exc.problem_details["error_id"] == exc.error_id
    assert exc.problem_details["timestamp"].endswith("Z")
