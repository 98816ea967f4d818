"""Staff router for guide and driver records."""

import logging
from datetime import date
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import get_db
from ..core.exceptions import InternalServerError, ProblemDetailsException
from ..models.staff import StaffRole
from ..schemas.common import Problem
from ..schemas.staff import DailyAvailabilityRequest, RegisterStaffRequest, Staff
from ..services.staff_service import StaffService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/staff", tags=["staff"])

DB_DEPENDENCY = Depends(get_db)
PROBLEM_RESPONSES = {code: {"model": Problem} for code in (400, 404, 409)}


def _convert_staff_to_schema(staff_model) -> Staff:
    """Convert staff model to schema."""
    return Staff.model_validate(staff_model)


@router.post("/create", response_model=Staff, status_code=201, responses=PROBLEM_RESPONSES)
async def register_staff(
    request: RegisterStaffRequest,
    db: AsyncSession = DB_DEPENDENCY
) -> JSONResponse:
    """Register a tour guide or safari driver."""
    staff_service = StaffService(db)

    try:
        staff = await staff_service.register_staff(request)
        return JSONResponse(
            status_code=201,
            content=_convert_staff_to_schema(staff).model_dump(mode="json")
        )

    except ProblemDetailsException:
        raise

    except Exception as e:
        error = InternalServerError()
        logger.error(
            "Unexpected error registering staff member",
            extra={"role": request.role.value, "error_id": error.error_id, "error": str(e)},
            exc_info=True
        )
        raise error from e


@router.get("/available", response_model=list[Staff])
async def search_available_staff(
    role: StaffRole,
    on: Optional[date] = None,
    db: AsyncSession = DB_DEPENDENCY
) -> JSONResponse:
    """
    List staff of a role who can be assigned.

    With ``on``, members blocked on that day are left out.
    """
    staff = await StaffService(db).search_available_staff(role, on)
    return JSONResponse(
        status_code=200,
        content=[_convert_staff_to_schema(member).model_dump(mode="json") for member in staff]
    )


@router.get("/{staff_id}", response_model=Staff)
async def get_staff(staff_id: UUID, db: AsyncSession = DB_DEPENDENCY) -> JSONResponse:
    """Get a staff member by ID."""
    staff = await StaffService(db).get_staff_by_id_or_raise(staff_id)
    return JSONResponse(
        status_code=200,
        content=_convert_staff_to_schema(staff).model_dump(mode="json")
    )


@router.put("/{staff_id}/daily-availability", response_model=Staff, responses=PROBLEM_RESPONSES)
async def set_daily_availability(
    staff_id: UUID,
    request: DailyAvailabilityRequest,
    db: AsyncSession = DB_DEPENDENCY
) -> JSONResponse:
    """Record a per-date availability override for a staff member."""
    staff_service = StaffService(db)

    try:
        staff = await staff_service.set_daily_availability(staff_id, request.day, request.is_available)
        return JSONResponse(
            status_code=200,
            content=_convert_staff_to_schema(staff).model_dump(mode="json")
        )

    except ProblemDetailsException:
        raise

    except Exception as e:
        error = InternalServerError()
        logger.error(
            "Unexpected error recording daily availability",
            extra={
                "staff_id": str(staff_id),
                "day": request.day.isoformat(),
                "error_id": error.error_id,
                "error": str(e)
            },
            exc_info=True
        )
        raise error from e
