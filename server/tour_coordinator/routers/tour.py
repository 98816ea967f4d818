"""Tour router for tour lifecycle operations."""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import get_db
from ..core.dependencies import ROLE_ADMIN, RequiredAuth, require_roles
from ..core.exceptions import InternalServerError, ProblemDetailsException
from ..schemas.common import Problem
from ..schemas.tour import (
    AssignTourRequest,
    CreateTourRequest,
    RejectTourRequest,
    ResetAvailabilityResponse,
    Tour,
    UpdateTourStatusRequest,
)
from ..services.lifecycle_service import TourLifecycleService
from ..services.tour_service import TourService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/tour", tags=["tour"])

# Define dependencies to avoid B008 linting errors
DB_DEPENDENCY = Depends(get_db)
ADMIN_DEPENDENCY = Depends(require_roles(ROLE_ADMIN))

# Error bodies are RFC 9457 problem documents
PROBLEM_RESPONSES = {code: {"model": Problem} for code in (400, 404, 409)}


def _convert_tour_to_schema(tour_model) -> Tour:
    """Convert tour model to schema."""
    return Tour.model_validate(tour_model)


def _tour_list_response(tours) -> JSONResponse:
    return JSONResponse(
        status_code=200,
        content=[_convert_tour_to_schema(tour).model_dump(mode="json") for tour in tours]
    )


def _internal_error(message: str, error: Exception, **context) -> InternalServerError:
    problem = InternalServerError()
    logger.error(message, extra={**context, "error_id": problem.error_id, "error": str(error)}, exc_info=True)
    return problem


@router.post("/create", response_model=Tour, status_code=201, responses=PROBLEM_RESPONSES)
async def create_tour(
    request: CreateTourRequest,
    db: AsyncSession = DB_DEPENDENCY
) -> JSONResponse:
    """
    Create the tour for a booking.

    Staff given in the request are assigned in the same transaction.
    """
    lifecycle = TourLifecycleService(db)

    try:
        tour = await lifecycle.create_tour(request)

        logger.info(
            "Tour created successfully",
            extra={
                "tour_id": str(tour.id),
                "booking_id": request.booking_id,
                "status": tour.status
            }
        )

        return JSONResponse(
            status_code=201,
            content=_convert_tour_to_schema(tour).model_dump(mode="json")
        )

    except ProblemDetailsException:
        raise

    except Exception as e:
        raise _internal_error("Unexpected error in tour creation", e, booking_id=request.booking_id) from e


@router.put("/assign", response_model=Tour, responses=PROBLEM_RESPONSES)
async def assign_tour(
    request: AssignTourRequest,
    db: AsyncSession = DB_DEPENDENCY
) -> JSONResponse:
    """Assign a guide and/or driver to the tour of a booking."""
    lifecycle = TourLifecycleService(db)

    try:
        tour = await lifecycle.assign_staff_by_booking(
            request.booking_id,
            guide_id=request.assigned_tour_guide,
            driver_id=request.assigned_driver,
        )
        return JSONResponse(
            status_code=200,
            content=_convert_tour_to_schema(tour).model_dump(mode="json")
        )

    except ProblemDetailsException:
        raise

    except Exception as e:
        raise _internal_error("Unexpected error in tour assignment", e, booking_id=request.booking_id) from e


@router.post("/reset-ended-availability", response_model=ResetAvailabilityResponse)
async def reset_ended_tours_availability(
    db: AsyncSession = DB_DEPENDENCY,
    user: dict = ADMIN_DEPENDENCY
) -> JSONResponse:
    """Release staff still marked Busy by tours that have Ended. Admin only."""
    lifecycle = TourLifecycleService(db)

    try:
        summary = await lifecycle.reset_ended_tours_availability()

        logger.info(
            "Availability reset requested",
            extra={
                "requested_by": user["user_id"],
                "ended_tours": summary.ended_tours,
                "reset_staff": summary.reset_staff
            }
        )

        return JSONResponse(status_code=200, content=summary.model_dump(mode="json"))

    except ProblemDetailsException:
        raise

    except Exception as e:
        raise _internal_error("Unexpected error in availability reset", e) from e


@router.get("", response_model=list[Tour])
async def list_tours(
    db: AsyncSession = DB_DEPENDENCY,
    user: dict = RequiredAuth
) -> JSONResponse:
    """
    List tours visible to the caller.

    Admins and wildlife officers see every tour; guides and drivers see
    their own assignments.
    """
    tour_service = TourService(db)

    try:
        tours = await tour_service.list_tours_for_caller(user)
        return _tour_list_response(tours)

    except ProblemDetailsException:
        raise

    except Exception as e:
        raise _internal_error("Unexpected error listing tours", e, role=user.get("role")) from e


@router.get("/guide/{guide_id}", response_model=list[Tour])
async def list_tours_by_guide(guide_id: UUID, db: AsyncSession = DB_DEPENDENCY) -> JSONResponse:
    """List tours assigned to a guide."""
    tours = await TourService(db).list_tours_by_guide(guide_id)
    return _tour_list_response(tours)


@router.get("/driver/{driver_id}", response_model=list[Tour])
async def list_tours_by_driver(driver_id: UUID, db: AsyncSession = DB_DEPENDENCY) -> JSONResponse:
    """List tours assigned to a driver."""
    tours = await TourService(db).list_tours_by_driver(driver_id)
    return _tour_list_response(tours)


@router.get("/{tour_id}", response_model=Tour)
async def get_tour(tour_id: UUID, db: AsyncSession = DB_DEPENDENCY) -> JSONResponse:
    """Get a tour by ID."""
    tour = await TourService(db).get_tour_by_id_or_raise(tour_id)
    return JSONResponse(
        status_code=200,
        content=_convert_tour_to_schema(tour).model_dump(mode="json")
    )


@router.put("/{tour_id}/accept", response_model=Tour, responses=PROBLEM_RESPONSES)
async def accept_tour(tour_id: UUID, db: AsyncSession = DB_DEPENDENCY) -> JSONResponse:
    """Record the assigned guide's acceptance."""
    lifecycle = TourLifecycleService(db)

    try:
        tour = await lifecycle.accept_tour(tour_id)
        return JSONResponse(
            status_code=200,
            content=_convert_tour_to_schema(tour).model_dump(mode="json")
        )

    except ProblemDetailsException:
        raise

    except Exception as e:
        raise _internal_error("Unexpected error accepting tour", e, tour_id=str(tour_id)) from e


@router.put("/{tour_id}/reject", response_model=Tour, responses=PROBLEM_RESPONSES)
async def reject_tour(
    tour_id: UUID,
    request: RejectTourRequest,
    db: AsyncSession = DB_DEPENDENCY
) -> JSONResponse:
    """Reject a tour and release its assignees."""
    lifecycle = TourLifecycleService(db)

    try:
        tour = await lifecycle.reject_tour(tour_id, request.reason)
        return JSONResponse(
            status_code=200,
            content=_convert_tour_to_schema(tour).model_dump(mode="json")
        )

    except ProblemDetailsException:
        raise

    except Exception as e:
        raise _internal_error("Unexpected error rejecting tour", e, tour_id=str(tour_id)) from e


@router.put("/{tour_id}/status", response_model=Tour, responses=PROBLEM_RESPONSES)
async def update_tour_status(
    tour_id: UUID,
    request: UpdateTourStatusRequest,
    db: AsyncSession = DB_DEPENDENCY
) -> JSONResponse:
    """Move a tour forward; Ended releases its assignees."""
    lifecycle = TourLifecycleService(db)

    try:
        tour = await lifecycle.update_status(tour_id, request.status)
        return JSONResponse(
            status_code=200,
            content=_convert_tour_to_schema(tour).model_dump(mode="json")
        )

    except ProblemDetailsException:
        raise

    except Exception as e:
        raise _internal_error(
            "Unexpected error updating tour status", e, tour_id=str(tour_id), status=request.status.value
        ) from e
