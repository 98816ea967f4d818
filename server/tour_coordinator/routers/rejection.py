"""Tour rejection router for guides turning down assignments."""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import get_db
from ..core.exceptions import InternalServerError, ProblemDetailsException
from ..schemas.common import Problem
from ..schemas.rejection import SubmitRejectionRequest, TourRejection
from ..services.lifecycle_service import TourLifecycleService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/tour-rejection", tags=["tour-rejection"])

DB_DEPENDENCY = Depends(get_db)
PROBLEM_RESPONSES = {code: {"model": Problem} for code in (400, 404, 409)}


@router.post("/submit", response_model=TourRejection, status_code=201, responses=PROBLEM_RESPONSES)
async def submit_rejection(
    request: SubmitRejectionRequest,
    db: AsyncSession = DB_DEPENDENCY
) -> JSONResponse:
    """
    Record a guide's rejection of their assigned tour.

    The tour returns to Pending without a guide and the guide becomes
    available again.
    """
    lifecycle = TourLifecycleService(db)

    try:
        rejection = await lifecycle.submit_rejection(request.tour_id, request.tour_guide_id, request.reason)
        response_data = TourRejection.model_validate(rejection)

        logger.info(
            "Tour rejection recorded",
            extra={
                "rejection_id": str(rejection.id),
                "tour_id": str(request.tour_id),
                "tour_guide_id": str(request.tour_guide_id)
            }
        )

        return JSONResponse(status_code=201, content=response_data.model_dump(mode="json"))

    except ProblemDetailsException:
        raise

    except Exception as e:
        error = InternalServerError()
        logger.error(
            "Unexpected error submitting tour rejection",
            extra={
                "tour_id": str(request.tour_id),
                "tour_guide_id": str(request.tour_guide_id),
                "error_id": error.error_id,
                "error": str(e)
            },
            exc_info=True
        )
        raise error from e
