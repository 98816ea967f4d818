"""Tour service for tour record lookups and creation."""

import logging
from typing import Optional
from uuid import UUID

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError

from ..core.dependencies import ROLE_ADMIN, ROLE_SAFARI_DRIVER, ROLE_TOUR_GUIDE, ROLE_WILDLIFE_OFFICER
from ..core.exceptions import AuthorizationError, DuplicateTourError, NotFoundError, ValidationError
from ..models.tour import Tour, TourStatus
from ..schemas.tour import CreateTourRequest

logger = logging.getLogger(__name__)


class TourService:
    """Service for tour-related operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_tour(self, request: CreateTourRequest) -> Tour:
        """
        Create a new Pending tour for a booking.

        The tour is flushed but not committed so the caller can assign
        staff in the same transaction.

        Args:
            request: Tour creation request

        Returns:
            Created tour entity

        Raises:
            DuplicateTourError: If a tour already exists for the booking
        """
        # Check if a tour already exists for the booking
        existing_tour = await self.get_tour_by_booking_id(request.booking_id)
        if existing_tour:
            logger.warning(
                "Tour creation failed - booking already has a tour",
                extra={
                    "booking_id": request.booking_id,
                    "existing_tour_id": str(existing_tour.id)
                }
            )
            raise DuplicateTourError(request.booking_id, str(existing_tour.id))

        tour = Tour(
            booking_id=request.booking_id,
            preferred_date=request.preferred_date,
            status=TourStatus.PENDING,
            tour_notes=request.tour_notes,
        )

        try:
            self.db.add(tour)
            await self.db.flush()
        except IntegrityError as e:
            logger.error(
                "Tour creation failed due to integrity constraint",
                extra={
                    "booking_id": request.booking_id,
                    "error": str(e)
                }
            )
            raise DuplicateTourError(request.booking_id) from e

        logger.info(
            "Tour created",
            extra={
                "tour_id": str(tour.id),
                "booking_id": tour.booking_id,
                "preferred_date": tour.preferred_date.isoformat()
            }
        )
        return tour

    async def get_tour_by_id(self, tour_id: UUID) -> Optional[Tour]:
        """
        Get tour by ID.

        Args:
            tour_id: Tour ID to search for

        Returns:
            Tour if found, None otherwise
        """
        stmt = select(Tour).where(Tour.id == tour_id)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_tour_by_booking_id(self, booking_id: str) -> Optional[Tour]:
        """
        Get tour by booking ID.

        Args:
            booking_id: Booking ID to search for

        Returns:
            Tour if found, None otherwise
        """
        stmt = select(Tour).where(Tour.booking_id == booking_id)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_tour_by_id_or_raise(self, tour_id: UUID) -> Tour:
        """
        Get tour by ID or raise NotFoundError.

        Args:
            tour_id: Tour ID to search for

        Returns:
            Tour entity

        Raises:
            NotFoundError: If tour not found
        """
        tour = await self.get_tour_by_id(tour_id)
        if not tour:
            logger.warning(
                "Tour not found",
                extra={"tour_id": str(tour_id)}
            )
            raise NotFoundError(
                resource_type="tour",
                resource_id=str(tour_id)
            )
        return tour

    async def get_tour_by_booking_id_or_raise(self, booking_id: str) -> Tour:
        """Get tour by booking ID or raise NotFoundError."""
        tour = await self.get_tour_by_booking_id(booking_id)
        if not tour:
            logger.warning(
                "Tour not found for booking",
                extra={"booking_id": booking_id}
            )
            raise NotFoundError(
                resource_type="tour",
                detail=f"No tour exists for booking '{booking_id}'"
            )
        return tour

    async def list_tours(self) -> list[Tour]:
        """List all tours, newest first."""
        stmt = select(Tour).order_by(Tour.created_at.desc())
        result = await self.db.execute(stmt)
        return list(result.scalars())

    async def list_tours_by_guide(self, guide_id: UUID) -> list[Tour]:
        """List tours a guide is assigned to, by tour date."""
        stmt = (
            select(Tour)
            .where(Tour.assigned_tour_guide == guide_id)
            .order_by(Tour.preferred_date)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars())

    async def list_tours_by_driver(self, driver_id: UUID) -> list[Tour]:
        """List tours a driver is assigned to, by tour date."""
        stmt = (
            select(Tour)
            .where(Tour.assigned_driver == driver_id)
            .order_by(Tour.preferred_date)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars())

    async def list_tours_for_caller(self, user: dict) -> list[Tour]:
        """
        List the tours visible to an authenticated caller.

        Admins and wildlife officers see every tour; guides and drivers see
        the tours they are assigned to.

        Args:
            user: Caller identity from the bearer token

        Returns:
            Visible tours

        Raises:
            AuthorizationError: If the caller's role may not list tours
            ValidationError: If a staff caller's subject is not a UUID
        """
        role = user.get("role")
        if role in (ROLE_ADMIN, ROLE_WILDLIFE_OFFICER):
            return await self.list_tours()

        if role not in (ROLE_TOUR_GUIDE, ROLE_SAFARI_DRIVER):
            raise AuthorizationError(
                detail="Only staff and administrators may list tours",
                required_permissions=[ROLE_ADMIN, ROLE_WILDLIFE_OFFICER, ROLE_TOUR_GUIDE, ROLE_SAFARI_DRIVER]
            )

        try:
            staff_id = UUID(str(user.get("user_id")))
        except ValueError:
            raise ValidationError(detail="Token subject is not a valid staff ID")

        if role == ROLE_TOUR_GUIDE:
            return await self.list_tours_by_guide(staff_id)
        return await self.list_tours_by_driver(staff_id)

    async def list_tours_by_status(self, status: TourStatus) -> list[Tour]:
        """List tours currently in ``status``."""
        stmt = select(Tour).where(Tour.status == status).order_by(Tour.preferred_date)
        result = await self.db.execute(stmt)
        return list(result.scalars())

    async def get_held_staff_ids(self) -> set[UUID]:
        """IDs of staff still assigned to a tour that is not Ended or Rejected."""
        stmt = select(Tour.assigned_tour_guide, Tour.assigned_driver).where(
            Tour.status.not_in([TourStatus.ENDED, TourStatus.REJECTED]),
            or_(Tour.assigned_tour_guide.is_not(None), Tour.assigned_driver.is_not(None)),
        )
        result = await self.db.execute(stmt)

        held = set()
        for guide_id, driver_id in result:
            held.update(staff_id for staff_id in (guide_id, driver_id) if staff_id is not None)
        return held
