"""Staff service: registration, availability lookups and availability writes."""

import logging
from datetime import date
from typing import Optional
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import unit_of_work
from ..core.exceptions import ConflictError, NotFoundError, StaffUnavailableError, ValidationError
from ..core.observability import metrics_collector
from ..models.staff import GuideTourStatus, StaffAvailability, StaffMember, StaffRole
from ..models.tour import Tour
from ..schemas.staff import RegisterStaffRequest

logger = logging.getLogger(__name__)

ROLE_LABELS = {
    StaffRole.TOUR_GUIDE: "tour guide",
    StaffRole.SAFARI_DRIVER: "safari driver",
}


class StaffService:
    """Service for staff-related operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def register_staff(self, request: RegisterStaffRequest) -> StaffMember:
        """
        Register a new tour guide or safari driver.

        Args:
            request: Staff registration request

        Returns:
            Created staff member

        Raises:
            ConflictError: If a staff member with the same email exists
        """
        email = request.email.lower()
        existing = await self.get_staff_by_email(email)
        if existing:
            logger.warning(
                "Staff registration failed - email already registered",
                extra={"email": email, "existing_staff_id": str(existing.id)}
            )
            raise ConflictError(
                detail=f"Staff member with email '{email}' already exists",
                conflicting_resource={"id": str(existing.id), "email": email}
            )

        staff = StaffMember(
            role=request.role,
            first_name=request.first_name,
            last_name=request.last_name,
            email=email,
            phone=request.phone,
            availability=StaffAvailability.AVAILABLE,
            current_tour_status=GuideTourStatus.AVAILABLE if request.role == StaffRole.TOUR_GUIDE else None,
            daily_availability={},
        )

        try:
            self.db.add(staff)
            await self.db.commit()
            await self.db.refresh(staff)
        except IntegrityError as e:
            await self.db.rollback()
            logger.error(
                "Staff registration failed due to integrity constraint",
                extra={"email": email, "error": str(e)}
            )
            raise ConflictError(detail=f"Staff member with email '{email}' already exists") from e

        logger.info(
            "Staff member registered",
            extra={"staff_id": str(staff.id), "role": staff.role_name, "email": email}
        )
        return staff

    async def get_staff_by_id(self, staff_id: UUID) -> Optional[StaffMember]:
        """Get staff member by ID."""
        stmt = select(StaffMember).where(StaffMember.id == staff_id)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_staff_by_email(self, email: str) -> Optional[StaffMember]:
        """Get staff member by email."""
        stmt = select(StaffMember).where(StaffMember.email == email.lower())
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_staff_by_id_or_raise(self, staff_id: UUID, resource_type: str = "staff member") -> StaffMember:
        """Get staff member by ID or raise NotFoundError."""
        staff = await self.get_staff_by_id(staff_id)
        if not staff:
            logger.warning(
                "Staff member not found",
                extra={"staff_id": str(staff_id), "resource_type": resource_type}
            )
            raise NotFoundError(resource_type=resource_type, resource_id=str(staff_id))
        return staff

    async def get_staff_with_role_or_raise(self, staff_id: UUID, role: StaffRole) -> StaffMember:
        """
        Get a staff member and check they hold ``role``.

        Raises:
            NotFoundError: If the staff member does not exist
            ValidationError: If the staff member has a different role
        """
        label = ROLE_LABELS[role]
        staff = await self.get_staff_by_id_or_raise(staff_id, resource_type=label)
        if staff.role != role:
            raise ValidationError(
                detail=f"Assigned user {staff_id} is not a {label}",
                errors={"staff_id": str(staff_id), "expected_role": role.value, "actual_role": staff.role_name}
            )
        return staff

    async def search_available_staff(self, role: StaffRole, on: Optional[date] = None) -> list[StaffMember]:
        """
        List staff of ``role`` who can take a tour.

        Args:
            role: Role to search
            on: Only include members without an unavailable override on this day

        Returns:
            Available staff members ordered by name
        """
        stmt = (
            select(StaffMember)
            .where(
                StaffMember.role == role,
                StaffMember.availability == StaffAvailability.AVAILABLE,
            )
            .order_by(StaffMember.last_name, StaffMember.first_name)
        )
        result = await self.db.execute(stmt)
        staff = list(result.scalars())

        if on is not None:
            staff = [member for member in staff if member.is_available_for_date(on)]

        return staff

    async def set_daily_availability(self, staff_id: UUID, on: date, is_available: bool) -> StaffMember:
        """
        Record an administrative per-date availability override.

        The write bumps the member's version, so a claim based on an
        earlier read of the member fails.

        Raises:
            NotFoundError: If the staff member does not exist
            ConcurrentUpdateError: If the member changed since it was read
        """
        staff = await self.get_staff_by_id_or_raise(staff_id)

        async with unit_of_work(self.db):
            staff.set_availability_for_date(on, is_available)

        await self.db.refresh(staff)

        logger.info(
            "Daily availability override recorded",
            extra={"staff_id": str(staff_id), "date": on.isoformat(), "is_available": is_available}
        )
        return staff

    def check_assignable(self, staff: StaffMember, on: date) -> None:
        """
        Check a staff member can be newly assigned to a tour on ``on``.

        Raises:
            StaffUnavailableError: If the member is busy or blocked that day
        """
        if staff.availability != StaffAvailability.AVAILABLE:
            metrics_collector.record_assignment_conflict(staff.role_name)
            raise StaffUnavailableError(str(staff.id), staff.role_name, "already assigned to another tour")

        if not staff.is_available_for_date(on):
            metrics_collector.record_assignment_conflict(staff.role_name)
            raise StaffUnavailableError(str(staff.id), staff.role_name, f"not available on {on.isoformat()}")

    async def claim(self, staff: StaffMember) -> None:
        """
        Mark a staff member Busy with a conditional update.

        The update only applies while the row is still Available at the
        version this session read, so two requests racing for the same
        member cannot both succeed. Does not commit.

        Raises:
            StaffUnavailableError: If the row changed since it was read
        """
        values = {"availability": StaffAvailability.BUSY.value}
        if staff.role == StaffRole.TOUR_GUIDE:
            values["current_tour_status"] = GuideTourStatus.PROCESSING.value

        stmt = (
            update(StaffMember)
            .where(
                StaffMember.id == staff.id,
                StaffMember.availability == StaffAvailability.AVAILABLE.value,
                StaffMember.version == staff.version,
            )
            .values(version=StaffMember.version + 1, **values)
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)

        if result.rowcount != 1:
            logger.warning(
                "Conditional availability update lost a race",
                extra={"staff_id": str(staff.id), "seen_version": staff.version}
            )
            metrics_collector.record_assignment_conflict(staff.role_name)
            raise StaffUnavailableError(str(staff.id), staff.role_name, "changed by another request since it was read")

        await self.db.refresh(staff)
        metrics_collector.record_staff_assigned(staff.role_name)

    def release(self, staff: StaffMember, tour: Tour, reason: str) -> bool:
        """
        Return a staff member held by ``tour`` to Available.

        Also records the tour date as available again in the member's
        per-date overrides. Does not commit; the flush checks and bumps
        the member's version, so a release based on a stale read fails
        with ``ConcurrentUpdateError`` instead of undoing a newer claim.

        Args:
            staff: Member to release
            tour: Tour that held the member
            reason: Label for metrics and logs (ended, rejected, ...)

        Returns:
            True if anything changed, False if the member was already free
        """
        already_free = staff.availability == StaffAvailability.AVAILABLE and (
            staff.role != StaffRole.TOUR_GUIDE
            or staff.current_tour_status in (None, GuideTourStatus.AVAILABLE)
        )
        if already_free:
            return False

        staff.availability = StaffAvailability.AVAILABLE
        if staff.role == StaffRole.TOUR_GUIDE:
            staff.current_tour_status = GuideTourStatus.AVAILABLE
        staff.set_availability_for_date(tour.preferred_date, True, tour.id)

        metrics_collector.record_staff_released(reason)
        logger.info(
            "Staff member released",
            extra={
                "staff_id": str(staff.id),
                "role": staff.role_name,
                "tour_id": str(tour.id),
                "reason": reason,
            }
        )
        return True
