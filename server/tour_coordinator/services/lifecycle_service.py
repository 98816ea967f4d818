"""Tour lifecycle coordinator.

Creation, staff assignment, acceptance, rejection and status progression
of tours, keeping staff availability consistent with the tours that hold
them. Each public operation commits once; reads and validation happen
before any write so a failed call leaves nothing behind.
"""

import logging
from datetime import date
from typing import Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import unit_of_work
from ..core.exceptions import ConflictError, InvalidTransitionError, ValidationError
from ..core.observability import metrics_collector
from ..models.rejection import TourRejection
from ..models.staff import GuideTourStatus, StaffAvailability, StaffMember, StaffRole
from ..models.tour import Tour, TourStatus
from ..schemas.tour import CreateTourRequest, ReleasedStaff, ResetAvailabilityResponse
from .notification_service import NotificationService
from .staff_service import StaffService
from .tour_service import TourService

logger = logging.getLogger(__name__)

# Position of each status on the forward path; Accepted sits beside Confirmed
LIFECYCLE_ORDER = {
    TourStatus.PENDING: 0,
    TourStatus.CONFIRMED: 1,
    TourStatus.ACCEPTED: 1,
    TourStatus.PROCESSING: 2,
    TourStatus.STARTED: 3,
    TourStatus.ENDED: 4,
}

# Targets reachable through update_status; the rest have dedicated operations
PROGRESS_TARGETS = (TourStatus.PROCESSING, TourStatus.STARTED, TourStatus.ENDED)

ASSIGNABLE_STATUSES = (TourStatus.PENDING, TourStatus.CONFIRMED)
ACCEPTABLE_STATUSES = (TourStatus.PENDING, TourStatus.CONFIRMED)
GUIDE_REJECTABLE_STATUSES = (TourStatus.PENDING, TourStatus.CONFIRMED, TourStatus.ACCEPTED)
TERMINAL_STATUSES = (TourStatus.ENDED, TourStatus.REJECTED)


def can_transition(current: TourStatus, target: TourStatus) -> bool:
    """
    Whether ``update_status`` may move a tour from ``current`` to ``target``.

    Only forward moves from an assigned tour towards Ended are allowed.
    Pending tours must be assigned first.
    """
    current = TourStatus(current)
    target = TourStatus(target)
    if target not in PROGRESS_TARGETS:
        return False
    if current in TERMINAL_STATUSES or current == TourStatus.PENDING:
        return False
    return LIFECYCLE_ORDER[target] > LIFECYCLE_ORDER[current]


def _require_reason(reason: Optional[str]) -> str:
    if reason is None or not reason.strip():
        raise ValidationError(
            detail="A rejection reason is required",
            errors={"reason": "must not be blank"}
        )
    return reason.strip()


class TourLifecycleService:
    """Coordinates tour state with staff availability."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.tours = TourService(db)
        self.staff = StaffService(db)
        self.notifications = NotificationService(db)

    async def create_tour(self, request: CreateTourRequest, today: Optional[date] = None) -> Tour:
        """
        Create a tour for a booking, optionally assigning staff at once.

        Args:
            request: Tour creation request
            today: Reference date for the past-date check

        Returns:
            The created tour (Pending, or Confirmed when staff were given)

        Raises:
            ValidationError: If the date is in the past or a member has the wrong role
            DuplicateTourError: If the booking already has a tour
            NotFoundError: If a given staff member does not exist
            StaffUnavailableError: If a given staff member cannot take the tour
            ConcurrentUpdateError: If a tour or staff member changed since it was read
        """
        today = today or date.today()
        if request.preferred_date < today:
            raise ValidationError(
                detail="Tour date cannot be in the past",
                errors={"preferred_date": request.preferred_date.isoformat()}
            )

        guide = driver = None
        if request.assigned_tour_guide is not None:
            guide = await self._resolve_assignee(
                request.assigned_tour_guide, StaffRole.TOUR_GUIDE, request.preferred_date
            )
        if request.assigned_driver is not None:
            driver = await self._resolve_assignee(
                request.assigned_driver, StaffRole.SAFARI_DRIVER, request.preferred_date
            )

        async with unit_of_work(self.db):
            tour = await self.tours.create_tour(request)
            if guide or driver:
                await self._apply_assignment(tour, guide, driver)

        await self.db.refresh(tour)
        metrics_collector.record_tour_created()
        return tour

    async def assign_staff(
        self,
        tour_id: UUID,
        guide_id: Optional[UUID] = None,
        driver_id: Optional[UUID] = None,
    ) -> Tour:
        """
        Assign a guide and/or driver to a tour and confirm it.

        Omitted roles keep their current assignee. Re-assigning the member
        already in a slot changes nothing for that slot.

        Raises:
            ValidationError: If neither role is given or a member has the wrong role
            NotFoundError: If the tour or a staff member does not exist
            InvalidTransitionError: If the tour is past the point of assignment
            StaffUnavailableError: If a new assignee is busy or blocked that day
            ConcurrentUpdateError: If the tour or a displaced assignee changed since it was read
        """
        tour = await self.tours.get_tour_by_id_or_raise(tour_id)
        return await self._assign(tour, guide_id, driver_id)

    async def assign_staff_by_booking(
        self,
        booking_id: str,
        guide_id: Optional[UUID] = None,
        driver_id: Optional[UUID] = None,
    ) -> Tour:
        """Same as ``assign_staff`` with the tour looked up by booking."""
        tour = await self.tours.get_tour_by_booking_id_or_raise(booking_id)
        return await self._assign(tour, guide_id, driver_id)

    async def accept_tour(self, tour_id: UUID) -> Tour:
        """
        Record the assigned guide's acceptance of a tour.

        Raises:
            NotFoundError: If the tour does not exist
            InvalidTransitionError: If the tour is not Pending or Confirmed
        """
        tour = await self.tours.get_tour_by_id_or_raise(tour_id)
        if tour.status not in ACCEPTABLE_STATUSES:
            raise InvalidTransitionError(str(tour.id), TourStatus(tour.status).value, TourStatus.ACCEPTED.value)

        guide = None
        if tour.assigned_tour_guide is not None:
            guide = await self.staff.get_staff_by_id(tour.assigned_tour_guide)

        async with unit_of_work(self.db):
            tour.status = TourStatus.ACCEPTED
            if guide is not None:
                guide.current_tour_status = GuideTourStatus.ACCEPTED

        await self.db.refresh(tour)
        logger.info("Tour accepted", extra={"tour_id": str(tour.id)})
        return tour

    async def reject_tour(self, tour_id: UUID, reason: Optional[str]) -> Tour:
        """
        Reject a tour outright and release its assignees.

        Raises:
            ValidationError: If the reason is blank
            NotFoundError: If the tour does not exist
            InvalidTransitionError: If the tour is already Ended or Rejected
        """
        reason = _require_reason(reason)
        tour = await self.tours.get_tour_by_id_or_raise(tour_id)
        if tour.status in TERMINAL_STATUSES:
            raise InvalidTransitionError(str(tour.id), TourStatus(tour.status).value, TourStatus.REJECTED.value)

        assignees = await self._load_assignees(tour)

        async with unit_of_work(self.db):
            tour.status = TourStatus.REJECTED
            tour.rejection_reason = reason
            for member in assignees:
                self.staff.release(member, tour, reason="rejected")

        await self.db.refresh(tour)
        metrics_collector.record_rejection("tour")
        logger.info(
            "Tour rejected",
            extra={"tour_id": str(tour.id), "released_staff": len(assignees)}
        )
        return tour

    async def submit_rejection(self, tour_id: UUID, guide_id: UUID, reason: Optional[str]) -> TourRejection:
        """
        Record a guide turning down their assigned tour.

        The tour goes back to Pending without a guide so it can be
        reassigned; its driver, if any, stays assigned.

        Raises:
            ValidationError: If the reason is blank
            NotFoundError: If the tour or guide does not exist
            ConflictError: If the guide is not the tour's assigned guide
            InvalidTransitionError: If the tour has already started or finished
        """
        reason = _require_reason(reason)
        tour = await self.tours.get_tour_by_id_or_raise(tour_id)
        guide = await self.staff.get_staff_with_role_or_raise(guide_id, StaffRole.TOUR_GUIDE)

        if tour.assigned_tour_guide != guide.id:
            raise ConflictError(
                detail=f"Tour guide {guide_id} is not assigned to tour {tour_id}",
                conflicting_resource={
                    "tour_id": str(tour.id),
                    "assigned_tour_guide": str(tour.assigned_tour_guide) if tour.assigned_tour_guide else None,
                }
            )
        if tour.status not in GUIDE_REJECTABLE_STATUSES:
            raise InvalidTransitionError(str(tour.id), TourStatus(tour.status).value, TourStatus.PENDING.value)

        async with unit_of_work(self.db):
            rejection = TourRejection(tour_id=tour.id, tour_guide_id=guide.id, reason=reason)
            self.db.add(rejection)

            tour.status = TourStatus.PENDING
            tour.assigned_tour_guide = None
            self.staff.release(guide, tour, reason="guide_rejected")

        await self.db.refresh(rejection)
        metrics_collector.record_rejection("guide")
        logger.info(
            "Tour rejection submitted",
            extra={"tour_id": str(tour.id), "tour_guide_id": str(guide.id)}
        )
        return rejection

    async def update_status(self, tour_id: UUID, status: TourStatus) -> Tour:
        """
        Move a tour forward in its lifecycle.

        Reaching Ended releases the assigned guide and driver.

        Raises:
            NotFoundError: If the tour does not exist
            InvalidTransitionError: If the move is not a forward step
        """
        tour = await self.tours.get_tour_by_id_or_raise(tour_id)
        if not can_transition(tour.status, status):
            raise InvalidTransitionError(str(tour.id), TourStatus(tour.status).value, TourStatus(status).value)

        assignees = await self._load_assignees(tour) if status == TourStatus.ENDED else []

        async with unit_of_work(self.db):
            tour.status = status
            for member in assignees:
                self.staff.release(member, tour, reason="ended")

        await self.db.refresh(tour)
        logger.info(
            "Tour status updated",
            extra={"tour_id": str(tour.id), "status": TourStatus(status).value}
        )
        return tour

    async def complete_tour(self, tour_id: UUID) -> Tour:
        """Mark a tour Ended and release its assignees."""
        return await self.update_status(tour_id, TourStatus.ENDED)

    async def reset_ended_tours_availability(self) -> ResetAvailabilityResponse:
        """
        Release staff left Busy by tours that have already Ended.

        Members still assigned to another live tour are left alone.

        Returns:
            Counts of inspected tours and released staff, with details
        """
        ended = await self.tours.list_tours_by_status(TourStatus.ENDED)
        held = await self.tours.get_held_staff_ids()

        released = []
        async with unit_of_work(self.db):
            for tour in ended:
                for staff_id in (tour.assigned_tour_guide, tour.assigned_driver):
                    if staff_id is None or staff_id in held:
                        continue
                    member = await self.staff.get_staff_by_id(staff_id)
                    if member is None or member.availability != StaffAvailability.BUSY:
                        continue
                    self.staff.release(member, tour, reason="sweep")
                    released.append(ReleasedStaff(
                        staff_id=member.id,
                        role=member.role_name,
                        name=member.full_name,
                        tour_id=tour.id,
                    ))

        logger.info(
            "Ended tour availability reset",
            extra={"ended_tours": len(ended), "reset_staff": len(released)}
        )
        return ResetAvailabilityResponse(
            ended_tours=len(ended),
            reset_staff=len(released),
            staff_details=released,
        )

    async def _resolve_assignee(
        self,
        staff_id: UUID,
        role: StaffRole,
        on: date,
        current_id: Optional[UUID] = None,
    ) -> StaffMember:
        staff = await self.staff.get_staff_with_role_or_raise(staff_id, role)
        if staff.id != current_id:
            self.staff.check_assignable(staff, on)
        return staff

    async def _load_assignees(self, tour: Tour) -> list[StaffMember]:
        assignees = []
        for staff_id in (tour.assigned_tour_guide, tour.assigned_driver):
            if staff_id is None:
                continue
            member = await self.staff.get_staff_by_id(staff_id)
            if member is None:
                logger.warning(
                    "Assigned staff member no longer exists",
                    extra={"tour_id": str(tour.id), "staff_id": str(staff_id)}
                )
                continue
            assignees.append(member)
        return assignees

    async def _assign(self, tour: Tour, guide_id: Optional[UUID], driver_id: Optional[UUID]) -> Tour:
        if guide_id is None and driver_id is None:
            raise ValidationError(
                detail="At least one of assigned_tour_guide or assigned_driver is required"
            )
        if tour.status not in ASSIGNABLE_STATUSES:
            raise InvalidTransitionError(str(tour.id), TourStatus(tour.status).value, TourStatus.CONFIRMED.value)

        guide = driver = None
        if guide_id is not None:
            guide = await self._resolve_assignee(
                guide_id, StaffRole.TOUR_GUIDE, tour.preferred_date, tour.assigned_tour_guide
            )
        if driver_id is not None:
            driver = await self._resolve_assignee(
                driver_id, StaffRole.SAFARI_DRIVER, tour.preferred_date, tour.assigned_driver
            )

        async with unit_of_work(self.db):
            await self._apply_assignment(tour, guide, driver)

        await self.db.refresh(tour)
        return tour

    async def _apply_assignment(
        self,
        tour: Tour,
        guide: Optional[StaffMember],
        driver: Optional[StaffMember],
    ) -> None:
        newly_assigned = []

        if guide is not None and guide.id != tour.assigned_tour_guide:
            await self._release_displaced(tour, tour.assigned_tour_guide)
            tour.assigned_tour_guide = guide.id
            newly_assigned.append(guide)

        if driver is not None and driver.id != tour.assigned_driver:
            await self._release_displaced(tour, tour.assigned_driver)
            tour.assigned_driver = driver.id
            newly_assigned.append(driver)

        tour.status = TourStatus.CONFIRMED

        for member in newly_assigned:
            await self.staff.claim(member)
        for member in newly_assigned:
            self.notifications.notify_assignment(member, tour)

        logger.info(
            "Staff assigned to tour",
            extra={
                "tour_id": str(tour.id),
                "assigned_tour_guide": str(tour.assigned_tour_guide) if tour.assigned_tour_guide else None,
                "assigned_driver": str(tour.assigned_driver) if tour.assigned_driver else None,
                "newly_assigned": len(newly_assigned),
            }
        )

    async def _release_displaced(self, tour: Tour, previous_id: Optional[UUID]) -> None:
        if previous_id is None:
            return
        previous = await self.staff.get_staff_by_id(previous_id)
        if previous is not None:
            self.staff.release(previous, tour, reason="replaced")
