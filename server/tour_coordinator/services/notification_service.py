"""Notification service for staff assignment messages."""

import logging
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import NotFoundError
from ..models.notification import Notification, NotificationType, RecipientType
from ..models.staff import StaffMember, StaffRole
from ..models.tour import Tour, TourStatus
from ..schemas.notification import DriverRecipient, TourGuideRecipient, recipient_for

logger = logging.getLogger(__name__)

ASSIGNMENT_MESSAGES = {
    StaffRole.TOUR_GUIDE: "You have been assigned to a new tour (Tour ID: {tour_id}) on {tour_date}.",
    StaffRole.SAFARI_DRIVER: "You have been assigned as the safari driver for tour (Tour ID: {tour_id}) on {tour_date}.",
}


class NotificationService:
    """Service for notification operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    def notify_assignment(self, staff: StaffMember, tour: Tour) -> Notification:
        """
        Queue an ASSIGNED_TOUR notification for a newly assigned member.

        The notification is added to the session and persisted with the
        assignment. Does not commit.
        """
        recipient = recipient_for(staff)
        message = ASSIGNMENT_MESSAGES[StaffRole(staff.role)].format(
            tour_id=tour.id,
            tour_date=tour.preferred_date.isoformat(),
        )

        notification = Notification(
            user_id=recipient.user_id,
            user_type=RecipientType(recipient.user_type),
            tour_id=tour.id,
            type=NotificationType.ASSIGNED_TOUR,
            title="New tour assigned",
            message=message,
            is_read=False,
            meta={
                "booking_id": tour.booking_id,
                "status": TourStatus(tour.status).value,
                "tour_date": tour.preferred_date.isoformat(),
            },
        )
        self.db.add(notification)

        logger.info(
            "Assignment notification queued",
            extra={
                "user_id": str(recipient.user_id),
                "user_type": recipient.user_type,
                "tour_id": str(tour.id)
            }
        )
        return notification

    async def list_notifications(
        self,
        recipient: TourGuideRecipient | DriverRecipient,
        unread_only: bool = False,
    ) -> list[Notification]:
        """
        List notifications for a recipient, newest first.

        Args:
            recipient: Staff member the notifications are addressed to
            unread_only: Only return notifications not yet read

        Returns:
            Matching notifications
        """
        stmt = select(Notification).where(
            Notification.user_id == recipient.user_id,
            Notification.user_type == recipient.user_type,
        )
        if unread_only:
            stmt = stmt.where(Notification.is_read.is_(False))
        stmt = stmt.order_by(Notification.created_at.desc())

        result = await self.db.execute(stmt)
        return list(result.scalars())

    async def mark_read(self, notification_id: UUID) -> Notification:
        """
        Mark a notification as read.

        Raises:
            NotFoundError: If the notification does not exist
        """
        stmt = select(Notification).where(Notification.id == notification_id)
        result = await self.db.execute(stmt)
        notification = result.scalar_one_or_none()
        if not notification:
            raise NotFoundError(resource_type="notification", resource_id=str(notification_id))

        notification.is_read = True
        await self.db.commit()
        await self.db.refresh(notification)
        return notification
