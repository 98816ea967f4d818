"""Notification router for staff inboxes."""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import get_db
from ..models.notification import RecipientType
from ..schemas.notification import Notification, recipient_from_path
from ..services.notification_service import NotificationService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/notification", tags=["notification"])

DB_DEPENDENCY = Depends(get_db)


def _convert_notification_to_schema(notification_model) -> Notification:
    """Convert notification model to schema."""
    return Notification(
        id=notification_model.id,
        recipient=recipient_from_path(
            RecipientType(notification_model.user_type),
            notification_model.user_id,
        ),
        tour_id=notification_model.tour_id,
        type=notification_model.type,
        title=notification_model.title,
        message=notification_model.message,
        is_read=notification_model.is_read,
        meta=notification_model.meta or {},
        created_at=notification_model.created_at,
    )


@router.get("/{user_type}/{user_id}", response_model=list[Notification])
async def list_notifications(
    user_type: RecipientType,
    user_id: UUID,
    unread_only: bool = False,
    db: AsyncSession = DB_DEPENDENCY
) -> JSONResponse:
    """List a staff member's notifications, newest first."""
    recipient = recipient_from_path(user_type, user_id)
    notifications = await NotificationService(db).list_notifications(recipient, unread_only=unread_only)

    logger.debug(
        "Notifications listed",
        extra={"user_type": user_type.value, "user_id": str(user_id), "count": len(notifications)}
    )

    return JSONResponse(
        status_code=200,
        content=[_convert_notification_to_schema(n).model_dump(mode="json") for n in notifications]
    )


@router.put("/{notification_id}/read", response_model=Notification)
async def mark_notification_read(notification_id: UUID, db: AsyncSession = DB_DEPENDENCY) -> JSONResponse:
    """Mark a notification as read."""
    notification = await NotificationService(db).mark_read(notification_id)
    return JSONResponse(
        status_code=200,
        content=_convert_notification_to_schema(notification).model_dump(mode="json")
    )
