"""Notification schemas.

The addressee of a notification is a tagged union over the two kinds of
staff, discriminated by ``user_type``.
"""

from datetime import datetime
from typing import Annotated, Literal, Union
from uuid import UUID

from pydantic import BaseModel, Field

from ..models.notification import NotificationType, RecipientType
from ..models.staff import StaffMember, StaffRole


class TourGuideRecipient(BaseModel):
    """Notification addressed to a tour guide."""

    user_type: Literal["TourGuide"] = "TourGuide"
    user_id: UUID


class DriverRecipient(BaseModel):
    """Notification addressed to a safari driver."""

    user_type: Literal["Driver"] = "Driver"
    user_id: UUID


Recipient = Annotated[
    Union[TourGuideRecipient, DriverRecipient],
    Field(discriminator="user_type"),
]


def recipient_for(staff: StaffMember) -> TourGuideRecipient | DriverRecipient:
    """Build the recipient for a staff member from its role."""
    if staff.role == StaffRole.TOUR_GUIDE:
        return TourGuideRecipient(user_id=staff.id)
    return DriverRecipient(user_id=staff.id)


def recipient_from_path(user_type: RecipientType, user_id: UUID) -> TourGuideRecipient | DriverRecipient:
    if user_type == RecipientType.TOUR_GUIDE:
        return TourGuideRecipient(user_id=user_id)
    return DriverRecipient(user_id=user_id)


class Notification(BaseModel):
    """Notification response schema."""

    id: UUID = Field(..., description="Unique notification ID")
    recipient: Recipient = Field(..., description="Staff member the notification is for")
    tour_id: UUID = Field(..., description="Tour the notification is about")
    type: NotificationType = Field(..., description="Notification type")
    title: str = Field(..., description="Short title")
    message: str = Field(..., description="Message body")
    is_read: bool = Field(..., description="Whether the recipient has read it")
    meta: dict = Field(default_factory=dict, description="Free-form context")
    created_at: datetime = Field(..., description="Creation time (ISO 8601)")
