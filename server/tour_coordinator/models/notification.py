"""Staff notification model definition."""

from datetime import datetime
from enum import Enum
from uuid import UUID, uuid4

from sqlalchemy import JSON, Boolean, ForeignKey, String, Text, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from ..core.database import Base


class RecipientType(str, Enum):
    """Kind of staff member a notification is addressed to."""
    TOUR_GUIDE = "TourGuide"
    DRIVER = "Driver"


class NotificationType(str, Enum):
    """Notification type enumeration."""
    ASSIGNED_TOUR = "ASSIGNED_TOUR"


class Notification(Base):
    """Informational message addressed to a single staff member."""

    __tablename__ = "notifications"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    user_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("staff_members.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    user_type: Mapped[RecipientType] = mapped_column(String(20), nullable=False)
    tour_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("tours.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    type: Mapped[NotificationType] = mapped_column(
        String(32),
        nullable=False,
        default=NotificationType.ASSIGNED_TOUR
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False, default="New tour assigned")
    message: Mapped[str] = mapped_column(Text, nullable=False)
    is_read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    meta: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)

    created_at: Mapped[datetime] = mapped_column(
        nullable=False,
        default=datetime.utcnow,
        server_default=func.now(),
        index=True
    )

    def __repr__(self) -> str:
        return (
            f"<Notification(id={self.id}, user_type={self.user_type}, "
            f"user_id={self.user_id}, tour_id={self.tour_id}, is_read={self.is_read})>"
        )
