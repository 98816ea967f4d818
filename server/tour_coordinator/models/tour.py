"""Tour model definition."""

from datetime import date, datetime
from enum import Enum
from uuid import UUID, uuid4

from sqlalchemy import CheckConstraint, Date, ForeignKey, Integer, String, Text, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from ..core.database import Base
from .versioning import next_version


class TourStatus(str, Enum):
    """Tour status enumeration."""
    PENDING = "Pending"
    CONFIRMED = "Confirmed"
    ACCEPTED = "Accepted"
    PROCESSING = "Processing"
    STARTED = "Started"
    ENDED = "Ended"
    REJECTED = "Rejected"


# Tours whose assignees are still committed to them
ACTIVE_TOUR_STATUSES = (
    TourStatus.CONFIRMED,
    TourStatus.ACCEPTED,
    TourStatus.PROCESSING,
    TourStatus.STARTED,
)


class Tour(Base):
    """Tour entity: one guided excursion per confirmed booking."""

    __tablename__ = "tours"

    # Primary key
    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    # One tour per booking; bookings themselves live in another service
    booking_id: Mapped[str] = mapped_column(String(64), nullable=False, unique=True, index=True)
    preferred_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)

    # Assignments
    assigned_tour_guide: Mapped[UUID | None] = mapped_column(
        Uuid,
        ForeignKey("staff_members.id", ondelete="SET NULL"),
        nullable=True,
        index=True
    )
    assigned_driver: Mapped[UUID | None] = mapped_column(
        Uuid,
        ForeignKey("staff_members.id", ondelete="SET NULL"),
        nullable=True,
        index=True
    )

    status: Mapped[TourStatus] = mapped_column(
        String(20),
        nullable=False,
        default=TourStatus.PENDING,
        index=True
    )
    rejection_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    tour_notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Optimistic lock; a stale write fails instead of overwriting a newer one
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        nullable=False,
        default=datetime.utcnow,
        server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        nullable=False,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
        server_default=func.now()
    )

    __table_args__ = (
        CheckConstraint("length(booking_id) > 0", name="ck_tour_booking_id_not_empty"),
        CheckConstraint("version >= 0", name="ck_tour_version_non_negative"),
    )

    __mapper_args__ = {"version_id_col": version, "version_id_generator": next_version}

    def __repr__(self) -> str:
        return (
            f"<Tour(id={self.id}, booking_id='{self.booking_id}', status={self.status}, "
            f"guide={self.assigned_tour_guide}, driver={self.assigned_driver}, version={self.version})>"
        )
