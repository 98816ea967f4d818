"""Tour rejection audit record."""

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import CheckConstraint, ForeignKey, Text, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from ..core.database import Base


class TourRejection(Base):
    """Append-only record of a guide turning down a tour."""

    __tablename__ = "tour_rejections"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    tour_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("tours.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    tour_guide_id: Mapped[UUID] = mapped_column(Uuid, nullable=False, index=True)
    reason: Mapped[str] = mapped_column(Text, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        nullable=False,
        default=datetime.utcnow,
        server_default=func.now()
    )

    __table_args__ = (
        CheckConstraint("length(reason) > 0", name="ck_rejection_reason_not_empty"),
    )

    def __repr__(self) -> str:
        return f"<TourRejection(id={self.id}, tour_id={self.tour_id}, guide={self.tour_guide_id})>"
