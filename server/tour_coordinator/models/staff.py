"""Staff member model definition (tour guides and safari drivers)."""

from datetime import date, datetime
from enum import Enum
from uuid import UUID, uuid4

from sqlalchemy import JSON, CheckConstraint, Integer, String, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from ..core.database import Base
from .versioning import next_version


class StaffRole(str, Enum):
    """Role discriminator for staff members."""
    TOUR_GUIDE = "tourGuide"
    SAFARI_DRIVER = "safariDriver"


class StaffAvailability(str, Enum):
    """Coarse availability flag."""
    AVAILABLE = "Available"
    BUSY = "Busy"


class GuideTourStatus(str, Enum):
    """Guide-side mirror of the tour they are working on."""
    AVAILABLE = "Available"
    PROCESSING = "Processing"
    ACCEPTED = "Accepted"


def day_key(value: date | datetime) -> str:
    """Key used in ``daily_availability`` (YYYY-MM-DD)."""
    if isinstance(value, datetime):
        value = value.date()
    return value.isoformat()


class StaffMember(Base):
    """Staff member who can be assigned to tours."""

    __tablename__ = "staff_members"

    # Primary key
    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    role: Mapped[StaffRole] = mapped_column(String(20), nullable=False, index=True)

    # Contact details
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    phone: Mapped[str | None] = mapped_column(String(32), nullable=True)

    # Availability
    availability: Mapped[StaffAvailability] = mapped_column(
        String(20),
        nullable=False,
        default=StaffAvailability.AVAILABLE,
        index=True
    )
    current_tour_status: Mapped[GuideTourStatus | None] = mapped_column(String(20), nullable=True)
    daily_availability: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)

    # Starts at 0; every flush of a changed row bumps it and checks the value read
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

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
        CheckConstraint("role IN ('tourGuide', 'safariDriver')", name="ck_staff_role_valid"),
        CheckConstraint("availability IN ('Available', 'Busy')", name="ck_staff_availability_valid"),
        CheckConstraint("version >= 0", name="ck_staff_version_non_negative"),
    )
    __mapper_args__ = {"version_id_col": version, "version_id_generator": next_version}

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def role_name(self) -> str:
        return StaffRole(self.role).value

    @property
    def is_guide(self) -> bool:
        return self.role == StaffRole.TOUR_GUIDE

    def is_available_for_date(self, on: date) -> bool:
        """Per-date override for ``on``; members with no entry are available."""
        entry = (self.daily_availability or {}).get(day_key(on))
        return entry["is_available"] if entry else True

    def set_availability_for_date(self, on: date, is_available: bool, tour_id: UUID | None = None) -> None:
        """
        Record a per-date availability override.

        When ``tour_id`` is given it is added to (unavailable) or removed from
        (available) the day's assigned tours.
        """
        key = day_key(on)
        overrides = dict(self.daily_availability or {})
        entry = dict(overrides.get(key) or {"is_available": True, "assigned_tours": []})

        assigned = list(entry.get("assigned_tours", []))
        if tour_id is not None:
            if is_available:
                assigned = [t for t in assigned if t != str(tour_id)]
            elif str(tour_id) not in assigned:
                assigned.append(str(tour_id))

        entry.update(
            is_available=is_available,
            assigned_tours=assigned,
            last_updated=datetime.utcnow().isoformat() + "Z",
        )
        overrides[key] = entry
        # Reassign so the JSON column is flagged dirty
        self.daily_availability = overrides

    def __repr__(self) -> str:
        return (
            f"<StaffMember(id={self.id}, role={self.role}, "
            f"availability={self.availability}, version={self.version})>"
        )
