"""Staff-related Pydantic schemas."""

from datetime import date
from uuid import UUID

from pydantic import BaseModel, Field

from ..models.staff import GuideTourStatus, StaffAvailability, StaffRole


class RegisterStaffRequest(BaseModel):
    """Request schema for registering a guide or driver."""

    role: StaffRole = Field(..., description="tourGuide or safariDriver")
    first_name: str = Field(..., min_length=1, max_length=100, description="First name")
    last_name: str = Field(..., min_length=1, max_length=100, description="Last name")
    email: str = Field(..., min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+$", description="Contact email")
    phone: str | None = Field(None, max_length=32, description="Contact phone")


class DailyAvailabilityRequest(BaseModel):
    """Request schema for a per-date availability override."""

    day: date = Field(..., description="Day the override applies to")
    is_available: bool = Field(..., description="Whether the member can be assigned that day")


class Staff(BaseModel):
    """Staff member response schema."""

    id: UUID = Field(..., description="Unique staff ID")
    role: StaffRole = Field(..., description="tourGuide or safariDriver")
    first_name: str = Field(..., description="First name")
    last_name: str = Field(..., description="Last name")
    email: str = Field(..., description="Contact email")
    phone: str | None = Field(None, description="Contact phone")
    availability: StaffAvailability = Field(..., description="Available or Busy")
    current_tour_status: GuideTourStatus | None = Field(None, description="Guides only")
    daily_availability: dict = Field(default_factory=dict, description="Per-date overrides")

    class Config:
        from_attributes = True
