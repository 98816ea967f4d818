"""Tour-related Pydantic schemas."""

from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, Field

from ..models.tour import TourStatus


class CreateTourRequest(BaseModel):
    """Request schema for creating a tour from a booking."""

    booking_id: str = Field(..., min_length=1, max_length=64, description="Booking the tour is created for")
    preferred_date: date = Field(..., description="Date of the tour (YYYY-MM-DD)")
    assigned_tour_guide: UUID | None = Field(None, description="Guide to assign immediately")
    assigned_driver: UUID | None = Field(None, description="Driver to assign immediately")
    tour_notes: str | None = Field(None, max_length=2000, description="Free-form dispatcher notes")


class AssignTourRequest(BaseModel):
    """Request schema for assigning staff to the tour of a booking."""

    booking_id: str = Field(..., min_length=1, max_length=64, description="Booking whose tour is assigned")
    assigned_tour_guide: UUID | None = Field(None, description="Guide to assign")
    assigned_driver: UUID | None = Field(None, description="Driver to assign")


class RejectTourRequest(BaseModel):
    """Request schema for rejecting a tour."""

    reason: str = Field(..., max_length=1000, description="Why the tour is rejected")


class UpdateTourStatusRequest(BaseModel):
    """Request schema for moving a tour forward in its lifecycle."""

    status: TourStatus = Field(..., description="Target status")


class Tour(BaseModel):
    """Tour response schema."""

    id: UUID = Field(..., description="Unique tour ID")
    booking_id: str = Field(..., description="Associated booking ID")
    preferred_date: date = Field(..., description="Tour date")
    assigned_tour_guide: UUID | None = Field(None, description="Assigned guide")
    assigned_driver: UUID | None = Field(None, description="Assigned driver")
    status: TourStatus = Field(..., description="Tour status")
    rejection_reason: str | None = Field(None, description="Reason given on rejection")
    tour_notes: str | None = Field(None, description="Dispatcher notes")
    created_at: datetime = Field(..., description="Creation time (ISO 8601)")
    updated_at: datetime = Field(..., description="Last update time (ISO 8601)")

    class Config:
        from_attributes = True


class ReleasedStaff(BaseModel):
    """Staff member returned to Available by the sweep."""

    staff_id: UUID = Field(..., description="Released staff member")
    role: str = Field(..., description="tourGuide or safariDriver")
    name: str = Field(..., description="Full name")
    tour_id: UUID = Field(..., description="Ended tour that held the member")


class ResetAvailabilityResponse(BaseModel):
    """Response schema for the ended-tour availability sweep."""

    ended_tours: int = Field(..., ge=0, description="Number of ended tours inspected")
    reset_staff: int = Field(..., ge=0, description="Number of staff members released")
    staff_details: list[ReleasedStaff] = Field(default_factory=list, description="Who was released")
