"""Tour rejection schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field


class SubmitRejectionRequest(BaseModel):
    """Request schema for a guide turning down an assigned tour."""

    tour_id: UUID = Field(..., description="Tour being rejected")
    tour_guide_id: UUID = Field(..., description="Guide submitting the rejection")
    reason: str = Field(..., max_length=1000, description="Why the guide cannot take the tour")


class TourRejection(BaseModel):
    """Tour rejection response schema."""

    id: UUID = Field(..., description="Unique rejection ID")
    tour_id: UUID = Field(..., description="Rejected tour")
    tour_guide_id: UUID = Field(..., description="Guide who rejected")
    reason: str = Field(..., description="Rejection reason")
    created_at: datetime = Field(..., description="Submission time (ISO 8601)")

    class Config:
        from_attributes = True
