"""Problem document schemas shared by every router."""

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field


class Violation(BaseModel):
    """One field that failed request parsing."""

    path: str = Field(..., description="Dotted location of the field, e.g. body.preferred_date")
    message: str


class Problem(BaseModel):
    """
    RFC 9457 problem document returned for every 4xx/5xx response.

    Only ``type``, ``title`` and ``status`` are always present; the other
    members depend on the kind of error.
    """

    model_config = ConfigDict(extra="allow")

    type: str = Field(..., description="Problem type URI")
    title: str
    status: int
    detail: Optional[str] = None
    instance: Optional[str] = Field(None, description="Path of the failed request")

    # Domain conflicts (duplicate tour, unavailable staff, invalid transition)
    code: Optional[str] = Field(None, description="DUPLICATE_TOUR, STAFF_UNAVAILABLE or INVALID_TRANSITION")
    retryable: Optional[bool] = None
    conflicting_resource: Optional[Dict[str, Any]] = None

    # Lookups
    resource_type: Optional[str] = Field(None, description="tour, tour guide, safari driver, staff member or notification")
    resource_id: Optional[str] = None

    errors: Optional[Dict[str, Any]] = Field(None, description="Business rule failures keyed by field")
    violations: Optional[List[Violation]] = Field(None, description="Request parsing failures")
    error_id: Optional[str] = Field(None, description="Reference for server-side logs on 500 responses")
