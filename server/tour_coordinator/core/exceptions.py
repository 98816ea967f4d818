"""Tour coordinator errors rendered as RFC 9457 Problem Details.

Every error a service raises is a ``ProblemDetailsException``; the
handlers below turn them (and anything unexpected) into
``application/problem+json`` responses.
"""

from typing import Any, Dict, List, Optional
from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
import logging
import uuid
from datetime import datetime, timezone

logger = logging.getLogger(__name__)

PROBLEM_MEDIA_TYPE = "application/problem+json"
PROBLEM_TYPE_BASE = "https://wildlife-tours.example/problems"


def problem_type(slug: str) -> str:
    """Absolute type URI for a problem slug."""
    return f"{PROBLEM_TYPE_BASE}/{slug}"


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def _problem_response(status: int, body: Dict[str, Any], headers: Optional[Dict[str, str]] = None) -> JSONResponse:
    return JSONResponse(status_code=status, content=body, headers=headers, media_type=PROBLEM_MEDIA_TYPE)


class ProblemDetailsException(HTTPException):
    """
    Base error carrying an RFC 9457 problem document.

    https://tools.ietf.org/rfc/rfc9457.txt
    """

    def __init__(
        self,
        status_code: int,
        title: str,
        detail: Optional[str] = None,
        slug: Optional[str] = None,
        instance: Optional[str] = None,
        extensions: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        """
        Args:
            status_code: HTTP status code
            title: Short summary shared by every occurrence of this problem
            detail: Explanation of this particular occurrence
            slug: Problem type slug, appended to the problem base URI
            instance: Path of the request that failed; filled in by the handler when omitted
            extensions: Extra members merged into the document
            headers: Response headers
        """
        self.title = title
        self.type_uri = problem_type(slug) if slug else "about:blank"
        self.instance = instance

        self.problem_details = {"type": self.type_uri, "title": title, "status": status_code}
        if detail:
            self.problem_details["detail"] = detail
        if instance:
            self.problem_details["instance"] = instance
        self.problem_details.update(extensions or {})

        super().__init__(status_code=status_code, detail=self.problem_details, headers=headers)

    def add_code(self, code: str, retryable: bool = False) -> None:
        """Attach a machine-readable code for domain conflicts."""
        self.problem_details.update({"code": code, "retryable": retryable})


class ValidationError(ProblemDetailsException):
    """A request that parsed but breaks a business rule (400)."""

    def __init__(self, detail: str = "The request data failed validation", errors: Optional[Dict[str, Any]] = None):
        super().__init__(
            status_code=400,
            title="Validation Error",
            detail=detail,
            slug="validation-error",
            extensions={"errors": errors} if errors else None,
        )


class AuthenticationError(ProblemDetailsException):
    """Missing or unusable bearer token (401)."""

    def __init__(self, detail: str = "Authentication credentials are required"):
        super().__init__(
            status_code=401,
            title="Authentication Required",
            detail=detail,
            slug="authentication-required",
            headers={"WWW-Authenticate": "Bearer"},
        )


class AuthorizationError(ProblemDetailsException):
    """Caller's role may not perform the operation (403)."""

    def __init__(
        self,
        detail: str = "Your role is not allowed to perform this operation",
        required_permissions: Optional[List[str]] = None,
    ):
        super().__init__(
            status_code=403,
            title="Access Forbidden",
            detail=detail,
            slug="access-forbidden",
            extensions={"required_permissions": required_permissions} if required_permissions else None,
        )


class NotFoundError(ProblemDetailsException):
    """A tour, staff member or notification that does not exist (404)."""

    def __init__(self, resource_type: str = "resource", resource_id: Optional[str] = None, detail: Optional[str] = None):
        if not detail:
            target = f"{resource_type} '{resource_id}'" if resource_id else resource_type
            detail = f"The requested {target} could not be found"

        extensions = {"resource_type": resource_type}
        if resource_id:
            extensions["resource_id"] = resource_id

        super().__init__(
            status_code=404,
            title="Resource Not Found",
            detail=detail,
            slug="resource-not-found",
            extensions=extensions,
        )


class ConflictError(ProblemDetailsException):
    """The request clashes with the current state of a tour or staff member (409)."""

    def __init__(
        self,
        detail: str = "The request conflicts with the current state of the resource",
        conflicting_resource: Optional[Dict[str, Any]] = None,
        slug: str = "resource-conflict",
        title: str = "Resource Conflict",
    ):
        super().__init__(
            status_code=409,
            title=title,
            detail=detail,
            slug=slug,
            extensions={"conflicting_resource": conflicting_resource} if conflicting_resource else None,
        )


class InternalServerError(ProblemDetailsException):
    """Unclassified failure, usually from the database (500)."""

    def __init__(self, detail: str = "An unexpected error occurred while processing the request", error_id: Optional[str] = None):
        self.error_id = error_id or str(uuid.uuid4())
        super().__init__(
            status_code=500,
            title="Internal Server Error",
            detail=detail,
            slug="internal-server-error",
            extensions={"error_id": self.error_id, "timestamp": _utc_timestamp()},
        )


# Tour coordination conflicts

class DuplicateTourError(ConflictError):
    """A booking already has its tour."""

    def __init__(self, booking_id: str, existing_tour_id: Optional[str] = None):
        conflicting_resource = {"booking_id": booking_id}
        if existing_tour_id:
            conflicting_resource["tour_id"] = existing_tour_id

        super().__init__(
            detail=f"Tour already exists for booking '{booking_id}'",
            conflicting_resource=conflicting_resource,
            slug="duplicate-tour",
            title="Duplicate Tour",
        )
        self.add_code("DUPLICATE_TOUR")


class StaffUnavailableError(ConflictError):
    """A guide or driver is busy, blocked for the day, or was claimed concurrently."""

    def __init__(self, staff_id: str, role: str, reason: str):
        super().__init__(
            detail=f"Staff member {staff_id} ({role}) is not available: {reason}",
            conflicting_resource={"staff_id": staff_id, "role": role},
            slug="staff-unavailable",
            title="Staff Unavailable",
        )
        self.add_code("STAFF_UNAVAILABLE")


class InvalidTransitionError(ConflictError):
    """A tour cannot move from its current status to the requested one."""

    def __init__(self, tour_id: str, current_status: str, requested_status: str):
        super().__init__(
            detail=f"Tour {tour_id} cannot move from {current_status} to {requested_status}",
            conflicting_resource={
                "tour_id": tour_id,
                "current_status": current_status,
                "requested_status": requested_status,
            },
            slug="invalid-transition",
            title="Invalid Status Transition",
        )
        self.add_code("INVALID_TRANSITION")


class ConcurrentUpdateError(ConflictError):
    """A tour or staff member changed after this request read it."""

    def __init__(self, detail: str = "The tour or staff member was changed by another request; reload and try again"):
        super().__init__(detail=detail, slug="concurrent-update", title="Concurrent Update")
        self.add_code("CONCURRENT_UPDATE", retryable=True)


async def problem_details_handler(request: Request, exc: ProblemDetailsException) -> JSONResponse:
    """
    Render a ``ProblemDetailsException``.

    The request path becomes ``instance`` unless the error set one.
    """
    body = dict(exc.problem_details)
    body.setdefault("instance", request.url.path)
    return _problem_response(exc.status_code, body, exc.headers)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Turn request body/query parsing failures into a 422 with ``violations``."""
    violations = [
        {
            "path": ".".join(str(part) for part in error.get("loc", ())),
            "message": error.get("msg", "Invalid value"),
        }
        for error in exc.errors()
    ]

    return _problem_response(422, {
        "type": problem_type("validation-error"),
        "title": "Validation Error",
        "status": 422,
        "detail": "The request data failed validation",
        "instance": request.url.path,
        "violations": violations,
    })


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log an unhandled exception and answer with a 500 problem document."""
    error = InternalServerError()

    logger.error(
        "Unhandled exception",
        extra={"error_id": error.error_id, "path": request.url.path, "error": str(exc)},
        exc_info=exc,
    )

    return await problem_details_handler(request, error)
