"""Models module exporting all database models."""

from .notification import Notification, NotificationType, RecipientType
from .rejection import TourRejection
from .staff import GuideTourStatus, StaffAvailability, StaffMember, StaffRole
from .tour import ACTIVE_TOUR_STATUSES, Tour, TourStatus

__all__ = [
    # Core entities
    "Tour",
    "TourStatus",
    "ACTIVE_TOUR_STATUSES",

    # Staff
    "StaffMember",
    "StaffRole",
    "StaffAvailability",
    "GuideTourStatus",

    # Audit and messaging
    "TourRejection",
    "Notification",
    "NotificationType",
    "RecipientType",
]
