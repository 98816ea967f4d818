"""Service layer package."""

from .lifecycle_service import TourLifecycleService, can_transition
from .notification_service import NotificationService
from .staff_service import StaffService
from .tour_service import TourService

__all__ = [
    "NotificationService",
    "StaffService",
    "TourLifecycleService",
    "TourService",
    "can_transition",
]
