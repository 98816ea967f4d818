"""FastAPI routers package."""

from .health import router as health_router
from .metrics import router as metrics_router
from .notification import router as notification_router
from .rejection import router as rejection_router
from .staff import router as staff_router
from .tour import router as tour_router

__all__ = [
    "health_router",
    "metrics_router",
    "notification_router",
    "rejection_router",
    "staff_router",
    "tour_router",
]
