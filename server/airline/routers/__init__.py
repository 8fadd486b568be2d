"""FastAPI routers package."""

from .auth import router as auth_router
from .booking import router as booking_router
from .dashboard import router as dashboard_router
from .flights import router as flights_router
from .health import router as health_router
from .metrics import router as metrics_router
from .users import router as users_router

__all__ = [
    "auth_router",
    "booking_router",
    "dashboard_router",
    "flights_router",
    "health_router",
    "metrics_router",
    "users_router",
]
