"""API routers for coupon endpoints."""

from coupon_runtime.app.api.routers.combination import router as combination_router
from coupon_runtime.app.api.routers.health import router as health_router

__all__ = ["combination_router", "health_router"]
