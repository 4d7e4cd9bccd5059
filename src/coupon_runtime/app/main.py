from __future__ import annotations

from fastapi import FastAPI

from coupon_runtime.app.api.routers import combination_router, health_router
from coupon_runtime.observability.logging import configure_logging

configure_logging()

app = FastAPI(title="Coupon Runtime")
app.include_router(health_router)
app.include_router(combination_router, prefix="/api", tags=["coupons"])
