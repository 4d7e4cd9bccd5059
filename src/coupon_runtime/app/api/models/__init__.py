"""Pydantic models for the coupon API."""

from coupon_runtime.app.api.models.combination import (
    AccountUsageRequest,
    CapacityRequest,
    CapacityResponse,
    CombinationHelpResponse,
    ValidateCombinationRequest,
    ValidationResponse,
)

__all__ = [
    "AccountUsageRequest",
    "CapacityRequest",
    "CapacityResponse",
    "CombinationHelpResponse",
    "ValidateCombinationRequest",
    "ValidationResponse",
]
