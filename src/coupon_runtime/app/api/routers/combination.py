"""Router for coupon combination endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

from coupon_runtime.app.api.models.combination import (
    AccountUsageRequest,
    CapacityRequest,
    CapacityResponse,
    CombinationHelpResponse,
    ValidateCombinationRequest,
    ValidationResponse,
)
from coupon_runtime.app.factory import create_combination_service
from coupon_runtime.application.combination_service import CombinationService
from coupon_runtime.application.errors import CouponsNotFoundError, EmptySelectionError
from coupon_runtime.domain.combination.guidance import combination_help
from coupon_runtime.settings import get_settings

logger = logging.getLogger(__name__)

router = APIRouter()

INTERNAL_ERROR_DETAIL = "Internal server error"
_service_cache: dict[str, CombinationService] = {}


def get_combination_service() -> CombinationService:
    """Dependency to provide a CombinationService shared across requests."""
    if "service" not in _service_cache:
        _service_cache["service"] = create_combination_service(get_settings())
    return _service_cache["service"]


@router.post("/coupons/validate-combination", response_model=ValidationResponse)
def validate_combination(
    req: ValidateCombinationRequest,
    service: CombinationService = Depends(get_combination_service),
) -> ValidationResponse:
    """
    Check whether the selected coupons can be redeemed together.

    Business-rule conflicts are not errors: they come back with 200 and
    valid=false. Errors are reserved for an empty selection (400) and
    unknown coupon ids (404).
    """
    try:
        result = service.validate_selection(req.coupon_ids, req.store_id)
    except EmptySelectionError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except CouponsNotFoundError:
        raise HTTPException(status_code=404, detail="Some coupons were not found")
    except Exception as e:
        logger.exception(f"Error validating coupon combination: {e}")
        raise HTTPException(status_code=500, detail=INTERNAL_ERROR_DETAIL)
    return ValidationResponse.from_result(result)


@router.post("/coupons/capacity", response_model=CapacityResponse)
def coupon_capacity(
    req: CapacityRequest,
    service: CombinationService = Depends(get_combination_service),
) -> CapacityResponse:
    """Upper bound of coupons per category that can be redeemed together."""
    try:
        capacity = service.capacity(req.coupon_ids)
    except EmptySelectionError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except CouponsNotFoundError:
        raise HTTPException(status_code=404, detail="Some coupons were not found")
    except Exception as e:
        logger.exception(f"Error computing coupon capacity: {e}")
        raise HTTPException(status_code=500, detail=INTERNAL_ERROR_DETAIL)
    return CapacityResponse.from_capacity(capacity)


@router.post("/coupons/account-usage", response_model=ValidationResponse)
def account_usage(
    req: AccountUsageRequest,
    service: CombinationService = Depends(get_combination_service),
) -> ValidationResponse:
    """Check that a coupon has not been redeemed for the loyalty account yet."""
    try:
        result = service.check_account_usage(req.coupon_id, req.payback_account_id)
    except Exception as e:
        logger.exception(f"Error checking account usage: {e}")
        raise HTTPException(status_code=500, detail=INTERNAL_ERROR_DETAIL)
    return ValidationResponse.from_result(result)


@router.get("/coupons/combination-help/{category}", response_model=CombinationHelpResponse)
def get_combination_help(category: str) -> CombinationHelpResponse:
    return CombinationHelpResponse(category=category, help=combination_help(category))
