"""Pydantic models for combination-related API requests and responses."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from coupon_runtime.domain.combination.guidance import MaxCombinable
from coupon_runtime.domain.combination.models import ValidationResult


class CamelModel(BaseModel):
    """Accepts camelCase and snake_case field names, emits camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ValidateCombinationRequest(CamelModel):
    coupon_ids: list[str] = Field(default_factory=list, description="Selected coupon IDs")
    store_id: str | None = Field(None, description="Store all coupons must belong to")


class CapacityRequest(CamelModel):
    coupon_ids: list[str] = Field(default_factory=list)


class AccountUsageRequest(CamelModel):
    coupon_id: str
    payback_account_id: str


class ValidationResponse(BaseModel):
    valid: bool
    conflicts: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
    codes: list[str] = Field(default_factory=list, description="Rule codes of all detected conditions")

    @classmethod
    def from_result(cls, result: ValidationResult) -> "ValidationResponse":
        return cls(**result.to_dict())


class CapacityResponse(CamelModel):
    whole_purchase: int
    product_group: int
    single_item: int

    @classmethod
    def from_capacity(cls, capacity: MaxCombinable) -> "CapacityResponse":
        return cls(
            whole_purchase=capacity.whole_purchase,
            product_group=capacity.product_group,
            single_item=capacity.single_item,
        )


class CombinationHelpResponse(BaseModel):
    category: str
    help: str
