"""
Coupon combination rules.

Pure, deterministic functions deciding which coupons may be redeemed
together in a single transaction. No I/O and no shared mutable state, so
the same module serves the authoritative API check and optimistic
client-side pre-checks.

Usage Example:
    ```python
    from coupon_runtime.domain.combination import Coupon, validate

    coupons = [
        Coupon.new(id="c1", category="whole-purchase", store_id="s1", title="10% on everything"),
        Coupon.new(id="c2", category="product-group", product_group_id="dairy", store_id="s1"),
    ]
    result = validate(coupons, target_store_id="s1")
    assert result.valid
    ```
"""

from __future__ import annotations

from coupon_runtime.domain.combination.guidance import (
    MaxCombinable,
    combination_help,
    max_combinable,
)
from coupon_runtime.domain.combination.identity import item_key, product_group_key
from coupon_runtime.domain.combination.models import (
    CombinationConfig,
    CombinationRules,
    Coupon,
    CouponCategory,
    Finding,
    Store,
    StoreAffiliation,
    ValidationResult,
)
from coupon_runtime.domain.combination.partners import (
    DEFAULT_PARTNER_TABLE,
    CouponSelector,
    PartnerLimit,
    PartnerRecommendation,
    PartnerRule,
    PartnerTable,
    SelectorRequirement,
    apply_partner_rules,
    build_affiliation,
    detect_partners,
    partner_table_from_dict,
)
from coupon_runtime.domain.combination.validator import validate

__all__ = [
    # Models
    "CombinationConfig",
    "CombinationRules",
    "Coupon",
    "CouponCategory",
    "Finding",
    "Store",
    "StoreAffiliation",
    "ValidationResult",
    # Identity
    "product_group_key",
    "item_key",
    # Partners
    "DEFAULT_PARTNER_TABLE",
    "CouponSelector",
    "PartnerLimit",
    "PartnerRecommendation",
    "PartnerRule",
    "PartnerTable",
    "SelectorRequirement",
    "apply_partner_rules",
    "build_affiliation",
    "detect_partners",
    "partner_table_from_dict",
    # Guidance
    "MaxCombinable",
    "combination_help",
    "max_combinable",
    # Validator
    "validate",
]
