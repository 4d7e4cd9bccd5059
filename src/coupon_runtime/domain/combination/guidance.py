from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from coupon_runtime.domain.combination.identity import item_key, product_group_key
from coupon_runtime.domain.combination.models import Coupon, CouponCategory

COMBINATION_HELP: dict[CouponCategory, str] = {
    CouponCategory.WHOLE_PURCHASE: (
        "Whole-purchase coupons: only one per purchase, combinable with product-group and single-item coupons"
    ),
    CouponCategory.PRODUCT_GROUP: (
        "Product-group coupons: several allowed for different product groups, combinable with all other coupons"
    ),
    CouponCategory.SINGLE_ITEM: (
        "Single-item coupons: several allowed for different items, combinable with all other coupons"
    ),
}
DEFAULT_HELP = "Combinability depends on the coupon type"


def combination_help(category: CouponCategory | str | None) -> str:
    parsed = CouponCategory.parse(category)
    if parsed is None:
        return DEFAULT_HELP
    return COMBINATION_HELP[parsed]


@dataclass(frozen=True)
class MaxCombinable:
    whole_purchase: int
    product_group: int
    single_item: int


def max_combinable(coupons: Sequence[Coupon]) -> MaxCombinable:
    """
    Upper bound of coupons per category that can be redeemed together.

    Whole-purchase is always 1; product-group and single-item are bounded by
    the number of distinct groups and items among the given coupons.
    """
    groups = {
        product_group_key(coupon) for coupon in coupons if coupon.category is CouponCategory.PRODUCT_GROUP
    }
    items = {item_key(coupon) for coupon in coupons if coupon.category is CouponCategory.SINGLE_ITEM}
    return MaxCombinable(whole_purchase=1, product_group=len(groups), single_item=len(items))
