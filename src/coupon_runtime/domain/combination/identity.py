from __future__ import annotations

from coupon_runtime.domain.combination.models import Coupon

# Keys are (namespace, value) pairs so a fallback key built from a coupon id
# can never equal a real product group or item id.
GroupKey = tuple[str, str]

_GROUP = "group"
_ITEM = "item"
_COUPON = "coupon"


def product_group_key(coupon: Coupon) -> GroupKey:
    """
    Resolve the product group a product-group coupon targets.

    Priority: product_group_id if non-empty, else the coupon's own id.
    A coupon without a group id is therefore its own singleton group and
    never collides with another coupon.
    """
    if coupon.product_group_id:
        return (_GROUP, coupon.product_group_id)
    return (_COUPON, coupon.id)


def item_key(coupon: Coupon) -> GroupKey:
    """
    Resolve the item a single-item coupon targets.

    Priority: item_id if non-empty, else the coupon's own id. Two distinct
    coupons without item ids are never duplicates of each other.
    """
    if coupon.item_id:
        return (_ITEM, coupon.item_id)
    return (_COUPON, coupon.id)
