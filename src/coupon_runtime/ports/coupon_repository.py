from __future__ import annotations

from typing import Protocol

from coupon_runtime.domain.combination.models import Coupon


class CouponRepository(Protocol):
    def get_coupons_by_ids(self, coupon_ids: list[str]) -> list[Coupon]:
        """
        Resolve coupon ids into coupons, including joined product group names.

        Ids that do not exist are absent from the result.
        """
        ...
