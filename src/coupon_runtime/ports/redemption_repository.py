from __future__ import annotations

from typing import Protocol


class RedemptionRepository(Protocol):
    def has_redemption(self, coupon_id: str, payback_account_id: str) -> bool:
        """Return True if the coupon was already redeemed for the loyalty account."""
        ...
