from typing import Optional


class EmptySelectionError(Exception):
    """Raised when a combination check is requested without coupon ids."""


class CouponsNotFoundError(Exception):
    """Raised when the coupons found do not match the requested ids one to one."""

    def __init__(self, missing_ids: list[str], repeated_ids: Optional[list[str]] = None) -> None:
        self.missing_ids = missing_ids
        self.repeated_ids = repeated_ids or []
        reasons = []
        if missing_ids:
            reasons.append(f"Some coupons were not found: {', '.join(missing_ids)}")
        if self.repeated_ids:
            reasons.append(f"Coupons requested more than once: {', '.join(self.repeated_ids)}")
        super().__init__("; ".join(reasons))


class RedemptionLookupError(Exception):
    """Raised when the redemption history cannot be read."""
