from __future__ import annotations

import logging
from typing import Optional

from coupon_runtime.application.errors import (
    CouponsNotFoundError,
    EmptySelectionError,
    RedemptionLookupError,
)
from coupon_runtime.domain.combination import rules
from coupon_runtime.domain.combination.guidance import MaxCombinable, max_combinable
from coupon_runtime.domain.combination.models import (
    CombinationConfig,
    Coupon,
    StoreAffiliation,
    ValidationResult,
)
from coupon_runtime.domain.combination.partners import (
    DEFAULT_PARTNER_TABLE,
    PartnerTable,
    build_affiliation,
)
from coupon_runtime.domain.combination.validator import validate
from coupon_runtime.domain.common.ids import StoreId
from coupon_runtime.ports.coupon_repository import CouponRepository
from coupon_runtime.ports.redemption_repository import RedemptionRepository
from coupon_runtime.ports.store_repository import StoreRepository

logger = logging.getLogger(__name__)


class CombinationService:
    """
    Authoritative combination check for a selection of coupon ids.

    Resolves ids into coupons and stores, then hands them to the pure
    validator. Cross-session double booking is not prevented here; the
    redemption commit must be guarded by the persistence layer.
    """

    def __init__(
        self,
        coupon_repo: CouponRepository,
        store_repo: StoreRepository,
        redemption_repo: Optional[RedemptionRepository] = None,
        partner_table: PartnerTable = DEFAULT_PARTNER_TABLE,
        config: CombinationConfig = CombinationConfig(),
    ) -> None:
        self.coupon_repo = coupon_repo
        self.store_repo = store_repo
        self.redemption_repo = redemption_repo
        self.partner_table = partner_table
        self.config = config

    def _load_coupons(self, coupon_ids: list[str]) -> list[Coupon]:
        if not coupon_ids:
            raise EmptySelectionError("Coupon ids are required")

        requested = list(dict.fromkeys(coupon_ids))
        found = self.coupon_repo.get_coupons_by_ids(requested)
        found_by_id = {coupon.id: coupon for coupon in found}
        missing = [coupon_id for coupon_id in requested if coupon_id not in found_by_id]
        # Each requested id must resolve to its own coupon row
        repeated = [coupon_id for coupon_id in requested if coupon_ids.count(coupon_id) > 1]
        if missing or repeated:
            logger.info(
                f"Combination check rejected, found {len(found_by_id)} of {len(coupon_ids)} requested coupons"
            )
            raise CouponsNotFoundError(missing, repeated_ids=repeated)

        return [found_by_id[coupon_id] for coupon_id in coupon_ids]

    def _resolve_affiliation(self, coupons: list[Coupon], store_id: str | None) -> StoreAffiliation:
        store_ids = {coupon.store_id for coupon in coupons if coupon.store_id}
        if store_id:
            store_ids.add(StoreId(store_id))
        try:
            stores = self.store_repo.get_stores_by_ids(sorted(store_ids))
        except Exception as e:
            logger.warning(f"Store lookup failed, skipping partner rules: {e}")
            stores = []
        return build_affiliation(stores, target_store_id=store_id, table=self.partner_table)

    def validate_selection(self, coupon_ids: list[str], store_id: str | None = None) -> ValidationResult:
        coupons = self._load_coupons(coupon_ids)
        affiliation = self._resolve_affiliation(coupons, store_id)
        result = validate(
            coupons,
            target_store_id=store_id,
            affiliation=affiliation,
            partner_table=self.partner_table,
            config=self.config,
        )
        logger.debug(
            f"Validated {len(coupons)} coupons for store {store_id or '-'}: "
            f"valid={result.valid} conflicts={len(result.conflicts)}"
        )
        return result

    def capacity(self, coupon_ids: list[str]) -> MaxCombinable:
        return max_combinable(self._load_coupons(coupon_ids))

    def check_account_usage(self, coupon_id: str, payback_account_id: str) -> ValidationResult:
        """Check whether a coupon was already redeemed for a loyalty account."""
        if self.redemption_repo is None:
            raise RedemptionLookupError("No redemption repository configured")
        try:
            redeemed = self.redemption_repo.has_redemption(coupon_id, payback_account_id)
        except Exception as e:
            logger.error(f"Error reading redemption history for coupon {coupon_id}: {e}")
            raise RedemptionLookupError("Error while checking the redemption history") from e

        if redeemed:
            return ValidationResult(
                conflicts=["Coupon already redeemed for this Payback account"],
                codes=[rules.RULE_ALREADY_REDEEMED],
            )
        return ValidationResult()
