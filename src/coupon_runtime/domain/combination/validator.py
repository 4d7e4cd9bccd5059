from __future__ import annotations

from collections.abc import Sequence

from coupon_runtime.domain.combination import checks
from coupon_runtime.domain.combination.models import (
    CombinationConfig,
    Coupon,
    Finding,
    StoreAffiliation,
    ValidationResult,
)
from coupon_runtime.domain.combination.partners import (
    DEFAULT_PARTNER_TABLE,
    PartnerTable,
    apply_partner_rules,
)
from coupon_runtime.domain.common.ids import StoreId


def validate(
    coupons: Sequence[Coupon],
    target_store_id: str | None = None,
    affiliation: StoreAffiliation | None = None,
    partner_table: PartnerTable = DEFAULT_PARTNER_TABLE,
    config: CombinationConfig = CombinationConfig(),
) -> ValidationResult:
    """
    Decide whether a set of coupons may be redeemed together in one transaction.

    Every check runs and all findings are collected; nothing short-circuits.
    Conflicts make the result invalid, warnings and recommendations never do.

    Checks, in message order:
    1. non-combinable coupons selected together with others
    2. coupons from a store other than target_store_id
    3. more than one whole-purchase coupon
    4. several coupons for the same product group
    5. several coupons for the same item
    6. partner limits and recommendations for affiliated stores
    7. coupons whose max_per_transaction is below the set size
    8. coupons declaring another coupon's product group incompatible
    9. coupons declaring another coupon's category not combinable
    10. single-item volume warning
    11. high-value combination recommendation

    Partner rules only apply when affiliation is given; without it no store
    is known to belong to a partner.
    """
    if not coupons:
        return ValidationResult()

    if affiliation is None:
        affiliation = StoreAffiliation(target_store_id=StoreId(target_store_id) if target_store_id else None)

    partner_conflicts, partner_recommendations = apply_partner_rules(affiliation, coupons, partner_table)

    conflicts: list[Finding] = [
        *checks.check_non_combinable(coupons),
        *checks.check_store_consistency(coupons, target_store_id),
        *checks.check_whole_purchase_exclusive(coupons),
        *checks.check_product_group_unique(coupons),
        *checks.check_single_item_unique(coupons),
        *partner_conflicts,
        *checks.check_max_per_transaction(coupons),
        *checks.check_incompatible_groups(coupons),
        *checks.check_declared_categories(coupons),
    ]
    warnings = checks.check_single_item_volume(coupons, config)
    recommendations = [
        *partner_recommendations,
        *checks.check_high_value_combination(coupons, config),
    ]

    return ValidationResult(
        conflicts=[finding.message for finding in conflicts],
        warnings=[finding.message for finding in warnings],
        recommendations=[finding.message for finding in recommendations],
        codes=[finding.code for finding in (*conflicts, *warnings, *recommendations)],
    )
