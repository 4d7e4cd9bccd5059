from __future__ import annotations

from collections.abc import Callable, Sequence

from coupon_runtime.domain.combination import rules
from coupon_runtime.domain.combination.identity import GroupKey, item_key, product_group_key
from coupon_runtime.domain.combination.models import (
    CombinationConfig,
    Coupon,
    CouponCategory,
    Finding,
)


def join_titles(coupons: Sequence[Coupon]) -> str:
    """Join coupon titles in sorted order so messages do not depend on input order."""
    return ", ".join(sorted(f'"{coupon.title}"' for coupon in coupons))


def of_category(coupons: Sequence[Coupon], category: CouponCategory) -> list[Coupon]:
    return [coupon for coupon in coupons if coupon.category is category]


def group_by(
    coupons: Sequence[Coupon], key: Callable[[Coupon], GroupKey]
) -> dict[GroupKey, list[Coupon]]:
    """Group coupons by key, preserving first-seen order of the groups."""
    groups: dict[GroupKey, list[Coupon]] = {}
    for coupon in coupons:
        groups.setdefault(key(coupon), []).append(coupon)
    return groups


def check_non_combinable(coupons: Sequence[Coupon]) -> list[Finding]:
    """A non-combinable coupon only conflicts when selected together with others."""
    if len(coupons) <= 1:
        return []
    offenders = [coupon for coupon in coupons if not coupon.is_combinable]
    if not offenders:
        return []
    return [
        Finding(
            rules.RULE_NON_COMBINABLE,
            f"These coupons cannot be combined with other coupons: {join_titles(offenders)}",
        )
    ]


def check_store_consistency(coupons: Sequence[Coupon], target_store_id: str | None) -> list[Finding]:
    if not target_store_id:
        return []
    if all(coupon.store_id == target_store_id for coupon in coupons):
        return []
    return [Finding(rules.RULE_STORE_MISMATCH, "All coupons must belong to the same store")]


def check_whole_purchase_exclusive(coupons: Sequence[Coupon]) -> list[Finding]:
    whole_purchase = of_category(coupons, CouponCategory.WHOLE_PURCHASE)
    if len(whole_purchase) <= 1:
        return []
    return [
        Finding(
            rules.RULE_WHOLE_PURCHASE_EXCLUSIVE,
            "Only one whole-purchase coupon can be used per transaction. "
            f"Found: {join_titles(whole_purchase)}",
        )
    ]


def check_product_group_unique(coupons: Sequence[Coupon]) -> list[Finding]:
    groups = group_by(of_category(coupons, CouponCategory.PRODUCT_GROUP), product_group_key)
    findings: list[Finding] = []
    for group_coupons in groups.values():
        if len(group_coupons) <= 1:
            continue
        names = sorted(c.product_group_name for c in group_coupons if c.product_group_name)
        group_name = names[0] if names else group_coupons[0].product_group_id or rules.UNKNOWN_PRODUCT_GROUP_NAME
        findings.append(
            Finding(
                rules.RULE_PRODUCT_GROUP_DUPLICATE,
                f'Only one coupon per product group is allowed. Several coupons found for "{group_name}": '
                f"{join_titles(group_coupons)}",
            )
        )
    return findings


def check_single_item_unique(coupons: Sequence[Coupon]) -> list[Finding]:
    groups = group_by(of_category(coupons, CouponCategory.SINGLE_ITEM), item_key)
    return [
        Finding(
            rules.RULE_SINGLE_ITEM_DUPLICATE,
            "Only one coupon per item is allowed. Several coupons found for the same item: "
            f"{join_titles(group_coupons)}",
        )
        for group_coupons in groups.values()
        if len(group_coupons) > 1
    ]


def check_max_per_transaction(coupons: Sequence[Coupon]) -> list[Finding]:
    findings: list[Finding] = []
    for coupon in coupons:
        limit = coupon.combination_rules.max_per_transaction if coupon.combination_rules else None
        if limit is not None and len(coupons) > limit:
            findings.append(
                Finding(
                    rules.RULE_MAX_PER_TRANSACTION,
                    f'"{coupon.title}" allows at most {limit} coupon(s) per transaction',
                )
            )
    return findings


def check_incompatible_groups(coupons: Sequence[Coupon]) -> list[Finding]:
    findings: list[Finding] = []
    for index, coupon in enumerate(coupons):
        if not coupon.combination_rules or not coupon.combination_rules.incompatible_categories:
            continue
        incompatible = set(coupon.combination_rules.incompatible_categories)
        clashing = [
            other
            for other_index, other in enumerate(coupons)
            if other_index != index and other.product_group_id in incompatible
        ]
        if clashing:
            findings.append(
                Finding(
                    rules.RULE_INCOMPATIBLE_GROUP,
                    f'"{coupon.title}" is not compatible with coupons from these product groups: '
                    f"{join_titles(clashing)}",
                )
            )
    return findings


def check_declared_categories(coupons: Sequence[Coupon]) -> list[Finding]:
    """
    Enforce combinable_with_categories lists declared on coupons.

    A pair clashes when either coupon declares a list that does not contain
    the other coupon's category. Coupons with an unknown category are skipped.
    """
    pairs: list[str] = []
    for i, first in enumerate(coupons):
        for second in coupons[i + 1 :]:
            if _declares_against(first, second) or _declares_against(second, first):
                pairs.append(" + ".join(sorted((f'"{first.title}"', f'"{second.title}"'))))
    if not pairs:
        return []
    return [
        Finding(
            rules.RULE_CATEGORY_NOT_COMBINABLE,
            f"These coupon combinations are not allowed: {', '.join(sorted(pairs))}",
        )
    ]


def _declares_against(coupon: Coupon, other: Coupon) -> bool:
    if coupon.combinable_with_categories is None or other.category is None:
        return False
    return other.category not in coupon.combinable_with_categories


def check_single_item_volume(coupons: Sequence[Coupon], config: CombinationConfig) -> list[Finding]:
    if len(of_category(coupons, CouponCategory.SINGLE_ITEM)) < config.volume_warning_threshold:
        return []
    return [
        Finding(
            rules.RULE_SINGLE_ITEM_VOLUME,
            "Many single-item coupons selected. Check that all items are in the cart.",
        )
    ]


def check_high_value_combination(coupons: Sequence[Coupon], config: CombinationConfig) -> list[Finding]:
    whole_purchase = of_category(coupons, CouponCategory.WHOLE_PURCHASE)
    product_group = of_category(coupons, CouponCategory.PRODUCT_GROUP)
    if len(whole_purchase) == 1 and len(product_group) >= config.recommendation_min_product_groups:
        return [
            Finding(
                rules.RULE_HIGH_VALUE_COMBINATION,
                "Excellent combination: one whole-purchase coupon with several product-group coupons "
                "maximizes the points earned",
            )
        ]
    return []
