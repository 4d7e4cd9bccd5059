"""
Partner-specific combination rules.

Partners are described by data: a mapping from partner key to a PartnerRule
that knows how to recognise the partner's stores and which extra limits and
recommendations apply there. Adding a partner means adding a table entry.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from coupon_runtime.domain.combination import rules
from coupon_runtime.domain.combination.models import (
    Coupon,
    CouponCategory,
    Finding,
    Store,
    StoreAffiliation,
)
from coupon_runtime.domain.common.ids import PartnerKey, StoreId


@dataclass(frozen=True)
class CouponSelector:
    """Selects coupons by category and/or case-insensitive title keywords."""

    keywords: tuple[str, ...] = ()
    category: CouponCategory | None = None

    def matches(self, coupon: Coupon) -> bool:
        if self.category is not None and coupon.category is not self.category:
            return False
        if not self.keywords:
            return True
        title = coupon.title.lower()
        return any(keyword.lower() in title for keyword in self.keywords)

    def select(self, coupons: Sequence[Coupon]) -> list[Coupon]:
        return [coupon for coupon in coupons if self.matches(coupon)]


@dataclass(frozen=True)
class PartnerLimit:
    selector: CouponSelector
    max_count: int
    message: str


@dataclass(frozen=True)
class SelectorRequirement:
    selector: CouponSelector
    min_count: int = 1
    max_count: int | None = None

    def is_met(self, coupons: Sequence[Coupon]) -> bool:
        count = len(self.selector.select(coupons))
        if count < self.min_count:
            return False
        return self.max_count is None or count <= self.max_count


@dataclass(frozen=True)
class PartnerRecommendation:
    requirements: tuple[SelectorRequirement, ...]
    message: str


@dataclass(frozen=True)
class PartnerRule:
    key: PartnerKey
    name: str
    chain_codes: tuple[str, ...] = ()
    tags: tuple[str, ...] = ()
    limits: tuple[PartnerLimit, ...] = ()
    recommendations: tuple[PartnerRecommendation, ...] = ()

    def matches_store(self, store: Store) -> bool:
        """Detect the partner by chain code or store tag, case-insensitively."""
        chain_codes = {code.lower() for code in self.chain_codes}
        if store.chain_code and store.chain_code.lower() in chain_codes:
            return True
        partner_tags = {tag.lower() for tag in self.tags}
        return any(tag.lower() in partner_tags for tag in store.tags)


PartnerTable = Mapping[str, PartnerRule]

FUEL_KEYWORDS = ("kraftstoff", "benzin", "diesel", "fuel")
SHOP_KEYWORDS = ("shop", "snack")

DEFAULT_PARTNER_TABLE: PartnerTable = {
    "aral": PartnerRule(
        key=PartnerKey("aral"),
        name="Aral",
        chain_codes=("ARAL",),
        tags=("aral",),
        limits=(
            PartnerLimit(
                selector=CouponSelector(keywords=FUEL_KEYWORDS),
                max_count=1,
                message="Aral: only one fuel coupon is allowed per fill-up",
            ),
        ),
        recommendations=(
            PartnerRecommendation(
                requirements=(
                    SelectorRequirement(CouponSelector(keywords=FUEL_KEYWORDS), min_count=1, max_count=1),
                    SelectorRequirement(CouponSelector(keywords=SHOP_KEYWORDS), min_count=1),
                ),
                message="Tip: fuel and shop coupons can be combined at Aral",
            ),
        ),
    ),
    "dm": PartnerRule(
        key=PartnerKey("dm"),
        name="dm",
        chain_codes=("DM",),
        tags=("dm",),
        limits=(
            PartnerLimit(
                selector=CouponSelector(category=CouponCategory.WHOLE_PURCHASE),
                max_count=1,
                message="dm: only one coupon for the whole purchase is allowed",
            ),
        ),
        recommendations=(
            PartnerRecommendation(
                requirements=(
                    SelectorRequirement(
                        CouponSelector(category=CouponCategory.WHOLE_PURCHASE), min_count=1, max_count=1
                    ),
                    SelectorRequirement(CouponSelector(category=CouponCategory.PRODUCT_GROUP), min_count=1),
                ),
                message="Optimal: at dm a whole-purchase coupon combines with product-group coupons",
            ),
        ),
    ),
}


def detect_partners(store: Store | None, table: PartnerTable = DEFAULT_PARTNER_TABLE) -> frozenset[PartnerKey]:
    """Return the partner keys a store is affiliated with; unknown stores have none."""
    if store is None:
        return frozenset()
    return frozenset(PartnerKey(key) for key, rule in table.items() if rule.matches_store(store))


def build_affiliation(
    stores: Iterable[Store],
    target_store_id: str | None = None,
    table: PartnerTable = DEFAULT_PARTNER_TABLE,
) -> StoreAffiliation:
    partners_by_store = {store.id: detect_partners(store, table) for store in stores}
    return StoreAffiliation(
        target_store_id=StoreId(target_store_id) if target_store_id else None,
        partners_by_store=partners_by_store,
    )


def apply_partner_rules(
    affiliation: StoreAffiliation,
    coupons: Sequence[Coupon],
    table: PartnerTable = DEFAULT_PARTNER_TABLE,
) -> tuple[list[Finding], list[Finding]]:
    """
    Apply partner rules to the coupons that fall under each partner.

    Returns:
        Tuple of (conflicts, recommendations)
    """
    conflicts: list[Finding] = []
    recommendations: list[Finding] = []

    for key, rule in table.items():
        partner_coupons = [coupon for coupon in coupons if key in affiliation.partners_for(coupon)]
        if not partner_coupons:
            continue

        for limit in rule.limits:
            if len(limit.selector.select(partner_coupons)) > limit.max_count:
                conflicts.append(Finding(rules.RULE_PARTNER_LIMIT, limit.message))

        for recommendation in rule.recommendations:
            if all(requirement.is_met(partner_coupons) for requirement in recommendation.requirements):
                recommendations.append(Finding(rules.RULE_PARTNER_RECOMMENDATION, recommendation.message))

    return conflicts, recommendations


def _selector_from_dict(data: Mapping[str, Any]) -> CouponSelector:
    category = data.get("category")
    return CouponSelector(
        keywords=tuple(data.get("keywords", ())),
        category=CouponCategory.parse(category) if category else None,
    )


def partner_table_from_dict(data: Mapping[str, Any]) -> dict[str, PartnerRule]:
    """
    Build a partner table from its JSON representation.

    Expects {"partners": {key: {name, chain_codes, tags, limits, recommendations}}}
    already validated against the partner rules schema.
    """
    table: dict[str, PartnerRule] = {}
    for key, entry in data.get("partners", {}).items():
        limits = tuple(
            PartnerLimit(
                selector=_selector_from_dict(limit["selector"]),
                max_count=int(limit["max_count"]),
                message=limit["message"],
            )
            for limit in entry.get("limits", ())
        )
        recommendations = tuple(
            PartnerRecommendation(
                requirements=tuple(
                    SelectorRequirement(
                        selector=_selector_from_dict(requirement["selector"]),
                        min_count=int(requirement.get("min_count", 1)),
                        max_count=requirement.get("max_count"),
                    )
                    for requirement in recommendation["requirements"]
                ),
                message=recommendation["message"],
            )
            for recommendation in entry.get("recommendations", ())
        )
        table[key] = PartnerRule(
            key=PartnerKey(key),
            name=entry.get("name", key),
            chain_codes=tuple(entry.get("chain_codes", ())),
            tags=tuple(entry.get("tags", ())),
            limits=limits,
            recommendations=recommendations,
        )
    return table
