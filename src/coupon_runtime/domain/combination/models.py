from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping

from coupon_runtime.domain.common.ids import CouponId, PartnerKey, StoreId

logger = logging.getLogger(__name__)


class CouponCategory(str, Enum):
    """Closed set of coupon categories that drive combination rules."""

    WHOLE_PURCHASE = "whole-purchase"
    PRODUCT_GROUP = "product-group"
    SINGLE_ITEM = "single-item"

    @classmethod
    def parse(cls, value: Any) -> "CouponCategory | None":
        """
        Parse a raw category value.

        Accepts the enum values and the legacy persisted values
        (einkauf, warengruppe, artikel). Anything else is an unknown
        category and parses to None.
        """
        if isinstance(value, CouponCategory):
            return value
        if not isinstance(value, str):
            return None
        normalized = value.strip().lower().replace("_", "-")
        if normalized in _LEGACY_CATEGORIES:
            return _LEGACY_CATEGORIES[normalized]
        try:
            return cls(normalized)
        except ValueError:
            return None


_LEGACY_CATEGORIES: dict[str, CouponCategory] = {
    "einkauf": CouponCategory.WHOLE_PURCHASE,
    "warengruppe": CouponCategory.PRODUCT_GROUP,
    "artikel": CouponCategory.SINGLE_ITEM,
}


def _parse_limit(value: Any) -> int | None:
    """Parse a per-transaction limit; an unparseable value counts as unset."""
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        logger.warning(f"Ignoring invalid max_per_transaction value: {value!r}")
        return None


@dataclass(frozen=True)
class CombinationRules:
    """Combination metadata declared on a single coupon."""

    max_per_transaction: int | None = None
    incompatible_categories: tuple[str, ...] = ()  # product_group_id values
    partner_specific_note: str | None = None

    @staticmethod
    def from_record(data: Mapping[str, Any] | None) -> "CombinationRules | None":
        if not data:
            return None
        max_per_transaction = data.get("max_per_transaction", data.get("maxPerTransaction"))
        incompatible = data.get("incompatible_categories", data.get("incompatibleCategories")) or ()
        note = data.get(
            "partner_specific_rules",
            data.get("partner_specific_note", data.get("partnerSpecificNote")),
        )
        return CombinationRules(
            max_per_transaction=_parse_limit(max_per_transaction),
            incompatible_categories=tuple(str(value) for value in incompatible),
            partner_specific_note=note,
        )


@dataclass(frozen=True)
class Coupon:
    """Read-only projection of a persisted coupon, as seen by the validator."""

    id: CouponId
    category: CouponCategory | None  # None means unknown category
    is_combinable: bool
    store_id: StoreId | None
    title: str = ""
    product_group_id: str | None = None
    product_group_name: str | None = None
    item_id: str | None = None
    combination_rules: CombinationRules | None = None
    combinable_with_categories: tuple[CouponCategory, ...] | None = None

    @staticmethod
    def new(
        id: str,
        category: CouponCategory | str | None,
        is_combinable: bool = True,
        store_id: str | None = None,
        title: str = "",
        product_group_id: str | None = None,
        product_group_name: str | None = None,
        item_id: str | None = None,
        combination_rules: CombinationRules | None = None,
        combinable_with_categories: list[CouponCategory | str] | None = None,
    ) -> "Coupon":
        combinable_with = None
        if combinable_with_categories is not None:
            parsed = (CouponCategory.parse(value) for value in combinable_with_categories)
            combinable_with = tuple(value for value in parsed if value is not None)
        return Coupon(
            id=CouponId(id),
            category=CouponCategory.parse(category),
            is_combinable=is_combinable,
            store_id=StoreId(store_id) if store_id else None,
            title=title or id,
            product_group_id=product_group_id or None,
            product_group_name=product_group_name,
            item_id=item_id or None,
            combination_rules=combination_rules,
            combinable_with_categories=combinable_with,
        )

    @staticmethod
    def from_record(row: Mapping[str, Any]) -> "Coupon":
        """
        Build a Coupon from a persisted coupon row.

        Missing optional fields degrade to their defaults. A missing
        is_combinable flag counts as combinable, matching the column default.
        """
        product_categories = row.get("product_categories") or {}
        if isinstance(product_categories, list):
            product_categories = product_categories[0] if product_categories else {}
        is_combinable = row.get("is_combinable")
        return Coupon.new(
            id=str(row["id"]),
            category=row.get("category"),
            is_combinable=True if is_combinable is None else bool(is_combinable),
            store_id=row.get("store_id"),
            title=row.get("title") or "",
            product_group_id=row.get("product_category_id") or row.get("warengruppe_id"),
            product_group_name=product_categories.get("name") or row.get("product_category_name"),
            item_id=row.get("artikel_id") or row.get("item_id"),
            combination_rules=CombinationRules.from_record(row.get("combination_rules")),
            combinable_with_categories=row.get("combinable_with_categories"),
        )


@dataclass(frozen=True)
class Store:
    """Store identity used for partner detection."""

    id: StoreId
    name: str = ""
    chain_code: str | None = None
    tags: tuple[str, ...] = ()

    @staticmethod
    def from_record(row: Mapping[str, Any]) -> "Store":
        return Store(
            id=StoreId(str(row["id"])),
            name=row.get("name") or "",
            chain_code=row.get("chain_code"),
            tags=tuple(row.get("tags") or ()),
        )


@dataclass(frozen=True)
class StoreAffiliation:
    """
    Partner affiliation of the stores involved in one validation.

    When a target store is set, its partners apply to every coupon in the
    set. Otherwise each coupon is judged by its own store's partners.
    """

    target_store_id: StoreId | None = None
    partners_by_store: Mapping[str, frozenset[PartnerKey]] = field(default_factory=dict)

    def partners_for(self, coupon: Coupon) -> frozenset[PartnerKey]:
        store_id = self.target_store_id or coupon.store_id
        if store_id is None:
            return frozenset()
        return self.partners_by_store.get(store_id, frozenset())


@dataclass(frozen=True)
class CombinationConfig:
    volume_warning_threshold: int = 5
    recommendation_min_product_groups: int = 2


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of a combination check. valid is True iff conflicts is empty."""

    conflicts: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)
    codes: list[str] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.conflicts

    def to_dict(self) -> dict[str, Any]:
        return {
            "valid": self.valid,
            "conflicts": list(self.conflicts),
            "warnings": list(self.warnings),
            "recommendations": list(self.recommendations),
            "codes": list(self.codes),
        }


@dataclass(frozen=True)
class Finding:
    """A single detected condition with its rule code and rendered message."""

    code: str
    message: str
