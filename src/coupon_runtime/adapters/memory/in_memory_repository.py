from __future__ import annotations

import json
from pathlib import Path
from typing import Iterable, Optional

from coupon_runtime.domain.combination.models import Coupon, Store


class InMemoryCouponStore:
    """Coupons, stores and redemptions held in memory.

    Implements CouponRepository, StoreRepository and RedemptionRepository.
    """

    def __init__(
        self,
        coupons: Optional[Iterable[Coupon]] = None,
        stores: Optional[Iterable[Store]] = None,
        redemptions: Optional[Iterable[tuple[str, str]]] = None,
    ) -> None:
        self.coupons: dict[str, Coupon] = {coupon.id: coupon for coupon in coupons or []}
        self.stores: dict[str, Store] = {store.id: store for store in stores or []}
        self.redemptions: set[tuple[str, str]] = set(redemptions or [])

    @classmethod
    def from_json_file(cls, path: str | Path) -> "InMemoryCouponStore":
        """
        Load fixture data from a JSON file of the form
        {"coupons": [...], "stores": [...], "redemptions": [{coupon_id, payback_account_id}]}
        using the persisted snake_case record layout.
        """
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        return cls(
            coupons=[Coupon.from_record(row) for row in data.get("coupons", [])],
            stores=[Store.from_record(row) for row in data.get("stores", [])],
            redemptions=[
                (row["coupon_id"], row["payback_account_id"]) for row in data.get("redemptions", [])
            ],
        )

    def get_coupons_by_ids(self, coupon_ids: list[str]) -> list[Coupon]:
        return [self.coupons[coupon_id] for coupon_id in coupon_ids if coupon_id in self.coupons]

    def get_stores_by_ids(self, store_ids: list[str]) -> list[Store]:
        return [self.stores[store_id] for store_id in store_ids if store_id in self.stores]

    def has_redemption(self, coupon_id: str, payback_account_id: str) -> bool:
        return (coupon_id, payback_account_id) in self.redemptions

    def add_redemption(self, coupon_id: str, payback_account_id: str) -> None:
        self.redemptions.add((coupon_id, payback_account_id))
