from __future__ import annotations

from typing import Protocol

from coupon_runtime.domain.combination.models import Store


class StoreRepository(Protocol):
    def get_stores_by_ids(self, store_ids: list[str]) -> list[Store]: ...
