"""Repository reading coupons, stores and redemptions from Databricks tables."""

from __future__ import annotations

import json
import logging
from typing import Any

from coupon_runtime.adapters.databricks.client import DatabricksSqlClient
from coupon_runtime.domain.combination.models import Coupon, Store
from coupon_runtime.settings import Settings

logger = logging.getLogger(__name__)


class DatabricksCouponRepository:
    """Implements CouponRepository, StoreRepository and RedemptionRepository."""

    def __init__(self, client: DatabricksSqlClient, settings: Settings) -> None:
        self.client = client
        self.settings = settings
        self.coupons_table_name = f"{settings.databricks_table_prefix}coupons"
        self.product_categories_table_name = f"{settings.databricks_table_prefix}product_categories"
        self.stores_table_name = f"{settings.databricks_table_prefix}stores"
        self.redemptions_table_name = f"{settings.databricks_table_prefix}coupon_redemptions"

    def _build_table_name(self, table_name: str) -> str:
        """Build fully qualified table name with catalog and schema if specified."""
        parts = []
        if self.settings.databricks_catalog:
            parts.append(self.settings.databricks_catalog)
        if self.settings.databricks_schema:
            parts.append(self.settings.databricks_schema)
        parts.append(table_name)
        return ".".join(parts)

    def _parse_json_field(self, value: Any) -> Any:
        """Parse a JSON column; structured values pass through unchanged."""
        if value is None:
            return None
        if not isinstance(value, str):
            return value
        if not value:
            return None
        try:
            return json.loads(value)
        except (json.JSONDecodeError, TypeError) as e:
            logger.warning(f"Failed to parse JSON field: {e}")
            return None

    def get_coupons_by_ids(self, coupon_ids: list[str]) -> list[Coupon]:
        if not coupon_ids:
            return []

        coupons_table = self._build_table_name(self.coupons_table_name)
        categories_table = self._build_table_name(self.product_categories_table_name)
        placeholders = ",".join(["?"] * len(coupon_ids))
        sql = f"""
        SELECT
            c.id,
            c.category,
            c.product_category_id,
            c.artikel_id,
            c.is_combinable,
            c.combination_rules,
            c.combinable_with_categories,
            c.store_id,
            c.title,
            pc.name AS product_category_name
        FROM {coupons_table} c
        LEFT JOIN {categories_table} pc ON pc.id = c.product_category_id
        WHERE c.id IN ({placeholders})
        """

        rows = self.client.query(sql, params=list(coupon_ids))

        coupons: list[Coupon] = []
        for row in rows:
            record = dict(row)
            record["combination_rules"] = self._parse_json_field(row.get("combination_rules"))
            combinable_with = self._parse_json_field(row.get("combinable_with_categories"))
            record["combinable_with_categories"] = list(combinable_with) if combinable_with is not None else None
            coupons.append(Coupon.from_record(record))
        return coupons

    def get_stores_by_ids(self, store_ids: list[str]) -> list[Store]:
        if not store_ids:
            return []

        stores_table = self._build_table_name(self.stores_table_name)
        placeholders = ",".join(["?"] * len(store_ids))
        sql = f"""
        SELECT id, name, chain_code, tags
        FROM {stores_table}
        WHERE id IN ({placeholders})
        """

        rows = self.client.query(sql, params=list(store_ids))
        stores: list[Store] = []
        for row in rows:
            record = dict(row)
            tags = self._parse_json_field(row.get("tags"))
            record["tags"] = list(tags) if tags is not None else []
            stores.append(Store.from_record(record))
        return stores

    def has_redemption(self, coupon_id: str, payback_account_id: str) -> bool:
        redemptions_table = self._build_table_name(self.redemptions_table_name)
        sql = f"""
        SELECT 1 AS found
        FROM {redemptions_table}
        WHERE coupon_id = ? AND payback_account_id = ?
        LIMIT 1
        """
        rows = self.client.query(sql, params=[coupon_id, payback_account_id])
        return len(rows) > 0
