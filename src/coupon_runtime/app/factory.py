from __future__ import annotations

from typing import Optional

from coupon_runtime.adapters.config.partner_rules_loader import load_partner_table
from coupon_runtime.adapters.databricks.client import DatabricksSqlClient
from coupon_runtime.adapters.databricks.coupon_repo import DatabricksCouponRepository
from coupon_runtime.adapters.memory.in_memory_repository import InMemoryCouponStore
from coupon_runtime.application.combination_service import CombinationService
from coupon_runtime.domain.combination.models import CombinationConfig
from coupon_runtime.domain.common.ids import CorrelationId
from coupon_runtime.settings import Settings, get_settings


def create_combination_service(
    settings: Optional[Settings] = None,
    correlation_id: str | None = None,
) -> CombinationService:
    """
    Factory function to wire the combination service based on RUNTIME_ADAPTERS.

    If RUNTIME_ADAPTERS=databricks, coupons, stores and redemptions are read
    from Databricks. Otherwise an in-memory store is used, seeded from
    COUPON_DATA_PATH when set.
    """
    settings = settings or get_settings()

    if settings.runtime_adapters == "databricks":
        required_settings = [
            ("DATABRICKS_SERVER_HOSTNAME", settings.databricks_server_hostname),
            ("DATABRICKS_HTTP_PATH", settings.databricks_http_path),
            ("DATABRICKS_ACCESS_TOKEN", settings.databricks_access_token),
        ]
        missing = [name for name, value in required_settings if not value]
        if missing:
            raise ValueError(f"Missing required Databricks settings: {', '.join(missing)}")

        client = DatabricksSqlClient(settings, CorrelationId(correlation_id) if correlation_id else None)
        repository = DatabricksCouponRepository(client, settings)
    elif settings.coupon_data_path:
        repository = InMemoryCouponStore.from_json_file(settings.coupon_data_path)
    else:
        repository = InMemoryCouponStore()

    return CombinationService(
        coupon_repo=repository,
        store_repo=repository,
        redemption_repo=repository,
        partner_table=load_partner_table(settings.partner_rules_path),
        config=CombinationConfig(
            volume_warning_threshold=settings.volume_warning_threshold,
            recommendation_min_product_groups=settings.recommendation_min_product_groups,
        ),
    )
