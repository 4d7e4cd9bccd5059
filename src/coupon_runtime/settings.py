from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Settings:
    """Runtime settings sourced from environment variables."""

    log_level: str = "INFO"
    runtime_adapters: str = "memory"
    coupon_data_path: Optional[str] = None
    partner_rules_path: Optional[str] = None
    # Combination validator defaults
    volume_warning_threshold: int = 5
    recommendation_min_product_groups: int = 2
    # Databricks settings
    databricks_server_hostname: Optional[str] = None
    databricks_http_path: Optional[str] = None
    databricks_access_token: Optional[str] = None
    databricks_catalog: Optional[str] = None
    databricks_schema: Optional[str] = None
    databricks_table_prefix: str = ""

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            log_level=os.getenv("LOG_LEVEL", cls.log_level),
            runtime_adapters=os.getenv("RUNTIME_ADAPTERS", cls.runtime_adapters).lower(),
            coupon_data_path=os.getenv("COUPON_DATA_PATH"),
            partner_rules_path=os.getenv("PARTNER_RULES_PATH"),
            volume_warning_threshold=int(os.getenv("VOLUME_WARNING_THRESHOLD", cls.volume_warning_threshold)),
            recommendation_min_product_groups=int(
                os.getenv("RECOMMENDATION_MIN_PRODUCT_GROUPS", cls.recommendation_min_product_groups)
            ),
            databricks_server_hostname=os.getenv("DATABRICKS_SERVER_HOSTNAME"),
            databricks_http_path=os.getenv("DATABRICKS_HTTP_PATH"),
            databricks_access_token=os.getenv("DATABRICKS_ACCESS_TOKEN"),
            databricks_catalog=os.getenv("DATABRICKS_CATALOG"),
            databricks_schema=os.getenv("DATABRICKS_SCHEMA"),
            databricks_table_prefix=os.getenv("DATABRICKS_TABLE_PREFIX", cls.databricks_table_prefix),
        )


def get_settings(_cache: dict[str, Settings] = {}) -> Settings:
    """Provide a simple cached settings object."""

    if "settings" not in _cache:
        _cache["settings"] = Settings.from_env()
    return _cache["settings"]
