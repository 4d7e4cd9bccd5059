from __future__ import annotations

import logging
import time
from typing import Any, Callable, Optional

from databricks import sql as databricks_sql

from coupon_runtime.domain.common.ids import CorrelationId
from coupon_runtime.settings import Settings

logger = logging.getLogger(__name__)


class DatabricksSqlClient:
    """Read-only SQL access to the coupon tables through the Databricks SQL Connector."""

    def __init__(self, settings: Settings, correlation_id: Optional[CorrelationId] = None) -> None:
        self.settings = settings
        self.correlation_id = correlation_id
        self._connection: Optional[Any] = None

    def _log_extra(self) -> dict[str, str]:
        if self.correlation_id:
            return {"correlation_id": self.correlation_id.value}
        return {}

    def _connect(self) -> Any:
        if self._connection is not None:
            return self._connection

        missing = [
            name
            for name, value in (
                ("DATABRICKS_SERVER_HOSTNAME", self.settings.databricks_server_hostname),
                ("DATABRICKS_HTTP_PATH", self.settings.databricks_http_path),
                ("DATABRICKS_ACCESS_TOKEN", self.settings.databricks_access_token),
            )
            if not value
        ]
        if missing:
            raise ValueError(f"Databricks connection requires {', '.join(missing)}")

        logger.info(
            f"Connecting to Databricks server: {self.settings.databricks_server_hostname}",
            extra=self._log_extra(),
        )
        connection_params = {
            "server_hostname": self.settings.databricks_server_hostname,
            "http_path": self.settings.databricks_http_path,
            "access_token": self.settings.databricks_access_token,
        }
        if self.settings.databricks_catalog:
            connection_params["catalog"] = self.settings.databricks_catalog
        if self.settings.databricks_schema:
            connection_params["schema"] = self.settings.databricks_schema

        self._connection = databricks_sql.connect(**connection_params)
        return self._connection

    def _with_retry(self, operation: Callable[[], Any], max_retries: int = 3, initial_delay: float = 0.5) -> Any:
        """Run operation, retrying transient failures with exponential backoff."""
        for attempt in range(max_retries):
            try:
                return operation()
            except Exception as e:
                if attempt == max_retries - 1:
                    logger.error(f"Query failed after {max_retries} attempts: {e}", extra=self._log_extra())
                    raise
                delay = initial_delay * (2**attempt)
                logger.warning(
                    f"Query failed (attempt {attempt + 1}/{max_retries}), retrying in {delay}s: {e}",
                    extra=self._log_extra(),
                )
                time.sleep(delay)

    def query(self, sql: str, params: Optional[list[Any]] = None) -> list[dict[str, Any]]:
        """
        Execute a SELECT query and return rows as dictionaries.

        Args:
            sql: SQL query string with ? placeholders
            params: Positional parameters

        Returns:
            List of dictionaries, one per row
        """
        logger.debug(f"Executing query: {sql[:200]}...", extra=self._log_extra())

        def _run() -> list[dict[str, Any]]:
            cursor = self._connect().cursor()
            try:
                if params:
                    cursor.execute(sql, parameters=params)
                else:
                    cursor.execute(sql)
                columns = [desc[0] for desc in cursor.description]
                return [dict(zip(columns, row)) for row in cursor.fetchall()]
            finally:
                cursor.close()

        return self._with_retry(_run)

    def close(self) -> None:
        if self._connection:
            try:
                self._connection.close()
            except Exception as e:
                logger.warning(f"Error closing connection: {e}", extra=self._log_extra())
            finally:
                self._connection = None

    def __enter__(self) -> "DatabricksSqlClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        self.close()
        return False
