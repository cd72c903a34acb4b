"""BigQuery client for appending webhook events."""

from .bigquery import BigQueryWarehouse, get_warehouse, shutdown_warehouse

__all__ = ["BigQueryWarehouse", "get_warehouse", "shutdown_warehouse"]
