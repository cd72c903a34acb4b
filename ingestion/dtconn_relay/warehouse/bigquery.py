"""
BigQuery client for appending webhook events.

Uses the streaming insert API (tabledata.insertAll) with the event id as
insertId, so redelivered events are deduplicated by BigQuery on a
best-effort basis. The client is blocking; inserts run in the thread pool so
one slow insert does not stall other requests.
"""

import logging
from typing import Optional

from google.api_core.exceptions import GoogleAPIError
from google.auth.exceptions import DefaultCredentialsError, GoogleAuthError
from google.cloud import bigquery
from starlette.concurrency import run_in_threadpool

from ..config import Settings, get_settings
from ..errors import AuthClientError, UpstreamInsertError
from ..models import WarehouseRow

logger = logging.getLogger(__name__)


class BigQueryWarehouse:
    """
    Async facade over the BigQuery client for single-row inserts.

    Provides:
    - Client construction from Application Default Credentials
    - Off-loop execution of the blocking insert call
    - Mapping of every insert failure to UpstreamInsertError
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        client: Optional[bigquery.Client] = None,
    ):
        """
        Initialize the warehouse handle.

        Args:
            settings: Optional settings override (uses env vars by default)
            client: Optional pre-built BigQuery client
        """
        self.settings = settings or get_settings()
        self._client = client
        self._started = client is not None

    async def start(self) -> None:
        """Build the authenticated client."""
        if self._started:
            return

        try:
            self._client = bigquery.Client(project=self.settings.project_id)
        except DefaultCredentialsError as e:
            raise AuthClientError(f"Failed to create BigQuery client: {e}") from e

        self._started = True
        logger.info(
            f"BigQuery client started, project={self.settings.project_id}, "
            f"table={self.settings.table_ref}"
        )

    async def stop(self) -> None:
        """Close the client's transport."""
        if self._client and self._started:
            self._client.close()
            self._started = False
            logger.info("BigQuery client stopped")

    async def insert_row(self, row: WarehouseRow, insert_id: str) -> None:
        """
        Append one row to the destination table.

        Args:
            row: Projected row
            insert_id: Deduplication id for BigQuery (the event id)

        Raises:
            UpstreamInsertError: If the call fails or BigQuery rejects the row
        """
        if not self._started or not self._client:
            logger.error("BigQuery client not started, cannot insert row")
            raise UpstreamInsertError("BigQuery client not started")

        table = self.settings.table_ref
        try:
            errors = await run_in_threadpool(
                self._client.insert_rows_json,
                table,
                [row.model_dump()],
                row_ids=[insert_id],
                # Single attempt, no client-side retry
                retry=None,
                timeout=self.settings.insert_timeout,
            )
        except (GoogleAPIError, GoogleAuthError, OSError) as e:
            logger.error(f"Failed to insert row into {table}: {e}")
            raise UpstreamInsertError(f"Insert into {table} failed") from e

        if errors:
            logger.error(f"BigQuery rejected row for {table}: {errors}")
            raise UpstreamInsertError(f"Insert into {table} rejected")

        logger.debug(f"Row inserted into {table}, insert_id={insert_id}")


# Global warehouse instance (initialized on startup)
_warehouse: Optional[BigQueryWarehouse] = None


async def get_warehouse() -> BigQueryWarehouse:
    """
    Get the global warehouse instance.

    Creates and starts the client if not already initialized.

    Returns:
        Initialized BigQueryWarehouse instance
    """
    global _warehouse
    if _warehouse is None:
        warehouse = BigQueryWarehouse()
        await warehouse.start()
        _warehouse = warehouse
    return _warehouse


async def shutdown_warehouse() -> None:
    """Shutdown the global warehouse instance."""
    global _warehouse
    if _warehouse is not None:
        await _warehouse.stop()
        _warehouse = None
