"""Projection of validated requests onto the BigQuery row layout."""

import json
import logging
from typing import Any

from .models import IngestRequest, WarehouseRow

logger = logging.getLogger(__name__)

EMPTY_OBJECT = "{}"


def _to_json_text(value: Any, field: str) -> str:
    """Serialize to compact JSON, falling back to an empty object."""
    try:
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False, allow_nan=False)
    except (TypeError, ValueError) as e:
        logger.warning(f"Could not serialize {field}, storing {EMPTY_OBJECT}: {e}")
        return EMPTY_OBJECT


def project_row(request: IngestRequest) -> WarehouseRow:
    """
    Map a request to the destination table's six text columns.

    `data` and `labels` are serialized independently so that a failure in
    one does not affect the other. Never raises for a decoded request.

    Args:
        request: Decoded ingest request

    Returns:
        Row ready to be inserted
    """
    event = request.event
    return WarehouseRow(
        event_id=event.event_id,
        target_name=event.target_name,
        event_type=event.event_type,
        timestamp=event.timestamp,
        data=_to_json_text(event.data, "data"),
        labels=_to_json_text(request.labels, "labels"),
    )
