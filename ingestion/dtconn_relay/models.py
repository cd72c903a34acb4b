"""
Request and row models.

Inbound payloads use camelCase keys on the wire; the BigQuery row uses the
snake_case column names of the destination table.
"""

from typing import Any, Dict

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class Event(BaseModel):
    """A single notification about something that happened on a monitored target."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    event_id: str
    target_name: str
    event_type: str
    # Taken verbatim, never parsed as a date
    timestamp: str
    data: Dict[str, Any]


class IngestRequest(BaseModel):
    """Body of a POST /dtconn call: one event plus caller-supplied labels."""

    model_config = ConfigDict(frozen=True)

    event: Event
    labels: Dict[str, str]


class WarehouseRow(BaseModel):
    """
    Flat projection of an IngestRequest.

    Field names and order must match the destination table schema.
    """

    model_config = ConfigDict(frozen=True)

    event_id: str
    target_name: str
    event_type: str
    timestamp: str
    data: str
    labels: str
