"""
dtconn webhook handler.

Receives event notifications from the monitoring platform, one event per
request, and appends each one as a row to the configured BigQuery table.

Pipeline per request: decode body -> check signature -> project -> insert.
"""

import logging

from fastapi import APIRouter, Depends, Header, Response, status

from ..config import Settings, get_settings
from ..errors import AuthenticationError
from ..models import IngestRequest
from ..projection import project_row
from ..validators import verify_signature
from ..warehouse import BigQueryWarehouse, get_warehouse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["dtconn"])


@router.post("/dtconn", status_code=status.HTTP_200_OK)
async def dtconn_webhook(
    payload: IngestRequest,
    x_dt_signature: str = Header(...),
    settings: Settings = Depends(get_settings),
    warehouse: BigQueryWarehouse = Depends(get_warehouse),
) -> Response:
    """
    Handle a dtconn event notification.

    The body has already been decoded and validated by the time this runs;
    a malformed body or a missing x-dt-signature header is answered with
    400 before the signature is looked at.

    Header: x-dt-signature (HS256 JWT signed with the shared secret)
    """
    if not verify_signature(x_dt_signature, settings.signature.get_secret_value()):
        raise AuthenticationError("Invalid signature")

    event_id = payload.event.event_id
    row = project_row(payload)
    await warehouse.insert_row(row, insert_id=event_id)

    logger.info(
        f"dtconn {payload.event.event_type} event inserted into {settings.table_ref}, "
        f"event_id={event_id}"
    )

    return Response(status_code=status.HTTP_200_OK)
