"""Tracking ledger endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from fastapi_cargospace.dependencies import get_ledger
from fastapi_cargospace.schemas import (
    AppendTrackingEventRequest,
    TrackingEventResponse,
)
from fastapi_cargospace.tracking import TrackingLedger

router = APIRouter(tags=["tracking"])


@router.post(
    "/tracking", response_model=TrackingEventResponse, status_code=201
)
async def append_tracking_event(
    body: AppendTrackingEventRequest,
    ledger: TrackingLedger = Depends(get_ledger),
) -> TrackingEventResponse:
    """Append an event; ``pickup`` and ``delivered`` advance the shipment."""
    event = await ledger.append_event(body)
    return TrackingEventResponse.from_event(event)
