"""Append-only tracking ledger."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from fastapi_cargospace.entities import TrackingEvent
from fastapi_cargospace.fsm import TRACKING_EVENT_TRANSITIONS
from fastapi_cargospace.protocols import EntityStore
from fastapi_cargospace.schemas import AppendTrackingEventRequest
from fastapi_cargospace.workflow import (
    advance_shipment,
    parse_input,
    require_shipment,
)

logger = logging.getLogger(__name__)


class TrackingLedger:
    """Records and replays the location history of shipments.

    Events are never updated or removed. The canonical order is ascending
    by timestamp, so the current position of a shipment is the event with
    the latest timestamp, which may not be the one appended last.
    """

    def __init__(self, store: EntityStore) -> None:
        self.store = store

    async def append_event(
        self, data: AppendTrackingEventRequest | Mapping[str, Any]
    ) -> TrackingEvent:
        request = parse_input(AppendTrackingEventRequest, data)
        async with self.store.unit_of_work() as uow:
            shipment = await require_shipment(uow, request.shipment_id)
            target = TRACKING_EVENT_TRANSITIONS.get(request.event_type)
            if target is not None:
                await advance_shipment(uow, shipment, target)
            event = await uow.append_tracking_event(**request.model_dump())
        logger.info(
            "Tracking event %s (%s) recorded for shipment %s",
            event.id,
            event.event_type,
            event.shipment_id,
        )
        return event

    async def list_events(self, shipment_id: int) -> list[TrackingEvent]:
        async with self.store.unit_of_work() as uow:
            await require_shipment(uow, shipment_id)
            return await uow.list_tracking_events(shipment_id)

    async def current_event(self, shipment_id: int) -> TrackingEvent | None:
        events = await self.list_events(shipment_id)
        return events[-1] if events else None
