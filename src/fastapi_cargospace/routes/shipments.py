"""Shipment endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from fastapi_cargospace.dependencies import get_ledger, get_workflow
from fastapi_cargospace.exceptions import NotFoundError
from fastapi_cargospace.schemas import (
    CreateShipmentRequest,
    ShipmentResponse,
    ShipmentStatusUpdate,
    TrackingEventResponse,
    TransactionResponse,
)
from fastapi_cargospace.tracking import TrackingLedger
from fastapi_cargospace.workflow import BookingWorkflow

router = APIRouter(tags=["shipments"])


@router.get("/shipments", response_model=list[ShipmentResponse])
async def list_shipments(
    user_id: int | None = None,
    space_id: int | None = None,
    workflow: BookingWorkflow = Depends(get_workflow),
) -> list[ShipmentResponse]:
    shipments = await workflow.list_shipments(
        user_id=user_id, space_id=space_id
    )
    return [ShipmentResponse.from_shipment(s) for s in shipments]


@router.post("/shipments", response_model=ShipmentResponse, status_code=201)
async def create_shipment(
    body: CreateShipmentRequest,
    workflow: BookingWorkflow = Depends(get_workflow),
) -> ShipmentResponse:
    """Book a space; the shipment starts as pending."""
    shipment = await workflow.create_shipment(body)
    return ShipmentResponse.from_shipment(shipment)


@router.get("/shipments/{shipment_id}", response_model=ShipmentResponse)
async def get_shipment(
    shipment_id: int,
    workflow: BookingWorkflow = Depends(get_workflow),
) -> ShipmentResponse:
    shipment = await workflow.get_shipment(shipment_id)
    return ShipmentResponse.from_shipment(shipment)


@router.patch(
    "/shipments/{shipment_id}/status", response_model=ShipmentResponse
)
async def update_shipment_status(
    shipment_id: int,
    body: ShipmentStatusUpdate,
    workflow: BookingWorkflow = Depends(get_workflow),
) -> ShipmentResponse:
    """Advance a paid shipment; regressions and `confirmed` answer 409."""
    shipment = await workflow.advance_shipment_status(
        shipment_id, body.status
    )
    return ShipmentResponse.from_shipment(shipment)


@router.get(
    "/shipments/{shipment_id}/transaction",
    response_model=TransactionResponse,
)
async def get_shipment_transaction(
    shipment_id: int,
    workflow: BookingWorkflow = Depends(get_workflow),
) -> TransactionResponse:
    transaction = await workflow.get_transaction_for_shipment(shipment_id)
    return TransactionResponse.from_transaction(transaction)


@router.get(
    "/shipments/{shipment_id}/tracking",
    response_model=list[TrackingEventResponse],
)
async def list_tracking_events(
    shipment_id: int,
    ledger: TrackingLedger = Depends(get_ledger),
) -> list[TrackingEventResponse]:
    """Tracking history, oldest first."""
    events = await ledger.list_events(shipment_id)
    return [TrackingEventResponse.from_event(event) for event in events]


@router.get(
    "/shipments/{shipment_id}/tracking/current",
    response_model=TrackingEventResponse,
)
async def current_tracking_event(
    shipment_id: int,
    ledger: TrackingLedger = Depends(get_ledger),
) -> TrackingEventResponse:
    event = await ledger.current_event(shipment_id)
    if event is None:
        raise NotFoundError("Tracking event for shipment", shipment_id)
    return TrackingEventResponse.from_event(event)
