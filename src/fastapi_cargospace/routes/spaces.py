"""Logistics space endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from fastapi_cargospace.dependencies import get_workflow
from fastapi_cargospace.schemas import (
    CreateSpaceRequest,
    QuoteRequest,
    QuoteResponse,
    SpaceResponse,
    SpaceStatusUpdate,
)
from fastapi_cargospace.workflow import BookingWorkflow

router = APIRouter(tags=["spaces"])


@router.get("/spaces", response_model=list[SpaceResponse])
async def search_spaces(
    source: str | None = None,
    destination: str | None = None,
    user_id: int | None = None,
    workflow: BookingWorkflow = Depends(get_workflow),
) -> list[SpaceResponse]:
    """Search bookable spaces by route, or list one owner's spaces."""
    spaces = await workflow.search_spaces(
        source=source, destination=destination, owner_user_id=user_id
    )
    return [SpaceResponse.from_space(space) for space in spaces]


@router.post("/spaces", response_model=SpaceResponse, status_code=201)
async def create_space(
    body: CreateSpaceRequest,
    workflow: BookingWorkflow = Depends(get_workflow),
) -> SpaceResponse:
    """Create a space, minting a token when none is supplied."""
    space = await workflow.create_space(body)
    return SpaceResponse.from_space(space)


@router.get("/spaces/{space_id}", response_model=SpaceResponse)
async def get_space(
    space_id: int,
    workflow: BookingWorkflow = Depends(get_workflow),
) -> SpaceResponse:
    space = await workflow.get_space(space_id)
    return SpaceResponse.from_space(space)


@router.patch("/spaces/{space_id}/status", response_model=SpaceResponse)
async def update_space_status(
    space_id: int,
    body: SpaceStatusUpdate,
    workflow: BookingWorkflow = Depends(get_workflow),
) -> SpaceResponse:
    space = await workflow.update_space_status(space_id, body.status)
    return SpaceResponse.from_space(space)


@router.post("/spaces/{space_id}/quote", response_model=QuoteResponse)
async def quote_space(
    space_id: int,
    body: QuoteRequest,
    workflow: BookingWorkflow = Depends(get_workflow),
) -> QuoteResponse:
    """Price a booking including additional services."""
    return await workflow.quote_shipment(space_id, body.additional_services)
