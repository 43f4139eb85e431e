"""Transaction endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from fastapi_cargospace.dependencies import get_workflow
from fastapi_cargospace.schemas import (
    ConfirmTransactionRequest,
    CreateTransactionRequest,
    FailTransactionRequest,
    TransactionResponse,
)
from fastapi_cargospace.workflow import BookingWorkflow

logger = logging.getLogger(__name__)

router = APIRouter(tags=["transactions"])


@router.get("/transactions", response_model=list[TransactionResponse])
async def list_transactions(
    workflow: BookingWorkflow = Depends(get_workflow),
) -> list[TransactionResponse]:
    transactions = await workflow.list_transactions()
    return [TransactionResponse.from_transaction(t) for t in transactions]


@router.post(
    "/transactions", response_model=TransactionResponse, status_code=201
)
async def create_transaction(
    body: CreateTransactionRequest,
    workflow: BookingWorkflow = Depends(get_workflow),
) -> TransactionResponse:
    """Record a pending payment for a shipment."""
    transaction = await workflow.create_transaction(body)
    return TransactionResponse.from_transaction(transaction)


@router.get(
    "/transactions/{transaction_id}", response_model=TransactionResponse
)
async def get_transaction(
    transaction_id: int,
    workflow: BookingWorkflow = Depends(get_workflow),
) -> TransactionResponse:
    transaction = await workflow.get_transaction(transaction_id)
    return TransactionResponse.from_transaction(transaction)


@router.patch(
    "/transactions/{transaction_id}/confirm",
    response_model=TransactionResponse,
)
async def confirm_transaction(
    transaction_id: int,
    body: ConfirmTransactionRequest,
    workflow: BookingWorkflow = Depends(get_workflow),
) -> TransactionResponse:
    """Confirm a payment with its chain hash and run the cascade."""
    logger.info(
        "Confirming transaction %s with hash %s",
        transaction_id,
        body.blockchain_tx_hash,
    )
    transaction = await workflow.confirm_transaction(
        transaction_id, body.blockchain_tx_hash
    )
    return TransactionResponse.from_transaction(transaction)


@router.patch(
    "/transactions/{transaction_id}/fail",
    response_model=TransactionResponse,
)
async def fail_transaction(
    transaction_id: int,
    body: FailTransactionRequest,
    workflow: BookingWorkflow = Depends(get_workflow),
) -> TransactionResponse:
    transaction = await workflow.fail_transaction(
        transaction_id, reason=body.reason
    )
    return TransactionResponse.from_transaction(transaction)
