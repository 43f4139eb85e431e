"""Dependency providers for request handlers."""

from __future__ import annotations

from fastapi import Request

from fastapi_cargospace.config import CargospaceConfig
from fastapi_cargospace.protocols import ChainClient, EntityStore
from fastapi_cargospace.tracking import TrackingLedger
from fastapi_cargospace.workflow import BookingWorkflow


def get_config(request: Request) -> CargospaceConfig:
    """Read config from FastAPI app state."""
    return request.app.state.cargospace_config


def get_store(request: Request) -> EntityStore:
    """Read entity store from FastAPI app state."""
    return request.app.state.cargospace_store


def get_chain_client(request: Request) -> ChainClient:
    """Read chain client from FastAPI app state."""
    return request.app.state.cargospace_chain_client


def get_workflow(request: Request) -> BookingWorkflow:
    """Create BookingWorkflow for the current request."""
    return BookingWorkflow(
        store=get_store(request),
        chain_client=get_chain_client(request),
        config=get_config(request),
    )


def get_ledger(request: Request) -> TrackingLedger:
    """Create TrackingLedger for the current request."""
    return TrackingLedger(store=get_store(request))
