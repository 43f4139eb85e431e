"""Router factory for fastapi-cargospace."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import APIRouter, FastAPI

from fastapi_cargospace.chain import MockChainClient
from fastapi_cargospace.config import CargospaceConfig
from fastapi_cargospace.exceptions import register_exception_handlers
from fastapi_cargospace.protocols import ChainClient, EntityStore
from fastapi_cargospace.routes.auth import router as auth_router
from fastapi_cargospace.routes.shipments import router as shipments_router
from fastapi_cargospace.routes.spaces import router as spaces_router
from fastapi_cargospace.routes.tracking import router as tracking_router
from fastapi_cargospace.routes.transactions import (
    router as transactions_router,
)


def create_marketplace_router(
    *,
    store: EntityStore,
    config: CargospaceConfig | None = None,
    chain_client: ChainClient | None = None,
) -> APIRouter:
    """Create a configured API router."""
    actual_config = config or CargospaceConfig()
    actual_chain_client = chain_client or MockChainClient()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
        app.state.cargospace_config = actual_config
        app.state.cargospace_store = store
        app.state.cargospace_chain_client = actual_chain_client
        register_exception_handlers(app)
        yield

    router = APIRouter(lifespan=lifespan)

    @router.get("/health")
    async def health() -> dict[str, str]:
        """Healthcheck endpoint."""
        return {"status": "ok"}

    router.include_router(auth_router)
    router.include_router(spaces_router)
    router.include_router(shipments_router)
    router.include_router(transactions_router)
    router.include_router(tracking_router)
    return router
