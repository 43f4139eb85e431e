"""Application factory.

Run with ``uvicorn fastapi_cargospace.app:create_app --factory``.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from fastapi_cargospace import __version__
from fastapi_cargospace.chain import MockChainClient
from fastapi_cargospace.config import CargospaceConfig
from fastapi_cargospace.contrib.sqlalchemy.models import Base
from fastapi_cargospace.contrib.sqlalchemy.store import SQLAlchemyStore
from fastapi_cargospace.exceptions import register_exception_handlers
from fastapi_cargospace.logging_config import setup_logging
from fastapi_cargospace.memory import InMemoryStore
from fastapi_cargospace.protocols import ChainClient, EntityStore
from fastapi_cargospace.router import create_marketplace_router
from fastapi_cargospace.seed import seed_demo_data

logger = logging.getLogger(__name__)


def create_app(
    config: CargospaceConfig | None = None,
    chain_client: ChainClient | None = None,
) -> FastAPI:
    """Build the marketplace app.

    With ``database_url`` set the SQLAlchemy store is used and its tables
    are created on startup; otherwise everything lives in memory.
    """
    config = config or CargospaceConfig()
    chain_client = chain_client or MockChainClient()
    setup_logging(config.log_level)

    engine: AsyncEngine | None = None
    store: EntityStore
    if config.database_url:
        engine = create_async_engine(config.database_url, echo=False)
        store = SQLAlchemyStore(
            async_sessionmaker(
                engine, class_=AsyncSession, expire_on_commit=False
            )
        )
    else:
        store = InMemoryStore()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
        if engine is not None:
            async with engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        if config.seed_demo_data:
            await seed_demo_data(store, chain_client, config)
        logger.info(
            "Marketplace started with %s", type(store).__name__
        )
        yield
        if engine is not None:
            await engine.dispose()

    app = FastAPI(
        title="CargoSpace marketplace",
        version=__version__,
        lifespan=lifespan,
    )
    register_exception_handlers(app)
    app.include_router(
        create_marketplace_router(
            store=store, config=config, chain_client=chain_client
        ),
        prefix="/api",
    )
    return app
