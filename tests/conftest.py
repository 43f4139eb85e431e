"""Shared fixtures for fastapi-cargospace tests."""

from __future__ import annotations

from datetime import date
from types import SimpleNamespace

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from fastapi_cargospace.chain import MockChainClient
from fastapi_cargospace.config import CargospaceConfig
from fastapi_cargospace.enums import UserRole
from fastapi_cargospace.exceptions import register_exception_handlers
from fastapi_cargospace.memory import InMemoryStore
from fastapi_cargospace.router import create_marketplace_router
from fastapi_cargospace.tracking import TrackingLedger
from fastapi_cargospace.workflow import BookingWorkflow

TOKEN_DATE = date(2024, 3, 1)


def space_payload(owner_user_id: int, **overrides) -> dict:
    payload = {
        "owner_user_id": owner_user_id,
        "source": "New York, NY",
        "destination": "Chicago, IL",
        "length": 12,
        "width": 2.5,
        "height": 2.8,
        "max_weight": 24000,
        "vehicle_type": "18-Wheeler Truck",
        "price": "1250.00",
    }
    payload.update(overrides)
    return payload


def shipment_payload(space_id: int, user_id: int, **overrides) -> dict:
    payload = {
        "logistics_space_id": space_id,
        "user_id": user_id,
        "goods_type": "Electronics",
        "weight": 750,
        "length": 2,
        "width": 1.5,
        "height": 1.8,
    }
    payload.update(overrides)
    return payload


@pytest.fixture()
def config() -> CargospaceConfig:
    # Minimum bcrypt cost keeps the suite fast.
    return CargospaceConfig(bcrypt_rounds=4)


@pytest.fixture()
def chain_client() -> MockChainClient:
    return MockChainClient(
        rejected_hashes={"0xrejected"}, token_date=TOKEN_DATE
    )


@pytest.fixture()
def memory_store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture()
async def async_engine():
    """Create an in-memory aiosqlite async engine."""
    from sqlalchemy.ext.asyncio import create_async_engine

    from fastapi_cargospace.contrib.sqlalchemy.models import Base

    engine = create_async_engine("sqlite+aiosqlite://", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture()
async def async_session_factory(async_engine):
    """Create an async session factory bound to the in-memory engine."""
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    factory = async_sessionmaker(
        async_engine, class_=AsyncSession, expire_on_commit=False
    )
    yield factory


@pytest.fixture()
def sqlalchemy_store(async_session_factory):
    """Create an SQLAlchemyStore."""
    from fastapi_cargospace.contrib.sqlalchemy.store import SQLAlchemyStore

    return SQLAlchemyStore(async_session_factory)


@pytest.fixture(params=["memory", "sqlalchemy"])
def store(request):
    """Run the test against every store backend."""
    if request.param == "memory":
        return request.getfixturevalue("memory_store")
    return request.getfixturevalue("sqlalchemy_store")


@pytest.fixture()
def workflow(store, chain_client, config) -> BookingWorkflow:
    return BookingWorkflow(store, chain_client, config)


@pytest.fixture()
def ledger(store) -> TrackingLedger:
    return TrackingLedger(store)


@pytest.fixture()
async def marketplace(workflow):
    """A shipper, a carrier and one available space."""
    shipper = await workflow.register_user(
        {
            "username": "shipper",
            "password": "secret",
            "email": "shipper@example.com",
            "wallet_address": "0xshipper",
        }
    )
    carrier = await workflow.register_user(
        {
            "username": "carrier",
            "password": "secret",
            "email": "carrier@example.com",
            "role": UserRole.LOGISTICS,
        }
    )
    space = await workflow.create_space(space_payload(carrier.id))
    return SimpleNamespace(shipper=shipper, carrier=carrier, space=space)


@pytest.fixture()
def client(memory_store, chain_client, config) -> TestClient:
    app = FastAPI()
    register_exception_handlers(app)
    app.include_router(
        create_marketplace_router(
            store=memory_store, config=config, chain_client=chain_client
        )
    )
    return TestClient(app)
