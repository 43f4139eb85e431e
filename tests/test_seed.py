"""Demo data tests."""

from __future__ import annotations

from decimal import Decimal

import pytest

from fastapi_cargospace.enums import (
    ShipmentStatus,
    SpaceStatus,
    TransactionStatus,
    UserRole,
)
from fastapi_cargospace.seed import DEMO_PASSWORD, DEMO_TX_HASH, seed_demo_data
from fastapi_cargospace.tracking import TrackingLedger
from fastapi_cargospace.workflow import BookingWorkflow


@pytest.fixture()
async def seeded(store, chain_client, config):
    assert await seed_demo_data(store, chain_client, config) is True
    return BookingWorkflow(store, chain_client, config)


async def test_users_for_every_role(seeded) -> None:
    users = await seeded.list_users()
    assert sorted(user.role for user in users) == sorted(UserRole)
    assert len({user.wallet_address for user in users}) == 3
    user = await seeded.login(
        {"username": "logistics", "password": DEMO_PASSWORD}
    )
    assert user.role == UserRole.LOGISTICS


async def test_spaces(seeded) -> None:
    spaces = await seeded.search_spaces(owner_user_id=2)
    assert [space.token_id for space in spaces] == [
        "T-0x8F3E7B4A",
        "T-0x7A2D9C1F",
        "T-0x3F1A6E5D",
    ]
    assert [space.status for space in spaces] == [
        SpaceStatus.BOOKED,
        SpaceStatus.PARTIAL,
        SpaceStatus.BOOKED,
    ]
    assert [space.vehicle_type for space in spaces] == [
        "18-Wheeler Truck",
        "Medium Cargo Van",
        "Box Truck",
    ]


async def test_only_partial_space_is_searchable(seeded) -> None:
    [space] = await seeded.search_spaces()
    assert space.source == "Los Angeles, CA"


async def test_shipment_is_paid_and_in_transit(seeded) -> None:
    [shipment] = await seeded.list_shipments()
    assert shipment.status == ShipmentStatus.IN_TRANSIT
    assert shipment.additional_services == ["insurance", "express-delivery"]

    transaction = await seeded.get_transaction_for_shipment(shipment.id)
    assert transaction.status == TransactionStatus.COMPLETED
    assert transaction.amount == Decimal("1380.50")
    assert transaction.blockchain_tx_hash == DEMO_TX_HASH
    assert shipment.transaction_id == transaction.id


async def test_tracking_history(store, seeded) -> None:
    [shipment] = await seeded.list_shipments()
    events = await TrackingLedger(store).list_events(shipment.id)
    assert [event.event_type for event in events] == [
        "order_confirmed",
        "pickup",
        "package_received",
        "in_transit",
        "in_transit",
        "checkpoint",
        "payment",
    ]
    timestamps = [event.timestamp for event in events]
    assert timestamps == sorted(timestamps)


async def test_seeding_twice_is_a_no_op(store, chain_client, config, seeded):
    assert await seed_demo_data(store, chain_client, config) is False
    assert len(await seeded.list_users()) == 3
