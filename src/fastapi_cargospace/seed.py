"""Demo data for a fresh marketplace.

Everything is created through ``BookingWorkflow`` and ``TrackingLedger``
so the seeded records obey the same rules as live traffic: the New York
space ends up booked by the demo shipment, which is paid and then put
in transit by a backfilled pickup event.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta
from decimal import Decimal

from fastapi_cargospace.config import CargospaceConfig
from fastapi_cargospace.enums import (
    PaymentMethod,
    SpaceStatus,
    UserRole,
)
from fastapi_cargospace.protocols import ChainClient, EntityStore
from fastapi_cargospace.tracking import TrackingLedger
from fastapi_cargospace.workflow import BookingWorkflow

logger = logging.getLogger(__name__)

DEMO_PASSWORD = "password"
DEMO_TX_HASH = "0x9a8b7c6d5e4f3a2b1c0d9e8f7a6b5c4d3e2f1a0b"

DEMO_USERS = [
    {
        "username": "user",
        "email": "user@cargospace.dev",
        "first_name": "Demo",
        "last_name": "Shipper",
        "role": UserRole.USER,
        "wallet_address": "0x71C7656EC7ab88b098defB751B7401B5f6d8976F",
    },
    {
        "username": "logistics",
        "email": "logistics@cargospace.dev",
        "first_name": "Demo",
        "last_name": "Carrier",
        "role": UserRole.LOGISTICS,
        "wallet_address": "0x2546BcD3c84621e976D8185a91A922aE77ECEc30",
    },
    {
        "username": "developer",
        "email": "developer@cargospace.dev",
        "first_name": "Demo",
        "last_name": "Developer",
        "role": UserRole.DEVELOPER,
        "wallet_address": "0xbDA5747bFD65F08deb54cb465eB87D40e51B197E",
    },
]

# (token, source, destination, dimensions, max weight, vehicle, price,
# status)
DEMO_SPACES = [
    (
        "T-0x8F3E7B4A",
        "New York, NY",
        "Chicago, IL",
        (12.0, 2.5, 2.8),
        24000.0,
        "18-Wheeler Truck",
        Decimal("1250"),
        SpaceStatus.AVAILABLE,
    ),
    (
        "T-0x7A2D9C1F",
        "Los Angeles, CA",
        "Phoenix, AZ",
        (10.0, 2.2, 2.5),
        18000.0,
        "Medium Cargo Van",
        Decimal("980"),
        SpaceStatus.PARTIAL,
    ),
    (
        "T-0x3F1A6E5D",
        "Seattle, WA",
        "Portland, OR",
        (8.0, 2.1, 2.3),
        14000.0,
        "Box Truck",
        Decimal("750"),
        SpaceStatus.BOOKED,
    ),
]

# (event type, hours ago, location, latitude, longitude, status, message)
DEMO_TRACKING = [
    (
        "order_confirmed",
        24,
        "New York, NY",
        40.7128,
        -74.0060,
        "processing",
        "Order confirmed and awaiting pickup",
    ),
    (
        "pickup",
        22,
        "New York, NY",
        40.7128,
        -74.0060,
        "in transit",
        "Package picked up by carrier",
    ),
    (
        "package_received",
        20,
        "New York Distribution Center, NY",
        40.7615,
        -73.9223,
        "processing",
        "Package received at distribution center",
    ),
    (
        "in_transit",
        16,
        "Newark, NJ",
        40.7357,
        -74.1724,
        "in transit",
        "Package departed Newark facility",
    ),
    (
        "in_transit",
        12,
        "Interstate I-80 W, PA",
        41.0938,
        -75.3277,
        "in transit",
        "Package in transit on I-80",
    ),
    (
        "checkpoint",
        6,
        "Cleveland, OH",
        41.4993,
        -81.6944,
        "in transit",
        "Package passed Cleveland checkpoint",
    ),
]


async def seed_demo_data(
    store: EntityStore,
    chain_client: ChainClient,
    config: CargospaceConfig | None = None,
) -> bool:
    """Populate an empty store with demo records.

    Returns ``False`` without touching anything when users already exist.
    """
    async with store.unit_of_work() as uow:
        if await uow.list_users():
            logger.info("Store already populated, skipping demo data")
            return False

    workflow = BookingWorkflow(store, chain_client, config)
    ledger = TrackingLedger(store)

    users = {}
    for data in DEMO_USERS:
        user = await workflow.register_user(
            {**data, "password": DEMO_PASSWORD}
        )
        users[user.role] = user
    carrier = users[UserRole.LOGISTICS]

    spaces = []
    departure = datetime.now(tz=UTC) + timedelta(days=3)
    for (
        token_id,
        source,
        destination,
        (length, width, height),
        max_weight,
        vehicle_type,
        price,
        status,
    ) in DEMO_SPACES:
        space = await workflow.create_space(
            {
                "token_id": token_id,
                "owner_user_id": carrier.id,
                "source": source,
                "destination": destination,
                "length": length,
                "width": width,
                "height": height,
                "max_weight": max_weight,
                "vehicle_type": vehicle_type,
                "price": price,
                "departure_date": departure,
            }
        )
        if status != SpaceStatus.AVAILABLE:
            space = await workflow.update_space_status(space.id, status)
        spaces.append(space)

    shipment = await workflow.create_shipment(
        {
            "logistics_space_id": spaces[0].id,
            "user_id": users[UserRole.USER].id,
            "goods_type": "Electronics",
            "weight": 750,
            "length": 2,
            "width": 1.5,
            "height": 1.8,
            "additional_services": ["insurance", "express-delivery"],
        }
    )
    transaction = await workflow.create_transaction(
        {
            "shipment_id": shipment.id,
            "amount": Decimal("1380.50"),
            "payment_method": PaymentMethod.METAMASK,
            "payment_details": {
                "walletAddress": users[UserRole.USER].wallet_address
            },
        }
    )
    await workflow.confirm_transaction(transaction.id, DEMO_TX_HASH)

    now = datetime.now(tz=UTC)
    for (
        event_type,
        hours_ago,
        location,
        latitude,
        longitude,
        status,
        message,
    ) in DEMO_TRACKING:
        await ledger.append_event(
            {
                "shipment_id": shipment.id,
                "event_type": event_type,
                "timestamp": now - timedelta(hours=hours_ago),
                "location": location,
                "latitude": latitude,
                "longitude": longitude,
                "status": status,
                "message": message,
            }
        )

    logger.info(
        "Seeded %d users, %d spaces and shipment %s",
        len(users),
        len(spaces),
        shipment.id,
    )
    return True
