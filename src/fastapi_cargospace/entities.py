"""Domain entities shared by every store backend."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any

from fastapi_cargospace.enums import (
    PaymentMethod,
    ShipmentStatus,
    SpaceStatus,
    TransactionStatus,
    UserRole,
)


@dataclass
class User:
    id: int
    username: str
    password: str
    email: str
    role: UserRole = UserRole.USER
    first_name: str | None = None
    last_name: str | None = None
    wallet_address: str | None = None
    created_at: datetime | None = None


@dataclass
class LogisticsSpace:
    """A tokenized unit of cargo capacity on one route."""

    id: int
    token_id: str
    owner_user_id: int
    source: str
    destination: str
    length: float
    width: float
    height: float
    max_weight: float
    vehicle_type: str
    price: Decimal
    status: SpaceStatus = SpaceStatus.AVAILABLE
    departure_date: datetime | None = None
    created_at: datetime | None = None


@dataclass
class Shipment:
    """A shipper's booking against a logistics space."""

    id: int
    logistics_space_id: int
    user_id: int
    goods_type: str
    weight: float
    length: float
    width: float
    height: float
    status: ShipmentStatus = ShipmentStatus.PENDING
    additional_services: list[str] = field(default_factory=list)
    transaction_id: int | None = None
    created_at: datetime | None = None


@dataclass
class Transaction:
    """Payment record tied 1:1 to a shipment."""

    id: int
    shipment_id: int
    amount: Decimal
    payment_method: PaymentMethod
    currency: str = "USD"
    payment_details: dict[str, Any] | None = None
    status: TransactionStatus = TransactionStatus.PENDING
    blockchain_tx_hash: str | None = None
    created_at: datetime | None = None


@dataclass
class TrackingEvent:
    """Immutable entry in a shipment's location/status history."""

    id: int
    shipment_id: int
    event_type: str
    timestamp: datetime
    location: str | None = None
    latitude: float = 0.0
    longitude: float = 0.0
    status: str = "update"
    message: str | None = None
    details: str | None = None
