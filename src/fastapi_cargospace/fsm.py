"""Status transition tables for spaces, shipments and transactions."""

from __future__ import annotations

from enum import StrEnum

from fastapi_cargospace.enums import (
    ShipmentStatus,
    SpaceStatus,
    TransactionStatus,
)
from fastapi_cargospace.exceptions import InvalidTransitionError

SPACE_TRANSITIONS: dict[SpaceStatus, frozenset[SpaceStatus]] = {
    SpaceStatus.AVAILABLE: frozenset(
        {SpaceStatus.PARTIAL, SpaceStatus.BOOKED}
    ),
    SpaceStatus.PARTIAL: frozenset({SpaceStatus.BOOKED}),
    SpaceStatus.BOOKED: frozenset(),  # Terminal
}

SHIPMENT_TRANSITIONS: dict[ShipmentStatus, frozenset[ShipmentStatus]] = {
    ShipmentStatus.PENDING: frozenset({ShipmentStatus.CONFIRMED}),
    ShipmentStatus.CONFIRMED: frozenset({ShipmentStatus.IN_TRANSIT}),
    ShipmentStatus.IN_TRANSIT: frozenset({ShipmentStatus.DELIVERED}),
    ShipmentStatus.DELIVERED: frozenset(),  # Terminal
}

TRANSACTION_TRANSITIONS: dict[
    TransactionStatus, frozenset[TransactionStatus]
] = {
    TransactionStatus.PENDING: frozenset(
        {TransactionStatus.COMPLETED, TransactionStatus.FAILED}
    ),
    TransactionStatus.COMPLETED: frozenset(),  # Terminal
    TransactionStatus.FAILED: frozenset(),  # Terminal
}

# Tracking event types that move a shipment forward.
TRACKING_EVENT_TRANSITIONS: dict[str, ShipmentStatus] = {
    "pickup": ShipmentStatus.IN_TRANSIT,
    "delivered": ShipmentStatus.DELIVERED,
}

_TABLES: dict[str, dict] = {
    "space": SPACE_TRANSITIONS,
    "shipment": SHIPMENT_TRANSITIONS,
    "transaction": TRANSACTION_TRANSITIONS,
}

SHIPMENT_ORDER: tuple[ShipmentStatus, ...] = (
    ShipmentStatus.PENDING,
    ShipmentStatus.CONFIRMED,
    ShipmentStatus.IN_TRANSIT,
    ShipmentStatus.DELIVERED,
)


def can_transition(entity: str, current: StrEnum, target: StrEnum) -> bool:
    """Return whether ``entity`` may move from ``current`` to ``target``."""
    table = _TABLES[entity]
    return target in table.get(current, frozenset())


def assert_can_transition(
    entity: str, current: StrEnum, target: StrEnum
) -> None:
    """Raise ``InvalidTransitionError`` unless the move is allowed."""
    if not can_transition(entity, current, target):
        raise InvalidTransitionError(entity, str(current), str(target))
