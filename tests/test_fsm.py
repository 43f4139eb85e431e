"""Status transition table tests."""

import itertools

import pytest

from fastapi_cargospace.enums import (
    ShipmentStatus,
    SpaceStatus,
    TransactionStatus,
)
from fastapi_cargospace.exceptions import InvalidTransitionError
from fastapi_cargospace.fsm import (
    SHIPMENT_ORDER,
    SHIPMENT_TRANSITIONS,
    TRACKING_EVENT_TRANSITIONS,
    TRANSACTION_TRANSITIONS,
    assert_can_transition,
    can_transition,
)


def test_shipment_moves_forward_one_step_at_a_time() -> None:
    for current, target in itertools.product(SHIPMENT_ORDER, repeat=2):
        expected = (
            SHIPMENT_ORDER.index(target) == SHIPMENT_ORDER.index(current) + 1
        )
        assert can_transition("shipment", current, target) is expected


def test_shipment_cannot_regress() -> None:
    with pytest.raises(InvalidTransitionError):
        assert_can_transition(
            "shipment", ShipmentStatus.IN_TRANSIT, ShipmentStatus.PENDING
        )


def test_space_transitions() -> None:
    assert can_transition(
        "space", SpaceStatus.AVAILABLE, SpaceStatus.PARTIAL
    )
    assert can_transition("space", SpaceStatus.PARTIAL, SpaceStatus.BOOKED)
    assert not can_transition(
        "space", SpaceStatus.BOOKED, SpaceStatus.AVAILABLE
    )


def test_transaction_terminal_states() -> None:
    assert TRANSACTION_TRANSITIONS[TransactionStatus.PENDING]
    assert not TRANSACTION_TRANSITIONS[TransactionStatus.COMPLETED]
    assert not TRANSACTION_TRANSITIONS[TransactionStatus.FAILED]
    assert not can_transition(
        "transaction", TransactionStatus.FAILED, TransactionStatus.COMPLETED
    )


def test_delivered_is_terminal() -> None:
    assert not SHIPMENT_TRANSITIONS[ShipmentStatus.DELIVERED]


def test_tracking_event_types_that_advance_shipments() -> None:
    assert TRACKING_EVENT_TRANSITIONS == {
        "pickup": ShipmentStatus.IN_TRANSIT,
        "delivered": ShipmentStatus.DELIVERED,
    }


def test_error_names_both_states() -> None:
    with pytest.raises(InvalidTransitionError) as exc_info:
        assert_can_transition(
            "transaction",
            TransactionStatus.COMPLETED,
            TransactionStatus.FAILED,
        )
    assert exc_info.value.current == "completed"
    assert exc_info.value.target == "failed"
