"""Storage and chain integration protocols."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from contextlib import AbstractAsyncContextManager
from decimal import Decimal
from typing import Any, Protocol, runtime_checkable

from fastapi_cargospace.entities import (
    LogisticsSpace,
    Shipment,
    TrackingEvent,
    Transaction,
    User,
)
from fastapi_cargospace.enums import SpaceStatus


@runtime_checkable
class ChainClient(Protocol):
    """Tokenization and payment verification backend."""

    async def mint_space_token(
        self, attributes: Mapping[str, Any]
    ) -> str | None: ...

    async def verify_payment(
        self, tx_hash: str, amount: Decimal, currency: str
    ) -> bool: ...


@runtime_checkable
class UnitOfWork(Protocol):
    """CRUD and query surface available inside one atomic unit of work.

    Lookups return ``None`` when nothing matches. Status updates are
    plain overwrites; transition rules live in the workflow layer.
    """

    # Users
    async def create_user(self, **data: Any) -> User: ...

    async def get_user(self, user_id: int) -> User | None: ...

    async def get_user_by_username(self, username: str) -> User | None: ...

    async def get_user_by_email(self, email: str) -> User | None: ...

    async def get_user_by_wallet_address(
        self, wallet_address: str
    ) -> User | None: ...

    async def list_users(self) -> list[User]: ...

    # Spaces
    async def create_space(self, **data: Any) -> LogisticsSpace: ...

    async def get_space(self, space_id: int) -> LogisticsSpace | None: ...

    async def get_space_by_token_id(
        self, token_id: str
    ) -> LogisticsSpace | None: ...

    async def list_spaces(
        self, owner_user_id: int | None = None
    ) -> list[LogisticsSpace]: ...

    async def search_spaces(
        self, source: str, destination: str
    ) -> list[LogisticsSpace]: ...

    async def update_space_status(
        self, space_id: int, status: SpaceStatus
    ) -> LogisticsSpace | None: ...

    async def compare_and_set_space_status(
        self,
        space_id: int,
        expected: Iterable[SpaceStatus],
        status: SpaceStatus,
    ) -> LogisticsSpace | None: ...

    # Shipments
    async def create_shipment(self, **data: Any) -> Shipment: ...

    async def get_shipment(self, shipment_id: int) -> Shipment | None: ...

    async def list_shipments(
        self,
        user_id: int | None = None,
        space_id: int | None = None,
    ) -> list[Shipment]: ...

    async def update_shipment(
        self, shipment_id: int, **fields: Any
    ) -> Shipment | None: ...

    # Transactions
    async def create_transaction(self, **data: Any) -> Transaction: ...

    async def get_transaction(
        self, transaction_id: int
    ) -> Transaction | None: ...

    async def get_transaction_by_shipment(
        self, shipment_id: int
    ) -> Transaction | None: ...

    async def list_transactions(self) -> list[Transaction]: ...

    async def update_transaction(
        self, transaction_id: int, **fields: Any
    ) -> Transaction | None: ...

    # Tracking
    async def append_tracking_event(self, **data: Any) -> TrackingEvent: ...

    async def list_tracking_events(
        self, shipment_id: int
    ) -> list[TrackingEvent]: ...


@runtime_checkable
class EntityStore(Protocol):
    """Entity persistence with atomic units of work.

    ``unit_of_work()`` commits when the block exits cleanly and rolls
    back every change made inside it when an exception escapes.
    """

    def unit_of_work(self) -> AbstractAsyncContextManager[UnitOfWork]: ...
