"""In-process entity store."""

from __future__ import annotations

import asyncio
import copy
import dataclasses
import logging
from collections.abc import AsyncIterator, Iterable
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Any, TypeVar

from fastapi_cargospace.entities import (
    LogisticsSpace,
    Shipment,
    TrackingEvent,
    Transaction,
    User,
)
from fastapi_cargospace.enums import SpaceStatus
from fastapi_cargospace.exceptions import ConflictError

logger = logging.getLogger(__name__)

T = TypeVar("T")

_TABLES = ("users", "spaces", "shipments", "transactions", "tracking_events")


def _now() -> datetime:
    return datetime.now(tz=UTC)


class InMemoryStore:
    """Entity store backed by dicts with auto-increment integer ids.

    Units of work are serialised by one lock and rolled back from a
    snapshot, so every workflow cascade is all-or-nothing. Stored
    entities are never mutated in place; updates replace them.
    """

    def __init__(self) -> None:
        self.tables: dict[str, dict[int, Any]] = {
            name: {} for name in _TABLES
        }
        self.counters: dict[str, int] = {name: 0 for name in _TABLES}
        self._lock = asyncio.Lock()

    @asynccontextmanager
    async def unit_of_work(self) -> AsyncIterator[InMemoryUnitOfWork]:
        async with self._lock:
            tables = {name: dict(rows) for name, rows in self.tables.items()}
            counters = dict(self.counters)
            try:
                yield InMemoryUnitOfWork(self)
            except BaseException:
                self.tables = tables
                self.counters = counters
                logger.debug("Unit of work rolled back")
                raise


class InMemoryUnitOfWork:
    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    # -- helpers ----------------------------------------------------------

    def _rows(self, table: str) -> dict[int, Any]:
        return self._store.tables[table]

    def _next_id(self, table: str) -> int:
        self._store.counters[table] += 1
        return self._store.counters[table]

    def _insert(self, table: str, entity: T) -> T:
        self._rows(table)[entity.id] = entity
        return copy.deepcopy(entity)

    def _get(self, table: str, entity_id: int) -> Any:
        entity = self._rows(table).get(entity_id)
        return copy.deepcopy(entity)

    def _find(self, table: str, **match: Any) -> Any:
        for entity in self._rows(table).values():
            if all(getattr(entity, k) == v for k, v in match.items()):
                return copy.deepcopy(entity)
        return None

    def _filter(self, table: str, **match: Any) -> list[Any]:
        return [
            copy.deepcopy(entity)
            for _, entity in sorted(self._rows(table).items())
            if all(
                v is None or getattr(entity, k) == v
                for k, v in match.items()
            )
        ]

    def _update(self, table: str, entity_id: int, **fields: Any) -> Any:
        rows = self._rows(table)
        entity = rows.get(entity_id)
        if entity is None:
            return None
        updated = dataclasses.replace(entity, **fields)
        rows[entity_id] = updated
        return copy.deepcopy(updated)

    # -- users ------------------------------------------------------------

    async def create_user(self, **data: Any) -> User:
        if self._find("users", username=data["username"]):
            raise ConflictError("Username already exists")
        if self._find("users", email=data["email"]):
            raise ConflictError("Email already exists")
        wallet = data.get("wallet_address")
        if wallet and self._find("users", wallet_address=wallet):
            raise ConflictError("Wallet address already registered")
        user = User(id=self._next_id("users"), created_at=_now(), **data)
        return self._insert("users", user)

    async def get_user(self, user_id: int) -> User | None:
        return self._get("users", user_id)

    async def get_user_by_username(self, username: str) -> User | None:
        return self._find("users", username=username)

    async def get_user_by_email(self, email: str) -> User | None:
        return self._find("users", email=email)

    async def get_user_by_wallet_address(
        self, wallet_address: str
    ) -> User | None:
        return self._find("users", wallet_address=wallet_address)

    async def list_users(self) -> list[User]:
        return self._filter("users")

    # -- spaces -----------------------------------------------------------

    async def create_space(self, **data: Any) -> LogisticsSpace:
        if self._find("spaces", token_id=data["token_id"]):
            raise ConflictError("Token ID already exists")
        space = LogisticsSpace(
            id=self._next_id("spaces"), created_at=_now(), **data
        )
        return self._insert("spaces", space)

    async def get_space(self, space_id: int) -> LogisticsSpace | None:
        return self._get("spaces", space_id)

    async def get_space_by_token_id(
        self, token_id: str
    ) -> LogisticsSpace | None:
        return self._find("spaces", token_id=token_id)

    async def list_spaces(
        self, owner_user_id: int | None = None
    ) -> list[LogisticsSpace]:
        return self._filter("spaces", owner_user_id=owner_user_id)

    async def search_spaces(
        self, source: str, destination: str
    ) -> list[LogisticsSpace]:
        source = source.lower()
        destination = destination.lower()
        return [
            space
            for space in self._filter("spaces")
            if source in space.source.lower()
            and destination in space.destination.lower()
            and space.status != SpaceStatus.BOOKED
        ]

    async def update_space_status(
        self, space_id: int, status: SpaceStatus
    ) -> LogisticsSpace | None:
        return self._update("spaces", space_id, status=SpaceStatus(status))

    async def compare_and_set_space_status(
        self,
        space_id: int,
        expected: Iterable[SpaceStatus],
        status: SpaceStatus,
    ) -> LogisticsSpace | None:
        current = self._rows("spaces").get(space_id)
        if current is None or current.status not in set(expected):
            return None
        return self._update("spaces", space_id, status=SpaceStatus(status))

    # -- shipments --------------------------------------------------------

    async def create_shipment(self, **data: Any) -> Shipment:
        shipment = Shipment(
            id=self._next_id("shipments"), created_at=_now(), **data
        )
        return self._insert("shipments", shipment)

    async def get_shipment(self, shipment_id: int) -> Shipment | None:
        return self._get("shipments", shipment_id)

    async def list_shipments(
        self,
        user_id: int | None = None,
        space_id: int | None = None,
    ) -> list[Shipment]:
        return self._filter(
            "shipments", user_id=user_id, logistics_space_id=space_id
        )

    async def update_shipment(
        self, shipment_id: int, **fields: Any
    ) -> Shipment | None:
        return self._update("shipments", shipment_id, **fields)

    # -- transactions -----------------------------------------------------

    async def create_transaction(self, **data: Any) -> Transaction:
        transaction = Transaction(
            id=self._next_id("transactions"), created_at=_now(), **data
        )
        return self._insert("transactions", transaction)

    async def get_transaction(
        self, transaction_id: int
    ) -> Transaction | None:
        return self._get("transactions", transaction_id)

    async def get_transaction_by_shipment(
        self, shipment_id: int
    ) -> Transaction | None:
        return self._find("transactions", shipment_id=shipment_id)

    async def list_transactions(self) -> list[Transaction]:
        return self._filter("transactions")

    async def update_transaction(
        self, transaction_id: int, **fields: Any
    ) -> Transaction | None:
        return self._update("transactions", transaction_id, **fields)

    # -- tracking ---------------------------------------------------------

    async def append_tracking_event(self, **data: Any) -> TrackingEvent:
        if data.get("timestamp") is None:
            data["timestamp"] = _now()
        event = TrackingEvent(id=self._next_id("tracking_events"), **data)
        return self._insert("tracking_events", event)

    async def list_tracking_events(
        self, shipment_id: int
    ) -> list[TrackingEvent]:
        events = self._filter("tracking_events", shipment_id=shipment_id)
        return sorted(events, key=lambda event: (event.timestamp, event.id))
