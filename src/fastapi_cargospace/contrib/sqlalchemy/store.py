"""SQLAlchemy entity store implementation."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Iterable
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from fastapi_cargospace.contrib.sqlalchemy.models import (
    ShipmentModel,
    SpaceModel,
    TrackingEventModel,
    TransactionModel,
    UserModel,
)
from fastapi_cargospace.entities import (
    LogisticsSpace,
    Shipment,
    TrackingEvent,
    Transaction,
    User,
)
from fastapi_cargospace.enums import (
    PaymentMethod,
    ShipmentStatus,
    SpaceStatus,
    TransactionStatus,
    UserRole,
)
from fastapi_cargospace.exceptions import ConflictError

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(tz=UTC)


def _to_utc(value: datetime | None) -> datetime | None:
    """Normalise to aware UTC; naive values are taken as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def _plain(value: Any) -> Any:
    return str(value) if isinstance(value, (UserRole, SpaceStatus)) else value


def _user(row: UserModel) -> User:
    return User(
        id=row.id,
        username=row.username,
        password=row.password,
        email=row.email,
        role=UserRole(row.role),
        first_name=row.first_name,
        last_name=row.last_name,
        wallet_address=row.wallet_address,
        created_at=_to_utc(row.created_at),
    )


def _space(row: SpaceModel) -> LogisticsSpace:
    return LogisticsSpace(
        id=row.id,
        token_id=row.token_id,
        owner_user_id=row.owner_user_id,
        source=row.source,
        destination=row.destination,
        length=row.length,
        width=row.width,
        height=row.height,
        max_weight=row.max_weight,
        vehicle_type=row.vehicle_type,
        price=row.price,
        status=SpaceStatus(row.status),
        departure_date=_to_utc(row.departure_date),
        created_at=_to_utc(row.created_at),
    )


def _shipment(row: ShipmentModel) -> Shipment:
    return Shipment(
        id=row.id,
        logistics_space_id=row.logistics_space_id,
        user_id=row.user_id,
        goods_type=row.goods_type,
        weight=row.weight,
        length=row.length,
        width=row.width,
        height=row.height,
        status=ShipmentStatus(row.status),
        additional_services=list(row.additional_services or []),
        transaction_id=row.transaction_id,
        created_at=_to_utc(row.created_at),
    )


def _transaction(row: TransactionModel) -> Transaction:
    return Transaction(
        id=row.id,
        shipment_id=row.shipment_id,
        amount=row.amount,
        payment_method=PaymentMethod(row.payment_method),
        currency=row.currency,
        payment_details=row.payment_details,
        status=TransactionStatus(row.status),
        blockchain_tx_hash=row.blockchain_tx_hash,
        created_at=_to_utc(row.created_at),
    )


def _tracking_event(row: TrackingEventModel) -> TrackingEvent:
    return TrackingEvent(
        id=row.id,
        shipment_id=row.shipment_id,
        event_type=row.event_type,
        timestamp=_to_utc(row.timestamp),
        location=row.location,
        latitude=row.latitude,
        longitude=row.longitude,
        status=row.status,
        message=row.message,
        details=row.details,
    )


class SQLAlchemyStore:
    """Entity store backed by SQLAlchemy async sessions.

    Each unit of work runs in one session and one database transaction.
    """

    def __init__(
        self, session_factory: async_sessionmaker[AsyncSession]
    ) -> None:
        self.session_factory = session_factory

    @asynccontextmanager
    async def unit_of_work(self) -> AsyncIterator[SQLAlchemyUnitOfWork]:
        async with self.session_factory() as session:
            async with session.begin():
                yield SQLAlchemyUnitOfWork(session)


class SQLAlchemyUnitOfWork:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def _add(self, row: Any, conflict_message: str) -> Any:
        self.session.add(row)
        try:
            await self.session.flush()
        except IntegrityError as e:
            raise ConflictError(conflict_message) from e
        return row

    async def _scalar(self, stmt: Any) -> Any:
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def _scalars(self, stmt: Any) -> list[Any]:
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    # -- users ------------------------------------------------------------

    async def create_user(self, **data: Any) -> User:
        if await self.get_user_by_username(data["username"]):
            raise ConflictError("Username already exists")
        if await self.get_user_by_email(data["email"]):
            raise ConflictError("Email already exists")
        wallet = data.get("wallet_address")
        if wallet and await self.get_user_by_wallet_address(wallet):
            raise ConflictError("Wallet address already registered")
        row = UserModel(
            created_at=_now(),
            **{key: _plain(value) for key, value in data.items()},
        )
        await self._add(row, "User already exists")
        return _user(row)

    async def get_user(self, user_id: int) -> User | None:
        row = await self.session.get(UserModel, user_id)
        return _user(row) if row else None

    async def get_user_by_username(self, username: str) -> User | None:
        row = await self._scalar(
            select(UserModel).where(UserModel.username == username)
        )
        return _user(row) if row else None

    async def get_user_by_email(self, email: str) -> User | None:
        row = await self._scalar(
            select(UserModel).where(UserModel.email == email)
        )
        return _user(row) if row else None

    async def get_user_by_wallet_address(
        self, wallet_address: str
    ) -> User | None:
        row = await self._scalar(
            select(UserModel).where(
                UserModel.wallet_address == wallet_address
            )
        )
        return _user(row) if row else None

    async def list_users(self) -> list[User]:
        rows = await self._scalars(select(UserModel).order_by(UserModel.id))
        return [_user(row) for row in rows]

    # -- spaces -----------------------------------------------------------

    async def create_space(self, **data: Any) -> LogisticsSpace:
        if await self.get_space_by_token_id(data["token_id"]):
            raise ConflictError("Token ID already exists")
        data["departure_date"] = _to_utc(data.get("departure_date"))
        row = SpaceModel(
            created_at=_now(),
            **{key: _plain(value) for key, value in data.items()},
        )
        await self._add(row, "Token ID already exists")
        return _space(row)

    async def get_space(self, space_id: int) -> LogisticsSpace | None:
        row = await self.session.get(
            SpaceModel, space_id, populate_existing=True
        )
        return _space(row) if row else None

    async def get_space_by_token_id(
        self, token_id: str
    ) -> LogisticsSpace | None:
        row = await self._scalar(
            select(SpaceModel).where(SpaceModel.token_id == token_id)
        )
        return _space(row) if row else None

    async def list_spaces(
        self, owner_user_id: int | None = None
    ) -> list[LogisticsSpace]:
        stmt = select(SpaceModel).order_by(SpaceModel.id)
        if owner_user_id is not None:
            stmt = stmt.where(SpaceModel.owner_user_id == owner_user_id)
        return [_space(row) for row in await self._scalars(stmt)]

    async def search_spaces(
        self, source: str, destination: str
    ) -> list[LogisticsSpace]:
        stmt = (
            select(SpaceModel)
            .where(
                func.lower(SpaceModel.source).contains(
                    source.lower(), autoescape=True
                ),
                func.lower(SpaceModel.destination).contains(
                    destination.lower(), autoescape=True
                ),
                SpaceModel.status != str(SpaceStatus.BOOKED),
            )
            .order_by(SpaceModel.id)
        )
        return [_space(row) for row in await self._scalars(stmt)]

    async def update_space_status(
        self, space_id: int, status: SpaceStatus
    ) -> LogisticsSpace | None:
        row = await self.session.get(SpaceModel, space_id)
        if row is None:
            return None
        row.status = str(status)
        await self.session.flush()
        return _space(row)

    async def compare_and_set_space_status(
        self,
        space_id: int,
        expected: Iterable[SpaceStatus],
        status: SpaceStatus,
    ) -> LogisticsSpace | None:
        # A conditional UPDATE keeps check-then-act atomic across
        # concurrent sessions and processes.
        result = await self.session.execute(
            update(SpaceModel)
            .where(
                SpaceModel.id == space_id,
                SpaceModel.status.in_([str(s) for s in expected]),
            )
            .values(status=str(status))
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            return None
        return await self.get_space(space_id)

    # -- shipments --------------------------------------------------------

    async def create_shipment(self, **data: Any) -> Shipment:
        data.setdefault("status", ShipmentStatus.PENDING)
        data["status"] = str(data["status"])
        row = ShipmentModel(created_at=_now(), **data)
        await self._add(row, "Shipment already exists")
        return _shipment(row)

    async def get_shipment(self, shipment_id: int) -> Shipment | None:
        row = await self.session.get(ShipmentModel, shipment_id)
        return _shipment(row) if row else None

    async def list_shipments(
        self,
        user_id: int | None = None,
        space_id: int | None = None,
    ) -> list[Shipment]:
        stmt = select(ShipmentModel).order_by(ShipmentModel.id)
        if user_id is not None:
            stmt = stmt.where(ShipmentModel.user_id == user_id)
        if space_id is not None:
            stmt = stmt.where(ShipmentModel.logistics_space_id == space_id)
        return [_shipment(row) for row in await self._scalars(stmt)]

    async def update_shipment(
        self, shipment_id: int, **fields: Any
    ) -> Shipment | None:
        row = await self.session.get(ShipmentModel, shipment_id)
        if row is None:
            return None
        for key, value in fields.items():
            if key == "status":
                value = str(value)
            setattr(row, key, value)
        await self.session.flush()
        return _shipment(row)

    # -- transactions -----------------------------------------------------

    async def create_transaction(self, **data: Any) -> Transaction:
        data.setdefault("status", TransactionStatus.PENDING)
        data["status"] = str(data["status"])
        data["payment_method"] = str(data["payment_method"])
        row = TransactionModel(created_at=_now(), **data)
        await self._add(row, "Transaction already exists for this shipment")
        return _transaction(row)

    async def get_transaction(
        self, transaction_id: int
    ) -> Transaction | None:
        row = await self.session.get(TransactionModel, transaction_id)
        return _transaction(row) if row else None

    async def get_transaction_by_shipment(
        self, shipment_id: int
    ) -> Transaction | None:
        row = await self._scalar(
            select(TransactionModel).where(
                TransactionModel.shipment_id == shipment_id
            )
        )
        return _transaction(row) if row else None

    async def list_transactions(self) -> list[Transaction]:
        rows = await self._scalars(
            select(TransactionModel).order_by(TransactionModel.id)
        )
        return [_transaction(row) for row in rows]

    async def update_transaction(
        self, transaction_id: int, **fields: Any
    ) -> Transaction | None:
        row = await self.session.get(TransactionModel, transaction_id)
        if row is None:
            return None
        for key, value in fields.items():
            if key == "status":
                value = str(value)
            setattr(row, key, value)
        await self.session.flush()
        return _transaction(row)

    # -- tracking ---------------------------------------------------------

    async def append_tracking_event(self, **data: Any) -> TrackingEvent:
        data["timestamp"] = _to_utc(data.get("timestamp")) or _now()
        row = TrackingEventModel(**data)
        await self._add(row, "Tracking event rejected")
        return _tracking_event(row)

    async def list_tracking_events(
        self, shipment_id: int
    ) -> list[TrackingEvent]:
        rows = await self._scalars(
            select(TrackingEventModel)
            .where(TrackingEventModel.shipment_id == shipment_id)
            .order_by(TrackingEventModel.timestamp, TrackingEventModel.id)
        )
        return [_tracking_event(row) for row in rows]
