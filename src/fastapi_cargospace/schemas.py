"""Pydantic request/response schemas."""

from __future__ import annotations

from datetime import UTC, datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, Field, field_validator

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
from fastapi_cargospace.passwords import MAX_PASSWORD_BYTES

# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


class RegisterUserRequest(BaseModel):
    username: str = Field(min_length=1, max_length=150)
    password: str = Field(min_length=1)
    email: str = Field(
        min_length=3, max_length=255, pattern=r"^[^@\s]+@\S+$"
    )
    role: UserRole = UserRole.USER
    first_name: str | None = None
    last_name: str | None = None
    wallet_address: str | None = None

    @field_validator("wallet_address")
    @classmethod
    def _blank_wallet_is_none(cls, value: str | None) -> str | None:
        return value or None

    @field_validator("password")
    @classmethod
    def _password_fits_bcrypt(cls, value: str) -> str:
        if len(value.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValueError(
                f"must be at most {MAX_PASSWORD_BYTES} bytes long"
            )
        return value


class LoginRequest(BaseModel):
    """Credentials for one of the three login paths.

    A wallet address wins over an email, which wins over a
    username/password pair. Wallet signatures are accepted but not
    verified.
    """

    username: str | None = None
    password: str | None = None
    email: str | None = None
    wallet_address: str | None = None
    wallet_signature: str | None = None


class UserResponse(BaseModel):
    id: int
    username: str
    email: str
    first_name: str | None
    last_name: str | None
    role: UserRole
    wallet_address: str | None

    @classmethod
    def from_user(cls, user: User) -> UserResponse:
        return cls(
            id=user.id,
            username=user.username,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            role=user.role,
            wallet_address=user.wallet_address,
        )


# ---------------------------------------------------------------------------
# Logistics spaces
# ---------------------------------------------------------------------------


class CreateSpaceRequest(BaseModel):
    token_id: str | None = None
    owner_user_id: int
    source: str = Field(min_length=1)
    destination: str = Field(min_length=1)
    length: float = Field(gt=0)
    width: float = Field(gt=0)
    height: float = Field(gt=0)
    max_weight: float = Field(gt=0)
    vehicle_type: str = Field(min_length=1)
    departure_date: datetime | None = None
    price: Decimal = Field(gt=0)

    @field_validator("token_id")
    @classmethod
    def _blank_token_is_none(cls, value: str | None) -> str | None:
        return value or None


class SpaceStatusUpdate(BaseModel):
    status: SpaceStatus


class SpaceResponse(BaseModel):
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
    status: SpaceStatus
    departure_date: datetime | None
    price: float
    created_at: datetime | None

    @classmethod
    def from_space(cls, space: LogisticsSpace) -> SpaceResponse:
        return cls(
            id=space.id,
            token_id=space.token_id,
            owner_user_id=space.owner_user_id,
            source=space.source,
            destination=space.destination,
            length=space.length,
            width=space.width,
            height=space.height,
            max_weight=space.max_weight,
            vehicle_type=space.vehicle_type,
            status=space.status,
            departure_date=space.departure_date,
            price=float(space.price),
            created_at=space.created_at,
        )


class QuoteRequest(BaseModel):
    additional_services: list[str] = Field(default_factory=list)


class QuoteResponse(BaseModel):
    space_id: int
    base_price: float
    service_fees: dict[str, float]
    total: float
    currency: str


# ---------------------------------------------------------------------------
# Shipments
# ---------------------------------------------------------------------------


class CreateShipmentRequest(BaseModel):
    logistics_space_id: int
    user_id: int
    goods_type: str = Field(min_length=1)
    weight: float = Field(gt=0)
    length: float = Field(gt=0)
    width: float = Field(gt=0)
    height: float = Field(gt=0)
    additional_services: list[str] = Field(default_factory=list)

    @field_validator("additional_services")
    @classmethod
    def _unique_services(cls, value: list[str]) -> list[str]:
        return list(dict.fromkeys(value))


class ShipmentStatusUpdate(BaseModel):
    status: ShipmentStatus


class ShipmentResponse(BaseModel):
    id: int
    logistics_space_id: int
    user_id: int
    goods_type: str
    weight: float
    length: float
    width: float
    height: float
    status: ShipmentStatus
    additional_services: list[str]
    transaction_id: int | None
    created_at: datetime | None

    @classmethod
    def from_shipment(cls, shipment: Shipment) -> ShipmentResponse:
        return cls(
            id=shipment.id,
            logistics_space_id=shipment.logistics_space_id,
            user_id=shipment.user_id,
            goods_type=shipment.goods_type,
            weight=shipment.weight,
            length=shipment.length,
            width=shipment.width,
            height=shipment.height,
            status=shipment.status,
            additional_services=list(shipment.additional_services),
            transaction_id=shipment.transaction_id,
            created_at=shipment.created_at,
        )


# ---------------------------------------------------------------------------
# Transactions
# ---------------------------------------------------------------------------


class CreateTransactionRequest(BaseModel):
    shipment_id: int
    amount: Decimal = Field(gt=0)
    currency: str | None = Field(default=None, min_length=1, max_length=8)
    payment_method: PaymentMethod
    payment_details: dict[str, Any] | None = None


class ConfirmTransactionRequest(BaseModel):
    blockchain_tx_hash: str = ""


class FailTransactionRequest(BaseModel):
    reason: str | None = None


class TransactionResponse(BaseModel):
    id: int
    shipment_id: int
    amount: float
    currency: str
    payment_method: PaymentMethod
    payment_details: dict[str, Any] | None
    status: TransactionStatus
    blockchain_tx_hash: str | None
    created_at: datetime | None

    @classmethod
    def from_transaction(
        cls, transaction: Transaction
    ) -> TransactionResponse:
        return cls(
            id=transaction.id,
            shipment_id=transaction.shipment_id,
            amount=float(transaction.amount),
            currency=transaction.currency,
            payment_method=transaction.payment_method,
            payment_details=transaction.payment_details,
            status=transaction.status,
            blockchain_tx_hash=transaction.blockchain_tx_hash,
            created_at=transaction.created_at,
        )


# ---------------------------------------------------------------------------
# Tracking
# ---------------------------------------------------------------------------


class AppendTrackingEventRequest(BaseModel):
    shipment_id: int
    event_type: str = Field(min_length=1)
    location: str | None = None
    latitude: float | None = Field(default=0.0, ge=-90, le=90)
    longitude: float | None = Field(default=0.0, ge=-180, le=180)
    status: str | None = "update"
    message: str | None = None
    details: str | None = None
    timestamp: datetime | None = None

    @field_validator("latitude", "longitude")
    @classmethod
    def _unknown_coordinate_is_zero(cls, value: float | None) -> float:
        return 0.0 if value is None else value

    @field_validator("status")
    @classmethod
    def _default_status(cls, value: str | None) -> str:
        return value or "update"

    @field_validator("timestamp")
    @classmethod
    def _timestamp_in_utc(cls, value: datetime | None) -> datetime | None:
        # Naive timestamps are taken as UTC so events stay comparable.
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value.astimezone(UTC)


class TrackingEventResponse(BaseModel):
    id: int
    shipment_id: int
    event_type: str
    location: str | None
    latitude: float
    longitude: float
    status: str
    message: str | None
    details: str | None
    timestamp: datetime

    @classmethod
    def from_event(cls, event: TrackingEvent) -> TrackingEventResponse:
        return cls(
            id=event.id,
            shipment_id=event.shipment_id,
            event_type=event.event_type,
            location=event.location,
            latitude=event.latitude,
            longitude=event.longitude,
            status=event.status,
            message=event.message,
            details=event.details,
            timestamp=event.timestamp,
        )
