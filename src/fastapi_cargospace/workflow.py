"""Booking workflow: spaces, shipments and payments.

``BookingWorkflow`` owns every cross-entity rule of the marketplace. Each
mutating operation runs in a single unit of work of the injected store, so
a cascade (for example payment confirmation updating the transaction, the
shipment and the tracking ledger) is applied completely or not at all.

Booking policy: a space accepts one shipment. The first shipment moves
the space straight to ``booked`` and any later attempt is a conflict.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from decimal import Decimal
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from fastapi_cargospace.config import CargospaceConfig
from fastapi_cargospace.entities import (
    LogisticsSpace,
    Shipment,
    Transaction,
    User,
)
from fastapi_cargospace.enums import (
    ShipmentStatus,
    SpaceStatus,
    TransactionStatus,
    UserRole,
)
from fastapi_cargospace.exceptions import (
    ConflictError,
    InvalidInputError,
    InvalidTransitionError,
    NotFoundError,
    PaymentRejectedError,
    UnauthorizedError,
)
from fastapi_cargospace.fsm import assert_can_transition
from fastapi_cargospace.passwords import hash_password, verify_password
from fastapi_cargospace.protocols import ChainClient, EntityStore, UnitOfWork
from fastapi_cargospace.schemas import (
    CreateShipmentRequest,
    CreateSpaceRequest,
    CreateTransactionRequest,
    LoginRequest,
    QuoteResponse,
    RegisterUserRequest,
)

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

# Statuses a space may be in when a new shipment claims it.
BOOKABLE_SPACE_STATUSES = (SpaceStatus.AVAILABLE, SpaceStatus.PARTIAL)


def parse_input(
    model: type[ModelT], data: ModelT | Mapping[str, Any]
) -> ModelT:
    """Validate raw input into ``model``, raising ``InvalidInputError``."""
    if isinstance(data, model):
        return data
    try:
        return model.model_validate(data)
    except ValidationError as e:
        details = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
            for err in e.errors()
        )
        raise InvalidInputError(details) from e


async def require_shipment(uow: UnitOfWork, shipment_id: int) -> Shipment:
    shipment = await uow.get_shipment(shipment_id)
    if shipment is None:
        raise NotFoundError("Shipment", shipment_id)
    return shipment


async def advance_shipment(
    uow: UnitOfWork, shipment: Shipment, target: ShipmentStatus
) -> Shipment:
    """Move a shipment forward one validated step."""
    assert_can_transition("shipment", shipment.status, target)
    updated = await uow.update_shipment(shipment.id, status=target)
    logger.info(
        "Shipment %s moved %s -> %s", shipment.id, shipment.status, target
    )
    return updated


class BookingWorkflow:
    """Marketplace operations over an entity store."""

    def __init__(
        self,
        store: EntityStore,
        chain_client: ChainClient,
        config: CargospaceConfig | None = None,
    ) -> None:
        self.store = store
        self.chain_client = chain_client
        self.config = config or CargospaceConfig()

    # -------------------------------------------------------------------
    # Users
    # -------------------------------------------------------------------

    async def register_user(
        self, data: RegisterUserRequest | Mapping[str, Any]
    ) -> User:
        request = parse_input(RegisterUserRequest, data)
        fields = request.model_dump()
        fields["password"] = hash_password(
            request.password, rounds=self.config.bcrypt_rounds
        )
        async with self.store.unit_of_work() as uow:
            user = await uow.create_user(**fields)
        logger.info("User registered: id=%s role=%s", user.id, user.role)
        return user

    async def login(self, data: LoginRequest | Mapping[str, Any]) -> User:
        request = parse_input(LoginRequest, data)
        async with self.store.unit_of_work() as uow:
            if request.wallet_address:
                user = await uow.get_user_by_wallet_address(
                    request.wallet_address
                )
                if user is None:
                    raise UnauthorizedError("Invalid wallet address")
                if request.wallet_signature:
                    logger.debug(
                        "Wallet signature for user %s accepted unverified",
                        user.id,
                    )
            elif request.email:
                user = await uow.get_user_by_email(request.email)
                if user is None:
                    raise UnauthorizedError(
                        "User not found with this email"
                    )
            else:
                if not request.username or not request.password:
                    raise InvalidInputError(
                        "Username and password are required"
                    )
                user = await uow.get_user_by_username(request.username)
                if user is None or not verify_password(
                    request.password, user.password
                ):
                    raise UnauthorizedError("Invalid username or password")
        logger.info("User %s logged in", user.id)
        return user

    async def list_users(self, role: UserRole | None = None) -> list[User]:
        async with self.store.unit_of_work() as uow:
            users = await uow.list_users()
        if role is None:
            return users
        return [user for user in users if user.role == role]

    # -------------------------------------------------------------------
    # Spaces
    # -------------------------------------------------------------------

    async def create_space(
        self, data: CreateSpaceRequest | Mapping[str, Any]
    ) -> LogisticsSpace:
        request = parse_input(CreateSpaceRequest, data)
        fields = request.model_dump()

        async with self.store.unit_of_work() as uow:
            owner = await uow.get_user(request.owner_user_id)
            if owner is None:
                raise NotFoundError("User", request.owner_user_id)
            if owner.role != UserRole.LOGISTICS:
                raise InvalidInputError(
                    "Only logistics users can offer spaces"
                )
            if request.token_id is None:
                token_id = await self.chain_client.mint_space_token(fields)
                if token_id is None:
                    raise InvalidInputError("Space could not be tokenized")
                fields["token_id"] = token_id
            space = await uow.create_space(
                status=SpaceStatus.AVAILABLE, **fields
            )
        logger.info("Space %s created with token %s", space.id, space.token_id)
        return space

    async def search_spaces(
        self,
        source: str | None = None,
        destination: str | None = None,
        owner_user_id: int | None = None,
    ) -> list[LogisticsSpace]:
        """Search bookable spaces, or list every space of one owner."""
        async with self.store.unit_of_work() as uow:
            if owner_user_id is not None and not (source or destination):
                return await uow.list_spaces(owner_user_id=owner_user_id)
            spaces = await uow.search_spaces(source or "", destination or "")
        if owner_user_id is not None:
            spaces = [s for s in spaces if s.owner_user_id == owner_user_id]
        return spaces

    async def get_space(self, space_id: int) -> LogisticsSpace:
        async with self.store.unit_of_work() as uow:
            space = await uow.get_space(space_id)
        if space is None:
            raise NotFoundError("Logistics space", space_id)
        return space

    async def update_space_status(
        self, space_id: int, status: SpaceStatus | str
    ) -> LogisticsSpace:
        """Administrative overwrite of a space status."""
        try:
            status = SpaceStatus(status)
        except ValueError as e:
            raise InvalidInputError(f"Unknown space status: {status}") from e
        async with self.store.unit_of_work() as uow:
            space = await uow.update_space_status(space_id, status)
        if space is None:
            raise NotFoundError("Logistics space", space_id)
        logger.info("Space %s status set to %s", space_id, status)
        return space

    async def quote_shipment(
        self, space_id: int, additional_services: list[str] | None = None
    ) -> QuoteResponse:
        """Price a booking: the space price plus additional service fees."""
        space = await self.get_space(space_id)
        fees = self._service_fees(additional_services or [])
        total = Decimal(space.price) + sum(fees.values(), Decimal("0"))
        return QuoteResponse(
            space_id=space.id,
            base_price=float(space.price),
            service_fees={code: float(fee) for code, fee in fees.items()},
            total=float(total),
            currency=self.config.default_currency,
        )

    def _service_fees(self, services: list[str]) -> dict[str, Decimal]:
        unknown = [s for s in services if s not in self.config.service_fees]
        if unknown:
            raise InvalidInputError(
                f"Unknown additional services: {', '.join(unknown)}"
            )
        return {
            code: self.config.service_fees[code]
            for code in dict.fromkeys(services)
        }

    # -------------------------------------------------------------------
    # Shipments
    # -------------------------------------------------------------------

    async def create_shipment(
        self, data: CreateShipmentRequest | Mapping[str, Any]
    ) -> Shipment:
        request = parse_input(CreateShipmentRequest, data)
        self._service_fees(request.additional_services)

        async with self.store.unit_of_work() as uow:
            space = await uow.get_space(request.logistics_space_id)
            if space is None:
                raise NotFoundError(
                    "Logistics space", request.logistics_space_id
                )
            if await uow.get_user(request.user_id) is None:
                raise NotFoundError("User", request.user_id)
            self._check_capacity(space, request)

            claimed = await uow.compare_and_set_space_status(
                space.id, BOOKABLE_SPACE_STATUSES, SpaceStatus.BOOKED
            )
            if claimed is None:
                logger.warning(
                    "Booking rejected, space %s already booked", space.id
                )
                raise ConflictError("Logistics space is already booked")

            shipment = await uow.create_shipment(
                status=ShipmentStatus.PENDING, **request.model_dump()
            )
        logger.info(
            "Shipment %s booked on space %s by user %s",
            shipment.id,
            space.id,
            shipment.user_id,
        )
        return shipment

    @staticmethod
    def _check_capacity(
        space: LogisticsSpace, request: CreateShipmentRequest
    ) -> None:
        if request.weight > space.max_weight:
            raise InvalidInputError(
                f"Maximum weight for this space is {space.max_weight} kg"
            )
        for dimension in ("length", "width", "height"):
            if getattr(request, dimension) > getattr(space, dimension):
                raise InvalidInputError(
                    f"Cargo {dimension} exceeds the space {dimension} of "
                    f"{getattr(space, dimension)} m"
                )

    async def get_shipment(self, shipment_id: int) -> Shipment:
        async with self.store.unit_of_work() as uow:
            return await require_shipment(uow, shipment_id)

    async def list_shipments(
        self, user_id: int | None = None, space_id: int | None = None
    ) -> list[Shipment]:
        async with self.store.unit_of_work() as uow:
            return await uow.list_shipments(
                user_id=user_id, space_id=space_id
            )

    async def advance_shipment_status(
        self, shipment_id: int, status: ShipmentStatus | str
    ) -> Shipment:
        """Move a shipment forward; regressions and skips are rejected.

        Only a completed payment confirms a shipment, so ``confirmed`` is
        never accepted here.
        """
        try:
            status = ShipmentStatus(status)
        except ValueError as e:
            raise InvalidInputError(
                f"Unknown shipment status: {status}"
            ) from e
        async with self.store.unit_of_work() as uow:
            shipment = await require_shipment(uow, shipment_id)
            if status == ShipmentStatus.CONFIRMED:
                logger.warning(
                    "Shipment %s can only be confirmed by payment", shipment_id
                )
                raise InvalidTransitionError(
                    "shipment", str(shipment.status), str(status)
                )
            return await advance_shipment(uow, shipment, status)

    # -------------------------------------------------------------------
    # Transactions
    # -------------------------------------------------------------------

    async def create_transaction(
        self, data: CreateTransactionRequest | Mapping[str, Any]
    ) -> Transaction:
        request = parse_input(CreateTransactionRequest, data)
        fields = request.model_dump()
        fields["currency"] = request.currency or self.config.default_currency

        async with self.store.unit_of_work() as uow:
            await require_shipment(uow, request.shipment_id)
            if await uow.get_transaction_by_shipment(request.shipment_id):
                raise ConflictError(
                    "Transaction already exists for this shipment"
                )
            transaction = await uow.create_transaction(
                status=TransactionStatus.PENDING, **fields
            )
            await uow.update_shipment(
                request.shipment_id, transaction_id=transaction.id
            )
        logger.info(
            "Transaction %s created for shipment %s (%s %s)",
            transaction.id,
            transaction.shipment_id,
            transaction.amount,
            transaction.currency,
        )
        return transaction

    async def get_transaction(self, transaction_id: int) -> Transaction:
        async with self.store.unit_of_work() as uow:
            transaction = await uow.get_transaction(transaction_id)
        if transaction is None:
            raise NotFoundError("Transaction", transaction_id)
        return transaction

    async def get_transaction_for_shipment(
        self, shipment_id: int
    ) -> Transaction:
        async with self.store.unit_of_work() as uow:
            transaction = await uow.get_transaction_by_shipment(shipment_id)
        if transaction is None:
            raise NotFoundError("Transaction for shipment", shipment_id)
        return transaction

    async def list_transactions(self) -> list[Transaction]:
        async with self.store.unit_of_work() as uow:
            return await uow.list_transactions()

    async def confirm_transaction(
        self, transaction_id: int, blockchain_tx_hash: str
    ) -> Transaction:
        """Complete a pending payment and cascade to shipment and ledger."""
        if not blockchain_tx_hash or not blockchain_tx_hash.strip():
            raise InvalidInputError(
                "Blockchain transaction hash is required"
            )
        blockchain_tx_hash = blockchain_tx_hash.strip()

        pending = await self.get_transaction(transaction_id)
        assert_can_transition(
            "transaction", pending.status, TransactionStatus.COMPLETED
        )
        verified = await self.chain_client.verify_payment(
            blockchain_tx_hash, pending.amount, pending.currency
        )
        if not verified:
            await self.fail_transaction(
                transaction_id, reason="Payment rejected by chain client"
            )
            raise PaymentRejectedError(
                f"Payment {blockchain_tx_hash} could not be verified"
            )

        async with self.store.unit_of_work() as uow:
            # Re-read inside the unit of work; a concurrent confirmation
            # may have won the race since the check above.
            transaction = await uow.get_transaction(transaction_id)
            if transaction is None:
                raise NotFoundError("Transaction", transaction_id)
            assert_can_transition(
                "transaction", transaction.status, TransactionStatus.COMPLETED
            )
            shipment = await require_shipment(uow, transaction.shipment_id)

            transaction = await uow.update_transaction(
                transaction_id,
                status=TransactionStatus.COMPLETED,
                blockchain_tx_hash=blockchain_tx_hash,
            )
            await advance_shipment(uow, shipment, ShipmentStatus.CONFIRMED)
            space = await uow.get_space(shipment.logistics_space_id)
            await uow.append_tracking_event(
                shipment_id=shipment.id,
                event_type="payment",
                status="confirmed",
                message="Payment confirmed via blockchain",
                details=f"Transaction hash: {blockchain_tx_hash}",
                location=space.source if space else "Unknown location",
                latitude=0.0,
                longitude=0.0,
                timestamp=None,
            )
        logger.info(
            "Transaction %s confirmed with hash %s",
            transaction_id,
            blockchain_tx_hash,
        )
        return transaction

    async def fail_transaction(
        self, transaction_id: int, reason: str | None = None
    ) -> Transaction:
        async with self.store.unit_of_work() as uow:
            transaction = await uow.get_transaction(transaction_id)
            if transaction is None:
                raise NotFoundError("Transaction", transaction_id)
            assert_can_transition(
                "transaction", transaction.status, TransactionStatus.FAILED
            )
            transaction = await uow.update_transaction(
                transaction_id, status=TransactionStatus.FAILED
            )
        logger.warning(
            "Transaction %s failed: %s", transaction_id, reason or "no reason"
        )
        return transaction
