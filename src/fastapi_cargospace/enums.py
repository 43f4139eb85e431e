"""Status and role vocabularies."""

from enum import StrEnum


class UserRole(StrEnum):
    USER = "user"
    LOGISTICS = "logistics"
    DEVELOPER = "developer"


class SpaceStatus(StrEnum):
    AVAILABLE = "available"
    PARTIAL = "partial"
    BOOKED = "booked"


class ShipmentStatus(StrEnum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    IN_TRANSIT = "in_transit"
    DELIVERED = "delivered"


class TransactionStatus(StrEnum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class PaymentMethod(StrEnum):
    METAMASK = "metamask"
    UPI = "upi"
    CARD = "card"
