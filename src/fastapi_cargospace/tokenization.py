"""Deterministic pseudo-blockchain token identifiers for spaces.

The identifier stands in for a real on-chain mint. Callers may only rely
on two properties: identical attributes produce the same token on the
same calendar day, and collisions are unlikely at demo scale. There is no
cryptographic guarantee.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from datetime import UTC, date, datetime
from typing import Any

logger = logging.getLogger(__name__)

TOKEN_PREFIX = "T-0x"

REQUIRED_ATTRIBUTES = (
    "owner_user_id",
    "source",
    "destination",
    "length",
    "width",
    "height",
    "max_weight",
    "vehicle_type",
    "price",
)
OPTIONAL_ATTRIBUTES = ("departure_date",)

_INT32_MASK = 0xFFFFFFFF
_INT32_SIGN = 0x80000000


def rolling_hash(text: str) -> int:
    """31-multiplier rolling hash over UTF-16 code units.

    The accumulator wraps to a signed 32-bit integer after every step.
    """
    encoded = text.encode("utf-16-le")
    value = 0
    for offset in range(0, len(encoded), 2):
        unit = int.from_bytes(encoded[offset : offset + 2], "little")
        value = (value * 31 + unit) & _INT32_MASK
    if value & _INT32_SIGN:
        value -= 1 << 32
    return value


def _is_missing(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def canonical_payload(
    attributes: Mapping[str, Any], *, on: date | None = None
) -> str:
    """Serialize space attributes plus the creation date, keys sorted."""
    payload = {name: attributes[name] for name in REQUIRED_ATTRIBUTES}
    for name in OPTIONAL_ATTRIBUTES:
        if attributes.get(name) is not None:
            payload[name] = attributes[name]
    payload["timestamp"] = (on or datetime.now(tz=UTC).date()).isoformat()
    return json.dumps(
        payload, sort_keys=True, separators=(",", ":"), default=str
    )


def tokenize_space(
    attributes: Mapping[str, Any], *, on: date | None = None
) -> str | None:
    """Return a ``T-0x<8 hex>`` token, or ``None`` on missing input."""
    missing = [
        name
        for name in REQUIRED_ATTRIBUTES
        if _is_missing(attributes.get(name))
    ]
    if missing:
        logger.warning(
            "Refusing to tokenize space, missing attributes: %s",
            ", ".join(missing),
        )
        return None

    digest = abs(rolling_hash(canonical_payload(attributes, on=on)))
    return f"{TOKEN_PREFIX}{digest:08X}"
