"""Mock chain client used until a real ledger integration exists."""

from __future__ import annotations

import logging
import secrets
from collections.abc import Mapping
from datetime import date
from decimal import Decimal
from typing import Any

from fastapi_cargospace.tokenization import tokenize_space

logger = logging.getLogger(__name__)


def generate_tx_hash() -> str:
    """Return a random ``0x``-prefixed, 40 hex digit transaction hash."""
    return f"0x{secrets.token_hex(20)}"


class MockChainClient:
    """In-process stand-in for a blockchain SDK.

    Tokens are minted with :func:`tokenize_space`. Every non-empty payment
    hash verifies, except the ones listed in ``rejected_hashes``.
    """

    def __init__(
        self,
        *,
        rejected_hashes: set[str] | None = None,
        token_date: date | None = None,
    ) -> None:
        self.rejected_hashes = set(rejected_hashes or ())
        self.token_date = token_date
        self.minted: list[str] = []

    async def mint_space_token(
        self, attributes: Mapping[str, Any]
    ) -> str | None:
        token = tokenize_space(attributes, on=self.token_date)
        if token is not None:
            self.minted.append(token)
            logger.info("Minted space token %s", token)
        return token

    async def verify_payment(
        self, tx_hash: str, amount: Decimal, currency: str
    ) -> bool:
        if not tx_hash or tx_hash in self.rejected_hashes:
            logger.warning("Payment %s rejected by chain client", tx_hash)
            return False
        logger.info(
            "Payment %s verified for %s %s", tx_hash, amount, currency
        )
        return True
