"""Marketplace configuration."""

from decimal import Decimal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _default_service_fees() -> dict[str, Decimal]:
    return {
        "temperature-controlled": Decimal("150"),
        "express-delivery": Decimal("200"),
        "insurance": Decimal("100"),
    }


class CargospaceConfig(BaseSettings):
    """Runtime config, read from ``CARGOSPACE_*`` environment variables."""

    model_config = SettingsConfigDict(env_prefix="CARGOSPACE_")

    database_url: str | None = None
    seed_demo_data: bool = False
    default_currency: str = "USD"
    service_fees: dict[str, Decimal] = Field(
        default_factory=_default_service_fees
    )
    log_level: str = "INFO"
    bcrypt_rounds: int = Field(default=12, ge=4, le=31)
