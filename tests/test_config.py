"""Configuration tests."""

from decimal import Decimal

import pytest
from pydantic import ValidationError

from fastapi_cargospace.config import CargospaceConfig


def test_defaults() -> None:
    config = CargospaceConfig()
    assert config.database_url is None
    assert config.seed_demo_data is False
    assert config.default_currency == "USD"
    assert config.log_level == "INFO"
    assert config.bcrypt_rounds == 12


def test_default_service_fees() -> None:
    config = CargospaceConfig()
    assert config.service_fees == {
        "temperature-controlled": Decimal("150"),
        "express-delivery": Decimal("200"),
        "insurance": Decimal("100"),
    }


def test_env_prefix(monkeypatch) -> None:
    monkeypatch.setenv("CARGOSPACE_DATABASE_URL", "sqlite+aiosqlite://")
    monkeypatch.setenv("CARGOSPACE_SEED_DEMO_DATA", "true")
    monkeypatch.setenv("CARGOSPACE_DEFAULT_CURRENCY", "EUR")

    config = CargospaceConfig()
    assert config.database_url == "sqlite+aiosqlite://"
    assert config.seed_demo_data is True
    assert config.default_currency == "EUR"


def test_service_fees_from_env_json(monkeypatch) -> None:
    monkeypatch.setenv(
        "CARGOSPACE_SERVICE_FEES", '{"insurance": "75.50"}'
    )
    config = CargospaceConfig()
    assert config.service_fees == {"insurance": Decimal("75.50")}


def test_bcrypt_rounds_bounds() -> None:
    with pytest.raises(ValidationError):
        CargospaceConfig(bcrypt_rounds=3)
