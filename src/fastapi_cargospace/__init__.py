"""CargoSpace logistics marketplace public API."""

from typing import TYPE_CHECKING

__version__ = "0.1.0"

__all__ = [
    "BookingWorkflow",
    "CargospaceConfig",
    "CargospaceError",
    "InMemoryStore",
    "TrackingLedger",
    "__version__",
    "create_app",
    "create_marketplace_router",
    "register_exception_handlers",
]

if TYPE_CHECKING:
    from fastapi_cargospace.app import create_app
    from fastapi_cargospace.config import CargospaceConfig
    from fastapi_cargospace.exceptions import (
        CargospaceError,
        register_exception_handlers,
    )
    from fastapi_cargospace.memory import InMemoryStore
    from fastapi_cargospace.router import create_marketplace_router
    from fastapi_cargospace.tracking import TrackingLedger
    from fastapi_cargospace.workflow import BookingWorkflow


def __getattr__(name: str):
    # Lazy imports to avoid loading all submodules on package import.
    if name == "CargospaceConfig":
        from fastapi_cargospace.config import CargospaceConfig

        return CargospaceConfig
    if name == "create_app":
        from fastapi_cargospace.app import create_app

        return create_app
    if name == "create_marketplace_router":
        from fastapi_cargospace.router import create_marketplace_router

        return create_marketplace_router
    if name in ("CargospaceError", "register_exception_handlers"):
        from fastapi_cargospace import exceptions

        return getattr(exceptions, name)
    if name == "BookingWorkflow":
        from fastapi_cargospace.workflow import BookingWorkflow

        return BookingWorkflow
    if name == "TrackingLedger":
        from fastapi_cargospace.tracking import TrackingLedger

        return TrackingLedger
    if name == "InMemoryStore":
        from fastapi_cargospace.memory import InMemoryStore

        return InMemoryStore
    raise AttributeError(
        f"module 'fastapi_cargospace' has no attribute {name!r}"
    )
