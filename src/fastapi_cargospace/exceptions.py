"""Marketplace exceptions and their HTTP mapping."""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse


class CargospaceError(Exception):
    """Base class for every marketplace error."""

    status_code = 400
    code = "cargospace_error"
    retryable = False


class InvalidInputError(CargospaceError):
    """Malformed or missing input, raised before any mutation."""

    code = "invalid_input"


class NotFoundError(CargospaceError):
    status_code = 404
    code = "not_found"

    def __init__(self, entity: str, entity_id: object) -> None:
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} {entity_id} not found")


class ConflictError(CargospaceError):
    """Uniqueness or state-invariant violation.

    Conflicts are retryable: the caller should re-query the current
    state (e.g. re-run a space search) before trying again.
    """

    status_code = 409
    code = "conflict"
    retryable = True


class InvalidTransitionError(ConflictError):
    code = "invalid_transition"

    def __init__(self, entity: str, current: str, target: str) -> None:
        self.entity = entity
        self.current = current
        self.target = target
        super().__init__(
            f"Cannot move {entity} from {current} to {target}"
        )


class UnauthorizedError(CargospaceError):
    status_code = 401
    code = "unauthorized"


class PaymentRejectedError(CargospaceError):
    """The chain client refused to verify a payment."""

    status_code = 402
    code = "payment_rejected"


def _error_body(detail: str, code: str, retryable: bool) -> dict:
    return {"detail": detail, "code": code, "retryable": retryable}


def register_exception_handlers(app: FastAPI) -> None:
    """Register marketplace exception handlers on a FastAPI app.

    Every ``CargospaceError`` subclass carries its own status code and
    error code, so one handler covers the whole hierarchy. Request
    validation failures are reported as ``invalid_input`` with 400
    instead of FastAPI's default 422.
    """

    @app.exception_handler(CargospaceError)
    async def _cargospace_error(
        request: Request,
        exc: CargospaceError,
    ) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(str(exc), exc.code, exc.retryable),
        )

    @app.exception_handler(RequestValidationError)
    async def _validation_error(
        request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        messages = []
        for error in exc.errors():
            location = ".".join(
                str(part) for part in error.get("loc", ()) if part != "body"
            )
            messages.append(f"{location}: {error.get('msg')}")
        return JSONResponse(
            status_code=400,
            content=_error_body(
                "; ".join(messages) or "Invalid request",
                InvalidInputError.code,
                False,
            ),
        )
