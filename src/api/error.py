"""HTTP error mapping

Use case errors are raised as ClientError and rendered as
{"error": {"code": ..., "message": ...}}.
"""

import logging
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from libs.result import Error

logger = logging.getLogger(__name__)

NOT_FOUND_CODES = {
    "CUSTOMER_NOT_FOUND",
    "ENTRY_NOT_FOUND",
    "RATE_CARD_NOT_FOUND",
    "PAYMENT_NOT_FOUND",
    "ADVANCE_NOT_FOUND",
}
CONFLICT_CODES = {"ALLOCATION_CONFLICT", "CUSTOMER_EXISTS"}
UNPROCESSABLE_CODES = {"RATE_UNAVAILABLE", "ZERO_AMOUNT_REJECTED", "DECODE_ERROR"}
TIMEOUT_CODES = {"STATEMENT_TIMEOUT"}


class ClientError(Exception):
    def __init__(self, error: Error, status_code: int = status.HTTP_400_BAD_REQUEST):
        self.error = error
        self.status_code = status_code
        super().__init__(error.message)


def status_for(error: Error) -> int:
    """Default HTTP status for a use case error code"""
    if error.code in NOT_FOUND_CODES:
        return status.HTTP_404_NOT_FOUND
    if error.code in CONFLICT_CODES:
        return status.HTTP_409_CONFLICT
    if error.code in UNPROCESSABLE_CODES:
        return status.HTTP_422_UNPROCESSABLE_ENTITY
    if error.code in TIMEOUT_CODES:
        return status.HTTP_504_GATEWAY_TIMEOUT
    if error.code.endswith("_FAILED"):
        return status.HTTP_500_INTERNAL_SERVER_ERROR
    return status.HTTP_400_BAD_REQUEST


def raise_for_error(error: Error):
    raise ClientError(error, status_code=status_for(error))


def register_error_handlers(app: FastAPI) -> None:

    @app.exception_handler(ClientError)
    async def client_error_handler(request: Request, exc: ClientError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.error.code} {exc.error.reason}")
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": {"code": exc.error.code, "message": exc.error.message}},
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        details = "; ".join(
            f"{'.'.join(str(part) for part in err.get('loc', ()))}: {err.get('msg')}"
            for err in exc.errors()
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": {"code": "VALIDATION_ERROR", "message": details or "Invalid request parameters"}},
        )
