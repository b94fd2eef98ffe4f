"""
Error types raised by the transaction operations and the handlers that turn
them into response envelopes.
"""

import logging
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

REQUIRED_FIELDS_MESSAGE = "Please fill all required fields"

HTTP_422_UNPROCESSABLE = 422


class FinanceTrackerError(Exception):
    """Base error; carries the envelope message and the HTTP status."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Request failed"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationFailed(FinanceTrackerError):
    status_code = HTTP_422_UNPROCESSABLE
    default_message = REQUIRED_FIELDS_MESSAGE


class InvalidTransactionId(FinanceTrackerError):
    default_message = "Invalid transaction ID"


class InvalidAction(FinanceTrackerError):
    default_message = "Invalid action"


class TransactionNotFound(FinanceTrackerError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Transaction not found"


class StorageError(FinanceTrackerError):
    """A statement failed; the message holds the driver's text."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class DatabaseUnavailable(FinanceTrackerError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_message = "Connection failed"


def failure_body(message: str) -> dict:
    return {"success": False, "message": message}


async def finance_tracker_error_handler(request: Request, exc: FinanceTrackerError):
    return JSONResponse(status_code=exc.status_code, content=failure_body(exc.message))


async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    logger.debug("Rejected request body on %s: %s", request.url.path, exc.errors())
    return JSONResponse(
        status_code=HTTP_422_UNPROCESSABLE,
        content=failure_body(REQUIRED_FIELDS_MESSAGE),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(FinanceTrackerError, finance_tracker_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
