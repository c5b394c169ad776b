# crmhub/core/handlers.py
# Map the error taxonomy onto HTTP responses
import logging

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from crmhub.core.exceptions import DomainError, InternalError

logger = logging.getLogger(__name__)


def _error_response(status_code: int, detail: str, code: str, **extra) -> JSONResponse:
    body = {"detail": detail, "code": code}
    body.update(extra)
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body))


async def domain_error_handler(request: Request, exc: DomainError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return _error_response(exc.status_code, exc.message, exc.code)


async def request_validation_handler(request: Request, exc: RequestValidationError):
    # Bodies are rejected wholesale; report every failing field
    errors = [
        {
            "field": ".".join(str(part) for part in error.get("loc", ()) if part != "body"),
            "message": error.get("msg"),
        }
        for error in exc.errors()
    ]
    return _error_response(
        status.HTTP_400_BAD_REQUEST,
        "Validation failed",
        "validation_error",
        errors=errors,
    )


async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.exception("Database error on %s %s", request.method, request.url.path)
    return _error_response(500, InternalError.default_message, InternalError.code)


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _error_response(500, InternalError.default_message, InternalError.code)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainError, domain_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(SQLAlchemyError, database_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
