from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.domain.exceptions import (
    INTERNAL_ERROR_MESSAGE,
    AccountBlockedError,
    ConflictError,
    DomainError,
    InternalError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)


logger = logging.getLogger(__name__)

# Most specific first.
_STATUS_BY_ERROR: tuple[tuple[type[DomainError], int], ...] = (
    (ValidationError, 400),
    (ConflictError, 409),
    (NotFoundError, 404),
    (AccountBlockedError, 403),
    (UnauthorizedError, 401),
    (InternalError, 500),
)


def status_code_for(exc: DomainError) -> int:
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status_code
    return 500


def error_detail_for(exc: DomainError) -> str:
    if isinstance(exc, InternalError) or status_code_for(exc) == 500:
        return INTERNAL_ERROR_MESSAGE
    return str(exc)


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    status_code = status_code_for(exc)
    if status_code >= 500:
        logger.error("api: internal_error path=%s error_type=%s", request.url.path, type(exc).__name__)
    return JSONResponse(status_code=status_code, content={"detail": error_detail_for(exc)})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainError, domain_error_handler)
