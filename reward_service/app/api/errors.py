"""도메인 예외를 HTTP 응답으로 변환하는 예외 핸들러."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ..exceptions import RewardServiceError


logger = logging.getLogger(__name__)

INTERNAL_ERROR_CODE = "internal_error"


def _error_response(status_code: int, message: str, code: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"message": message, "code": code},
    )


async def handle_service_error(request: Request, exc: RewardServiceError) -> JSONResponse:
    return _error_response(exc.status_code, exc.message, exc.code)


async def handle_validation_error(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = first.get("msg", "Invalid request")
        if field:
            message = f"{field}: {message}"
    else:
        message = "Invalid request"
    return _error_response(status.HTTP_400_BAD_REQUEST, message, "validation_error")


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(
        "unhandled error",
        extra={"request_id": getattr(request.state, "request_id", None)},
    )
    return _error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR, "internal error", INTERNAL_ERROR_CODE
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RewardServiceError, handle_service_error)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, handle_validation_error)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, handle_unexpected_error)
