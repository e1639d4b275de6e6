"""Exception handlers for the FastAPI application."""

from typing import Any

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from core.config import settings
from core.exceptions import AppException, ErrorCode
from domain.entities.toast import Toast

logger = structlog.get_logger()


def _notification(title: str | None, description: str) -> dict[str, Any] | None:
    if not title:
        return None
    toast = Toast.destructive(title=title, description=description)
    return {
        "title": toast.title,
        "description": toast.description,
        "variant": toast.variant.value,
    }


def _route_notification_title(request: Request) -> str | None:
    """Title set by routes whose every failure is shown as a toast."""
    return getattr(request.state, "notification_title", None)


def _error_body(exc: AppException, request: Request) -> dict[str, Any]:
    body: dict[str, Any] = {
        "error_code": exc.error_code.value,
        "message": exc.message,
        "details": exc.details,
    }
    title = exc.notification_title or _route_notification_title(request)
    notification = _notification(title, exc.message)
    if notification:
        body["notification"] = notification
    return body


def setup_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers on the FastAPI app."""

    @app.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
        """Handle custom application exceptions."""
        logger.warning(
            "app_exception",
            error_code=exc.error_code.value,
            message=exc.message,
        )
        return JSONResponse(status_code=exc.status_code, content=_error_body(exc, request))

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        """Handle HTTP exceptions from FastAPI/Starlette."""
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error_code": "HTTP_ERROR",
                "message": exc.detail,
                "details": None,
            },
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Handle Pydantic validation errors."""
        logger.info("validation_error", errors=exc.errors())
        details = [
            {
                "field": ".".join(str(x) for x in error["loc"]),
                "message": error["msg"],
                "type": error["type"],
            }
            for error in exc.errors()
        ]
        content: dict[str, Any] = {
            "error_code": ErrorCode.VALIDATION_ERROR.value,
            "message": "Request validation failed",
            "details": details,
        }
        notification = _notification(
            _route_notification_title(request),
            details[0]["message"] if details else content["message"],
        )
        if notification:
            content["notification"] = notification
        return JSONResponse(status_code=422, content=content)

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Handle unexpected exceptions."""
        request_id = getattr(request.state, "request_id", "unknown")
        logger.error(
            "unhandled_exception",
            error=str(exc),
            error_type=type(exc).__name__,
            request_id=request_id,
            exc_info=True,
        )

        message = "An unexpected error occurred"
        if not settings.is_production:
            message = str(exc)

        return JSONResponse(
            status_code=500,
            content={
                "error_code": ErrorCode.INTERNAL_ERROR.value,
                "message": message,
                "details": {"request_id": request_id},
            },
        )
