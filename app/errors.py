"""Unified error taxonomy and the FastAPI handlers that render it."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.config import settings

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class AppError(Exception):
    code: str
    detail: str
    status_code: int = 400

    def __str__(self) -> str:
        return self.detail

    def to_http_exception(self) -> HTTPException:
        return HTTPException(status_code=self.status_code, detail=self.detail)


class ValidationError(AppError):
    def __init__(self, detail: str, code: str = "validation_error"):
        super().__init__(code=code, detail=detail, status_code=400)


class AuthenticationError(AppError):
    def __init__(self, detail: str = "Unauthorized", code: str = "unauthenticated"):
        super().__init__(code=code, detail=detail, status_code=401)


class AuthorizationError(AppError):
    def __init__(self, detail: str = "Forbidden", code: str = "forbidden"):
        super().__init__(code=code, detail=detail, status_code=403)


class NotFoundError(AppError):
    def __init__(self, detail: str, code: str = "not_found"):
        super().__init__(code=code, detail=detail, status_code=404)


class ConflictError(AppError):
    def __init__(self, detail: str, code: str = "conflict"):
        super().__init__(code=code, detail=detail, status_code=409)


class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error", code: str = "internal_error"):
        super().__init__(code=code, detail=detail, status_code=500)


def as_http_exception(exc: Exception) -> HTTPException:
    if isinstance(exc, AppError):
        return exc.to_http_exception()
    if isinstance(exc, HTTPException):
        return exc
    return HTTPException(status_code=500, detail=str(exc) or "Internal server error")


def _error_body(detail, code: str | None = None, **extra) -> dict:
    body = {"success": False, "error": detail}
    if code:
        body["code"] = code
    body.update(extra)
    return body


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def _app_error_handler(request: Request, exc: AppError):
        if exc.status_code >= 500:
            logger.error("app_error path=%s code=%s detail=%s", request.url.path, exc.code, exc.detail)
        return JSONResponse(status_code=exc.status_code, content=_error_body(exc.detail, exc.code))

    @app.exception_handler(HTTPException)
    async def _http_exception_handler(request: Request, exc: HTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(exc.detail),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def _validation_handler(request: Request, exc: RequestValidationError):
        details = [
            {"field": ".".join(str(part) for part in err.get("loc", ())[1:]), "message": err.get("msg")}
            for err in exc.errors()
        ]
        return JSONResponse(
            status_code=400,
            content=_error_body("Validation failed", "validation_error", details=details),
        )

    @app.exception_handler(Exception)
    async def _unhandled_handler(request: Request, exc: Exception):
        logger.exception("unhandled_error path=%s", request.url.path)
        extra = {"details": str(exc)} if settings.app_env == "development" else {}
        return JSONResponse(
            status_code=500,
            content=_error_body("Internal server error", "internal_error", **extra),
        )
