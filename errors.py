"""
Error taxonomy for the API.

Every error is an HTTPException so route handlers can raise it directly;
the handlers registered by `install_handlers` render all of them as
``{"error": "<message>"}``. Errors on CORS-enabled paths carry the same
cross-origin headers as successful responses.
"""
import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pymongo.errors import PyMongoError
from starlette.exceptions import HTTPException as StarletteHTTPException

import cors

logger = logging.getLogger(__name__)


class InvalidInput(HTTPException):
    def __init__(self, detail: str = "Invalid input", field: str = None):
        super().__init__(status_code=400, detail=detail)
        self.field = field


class Unauthorized(HTTPException):
    def __init__(self, detail: str = "Unauthorized"):
        super().__init__(status_code=401, detail=detail)


class NotFound(HTTPException):
    def __init__(self, detail: str = "Not found"):
        super().__init__(status_code=404, detail=detail)


class StoreError(HTTPException):
    def __init__(self, detail: str = "Database operation failed"):
        super().__init__(status_code=500, detail=detail)


class StoreConnectionError(StoreError):
    def __init__(self, detail: str = "Database unavailable"):
        super().__init__(detail=detail)


def describe_validation_errors(errors) -> str:
    """Turn pydantic error dicts into one readable line, field first."""
    parts = []
    for err in errors:
        loc = [str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path")]
        field = ".".join(loc)
        msg = err.get("msg", "invalid value")
        parts.append(f"{field}: {msg}" if field else msg)
    return "; ".join(parts) or "Invalid input"


def error_response(request: Request, status_code: int, message: str, headers: dict = None) -> JSONResponse:
    merged = dict(headers or {})
    merged.update(cors.headers_for(request))
    return JSONResponse(status_code=status_code, content={"error": message}, headers=merged or None)


def install_handlers(app: FastAPI) -> None:
    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.detail)
        return error_response(request, exc.status_code, str(exc.detail), exc.headers)

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        return error_response(request, 400, describe_validation_errors(exc.errors()))

    @app.exception_handler(PyMongoError)
    async def store_error(request: Request, exc: PyMongoError):
        logger.exception("store operation failed on %s %s", request.method, request.url.path)
        return error_response(request, 500, "Database operation failed")
