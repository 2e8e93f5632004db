"""
Error taxonomy for the API and the handlers that render every failure
as the standard envelope: {"success": false, "message": ..., "error": ...}
"""
import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pymongo.errors import PyMongoError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class APIError(Exception):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None, error: Optional[str] = None):
        self.message = message or self.default_message
        self.error = error
        super().__init__(self.message)


class BadRequest(APIError):
    status_code = 400
    default_message = "Bad request"


class Conflict(APIError):
    status_code = 400
    default_message = "User already exists"


class Unauthorized(APIError):
    status_code = 401
    default_message = "Invalid email or password"


def error_response(status_code: int, message: str, error: Optional[str] = None) -> JSONResponse:
    body = {"success": False, "message": message}
    if error is not None:
        body["error"] = error
    return JSONResponse(status_code=status_code, content=body)


def _format_validation_errors(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return "; ".join(parts)


async def api_error_handler(request: Request, exc: APIError):
    return error_response(exc.status_code, exc.message, exc.error)


async def validation_error_handler(request: Request, exc: RequestValidationError):
    return error_response(400, "Invalid request", _format_validation_errors(exc))


async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return error_response(exc.status_code, str(exc.detail))


async def store_error_handler(request: Request, exc: PyMongoError):
    logger.exception("Store operation failed on %s %s", request.method, request.url.path)
    return error_response(500, "Internal server error", str(exc))


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return error_response(500, "Internal server error", str(exc))


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(APIError, api_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(PyMongoError, store_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
