import logging
from typing import Dict, Optional

from bson.errors import InvalidId
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pymongo.errors import PyMongoError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """An error that ends the request with `{success: false, message}`."""

    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


class ValidationFailed(ApiError):
    def __init__(self, message: str):
        super().__init__(400, message)


class NotFound(ApiError):
    def __init__(self, message: str):
        super().__init__(404, message)


class Unauthorized(ApiError):
    def __init__(self, message: str):
        super().__init__(402, message)


class AlreadyExists(ApiError):
    def __init__(self, message: str):
        super().__init__(400, message)


class WrongPassword(ApiError):
    def __init__(self, message: str = "Wrong Password"):
        super().__init__(405, message)


def error_response(status_code: int, message: str, headers: Optional[Dict[str, str]] = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "message": message}, headers=headers)


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ApiError)
    async def handle_api_error(request: Request, exc: ApiError):
        return error_response(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        if not errors:
            return error_response(400, "Invalid request")
        error = errors[0]
        # Byte offsets of JSON decode errors are not field names
        field = ".".join(
            part for part in error.get("loc", ())
            if isinstance(part, str) and part not in ("body", "query", "path")
        )
        message = error.get("msg", "Invalid request")
        return error_response(400, f"{field}: {message}" if field else message)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(request: Request, exc: StarletteHTTPException):
        return error_response(exc.status_code, str(exc.detail), getattr(exc, "headers", None))

    @app.exception_handler(InvalidId)
    async def handle_invalid_id(request: Request, exc: InvalidId):
        return error_response(400, str(exc))

    @app.exception_handler(PyMongoError)
    async def handle_persistence_error(request: Request, exc: PyMongoError):
        logger.warning("Persistence error on %s %s: %s", request.method, request.url.path, exc)
        return error_response(400, str(exc))
