from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging

from core.exceptions import AppException, ErrorCode

logger = logging.getLogger(__name__)

HTTP_STATUS_TO_ERROR_CODE = {
    400: ErrorCode.INVALID_INPUT,
    404: ErrorCode.NOT_FOUND,
    405: ErrorCode.METHOD_NOT_ALLOWED,
    409: ErrorCode.CONFLICT,
    422: ErrorCode.INVALID_INPUT,
    503: ErrorCode.SERVICE_UNAVAILABLE,
}


def error_body(message: str, error_code: ErrorCode, details=None) -> dict:
    return {
        "success": False,
        "error": message,
        "error_code": error_code.value,
        "details": details,
    }


async def app_exception_handler(request: Request, exc: AppException):
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.detail, exc.error_code, exc.details),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    details = [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg")}
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content=error_body("Invalid request data", ErrorCode.INVALID_INPUT, details),
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    default_code = ErrorCode.REQUEST_ERROR if exc.status_code < 500 else ErrorCode.INTERNAL_ERROR
    error_code = HTTP_STATUS_TO_ERROR_CODE.get(exc.status_code, default_code)
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(str(exc.detail), error_code),
        headers=getattr(exc, "headers", None),
    )


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled exception on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=500,
        content=error_body("Server error", ErrorCode.INTERNAL_ERROR),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
