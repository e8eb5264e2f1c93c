from enum import Enum
from typing import Any, List, Optional

from fastapi import HTTPException, status


class ErrorCode(str, Enum):
    INVALID_INPUT = "INVALID_INPUT"
    CONFLICT = "CONFLICT"
    NOT_FOUND = "NOT_FOUND"
    METHOD_NOT_ALLOWED = "METHOD_NOT_ALLOWED"
    STORAGE_FAILURE = "STORAGE_FAILURE"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"
    REQUEST_ERROR = "REQUEST_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


# -------------------------
# STORE ERRORS
# -------------------------
class DuplicateKeyError(Exception):
    """Raised by the item store when a barcode already exists"""

    def __init__(self, barcode: str):
        super().__init__(f"Item with barcode '{barcode}' already exists")
        self.barcode = barcode


class ItemNotFoundError(LookupError):
    """Raised by the item store when no row matches a barcode"""

    def __init__(self, barcode: str):
        super().__init__(f"Item with barcode '{barcode}' not found")
        self.barcode = barcode


# -------------------------
# API ERRORS
# -------------------------
class AppException(HTTPException):
    status_code_default = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_code_default = ErrorCode.STORAGE_FAILURE

    def __init__(self, message: str, details: Optional[List[Any]] = None):
        super().__init__(status_code=self.status_code_default, detail=message)
        self.error_code = self.error_code_default
        self.details = details


class InvalidInput(AppException):
    status_code_default = status.HTTP_400_BAD_REQUEST
    error_code_default = ErrorCode.INVALID_INPUT


class Conflict(AppException):
    status_code_default = status.HTTP_409_CONFLICT
    error_code_default = ErrorCode.CONFLICT


class NotFound(AppException):
    status_code_default = status.HTTP_404_NOT_FOUND
    error_code_default = ErrorCode.NOT_FOUND


class MethodNotAllowed(AppException):
    status_code_default = status.HTTP_405_METHOD_NOT_ALLOWED
    error_code_default = ErrorCode.METHOD_NOT_ALLOWED


class StorageFailure(AppException):
    pass


class ServiceUnavailable(AppException):
    status_code_default = status.HTTP_503_SERVICE_UNAVAILABLE
    error_code_default = ErrorCode.SERVICE_UNAVAILABLE
